"""
Personal Capital exception hierarchy.

All exceptions inherit from PersonalCapitalError for easy catching.
Transport failures are not wrapped: ``httpx.HTTPError`` subclasses propagate as-is.
"""

from typing import Any


class PersonalCapitalError(Exception):
    """Base exception for all personalcapital errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx})"
        return self.message


class UsageError(PersonalCapitalError):
    """The library was used incorrectly by the caller."""


class MissingCredentialError(UsageError):
    """A required credential field is empty or unset."""

    def __init__(self, field: str) -> None:
        super().__init__(f"{field} is not set", field=field)
        self.field = field


class LoginSequenceError(UsageError):
    """A login step was called out of order."""

    def __init__(self, message: str = "User not identified. Call login() first.") -> None:
        super().__init__(message)


class TwoFactorRequiredError(UsageError):
    """The server still expects a two-factor code before password authentication."""

    def __init__(self, message: str = "Two-factor code required before password auth") -> None:
        super().__init__(message)


class ProtocolError(PersonalCapitalError):
    """The service answered with something the client could not interpret."""


class CsrfNotFoundError(ProtocolError):
    """CSRF token pattern absent from the login page."""

    def __init__(self, message: str = "Unable to find CSRF token in login page") -> None:
        super().__init__(message)


class EnvelopeDecodeError(ProtocolError):
    """Response body is not a well-formed spHeader/spData envelope."""


class PayloadDecodeError(ProtocolError):
    """spData does not match the expected shape."""

    def __init__(
        self,
        message: str,
        *,
        path: str,
        offset: int,
        context: str,
    ) -> None:
        super().__init__(message, path=path, offset=offset, context=context)
        self.path = path
        self.offset = offset
        self.context_text = context


class ServiceError(PersonalCapitalError):
    """The response header listed an error."""

    def __init__(self, message: str, *, code: int, details: str | None = None) -> None:
        super().__init__(message, code=code, details=details)
        self.code = code
        self.details = details


class AuthenticationError(PersonalCapitalError):
    """Authentication failed or was lost."""


class SessionInvalidError(AuthenticationError):
    """The server no longer considers the session authenticated. Log in again."""

    def __init__(
        self, message: str = "Session is no longer valid", *, code: int | None = None
    ) -> None:
        super().__init__(message, code=code)
        self.code = code


class InactiveUserError(AuthenticationError):
    """The identified account is deactivated."""

    def __init__(self, username: str) -> None:
        super().__init__(f'the username "{username}" is inactive')
        self.username = username


class UnexpectedAuthLevelError(AuthenticationError):
    """The server reported an auth level that is unknown or not allowed here."""

    def __init__(self, message: str, *, level: str | None) -> None:
        super().__init__(message, level=level)
        self.level = level


class LoginFailedError(AuthenticationError):
    """The server rejected the login (auth level NONE)."""

    def __init__(self, message: str = "Could not authenticate") -> None:
        super().__init__(message)
