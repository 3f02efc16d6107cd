"""
Authentication-related domain models and the response header.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Self

from personalcapital.exceptions import UnexpectedAuthLevelError
from personalcapital.models.reader import FieldReader


class AuthLevel(StrEnum):
    """
    How far through login the session has progressed.

    NULL and CSRF are client-side states; the others are reported by the server.
    """

    NULL = "NULL"
    CSRF = "CSRF"
    USER_REMEMBERED = "USER_REMEMBERED"
    USER_IDENTIFIED = "USER_IDENTIFIED"
    DEVICE_AUTHORIZED = "DEVICE_AUTHORIZED"
    SESSION_AUTHENTICATED = "SESSION_AUTHENTICATED"
    NONE = "NONE"

    @classmethod
    def from_header(cls, value: object) -> "AuthLevel":
        """
        Map a header ``authLevel`` string onto a server-reported level.

        Raises:
            UnexpectedAuthLevelError: For anything that is not a server level.
        """
        if isinstance(value, str) and value in _SERVER_LEVELS:
            return cls(value)
        msg = f"unknown auth level: {value!r}"
        raise UnexpectedAuthLevelError(msg, level=None if value is None else str(value))


_SERVER_LEVELS = frozenset(
    {
        AuthLevel.USER_REMEMBERED,
        AuthLevel.USER_IDENTIFIED,
        AuthLevel.DEVICE_AUTHORIZED,
        AuthLevel.SESSION_AUTHENTICATED,
        AuthLevel.NONE,
    }
)


class LoginStatus(StrEnum):
    """Outcome of a login attempt that did not fail."""

    AUTHENTICATED = "authenticated"
    TWO_FACTOR_REQUIRED = "two_factor_required"


class UserStatus(StrEnum):
    """Account or credential status."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    LOCKED = "LOCKED"
    NONE = "NONE"


@dataclass(frozen=True, kw_only=True)
class ErrorDetails:
    field_name: str | None = None
    original_value: str | None = None

    @classmethod
    def from_payload(cls, r: FieldReader) -> Self:
        return cls(
            field_name=r.opt_string("fieldName"),
            original_value=_opt_text(r, "originalValue"),
        )

    def __str__(self) -> str:
        parts = []
        if self.field_name is not None:
            parts.append(f"fieldName={self.field_name}")
        if self.original_value is not None:
            parts.append(f"originalValue={self.original_value}")
        return ", ".join(parts)


@dataclass(frozen=True, kw_only=True)
class HeaderError:
    """An error listed in ``spHeader.errors``."""

    code: int
    message: str
    details: ErrorDetails | None = None

    @classmethod
    def from_payload(cls, r: FieldReader) -> Self:
        return cls(
            code=r.integer("code"),
            message=r.opt_string("message") or "",
            details=r.opt_object("details", ErrorDetails.from_payload),
        )


@dataclass(frozen=True, kw_only=True)
class DataChange:
    """An entry of ``spHeader.SP_DATA_CHANGES``."""

    server_change_id: int
    event_type: str
    detail_id: int | None = None
    cause: str | None = None

    @classmethod
    def from_payload(cls, r: FieldReader) -> Self:
        details = r.child("details") if r.has("details") else None
        return cls(
            server_change_id=r.integer("serverChangeId"),
            event_type=r.opt_string("eventType") or "",
            detail_id=details.opt_integer("id") if details else None,
            cause=details.opt_string("cause") if details else None,
        )


@dataclass(frozen=True, kw_only=True)
class ResponseHeader:
    """
    Decoded ``spHeader``.

    ``auth_level`` is kept as the raw string; the HTTP client validates it
    before it is allowed anywhere near the session.
    """

    success: bool
    auth_level: str | None
    csrf: str | None = None
    errors: tuple[HeaderError, ...] = ()
    data_changes: tuple[DataChange, ...] = ()
    username: str | None = None
    user_guid: str | None = None
    device_name: str | None = None
    user_stage: str | None = None
    person_id: int | None = None
    status: str | None = None

    @classmethod
    def from_payload(cls, r: FieldReader) -> Self:
        return cls(
            success=r.opt_boolean("success") or False,
            auth_level=_opt_text(r, "authLevel"),
            csrf=r.opt_string("csrf") or None,
            errors=tuple(r.opt_array("errors", HeaderError.from_payload) or ()),
            data_changes=tuple(r.opt_array("SP_DATA_CHANGES", DataChange.from_payload) or ()),
            username=r.opt_string("username"),
            user_guid=r.opt_string("userGuid"),
            device_name=r.opt_string("deviceName"),
            user_stage=r.opt_string("userStage"),
            person_id=r.opt_integer("personId"),
            status=r.opt_string("status"),
        )

    @property
    def last_change_id(self) -> int | None:
        if not self.data_changes:
            return None
        return max(change.server_change_id for change in self.data_changes)


@dataclass(frozen=True, kw_only=True)
class Credential:
    name: str
    status: UserStatus

    @classmethod
    def from_payload(cls, r: FieldReader) -> Self:
        return cls(name=r.string("name"), status=r.enum("status", UserStatus))


@dataclass(frozen=True, kw_only=True)
class IdentifyUser:
    """Payload of ``/api/login/identifyUser``."""

    user_status: UserStatus
    credentials: tuple[str, ...] = ()
    all_credentials: tuple[Credential, ...] = ()

    @classmethod
    def from_payload(cls, r: FieldReader) -> Self:
        return cls(
            user_status=r.enum("userStatus", UserStatus),
            credentials=tuple(r.opt_array("credentials", FieldReader.as_string) or ()),
            all_credentials=tuple(r.opt_array("allCredentials", Credential.from_payload) or ()),
        )


@dataclass(frozen=True, kw_only=True)
class AuthenticatePassword:
    """Payload of ``/api/credential/authenticatePassword``."""

    credentials: tuple[str, ...] = ()
    all_credentials: tuple[Credential, ...] = ()

    @classmethod
    def from_payload(cls, r: FieldReader) -> Self:
        if r.value is None:
            return cls()
        return cls(
            credentials=tuple(r.opt_array("credentials", FieldReader.as_string) or ()),
            all_credentials=tuple(r.opt_array("allCredentials", Credential.from_payload) or ()),
        )


def _opt_text(r: FieldReader, key: str) -> str | None:
    value = r.raw(key)
    return None if value is None else str(value)
