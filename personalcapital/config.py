"""
Personal Capital client configuration.
"""

import os
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Self

from personalcapital.exceptions import MissingCredentialError

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/71.0.3578.98 Safari/537.36"
)


class TwoFactorMethod(StrEnum):
    """Channel used to deliver the two-factor code."""

    EMAIL = "email"
    SMS = "sms"


@dataclass(frozen=True, kw_only=True)
class PersonalCapitalConfig:
    """
    Attributes:
        base_url: Root URL of the service.
        timeout: Request timeout in seconds.
        user_agent: User-Agent header value.
        api_client: Value of the ``apiClient`` form field.
        two_factor_method: Channel for two-factor challenges.
        ephemeral_cookie_prefixes: Cookie name prefixes that are never sent back or persisted.
        decode_context_radius: Characters of raw payload kept on each side of a decode failure.
    """

    base_url: str = "https://home.personalcapital.com"
    timeout: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT
    api_client: str = "WEB"
    two_factor_method: TwoFactorMethod = TwoFactorMethod.EMAIL
    ephemeral_cookie_prefixes: tuple[str, ...] = ("bm_", "ak_bmsc", "_abck")
    decode_context_radius: int = 100

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            msg = "timeout must be positive"
            raise ValueError(msg)
        if self.decode_context_radius <= 0:
            msg = "decode_context_radius must be positive"
            raise ValueError(msg)
        if not self.base_url.startswith(("http://", "https://")):
            msg = "base_url must be an http(s) URL"
            raise ValueError(msg)


@dataclass(frozen=True)
class Credentials:
    """
    Login credentials, consumed once by the client.

    Attributes:
        username: Account email.
        password: Account password.
        device_name: Name the device is remembered under.
    """

    username: str
    password: str = field(repr=False)
    device_name: str

    def __post_init__(self) -> None:
        for name in ("username", "password", "device_name"):
            if not getattr(self, name):
                raise MissingCredentialError(name)

    @classmethod
    def from_env(cls) -> Self:
        """Read credentials from PC_USERNAME, PC_PASSWORD and PC_DEVICE_NAME."""
        values = {}
        for name, var in (
            ("username", "PC_USERNAME"),
            ("password", "PC_PASSWORD"),
            ("device_name", "PC_DEVICE_NAME"),
        ):
            value = os.getenv(var)
            if not value:
                raise MissingCredentialError(var)
            values[name] = value
        return cls(**values)
