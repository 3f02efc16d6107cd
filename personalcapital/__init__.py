"""
Personal Capital Python Client.

An async Python client for the Personal Capital web API.

Example:
    ```python
    from personalcapital import ConsoleCodeProvider, Credentials, PersonalCapitalClient

    credentials = Credentials.from_env()
    async with PersonalCapitalClient(credentials, two_factor=ConsoleCodeProvider()) as client:
        await client.login()

        accounts = await client.get_accounts()
        for account in accounts.accounts:
            print(account.name, account.balance)
    ```
"""

from personalcapital.client import PersonalCapitalClient
from personalcapital.config import Credentials, PersonalCapitalConfig, TwoFactorMethod
from personalcapital.exceptions import (
    AuthenticationError,
    CsrfNotFoundError,
    EnvelopeDecodeError,
    InactiveUserError,
    LoginFailedError,
    LoginSequenceError,
    MissingCredentialError,
    PayloadDecodeError,
    PersonalCapitalError,
    ProtocolError,
    ServiceError,
    SessionInvalidError,
    TwoFactorRequiredError,
    UnexpectedAuthLevelError,
    UsageError,
)
from personalcapital.models.auth import AuthLevel, LoginStatus
from personalcapital.session_store import FileSessionStore, MemorySessionStore, SessionStore
from personalcapital.two_factor import (
    ConsoleCodeProvider,
    StaticCodeProvider,
    TwoFactorCodeProvider,
)

__version__ = "0.1.0"

__all__ = [
    # Main client
    "PersonalCapitalClient",
    "PersonalCapitalConfig",
    "Credentials",
    "TwoFactorMethod",
    "AuthLevel",
    "LoginStatus",
    # Collaborators
    "SessionStore",
    "MemorySessionStore",
    "FileSessionStore",
    "TwoFactorCodeProvider",
    "ConsoleCodeProvider",
    "StaticCodeProvider",
    # Exceptions
    "PersonalCapitalError",
    "UsageError",
    "MissingCredentialError",
    "LoginSequenceError",
    "TwoFactorRequiredError",
    "ProtocolError",
    "CsrfNotFoundError",
    "EnvelopeDecodeError",
    "PayloadDecodeError",
    "ServiceError",
    "AuthenticationError",
    "SessionInvalidError",
    "InactiveUserError",
    "UnexpectedAuthLevelError",
    "LoginFailedError",
]
