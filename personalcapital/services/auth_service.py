"""
Authentication service for Personal Capital.

Drives the login state machine: CSRF acquisition, user identification,
the optional two-factor challenge and password authentication.
"""

import re

import structlog

from personalcapital.api.endpoints import login as login_api
from personalcapital.api.http_client import AsyncHttpClient
from personalcapital.config import Credentials, PersonalCapitalConfig
from personalcapital.exceptions import (
    CsrfNotFoundError,
    InactiveUserError,
    LoginFailedError,
    LoginSequenceError,
    ServiceError,
    TwoFactorRequiredError,
    UnexpectedAuthLevelError,
)
from personalcapital.models.auth import AuthLevel, IdentifyUser, LoginStatus, UserStatus
from personalcapital.two_factor import TwoFactorCodeProvider

logger = structlog.get_logger(__name__)

CSRF_RE = re.compile(r"globals\.csrf='([a-f0-9-]+)'")

# Levels at which the server has not yet been told who we are
_UNIDENTIFIED = frozenset({AuthLevel.NULL, AuthLevel.CSRF, AuthLevel.NONE})


class AuthService:
    """
    Handles Personal Capital authentication.

    The auth level itself lives in the HTTP client's session and is only ever
    changed by a decoded response header; this service reads it to decide
    which step is valid next.

    Concurrency:
    - Each request is serialized by the HTTP client's lock. A login sequence
      is several requests, so callers should not run two logins at once.
    """

    def __init__(
        self,
        http_client: AsyncHttpClient,
        credentials: Credentials,
        config: PersonalCapitalConfig,
        two_factor: TwoFactorCodeProvider | None = None,
    ) -> None:
        """
        Args:
            http_client: HTTP client for API requests.
            credentials: Username, password and device name.
            config: Client configuration (two-factor channel).
            two_factor: Supplies codes during ``login``. Without one, login
                stops at ``LoginStatus.TWO_FACTOR_REQUIRED``.
        """
        self._http = http_client
        self._credentials = credentials
        self._config = config
        self._two_factor = two_factor
        # Level at which the password was last accepted, if not SESSION_AUTHENTICATED
        self._accepted_level: AuthLevel | None = None

    @property
    def auth_level(self) -> AuthLevel:
        return self._http.session.auth_level

    @property
    def is_authenticated(self) -> bool:
        """
        Check if the session can serve data requests.

        True at ``SESSION_AUTHENTICATED``, or at ``USER_REMEMBERED`` once the
        password has been accepted at that level.
        """
        level = self.auth_level
        return level == AuthLevel.SESSION_AUTHENTICATED or level == self._accepted_level

    @property
    def requires_two_factor(self) -> bool:
        """Check if the server is waiting for a two-factor code."""
        return self.auth_level == AuthLevel.USER_IDENTIFIED

    async def ensure_csrf(self) -> None:
        """
        Make sure the session has a CSRF token.

        Uses, in order: the token already in the session, the one cached in
        the session store, a fresh one scraped from the home page.

        Raises:
            CsrfNotFoundError: If the home page carries no token.
        """
        if self._http.session.csrf:
            return

        cached = await self._http.store.load_csrf()
        if cached:
            logger.debug("Using cached CSRF token")
            self._http.adopt_csrf(cached)
            return

        page = await self._http.get_text("/")
        match = CSRF_RE.search(page)
        if match is None:
            raise CsrfNotFoundError()

        token = match.group(1)
        await self._http.store.save_csrf(token)
        self._http.adopt_csrf(token)
        logger.debug("CSRF token acquired")

    async def identify_user(self) -> IdentifyUser:
        """
        Identify the configured username.

        Returns:
            The identification payload. ``requires_two_factor`` tells whether
            a code must be verified before the password.

        Raises:
            InactiveUserError: If the account is deactivated.
        """
        self._accepted_level = None
        username = self._credentials.username
        result = await login_api.identify_user(self._http, username)

        if result.user_status == UserStatus.INACTIVE:
            logger.warning("User is inactive")
            raise InactiveUserError(username)

        logger.info("User identified", auth_level=self.auth_level)
        return result

    async def two_factor_challenge(self) -> None:
        """
        Ask the service to send a two-factor code.

        No-op when the device is already remembered.

        Raises:
            LoginSequenceError: If the user has not been identified yet.
        """
        if self.auth_level == AuthLevel.USER_REMEMBERED:
            logger.debug("Device remembered, skipping challenge")
            return
        self._require_identified()

        await login_api.challenge(self._http, self._config.two_factor_method)
        logger.info("Two-factor challenge sent", method=self._config.two_factor_method)

    async def two_factor_auth(self, code: str) -> None:
        """
        Verify a two-factor code.

        Args:
            code: Code received by email or SMS.

        Raises:
            LoginSequenceError: If the user has not been identified yet.
            ServiceError: If the service rejects the code. Prompt again.
        """
        self._require_identified()

        await login_api.authenticate_code(self._http, self._config.two_factor_method, code)
        logger.info("Two-factor code accepted", auth_level=self.auth_level)

    async def auth_password(self) -> LoginStatus:
        """
        Authenticate with the password, binding this device.

        Returns:
            ``AUTHENTICATED`` on success, ``TWO_FACTOR_REQUIRED`` if the
            service still expects a code.

        Raises:
            TwoFactorRequiredError: If a code must be verified first.
            LoginSequenceError: If the user has not been identified yet.
            LoginFailedError: If the service refused the login.
            UnexpectedAuthLevelError: If the service reports any other level.
        """
        level = self.auth_level
        if level == AuthLevel.USER_IDENTIFIED:
            raise TwoFactorRequiredError()
        if level not in (AuthLevel.USER_REMEMBERED, AuthLevel.DEVICE_AUTHORIZED):
            raise LoginSequenceError()

        self._accepted_level = None
        await login_api.authenticate_password(
            self._http,
            self._credentials.password,
            self._credentials.device_name,
        )

        level = self.auth_level
        match level:
            case AuthLevel.SESSION_AUTHENTICATED:
                logger.info("Authentication successful")
                return LoginStatus.AUTHENTICATED
            case AuthLevel.USER_REMEMBERED:
                self._accepted_level = level
                logger.info("Authentication successful", auth_level=level)
                return LoginStatus.AUTHENTICATED
            case AuthLevel.USER_IDENTIFIED:
                logger.info("Two-factor code required")
                return LoginStatus.TWO_FACTOR_REQUIRED
            case AuthLevel.NONE:
                msg = "Could not authenticate"
                raise LoginFailedError(msg)
            case _:
                msg = f"Unexpected auth level after password: {level}"
                raise UnexpectedAuthLevelError(msg, level=str(level))

    async def login(self) -> LoginStatus:
        """
        Run the whole login sequence.

        Two-factor codes come from the configured provider. Without a provider,
        or when it has no code yet, returns ``TWO_FACTOR_REQUIRED``; verify the
        code with ``two_factor_auth`` and call ``login`` again.

        Returns:
            The login outcome.
        """
        if self.is_authenticated:
            logger.debug("Already authenticated")
            return LoginStatus.AUTHENTICATED

        logger.info("Starting login")
        await self.ensure_csrf()

        if self.auth_level in _UNIDENTIFIED:
            await self.identify_user()

        if self.requires_two_factor:
            if not await self._run_two_factor():
                return LoginStatus.TWO_FACTOR_REQUIRED

        return await self.auth_password()

    async def _run_two_factor(self) -> bool:
        provider = self._two_factor
        if provider is None:
            logger.info("Two-factor code required, no provider configured")
            return False

        if await provider.should_challenge():
            await self.two_factor_challenge()

        code = await provider.get_code()
        if not code:
            logger.info("Two-factor code not available yet")
            return False

        try:
            await self.two_factor_auth(code)
        except ServiceError:
            await provider.set_status(False)
            raise
        await provider.set_status(True)
        return True

    def _require_identified(self) -> None:
        if self.auth_level != AuthLevel.USER_IDENTIFIED:
            raise LoginSequenceError()
