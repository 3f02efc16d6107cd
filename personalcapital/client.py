"""
Personal Capital client facade.

This is the main entry point for users of the library. It wires the HTTP
pipeline, the session store and the auth service together and exposes the
login steps and data endpoints as plain async methods.
"""

import asyncio
from collections.abc import Iterable
from datetime import date
from typing import Self

import httpx
import structlog

from personalcapital.api.endpoints import accounts as accounts_api
from personalcapital.api.endpoints import histories as histories_api
from personalcapital.api.endpoints import holdings as holdings_api
from personalcapital.api.endpoints import spending as spending_api
from personalcapital.api.endpoints import transactions as transactions_api
from personalcapital.api.http_client import AsyncHttpClient
from personalcapital.config import Credentials, PersonalCapitalConfig
from personalcapital.exceptions import AuthenticationError, TwoFactorRequiredError
from personalcapital.models.accounts import Accounts
from personalcapital.models.auth import AuthLevel, IdentifyUser, LoginStatus
from personalcapital.models.histories import Histories, HistoryType
from personalcapital.models.holdings import Holdings
from personalcapital.models.spending import UserSpending
from personalcapital.models.transactions import Category, IntervalType, Tag, UserTransactions
from personalcapital.services.auth_service import AuthService
from personalcapital.session_store import SessionStore
from personalcapital.two_factor import TwoFactorCodeProvider

logger = structlog.get_logger(__name__)


class PersonalCapitalClient:
    """
    Async client for Personal Capital.

    Example:
        ```python
        credentials = Credentials.from_env()
        async with PersonalCapitalClient(credentials, two_factor=ConsoleCodeProvider()) as client:
            await client.login()
            accounts = await client.get_accounts()
            print(accounts.networth)
        ```

    Args:
        credentials: Username, password and device name.
        config: Client configuration. Uses defaults if not provided.
        store: Where the CSRF token and cookies are persisted between runs.
            In-memory if not provided.
        two_factor: Supplies two-factor codes during ``login``.
        transport: Optional httpx transport for testing (mock transport).
    """

    def __init__(
        self,
        credentials: Credentials,
        config: PersonalCapitalConfig | None = None,
        *,
        store: SessionStore | None = None,
        two_factor: TwoFactorCodeProvider | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._credentials = credentials
        self._config = config or PersonalCapitalConfig()
        self._store = store
        self._two_factor = two_factor
        self._transport = transport

        self._http: AsyncHttpClient | None = None
        self._auth_service: AuthService | None = None

        self._initialized = False
        self._init_lock = asyncio.Lock()

    async def __aenter__(self) -> Self:
        """Enter async context."""
        await self._ensure_initialized()
        return self

    async def __aexit__(
        self, exc_type: type | None, exc_val: BaseException | None, exc_tb: object
    ) -> None:
        """Exit async context."""
        await self.close()

    async def _ensure_initialized(self) -> None:
        """Ensure all components are initialized."""
        async with self._init_lock:
            if self._initialized:
                return

            self._http = AsyncHttpClient(
                self._config,
                store=self._store,
                transport=self._transport,
            )
            await self._http.__aenter__()
            await self._http.restore()

            self._auth_service = AuthService(
                self._http,
                self._credentials,
                self._config,
                two_factor=self._two_factor,
            )

            self._initialized = True
            logger.debug("Client initialized")

    async def close(self) -> None:
        """Close the client and release resources."""
        async with self._init_lock:
            if self._http:
                await self._http.__aexit__(None, None, None)
                self._http = None

            self._auth_service = None
            self._initialized = False
            logger.debug("Client closed")

    @property
    def auth_level(self) -> AuthLevel:
        if self._auth_service is None:
            return AuthLevel.NULL
        return self._auth_service.auth_level

    @property
    def is_authenticated(self) -> bool:
        """Check if the session can serve data requests."""
        return self._auth_service is not None and self._auth_service.is_authenticated

    @property
    def requires_two_factor(self) -> bool:
        """Check if a two-factor code must be verified before the password."""
        return self._auth_service is not None and self._auth_service.requires_two_factor

    async def login(self) -> LoginStatus:
        """
        Log in, reusing any persisted session state.

        Returns:
            ``AUTHENTICATED``, or ``TWO_FACTOR_REQUIRED`` when a code is needed
            and no provider could supply it.

        Example:
            ```python
            if await client.login() == LoginStatus.TWO_FACTOR_REQUIRED:
                await client.two_factor_challenge()
                await client.two_factor_auth(input("Code: "))
                await client.login()
            ```
        """
        return await (await self._auth()).login()

    async def identify_user(self) -> IdentifyUser:
        """Identify the configured user. Acquires a CSRF token first if needed."""
        auth = await self._auth()
        await auth.ensure_csrf()
        return await auth.identify_user()

    async def two_factor_challenge(self) -> None:
        """Ask the service to send a two-factor code."""
        await (await self._auth()).two_factor_challenge()

    async def two_factor_auth(self, code: str) -> None:
        """Verify a two-factor code."""
        await (await self._auth()).two_factor_auth(code)

    async def auth_password(self) -> LoginStatus:
        """Authenticate with the password once the device is authorized."""
        return await (await self._auth()).auth_password()

    async def get_accounts(self) -> Accounts:
        """Get all accounts with balances and totals."""
        return await accounts_api.get_accounts(self._require_session())

    async def get_user_transactions(
        self,
        start_date: date,
        end_date: date,
        user_account_ids: Iterable[int] | None = None,
    ) -> UserTransactions:
        """
        Get transactions between two dates (inclusive).

        Use ``personalcapital.core.sorting.sort_transactions`` to get them in
        the order the web UI shows.
        """
        return await transactions_api.get_user_transactions(
            self._require_session(), start_date, end_date, user_account_ids
        )

    async def get_categories(self) -> list[Category]:
        return await transactions_api.get_categories(self._require_session())

    async def get_tags(self) -> list[Tag]:
        return await transactions_api.get_tags(self._require_session())

    async def get_user_spending(
        self,
        interval_types: Iterable[IntervalType] = (IntervalType.MONTH,),
        *,
        include_details: bool = True,
    ) -> UserSpending:
        return await spending_api.get_user_spending(
            self._require_session(), interval_types, include_details=include_details
        )

    async def get_holdings(self, user_account_ids: Iterable[int] | None = None) -> Holdings:
        return await holdings_api.get_holdings(self._require_session(), user_account_ids)

    async def get_histories(
        self,
        start_date: date,
        end_date: date,
        types: Iterable[HistoryType],
        interval: IntervalType = IntervalType.DAY,
        user_account_ids: Iterable[int] | None = None,
    ) -> Histories:
        """Get balance, net worth and cash flow series between two dates."""
        return await histories_api.get_histories(
            self._require_session(), start_date, end_date, types, interval, user_account_ids
        )

    async def _auth(self) -> AuthService:
        await self._ensure_initialized()
        if self._auth_service is None:
            raise RuntimeError("Client not initialized")
        return self._auth_service

    def _require_session(self) -> AsyncHttpClient:
        if self._http is None:
            raise RuntimeError("Client not initialized")

        if self.requires_two_factor:
            raise TwoFactorRequiredError()

        if not self.is_authenticated:
            msg = "Not authenticated. Call login() first."
            raise AuthenticationError(msg)

        return self._http
