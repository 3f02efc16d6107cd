from datetime import date

import pytest

from personalcapital.client import PersonalCapitalClient
from personalcapital.config import Credentials
from personalcapital.exceptions import AuthenticationError, TwoFactorRequiredError
from personalcapital.models.auth import AuthLevel, LoginStatus
from personalcapital.session_store import MemorySessionStore
from personalcapital.tests.constants import CSRF
from personalcapital.tests.utils.transport import MockTransport
from personalcapital.two_factor import StaticCodeProvider

ACTIVE_USER = {"userStatus": "ACTIVE", "credentials": ["PASSWORD"], "allCredentials": []}


@pytest.mark.asyncio
async def test_data_methods_require_login(
    credentials: Credentials, mock_transport: MockTransport
) -> None:
    async with PersonalCapitalClient(credentials, transport=mock_transport) as client:
        with pytest.raises(AuthenticationError):
            await client.get_accounts()

    assert mock_transport.call_count == 0


@pytest.mark.asyncio
async def test_data_methods_refuse_pending_two_factor(
    credentials: Credentials, mock_transport: MockTransport
) -> None:
    store = MemorySessionStore(csrf=CSRF)
    mock_transport.add_envelope(ACTIVE_USER, auth_level="USER_IDENTIFIED")

    async with PersonalCapitalClient(credentials, store=store, transport=mock_transport) as client:
        assert await client.login() == LoginStatus.TWO_FACTOR_REQUIRED
        assert client.requires_two_factor is True

        with pytest.raises(TwoFactorRequiredError):
            await client.get_categories()


@pytest.mark.asyncio
async def test_login_and_fetch_accounts(
    credentials: Credentials, mock_transport: MockTransport
) -> None:
    store = MemorySessionStore(csrf=CSRF)
    mock_transport.add_envelope(ACTIVE_USER, auth_level="USER_IDENTIFIED")
    mock_transport.add_envelope(None, auth_level="USER_IDENTIFIED")
    mock_transport.add_envelope(None, auth_level="DEVICE_AUTHORIZED")
    mock_transport.add_envelope(
        None, auth_level="SESSION_AUTHENTICATED", set_cookies=["PMDATA=abc; Path=/"]
    )
    mock_transport.add_envelope({"accounts": [], "networth": 10.0})
    mock_transport.add_envelope(
        {"startDate": "2024-01-01", "endDate": "2024-01-31", "transactions": []}
    )

    async with PersonalCapitalClient(
        credentials,
        store=store,
        two_factor=StaticCodeProvider("123456"),
        transport=mock_transport,
    ) as client:
        assert await client.login() == LoginStatus.AUTHENTICATED
        assert client.auth_level == AuthLevel.SESSION_AUTHENTICATED

        accounts = await client.get_accounts()
        transactions = await client.get_user_transactions(date(2024, 1, 1), date(2024, 1, 31))

    assert accounts.networth == 10.0
    assert transactions.transactions == ()
    assert mock_transport.requests[-1].headers["Cookie"] == "PMDATA=abc"
    assert store.cookies is not None


@pytest.mark.asyncio
async def test_restored_session_skips_csrf_scrape(
    credentials: Credentials, mock_transport: MockTransport
) -> None:
    store = MemorySessionStore(csrf=CSRF)
    mock_transport.add_envelope(ACTIVE_USER, auth_level="USER_REMEMBERED")
    mock_transport.add_envelope(None, auth_level="SESSION_AUTHENTICATED")

    async with PersonalCapitalClient(credentials, store=store, transport=mock_transport) as client:
        await client.login()

    assert [r.url.path for r in mock_transport.requests] == [
        "/api/login/identifyUser",
        "/api/credential/authenticatePassword",
    ]


@pytest.mark.asyncio
async def test_password_accepted_while_remembered_serves_data(
    credentials: Credentials, mock_transport: MockTransport
) -> None:
    store = MemorySessionStore(csrf=CSRF)
    mock_transport.add_envelope(ACTIVE_USER, auth_level="USER_REMEMBERED")
    mock_transport.add_envelope(None, auth_level="USER_REMEMBERED")
    mock_transport.add_envelope({"accounts": [], "networth": 5.0}, auth_level="USER_REMEMBERED")

    async with PersonalCapitalClient(credentials, store=store, transport=mock_transport) as client:
        assert await client.login() == LoginStatus.AUTHENTICATED
        assert client.is_authenticated is True

        accounts = await client.get_accounts()
        assert await client.login() == LoginStatus.AUTHENTICATED

    assert accounts.networth == 5.0
    assert [r.url.path for r in mock_transport.requests] == [
        "/api/login/identifyUser",
        "/api/credential/authenticatePassword",
        "/api/newaccount/getAccounts2",
    ]


@pytest.mark.asyncio
async def test_close_resets_state(credentials: Credentials) -> None:
    client = PersonalCapitalClient(credentials)
    await client.close()

    assert client.auth_level == AuthLevel.NULL
    assert client.is_authenticated is False
