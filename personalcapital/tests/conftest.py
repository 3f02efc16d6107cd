from collections.abc import AsyncIterator

import pytest
import pytest_asyncio

from personalcapital.api.http_client import AsyncHttpClient
from personalcapital.config import Credentials, PersonalCapitalConfig
from personalcapital.session_store import MemorySessionStore
from personalcapital.tests.constants import DEVICE_NAME, PASSWORD, USERNAME
from personalcapital.tests.utils.transport import MockTransport


@pytest.fixture
def config() -> PersonalCapitalConfig:
    """Create test config."""
    return PersonalCapitalConfig()


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(username=USERNAME, password=PASSWORD, device_name=DEVICE_NAME)


@pytest.fixture
def mock_transport() -> MockTransport:
    """Create mock transport."""
    return MockTransport()


@pytest.fixture
def store() -> MemorySessionStore:
    return MemorySessionStore()


@pytest_asyncio.fixture
async def http(
    config: PersonalCapitalConfig,
    store: MemorySessionStore,
    mock_transport: MockTransport,
) -> AsyncIterator[AsyncHttpClient]:
    """Open HTTP client talking to the mock transport."""
    client = AsyncHttpClient(config, store=store, transport=mock_transport)
    await client._ensure_client()

    yield client

    await client._close()
