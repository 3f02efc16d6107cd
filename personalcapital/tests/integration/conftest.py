import os

import pytest

from personalcapital.config import Credentials

REQUIRED_VARS = ("PC_USERNAME", "PC_PASSWORD", "PC_DEVICE_NAME")


def pytest_collection_modifyitems(config: pytest.Config, items: list) -> None:
    missing = not all(os.getenv(var) for var in REQUIRED_VARS)
    if not missing:
        return
    mark_expr = getattr(config.option, "markexpr", "")
    if "integration" in mark_expr:
        return
    skip = pytest.mark.skip(reason="PC_USERNAME / PC_PASSWORD / PC_DEVICE_NAME not set")
    for item in items:
        if item.get_closest_marker("integration"):
            item.add_marker(skip)


@pytest.fixture(scope="session")
def pc_credentials() -> Credentials:
    if not all(os.getenv(var) for var in REQUIRED_VARS):
        pytest.fail(
            "PC_USERNAME, PC_PASSWORD and PC_DEVICE_NAME must be set to run integration tests."
        )
    return Credentials.from_env()
