"""
Persistence of the CSRF token and cookie jar between process runs.

The client only needs the SessionStore protocol; applications can back it
with anything (keyring, database, ...). Two implementations ship here.
"""

import asyncio
import os
from pathlib import Path
from typing import Protocol, runtime_checkable

import structlog

logger = structlog.get_logger(__name__)

# 0o700 = owner read/write/execute, nobody else
DIR_PERMISSIONS = 0o700
# 0o600 = owner read/write, nobody else
FILE_PERMISSIONS = 0o600


@runtime_checkable
class SessionStore(Protocol):
    """
    Key-value persistence for session state.

    Last write wins. ``None`` from a load means "no saved state": the client
    then behaves as a fresh session.
    """

    async def load_csrf(self) -> str | None:
        """Return the saved CSRF token, if any."""
        ...

    async def save_csrf(self, token: str) -> None:
        """Persist the current CSRF token."""
        ...

    async def load_cookies(self) -> bytes | None:
        """Return the saved cookie snapshot, if any."""
        ...

    async def save_cookies(self, data: bytes) -> None:
        """Persist a cookie snapshot produced by ``CookieJar.dumps``."""
        ...


class MemorySessionStore:
    """Process-local store. State is lost when the process exits."""

    def __init__(self, csrf: str | None = None, cookies: bytes | None = None) -> None:
        self.csrf = csrf
        self.cookies = cookies

    async def load_csrf(self) -> str | None:
        return self.csrf

    async def save_csrf(self, token: str) -> None:
        self.csrf = token

    async def load_cookies(self) -> bytes | None:
        return self.cookies

    async def save_cookies(self, data: bytes) -> None:
        self.cookies = data


class FileSessionStore:
    """
    Store session state as two files in a private directory.

    Layout::

        <directory>/        (mode 0o700)
        ├── csrf.txt        (mode 0o600)
        └── cookies.json    (mode 0o600)

    File I/O runs in a worker thread so the event loop is never blocked.
    """

    CSRF_FILE = "csrf.txt"
    COOKIES_FILE = "cookies.json"

    def __init__(self, directory: Path | str) -> None:
        """
        Args:
            directory: Directory holding the state files. Created if missing.
        """
        self._dir = Path(directory)
        self._dir.mkdir(parents=True, exist_ok=True, mode=DIR_PERMISSIONS)

    @property
    def directory(self) -> Path:
        return self._dir

    async def load_csrf(self) -> str | None:
        data = await asyncio.to_thread(self._read, self.CSRF_FILE)
        if data is None:
            return None
        token = data.decode().strip()
        return token or None

    async def save_csrf(self, token: str) -> None:
        await asyncio.to_thread(self._write, self.CSRF_FILE, token.encode())

    async def load_cookies(self) -> bytes | None:
        return await asyncio.to_thread(self._read, self.COOKIES_FILE)

    async def save_cookies(self, data: bytes) -> None:
        await asyncio.to_thread(self._write, self.COOKIES_FILE, data)

    def _read(self, name: str) -> bytes | None:
        path = self._dir / name
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    def _write(self, name: str, data: bytes) -> None:
        path = self._dir / name
        tmp = path.with_suffix(path.suffix + ".tmp")
        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_PERMISSIONS)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp, path)
        logger.debug("Session state saved", file=name)
