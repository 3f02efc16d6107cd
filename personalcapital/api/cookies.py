"""
Domain-scoped cookie jar with persistence.

Built on ``httpx.Cookies`` (standard ``http.cookiejar`` semantics) with two
service-specific rules:

- cookies whose name starts with an ephemeral prefix are dropped as soon as
  they arrive, so they are never sent back nor persisted;
- ``dumps()`` serializes every stored cookie, including expired and session
  cookies, because device-trust cookies must survive a process restart.
"""

import json
import time
from collections.abc import Iterator
from http.cookiejar import Cookie
from typing import Any, Self

import httpx
import structlog

logger = structlog.get_logger(__name__)

SNAPSHOT_VERSION = 1


class CookieJar:
    """Cookies for a single service domain."""

    def __init__(self, ephemeral_prefixes: tuple[str, ...] = ()) -> None:
        """
        Args:
            ephemeral_prefixes: Cookie name prefixes that are never kept.
        """
        self._prefixes = ephemeral_prefixes
        self._cookies = httpx.Cookies()

    def __len__(self) -> int:
        return len(self._cookies.jar)

    def __iter__(self) -> Iterator[Cookie]:
        return iter(self._cookies.jar)

    def is_ephemeral(self, name: str) -> bool:
        return name.startswith(self._prefixes) if self._prefixes else False

    def extract(self, response: httpx.Response) -> int:
        """
        Store the cookies set by a response.

        Args:
            response: Response whose Set-Cookie headers should be applied.

        Returns:
            Number of Set-Cookie headers seen.
        """
        set_cookies = response.headers.get_list("set-cookie")
        if not set_cookies:
            return 0

        self._cookies.extract_cookies(response)

        dropped = [c for c in self._cookies.jar if self.is_ephemeral(c.name)]
        for cookie in dropped:
            self._cookies.jar.clear(cookie.domain, cookie.path, cookie.name)
        if dropped:
            logger.debug("Dropped ephemeral cookies", names=sorted({c.name for c in dropped}))

        return len(set_cookies)

    def header_value(self, url: httpx.URL | str, now: float | None = None) -> str | None:
        """
        Build the Cookie header for a request.

        Expired cookies stay in the jar (they are still persisted) but are not sent.

        Args:
            url: Request URL.
            now: Current time, for tests.

        Returns:
            ``name=value; name=value`` or None when no cookie applies.
        """
        url = httpx.URL(url)
        now = time.time() if now is None else now
        pairs = [
            f"{c.name}={c.value}" if c.value is not None else c.name
            for c in self.attachable(url, now)
        ]
        return "; ".join(pairs) if pairs else None

    def attachable(self, url: httpx.URL, now: float | None = None) -> list[Cookie]:
        """Unexpired, non-ephemeral cookies matching ``url``, most specific path first."""
        now = time.time() if now is None else now
        cookies = [
            c
            for c in self._cookies.jar
            if not c.is_expired(now) and not self.is_ephemeral(c.name) and _matches(c, url)
        ]
        cookies.sort(key=lambda c: len(c.path or ""), reverse=True)
        return cookies

    def clear(self) -> None:
        self._cookies.clear()

    def dumps(self) -> bytes:
        """Serialize every stored cookie (expired and session cookies included)."""
        cookies = [_cookie_to_dict(c) for c in self._cookies.jar if not self.is_ephemeral(c.name)]
        return json.dumps({"version": SNAPSHOT_VERSION, "cookies": cookies}).encode()

    def loads(self, data: bytes) -> None:
        """
        Replace the jar content with a snapshot produced by ``dumps``.

        Raises:
            ValueError: If the snapshot is malformed.
        """
        try:
            snapshot = json.loads(data)
            entries = snapshot["cookies"]
            cookies = [_cookie_from_dict(entry) for entry in entries]
        except (KeyError, TypeError, ValueError) as e:
            msg = "Malformed cookie snapshot"
            raise ValueError(msg) from e

        self._cookies.clear()
        for cookie in cookies:
            if self.is_ephemeral(cookie.name):
                continue
            self._cookies.jar.set_cookie(cookie)

    @classmethod
    def from_bytes(cls, data: bytes, ephemeral_prefixes: tuple[str, ...] = ()) -> Self:
        jar = cls(ephemeral_prefixes)
        jar.loads(data)
        return jar


def _matches(cookie: Cookie, url: httpx.URL) -> bool:
    host = url.host.lower()
    domain = cookie.domain.lower()

    if cookie.domain_specified or domain.startswith("."):
        bare = domain.lstrip(".")
        if host != bare and not host.endswith("." + bare):
            return False
    elif host != domain:
        return False

    path = url.path or "/"
    cookie_path = cookie.path or "/"
    if not path.startswith(cookie_path):
        return False
    if not cookie_path.endswith("/") and len(path) > len(cookie_path):
        if path[len(cookie_path)] != "/":
            return False

    if cookie.secure and url.scheme != "https":
        return False

    return True


def _cookie_to_dict(cookie: Cookie) -> dict[str, Any]:
    return {
        "version": cookie.version,
        "name": cookie.name,
        "value": cookie.value,
        "domain": cookie.domain,
        "domain_specified": cookie.domain_specified,
        "domain_initial_dot": cookie.domain_initial_dot,
        "path": cookie.path,
        "path_specified": cookie.path_specified,
        "secure": cookie.secure,
        "expires": cookie.expires,
        "discard": cookie.discard,
        "http_only": cookie.has_nonstandard_attr("HttpOnly"),
    }


def _cookie_from_dict(entry: dict[str, Any]) -> Cookie:
    return Cookie(
        version=entry.get("version", 0),
        name=entry["name"],
        value=entry["value"],
        port=None,
        port_specified=False,
        domain=entry["domain"],
        domain_specified=entry.get("domain_specified", False),
        domain_initial_dot=entry.get("domain_initial_dot", False),
        path=entry.get("path", "/"),
        path_specified=entry.get("path_specified", True),
        secure=entry.get("secure", False),
        expires=entry.get("expires"),
        discard=entry.get("discard", False),
        comment=None,
        comment_url=None,
        rest={"HttpOnly": None} if entry.get("http_only") else {},
    )
