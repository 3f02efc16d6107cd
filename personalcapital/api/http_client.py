"""
Async HTTP client for the Personal Capital web API.

Every call goes through the same pipeline: attach cookies, send, check the
HTTP status, store and persist cookies, then (for JSON endpoints) decode the
spHeader/spData envelope, apply CSRF and auth level updates and either raise
the error the header reports or decode the payload.

Nothing here retries. CSRF and cookie bookkeeping happen on every response
that reaches them, whether or not the call ends in an error.
"""

import asyncio
import json
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, TypeVar

import httpx
import structlog

from personalcapital.api.cookies import CookieJar
from personalcapital.api.envelope import context_window, locate, split_envelope
from personalcapital.config import PersonalCapitalConfig
from personalcapital.exceptions import (
    EnvelopeDecodeError,
    PayloadDecodeError,
    ServiceError,
    SessionInvalidError,
)
from personalcapital.models.auth import AuthLevel, ResponseHeader
from personalcapital.models.reader import FieldReader, SchemaMismatch, format_path
from personalcapital.session_store import MemorySessionStore, SessionStore

logger = structlog.get_logger(__name__)

T = TypeVar("T")

SENSITIVE_KEYS = frozenset(
    {
        "csrf",
        "passwd",
        "password",
        "code",
        "username",
        "deviceName",
    }
)

NO_CHANGE_ID = -1


def sanitize_for_log(data: dict[str, Any]) -> dict[str, Any]:
    """
    Remove sensitive fields from a dict before logging.

    Recursively sanitizes nested dictionaries and lists.

    Args:
        data: Dictionary that may contain sensitive values.

    Returns:
        Copy with sensitive values replaced by "***".
    """
    result = {}
    for key, value in data.items():
        if key in SENSITIVE_KEYS:
            result[key] = "***"
        elif isinstance(value, dict):
            result[key] = sanitize_for_log(value)
        elif isinstance(value, list):
            result[key] = [
                sanitize_for_log(item) if isinstance(item, dict) else item for item in value
            ]
        else:
            result[key] = value
    return result


class SPErrorCode(IntEnum):
    """Error codes with a dedicated meaning in ``spHeader.errors``."""

    SESSION_INVALID = 202


@dataclass(slots=True)
class Session:
    """
    Mutable session state shared by every request.

    Only the HTTP client writes to it.
    """

    csrf: str | None = None
    auth_level: AuthLevel = AuthLevel.NULL
    last_server_change_id: int = NO_CHANGE_ID


class AsyncHttpClient:
    """Async HTTP client for the Personal Capital API."""

    def __init__(
        self,
        config: PersonalCapitalConfig,
        *,
        store: SessionStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            config: Client configuration.
            store: Where the CSRF token and cookies are persisted.
            transport: Optional transport for testing (mock transport).
        """
        self._config = config
        self._store = store if store is not None else MemorySessionStore()
        self._transport = transport

        self._session = Session()
        self._cookies = CookieJar(config.ephemeral_cookie_prefixes)
        self._client: httpx.AsyncClient | None = None
        self._lock = asyncio.Lock()

    async def __aenter__(self) -> "AsyncHttpClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self._close()

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            host = httpx.URL(self._config.base_url).host
            self._client = httpx.AsyncClient(
                base_url=self._config.base_url,
                timeout=self._config.timeout,
                transport=self._transport,
                follow_redirects=False,
                headers={
                    "Accept": "*/*",
                    "Accept-Language": "en-US,en;q=0.9",
                    "User-Agent": self._config.user_agent,
                    "Origin": self._config.base_url,
                    "authority": host,
                    "adrum": "isAjax:true",
                },
            )
        return self._client

    async def _close(self) -> None:
        if self._client is None:
            logger.debug("Client not open.")
            return
        await self._client.aclose()
        self._client = None

    @property
    def session(self) -> Session:
        return self._session

    @property
    def cookies(self) -> CookieJar:
        return self._cookies

    @property
    def store(self) -> SessionStore:
        return self._store

    @property
    def config(self) -> PersonalCapitalConfig:
        return self._config

    async def restore(self) -> None:
        """Load the persisted cookie jar, if any. A broken snapshot starts a fresh jar."""
        data = await self._store.load_cookies()
        if not data:
            return
        try:
            self._cookies.loads(data)
        except ValueError as e:
            logger.warning("Ignoring unreadable cookie snapshot", error_type=type(e).__name__)
            self._cookies.clear()
            return
        logger.debug("Restored cookies", count=len(self._cookies))

    def adopt_csrf(self, token: str) -> None:
        """
        Record a CSRF token obtained outside an envelope (cached or scraped).

        Moves the session from NULL to CSRF; server-reported levels are left alone.
        """
        self._session.csrf = token
        if self._session.auth_level == AuthLevel.NULL:
            self._session.auth_level = AuthLevel.CSRF

    def build_request(
        self,
        method: str,
        path: str,
        *,
        form: dict[str, Any] | None = None,
    ) -> httpx.Request:
        if self._client is None:
            msg = "HTTP client not initialized. Use 'async with' first."
            raise RuntimeError(msg)
        return self._client.build_request(method, path, data=form)

    async def execute(self, request: httpx.Request) -> httpx.Response:
        """
        Send a request through the cookie jar.

        Args:
            request: Request built by ``build_request``.

        Returns:
            The response, already checked for HTTP errors.

        Raises:
            httpx.HTTPStatusError: On a non-2xx status.
            httpx.HTTPError: On connection or timeout failures.
        """
        if self._client is None:
            msg = "HTTP client not initialized. Use 'async with' first."
            raise RuntimeError(msg)

        request.headers.pop("Cookie", None)
        cookie_header = self._cookies.header_value(request.url)
        if cookie_header:
            request.headers["Cookie"] = cookie_header

        response = await self._client.send(request)
        logger.debug(
            "HTTP response",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
        )

        response.raise_for_status()

        if self._cookies.extract(response):
            await self._store.save_cookies(self._cookies.dumps())

        return response

    async def execute_decoded(
        self,
        request: httpx.Request,
        decode: Callable[[FieldReader], T],
    ) -> T:
        """
        Send a request and decode the JSON envelope of its response.

        Args:
            request: Request built by ``build_request``.
            decode: Turns the spData reader into the expected type.

        Returns:
            The decoded payload.

        Raises:
            EnvelopeDecodeError: If the body is not an spHeader/spData envelope.
            UnexpectedAuthLevelError: If the header reports an unknown auth level.
            SessionInvalidError: If the server ended or demoted the session.
            ServiceError: If the header lists any other error.
            PayloadDecodeError: If spData does not match ``decode``.
        """
        async with self._lock:
            response = await self.execute(request)
            await response.aread()

            envelope = split_envelope(response.text)
            try:
                header = ResponseHeader.from_payload(FieldReader(envelope.header, ("spHeader",)))
            except SchemaMismatch as e:
                msg = f"Malformed spHeader: {e}"
                raise EnvelopeDecodeError(msg, path=format_path(e.path)) from e

            await self._apply_header(header, endpoint=request.url.path)

        return self._decode_payload(envelope.payload, decode, endpoint=request.url.path)

    async def post(
        self,
        path: str,
        decode: Callable[[FieldReader], T],
        form: dict[str, Any] | None = None,
        *,
        include_change_id: bool = False,
    ) -> T:
        """
        POST a form to an API endpoint and decode the response.

        The CSRF token and ``apiClient`` marker are added to every form;
        ``lastServerChangeId`` is added for read endpoints.
        """
        fields = dict(form or {})
        fields["csrf"] = self._session.csrf or ""
        fields["apiClient"] = self._config.api_client
        if include_change_id:
            fields["lastServerChangeId"] = str(self._session.last_server_change_id)

        logger.debug("API request", path=path, form=sanitize_for_log(fields))
        request = self.build_request("POST", path, form=fields)
        return await self.execute_decoded(request, decode)

    async def get_text(self, path: str) -> str:
        """GET a page (not an API envelope) and return its body."""
        request = self.build_request("GET", path)
        async with self._lock:
            response = await self.execute(request)
            await response.aread()
        return response.text

    async def _apply_header(self, header: ResponseHeader, *, endpoint: str) -> None:
        session = self._session

        if header.csrf and header.csrf != session.csrf:
            session.csrf = header.csrf
            await self._store.save_csrf(header.csrf)

        change_id = header.last_change_id
        if change_id is not None and change_id > session.last_server_change_id:
            session.last_server_change_id = change_id

        new_level = AuthLevel.from_header(header.auth_level)
        previous = session.auth_level
        session.auth_level = new_level
        if new_level != previous:
            logger.debug("Auth level changed", previous=previous, current=new_level)

        if previous == AuthLevel.SESSION_AUTHENTICATED and new_level != previous:
            logger.warning("Session demoted by server", endpoint=endpoint, auth_level=new_level)
            msg = f"Session demoted to {new_level}"
            raise SessionInvalidError(msg)

        if header.errors:
            first = header.errors[0]
            if first.code == SPErrorCode.SESSION_INVALID:
                logger.warning("Server reported invalid session", endpoint=endpoint)
                msg = first.message or "Session is no longer valid"
                raise SessionInvalidError(msg, code=first.code)

            details = str(first.details) if first.details is not None else None
            logger.debug("Server reported error", endpoint=endpoint, code=first.code)
            raise ServiceError(first.message, code=first.code, details=details or None)

    def _decode_payload(
        self,
        payload: str,
        decode: Callable[[FieldReader], T],
        *,
        endpoint: str,
    ) -> T:
        radius = self._config.decode_context_radius
        try:
            value = json.loads(payload)
        except json.JSONDecodeError as e:
            raise PayloadDecodeError(
                f"spData is not valid JSON: {e.msg}",
                path="$",
                offset=e.pos,
                context=context_window(payload, e.pos, radius),
            ) from e

        try:
            return decode(FieldReader(value))
        except SchemaMismatch as e:
            offset = locate(payload, e.path)
            logger.debug(
                "Payload decode failed",
                endpoint=endpoint,
                path=format_path(e.path),
                offset=offset,
            )
            raise PayloadDecodeError(
                f"Unexpected spData shape: {e.reason}",
                path=format_path(e.path),
                offset=offset,
                context=context_window(payload, offset, radius),
            ) from e
