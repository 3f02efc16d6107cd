"""Tests for AsyncHttpClient."""

import json

import httpx
import pytest

from personalcapital.api.http_client import AsyncHttpClient, SPErrorCode, sanitize_for_log
from personalcapital.config import PersonalCapitalConfig
from personalcapital.exceptions import (
    EnvelopeDecodeError,
    PayloadDecodeError,
    ServiceError,
    SessionInvalidError,
    UnexpectedAuthLevelError,
)
from personalcapital.models.auth import AuthLevel
from personalcapital.models.reader import FieldReader
from personalcapital.session_store import MemorySessionStore
from personalcapital.tests.constants import CSRF, ROTATED_CSRF
from personalcapital.tests.utils.transport import MockTransport, form_of, make_envelope


def read_name(r: FieldReader) -> str:
    return r.string("name")


def ignore(r: FieldReader) -> None:
    return None


# Request construction tests


@pytest.mark.asyncio
async def test_post_adds_csrf_and_api_client(
    http: AsyncHttpClient, mock_transport: MockTransport
) -> None:
    http.adopt_csrf(CSRF)
    mock_transport.add_envelope({"name": "x"})

    await http.post("/api/thing", read_name, {"field": "value"})

    request = mock_transport.requests[0]
    assert request.method == "POST"
    assert request.url.path == "/api/thing"
    assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
    assert form_of(request) == {"field": "value", "csrf": CSRF, "apiClient": "WEB"}


@pytest.mark.asyncio
async def test_post_includes_change_id_for_read_endpoints(
    http: AsyncHttpClient, mock_transport: MockTransport
) -> None:
    mock_transport.add_envelope(None)

    await http.post("/api/read", ignore, include_change_id=True)

    assert form_of(mock_transport.requests[0])["lastServerChangeId"] == "-1"


@pytest.mark.asyncio
async def test_default_headers_are_sent(
    http: AsyncHttpClient, mock_transport: MockTransport, config: PersonalCapitalConfig
) -> None:
    mock_transport.add_envelope(None)

    await http.post("/api/read", ignore)

    headers = mock_transport.requests[0].headers
    assert headers["User-Agent"] == config.user_agent
    assert headers["adrum"] == "isAjax:true"
    assert headers["Origin"] == config.base_url


@pytest.mark.asyncio
async def test_build_request_requires_open_client(config: PersonalCapitalConfig) -> None:
    client = AsyncHttpClient(config)

    with pytest.raises(RuntimeError):
        client.build_request("GET", "/")


# Cookie handling tests


@pytest.mark.asyncio
async def test_cookies_are_attached_and_persisted(
    http: AsyncHttpClient, mock_transport: MockTransport, store: MemorySessionStore
) -> None:
    mock_transport.add_envelope(None, set_cookies=["PMDATA=abc; Path=/", "bm_sv=tmp; Path=/"])
    mock_transport.add_envelope(None)

    await http.post("/api/first", ignore)
    await http.post("/api/second", ignore)

    assert mock_transport.requests[0].headers.get("Cookie") is None
    assert mock_transport.requests[1].headers["Cookie"] == "PMDATA=abc"

    saved = json.loads(store.cookies)
    assert [c["name"] for c in saved["cookies"]] == ["PMDATA"]


@pytest.mark.asyncio
async def test_cookies_not_saved_when_response_sets_none(
    http: AsyncHttpClient, mock_transport: MockTransport, store: MemorySessionStore
) -> None:
    mock_transport.add_envelope(None)

    await http.post("/api/read", ignore)

    assert store.cookies is None


@pytest.mark.asyncio
async def test_restore_loads_persisted_cookies(
    config: PersonalCapitalConfig, mock_transport: MockTransport
) -> None:
    store = MemorySessionStore()
    async with AsyncHttpClient(config, store=store, transport=mock_transport) as first:
        mock_transport.add_envelope(None, set_cookies=["PMDATA=abc; Path=/"])
        await first.post("/api/first", ignore)

    second = AsyncHttpClient(config, store=store, transport=mock_transport)
    await second.restore()

    assert len(second.cookies) == 1


@pytest.mark.asyncio
async def test_restore_ignores_broken_snapshot(config: PersonalCapitalConfig) -> None:
    client = AsyncHttpClient(config, store=MemorySessionStore(cookies=b"garbage"))

    await client.restore()

    assert len(client.cookies) == 0


# HTTP error tests


@pytest.mark.asyncio
async def test_http_error_status_propagates_without_envelope_parsing(
    http: AsyncHttpClient, mock_transport: MockTransport
) -> None:
    mock_transport.add_response(status_code=httpx.codes.SERVICE_UNAVAILABLE, content=b"<html>")

    with pytest.raises(httpx.HTTPStatusError):
        await http.post("/api/read", ignore)

    assert http.session.auth_level == AuthLevel.NULL


# Header bookkeeping tests


@pytest.mark.asyncio
async def test_csrf_rotation_is_applied_and_saved(
    http: AsyncHttpClient, mock_transport: MockTransport, store: MemorySessionStore
) -> None:
    http.adopt_csrf(CSRF)
    mock_transport.add_envelope(None, csrf=ROTATED_CSRF)

    await http.post("/api/read", ignore)

    assert http.session.csrf == ROTATED_CSRF
    assert store.csrf == ROTATED_CSRF


@pytest.mark.asyncio
async def test_csrf_rotation_applied_even_when_header_has_errors(
    http: AsyncHttpClient, mock_transport: MockTransport
) -> None:
    mock_transport.add_envelope(
        None,
        csrf=ROTATED_CSRF,
        auth_level="USER_IDENTIFIED",
        errors=[{"code": 303, "message": "Invalid code"}],
    )

    with pytest.raises(ServiceError):
        await http.post("/api/credential/authenticateEmailByCode", ignore)

    assert http.session.csrf == ROTATED_CSRF


@pytest.mark.asyncio
async def test_change_id_tracks_maximum(
    http: AsyncHttpClient, mock_transport: MockTransport
) -> None:
    mock_transport.add_envelope(
        None,
        data_changes=[
            {"serverChangeId": 12, "eventType": "USER_ACCOUNT_UPDATED"},
            {"serverChangeId": 15, "eventType": "USER_ACCOUNT_UPDATED"},
        ],
    )
    mock_transport.add_envelope(None, data_changes=[{"serverChangeId": 3}])
    mock_transport.add_envelope(None)

    await http.post("/api/read", ignore, include_change_id=True)
    await http.post("/api/read", ignore, include_change_id=True)
    await http.post("/api/read", ignore, include_change_id=True)

    assert http.session.last_server_change_id == 15
    assert form_of(mock_transport.requests[2])["lastServerChangeId"] == "15"


@pytest.mark.asyncio
async def test_auth_level_updated_from_header(
    http: AsyncHttpClient, mock_transport: MockTransport
) -> None:
    mock_transport.add_envelope(None, auth_level="USER_REMEMBERED")

    await http.post("/api/login/identifyUser", ignore)

    assert http.session.auth_level == AuthLevel.USER_REMEMBERED


@pytest.mark.asyncio
@pytest.mark.parametrize("level", ["SUPER_USER", "NULL", "CSRF", "", None])
async def test_unknown_auth_level_is_never_stored(
    http: AsyncHttpClient, mock_transport: MockTransport, level: str | None
) -> None:
    mock_transport.add_envelope(None, auth_level="USER_IDENTIFIED")
    mock_transport.add_envelope(None, auth_level=level)

    await http.post("/api/login/identifyUser", ignore)
    with pytest.raises(UnexpectedAuthLevelError):
        await http.post("/api/read", ignore)

    assert http.session.auth_level == AuthLevel.USER_IDENTIFIED


@pytest.mark.asyncio
@pytest.mark.parametrize("level", ["USER_REMEMBERED", "USER_IDENTIFIED", "NONE"])
async def test_demotion_from_authenticated_raises_session_invalid(
    http: AsyncHttpClient, mock_transport: MockTransport, level: str
) -> None:
    mock_transport.add_envelope(None, auth_level="SESSION_AUTHENTICATED")
    mock_transport.add_envelope({"name": "x"}, auth_level=level)

    await http.post("/api/read", ignore)
    with pytest.raises(SessionInvalidError):
        await http.post("/api/read", read_name)

    assert http.session.auth_level == AuthLevel(level)


@pytest.mark.asyncio
async def test_error_code_202_raises_session_invalid(
    http: AsyncHttpClient, mock_transport: MockTransport
) -> None:
    mock_transport.add_envelope(
        None,
        auth_level="USER_REMEMBERED",
        errors=[{"code": SPErrorCode.SESSION_INVALID, "message": "Session not authenticated"}],
    )

    with pytest.raises(SessionInvalidError) as exc_info:
        await http.post("/api/read", ignore)

    assert exc_info.value.code == 202
    assert not isinstance(exc_info.value, ServiceError)


@pytest.mark.asyncio
async def test_header_error_short_circuits_payload_decoding(
    http: AsyncHttpClient, mock_transport: MockTransport
) -> None:
    mock_transport.add_envelope(
        {"unexpected": "shape"},
        auth_level="USER_IDENTIFIED",
        errors=[
            {
                "code": 303,
                "message": "Incorrect code",
                "details": {"fieldName": "code", "originalValue": "000000"},
            }
        ],
    )

    with pytest.raises(ServiceError) as exc_info:
        await http.post("/api/credential/authenticateEmailByCode", read_name)

    assert exc_info.value.message == "Incorrect code"
    assert exc_info.value.code == 303
    assert "fieldName=code" in exc_info.value.details


# Decoding tests


@pytest.mark.asyncio
async def test_payload_is_decoded(http: AsyncHttpClient, mock_transport: MockTransport) -> None:
    mock_transport.add_envelope({"name": "checking"})

    assert await http.post("/api/read", read_name) == "checking"


@pytest.mark.asyncio
async def test_non_envelope_body_raises_envelope_error(
    http: AsyncHttpClient, mock_transport: MockTransport
) -> None:
    mock_transport.add_response(content=b"<html>Service unavailable</html>")

    with pytest.raises(EnvelopeDecodeError):
        await http.post("/api/read", ignore)


@pytest.mark.asyncio
async def test_malformed_header_raises_envelope_error(
    http: AsyncHttpClient, mock_transport: MockTransport
) -> None:
    mock_transport.add_response(content=b'{"spHeader": {"errors": [{"message": "no code"}]}}')

    with pytest.raises(EnvelopeDecodeError):
        await http.post("/api/read", ignore)


@pytest.mark.asyncio
async def test_schema_mismatch_reports_context_window(
    http: AsyncHttpClient, mock_transport: MockTransport
) -> None:
    filler = ", ".join(f'"k{i}": {i}' for i in range(60))
    payload = "{" + filler + ', "name": 12345}'
    body = '{"spHeader": {"success": true, "authLevel": "SESSION_AUTHENTICATED"}, "spData": '
    mock_transport.add_response(content=body + payload + "}")

    with pytest.raises(PayloadDecodeError) as exc_info:
        await http.post("/api/read", read_name)

    error = exc_info.value
    assert error.path == "$.name"
    assert payload[error.offset :].startswith("12345")
    assert "12345" in error.context_text
    assert len(error.context_text) <= 200
    assert error.context_text == payload[error.offset - 100 : error.offset + 100]


@pytest.mark.asyncio
async def test_schema_mismatch_on_short_payload_is_clipped(
    http: AsyncHttpClient, mock_transport: MockTransport
) -> None:
    mock_transport.add_envelope({"name": None})

    with pytest.raises(PayloadDecodeError) as exc_info:
        await http.post("/api/read", read_name)

    assert exc_info.value.context_text == '{"name": null}'


@pytest.mark.asyncio
async def test_schema_mismatch_preserves_header_effects(
    http: AsyncHttpClient, mock_transport: MockTransport
) -> None:
    mock_transport.add_response(
        json_data=make_envelope([1, 2], auth_level="USER_REMEMBERED", csrf=ROTATED_CSRF)
    )

    with pytest.raises(PayloadDecodeError):
        await http.post("/api/read", read_name)

    assert http.session.auth_level == AuthLevel.USER_REMEMBERED
    assert http.session.csrf == ROTATED_CSRF


# Helpers


def test_sanitize_for_log_masks_secrets() -> None:
    data = {
        "passwd": "hunter2",
        "csrf": "token",
        "nested": {"code": "123456"},
        "items": [{"username": "jane"}],
        "startDate": "2024-01-01",
    }

    sanitized = sanitize_for_log(data)

    assert sanitized["passwd"] == "***"
    assert sanitized["csrf"] == "***"
    assert sanitized["nested"]["code"] == "***"
    assert sanitized["items"][0]["username"] == "***"
    assert sanitized["startDate"] == "2024-01-01"
