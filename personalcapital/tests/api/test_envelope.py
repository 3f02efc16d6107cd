"""Tests for envelope splitting and payload offset lookup."""

import json

import pytest

from personalcapital.api.envelope import context_window, locate, split_envelope
from personalcapital.exceptions import EnvelopeDecodeError


def test_split_envelope_keeps_payload_raw() -> None:
    body = '{"spHeader": {"success": true}, "spData": {"a": [1, 2.50]}}'

    envelope = split_envelope(body)

    assert envelope.header == {"success": True}
    assert envelope.payload == '{"a": [1, 2.50]}'


def test_split_envelope_payload_defaults_to_null() -> None:
    envelope = split_envelope('{"spHeader": {"success": false}}')

    assert envelope.payload == "null"


def test_split_envelope_payload_not_forced_into_shape() -> None:
    envelope = split_envelope('{"spData": "error text", "spHeader": {"success": false}}')

    assert json.loads(envelope.payload) == "error text"


@pytest.mark.parametrize(
    "body",
    [
        "<html>maintenance</html>",
        "",
        "[]",
        '{"spData": {}}',
        '{"spHeader": "nope"}',
        '{"spHeader": {"success": true}, "spData": ',
        '{"spHeader": {"authLevel": "NONE"}, "spData": 1} garbage',
        '{"spHeader": {}}{}',
    ],
)
def test_split_envelope_rejects_malformed_bodies(body: str) -> None:
    with pytest.raises(EnvelopeDecodeError):
        split_envelope(body)


def test_split_envelope_allows_trailing_whitespace() -> None:
    envelope = split_envelope('{"spHeader": {"authLevel": "NONE"}, "spData": 1}\r\n ')

    assert envelope.header == {"authLevel": "NONE"}
    assert envelope.payload == "1"


def test_locate_finds_nested_value() -> None:
    text = '{"accounts": [{"name": "a"}, {"name": "b", "balance": "x"}]}'

    offset = locate(text, ("accounts", 1, "balance"))

    assert text[offset:].startswith('"x"')


def test_locate_returns_deepest_reached_when_path_runs_out() -> None:
    text = '{"accounts": [{"name": "a"}]}'

    offset = locate(text, ("accounts", 0, "missing"))

    assert text[offset:].startswith('{"name"')


def test_locate_empty_path_is_document_start() -> None:
    assert locate("  [1]", ()) == 2


def test_context_window_is_centered_and_bounded() -> None:
    text = "a" * 300 + "X" + "b" * 300

    window = context_window(text, 300, 100)

    assert len(window) == 200
    assert window[100] == "X"


@pytest.mark.parametrize("offset", [-5, 0, 3, 999])
def test_context_window_clips_short_strings(offset: int) -> None:
    assert context_window("abc", offset, 100) == "abc"
