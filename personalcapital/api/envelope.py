"""
Two-part response envelope handling.

Every response body is ``{"spHeader": {...}, "spData": <any>}``. The header is
decoded right away; spData is kept as raw text until the header has been
checked for errors, so an error payload never gets forced through an
endpoint schema.
"""

import json
import re
from dataclasses import dataclass
from typing import Any

from personalcapital.exceptions import EnvelopeDecodeError
from personalcapital.models.reader import JsonPath

HEADER_KEY = "spHeader"
PAYLOAD_KEY = "spData"

_WHITESPACE = re.compile(r"[ \t\n\r]*")
_decoder = json.JSONDecoder()


@dataclass(frozen=True, slots=True)
class RawEnvelope:
    """Decoded header plus the untouched spData text."""

    header: dict[str, Any]
    payload: str


def split_envelope(body: str) -> RawEnvelope:
    """
    Split a response body into its header and raw payload text.

    Args:
        body: Full response text.

    Returns:
        RawEnvelope with the parsed header and the spData text ("null" if absent).

    Raises:
        EnvelopeDecodeError: If the body is not a single JSON object with an spHeader object.
    """
    header: Any = None
    payload = "null"
    end = 0

    try:
        for key, start, end in _iter_members(body, 0):
            if key == HEADER_KEY:
                header, _ = _decoder.raw_decode(body, start)
            elif key == PAYLOAD_KEY:
                payload = body[start:end]
    except (ValueError, IndexError) as e:
        msg = "Response is not a valid JSON envelope"
        raise EnvelopeDecodeError(msg, error=str(e)) from e

    if not isinstance(header, dict):
        msg = "Response envelope has no spHeader object"
        raise EnvelopeDecodeError(msg)

    # end is the last member value; skip its closing brace
    rest = _skip_ws(body, _skip_ws(body, end) + 1)
    if rest != len(body):
        msg = "Response envelope has trailing data"
        raise EnvelopeDecodeError(msg, offset=rest)

    return RawEnvelope(header=header, payload=payload)


def locate(text: str, path: JsonPath) -> int:
    """
    Find the offset of the value at ``path`` inside a JSON document.

    Walks the text without building the document. When the path cannot be
    followed all the way, the offset of the deepest value reached is returned.

    Args:
        text: JSON text.
        path: Object keys and array indices leading to the value.

    Returns:
        Offset of the first character of the value.
    """
    pos = _skip_ws(text, 0)
    try:
        for part in path:
            found = None
            if isinstance(part, int):
                for index, start, _ in _iter_items(text, pos):
                    if index == part:
                        found = start
                        break
            else:
                for key, start, _ in _iter_members(text, pos):
                    if key == part:
                        found = start
                        break
            if found is None:
                return pos
            pos = found
    except (ValueError, IndexError):
        return pos
    return pos


def context_window(text: str, offset: int, radius: int) -> str:
    """Return ``text[offset - radius : offset + radius]``, clipped to the string."""
    offset = min(max(offset, 0), len(text))
    return text[max(offset - radius, 0) : offset + radius]


def _skip_ws(text: str, pos: int) -> int:
    return _WHITESPACE.match(text, pos).end()


def _iter_members(text: str, pos: int):
    """Yield (key, value_start, value_end) for each member of the object at ``pos``."""
    pos = _skip_ws(text, pos)
    if text[pos] != "{":
        msg = f"expected object at offset {pos}"
        raise ValueError(msg)
    pos = _skip_ws(text, pos + 1)
    if text[pos] == "}":
        return
    while True:
        key, pos = _decoder.raw_decode(text, pos)
        if not isinstance(key, str):
            msg = f"expected string key at offset {pos}"
            raise ValueError(msg)
        pos = _skip_ws(text, pos)
        if text[pos] != ":":
            msg = f"expected ':' at offset {pos}"
            raise ValueError(msg)
        start = _skip_ws(text, pos + 1)
        _, end = _decoder.raw_decode(text, start)
        yield key, start, end
        pos = _skip_ws(text, end)
        if text[pos] == "}":
            return
        if text[pos] != ",":
            msg = f"expected ',' or '}}' at offset {pos}"
            raise ValueError(msg)
        pos = _skip_ws(text, pos + 1)


def _iter_items(text: str, pos: int):
    """Yield (index, value_start, value_end) for each element of the array at ``pos``."""
    pos = _skip_ws(text, pos)
    if text[pos] != "[":
        msg = f"expected array at offset {pos}"
        raise ValueError(msg)
    pos = _skip_ws(text, pos + 1)
    if text[pos] == "]":
        return
    index = 0
    while True:
        _, end = _decoder.raw_decode(text, pos)
        yield index, pos, end
        pos = _skip_ws(text, end)
        if text[pos] == "]":
            return
        if text[pos] != ",":
            msg = f"expected ',' or ']' at offset {pos}"
            raise ValueError(msg)
        pos = _skip_ws(text, pos + 1)
        index += 1
