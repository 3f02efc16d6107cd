"""Typed bindings for the remote operations, one module per resource."""

import json
from collections.abc import Iterable
from datetime import date

from personalcapital.models.reader import FieldReader


def format_date(value: date) -> str:
    """Dates go over the wire as ``YYYY-MM-DD``."""
    return value.isoformat()


def format_ids(ids: Iterable[int]) -> str:
    """Account id lists go over the wire as a JSON array."""
    return json.dumps([int(i) for i in ids])


def ignore_payload(r: FieldReader) -> None:
    """Decoder for endpoints whose spData carries nothing of interest."""
    return None
