"""
Path-tracking accessors for decoding JSON payloads into dataclasses.

Every schema reads its fields through a FieldReader so that a shape mismatch
reports the exact JSON path that failed. The HTTP client turns that path into
an offset inside the raw payload text.
"""

import math
from collections.abc import Callable
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, TypeVar

T = TypeVar("T")
E = TypeVar("E", bound=Enum)

JsonPath = tuple[str | int, ...]

_MISSING = object()


def format_path(path: JsonPath) -> str:
    """Render a JSON path as ``$.accounts[3].balance``."""
    out = "$"
    for part in path:
        out += f"[{part}]" if isinstance(part, int) else f".{part}"
    return out


class SchemaMismatch(Exception):
    """A payload value does not have the expected shape."""

    def __init__(self, message: str, path: JsonPath) -> None:
        super().__init__(f"{message} at {format_path(path)}")
        self.reason = message
        self.path = path


class FieldReader:
    """Read typed fields out of a decoded JSON value, remembering where they came from."""

    __slots__ = ("_value", "path")

    def __init__(self, value: Any, path: JsonPath = ()) -> None:
        self._value = value
        self.path = path

    @property
    def value(self) -> Any:
        return self._value

    def fail(self, message: str, key: str | int | None = None) -> SchemaMismatch:
        path = self.path if key is None else (*self.path, key)
        return SchemaMismatch(message, path)

    def _obj(self) -> dict[str, Any]:
        if not isinstance(self._value, dict):
            raise self.fail(f"expected object, got {_kind(self._value)}")
        return self._value

    def _get(self, key: str, optional: bool) -> Any:
        value = self._obj().get(key, _MISSING)
        if value is _MISSING or value is None:
            if optional:
                return None
            raise self.fail("missing field" if value is _MISSING else "null value", key)
        return value

    def child(self, key: str | int) -> "FieldReader":
        if isinstance(key, int):
            if not isinstance(self._value, list):
                raise self.fail(f"expected array, got {_kind(self._value)}")
            return FieldReader(self._value[key], (*self.path, key))
        return FieldReader(self._get(key, optional=False), (*self.path, key))

    def has(self, key: str) -> bool:
        return self._obj().get(key) is not None

    # Scalars

    def string(self, key: str) -> str:
        value = self._get(key, optional=False)
        if not isinstance(value, str):
            raise self.fail(f"expected string, got {_kind(value)}", key)
        return value

    def opt_string(self, key: str) -> str | None:
        if self._get(key, optional=True) is None:
            return None
        return self.string(key)

    def integer(self, key: str) -> int:
        value = self._get(key, optional=False)
        if isinstance(value, bool) or not isinstance(value, int):
            if isinstance(value, float) and value.is_integer():
                return int(value)
            raise self.fail(f"expected integer, got {_kind(value)}", key)
        return value

    def opt_integer(self, key: str) -> int | None:
        if self._get(key, optional=True) is None:
            return None
        return self.integer(key)

    def number(self, key: str) -> float:
        value = self._get(key, optional=False)
        if isinstance(value, bool):
            raise self.fail("expected number, got boolean", key)
        if isinstance(value, int | float):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                raise self.fail(f"expected number, got string {value!r}", key) from None
        raise self.fail(f"expected number, got {_kind(value)}", key)

    def opt_number(self, key: str) -> float | None:
        if self._get(key, optional=True) is None:
            return None
        return self.number(key)

    def lenient_number(self, key: str) -> float | None:
        """Number that the service sometimes replaces with ``"NaN"`` or junk: those become None."""
        value = self._get(key, optional=True)
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, int | float):
            return None if math.isnan(value) else float(value)
        if isinstance(value, str):
            try:
                number = float(value)
            except ValueError:
                return None
            return None if math.isnan(number) else number
        return None

    def boolean(self, key: str) -> bool:
        value = self._get(key, optional=False)
        if not isinstance(value, bool):
            raise self.fail(f"expected boolean, got {_kind(value)}", key)
        return value

    def opt_boolean(self, key: str) -> bool | None:
        if self._get(key, optional=True) is None:
            return None
        return self.boolean(key)

    def enum(self, key: str, enum_type: type[E], default: E | None = None) -> E:
        value = self._get(key, optional=default is not None)
        if value is None:
            return default
        try:
            return enum_type(value)
        except ValueError:
            raise self.fail(f"unknown {enum_type.__name__} {value!r}", key) from None

    def opt_enum(self, key: str, enum_type: type[E]) -> E | None:
        if self._get(key, optional=True) is None:
            return None
        return self.enum(key, enum_type)

    def iso_date(self, key: str) -> date:
        value = self.string(key)
        try:
            return date.fromisoformat(value)
        except ValueError:
            raise self.fail(f"expected YYYY-MM-DD date, got {value!r}", key) from None

    def opt_iso_date(self, key: str) -> date | None:
        """Date where both null and the empty string mean absent."""
        value = self._get(key, optional=True)
        if value is None or value == "":
            return None
        return self.iso_date(key)

    def timestamp_ms(self, key: str) -> datetime | None:
        """Milliseconds since the epoch, as an aware UTC datetime."""
        value = self._get(key, optional=True)
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise self.fail(f"expected millisecond timestamp, got {_kind(value)}", key)
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)

    def raw(self, key: str) -> Any:
        return self._get(key, optional=True)

    # Containers

    def object(self, key: str, parse: Callable[["FieldReader"], T]) -> T:
        return parse(self.child(key))

    def opt_object(self, key: str, parse: Callable[["FieldReader"], T]) -> T | None:
        if self._get(key, optional=True) is None:
            return None
        return self.object(key, parse)

    def array(self, key: str, parse: Callable[["FieldReader"], T]) -> list[T]:
        return self.child(key).as_list(parse)

    def opt_array(self, key: str, parse: Callable[["FieldReader"], T]) -> list[T] | None:
        if self._get(key, optional=True) is None:
            return None
        return self.array(key, parse)

    def mapping(self, key: str, parse: Callable[["FieldReader"], T]) -> dict[str, T]:
        return self.child(key).as_mapping(parse)

    def opt_mapping(self, key: str, parse: Callable[["FieldReader"], T]) -> dict[str, T] | None:
        if self._get(key, optional=True) is None:
            return None
        return self.mapping(key, parse)

    def as_list(self, parse: Callable[["FieldReader"], T]) -> list[T]:
        if not isinstance(self._value, list):
            raise self.fail(f"expected array, got {_kind(self._value)}")
        return [parse(FieldReader(item, (*self.path, i))) for i, item in enumerate(self._value)]

    def as_mapping(self, parse: Callable[["FieldReader"], T]) -> dict[str, T]:
        return {k: parse(FieldReader(v, (*self.path, k))) for k, v in self._obj().items()}

    # Value-level readers for list items and mapping values

    def as_string(self) -> str:
        if not isinstance(self._value, str):
            raise self.fail(f"expected string, got {_kind(self._value)}")
        return self._value

    def as_integer(self) -> int:
        if isinstance(self._value, bool) or not isinstance(self._value, int):
            raise self.fail(f"expected integer, got {_kind(self._value)}")
        return self._value

    def as_number(self) -> float:
        if isinstance(self._value, bool) or not isinstance(self._value, int | float):
            raise self.fail(f"expected number, got {_kind(self._value)}")
        return float(self._value)

    def as_number_or_string(self) -> float | str:
        if isinstance(self._value, str):
            return self._value
        return self.as_number()


def _kind(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int | float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__
