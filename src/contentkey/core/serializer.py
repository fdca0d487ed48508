"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/serializer.py
Canonical byte representation of in-memory values for value digesting.

Encoding: UTF-8 JSON, sorted keys, no whitespace, NaN rejected.
JSON scalars (None, bool, int, float, str) and lists/tuples map directly.
Every JSON object in the output is a type tag {"$type": ..., "value": ...},
so user dicts are wrapped as well and can never be mistaken for a tag.

Strings are encoded exactly as given: no case folding, trimming or Unicode
normalization. Callers decide what counts as "the same" identifier.
"""

import datetime
import json
import math
from decimal import Decimal
from enum import Enum
from pathlib import PurePath
from typing import Any
from uuid import UUID

from contentkey.core.errors import SerializationError


def canonical_bytes(value: Any) -> bytes:
    """
    Serialize `value` to its canonical byte form.

    Raises:
        SerializationError: unsupported type, non-string dict key, NaN/inf,
                            unencodable string or self-referencing container.
    """
    try:
        tree = _to_canonical(value)
        text = json.dumps(tree, sort_keys=True, separators=(",", ":"),
                          ensure_ascii=False, allow_nan=False)
        return text.encode("utf-8")
    except SerializationError:
        raise
    except RecursionError as e:
        raise SerializationError("Value is too deeply nested or self-referencing") from e
    except (ValueError, UnicodeEncodeError) as e:
        raise SerializationError(f"Cannot serialize value: {e}") from e


def _tag(type_name: str, value: Any) -> dict:
    return {"$type": type_name, "value": value}


def _to_canonical(value: Any) -> Any:
    # Order matters: bool before int, Enum before int/str, datetime before date.
    if value is None or isinstance(value, bool):
        return value

    if isinstance(value, Enum):
        cls = type(value)
        return {
            "$type": "enum",
            "name": f"{cls.__qualname__}.{value.name}",
            "value": _to_canonical(value.value),
        }

    if isinstance(value, int):
        return int(value)

    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise SerializationError(f"Non-finite float has no canonical form: {value!r}")
        if value == 0.0:
            return 0.0  # -0.0 == 0.0
        return float(value)

    if isinstance(value, str):
        return str(value)

    if isinstance(value, Decimal):
        return _tag("decimal", _decimal_text(value))

    if isinstance(value, (bytes, bytearray, memoryview)):
        return _tag("bytes", bytes(value).hex())

    if isinstance(value, datetime.datetime):
        return _tag("datetime", value.isoformat())

    if isinstance(value, datetime.date):
        return _tag("date", value.isoformat())

    if isinstance(value, datetime.time):
        return _tag("time", value.isoformat())

    if isinstance(value, UUID):
        return _tag("uuid", str(value))

    if isinstance(value, PurePath):
        return _tag("path", value.as_posix())

    if isinstance(value, (list, tuple)):
        return [_to_canonical(item) for item in value]

    if isinstance(value, dict):
        mapping = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise SerializationError(
                    f"Dictionary keys must be str, got {type(key).__name__}: {key!r}"
                )
            mapping[key] = _to_canonical(item)
        return _tag("map", mapping)

    if isinstance(value, (set, frozenset)):
        members = [_to_canonical(item) for item in value]
        members.sort(key=_member_sort_key)
        return _tag("set", members)

    raise SerializationError(f"No canonical serialization for type {type(value).__name__}")


def _decimal_text(value: Decimal) -> str:
    if not value.is_finite():
        raise SerializationError(f"Non-finite Decimal has no canonical form: {value!r}")
    if value.is_zero():
        return "0"
    return format(value.normalize(), "f")


def _member_sort_key(member: Any) -> bytes:
    return json.dumps(member, sort_keys=True, separators=(",", ":"),
                      ensure_ascii=False, allow_nan=False).encode("utf-8")
