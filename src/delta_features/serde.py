"""msgspec base structs and JSON codec helpers."""

from __future__ import annotations

from typing import TypeVar

import msgspec

T = TypeVar("T")


class StructBaseStrict(
    msgspec.Struct,
    frozen=True,
    kw_only=True,
    omit_defaults=True,
    repr_omit_defaults=True,
    forbid_unknown_fields=True,
):
    """Base for in-memory values; unknown fields are rejected on decode."""


class StructBaseCompat(
    msgspec.Struct,
    frozen=True,
    kw_only=True,
    omit_defaults=True,
    repr_omit_defaults=True,
    forbid_unknown_fields=False,
):
    """Base for wire payloads; fields added by newer writers are ignored."""


# Struct fields encode in declaration order, dict and set members sorted.
JSON_ENCODER = msgspec.json.Encoder(order="deterministic")


def dumps_json(obj: object) -> bytes:
    """Encode ``obj`` as compact JSON with deterministic key order."""
    return JSON_ENCODER.encode(obj)


def loads_json(buf: bytes | str, *, target_type: type[T]) -> T:
    """Decode JSON straight into ``target_type``, validating as it goes.

    Raises
    ------
    msgspec.ValidationError
        Raised when the payload does not match ``target_type``.
    """
    return msgspec.json.decode(buf, type=target_type, strict=True)


def convert(obj: object, *, target_type: type[T]) -> T:
    """Validate already-decoded builtins against ``target_type``."""
    return msgspec.convert(obj, type=target_type, strict=True)


__all__ = [
    "JSON_ENCODER",
    "StructBaseCompat",
    "StructBaseStrict",
    "convert",
    "dumps_json",
    "loads_json",
]
