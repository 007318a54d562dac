"""Runtime support bounds for protocol validation."""

from __future__ import annotations

import logging
import os
from typing import Annotated

import msgspec

from delta_features.catalog import (
    TABLE_FEATURES_MIN_READER_VERSION,
    TABLE_FEATURES_MIN_WRITER_VERSION,
)
from delta_features.serde import StructBaseStrict

_LOGGER = logging.getLogger(__name__)

MAX_READER_VERSION_ENV = "DELTA_FEATURES_MAX_READER_VERSION"
MAX_WRITER_VERSION_ENV = "DELTA_FEATURES_MAX_WRITER_VERSION"

PositiveInt = Annotated[int, msgspec.Meta(ge=1)]


class ProtocolSupport(StructBaseStrict, frozen=True):
    """Highest protocol versions this implementation can read and write.

    Parameters
    ----------
    max_reader_version:
        Maximum reader protocol version supported.
    max_writer_version:
        Maximum writer protocol version supported.
    """

    max_reader_version: PositiveInt = TABLE_FEATURES_MIN_READER_VERSION
    max_writer_version: PositiveInt = TABLE_FEATURES_MIN_WRITER_VERSION


DEFAULT_SUPPORT = ProtocolSupport()


def _env_version(name: str, *, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        _LOGGER.warning("Invalid integer for %s: %r", name, raw)
        return default
    if value < 1:
        _LOGGER.warning("Protocol version for %s must be >= 1, got %d", name, value)
        return default
    return value


def support_from_env() -> ProtocolSupport:
    """Return support bounds, honoring environment overrides.

    Invalid values are logged and replaced by the defaults.
    """
    return ProtocolSupport(
        max_reader_version=_env_version(
            MAX_READER_VERSION_ENV,
            default=DEFAULT_SUPPORT.max_reader_version,
        ),
        max_writer_version=_env_version(
            MAX_WRITER_VERSION_ENV,
            default=DEFAULT_SUPPORT.max_writer_version,
        ),
    )


__all__ = [
    "DEFAULT_SUPPORT",
    "MAX_READER_VERSION_ENV",
    "MAX_WRITER_VERSION_ENV",
    "ProtocolSupport",
    "support_from_env",
]
