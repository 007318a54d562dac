"""Read and write compatibility checks for a table's protocol."""

from __future__ import annotations

import logging

from delta_features.catalog import TABLE_FEATURES, FeatureRegistry
from delta_features.errors import (
    UnsupportedReaderFeaturesError,
    UnsupportedReaderProtocolError,
    UnsupportedWriterFeaturesError,
    UnsupportedWriterProtocolError,
)
from delta_features.metadata import Metadata
from delta_features.protocol import Protocol
from delta_features.serde import StructBaseCompat
from delta_features.settings import DEFAULT_SUPPORT, ProtocolSupport

_LOGGER = logging.getLogger(__name__)


class ProtocolCompatibility(StructBaseCompat, frozen=True, kw_only=True):
    """Compatibility evaluation for a protocol and, optionally, its metadata."""

    readable: bool
    writable: bool | None = None
    required_reader_version: int
    required_writer_version: int
    supported_reader_version: int
    supported_writer_version: int
    reader_version_ok: bool
    writer_version_ok: bool
    supported_features: tuple[str, ...] = ()
    unreadable_features: tuple[str, ...] = ()
    unwritable_features: tuple[str, ...] = ()


def _unreadable_features(protocol: Protocol, registry: FeatureRegistry) -> tuple[str, ...]:
    return tuple(
        sorted(
            feature.name
            for feature in protocol.supported_features(registry)
            if not feature.has_read_support()
        )
    )


def _unwritable_features(
    protocol: Protocol,
    metadata: Metadata,
    registry: FeatureRegistry,
) -> tuple[str, ...]:
    return tuple(
        sorted(
            feature.name
            for feature in protocol.supported_features(registry)
            if not feature.has_write_support(metadata)
        )
    )


def validate_can_read(
    protocol: Protocol,
    table_id: str,
    *,
    support: ProtocolSupport = DEFAULT_SUPPORT,
    registry: FeatureRegistry = TABLE_FEATURES,
) -> None:
    """Validate that a table with ``protocol`` can be read.

    Parameters
    ----------
    protocol
        Protocol of the table.
    table_id
        Table path or identifier used in error messages.
    support
        Highest supported protocol versions.
    registry
        Registry used to resolve listed feature names.

    Raises
    ------
    UnsupportedReaderProtocolError
        Raised when the reader version exceeds the supported maximum.
    UnsupportedReaderFeaturesError
        Raised with every supported feature that cannot be read.
    """
    if protocol.min_reader_version > support.max_reader_version:
        raise UnsupportedReaderProtocolError(table_id, protocol.min_reader_version)
    unsupported = _unreadable_features(protocol, registry)
    if unsupported:
        raise UnsupportedReaderFeaturesError(table_id, unsupported)


def validate_can_write(
    protocol: Protocol,
    metadata: Metadata,
    table_id: str,
    *,
    support: ProtocolSupport = DEFAULT_SUPPORT,
    registry: FeatureRegistry = TABLE_FEATURES,
) -> None:
    """Validate that a table with ``protocol`` and ``metadata`` can be written.

    Read compatibility is checked first. Write support depends on the
    metadata: the same feature may block one table and not another.

    Raises
    ------
    UnsupportedWriterProtocolError
        Raised when the writer version exceeds the supported maximum.
    UnsupportedWriterFeaturesError
        Raised with every supported feature that cannot be written.
    """
    validate_can_read(protocol, table_id, support=support, registry=registry)
    if protocol.min_writer_version > support.max_writer_version:
        raise UnsupportedWriterProtocolError(table_id, protocol.min_writer_version)
    unsupported = _unwritable_features(protocol, metadata, registry)
    if unsupported:
        raise UnsupportedWriterFeaturesError(table_id, unsupported)


def protocol_compatibility(
    protocol: Protocol,
    metadata: Metadata | None = None,
    *,
    support: ProtocolSupport = DEFAULT_SUPPORT,
    registry: FeatureRegistry = TABLE_FEATURES,
) -> ProtocolCompatibility:
    """Evaluate compatibility without raising.

    Feature checks run only when the corresponding version check passes;
    ``writable`` is ``None`` when no metadata is supplied.

    Returns
    -------
    ProtocolCompatibility
        Verdicts plus the features that block reading or writing.
    """
    reader_ok = protocol.min_reader_version <= support.max_reader_version
    writer_ok = protocol.min_writer_version <= support.max_writer_version
    unreadable = _unreadable_features(protocol, registry) if reader_ok else ()
    readable = reader_ok and not unreadable
    writable: bool | None = None
    unwritable: tuple[str, ...] = ()
    if metadata is not None:
        if readable and writer_ok:
            unwritable = _unwritable_features(protocol, metadata, registry)
        writable = readable and writer_ok and not unwritable
    report = ProtocolCompatibility(
        readable=readable,
        writable=writable,
        required_reader_version=protocol.min_reader_version,
        required_writer_version=protocol.min_writer_version,
        supported_reader_version=support.max_reader_version,
        supported_writer_version=support.max_writer_version,
        reader_version_ok=reader_ok,
        writer_version_ok=writer_ok,
        supported_features=tuple(
            sorted(feature.name for feature in protocol.supported_features(registry))
        ),
        unreadable_features=unreadable,
        unwritable_features=unwritable,
    )
    _LOGGER.debug("Protocol compatibility: %s", report)
    return report


__all__ = [
    "ProtocolCompatibility",
    "protocol_compatibility",
    "validate_can_read",
    "validate_can_write",
]
