"""Immutable table-feature descriptors."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from delta_features.metadata import Metadata
    from delta_features.protocol import Protocol

AutoEnablePredicate = Callable[["Protocol", "Metadata"], bool]
ReadSupport = Callable[[], bool]
WriteSupport = Callable[["Metadata"], bool]


class FeatureKind(StrEnum):
    """How a feature is recognized and which code paths it affects."""

    LEGACY_WRITER_ONLY = "legacy_writer_only"
    LEGACY_READER_WRITER = "legacy_reader_writer"
    MODERN_WRITER_ONLY = "modern_writer_only"
    MODERN_READER_WRITER = "modern_reader_writer"

    @property
    def is_legacy(self) -> bool:
        return self in {FeatureKind.LEGACY_WRITER_ONLY, FeatureKind.LEGACY_READER_WRITER}

    @property
    def is_reader_writer(self) -> bool:
        return self in {FeatureKind.LEGACY_READER_WRITER, FeatureKind.MODERN_READER_WRITER}


def _always_readable() -> bool:
    return True


def _always_writable(_metadata: Metadata) -> bool:
    return True


@dataclass(frozen=True, eq=False)
class TableFeature:
    """Definition of one named table capability.

    Parameters
    ----------
    name
        Wire-level feature name. Persisted verbatim; matched case-insensitively.
    kind
        Legacy features are implied by protocol versions; modern ones must be
        listed by name.
    min_reader_version
        Smallest reader version under which the feature is legal. Writer-only
        features use ``0``.
    min_writer_version
        Smallest writer version under which the feature is legal.
    required_features
        Names of features that must be supported whenever this one is.
    auto_enable
        Optional metadata rule that requires the feature to be supported.
    read_support
        Whether this implementation can read tables that use the feature.
    write_support
        Whether this implementation can write a table with the given metadata.
    """

    name: str
    kind: FeatureKind
    min_reader_version: int
    min_writer_version: int
    required_features: tuple[str, ...] = ()
    auto_enable: AutoEnablePredicate | None = None
    read_support: ReadSupport = _always_readable
    write_support: WriteSupport = _always_writable

    @property
    def key(self) -> str:
        """Case-folded identity of the feature."""
        return self.name.casefold()

    @property
    def is_legacy(self) -> bool:
        return self.kind.is_legacy

    @property
    def is_reader_writer(self) -> bool:
        return self.kind.is_reader_writer

    @property
    def is_auto_enabled_by_metadata(self) -> bool:
        return self.auto_enable is not None

    def has_read_support(self) -> bool:
        return self.read_support()

    def has_write_support(self, metadata: Metadata) -> bool:
        return self.write_support(metadata)

    def auto_enable_required(self, protocol: Protocol, metadata: Metadata) -> bool:
        """Return whether ``metadata`` requires this feature to be supported.

        Raises
        ------
        TypeError
            Raised when the feature cannot be enabled from metadata.
        """
        if self.auto_enable is None:
            msg = f"Feature {self.name!r} is not auto-enabled by metadata."
            raise TypeError(msg)
        return self.auto_enable(protocol, metadata)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TableFeature):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __repr__(self) -> str:
        return f"TableFeature({self.name!r})"


__all__ = [
    "AutoEnablePredicate",
    "FeatureKind",
    "ReadSupport",
    "TableFeature",
    "WriteSupport",
]
