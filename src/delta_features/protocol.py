"""Protocol value and protocol algebra.

A protocol supports a feature either implicitly, because its versions alone
imply it (legacy features on protocols that cannot list features by name), or
explicitly, because the feature name appears in its reader or writer feature
set. Once a protocol can list features by name, nothing is implicit anymore and
legacy features have to be listed as well.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Annotated, Any

import msgspec

from delta_features.catalog import (
    CATALOG_MANAGED_PREVIEW,
    CLUSTERING,
    DOMAIN_METADATA,
    ROW_TRACKING,
    TABLE_FEATURES,
    TABLE_FEATURES_MIN_WRITER_VERSION,
    FeatureRegistry,
    supports_reader_features,
    supports_writer_features,
)
from delta_features.closure import dependency_closure
from delta_features.descriptor import TableFeature
from delta_features.serde import (
    StructBaseCompat,
    StructBaseStrict,
    convert,
    dumps_json,
    loads_json,
)

Version = Annotated[int, msgspec.Meta(ge=1)]


def minimum_required_versions(features: Iterable[TableFeature]) -> tuple[int, int]:
    """Return the ``(reader, writer)`` versions needed by ``features``.

    Both versions are floored at 1, so an empty set yields ``(1, 1)``.
    """
    reader_version = 1
    writer_version = 1
    for feature in features:
        reader_version = max(reader_version, feature.min_reader_version)
        writer_version = max(writer_version, feature.min_writer_version)
    return reader_version, writer_version


def _with_name(names: frozenset[str], feature: TableFeature) -> frozenset[str]:
    if any(name.casefold() == feature.key for name in names):
        return names
    return names | {feature.name}


class ProtocolAction(StructBaseCompat, frozen=True, rename="camel"):
    """Wire form of a Delta ``protocol`` action."""

    min_reader_version: Version
    min_writer_version: Version
    reader_features: list[str] | None = None
    writer_features: list[str] | None = None


class Protocol(StructBaseStrict, frozen=True):
    """Minimum reader/writer versions plus explicitly listed features.

    Explicit names are kept exactly as stored so they persist byte for byte;
    membership is resolved case-insensitively through the registry.
    """

    min_reader_version: Version = 1
    min_writer_version: Version = 1
    reader_features: frozenset[str] = frozenset()
    writer_features: frozenset[str] = frozenset()

    # ------------------------------------------------------------------
    # Wire form
    # ------------------------------------------------------------------

    @classmethod
    def from_action(cls, payload: Mapping[str, Any]) -> Protocol:
        """Build a protocol from a decoded ``protocol`` action payload."""
        return cls._from_wire(convert(payload, target_type=ProtocolAction))

    @classmethod
    def from_json(cls, payload: bytes | str) -> Protocol:
        """Decode a JSON ``protocol`` action.

        Raises
        ------
        msgspec.ValidationError
            Raised when a version is missing or below 1.
        """
        return cls._from_wire(loads_json(payload, target_type=ProtocolAction))

    @classmethod
    def _from_wire(cls, action: ProtocolAction) -> Protocol:
        return cls(
            min_reader_version=action.min_reader_version,
            min_writer_version=action.min_writer_version,
            reader_features=frozenset(action.reader_features or ()),
            writer_features=frozenset(action.writer_features or ()),
        )

    def to_json(self) -> bytes:
        return dumps_json(self.to_action())

    def to_action(self) -> ProtocolAction:
        """Return the wire form; feature lists appear only where allowed."""
        return ProtocolAction(
            min_reader_version=self.min_reader_version,
            min_writer_version=self.min_writer_version,
            reader_features=(
                sorted(self.reader_features) if self.supports_reader_features else None
            ),
            writer_features=(
                sorted(self.writer_features) if self.supports_writer_features else None
            ),
        )

    # ------------------------------------------------------------------
    # Supported features
    # ------------------------------------------------------------------

    @property
    def supports_reader_features(self) -> bool:
        return supports_reader_features(self.min_reader_version)

    @property
    def supports_writer_features(self) -> bool:
        return supports_writer_features(self.min_writer_version)

    def implicitly_supported_features(
        self,
        registry: FeatureRegistry = TABLE_FEATURES,
    ) -> frozenset[TableFeature]:
        """Return legacy features implied by the versions alone."""
        if self.supports_reader_features or self.supports_writer_features:
            return frozenset()
        return frozenset(
            feature
            for feature in registry.all()
            if feature.is_legacy
            and feature.min_reader_version <= self.min_reader_version
            and feature.min_writer_version <= self.min_writer_version
        )

    def explicitly_supported_features(
        self,
        registry: FeatureRegistry = TABLE_FEATURES,
    ) -> frozenset[TableFeature]:
        """Resolve the listed reader and writer feature names.

        A feature set only counts when its version allows listing; names left
        in a set below that threshold are ignored.

        Raises
        ------
        UnknownFeatureError
            Raised when a listed name is not in the registry.
        """
        names: frozenset[str] = frozenset()
        if self.supports_reader_features:
            names |= self.reader_features
        if self.supports_writer_features:
            names |= self.writer_features
        return frozenset(registry.lookup(name) for name in names)

    def supported_features(
        self,
        registry: FeatureRegistry = TABLE_FEATURES,
    ) -> frozenset[TableFeature]:
        """Return implicitly and explicitly supported features."""
        return self.implicitly_supported_features(registry) | self.explicitly_supported_features(
            registry
        )

    def supports_feature(self, feature: TableFeature) -> bool:
        return feature in self.supported_features()

    # ------------------------------------------------------------------
    # Transformations
    # ------------------------------------------------------------------

    def with_features(self, features: Iterable[TableFeature]) -> Protocol:
        """Return a protocol that also supports ``features`` and their dependencies.

        Versions are raised to whatever the added features need. When that
        turns on feature listing, everything this protocol already supported is
        listed too, so no feature is lost.

        Parameters
        ----------
        features
            Features to add.

        Returns
        -------
        Protocol
            New protocol; reader-writer features are listed on both sides when
            the reader version allows it, all features on the writer side when
            the writer version allows it.
        """
        added = dependency_closure(features)
        required_reader, required_writer = minimum_required_versions(added)
        reader_version = max(self.min_reader_version, required_reader)
        writer_version = max(self.min_writer_version, required_writer)
        lists_reader = supports_reader_features(reader_version)
        lists_writer = supports_writer_features(writer_version)
        reader_names = self.reader_features if self.supports_reader_features else frozenset()
        writer_names = self.writer_features if self.supports_writer_features else frozenset()
        if (lists_reader and not self.supports_reader_features) or (
            lists_writer and not self.supports_writer_features
        ):
            added |= self.supported_features()
        for feature in sorted(added, key=lambda item: item.key):
            if feature.is_reader_writer and lists_reader:
                reader_names = _with_name(reader_names, feature)
            if lists_writer:
                writer_names = _with_name(writer_names, feature)
        return Protocol(
            min_reader_version=reader_version,
            min_writer_version=writer_version,
            reader_features=reader_names,
            writer_features=writer_names,
        )

    def normalized(self) -> Protocol:
        """Return the smallest equivalent protocol.

        Protocols that cannot list writer features keep their versions and drop
        every feature set their versions do not allow. Listing protocols whose
        features are all implied by some pair of legacy versions collapse to
        that pure-version protocol. Otherwise the reader version drops to what
        the features need and every supported feature stays listed. Explicit
        entries are never pruned unless implied.
        """
        if not self.supports_writer_features:
            return Protocol(
                min_reader_version=self.min_reader_version,
                min_writer_version=self.min_writer_version,
                reader_features=(
                    self.reader_features if self.supports_reader_features else frozenset()
                ),
            )
        supported = self.supported_features()
        reader_version, writer_version = minimum_required_versions(supported)
        candidate = Protocol(min_reader_version=reader_version, min_writer_version=writer_version)
        if candidate.supported_features() == supported:
            return candidate
        return Protocol(
            min_reader_version=reader_version,
            min_writer_version=TABLE_FEATURES_MIN_WRITER_VERSION,
        ).with_features(supported)

    def denormalized(self) -> Protocol:
        """Return the pure-version protocol for a listing protocol with only legacy features."""
        if not self.supports_writer_features:
            return self.normalized()
        supported = self.supported_features()
        if not all(feature.is_legacy for feature in supported):
            return self
        reader_version, writer_version = minimum_required_versions(supported)
        return Protocol(min_reader_version=reader_version, min_writer_version=writer_version)

    def can_upgrade_to(self, other: Protocol) -> bool:
        """Return whether ``other`` supports every feature this protocol supports."""
        return self.supported_features() <= other.supported_features()

    def merge(self, *others: Protocol) -> Protocol:
        """Return a protocol supporting everything this and ``others`` support."""
        protocols = (self, *others)
        merged_features: set[TableFeature] = set()
        for protocol in protocols:
            merged_features |= protocol.supported_features()
        merged = Protocol(
            min_reader_version=max(protocol.min_reader_version for protocol in protocols),
            min_writer_version=max(protocol.min_writer_version for protocol in protocols),
        ).with_features(merged_features)
        if merged.supports_writer_features:
            return merged.normalized()
        return merged


def is_subset_of(protocol: Protocol, other: Protocol) -> bool:
    """Return whether ``protocol`` needs nothing beyond what ``other`` supports."""
    return protocol.can_upgrade_to(other)


def is_catalog_managed_supported(protocol: Protocol) -> bool:
    return protocol.supports_feature(CATALOG_MANAGED_PREVIEW)


def is_row_tracking_supported(protocol: Protocol) -> bool:
    return protocol.supports_feature(ROW_TRACKING)


def is_domain_metadata_supported(protocol: Protocol) -> bool:
    return protocol.supports_feature(DOMAIN_METADATA)


def is_clustering_supported(protocol: Protocol) -> bool:
    return protocol.supports_feature(CLUSTERING)


__all__ = [
    "Protocol",
    "ProtocolAction",
    "is_catalog_managed_supported",
    "is_clustering_supported",
    "is_domain_metadata_supported",
    "is_row_tracking_supported",
    "is_subset_of",
    "minimum_required_versions",
]
