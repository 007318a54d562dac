"""Built-in table-feature catalog and case-insensitive registry.

Feature names are part of the Delta protocol and are persisted verbatim, so the
strings below must match other Delta implementations byte for byte.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from typing import TYPE_CHECKING

from delta_features import table_config
from delta_features.descriptor import AutoEnablePredicate, FeatureKind, TableFeature
from delta_features.errors import UnknownFeatureError
from delta_features.predicates import (
    has_check_constraints,
    has_generated_columns,
    has_identity_columns,
    has_invariants,
    has_type_column,
)
from delta_features.table_config import CheckpointPolicy, ColumnMappingMode

if TYPE_CHECKING:
    from delta_features.metadata import Metadata
    from delta_features.protocol import Protocol

TABLE_FEATURES_MIN_READER_VERSION = 3
TABLE_FEATURES_MIN_WRITER_VERSION = 7

_LEGACY_W = FeatureKind.LEGACY_WRITER_ONLY
_LEGACY_RW = FeatureKind.LEGACY_READER_WRITER
_W = FeatureKind.MODERN_WRITER_ONLY
_RW = FeatureKind.MODERN_READER_WRITER


def _enabled_by(prop: table_config.TableProperty[bool]) -> AutoEnablePredicate:
    def _predicate(_protocol: Protocol, metadata: Metadata) -> bool:
        return prop.from_metadata(metadata)

    return _predicate


def _never_writable(_metadata: Metadata) -> bool:
    return False


# ---------------------------------------------------------------------------
# Write-semantics gates
# ---------------------------------------------------------------------------

APPEND_ONLY = TableFeature(
    name="appendOnly",
    kind=_LEGACY_W,
    min_reader_version=0,
    min_writer_version=2,
    auto_enable=_enabled_by(table_config.APPEND_ONLY_ENABLED),
)

INVARIANTS = TableFeature(
    name="invariants",
    kind=_LEGACY_W,
    min_reader_version=0,
    min_writer_version=2,
    auto_enable=lambda _protocol, metadata: has_invariants(metadata.schema),
    write_support=lambda metadata: not has_invariants(metadata.schema),
)

CHECK_CONSTRAINTS = TableFeature(
    name="checkConstraints",
    kind=_LEGACY_W,
    min_reader_version=0,
    min_writer_version=3,
    auto_enable=lambda _protocol, metadata: has_check_constraints(metadata),
    write_support=lambda metadata: not has_check_constraints(metadata),
)

CHANGE_DATA_FEED = TableFeature(
    name="changeDataFeed",
    kind=_LEGACY_W,
    min_reader_version=0,
    min_writer_version=4,
    auto_enable=_enabled_by(table_config.CHANGE_DATA_FEED_ENABLED),
    write_support=lambda metadata: not table_config.CHANGE_DATA_FEED_ENABLED.from_metadata(
        metadata
    ),
)

GENERATED_COLUMNS = TableFeature(
    name="generatedColumns",
    kind=_LEGACY_W,
    min_reader_version=0,
    min_writer_version=4,
    auto_enable=lambda _protocol, metadata: has_generated_columns(metadata),
    write_support=lambda metadata: not has_generated_columns(metadata),
)

IDENTITY_COLUMNS = TableFeature(
    name="identityColumns",
    kind=_LEGACY_W,
    min_reader_version=0,
    min_writer_version=6,
    auto_enable=lambda _protocol, metadata: has_identity_columns(metadata),
    write_support=lambda metadata: not has_identity_columns(metadata),
)

# ---------------------------------------------------------------------------
# Schema and format evolution
# ---------------------------------------------------------------------------

COLUMN_MAPPING = TableFeature(
    name="columnMapping",
    kind=_LEGACY_RW,
    min_reader_version=2,
    min_writer_version=5,
    auto_enable=lambda _protocol, metadata: (
        table_config.COLUMN_MAPPING_MODE.from_metadata(metadata) is not ColumnMappingMode.NONE
    ),
)

# The stable and preview twins behave identically. The stable feature is only
# auto-enabled when the preview is not already supported, so readers that only
# know the preview name keep working. The preview can only be added manually.
TYPE_WIDENING_PREVIEW = TableFeature(
    name="typeWidening-preview",
    kind=_RW,
    min_reader_version=3,
    min_writer_version=7,
)

TYPE_WIDENING = TableFeature(
    name="typeWidening",
    kind=_RW,
    min_reader_version=3,
    min_writer_version=7,
    auto_enable=lambda protocol, metadata: (
        table_config.TYPE_WIDENING_ENABLED.from_metadata(metadata)
        and not protocol.supports_feature(TYPE_WIDENING_PREVIEW)
    ),
)

VARIANT_TYPE_PREVIEW = TableFeature(
    name="variantType-preview",
    kind=_RW,
    min_reader_version=3,
    min_writer_version=7,
    write_support=_never_writable,
)

VARIANT_TYPE = TableFeature(
    name="variantType",
    kind=_RW,
    min_reader_version=3,
    min_writer_version=7,
    auto_enable=lambda protocol, metadata: (
        has_type_column(metadata.schema, "variant")
        and not protocol.supports_feature(VARIANT_TYPE_PREVIEW)
    ),
    write_support=_never_writable,
)

VARIANT_SHREDDING_PREVIEW = TableFeature(
    name="variantShredding-preview",
    kind=_RW,
    min_reader_version=3,
    min_writer_version=7,
    auto_enable=_enabled_by(table_config.VARIANT_SHREDDING_ENABLED),
    write_support=_never_writable,
)

TIMESTAMP_NTZ = TableFeature(
    name="timestampNtz",
    kind=_RW,
    min_reader_version=3,
    min_writer_version=7,
    auto_enable=lambda _protocol, metadata: has_type_column(metadata.schema, "timestamp_ntz"),
)

DELETION_VECTORS = TableFeature(
    name="deletionVectors",
    kind=_RW,
    min_reader_version=3,
    min_writer_version=7,
    auto_enable=_enabled_by(table_config.DELETION_VECTORS_CREATION_ENABLED),
)

# ---------------------------------------------------------------------------
# Bookkeeping
# ---------------------------------------------------------------------------

DOMAIN_METADATA = TableFeature(
    name="domainMetadata",
    kind=_W,
    min_reader_version=0,
    min_writer_version=7,
)

ROW_TRACKING = TableFeature(
    name="rowTracking",
    kind=_W,
    min_reader_version=0,
    min_writer_version=7,
    required_features=(DOMAIN_METADATA.name,),
    auto_enable=_enabled_by(table_config.ROW_TRACKING_ENABLED),
)

CLUSTERING = TableFeature(
    name="clustering",
    kind=_W,
    min_reader_version=0,
    min_writer_version=7,
    required_features=(DOMAIN_METADATA.name,),
)

IN_COMMIT_TIMESTAMP = TableFeature(
    name="inCommitTimestamp",
    kind=_W,
    min_reader_version=0,
    min_writer_version=7,
    auto_enable=_enabled_by(table_config.IN_COMMIT_TIMESTAMPS_ENABLED),
)

# ---------------------------------------------------------------------------
# Iceberg interoperability
# ---------------------------------------------------------------------------

ICEBERG_COMPAT_V2 = TableFeature(
    name="icebergCompatV2",
    kind=_W,
    min_reader_version=0,
    min_writer_version=7,
    required_features=(COLUMN_MAPPING.name,),
    auto_enable=_enabled_by(table_config.ICEBERG_COMPAT_V2_ENABLED),
)

ICEBERG_COMPAT_V3 = TableFeature(
    name="icebergCompatV3",
    kind=_W,
    min_reader_version=0,
    min_writer_version=7,
    required_features=(COLUMN_MAPPING.name, ROW_TRACKING.name),
    auto_enable=_enabled_by(table_config.ICEBERG_COMPAT_V3_ENABLED),
)

ICEBERG_WRITER_COMPAT_V1 = TableFeature(
    name="icebergWriterCompatV1",
    kind=_W,
    min_reader_version=0,
    min_writer_version=7,
    required_features=(ICEBERG_COMPAT_V2.name,),
    auto_enable=_enabled_by(table_config.ICEBERG_WRITER_COMPAT_V1_ENABLED),
)

ICEBERG_WRITER_COMPAT_V3 = TableFeature(
    name="icebergWriterCompatV3",
    kind=_W,
    min_reader_version=0,
    min_writer_version=7,
    required_features=(ICEBERG_COMPAT_V3.name,),
    auto_enable=_enabled_by(table_config.ICEBERG_WRITER_COMPAT_V3_ENABLED),
)

# ---------------------------------------------------------------------------
# Checkpoints, vacuum and catalog management
# ---------------------------------------------------------------------------

V2_CHECKPOINT = TableFeature(
    name="v2Checkpoint",
    kind=_RW,
    min_reader_version=3,
    min_writer_version=7,
    auto_enable=lambda _protocol, metadata: (
        table_config.CHECKPOINT_POLICY.from_metadata(metadata) is CheckpointPolicy.V2
    ),
)

VACUUM_PROTOCOL_CHECK = TableFeature(
    name="vacuumProtocolCheck",
    kind=_RW,
    min_reader_version=3,
    min_writer_version=7,
)

CATALOG_MANAGED_PREVIEW = TableFeature(
    name="catalogOwned-preview",
    kind=_RW,
    min_reader_version=3,
    min_writer_version=7,
    required_features=(IN_COMMIT_TIMESTAMP.name,),
    write_support=_never_writable,
)


class FeatureRegistry:
    """Read-only, case-insensitive mapping from feature name to descriptor.

    Built once from a fixed sequence; enumeration order follows that sequence.
    """

    __slots__ = ("_by_key", "_features")

    def __init__(self, features: Iterable[TableFeature]) -> None:
        ordered = tuple(features)
        by_key: dict[str, TableFeature] = {}
        for feature in ordered:
            if feature.key in by_key:
                msg = f"Duplicate table feature name: {feature.name!r}."
                raise ValueError(msg)
            by_key[feature.key] = feature
        for feature in ordered:
            for dependency in feature.required_features:
                if dependency.casefold() not in by_key:
                    raise UnknownFeatureError(dependency)
        self._features = ordered
        self._by_key = by_key

    def lookup(self, name: str) -> TableFeature:
        """Return the feature registered under ``name`` (case-insensitive).

        Raises
        ------
        UnknownFeatureError
            Raised when no feature has that name.
        """
        feature = self._by_key.get(name.casefold())
        if feature is None:
            raise UnknownFeatureError(name)
        return feature

    def get(self, name: str) -> TableFeature | None:
        return self._by_key.get(name.casefold())

    def all(self) -> Sequence[TableFeature]:
        return self._features

    def required_features(self, feature: TableFeature) -> frozenset[TableFeature]:
        """Resolve the direct dependencies of ``feature``."""
        return frozenset(self.lookup(name) for name in feature.required_features)

    def __contains__(self, name: object) -> bool:
        if isinstance(name, TableFeature):
            name = name.name
        return isinstance(name, str) and name.casefold() in self._by_key

    def __iter__(self) -> Iterator[TableFeature]:
        return iter(self._features)

    def __len__(self) -> int:
        return len(self._features)


TABLE_FEATURES = FeatureRegistry(
    (
        APPEND_ONLY,
        CATALOG_MANAGED_PREVIEW,
        V2_CHECKPOINT,
        CHANGE_DATA_FEED,
        CLUSTERING,
        COLUMN_MAPPING,
        CHECK_CONSTRAINTS,
        DELETION_VECTORS,
        GENERATED_COLUMNS,
        DOMAIN_METADATA,
        ICEBERG_COMPAT_V2,
        ICEBERG_COMPAT_V3,
        IDENTITY_COLUMNS,
        IN_COMMIT_TIMESTAMP,
        INVARIANTS,
        ROW_TRACKING,
        TIMESTAMP_NTZ,
        TYPE_WIDENING_PREVIEW,
        TYPE_WIDENING,
        VACUUM_PROTOCOL_CHECK,
        VARIANT_TYPE,
        VARIANT_TYPE_PREVIEW,
        VARIANT_SHREDDING_PREVIEW,
        ICEBERG_WRITER_COMPAT_V1,
        ICEBERG_WRITER_COMPAT_V3,
    )
)


def lookup_feature(name: str) -> TableFeature:
    """Return the built-in feature named ``name`` (case-insensitive)."""
    return TABLE_FEATURES.lookup(name)


def supports_reader_features(min_reader_version: int) -> bool:
    """Return whether a reader version allows listing reader features by name."""
    return min_reader_version >= TABLE_FEATURES_MIN_READER_VERSION


def supports_writer_features(min_writer_version: int) -> bool:
    """Return whether a writer version allows listing writer features by name."""
    return min_writer_version >= TABLE_FEATURES_MIN_WRITER_VERSION


__all__ = [
    "APPEND_ONLY",
    "CATALOG_MANAGED_PREVIEW",
    "CHANGE_DATA_FEED",
    "CHECK_CONSTRAINTS",
    "CLUSTERING",
    "COLUMN_MAPPING",
    "DELETION_VECTORS",
    "DOMAIN_METADATA",
    "GENERATED_COLUMNS",
    "ICEBERG_COMPAT_V2",
    "ICEBERG_COMPAT_V3",
    "ICEBERG_WRITER_COMPAT_V1",
    "ICEBERG_WRITER_COMPAT_V3",
    "IDENTITY_COLUMNS",
    "INVARIANTS",
    "IN_COMMIT_TIMESTAMP",
    "ROW_TRACKING",
    "TABLE_FEATURES",
    "TABLE_FEATURES_MIN_READER_VERSION",
    "TABLE_FEATURES_MIN_WRITER_VERSION",
    "TIMESTAMP_NTZ",
    "TYPE_WIDENING",
    "TYPE_WIDENING_PREVIEW",
    "V2_CHECKPOINT",
    "VACUUM_PROTOCOL_CHECK",
    "VARIANT_SHREDDING_PREVIEW",
    "VARIANT_TYPE",
    "VARIANT_TYPE_PREVIEW",
    "FeatureRegistry",
    "lookup_feature",
    "supports_reader_features",
    "supports_writer_features",
]
