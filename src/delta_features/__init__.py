"""Delta table-feature negotiation: protocol algebra, auto-upgrade and validation."""

from __future__ import annotations

from delta_features.catalog import (
    TABLE_FEATURES,
    TABLE_FEATURES_MIN_READER_VERSION,
    TABLE_FEATURES_MIN_WRITER_VERSION,
    FeatureRegistry,
    lookup_feature,
)
from delta_features.closure import dependency_closure
from delta_features.descriptor import FeatureKind, TableFeature
from delta_features.errors import (
    DeltaFeatureError,
    ErrorKind,
    InconsistentIdentityMetadataError,
    InvalidConfigurationValueError,
    InvalidOverrideValueError,
    UnknownFeatureError,
    UnsupportedReaderFeaturesError,
    UnsupportedReaderProtocolError,
    UnsupportedWriterFeaturesError,
    UnsupportedWriterProtocolError,
)
from delta_features.metadata import Metadata
from delta_features.overrides import FeatureOverrides, extract_feature_overrides
from delta_features.protocol import Protocol, is_subset_of, minimum_required_versions
from delta_features.settings import ProtocolSupport, support_from_env
from delta_features.upgrade import ProtocolUpgrade, auto_upgrade_protocol
from delta_features.validation import (
    ProtocolCompatibility,
    protocol_compatibility,
    validate_can_read,
    validate_can_write,
)

__all__ = [
    "TABLE_FEATURES",
    "TABLE_FEATURES_MIN_READER_VERSION",
    "TABLE_FEATURES_MIN_WRITER_VERSION",
    "DeltaFeatureError",
    "ErrorKind",
    "FeatureKind",
    "FeatureOverrides",
    "FeatureRegistry",
    "InconsistentIdentityMetadataError",
    "InvalidConfigurationValueError",
    "InvalidOverrideValueError",
    "Metadata",
    "Protocol",
    "ProtocolCompatibility",
    "ProtocolSupport",
    "ProtocolUpgrade",
    "TableFeature",
    "UnknownFeatureError",
    "UnsupportedReaderFeaturesError",
    "UnsupportedReaderProtocolError",
    "UnsupportedWriterFeaturesError",
    "UnsupportedWriterProtocolError",
    "auto_upgrade_protocol",
    "dependency_closure",
    "extract_feature_overrides",
    "is_subset_of",
    "lookup_feature",
    "minimum_required_versions",
    "protocol_compatibility",
    "support_from_env",
    "validate_can_read",
    "validate_can_write",
]
