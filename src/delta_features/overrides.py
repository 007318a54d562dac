"""Extraction of ``delta.feature.<name>=supported`` table property overrides."""

from __future__ import annotations

import logging

import msgspec

from delta_features.catalog import TABLE_FEATURES
from delta_features.descriptor import TableFeature
from delta_features.errors import InvalidOverrideValueError
from delta_features.metadata import Metadata
from delta_features.table_config import SET_TABLE_FEATURE_SUPPORTED_PREFIX

_LOGGER = logging.getLogger(__name__)

SUPPORTED_VALUE = "supported"


class FeatureOverrides(msgspec.Struct, frozen=True):
    """Features forced on by overrides and the metadata without override keys.

    ``metadata`` is ``None`` when no override keys were present.
    """

    features: frozenset[TableFeature]
    metadata: Metadata | None = None


def extract_feature_overrides(metadata: Metadata) -> FeatureOverrides:
    """Pull feature-support overrides out of ``metadata``'s configuration.

    Overrides only ever add support and are never persisted as regular table
    properties, so matching keys are removed from the returned metadata.

    Raises
    ------
    UnknownFeatureError
        Raised when an override names a feature outside the catalog.
    InvalidOverrideValueError
        Raised when an override value is anything but ``supported``.
    """
    features: set[TableFeature] = set()
    for key, value in metadata.configuration.items():
        if not key.startswith(SET_TABLE_FEATURE_SUPPORTED_PREFIX):
            continue
        feature = TABLE_FEATURES.lookup(key.removeprefix(SET_TABLE_FEATURE_SUPPORTED_PREFIX))
        if value != SUPPORTED_VALUE:
            raise InvalidOverrideValueError(key, value)
        features.add(feature)
    if not features:
        return FeatureOverrides(features=frozenset())
    cleaned = {
        key: value
        for key, value in metadata.configuration.items()
        if not key.startswith(SET_TABLE_FEATURE_SUPPORTED_PREFIX)
    }
    _LOGGER.debug("Extracted feature overrides: %s", sorted(f.name for f in features))
    return FeatureOverrides(
        features=frozenset(features),
        metadata=metadata.with_replaced_configuration(cleaned),
    )


__all__ = ["SUPPORTED_VALUE", "FeatureOverrides", "extract_feature_overrides"]
