"""Unit tests for ``delta.feature.*`` override extraction."""

from __future__ import annotations

import pytest

from delta_features.catalog import DELETION_VECTORS, ICEBERG_WRITER_COMPAT_V1
from delta_features.errors import InvalidOverrideValueError, UnknownFeatureError
from delta_features.overrides import extract_feature_overrides
from tests.test_helpers.delta_schema import field, metadata_for


def test_no_overrides_returns_no_metadata() -> None:
    """Without override keys there is nothing to replace."""
    metadata = metadata_for(field("id"), configuration={"delta.appendOnly": "true"})
    result = extract_feature_overrides(metadata)
    assert result.features == frozenset()
    assert result.metadata is None


def test_overrides_are_resolved_and_stripped() -> None:
    """Override keys become features and disappear from the configuration."""
    metadata = metadata_for(
        field("id"),
        configuration={
            "delta.feature.icebergWriterCompatV1": "supported",
            "delta.feature.DELETIONVECTORS": "supported",
            "delta.appendOnly": "true",
        },
    )
    result = extract_feature_overrides(metadata)
    assert result.features == {ICEBERG_WRITER_COMPAT_V1, DELETION_VECTORS}
    assert result.metadata is not None
    assert result.metadata.configuration == {"delta.appendOnly": "true"}
    assert result.metadata.schema == metadata.schema
    # The input is left as it was.
    assert "delta.feature.icebergWriterCompatV1" in metadata.configuration


def test_unknown_override_feature_raises() -> None:
    """Override names must be catalog features."""
    metadata = metadata_for(configuration={"delta.feature.timeTravel": "supported"})
    with pytest.raises(UnknownFeatureError) as excinfo:
        extract_feature_overrides(metadata)
    assert excinfo.value.name == "timeTravel"


@pytest.mark.parametrize("value", ["enabled", "Supported", "true", ""])
def test_override_value_must_be_supported(value: str) -> None:
    """Only the exact literal ``supported`` is accepted."""
    key = "delta.feature.rowTracking"
    with pytest.raises(InvalidOverrideValueError) as excinfo:
        extract_feature_overrides(metadata_for(configuration={key: value}))
    assert excinfo.value.key == key
    assert excinfo.value.value == value
    assert isinstance(excinfo.value, ValueError)
