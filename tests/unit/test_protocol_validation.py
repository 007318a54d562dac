"""Unit tests for read/write compatibility validation."""

from __future__ import annotations

import pytest

from delta_features.catalog import APPEND_ONLY, COLUMN_MAPPING, FeatureRegistry
from delta_features.descriptor import FeatureKind, TableFeature
from delta_features.errors import (
    ErrorKind,
    UnsupportedReaderFeaturesError,
    UnsupportedReaderProtocolError,
    UnsupportedWriterFeaturesError,
    UnsupportedWriterProtocolError,
)
from delta_features.settings import ProtocolSupport
from delta_features.validation import (
    protocol_compatibility,
    validate_can_read,
    validate_can_write,
)
from tests.test_helpers.delta_schema import IDENTITY_METADATA, field, metadata_for, protocol


def test_reader_version_above_maximum_is_rejected() -> None:
    """Reader version 4 exceeds the supported maximum of 3."""
    with pytest.raises(UnsupportedReaderProtocolError) as excinfo:
        validate_can_read(protocol(4, 7), "t")
    assert excinfo.value.table_id == "t"
    assert excinfo.value.version == 4
    assert excinfo.value.kind is ErrorKind.READ


def test_writer_version_above_maximum_is_rejected() -> None:
    """Writer checks run after read checks."""
    with pytest.raises(UnsupportedWriterProtocolError) as excinfo:
        validate_can_write(protocol(1, 8), metadata_for(field("id")), "t")
    assert excinfo.value.version == 8
    with pytest.raises(UnsupportedReaderProtocolError):
        validate_can_write(protocol(4, 8), metadata_for(field("id")), "t")


def test_invariants_block_writes() -> None:
    """An invariant in the schema makes the implied invariants feature unwritable."""
    metadata = metadata_for(field("id", metadata={"delta.invariants": "id > 0"}))
    validate_can_read(protocol(1, 2), "t")
    with pytest.raises(UnsupportedWriterFeaturesError) as excinfo:
        validate_can_write(protocol(1, 2), metadata, "t")
    assert excinfo.value.features == ("invariants",)


def test_write_errors_are_aggregated() -> None:
    """Every blocking feature is reported at once."""
    metadata = metadata_for(
        field("id", metadata={"delta.invariants": "id > 0"}),
        field("ident", metadata=IDENTITY_METADATA),
        field("gen", metadata={"delta.generationExpression": "id + 1"}),
        configuration={
            "delta.constraints.positive": "id > 0",
            "delta.enableChangeDataFeed": "true",
        },
    )
    with pytest.raises(UnsupportedWriterFeaturesError) as excinfo:
        validate_can_write(protocol(2, 6), metadata, "t")
    assert excinfo.value.features == (
        "changeDataFeed",
        "checkConstraints",
        "generatedColumns",
        "identityColumns",
        "invariants",
    )
    assert "changeDataFeed, checkConstraints" in str(excinfo.value)


def test_same_protocol_writable_for_plain_table() -> None:
    """Write support depends on the metadata, not only the protocol."""
    validate_can_write(protocol(2, 6), metadata_for(field("id")), "t")
    validate_can_write(
        protocol(3, 7, reader_features=("deletionVectors",), writer_features=("deletionVectors",)),
        metadata_for(field("id")),
        "t",
    )


def test_unwritable_modern_features() -> None:
    """Features without write support block writes but not reads."""
    variant = protocol(3, 7, reader_features=("variantType",), writer_features=("variantType",))
    validate_can_read(variant, "t")
    with pytest.raises(UnsupportedWriterFeaturesError) as excinfo:
        validate_can_write(variant, metadata_for(field("v", "variant")), "t")
    assert excinfo.value.features == ("variantType",)


def test_unreadable_features_are_aggregated() -> None:
    """Read checks report every supported feature without read support."""
    opaque = TableFeature(
        name="opaqueLayout",
        kind=FeatureKind.MODERN_READER_WRITER,
        min_reader_version=3,
        min_writer_version=7,
        read_support=lambda: False,
    )
    sealed = TableFeature(
        name="sealedFiles",
        kind=FeatureKind.MODERN_READER_WRITER,
        min_reader_version=3,
        min_writer_version=7,
        read_support=lambda: False,
    )
    writer_only = TableFeature(
        name="writerOnly",
        kind=FeatureKind.MODERN_WRITER_ONLY,
        min_reader_version=0,
        min_writer_version=7,
        read_support=lambda: False,
    )
    registry = FeatureRegistry((APPEND_ONLY, COLUMN_MAPPING, opaque, sealed, writer_only))
    table = protocol(
        3,
        7,
        reader_features=("opaqueLayout", "sealedFiles"),
        writer_features=("opaqueLayout", "sealedFiles", "writerOnly"),
    )
    with pytest.raises(UnsupportedReaderFeaturesError) as excinfo:
        validate_can_read(table, "t", registry=registry)
    assert excinfo.value.features == ("opaqueLayout", "sealedFiles", "writerOnly")
    report = protocol_compatibility(table, registry=registry)
    assert not report.readable
    assert report.unreadable_features == ("opaqueLayout", "sealedFiles", "writerOnly")


def test_custom_support_bounds() -> None:
    """Support bounds are configurable."""
    strict = ProtocolSupport(max_reader_version=1, max_writer_version=2)
    with pytest.raises(UnsupportedReaderProtocolError):
        validate_can_read(protocol(2, 5), "t", support=strict)
    validate_can_write(protocol(1, 2), metadata_for(field("id")), "t", support=strict)


def test_compatibility_report_does_not_raise() -> None:
    """The report mirrors the validators without raising."""
    metadata = metadata_for(field("id", metadata={"delta.invariants": "id > 0"}))
    report = protocol_compatibility(protocol(1, 2), metadata)
    assert report.readable
    assert report.writable is False
    assert report.unwritable_features == ("invariants",)
    assert report.supported_features == ("appendOnly", "invariants")

    too_new = protocol_compatibility(protocol(4, 7))
    assert not too_new.readable
    assert too_new.writable is None
    assert not too_new.reader_version_ok

    plain = protocol_compatibility(protocol(1, 2), metadata_for(field("id")))
    assert plain.readable
    assert plain.writable is True
