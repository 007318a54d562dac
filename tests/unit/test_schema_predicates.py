"""Unit tests for schema traversal and feature capability predicates."""

from __future__ import annotations

import msgspec
import pytest

from delta_features.errors import InconsistentIdentityMetadataError
from delta_features.metadata import Metadata
from delta_features.predicates import (
    has_check_constraints,
    has_generated_columns,
    has_identity_columns,
    has_invariants,
    has_type_column,
)
from delta_features.schema import (
    ArrayType,
    MapType,
    StructType,
    ignore_containers,
    iter_fields,
    parse_schema,
)
from tests.test_helpers.delta_schema import IDENTITY_METADATA, field, metadata_for, struct

_SCHEMA_STRING = msgspec.json.encode(
    {
        "type": "struct",
        "fields": [
            {"name": "id", "type": "long", "nullable": False, "metadata": {}},
            {
                "name": "event",
                "type": {
                    "type": "struct",
                    "fields": [
                        {
                            "name": "at",
                            "type": "timestamp_ntz",
                            "nullable": True,
                            "metadata": {"delta.invariants": "at IS NOT NULL"},
                        }
                    ],
                },
                "nullable": True,
                "metadata": {},
            },
            {
                "name": "tags",
                "type": {"type": "array", "elementType": "variant", "containsNull": True},
                "nullable": True,
                "metadata": {},
            },
            {
                "name": "attrs",
                "type": {
                    "type": "map",
                    "keyType": "string",
                    "valueType": "decimal(10,2)",
                    "valueContainsNull": True,
                },
                "nullable": True,
                "metadata": {},
            },
        ],
    }
)


def test_parse_schema_decodes_nested_types() -> None:
    """The Delta schema JSON decodes into the schema model."""
    schema = parse_schema(_SCHEMA_STRING)
    assert schema.field_names() == ("id", "event", "tags", "attrs")
    assert schema.fields[0].nullable is False
    assert isinstance(schema.fields[1].type, StructType)
    assert schema.fields[2].type == ArrayType(element_type="variant", contains_null=True)
    attrs = schema.fields[3].type
    assert isinstance(attrs, MapType)
    assert attrs.value_type == "decimal(10,2)"


def test_iter_fields_reports_paths() -> None:
    """Traversal yields nested fields with their dotted paths."""
    schema = parse_schema(_SCHEMA_STRING)
    paths = [element.dotted_path for element in iter_fields(schema)]
    assert paths == ["id", "event", "event.at", "tags", "attrs"]


def test_iter_fields_skips_containers_when_asked() -> None:
    """Structs nested in arrays or maps are only visited without the container filter."""
    inner = struct(field("deep", metadata={"delta.invariants": "deep > 0"}))
    schema = struct(
        field("items", ArrayType(element_type=inner)),
        field("lookup", MapType(key_type="string", value_type=inner)),
    )
    all_paths = [element.dotted_path for element in iter_fields(schema)]
    assert all_paths == ["items", "items.element.deep", "lookup", "lookup.value.deep"]
    filtered = [
        element.dotted_path for element in iter_fields(schema, descend=ignore_containers)
    ]
    assert filtered == ["items", "lookup"]
    # Invariants inside containers are not allowed, so they are not detected.
    assert not has_invariants(schema)


def test_has_invariants_descends_into_structs() -> None:
    """Invariants on nested struct fields are detected."""
    assert has_invariants(parse_schema(_SCHEMA_STRING))
    assert not has_invariants(struct(field("id")))


def test_has_check_constraints_reads_configuration() -> None:
    """Constraints live in the table configuration."""
    assert has_check_constraints(metadata_for(configuration={"delta.constraints.pos": "id > 0"}))
    assert not has_check_constraints(metadata_for(configuration={"delta.appendOnly": "true"}))


def test_has_generated_columns() -> None:
    """Generated columns carry a generation expression."""
    assert has_generated_columns(
        metadata_for(field("a"), field("b", metadata={"delta.generationExpression": "a * 2"}))
    )
    assert not has_generated_columns(metadata_for(field("a")))


def test_has_identity_columns() -> None:
    """All three identity tags mark an identity column."""
    assert has_identity_columns(metadata_for(field("id", metadata=IDENTITY_METADATA)))
    assert not has_identity_columns(metadata_for(field("id")))


def test_partial_identity_metadata_fails_fast() -> None:
    """Start and step without allowExplicitInsert is inconsistent."""
    partial = {"delta.identity.start": 1, "delta.identity.step": 1}
    metadata = metadata_for(field("id", metadata=partial))
    with pytest.raises(InconsistentIdentityMetadataError) as excinfo:
        has_identity_columns(metadata)
    assert excinfo.value.field_name == "id"
    assert excinfo.value.flags == (True, True, False)


def test_has_type_column_inspects_every_level() -> None:
    """Type presence sees nested fields, array elements and map values."""
    schema = parse_schema(_SCHEMA_STRING)
    assert has_type_column(schema, "timestamp_ntz")
    assert has_type_column(schema, "variant")
    assert has_type_column(schema, "decimal(10,2)")
    assert not has_type_column(schema, "binary")
    assert not has_type_column(Metadata().schema, "variant")


def test_metadata_from_schema_string() -> None:
    """Metadata builds from a schema string and copies on change."""
    metadata = Metadata.from_schema_string(
        _SCHEMA_STRING, {"delta.enableChangeDataFeed": "true"}
    )
    assert metadata.schema.field_names() == ("id", "event", "tags", "attrs")
    assert metadata.configuration == {"delta.enableChangeDataFeed": "true"}
    narrowed = metadata.with_schema(struct(field("id")))
    assert narrowed.schema.field_names() == ("id",)
    assert narrowed.configuration == metadata.configuration
    assert metadata.schema.field_names() == ("id", "event", "tags", "attrs")
