"""Minimal Delta schema model and traversal helpers.

Only the parts of the schema type system that feature predicates inspect are
modelled here: nested structs, arrays, maps, field metadata, and primitive type
names. Schemas decode directly from the JSON stored in a ``metaData`` action's
``schemaString``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

import msgspec

from delta_features.serde import StructBaseCompat, loads_json


class StructField(StructBaseCompat, frozen=True):
    """A named column together with its type and column metadata."""

    name: str
    type: DataType
    nullable: bool = True
    metadata: dict[str, Any] = msgspec.field(default_factory=dict)


class StructType(StructBaseCompat, frozen=True, tag_field="type", tag="struct"):
    """Ordered collection of fields."""

    fields: tuple[StructField, ...] = ()

    def field_names(self) -> tuple[str, ...]:
        """Return the top-level field names in declaration order."""
        return tuple(field.name for field in self.fields)


class ArrayType(StructBaseCompat, frozen=True, tag_field="type", tag="array", rename="camel"):
    """Array of elements of a single type."""

    element_type: DataType
    contains_null: bool = True


class MapType(StructBaseCompat, frozen=True, tag_field="type", tag="map", rename="camel"):
    """Map from keys of one type to values of another."""

    key_type: DataType
    value_type: DataType
    value_contains_null: bool = True


# Primitive types are carried as their Delta type names, e.g. ``"long"``,
# ``"timestamp_ntz"``, ``"variant"`` or ``"decimal(10,2)"``.
DataType = str | StructType | ArrayType | MapType

DescendPredicate = Callable[[DataType], bool]


class SchemaElement(msgspec.Struct, frozen=True):
    """A field visited during traversal, with its dotted path from the root."""

    path: tuple[str, ...]
    field: StructField

    @property
    def dotted_path(self) -> str:
        return ".".join(self.path)


def descend_all(_data_type: DataType) -> bool:
    """Descend into every composite type."""
    return True


def ignore_containers(data_type: DataType) -> bool:
    """Descend into structs only; array elements and map entries are skipped."""
    return isinstance(data_type, StructType)


def _children(
    data_type: DataType,
    path: tuple[str, ...],
) -> Iterator[tuple[tuple[str, ...], DataType]]:
    if isinstance(data_type, ArrayType):
        yield (*path, "element"), data_type.element_type
    elif isinstance(data_type, MapType):
        yield (*path, "key"), data_type.key_type
        yield (*path, "value"), data_type.value_type


def _visit(
    data_type: DataType,
    path: tuple[str, ...],
    descend: DescendPredicate,
) -> Iterator[SchemaElement]:
    if isinstance(data_type, StructType):
        for field in data_type.fields:
            field_path = (*path, field.name)
            yield SchemaElement(path=field_path, field=field)
            if descend(field.type):
                yield from _visit(field.type, field_path, descend)
        return
    for child_path, child in _children(data_type, path):
        if isinstance(child, StructType | ArrayType | MapType) and descend(child):
            yield from _visit(child, child_path, descend)


def iter_fields(
    schema: StructType,
    *,
    descend: DescendPredicate = descend_all,
) -> Iterator[SchemaElement]:
    """Yield every field of ``schema`` in depth-first order.

    Parameters
    ----------
    schema
        Root struct to traverse.
    descend
        Decides whether a composite field type is entered. The root struct is
        always visited.

    Yields
    ------
    SchemaElement
        Each visited field with its path from the root.
    """
    yield from _visit(schema, (), descend)


def iter_types(schema: StructType) -> Iterator[DataType]:
    """Yield every data type reachable from ``schema``.

    Array element types and map key/value types are reported alongside field
    types, so primitive element types are visible to type-presence checks.
    """
    stack: list[DataType] = [field.type for field in reversed(schema.fields)]
    while stack:
        data_type = stack.pop()
        yield data_type
        if isinstance(data_type, StructType):
            stack.extend(field.type for field in reversed(data_type.fields))
        elif isinstance(data_type, ArrayType):
            stack.append(data_type.element_type)
        elif isinstance(data_type, MapType):
            stack.extend((data_type.value_type, data_type.key_type))


def parse_schema(schema_string: str | bytes) -> StructType:
    """Decode a Delta ``schemaString`` payload into a ``StructType``.

    Returns
    -------
    StructType
        Decoded root schema.
    """
    return loads_json(schema_string, target_type=StructType)


__all__ = [
    "ArrayType",
    "DataType",
    "DescendPredicate",
    "MapType",
    "SchemaElement",
    "StructField",
    "StructType",
    "descend_all",
    "ignore_containers",
    "iter_fields",
    "iter_types",
    "parse_schema",
]
