"""Schema capability predicates used by feature auto-enable and write gates."""

from __future__ import annotations

from typing import TYPE_CHECKING

from delta_features.errors import InconsistentIdentityMetadataError
from delta_features.schema import ignore_containers, iter_fields, iter_types
from delta_features.table_config import CONSTRAINTS_PREFIX

if TYPE_CHECKING:
    from delta_features.metadata import Metadata
    from delta_features.schema import DataType, StructField, StructType

INVARIANTS_KEY = "delta.invariants"
GENERATION_EXPRESSION_KEY = "delta.generationExpression"
IDENTITY_START_KEY = "delta.identity.start"
IDENTITY_STEP_KEY = "delta.identity.step"
IDENTITY_ALLOW_EXPLICIT_INSERT_KEY = "delta.identity.allowExplicitInsert"


def has_invariants(schema: StructType) -> bool:
    """Return whether any column declares a ``delta.invariants`` expression.

    Invariants cannot appear inside arrays or maps, so those are not entered.
    """
    return any(
        INVARIANTS_KEY in element.field.metadata
        for element in iter_fields(schema, descend=ignore_containers)
    )


def has_check_constraints(metadata: Metadata) -> bool:
    """Return whether the configuration defines any CHECK constraint."""
    return any(key.startswith(CONSTRAINTS_PREFIX) for key in metadata.configuration)


def has_generated_columns(metadata: Metadata) -> bool:
    """Return whether any column carries a generation expression."""
    return any(
        GENERATION_EXPRESSION_KEY in element.field.metadata
        for element in iter_fields(metadata.schema, descend=ignore_containers)
    )


def _is_identity_column(field: StructField) -> bool:
    flags = (
        IDENTITY_START_KEY in field.metadata,
        IDENTITY_STEP_KEY in field.metadata,
        IDENTITY_ALLOW_EXPLICIT_INSERT_KEY in field.metadata,
    )
    if any(flags) and not all(flags):
        raise InconsistentIdentityMetadataError(field.name, flags)
    return all(flags)


def has_identity_columns(metadata: Metadata) -> bool:
    """Return whether any column is an identity column.

    Raises
    ------
    InconsistentIdentityMetadataError
        Raised as soon as a column carries only part of the identity metadata.
    """
    return any(
        _is_identity_column(element.field)
        for element in iter_fields(metadata.schema, descend=ignore_containers)
    )


def has_type_column(schema: StructType, data_type: DataType) -> bool:
    """Return whether a column of ``data_type`` appears anywhere in ``schema``.

    Only meaningful for primitive types such as ``"timestamp_ntz"`` or
    ``"variant"``; nested targets compare structurally.
    """
    return any(candidate == data_type for candidate in iter_types(schema))


__all__ = [
    "GENERATION_EXPRESSION_KEY",
    "IDENTITY_ALLOW_EXPLICIT_INSERT_KEY",
    "IDENTITY_START_KEY",
    "IDENTITY_STEP_KEY",
    "INVARIANTS_KEY",
    "has_check_constraints",
    "has_generated_columns",
    "has_identity_columns",
    "has_invariants",
    "has_type_column",
]
