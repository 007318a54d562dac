"""Table metadata value consumed by feature predicates."""

from __future__ import annotations

from collections.abc import Mapping

import msgspec

from delta_features.schema import StructType, parse_schema
from delta_features.serde import StructBaseCompat


class Metadata(StructBaseCompat, frozen=True):
    """Schema and configuration of a table.

    Instances are never mutated; the ``with_*`` helpers return new values.
    """

    schema: StructType = msgspec.field(default_factory=StructType)
    configuration: dict[str, str] = msgspec.field(default_factory=dict)
    partition_columns: tuple[str, ...] = ()
    id: str | None = None

    @classmethod
    def from_schema_string(
        cls,
        schema_string: str | bytes,
        configuration: Mapping[str, str] | None = None,
    ) -> Metadata:
        """Build metadata from a Delta ``schemaString`` payload."""
        return cls(
            schema=parse_schema(schema_string),
            configuration=dict(configuration or {}),
        )

    def with_replaced_configuration(self, configuration: Mapping[str, str]) -> Metadata:
        """Return a copy whose configuration is replaced by ``configuration``."""
        return msgspec.structs.replace(self, configuration=dict(configuration))

    def with_schema(self, schema: StructType) -> Metadata:
        """Return a copy carrying ``schema``."""
        return msgspec.structs.replace(self, schema=schema)


__all__ = ["Metadata"]
