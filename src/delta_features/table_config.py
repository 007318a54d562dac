"""Typed readers for the ``delta.*`` table properties used by feature predicates."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Generic, TypeVar

from delta_features.errors import InvalidConfigurationValueError

if TYPE_CHECKING:
    from delta_features.metadata import Metadata

SET_TABLE_FEATURE_SUPPORTED_PREFIX = "delta.feature."
CONSTRAINTS_PREFIX = "delta.constraints."

E = TypeVar("E", bound=StrEnum)
T = TypeVar("T")


class ColumnMappingMode(StrEnum):
    """Column mapping modes accepted by ``delta.columnMapping.mode``."""

    NONE = "none"
    NAME = "name"
    ID = "id"


class CheckpointPolicy(StrEnum):
    """Checkpoint policies accepted by ``delta.checkpointPolicy``."""

    CLASSIC = "classic"
    V2 = "v2"


def _parse_bool(key: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value == "true":
        return True
    if value == "false":
        return False
    raise InvalidConfigurationValueError(key, raw, "Expected `true` or `false`.")


def _enum_parser(enum_type: type[E]) -> Callable[[str, str], E]:
    def _parse(key: str, raw: str) -> E:
        value = raw.strip().lower()
        for member in enum_type:
            if member.value == value:
                return member
        allowed = ", ".join(member.value for member in enum_type)
        raise InvalidConfigurationValueError(key, raw, f"Expected one of: {allowed}.")

    return _parse


@dataclass(frozen=True)
class TableProperty(Generic[T]):
    """A single table property with its default and parser."""

    key: str
    default: T
    parser: Callable[[str, str], T]
    description: str = ""

    def from_configuration(self, configuration: dict[str, str]) -> T:
        """Return the parsed value, or the default when the key is absent.

        Raises
        ------
        InvalidConfigurationValueError
            Raised when the stored value cannot be parsed.
        """
        raw = configuration.get(self.key)
        if raw is None:
            return self.default
        return self.parser(self.key, raw)

    def from_metadata(self, metadata: Metadata) -> T:
        """Return the property value stored in ``metadata``."""
        return self.from_configuration(metadata.configuration)


def _bool_property(key: str, description: str) -> TableProperty[bool]:
    return TableProperty(key=key, default=False, parser=_parse_bool, description=description)


APPEND_ONLY_ENABLED = _bool_property(
    "delta.appendOnly",
    "Whether the table only allows appends.",
)
CHANGE_DATA_FEED_ENABLED = _bool_property(
    "delta.enableChangeDataFeed",
    "Whether change data feed records are written.",
)
COLUMN_MAPPING_MODE: TableProperty[ColumnMappingMode] = TableProperty(
    key="delta.columnMapping.mode",
    default=ColumnMappingMode.NONE,
    parser=_enum_parser(ColumnMappingMode),
    description="Physical column naming mode.",
)
CHECKPOINT_POLICY: TableProperty[CheckpointPolicy] = TableProperty(
    key="delta.checkpointPolicy",
    default=CheckpointPolicy.CLASSIC,
    parser=_enum_parser(CheckpointPolicy),
    description="Checkpoint format written for the table.",
)
DELETION_VECTORS_CREATION_ENABLED = _bool_property(
    "delta.enableDeletionVectors",
    "Whether deletes may produce deletion vectors.",
)
ROW_TRACKING_ENABLED = _bool_property(
    "delta.enableRowTracking",
    "Whether stable row ids and commit versions are tracked.",
)
IN_COMMIT_TIMESTAMPS_ENABLED = _bool_property(
    "delta.enableInCommitTimestamps",
    "Whether commits record their own timestamp.",
)
TYPE_WIDENING_ENABLED = _bool_property(
    "delta.enableTypeWidening",
    "Whether column types may be widened in place.",
)
VARIANT_SHREDDING_ENABLED = _bool_property(
    "delta.enableVariantShredding",
    "Whether variant columns may be written shredded.",
)
ICEBERG_COMPAT_V2_ENABLED = _bool_property(
    "delta.enableIcebergCompatV2",
    "Whether data files stay readable as Iceberg v2.",
)
ICEBERG_COMPAT_V3_ENABLED = _bool_property(
    "delta.enableIcebergCompatV3",
    "Whether data files stay readable as Iceberg v3.",
)
ICEBERG_WRITER_COMPAT_V1_ENABLED = _bool_property(
    "delta.enableIcebergWriterCompatV1",
    "Whether writes are restricted to Iceberg-compatible operations (v1).",
)
ICEBERG_WRITER_COMPAT_V3_ENABLED = _bool_property(
    "delta.enableIcebergWriterCompatV3",
    "Whether writes are restricted to Iceberg-compatible operations (v3).",
)


__all__ = [
    "APPEND_ONLY_ENABLED",
    "CHANGE_DATA_FEED_ENABLED",
    "CHECKPOINT_POLICY",
    "COLUMN_MAPPING_MODE",
    "CONSTRAINTS_PREFIX",
    "DELETION_VECTORS_CREATION_ENABLED",
    "ICEBERG_COMPAT_V2_ENABLED",
    "ICEBERG_COMPAT_V3_ENABLED",
    "ICEBERG_WRITER_COMPAT_V1_ENABLED",
    "ICEBERG_WRITER_COMPAT_V3_ENABLED",
    "IN_COMMIT_TIMESTAMPS_ENABLED",
    "ROW_TRACKING_ENABLED",
    "SET_TABLE_FEATURE_SUPPORTED_PREFIX",
    "TYPE_WIDENING_ENABLED",
    "VARIANT_SHREDDING_ENABLED",
    "CheckpointPolicy",
    "ColumnMappingMode",
    "TableProperty",
]
