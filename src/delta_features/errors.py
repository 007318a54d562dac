"""Unified error types for table-feature negotiation."""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum


class ErrorKind(StrEnum):
    """Categorize feature errors by concern."""

    GENERIC = "generic"
    FEATURE = "feature"
    READ = "read"
    WRITE = "write"
    CONFIG = "config"
    SCHEMA = "schema"


class DeltaFeatureError(Exception):
    """Base exception for table-feature failures."""

    def __init__(self, message: str, *, kind: ErrorKind = ErrorKind.GENERIC) -> None:
        super().__init__(message)
        self.kind = kind


class UnknownFeatureError(DeltaFeatureError, KeyError):
    """Raised when a feature name is not part of the catalog."""

    def __init__(self, name: str) -> None:
        msg = f"Unsupported Delta table feature: {name!r}."
        super().__init__(msg, kind=ErrorKind.FEATURE)
        self.name = name

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message.
        return str(self.args[0])


class UnsupportedReaderProtocolError(DeltaFeatureError):
    """Raised when a table requires a reader version beyond what is supported."""

    def __init__(self, table_id: str, version: int) -> None:
        msg = (
            f"Unsupported Delta reader protocol: table `{table_id}` requires "
            f"reader version {version} which is unsupported by this implementation."
        )
        super().__init__(msg, kind=ErrorKind.READ)
        self.table_id = table_id
        self.version = version


class UnsupportedWriterProtocolError(DeltaFeatureError):
    """Raised when a table requires a writer version beyond what is supported."""

    def __init__(self, table_id: str, version: int) -> None:
        msg = (
            f"Unsupported Delta writer protocol: table `{table_id}` requires "
            f"writer version {version} which is unsupported by this implementation."
        )
        super().__init__(msg, kind=ErrorKind.WRITE)
        self.table_id = table_id
        self.version = version


class UnsupportedReaderFeaturesError(DeltaFeatureError):
    """Raised with every table feature that blocks reading."""

    def __init__(self, table_id: str, features: Iterable[str]) -> None:
        names = tuple(sorted(features))
        msg = (
            f"Unsupported Delta reader features: table `{table_id}` requires "
            f"reader table features [{', '.join(names)}] which are unsupported "
            "by this implementation."
        )
        super().__init__(msg, kind=ErrorKind.READ)
        self.table_id = table_id
        self.features = names


class UnsupportedWriterFeaturesError(DeltaFeatureError):
    """Raised with every table feature that blocks writing."""

    def __init__(self, table_id: str, features: Iterable[str]) -> None:
        names = tuple(sorted(features))
        msg = (
            f"Unsupported Delta writer features: table `{table_id}` requires "
            f"writer table features [{', '.join(names)}] which are unsupported "
            "by this implementation."
        )
        super().__init__(msg, kind=ErrorKind.WRITE)
        self.table_id = table_id
        self.features = names


class InvalidConfigurationValueError(DeltaFeatureError, ValueError):
    """Raised when a table property holds a value that cannot be parsed."""

    def __init__(self, key: str, value: str, reason: str | None = None) -> None:
        msg = f"Invalid value for table property `{key}`: {value!r}."
        if reason:
            msg = f"{msg} {reason}"
        super().__init__(msg, kind=ErrorKind.CONFIG)
        self.key = key
        self.value = value


class InvalidOverrideValueError(InvalidConfigurationValueError):
    """Raised when a feature override property is not set to ``supported``."""

    def __init__(self, key: str, value: str) -> None:
        super().__init__(
            key,
            value,
            'Table feature override options may only have "supported" as their value.',
        )


class InconsistentIdentityMetadataError(DeltaFeatureError, ValueError):
    """Raised when a column carries only part of the identity metadata."""

    def __init__(self, field_name: str, flags: tuple[bool, bool, bool]) -> None:
        has_start, has_step, has_insert = flags
        msg = (
            f"Inconsistent IDENTITY metadata for column {field_name} detected: "
            f"{has_start}, {has_step}, {has_insert}"
        )
        super().__init__(msg, kind=ErrorKind.SCHEMA)
        self.field_name = field_name
        self.flags = flags


__all__ = [
    "DeltaFeatureError",
    "ErrorKind",
    "InconsistentIdentityMetadataError",
    "InvalidConfigurationValueError",
    "InvalidOverrideValueError",
    "UnknownFeatureError",
    "UnsupportedReaderFeaturesError",
    "UnsupportedReaderProtocolError",
    "UnsupportedWriterFeaturesError",
    "UnsupportedWriterProtocolError",
]
