"""Metadata-driven protocol auto-upgrade."""

from __future__ import annotations

import logging
from collections.abc import Iterable

import msgspec

from delta_features.catalog import (
    TABLE_FEATURES,
    TABLE_FEATURES_MIN_READER_VERSION,
    TABLE_FEATURES_MIN_WRITER_VERSION,
)
from delta_features.closure import dependency_closure
from delta_features.descriptor import TableFeature
from delta_features.metadata import Metadata
from delta_features.protocol import Protocol

_LOGGER = logging.getLogger(__name__)


class ProtocolUpgrade(msgspec.Struct, frozen=True):
    """Upgraded protocol together with the features it newly supports."""

    protocol: Protocol
    new_features: frozenset[TableFeature]

    @property
    def new_feature_names(self) -> tuple[str, ...]:
        return tuple(sorted(feature.name for feature in self.new_features))


def metadata_enabled_features(
    metadata: Metadata,
    current_protocol: Protocol,
) -> frozenset[TableFeature]:
    """Return catalog features whose auto-enable rule holds for ``metadata``.

    Rules are evaluated against the current, pre-upgrade protocol.
    """
    return frozenset(
        feature
        for feature in TABLE_FEATURES.all()
        if feature.is_auto_enabled_by_metadata
        and feature.auto_enable_required(current_protocol, metadata)
    )


def auto_upgrade_protocol(
    new_metadata: Metadata,
    manually_enabled: Iterable[TableFeature] | None,
    current_protocol: Protocol,
) -> ProtocolUpgrade | None:
    """Upgrade ``current_protocol`` to cover features required by ``new_metadata``.

    Parameters
    ----------
    new_metadata
        Metadata about to be committed.
    manually_enabled
        Features requested explicitly, e.g. through ``delta.feature.*`` overrides.
    current_protocol
        Protocol currently in effect for the table.

    Returns
    -------
    ProtocolUpgrade | None
        The merged protocol and newly supported features, or ``None`` when the
        current protocol already supports everything needed.
    """
    needed = dependency_closure(
        metadata_enabled_features(new_metadata, current_protocol) | set(manually_enabled or ())
    )
    all_needed = needed | current_protocol.supported_features()
    required = (
        Protocol(
            min_reader_version=TABLE_FEATURES_MIN_READER_VERSION,
            min_writer_version=TABLE_FEATURES_MIN_WRITER_VERSION,
        )
        .with_features(all_needed)
        .normalized()
    )
    if required.can_upgrade_to(current_protocol):
        return None
    upgraded = required.merge(current_protocol)
    new_features = upgraded.supported_features() - current_protocol.supported_features()
    _LOGGER.debug(
        "Upgrading protocol (%d, %d) -> (%d, %d); new features: %s",
        current_protocol.min_reader_version,
        current_protocol.min_writer_version,
        upgraded.min_reader_version,
        upgraded.min_writer_version,
        sorted(feature.name for feature in new_features),
    )
    return ProtocolUpgrade(protocol=upgraded, new_features=new_features)


__all__ = ["ProtocolUpgrade", "auto_upgrade_protocol", "metadata_enabled_features"]
