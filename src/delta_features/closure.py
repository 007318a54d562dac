"""Dependency closure over table-feature ``required_features`` edges."""

from __future__ import annotations

from collections.abc import Iterable

from delta_features.catalog import TABLE_FEATURES, FeatureRegistry
from delta_features.descriptor import TableFeature


def dependency_closure(
    features: Iterable[TableFeature],
    *,
    registry: FeatureRegistry = TABLE_FEATURES,
) -> frozenset[TableFeature]:
    """Return the smallest superset of ``features`` closed under dependencies.

    Each pass unions the direct dependencies of every feature collected so far
    and stops once a pass adds nothing. The set can only grow and is bounded by
    the catalog, so a dependency cycle converges to the same fixpoint instead of
    looping.

    Parameters
    ----------
    features
        Seed features.
    registry
        Registry used to resolve dependency names.

    Returns
    -------
    frozenset[TableFeature]
        Seed features plus everything they transitively require.
    """
    closed: set[TableFeature] = set(features)
    max_passes = len(registry) + len(closed) + 1
    for _ in range(max_passes):
        additions = {
            dependency
            for feature in closed
            for dependency in registry.required_features(feature)
        } - closed
        if not additions:
            break
        closed |= additions
    return frozenset(closed)


__all__ = ["dependency_closure"]
