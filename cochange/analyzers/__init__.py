"""Analyzers for co-change clustering."""

from cochange.analyzers.clustering import (
    ChangeSet,
    ClusterEngine,
    DisjointSet,
    Partition,
    cluster,
    cluster_by_scan,
)
from cochange.analyzers.cochange_graph import (
    cochange_graph,
    components,
    group_cohesion,
)

__all__ = [
    "ChangeSet",
    "ClusterEngine",
    "DisjointSet",
    "Partition",
    "cluster",
    "cluster_by_scan",
    "cochange_graph",
    "components",
    "group_cohesion",
]
