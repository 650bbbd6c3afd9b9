"""Weighted co-change graph.

Files are nodes; two files are linked when they changed in the same
commit. Edge ``count`` is the number of shared commits and ``strength``
the Jaccard ratio of their commit sets. Used to annotate groups with
cohesion statistics.
"""

from collections.abc import Iterable
from itertools import combinations

import networkx as nx

# Bulk commits (vendoring, reformatting) would add O(n^2) edges
DEFAULT_MAX_SET_SIZE = 100


def cochange_graph(
    change_sets: Iterable[Iterable[str]],
    max_set_size: int = DEFAULT_MAX_SET_SIZE,
) -> nx.Graph:
    """Build an undirected co-change graph from change sets.

    Args:
        change_sets: Change sets, one per commit.
        max_set_size: Change sets with more files than this add their
            nodes but no pair edges.

    Returns:
        NetworkX Graph. Nodes carry ``changes``; edges carry ``count``
        and ``strength``.
    """
    G = nx.Graph()

    for change_set in change_sets:
        files = sorted(set(change_set))
        for f in files:
            if f in G:
                G.nodes[f]["changes"] += 1
            else:
                G.add_node(f, changes=1)

        if len(files) > max_set_size:
            continue

        for a, b in combinations(files, 2):
            if G.has_edge(a, b):
                G[a][b]["count"] += 1
            else:
                G.add_edge(a, b, count=1)

    for a, b, data in G.edges(data=True):
        count = data["count"]
        total = G.nodes[a]["changes"] + G.nodes[b]["changes"] - count
        data["strength"] = round(count / total, 3) if total > 0 else 0.0

    return G


def group_cohesion(G: nx.Graph, group: Iterable[str]) -> float:
    """Compute how densely a group's files changed together.

    Cohesion = internal edges / (n * (n - 1) / 2).
    A single-file group has cohesion 1.0.

    Args:
        G: Co-change graph.
        group: Files in the group.

    Returns:
        Cohesion score between 0.0 and 1.0.
    """
    members = [f for f in set(group) if f in G]
    size = len(members)
    if size <= 1:
        return 1.0

    internal_edges = G.subgraph(members).number_of_edges()
    max_edges = size * (size - 1) / 2

    return min(1.0, internal_edges / max_edges)


def components(G: nx.Graph) -> list[set[str]]:
    """Connected components of the co-change graph.

    Only matches the clustering engine when no change set exceeded
    ``max_set_size`` while building the graph.
    """
    return [set(c) for c in nx.connected_components(G)]
