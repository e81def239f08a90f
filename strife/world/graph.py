"""networkx views over settlement relations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Mapping, TypeAlias

import networkx as nx

if TYPE_CHECKING:  # pragma: no cover - typing only
    RelationGraph: TypeAlias = nx.Graph[str]
else:  # pragma: no cover - runtime alias without subscripting
    RelationGraph: TypeAlias = nx.Graph


def build_relation_graph(
    settlements: Iterable[str],
    standings: Mapping[tuple[str, str], float],
    *,
    neutral_value: float = 0.0,
) -> RelationGraph:
    """Return an undirected graph with one weighted edge per stored standing.

    Standings that mention a settlement outside ``settlements`` are skipped,
    which keeps dead or unknown settlements out of the view.
    """

    graph: RelationGraph = nx.Graph(neutral_value=float(neutral_value))
    graph.add_nodes_from(settlements)
    graph.add_weighted_edges_from(
        (first, second, float(value))
        for (first, second), value in standings.items()
        if first != second and first in graph and second in graph
    )
    return graph


def hostile_pairs(graph: RelationGraph, threshold: float = -15.0) -> list[tuple[str, str]]:
    """Return every pair at or below ``threshold`` as sorted, canonical tuples."""

    hostile = nx.subgraph_view(
        graph, filter_edge=lambda a, b: graph.edges[a, b]["weight"] <= threshold
    )
    return sorted(tuple(sorted((str(a), str(b)))) for a, b in hostile.edges)


__all__ = ["build_relation_graph", "hostile_pairs"]
