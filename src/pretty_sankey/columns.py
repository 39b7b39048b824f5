from __future__ import annotations

import logging
from collections import deque

import networkx as nx

from .graph import build_flow_graph
from .types import ColumnAssignment, SankeyGraph

logger = logging.getLogger(__name__)

# ============================================================================
# Column assignment
#
# Breadth-first traversal seeded at source nodes. Each node is expanded
# once, the first time it is dequeued; a target's column is raised to
# (source column + 1) by every predecessor expanded before it. With several
# predecessors at different depths the final column depends on traversal
# order, not on the longest path from a source.
#
# Links touching an undeclared id still count toward in-degree, so a node
# fed only from an unknown id is not a source; the traversal never enters
# undeclared ids.
#
# Cycles are not validated: when no node is free of incoming links, every
# node with an outgoing link seeds the traversal and the back edges are
# simply never followed twice.
# ============================================================================


def assign_columns(graph: SankeyGraph) -> ColumnAssignment:
    """Assign every declared node an integer column.

    Returns the id -> column mapping and the densely packed column list
    (no empty columns; ids ordered by the graph's node sequence).
    """
    flow = build_flow_graph(graph)
    node_ids = graph.unique_node_ids()

    if not nx.is_directed_acyclic_graph(flow.subgraph(node_ids)):
        logger.warning("Flow graph contains a cycle; columns are assigned heuristically")

    sources = [n for n in node_ids if flow.in_degree(n) == 0]
    if not sources:
        sources = [n for n in node_ids if flow.out_degree(n) > 0]

    raw_columns = _propagate(flow, sources)

    # Unreached nodes (isolated, or cut off by the cycle fallback) sit in column 0
    for node_id in node_ids:
        raw_columns.setdefault(node_id, 0)

    columns: list[list[str]] = []
    for value in sorted({raw_columns[n] for n in node_ids}):
        columns.append([n for n in node_ids if raw_columns[n] == value])

    column_of = {
        node_id: index
        for index, column in enumerate(columns)
        for node_id in column
    }

    logger.debug("Assigned %d nodes to %d columns", len(node_ids), len(columns))
    return ColumnAssignment(column_of=column_of, columns=columns)


def _propagate(flow: nx.MultiDiGraph, sources: list[str]) -> dict[str, int]:
    """Run the single-visit breadth-first traversal; only visited ids are returned."""
    columns: dict[str, int] = {node_id: 0 for node_id in sources}
    visited: set[str] = set()
    queue = deque(sources)

    while queue:
        current = queue.popleft()
        if current in visited:
            continue
        visited.add(current)

        current_column = columns.get(current, 0)
        for _, target in flow.out_edges(current):
            if not flow.nodes[target]["declared"]:
                continue
            columns[target] = max(columns.get(target, 0), current_column + 1)
            if target not in visited:
                queue.append(target)

    return {node_id: column for node_id, column in columns.items() if node_id in visited}
