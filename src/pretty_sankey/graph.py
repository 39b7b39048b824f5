from __future__ import annotations

import logging
from collections.abc import Iterable

import networkx as nx

from .types import SankeyGraph, SankeyLink, SankeyNode

logger = logging.getLogger(__name__)

# ============================================================================
# Graph model: normalizes raw node/link input into a SankeyGraph.
# ============================================================================


def normalize(
    nodes: Iterable[SankeyNode],
    links: Iterable[SankeyLink],
    merge_links: bool = True,
) -> SankeyGraph:
    """Build a normalized graph from raw nodes and links.

    The node sequence keeps every listed node in its original order; the
    id index is last-wins. With ``merge_links`` parallel links sharing the
    same ordered (source, target) pair collapse into one whose value is
    their sum and whose color is the first non-null color seen.
    Endpoint ids are not validated here.
    """
    node_list = list(nodes)
    link_list = list(links)

    node_by_id: dict[str, SankeyNode] = {}
    for node in node_list:
        if node.id in node_by_id:
            logger.warning("Duplicate node id %r; the last definition wins", node.id)
        node_by_id[node.id] = node

    if merge_links:
        link_list = _merge_parallel_links(link_list)

    logger.debug(
        "Normalized graph: %d nodes, %d links (merge=%s)",
        len(node_list), len(link_list), merge_links,
    )
    return SankeyGraph(nodes=node_list, links=link_list, node_by_id=node_by_id)


def _merge_parallel_links(links: list[SankeyLink]) -> list[SankeyLink]:
    groups: dict[tuple[str, str], list[SankeyLink]] = {}
    for link in links:
        groups.setdefault((link.source_id, link.target_id), []).append(link)

    merged: list[SankeyLink] = []
    for (source_id, target_id), group in groups.items():
        if len(group) == 1:
            merged.append(group[0])
            continue
        color = next((l.color for l in group if l.color is not None), None)
        merged.append(SankeyLink(
            value=sum(l.value for l in group),
            source_id=source_id,
            target_id=target_id,
            color=color,
        ))
    return merged


# ============================================================================
# Flow graph: networkx view used for traversal and flow totals
# ============================================================================


def build_flow_graph(graph: SankeyGraph) -> nx.MultiDiGraph:
    """Build a MultiDiGraph with one edge per link touching a declared node.

    Declared nodes carry ``declared=True``. A link with one undeclared
    endpoint still counts on its declared side, so its undeclared id is
    added with ``declared=False``; links between two undeclared ids are
    left out.
    """
    flow = nx.MultiDiGraph()
    flow.add_nodes_from(graph.unique_node_ids(), declared=True)
    for link in graph.links:
        endpoints = (link.source_id, link.target_id)
        if not any(node_id in graph.node_by_id for node_id in endpoints):
            continue
        for node_id in endpoints:
            if node_id not in flow:
                flow.add_node(node_id, declared=False)
        flow.add_edge(
            link.source_id,
            link.target_id,
            value=link.value,
            link=link,
        )
    return flow


def declared_nodes(flow: nx.MultiDiGraph) -> list[str]:
    """Ids of the declared nodes in ``flow``, in insertion order."""
    return [node_id for node_id, declared in flow.nodes(data="declared") if declared]


def flow_totals(
    graph: SankeyGraph,
    flow: nx.MultiDiGraph | None = None,
) -> dict[str, tuple[float, float]]:
    """Map each declared node id to its (incoming, outgoing) value sums."""
    if flow is None:
        flow = build_flow_graph(graph)
    totals: dict[str, tuple[float, float]] = {}
    for node_id in declared_nodes(flow):
        incoming = sum((value for _, _, value in flow.in_edges(node_id, data="value")), 0.0)
        outgoing = sum((value for _, _, value in flow.out_edges(node_id, data="value")), 0.0)
        totals[node_id] = (incoming, outgoing)
    return totals
