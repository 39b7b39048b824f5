from __future__ import annotations

import logging

from .columns import assign_columns
from .graph import flow_totals
from .routing import route_links
from .types import ColumnAssignment, LayoutNode, SankeyGraph, SankeyLayout

logger = logging.getLogger(__name__)

# ============================================================================
# Vertical layout solver
#
# Layout strategy:
#   1. Spread columns evenly across the drawing width
#   2. Derive one value-to-height scale from the densest column
#   3. Stack each column's nodes top-to-bottom with fixed padding
#   4. Center each column block vertically
#   5. Route links between the placed nodes
# ============================================================================

LAYOUT_DEFAULTS = {
    "node_width": 20,
    "node_padding": 10,
    "column_padding": 40,
}

# Floor that keeps very-low-value nodes visible
MIN_NODE_HEIGHT = 4


def layout_columns(
    graph: SankeyGraph,
    assignment: ColumnAssignment,
    draw_width: float,
    draw_height: float,
    node_width: float,
    node_padding: float,
) -> tuple[dict[str, LayoutNode], float]:
    """Position every assigned node.

    Returns the id -> LayoutNode mapping and the height scale factor
    (value units to layout units) shared by nodes and links.
    """
    columns = assignment.columns
    if not columns:
        return {}, 1.0

    totals = flow_totals(graph)
    n_columns = len(columns)
    column_spacing = (draw_width - node_width) / (n_columns - 1) if n_columns > 1 else 0

    def flow_value(node_id: str) -> float:
        incoming, outgoing = totals.get(node_id, (0.0, 0.0))
        return max(incoming, outgoing)

    max_column_value = max(sum(flow_value(n) for n in column) for column in columns)
    max_column_count = max(len(column) for column in columns)
    available_height = draw_height - node_padding * (max_column_count - 1)
    scale = available_height / max_column_value if max_column_value > 0 else 1.0

    layout_nodes: dict[str, LayoutNode] = {}
    for col_index, column in enumerate(columns):
        x = col_index * column_spacing
        heights = [max(flow_value(n) * scale, MIN_NODE_HEIGHT) for n in column]
        block_height = sum(heights) + node_padding * (len(column) - 1)
        current_y = (draw_height - block_height) / 2

        for row, (node_id, height) in enumerate(zip(column, heights)):
            incoming, outgoing = totals.get(node_id, (0.0, 0.0))
            layout_nodes[node_id] = LayoutNode(
                node=graph.node_by_id[node_id],
                column=col_index,
                row=row,
                x=x,
                y=current_y,
                width=node_width,
                height=height,
                incoming_value=incoming,
                outgoing_value=outgoing,
                total_columns=n_columns,
            )
            current_y += height + node_padding

    logger.debug("Laid out %d columns with scale %.4f", n_columns, scale)
    return layout_nodes, scale


def compute_layout(
    graph: SankeyGraph,
    width: float,
    height: float,
    node_width: float = LAYOUT_DEFAULTS["node_width"],
    node_padding: float = LAYOUT_DEFAULTS["node_padding"],
    column_padding: float = LAYOUT_DEFAULTS["column_padding"],
) -> SankeyLayout:
    """Run a full layout pass over a normalized graph.

    The result is a new, self-contained layout: nodes in node-sequence
    order, links in routing order, plus the column list and scale used.
    ``column_padding`` is recorded with the layout but does not move
    columns; they always span the full drawing width.
    """
    assignment = assign_columns(graph)
    layout_nodes, scale = layout_columns(
        graph, assignment, width, height, node_width, node_padding,
    )
    links = route_links(graph, layout_nodes, scale)

    return SankeyLayout(
        width=width,
        height=height,
        nodes=[layout_nodes[n] for n in graph.unique_node_ids() if n in layout_nodes],
        links=links,
        columns=assignment.columns,
        scale=scale,
        node_width=node_width,
        node_padding=node_padding,
        column_padding=column_padding,
    )
