from __future__ import annotations

import logging
from dataclasses import dataclass

from .types import (
    FALLBACK_LINK_COLOR,
    LayoutLink,
    LayoutNode,
    Point,
    SankeyGraph,
    SankeyLink,
    SankeyNode,
)

logger = logging.getLogger(__name__)

# ============================================================================
# Link router
#
# Links are placed in ascending order of their target node's y so bands
# enter each target top-to-bottom roughly in the order their sources are
# stacked. Every node keeps two running offsets, one for bands leaving its
# right edge and one for bands entering its left edge; each placed band
# advances them by its thickness, so bands on the same edge never overlap.
# ============================================================================

# Floor that keeps near-zero flows visible
MIN_LINK_THICKNESS = 1


def route_links(
    graph: SankeyGraph,
    layout_nodes: dict[str, LayoutNode],
    scale: float,
) -> list[LayoutLink]:
    """Compute thickness, endpoints and resolved colors for every link."""
    placeholders: dict[str, LayoutNode] = {}

    def resolve(node_id: str) -> LayoutNode:
        layout_node = layout_nodes.get(node_id)
        if layout_node is not None:
            return layout_node
        if node_id not in placeholders:
            logger.warning("Link references unknown node %r; using a placeholder", node_id)
            placeholders[node_id] = _placeholder_node(node_id)
        return placeholders[node_id]

    def target_y(link: SankeyLink) -> float:
        target = layout_nodes.get(link.target_id)
        return target.y if target is not None else 0.0

    source_offsets: dict[str, float] = {}
    target_offsets: dict[str, float] = {}
    routed: list[LayoutLink] = []

    for link in sorted(graph.links, key=target_y):
        source = resolve(link.source_id)
        target = resolve(link.target_id)

        thickness = max(link.value * scale, MIN_LINK_THICKNESS)
        source_offset = source_offsets.get(link.source_id, 0.0)
        target_offset = target_offsets.get(link.target_id, 0.0)

        source_node = graph.node_by_id.get(link.source_id)
        target_node = graph.node_by_id.get(link.target_id)
        if link.color is not None:
            source_color = link.color
        elif source_node is not None:
            source_color = source_node.color
        else:
            source_color = FALLBACK_LINK_COLOR
        target_color = target_node.color if target_node is not None else source_color

        routed.append(LayoutLink(
            link=link,
            thickness=thickness,
            start_x=source.x + source.width,
            start_y=source.y + source_offset + thickness / 2,
            end_x=target.x,
            end_y=target.y + target_offset + thickness / 2,
            source_color=source_color,
            target_color=target_color,
            source_node=source.node,
            target_node=target.node,
        ))

        source_offsets[link.source_id] = source_offset + thickness
        target_offsets[link.target_id] = target_offset + thickness

    return routed


def _placeholder_node(node_id: str) -> LayoutNode:
    return LayoutNode(
        node=SankeyNode(node_id),
        column=0,
        row=0,
        x=0.0,
        y=0.0,
        width=0.0,
        height=0.0,
        incoming_value=0.0,
        outgoing_value=0.0,
        total_columns=0,
    )


# ============================================================================
# Band geometry: the closed S-curve region drawn for one link
# ============================================================================


@dataclass(frozen=True, slots=True)
class BezierCurve:
    start: Point
    control1: Point
    control2: Point
    end: Point


@dataclass(frozen=True, slots=True)
class BandPath:
    """Band outline: the top curve runs source -> target, the bottom one back."""

    top: BezierCurve
    bottom: BezierCurve
    thickness: float
    start: Point
    end: Point

    @property
    def midpoint(self) -> Point:
        """Center of the band halfway between its two ends."""
        return Point(
            x=(self.start.x + self.end.x) / 2,
            y=(self.start.y + self.end.y) / 2,
        )

    def svg_path(self) -> str:
        top, bottom = self.top, self.bottom
        return (
            f"M{top.start.x},{top.start.y} "
            f"C{top.control1.x},{top.control1.y} {top.control2.x},{top.control2.y} "
            f"{top.end.x},{top.end.y} "
            f"L{bottom.start.x},{bottom.start.y} "
            f"C{bottom.control1.x},{bottom.control1.y} {bottom.control2.x},{bottom.control2.y} "
            f"{bottom.end.x},{bottom.end.y} Z"
        )


def band_path(link: LayoutLink, offset_x: float = 0.0) -> BandPath:
    """Build the band outline for a routed link.

    Both control points sit at the horizontal midpoint between the ends;
    the top and bottom edges are offset by half the thickness from the
    band's center line. ``offset_x`` shifts the whole band horizontally.
    """
    start_x = link.start_x + offset_x
    end_x = link.end_x + offset_x
    control1_x = start_x + (end_x - start_x) * 0.5
    control2_x = end_x - (end_x - start_x) * 0.5
    half = link.thickness / 2

    top = BezierCurve(
        start=Point(start_x, link.start_y - half),
        control1=Point(control1_x, link.start_y - half),
        control2=Point(control2_x, link.end_y - half),
        end=Point(end_x, link.end_y - half),
    )
    bottom = BezierCurve(
        start=Point(end_x, link.end_y + half),
        control1=Point(control2_x, link.end_y + half),
        control2=Point(control1_x, link.start_y + half),
        end=Point(start_x, link.start_y + half),
    )
    return BandPath(
        top=top,
        bottom=bottom,
        thickness=link.thickness,
        start=Point(start_x, link.start_y),
        end=Point(end_x, link.end_y),
    )
