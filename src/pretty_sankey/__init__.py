"""pretty-sankey: lay out Sankey flow diagrams and render them to SVG."""

from __future__ import annotations

from collections.abc import Iterable

from .types import (
    AnnotationContext,
    ColumnAssignment,
    LabelContext,
    LayoutLink,
    LayoutNode,
    RenderOptions,
    SankeyGraph,
    SankeyLayout,
    SankeyLink,
    SankeyNode,
    AnnotationBuilder,
    LabelBuilder,
)
from .theme import DiagramColors, THEMES, DEFAULTS
from .graph import normalize
from .columns import assign_columns
from .layout import compute_layout, layout_columns
from .routing import BandPath, band_path, route_links
from .formatting import format_integer
from .renderer import render_svg, default_label, default_annotation
from .diagram import SankeyDiagram

__all__ = [
    "render_sankey",
    "normalize",
    "assign_columns",
    "layout_columns",
    "route_links",
    "compute_layout",
    "band_path",
    "render_svg",
    "format_integer",
    "default_label",
    "default_annotation",
    "SankeyDiagram",
    "SankeyNode",
    "SankeyLink",
    "SankeyGraph",
    "SankeyLayout",
    "LayoutNode",
    "LayoutLink",
    "ColumnAssignment",
    "BandPath",
    "LabelContext",
    "AnnotationContext",
    "RenderOptions",
    "DiagramColors",
    "THEMES",
    "DEFAULTS",
]


def render_sankey(
    nodes: Iterable[SankeyNode],
    links: Iterable[SankeyLink],
    width: float,
    height: float,
    options: RenderOptions | None = None,
    merge_links: bool = True,
    selected_link_id: str | None = None,
    label_builder: LabelBuilder | None = None,
    annotation_builder: AnnotationBuilder | None = None,
) -> str:
    """Normalize, lay out and render a Sankey diagram to an SVG string."""
    diagram = SankeyDiagram(
        normalize(nodes, links, merge_links=merge_links),
        options,
        label_builder=label_builder,
        annotation_builder=annotation_builder,
    )
    if selected_link_id is not None:
        diagram.select_link(selected_link_id)
    return diagram.render(width, height)
