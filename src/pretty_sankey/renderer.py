from __future__ import annotations

from dataclasses import fields

from .formatting import annotation_context, format_integer, label_context, label_value
from .layout import LAYOUT_DEFAULTS
from .routing import band_path
from .styles import (
    ANNOTATION_LINE_GAP,
    ANNOTATION_PADDING,
    FONT_SIZES,
    FONT_WEIGHTS,
    LABEL_GAP,
    LABEL_LINE_GAP,
    SELECTION_OPACITY,
    TEXT_BASELINE_SHIFT,
    estimate_text_width,
)
from .theme import DEFAULTS, DiagramColors, build_style_block, svg_open_tag
from .types import (
    AnnotationBuilder,
    AnnotationContext,
    LabelAlignment,
    LabelBuilder,
    LabelContext,
    LayoutLink,
    LayoutNode,
    RenderOptions,
    SankeyLayout,
)

# ============================================================================
# SVG renderer: converts a SankeyLayout into an SVG string.
#
# Render order (back to front):
#   1. Link bands
#   2. Node bars
#   3. Node labels
#   4. Annotation for the selected link
# ============================================================================

RENDER_DEFAULTS = {
    **LAYOUT_DEFAULTS,
    "bg": DEFAULTS["bg"],
    "fg": DEFAULTS["fg"],
    "muted": None,
    "surface": None,
    "border": None,
    "transparent": False,
    "link_opacity": 0.5,
    "gradient_links": False,
    "show_labels": True,
    "label_position": "inside",
    "label_space": 56,
    "font": "Inter",
    "label_font_size": 13,
    "label_font_weight": 500,
    "label_color": "var(--_text)",
    "value_font_size": 11,
    "value_font_weight": 400,
    "value_color": "var(--_text-sec)",
    "value_format": format_integer,
}

LABEL_POSITIONS = ("inside", "outside")


def resolve_options(options: RenderOptions | None) -> dict:
    """Merge user options over RENDER_DEFAULTS."""
    opts = dict(RENDER_DEFAULTS)
    if options:
        for f in fields(options):
            value = getattr(options, f.name)
            if value is not None:
                opts[f.name] = value
    if opts["label_position"] not in LABEL_POSITIONS:
        raise ValueError(
            f"label_position must be one of {LABEL_POSITIONS}, got {opts['label_position']!r}"
        )
    return opts


def build_colors(opts: dict) -> DiagramColors:
    return DiagramColors(
        bg=opts["bg"],
        fg=opts["fg"],
        muted=opts["muted"],
        surface=opts["surface"],
        border=opts["border"],
    )


def render_svg(
    layout: SankeyLayout,
    options: RenderOptions | None = None,
    selected_link_id: str | None = None,
    label_builder: LabelBuilder | None = None,
    annotation_builder: AnnotationBuilder | None = None,
) -> str:
    """Render a computed layout as an SVG string.

    ``selected_link_id`` emphasizes one link (others are dimmed) and shows
    its annotation. Builders return SVG fragments drawn around a local
    origin: the label anchor point or the band midpoint.
    """
    opts = resolve_options(options)
    offset_x = opts["label_space"] if opts["label_position"] == "outside" else 0
    formatter = opts["value_format"]

    if label_builder is None:
        def label_builder(context: LabelContext, alignment: LabelAlignment) -> str:
            return _default_label(context, alignment, opts)
    if annotation_builder is None:
        annotation_builder = default_annotation

    selected = next(
        (ll for ll in layout.links if ll.link.id == selected_link_id),
        None,
    ) if selected_link_id is not None else None
    has_selection = selected is not None

    parts: list[str] = []
    parts.append(svg_open_tag(
        layout.width + offset_x * 2, layout.height,
        build_colors(opts), opts["transparent"],
    ))
    parts.append(build_style_block(opts["font"]))

    if opts["gradient_links"] and layout.links:
        parts.append("<defs>")
        for index, layout_link in enumerate(layout.links):
            parts.append(_link_gradient(index, layout_link, offset_x))
        parts.append("</defs>")

    # 1. Link bands
    for index, layout_link in enumerate(layout.links):
        if has_selection:
            emphasis = SELECTION_OPACITY[
                "selected_link" if layout_link is selected else "dimmed_link"
            ]
        else:
            emphasis = 1.0
        parts.append(_render_link(index, layout_link, offset_x, emphasis, opts))

    # 2. Node bars
    for layout_node in layout.nodes:
        parts.append(_render_node(layout_node, offset_x))

    # 3. Node labels
    if opts["show_labels"]:
        label_opacity = SELECTION_OPACITY["label"] if has_selection else 1.0
        for layout_node in layout.nodes:
            for alignment, x, value in _label_placements(layout_node, opts["label_position"]):
                context = label_context(layout_node, formatter, value)
                parts.append(
                    f'<g transform="translate({x + offset_x},{layout_node.y + layout_node.height / 2})" '
                    f'opacity="{label_opacity}">\n'
                    f"{label_builder(context, alignment)}\n</g>"
                )

    # 4. Annotation
    if selected is not None:
        mid = band_path(selected, offset_x).midpoint
        context = annotation_context(selected, formatter)
        parts.append(
            f'<g transform="translate({mid.x},{mid.y})">\n'
            f"{annotation_builder(context)}\n</g>"
        )

    parts.append("</svg>")
    return "\n".join(parts)


# ============================================================================
# Link rendering
# ============================================================================


def _gradient_id(index: int) -> str:
    return f"sankey-link-gradient-{index}"


def _link_gradient(index: int, layout_link: LayoutLink, offset_x: float) -> str:
    return (
        f'  <linearGradient id="{_gradient_id(index)}" gradientUnits="userSpaceOnUse" '
        f'x1="{layout_link.start_x + offset_x}" y1="0" x2="{layout_link.end_x + offset_x}" y2="0">\n'
        f'    <stop offset="0%" stop-color="{escape_xml(layout_link.source_color)}" />\n'
        f'    <stop offset="100%" stop-color="{escape_xml(layout_link.target_color)}" />\n'
        f"  </linearGradient>"
    )


def _render_link(
    index: int,
    layout_link: LayoutLink,
    offset_x: float,
    emphasis: float,
    opts: dict,
) -> str:
    path = band_path(layout_link, offset_x)
    if opts["gradient_links"]:
        fill = f"url(#{_gradient_id(index)})"
    else:
        fill = escape_xml(layout_link.source_color)
    return (
        f'<path d="{path.svg_path()}" fill="{fill}" fill-opacity="{opts["link_opacity"]}" '
        f'opacity="{emphasis}" data-link-id="{escape_xml(layout_link.link.id)}" />'
    )


# ============================================================================
# Node rendering
# ============================================================================


def _render_node(layout_node: LayoutNode, offset_x: float) -> str:
    return (
        f'<rect x="{layout_node.x + offset_x}" y="{layout_node.y}" '
        f'width="{layout_node.width}" height="{layout_node.height}" '
        f'fill="{escape_xml(layout_node.node.color)}" '
        f'data-node-id="{escape_xml(layout_node.node.id)}" />'
    )


def _label_placements(
    layout_node: LayoutNode,
    label_position: str,
) -> list[tuple[LabelAlignment, float, float]]:
    """Where a node's labels go: (alignment, anchor x, value shown).

    Inside: first-column labels sit right of the node, all others left.
    Outside: only the first column (left of the node) and the last column
    (right of the node) are labelled; a single-column graph gets both.
    """
    right = layout_node.x + layout_node.width + LABEL_GAP
    left = layout_node.x - LABEL_GAP

    if label_position == "inside":
        if layout_node.is_first_column:
            return [("start", right, label_value(layout_node))]
        return [("end", left, layout_node.incoming_value)]

    placements: list[tuple[LabelAlignment, float, float]] = []
    if layout_node.is_first_column:
        placements.append(("end", left, label_value(layout_node)))
    if layout_node.is_last_column:
        placements.append(("start", right, layout_node.incoming_value))
    return placements


# ============================================================================
# Default label & annotation views
# ============================================================================


def default_label(
    context: LabelContext,
    alignment: LabelAlignment,
    options: RenderOptions | None = None,
) -> str:
    """Node name above its formatted value, anchored at the local origin."""
    return _default_label(context, alignment, resolve_options(options))


def _default_label(context: LabelContext, alignment: LabelAlignment, opts: dict) -> str:
    label_size = opts["label_font_size"]
    value_size = opts["value_font_size"]
    total = label_size + LABEL_LINE_GAP + value_size
    label_y = -total / 2 + label_size / 2
    value_y = total / 2 - value_size / 2

    return (
        f'<text x="0" y="{label_y}" text-anchor="{alignment}" dy="{TEXT_BASELINE_SHIFT}" '
        f'font-size="{label_size}" font-weight="{opts["label_font_weight"]}" '
        f'fill="{escape_xml(opts["label_color"])}">{escape_xml(context.node.label)}</text>\n'
        f'<text x="0" y="{value_y}" text-anchor="{alignment}" dy="{TEXT_BASELINE_SHIFT}" '
        f'font-size="{value_size}" font-weight="{opts["value_font_weight"]}" '
        f'fill="{escape_xml(opts["value_color"])}">{escape_xml(context.formatted_value)}</text>'
    )


def default_annotation(context: AnnotationContext) -> str:
    """Link endpoints over the formatted value, on a rounded callout."""
    title = f"{context.source_node.label} → {context.target_node.label}"
    title_size = FONT_SIZES["annotation_title"]
    value_size = FONT_SIZES["annotation_value"]

    text_width = max(
        estimate_text_width(title, title_size, FONT_WEIGHTS["annotation_title"]),
        estimate_text_width(context.formatted_value, value_size, FONT_WEIGHTS["annotation_value"]),
    )
    bg_width = text_width + ANNOTATION_PADDING * 2
    content_height = title_size + ANNOTATION_LINE_GAP + value_size
    bg_height = content_height + ANNOTATION_PADDING * 2
    title_y = -content_height / 2 + title_size / 2
    value_y = content_height / 2 - value_size / 2

    return (
        f'<rect x="{-bg_width / 2}" y="{-bg_height / 2}" width="{bg_width}" height="{bg_height}" '
        f'rx="6" ry="6" fill="var(--_annotation-fill)" stroke="var(--_annotation-stroke)" '
        f'stroke-width="0.75" />\n'
        f'<text x="0" y="{title_y}" text-anchor="middle" dy="{TEXT_BASELINE_SHIFT}" '
        f'font-size="{title_size}" font-weight="{FONT_WEIGHTS["annotation_title"]}" '
        f'fill="var(--_text)">{escape_xml(title)}</text>\n'
        f'<text x="0" y="{value_y}" text-anchor="middle" dy="{TEXT_BASELINE_SHIFT}" '
        f'font-size="{value_size}" font-weight="{FONT_WEIGHTS["annotation_value"]}" '
        f'fill="var(--_text-sec)">{escape_xml(context.formatted_value)}</text>'
    )


# ============================================================================
# Utilities
# ============================================================================


def escape_xml(text: str) -> str:
    """Escape special XML characters in text content."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#39;")
    )
