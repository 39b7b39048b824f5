from __future__ import annotations

from .types import (
    AnnotationContext,
    LabelContext,
    LayoutLink,
    LayoutNode,
    ValueFormatter,
)

# ============================================================================
# Value formatting and view-model construction for labels and annotations
# ============================================================================


def format_integer(value: float) -> str:
    """Round to the nearest integer; no decimals, no thousands separator."""
    return f"{value:.0f}"


def label_value(layout_node: LayoutNode) -> float:
    """Value shown next to a node: outgoing in the first column, incoming elsewhere."""
    if layout_node.is_first_column:
        return layout_node.outgoing_value
    return layout_node.incoming_value


def label_context(
    layout_node: LayoutNode,
    formatter: ValueFormatter = format_integer,
    value: float | None = None,
) -> LabelContext:
    if value is None:
        value = label_value(layout_node)
    return LabelContext(
        node=layout_node.node,
        value=value,
        formatted_value=formatter(value),
        is_first_column=layout_node.is_first_column,
        is_last_column=layout_node.is_last_column,
        column=layout_node.column,
        total_columns=layout_node.total_columns,
    )


def annotation_context(
    layout_link: LayoutLink,
    formatter: ValueFormatter = format_integer,
) -> AnnotationContext:
    return AnnotationContext(
        link=layout_link.link,
        source_node=layout_link.source_node,
        target_node=layout_link.target_node,
        formatted_value=formatter(layout_link.link.value),
    )
