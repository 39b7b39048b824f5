from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Literal

if TYPE_CHECKING:
    import networkx as nx

# ============================================================================
# Input graph: nodes and value-weighted links as supplied by the caller
# ============================================================================

# Colors are opaque to the engine; the SVG renderer passes them through
# as CSS color values.
DEFAULT_NODE_COLOR = "blue"
FALLBACK_LINK_COLOR = "gray"

LabelPosition = Literal["inside", "outside"]

# Alignment handed to label builders: "start" when the label sits to the
# right of its node, "end" when it sits to the left.
LabelAlignment = Literal["start", "end"]


@dataclass(slots=True, eq=False)
class SankeyNode:
    """A flow stage. Two nodes are equal iff their ids match."""

    id: str
    color: str = DEFAULT_NODE_COLOR
    label: str | None = None

    def __post_init__(self) -> None:
        if self.label is None:
            self.label = self.id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SankeyNode):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


def _new_link_id() -> str:
    return uuid.uuid4().hex


@dataclass(slots=True)
class SankeyLink:
    value: float
    source_id: str
    target_id: str
    color: str | None = None
    id: str = field(default_factory=_new_link_id)


@dataclass(slots=True)
class SankeyGraph:
    """Normalized graph: ordered nodes, links, and an id index (last wins)."""

    nodes: list[SankeyNode]
    links: list[SankeyLink]
    node_by_id: dict[str, SankeyNode]

    def unique_node_ids(self) -> list[str]:
        """Node ids in order of first occurrence."""
        return list(dict.fromkeys(node.id for node in self.nodes))

    def to_networkx(self) -> nx.MultiDiGraph:
        from .graph import build_flow_graph
        return build_flow_graph(self)


# ============================================================================
# Layout: produced once per pass, never mutated afterwards
# ============================================================================

@dataclass(frozen=True, slots=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class ColumnAssignment:
    column_of: dict[str, int]
    columns: list[list[str]]


@dataclass(frozen=True, slots=True)
class LayoutNode:
    node: SankeyNode
    column: int
    row: int
    x: float
    y: float
    width: float
    height: float
    incoming_value: float
    outgoing_value: float
    total_columns: int

    @property
    def flow_value(self) -> float:
        return max(self.incoming_value, self.outgoing_value)

    @property
    def is_first_column(self) -> bool:
        return self.column == 0

    @property
    def is_last_column(self) -> bool:
        return self.column == self.total_columns - 1


@dataclass(frozen=True, slots=True)
class LayoutLink:
    link: SankeyLink
    thickness: float
    start_x: float
    start_y: float
    end_x: float
    end_y: float
    source_color: str
    target_color: str
    source_node: SankeyNode
    target_node: SankeyNode


@dataclass(frozen=True, slots=True)
class SankeyLayout:
    width: float
    height: float
    nodes: list[LayoutNode]
    links: list[LayoutLink]
    columns: list[list[str]]
    scale: float
    node_width: float
    node_padding: float
    column_padding: float

    @property
    def column_count(self) -> int:
        return len(self.columns)

    def node(self, node_id: str) -> LayoutNode | None:
        for layout_node in self.nodes:
            if layout_node.node.id == node_id:
                return layout_node
        return None


# ============================================================================
# View models: the only objects handed to custom label/annotation builders
# ============================================================================

@dataclass(frozen=True, slots=True)
class LabelContext:
    node: SankeyNode
    value: float
    formatted_value: str
    is_first_column: bool
    is_last_column: bool
    column: int
    total_columns: int


@dataclass(frozen=True, slots=True)
class AnnotationContext:
    link: SankeyLink
    source_node: SankeyNode
    target_node: SankeyNode
    formatted_value: str


ValueFormatter = Callable[[float], str]
LabelBuilder = Callable[[LabelContext, LabelAlignment], str]
AnnotationBuilder = Callable[[AnnotationContext], str]


# ============================================================================
# Render options: user-facing configuration
# ============================================================================

@dataclass(slots=True)
class RenderOptions:
    # Colors
    bg: str | None = None
    fg: str | None = None
    muted: str | None = None
    surface: str | None = None
    border: str | None = None
    transparent: bool | None = None
    # Layout
    node_width: float | None = None
    node_padding: float | None = None
    column_padding: float | None = None
    # Links
    link_opacity: float | None = None
    gradient_links: bool | None = None
    # Labels
    show_labels: bool | None = None
    label_position: LabelPosition | None = None
    label_space: float | None = None
    font: str | None = None
    label_font_size: float | None = None
    label_font_weight: int | None = None
    label_color: str | None = None
    value_font_size: float | None = None
    value_font_weight: int | None = None
    value_color: str | None = None
    value_format: ValueFormatter | None = None
