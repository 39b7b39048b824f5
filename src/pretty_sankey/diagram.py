from __future__ import annotations

import logging
from typing import Callable

from .layout import compute_layout
from .renderer import render_svg, resolve_options
from .types import (
    AnnotationBuilder,
    LabelBuilder,
    RenderOptions,
    SankeyGraph,
    SankeyLayout,
)

logger = logging.getLogger(__name__)


class SankeyDiagram:
    """Interactive Sankey diagram: data, options, and the selected link.

    The layout is rebuilt wholesale whenever the canvas size, the layout
    options, or the data change; otherwise the last layout is reused.
    Selection never feeds back into geometry.
    """

    def __init__(
        self,
        data: SankeyGraph,
        options: RenderOptions | None = None,
        label_builder: LabelBuilder | None = None,
        annotation_builder: AnnotationBuilder | None = None,
        on_column_count: Callable[[int], None] | None = None,
    ) -> None:
        self._data = data
        self.options = options if options is not None else RenderOptions()
        self.label_builder = label_builder
        self.annotation_builder = annotation_builder
        self.on_column_count = on_column_count
        self.selected_link_id: str | None = None

        self._layout: SankeyLayout | None = None
        self._layout_key: tuple | None = None
        self._reported_columns: int | None = None

    @property
    def data(self) -> SankeyGraph:
        return self._data

    @data.setter
    def data(self, data: SankeyGraph) -> None:
        self._data = data
        self._layout = None
        self._layout_key = None
        self.selected_link_id = None

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    @property
    def has_selection(self) -> bool:
        """True when the selected id names one of the current links."""
        if self.selected_link_id is None:
            return False
        return any(link.id == self.selected_link_id for link in self._data.links)

    def select_link(self, link_id: str) -> None:
        self.selected_link_id = link_id

    def toggle_link(self, link_id: str) -> None:
        """Select ``link_id``, or clear the selection if it is already selected."""
        if self.selected_link_id == link_id:
            self.selected_link_id = None
        else:
            self.selected_link_id = link_id

    def clear_selection(self) -> None:
        self.selected_link_id = None

    # ------------------------------------------------------------------
    # Layout & rendering
    # ------------------------------------------------------------------

    def draw_size(self, width: float, height: float) -> tuple[float, float]:
        """Area available to the layout once outside labels take their margins."""
        opts = resolve_options(self.options)
        if opts["label_position"] == "outside":
            return width - opts["label_space"] * 2, height
        return width, height

    def layout(self, width: float, height: float) -> SankeyLayout:
        opts = resolve_options(self.options)
        draw_width, draw_height = self.draw_size(width, height)
        key = (
            draw_width,
            draw_height,
            opts["node_width"],
            opts["node_padding"],
            opts["column_padding"],
        )
        if self._layout is None or key != self._layout_key:
            logger.debug("Computing layout for %sx%s", draw_width, draw_height)
            self._layout = compute_layout(
                self._data,
                draw_width,
                draw_height,
                node_width=opts["node_width"],
                node_padding=opts["node_padding"],
                column_padding=opts["column_padding"],
            )
            self._layout_key = key
            self._report_column_count(self._layout.column_count)
        return self._layout

    def render(self, width: float, height: float) -> str:
        """Render the diagram into a ``width`` x ``height`` SVG."""
        return render_svg(
            self.layout(width, height),
            self.options,
            selected_link_id=self.selected_link_id,
            label_builder=self.label_builder,
            annotation_builder=self.annotation_builder,
        )

    def _report_column_count(self, count: int) -> None:
        if self.on_column_count is not None and count != self._reported_columns:
            self.on_column_count(count)
        self._reported_columns = count
