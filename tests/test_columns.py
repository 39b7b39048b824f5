"""Column assignment tests -- breadth-first traversal from source nodes.

These tests call normalize + assign_columns directly and inspect the
id -> column mapping and the packed column list.
"""
from __future__ import annotations

import logging

import pytest

from pretty_sankey.columns import assign_columns
from pretty_sankey.graph import normalize
from pretty_sankey.types import SankeyLink, SankeyNode


def columns_for(node_ids: str, links: list[tuple[str, str, float]]):
    """Helper: build a graph from space-separated ids and (source, target, value) tuples."""
    nodes = [SankeyNode(n) for n in node_ids.split()]
    return assign_columns(normalize(nodes, [SankeyLink(v, s, t) for s, t, v in links]))


QUICK_START_LINKS = [
    ("A", "X", 5), ("A", "Y", 7), ("A", "Z", 6),
    ("B", "X", 2), ("B", "Y", 9), ("B", "Z", 4),
    ("X", "Final1", 4), ("X", "Final2", 3),
    ("Y", "Final1", 10), ("Y", "Final2", 6),
    ("Z", "Final1", 5), ("Z", "Final2", 5),
]


# ============================================================================
# Layered graphs
# ============================================================================


class TestLayeredGraphs:
    def test_three_tier_graph(self):
        result = columns_for(
            "A B X Y Final",
            [("A", "X", 5), ("A", "Y", 7), ("B", "X", 2), ("B", "Y", 9),
             ("X", "Final", 7), ("Y", "Final", 16)],
        )
        assert result.column_of["A"] == result.column_of["B"] == 0
        assert result.column_of["X"] == result.column_of["Y"] == 1
        assert result.column_of["Final"] == 2
        assert result.columns == [["A", "B"], ["X", "Y"], ["Final"]]

    def test_quick_start_example(self):
        result = columns_for("A B X Y Z Final1 Final2", QUICK_START_LINKS)
        assert result.columns == [["A", "B"], ["X", "Y", "Z"], ["Final1", "Final2"]]

    def test_targets_sit_right_of_their_sources(self):
        result = columns_for("A B X Y Z Final1 Final2", QUICK_START_LINKS)
        for source, target, _ in QUICK_START_LINKS:
            assert result.column_of[target] >= result.column_of[source] + 1

    def test_order_within_a_column_follows_the_node_sequence(self):
        # Y is discovered before X, but X is listed first
        result = columns_for("A X Y", [("A", "Y", 1), ("A", "X", 1)])
        assert result.columns == [["A"], ["X", "Y"]]

    def test_skip_level_link_raises_the_target_column(self):
        result = columns_for("A B C", [("A", "B", 1), ("B", "C", 1), ("A", "C", 1)])
        assert result.column_of == {"A": 0, "B": 1, "C": 2}

    def test_every_node_gets_a_column(self):
        result = columns_for("A B X Y Z Final1 Final2", QUICK_START_LINKS)
        assert set(result.column_of) == {"A", "B", "X", "Y", "Z", "Final1", "Final2"}


class TestTraversalOrder:
    def test_a_node_is_expanded_once_with_the_column_it_has_when_first_dequeued(self):
        # B is expanded at column 1 (pushing D to 2) before C raises B to 2.
        result = columns_for(
            "A B C D",
            [("A", "B", 1), ("A", "C", 1), ("C", "B", 1), ("B", "D", 1)],
        )
        assert result.column_of["B"] == 2
        assert result.column_of["D"] == 2
        assert result.columns == [["A"], ["C"], ["B", "D"]]


# ============================================================================
# Dense packing
# ============================================================================


class TestDenseColumns:
    def test_no_column_is_empty(self):
        result = columns_for("A B C D", [("A", "B", 1), ("B", "C", 1), ("C", "D", 1)])
        assert all(result.columns)

    def test_gaps_are_collapsed(self):
        # Pure cycle: raw columns come out as B=1, A=2 with nothing in column 0
        result = columns_for("A B", [("A", "B", 1), ("B", "A", 1)])
        assert result.columns == [["B"], ["A"]]
        assert result.column_of == {"B": 0, "A": 1}

    def test_column_of_matches_the_column_list(self):
        result = columns_for("A B X Y Z Final1 Final2", QUICK_START_LINKS)
        for index, column in enumerate(result.columns):
            for node_id in column:
                assert result.column_of[node_id] == index


# ============================================================================
# Degenerate inputs
# ============================================================================


class TestDegenerateInputs:
    def test_empty_graph(self):
        result = columns_for("", [])
        assert result.columns == []
        assert result.column_of == {}

    def test_single_node(self):
        result = columns_for("A", [])
        assert result.columns == [["A"]]

    def test_isolated_nodes_land_in_column_zero(self):
        result = columns_for("A B Lonely", [("A", "B", 1)])
        assert result.column_of["Lonely"] == 0
        assert result.columns == [["A", "Lonely"], ["B"]]

    def test_self_loop_does_not_hang(self):
        result = columns_for("A", [("A", "A", 1)])
        assert result.columns == [["A"]]

    def test_unknown_endpoints_are_not_traversed(self):
        result = columns_for("A B", [("A", "ghost", 1), ("ghost", "B", 1)])
        assert result.column_of == {"A": 0, "B": 0}

    def test_node_fed_only_by_an_unknown_id_is_not_a_source(self):
        # B has an incoming link, so only A seeds the traversal and B, C stay unreached
        result = columns_for("A B C", [("ghost", "B", 1), ("B", "C", 1)])
        assert result.columns == [["A", "B", "C"]]

    def test_link_to_an_unknown_id_does_not_count_as_a_cycle(self, caplog):
        with caplog.at_level(logging.WARNING, logger="pretty_sankey.columns"):
            columns_for("A", [("A", "ghost", 1), ("ghost", "A", 1)])
        assert "cycle" not in caplog.text

    def test_cycle_is_reported(self, caplog):
        with caplog.at_level(logging.WARNING, logger="pretty_sankey.columns"):
            columns_for("A B", [("A", "B", 1), ("B", "A", 1)])
        assert "cycle" in caplog.text

    @pytest.mark.parametrize("node_ids, links", [
        ("A B C", [("A", "B", 1), ("B", "C", 1), ("C", "A", 1)]),
        ("A B C", [("A", "B", 1), ("B", "A", 1), ("B", "C", 1)]),
        ("Start A B", [("Start", "A", 1), ("A", "B", 1), ("B", "A", 1)]),
    ])
    def test_cyclic_graphs_assign_every_node(self, node_ids, links):
        result = columns_for(node_ids, links)
        assert set(result.column_of) == set(node_ids.split())
        assert all(result.columns)
