"""Tests for the graph model -- normalization, link merging and the flow graph."""
from __future__ import annotations

import pytest

from pretty_sankey.graph import build_flow_graph, flow_totals, normalize
from pretty_sankey.types import SankeyLink, SankeyNode


def make_nodes(*ids: str) -> list[SankeyNode]:
    return [SankeyNode(node_id) for node_id in ids]


# ============================================================================
# Nodes
# ============================================================================


class TestSankeyNode:
    def test_label_defaults_to_id(self):
        assert SankeyNode("Revenue").label == "Revenue"

    def test_keeps_an_explicit_label(self):
        assert SankeyNode("rev", label="Revenue").label == "Revenue"

    def test_empty_label_is_not_replaced(self):
        assert SankeyNode("rev", label="").label == ""

    def test_equality_is_keyed_on_id_only(self):
        assert SankeyNode("A", color="blue") == SankeyNode("A", color="red", label="Other")
        assert SankeyNode("A") != SankeyNode("B")

    def test_hash_is_keyed_on_id_only(self):
        nodes = {SankeyNode("A", color="blue"), SankeyNode("A", color="red")}
        assert len(nodes) == 1

    def test_links_get_unique_ids(self):
        first = SankeyLink(1, "A", "B")
        second = SankeyLink(1, "A", "B")
        assert first.id != second.id


# ============================================================================
# normalize()
# ============================================================================


class TestNodeIndex:
    def test_indexes_nodes_by_id(self):
        graph = normalize(make_nodes("A", "B"), [])
        assert set(graph.node_by_id) == {"A", "B"}

    def test_duplicate_ids_are_last_wins_in_the_index(self):
        nodes = [SankeyNode("A", color="blue"), SankeyNode("A", color="red")]
        graph = normalize(nodes, [])
        assert graph.node_by_id["A"].color == "red"

    def test_node_sequence_keeps_every_listed_node(self):
        nodes = [SankeyNode("A", color="blue"), SankeyNode("B"), SankeyNode("A", color="red")]
        graph = normalize(nodes, [])
        assert len(graph.nodes) == 3
        assert graph.unique_node_ids() == ["A", "B"]

    def test_unknown_link_endpoints_are_accepted(self):
        graph = normalize(make_nodes("A"), [SankeyLink(3, "A", "ghost")])
        assert len(graph.links) == 1


class TestMergeLinks:
    def test_parallel_links_are_summed(self):
        nodes = [SankeyNode("A", color="blue"), SankeyNode("B", color="red")]
        graph = normalize(nodes, [SankeyLink(10, "A", "B"), SankeyLink(5, "A", "B")])
        assert len(graph.links) == 1
        assert graph.links[0].value == 15
        assert graph.links[0].source_id == "A"
        assert graph.links[0].target_id == "B"

    def test_merged_color_is_the_first_non_null_color(self):
        links = [
            SankeyLink(1, "A", "B"),
            SankeyLink(2, "A", "B", color="red"),
            SankeyLink(3, "A", "B", color="green"),
        ]
        graph = normalize(make_nodes("A", "B"), links)
        assert graph.links[0].color == "red"

    def test_merged_color_stays_none_when_no_link_has_one(self):
        links = [SankeyLink(1, "A", "B"), SankeyLink(2, "A", "B")]
        graph = normalize(make_nodes("A", "B"), links)
        assert graph.links[0].color is None

    def test_one_output_link_per_ordered_pair(self):
        links = [
            SankeyLink(1, "A", "B"),
            SankeyLink(2, "B", "A"),
            SankeyLink(3, "A", "C"),
            SankeyLink(4, "A", "B"),
            SankeyLink(5, "B", "A"),
        ]
        graph = normalize(make_nodes("A", "B", "C"), links)
        values = {(l.source_id, l.target_id): l.value for l in graph.links}
        assert values == {("A", "B"): 5, ("B", "A"): 7, ("A", "C"): 3}

    def test_output_order_follows_first_occurrence(self):
        links = [
            SankeyLink(1, "B", "C"),
            SankeyLink(2, "A", "B"),
            SankeyLink(3, "B", "C"),
            SankeyLink(4, "A", "C"),
        ]
        graph = normalize(make_nodes("A", "B", "C"), links)
        assert [(l.source_id, l.target_id) for l in graph.links] == [
            ("B", "C"), ("A", "B"), ("A", "C"),
        ]

    def test_single_links_pass_through_as_the_same_object(self):
        link = SankeyLink(4, "A", "B", color="red")
        graph = normalize(make_nodes("A", "B"), [link])
        assert graph.links[0] is link

    @pytest.mark.parametrize("values", [[1.5, 2.25], [0, 0, 0], [100, 0.5, 7, 3]])
    def test_merged_value_is_the_exact_sum(self, values):
        links = [SankeyLink(v, "A", "B") for v in values]
        graph = normalize(make_nodes("A", "B"), links)
        assert graph.links[0].value == pytest.approx(sum(values))


class TestMergeDisabled:
    def test_links_pass_through_unchanged(self):
        links = [SankeyLink(10, "A", "B"), SankeyLink(5, "A", "B")]
        graph = normalize(make_nodes("A", "B"), links, merge_links=False)
        assert graph.links == links

    def test_exact_duplicates_are_kept(self):
        link = SankeyLink(10, "A", "B")
        graph = normalize(make_nodes("A", "B"), [link, link], merge_links=False)
        assert len(graph.links) == 2


# ============================================================================
# Flow graph
# ============================================================================


class TestFlowGraph:
    def test_has_one_edge_per_link_between_declared_nodes(self):
        links = [SankeyLink(10, "A", "B"), SankeyLink(5, "A", "B")]
        graph = normalize(make_nodes("A", "B"), links, merge_links=False)
        flow = build_flow_graph(graph)
        assert flow.number_of_edges("A", "B") == 2

    def test_keeps_isolated_nodes(self):
        flow = build_flow_graph(normalize(make_nodes("A", "B", "C"), []))
        assert list(flow.nodes) == ["A", "B", "C"]

    def test_links_to_unknown_nodes_count_on_the_declared_side(self):
        graph = normalize(make_nodes("A"), [SankeyLink(3, "A", "ghost")])
        flow = build_flow_graph(graph)
        assert flow.number_of_edges("A", "ghost") == 1
        assert flow.nodes["ghost"]["declared"] is False
        assert flow.nodes["A"]["declared"] is True

    def test_links_between_two_unknown_nodes_are_left_out(self):
        graph = normalize(make_nodes("A"), [SankeyLink(3, "ghost", "phantom")])
        flow = build_flow_graph(graph)
        assert list(flow.nodes) == ["A"]
        assert flow.number_of_edges() == 0

    def test_flow_totals_include_links_to_unknown_nodes(self):
        links = [SankeyLink(10, "A", "B"), SankeyLink(30, "A", "ghost"), SankeyLink(4, "ghost", "B")]
        totals = flow_totals(normalize(make_nodes("A", "B"), links))
        assert totals == {"A": (0, 40), "B": (14, 0)}

    def test_to_networkx_matches_build_flow_graph(self):
        graph = normalize(make_nodes("A", "B"), [SankeyLink(1, "A", "B")])
        assert list(graph.to_networkx().edges) == list(build_flow_graph(graph).edges)

    def test_flow_totals_sum_each_side(self):
        links = [
            SankeyLink(5, "A", "X"),
            SankeyLink(2, "B", "X"),
            SankeyLink(4, "X", "Out"),
        ]
        totals = flow_totals(normalize(make_nodes("A", "B", "X", "Out"), links))
        assert totals["A"] == (0, 5)
        assert totals["X"] == (7, 4)
        assert totals["Out"] == (4, 0)
