"""Tests for graph.py: level parsing, node normalization and the DiGraph view."""

from __future__ import annotations

import logging

import pytest

from choicemap.errors import ScenarioFormatError
from choicemap.graph import Choice, ScenarioGraph, ScenarioNode, normalize_nodes, parse_level

# ─── parse_level ──────────────────────────────────────────────────────────────


class TestParseLevel:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            (3, 3),
            (-2, -2),
            (0, 0),
            (4.9, 4),
            (-4.9, -4),
            ("5", 5),
            (" 6 ", 6),
            ("-1", -1),
            ("+2", 2),
            ("4.7", 4),
            ("7px", 7),
        ],
    )
    def test_parseable(self, raw, expected):
        assert parse_level(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   ", "abc", "px7", True, False, float("nan"), float("inf"), [1], {}])
    def test_unset(self, raw):
        assert parse_level(raw) is None


# ─── ScenarioNode / Choice ────────────────────────────────────────────────────


class TestScenarioNode:
    def test_defaults(self):
        node = ScenarioNode()
        assert node.choices == []
        assert node.level is None

    def test_null_choices(self):
        assert ScenarioNode.model_validate({"choices": None}).choices == []

    def test_level_normalized(self):
        assert ScenarioNode.model_validate({"level": "3"}).level == 3
        assert ScenarioNode.model_validate({"level": ""}).level is None

    def test_unparseable_level_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="choicemap.graph"):
            node = ScenarioNode.model_validate({"level": "high"})
        assert node.level is None
        assert "unparseable level override" in caplog.text

    def test_extra_fields_preserved(self):
        node = ScenarioNode.model_validate({"title": "Intro", "text": "Hello", "choices": [{"next": "B", "label": "Go"}]})
        assert node.model_extra["text"] == "Hello"
        assert node.choices[0].model_extra["label"] == "Go"
        assert node.label == "Intro"

    def test_label_missing_or_blank(self):
        assert ScenarioNode().label is None
        assert ScenarioNode.model_validate({"title": "  "}).label is None
        assert ScenarioNode.model_validate({"title": 12}).label is None

    def test_targets_skip_empty(self):
        node = ScenarioNode.model_validate({"choices": [{"next": "B"}, {"next": ""}, {}, {"next": "C"}]})
        assert node.targets == ["B", "C"]


class TestChoice:
    def test_numeric_target_becomes_string(self):
        assert Choice.model_validate({"next": 2}).next == "2"

    @pytest.mark.parametrize("raw", ["", None, True, ["B"]])
    def test_unusable_target_is_none(self, raw):
        assert Choice.model_validate({"next": raw}).next is None


# ─── normalize_nodes ──────────────────────────────────────────────────────────


class TestNormalizeNodes:
    def test_keeps_key_order(self):
        nodes = normalize_nodes({"C": {}, "A": {}, "B": {}})
        assert list(nodes) == ["C", "A", "B"]

    def test_none_is_empty(self):
        assert normalize_nodes(None) == {}

    def test_null_node_is_empty_node(self):
        assert normalize_nodes({"A": None})["A"].choices == []

    def test_passes_through_models(self):
        node = ScenarioNode(level=2)
        assert normalize_nodes({"A": node})["A"] is node

    def test_non_mapping_nodes(self):
        with pytest.raises(ScenarioFormatError):
            normalize_nodes(["A", "B"])

    def test_non_mapping_node(self):
        with pytest.raises(ScenarioFormatError, match="'A'"):
            normalize_nodes({"A": "not a node"})

    def test_choices_not_a_list(self):
        with pytest.raises(ScenarioFormatError, match="malformed"):
            normalize_nodes({"A": {"choices": 5}})

    def test_format_error_is_value_error(self):
        with pytest.raises(ValueError):
            normalize_nodes({"A": 1})


# ─── ScenarioGraph ────────────────────────────────────────────────────────────


class TestScenarioGraph:
    def test_nodes_in_mapping_order(self):
        graph = ScenarioGraph.build({"B": {}, "A": {"choices": [{"next": "B"}]}}, "A")
        assert list(graph.digraph.nodes) == ["B", "A"]
        assert graph.digraph.nodes["A"]["data"] is graph.nodes["A"]

    def test_dangling_targets_excluded(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="choicemap.graph"):
            graph = ScenarioGraph.build({"A": {"choices": [{"next": "ghost"}]}}, "A")
        assert "ghost" not in graph.digraph
        assert graph.digraph.number_of_edges() == 0
        assert "missing node 'ghost'" in caplog.text

    def test_duplicate_choices_collapse(self):
        graph = ScenarioGraph.build({"A": {"choices": [{"next": "B"}, {"next": "B"}]}, "B": {}}, "A")
        assert graph.digraph.number_of_edges() == 1

    def test_self_loop_kept(self):
        graph = ScenarioGraph.build({"A": {"choices": [{"next": "A"}]}}, "A")
        assert graph.digraph.has_edge("A", "A")

    def test_successors_in_first_choice_order(self):
        nodes = {"A": {"choices": [{"next": "C"}, {"next": "B"}, {"next": "C"}]}, "B": {}, "C": {}}
        graph = ScenarioGraph.build(nodes, "A")
        assert graph.successors("A") == ["C", "B"]
        assert graph.successors("missing") == []

    def test_membership_and_length(self):
        graph = ScenarioGraph.build({"A": {}, "B": {}}, "Z")
        assert "A" in graph
        assert "Z" not in graph
        assert len(graph) == 2
        assert graph.start_node == "Z"
