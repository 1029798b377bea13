"""Scenario graph model.

Front ends hand over loosely shaped node mappings (``choices`` may be
missing, ``level`` may be a number, a numeric string, an empty string or
null). This module normalizes them once, at the boundary, into typed
``ScenarioNode`` records and a ``networkx.DiGraph`` view that the layout
pipeline walks.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union

import networkx as nx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from choicemap.errors import ScenarioFormatError

logger = logging.getLogger(__name__)

_INT_PREFIX = re.compile(r"^[+-]?\d+")


def parse_level(value: Any) -> int | None:
    """Normalize a raw level override to ``int`` or ``None`` (unset).

    Strings are read by their leading integer, so ``"4.7"`` and ``"7px"``
    give 4 and 7. Booleans, non-finite floats and anything unparseable are
    treated as unset.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = _INT_PREFIX.match(value.strip())
        return int(match.group(0)) if match else None
    return None


class Choice(BaseModel):
    """One outgoing choice. Only ``next`` matters for layout; other fields are kept."""

    model_config = ConfigDict(extra="allow")

    next: str | None = None

    @field_validator("next", mode="before")
    @classmethod
    def _normalise_target(cls, value: Any) -> Any:
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, int):
            return str(value)
        if isinstance(value, str):
            return value or None
        return None


class ScenarioNode(BaseModel):
    """A scenario node: ordered choices plus an optional level override."""

    model_config = ConfigDict(extra="allow")

    choices: list[Choice] = Field(default_factory=list)
    level: int | None = None

    @field_validator("choices", mode="before")
    @classmethod
    def _normalise_choices(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("level", mode="before")
    @classmethod
    def _normalise_level(cls, value: Any) -> int | None:
        level = parse_level(value)
        if level is None and value not in (None, ""):
            logger.debug("Ignoring unparseable level override %r", value)
        return level

    @property
    def targets(self) -> list[str]:
        """Non-empty choice targets in choice order (may include dangling ids)."""
        return [choice.next for choice in self.choices if choice.next]

    @property
    def label(self) -> str | None:
        """Display title if the node carries one."""
        title = (self.model_extra or {}).get("title")
        if isinstance(title, str) and title.strip():
            return title.strip()
        return None


NodeInput = Union[ScenarioNode, Mapping[str, Any]]


def normalize_nodes(nodes: Mapping[str, NodeInput] | None) -> dict[str, ScenarioNode]:
    """Validate a raw node mapping into ``ScenarioNode`` records, keeping key order.

    Raises:
        ScenarioFormatError: when the mapping or one of its nodes has a shape
            that cannot be interpreted (e.g. a node that is not a mapping, or
            ``choices`` that is not a list).
    """
    if nodes is None:
        return {}
    if not isinstance(nodes, Mapping):
        raise ScenarioFormatError(f"nodes must be a mapping, got {type(nodes).__name__}")

    result: dict[str, ScenarioNode] = {}
    for node_id, raw in nodes.items():
        if isinstance(raw, ScenarioNode):
            result[node_id] = raw
            continue
        if raw is None:
            raw = {}
        if not isinstance(raw, Mapping):
            raise ScenarioFormatError(f"node {node_id!r} must be a mapping, got {type(raw).__name__}")
        try:
            result[node_id] = ScenarioNode.model_validate(dict(raw))
        except ValidationError as exc:
            raise ScenarioFormatError(f"node {node_id!r} is malformed: {exc}") from exc
    return result


@dataclass
class ScenarioGraph:
    """Normalized node mapping plus its directed-graph view.

    ``digraph`` holds every mapping key as a node (mapping order, node record
    under the ``data`` attribute) and one edge per distinct in-mapping choice
    target. Dangling targets are left out; self-loops are kept.
    """

    nodes: dict[str, ScenarioNode]
    start_node: str
    digraph: nx.DiGraph

    @classmethod
    def build(cls, nodes: Mapping[str, NodeInput] | None, start_node: str) -> ScenarioGraph:
        normalized = normalize_nodes(nodes)

        digraph: nx.DiGraph = nx.DiGraph()
        for node_id, node in normalized.items():
            digraph.add_node(node_id, data=node)

        for node_id, node in normalized.items():
            for target in node.targets:
                if target not in normalized:
                    logger.debug("Choice on %r points at missing node %r", node_id, target)
                    continue
                digraph.add_edge(node_id, target)

        return cls(nodes=normalized, start_node=start_node, digraph=digraph)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def successors(self, node_id: str) -> list[str]:
        """In-mapping choice targets of ``node_id``, first-choice order, no duplicates."""
        if node_id not in self.digraph:
            return []
        return list(self.digraph.successors(node_id))
