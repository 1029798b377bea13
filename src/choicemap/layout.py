"""Layout module: tree-map layout pipeline for scenario graphs.

Phases:
  1. Level resolution   (BFS from the start node, orphans at level 0)
  2. Effective levels   (explicit overrides win over computed levels)
  3. Position assignment (levels stacked vertically, siblings centred)
  4. Connection paths   (straight lines, or quadratic curves for loops and
                         same-level edges)
  5. Arrow placement    (midpoint and tangent angle of each path)

Every function is pure: each call takes a full snapshot of the graph and
returns fresh results.
"""

from __future__ import annotations

import logging
import math
from collections import deque
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Union

from choicemap.config import DEFAULT_NODE_HEIGHT, LayoutConfig
from choicemap.graph import NodeInput, ScenarioGraph

logger = logging.getLogger(__name__)

NodesInput = Union[Mapping[str, NodeInput], ScenarioGraph, None]
ConfigInput = Union[LayoutConfig, Mapping[str, Any], None]

ORPHAN_LEVEL: int = 0
START_LEVEL: int = 1

# Curve geometry constants (pixels).
LOOP_MIN_OFFSET: float = 80
LOOP_BASE_OFFSET: float = 60
LOOP_DISTANCE_FACTOR: float = 0.3
LOOP_OFFSET_SCALE: float = 1.5
SAME_LEVEL_OFFSET: float = 50
BACKWARD_LIFT: float = 30


def _as_graph(nodes: NodesInput, start_node: str) -> ScenarioGraph:
    if isinstance(nodes, ScenarioGraph):
        if nodes.start_node == start_node:
            return nodes
        return replace(nodes, start_node=start_node)
    return ScenarioGraph.build(nodes, start_node)


# ─── Level Resolution (BFS) ───────────────────────────────────────────────────


def resolve_graph_levels(graph: ScenarioGraph) -> dict[int, list[str]]:
    """Assign a BFS level to every node of an already-built graph.

    Starts at ``(start_node, 1)`` and processes the queue strictly FIFO, so a
    node's level is its shortest hop distance from the start. A node may be
    queued several times before its first dequeue; only that first dequeue
    counts. Nodes never reached land in level 0 in mapping order.

    Within a level, ids keep discovery order; that order is the left-to-right
    ordinal used elsewhere.
    """
    levels: dict[int, list[str]] = {}
    visited: set[str] = set()
    queue: deque[tuple[str, int]] = deque([(graph.start_node, START_LEVEL)])

    while queue:
        node_id, level = queue.popleft()
        if node_id in visited or node_id not in graph:
            continue

        visited.add(node_id)
        levels.setdefault(level, []).append(node_id)

        for target in graph.successors(node_id):
            if target not in visited:
                queue.append((target, level + 1))

    for node_id in graph.nodes:
        if node_id not in visited:
            levels.setdefault(ORPHAN_LEVEL, []).append(node_id)

    return levels


def resolve_levels(nodes: NodesInput, start_node: str) -> dict[int, list[str]]:
    """Compute the level map: level number → node ids in discovery order.

    A missing ``start_node`` leaves every node in the level-0 orphan bucket;
    an empty mapping gives ``{}``.
    """
    return resolve_graph_levels(_as_graph(nodes, start_node))


# ─── Effective Levels ─────────────────────────────────────────────────────────


def _level_index(levels: Mapping[int, list[str]]) -> dict[str, int]:
    index: dict[str, int] = {}
    for level, node_ids in levels.items():
        for node_id in node_ids:
            index.setdefault(node_id, int(level))
    return index


def effective_level(
    node_id: str,
    nodes: NodesInput,
    start_node: str,
    levels: Mapping[int, list[str]] | None = None,
) -> int:
    """Level used for layout: explicit override, else computed level, else 0.

    Overrides are returned as-is (negative or beyond the computed depth is
    allowed). Pass ``levels`` to reuse a level map; a node missing from it
    gets 0.
    """
    graph = _as_graph(nodes, start_node)
    node = graph.nodes.get(node_id)
    if node is not None and node.level is not None:
        return node.level

    if levels is None:
        levels = resolve_graph_levels(graph)
    for level, node_ids in levels.items():
        if node_id in node_ids:
            return int(level)
    return ORPHAN_LEVEL


def effective_levels(
    nodes: NodesInput,
    start_node: str,
    levels: Mapping[int, list[str]] | None = None,
) -> dict[str, int]:
    """Effective level of every node, computing the level map at most once."""
    graph = _as_graph(nodes, start_node)
    if levels is None:
        levels = resolve_graph_levels(graph)
    index = _level_index(levels)

    result: dict[str, int] = {}
    for node_id, node in graph.nodes.items():
        if node.level is not None:
            result[node_id] = node.level
        else:
            result[node_id] = index.get(node_id, ORPHAN_LEVEL)
    return result


@dataclass(frozen=True)
class NodeLevel:
    """Effective level of a node and its 1-based ordinal within that level."""

    level: int
    position: int


def node_level(node_id: str, nodes: NodesInput, start_node: str) -> NodeLevel:
    """Effective level plus position among mapping keys sharing that level.

    ``position`` is 0 when ``node_id`` is not in the mapping.
    """
    graph = _as_graph(nodes, start_node)
    by_node = effective_levels(graph, start_node)
    level = by_node.get(node_id, ORPHAN_LEVEL)

    same_level = [nid for nid, lvl in by_node.items() if lvl == level]
    position = same_level.index(node_id) + 1 if node_id in same_level else 0
    return NodeLevel(level=level, position=position)


# ─── Position Assignment ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class Point:
    """A 2D point in pixel coordinates."""

    x: float
    y: float

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass
class PositionResult:
    """Node centres plus the extent of the layout.

    Attributes:
        positions: Node id → centre point.
        max_width: Width reserved for the most populous level.
        max_level: Highest effective level, never less than 1.
    """

    positions: dict[str, Point]
    max_width: float
    max_level: int


def group_by_level(by_node: Mapping[str, int]) -> dict[int, list[str]]:
    """Group node ids by effective level, keeping mapping order within a group.

    This ordering comes from the node mapping, not from BFS discovery order.
    """
    groups: dict[int, list[str]] = {}
    for node_id, level in by_node.items():
        groups.setdefault(level, []).append(node_id)
    return groups


def assign_positions(by_node: Mapping[str, int], config: LayoutConfig) -> PositionResult:
    """Place every node given its effective level.

    Levels stack vertically (``y = level * level_height + padding``); nodes in
    a level are spread ``node_width`` apart and centred within the widest
    level.
    """
    groups = group_by_level(by_node)

    max_level = max([*groups.keys(), 1])
    max_width = max((len(ids) * config.node_width for ids in groups.values()), default=0)

    positions: dict[str, Point] = {}
    for level in sorted(groups):
        node_ids = groups[level]
        total_width = len(node_ids) * config.node_width
        start_x = (max_width - total_width) / 2 + config.node_width / 2
        for index, node_id in enumerate(node_ids):
            positions[node_id] = Point(
                x=start_x + index * config.node_width + config.padding,
                y=level * config.level_height + config.padding,
            )

    logger.debug(
        "Placed %d nodes on levels %s (max_level=%d, max_width=%s)",
        len(positions),
        sorted(groups),
        max_level,
        max_width,
    )
    return PositionResult(positions=positions, max_width=max_width, max_level=max_level)


def compute_positions(nodes: NodesInput, start_node: str, config: ConfigInput = None) -> PositionResult:
    """Compute node centres for the tree map."""
    layout_config = LayoutConfig.coerce(config)
    graph = _as_graph(nodes, start_node)
    return assign_positions(effective_levels(graph, start_node), layout_config)


# ─── Edge Classification & Paths ──────────────────────────────────────────────


class EdgeKind(str, Enum):
    FORWARD = "forward"
    LOOP = "loop"
    SAME_LEVEL = "same_level"


def classify_edge(source_level: int, target_level: int) -> EdgeKind:
    """Loop when the target sits on an earlier level, same-level when equal."""
    if target_level < source_level:
        return EdgeKind.LOOP
    if target_level == source_level:
        return EdgeKind.SAME_LEVEL
    return EdgeKind.FORWARD


@dataclass(frozen=True)
class Connection:
    """An edge between two node centres, with its classification already decided."""

    from_point: Point
    to_point: Point
    is_loop: bool = False
    is_same_level: bool = False

    @classmethod
    def between(cls, from_point: Point, to_point: Point, kind: EdgeKind) -> Connection:
        return cls(
            from_point=from_point,
            to_point=to_point,
            is_loop=kind is EdgeKind.LOOP,
            is_same_level=kind is EdgeKind.SAME_LEVEL,
        )


def format_number(value: float) -> str:
    """Format a coordinate for SVG output: integral values without ``.0``, others to 6 places."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(round(value, 6))


@dataclass(frozen=True)
class PathGeometry:
    """A built edge path: a straight segment, or a quadratic curve with control point."""

    x1: float
    y1: float
    x2: float
    y2: float
    cx: float | None = None
    cy: float | None = None

    @property
    def type(self) -> str:
        return "line" if self.cx is None or self.cy is None else "bezier"

    @property
    def is_curve(self) -> bool:
        return self.type == "bezier"

    @property
    def path(self) -> str:
        start = f"M {format_number(self.x1)} {format_number(self.y1)}"
        end = f"{format_number(self.x2)} {format_number(self.y2)}"
        if self.is_curve:
            return f"{start} Q {format_number(self.cx)} {format_number(self.cy)} {end}"
        return f"{start} L {end}"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "path": self.path,
            "type": self.type,
            "x1": self.x1,
            "y1": self.y1,
            "x2": self.x2,
            "y2": self.y2,
        }
        if self.is_curve:
            data["cx"] = self.cx
            data["cy"] = self.cy
        return data


def curve_offset(connection: Connection, y1: float, y2: float) -> float:
    """Horizontal bow of a curved edge.

    Loops bow proportionally to the vertical distance they span; same-level
    edges use a fixed offset.
    """
    if connection.is_loop:
        return max(LOOP_MIN_OFFSET, abs(y2 - y1) * LOOP_DISTANCE_FACTOR + LOOP_BASE_OFFSET) * LOOP_OFFSET_SCALE
    return SAME_LEVEL_OFFSET


def build_connection_path(connection: Connection, node_height: float = DEFAULT_NODE_HEIGHT) -> PathGeometry:
    """Build the path for one edge.

    The path leaves the bottom edge of the source node and enters the top
    edge of the target node. Forward edges are straight. Loop and same-level
    edges are quadratic curves bowed sideways towards the target; when the
    target centre is above the source centre the control point is lifted
    above both anchors so the curve clears the levels in between.
    """
    src, tgt = connection.from_point, connection.to_point
    x1, y1 = src.x, src.y + node_height / 2
    x2, y2 = tgt.x, tgt.y - node_height / 2

    if not connection.is_loop and not connection.is_same_level:
        return PathGeometry(x1=x1, y1=y1, x2=x2, y2=y2)

    direction = 1 if src.x <= tgt.x else -1
    cx = (x1 + x2) / 2 + curve_offset(connection, y1, y2) * direction
    # Bow decision uses node centres; loop classification alone can disagree
    # once levels are overridden by hand.
    if tgt.y < src.y:
        cy = min(y1, y2) - BACKWARD_LIFT
    else:
        cy = (y1 + y2) / 2
    return PathGeometry(x1=x1, y1=y1, x2=x2, y2=y2, cx=cx, cy=cy)


# ─── Arrow Placement ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ArrowTransform:
    """Arrowhead position and direction of travel (degrees, clockwise from +x)."""

    x: float
    y: float
    angle: float

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "angle": self.angle}

    def to_svg_transform(self) -> str:
        return f"translate({format_number(self.x)}, {format_number(self.y)}) rotate({format_number(self.angle)})"


def bezier_point(geometry: PathGeometry, t: float) -> Point:
    """Evaluate the quadratic curve ``(1-t)²P0 + 2(1-t)t·C + t²P1``."""
    u = 1 - t
    cx = geometry.cx if geometry.cx is not None else (geometry.x1 + geometry.x2) / 2
    cy = geometry.cy if geometry.cy is not None else (geometry.y1 + geometry.y2) / 2
    return Point(
        x=u * u * geometry.x1 + 2 * u * t * cx + t * t * geometry.x2,
        y=u * u * geometry.y1 + 2 * u * t * cy + t * t * geometry.y2,
    )


def bezier_tangent(geometry: PathGeometry, t: float) -> tuple[float, float]:
    """Derivative ``2(1-t)(C-P0) + 2t(P1-C)`` of the quadratic curve."""
    u = 1 - t
    cx = geometry.cx if geometry.cx is not None else (geometry.x1 + geometry.x2) / 2
    cy = geometry.cy if geometry.cy is not None else (geometry.y1 + geometry.y2) / 2
    dx = 2 * u * (cx - geometry.x1) + 2 * t * (geometry.x2 - cx)
    dy = 2 * u * (cy - geometry.y1) + 2 * t * (geometry.y2 - cy)
    return dx, dy


def arrow_transform(geometry: PathGeometry, t: float = 0.5) -> ArrowTransform:
    """Where to draw an edge's arrowhead and which way it points.

    Straight segments use the point at ``t`` along the segment (the midpoint
    by default). Curves use the true curve point and derivative at ``t``.
    """
    if not geometry.is_curve:
        dx = geometry.x2 - geometry.x1
        dy = geometry.y2 - geometry.y1
        return ArrowTransform(
            x=geometry.x1 + dx * t,
            y=geometry.y1 + dy * t,
            angle=math.degrees(math.atan2(dy, dx)),
        )

    point = bezier_point(geometry, t)
    dx, dy = bezier_tangent(geometry, t)
    return ArrowTransform(x=point.x, y=point.y, angle=math.degrees(math.atan2(dy, dx)))


# ─── Full Tree-Map Pipeline ───────────────────────────────────────────────────


@dataclass(frozen=True)
class TreeMapConnection:
    """A fully built edge: which choice it comes from, how it is drawn."""

    source: str
    target: str
    choice_index: int
    kind: EdgeKind
    geometry: PathGeometry
    arrow: ArrowTransform


@dataclass
class TreeMap:
    """Everything a front end needs to draw the scenario map."""

    graph: ScenarioGraph
    config: LayoutConfig
    levels: dict[int, list[str]]
    effective_levels: dict[str, int]
    positions: dict[str, Point]
    max_width: float
    max_level: int
    connections: list[TreeMapConnection] = field(default_factory=list)

    @property
    def start_node(self) -> str:
        return self.graph.start_node

    @property
    def min_level(self) -> int:
        """Lowest effective level, never more than 0 (overrides may be negative)."""
        return min([*self.effective_levels.values(), ORPHAN_LEVEL])

    def canvas_origin(self) -> tuple[float, float]:
        """(x, y) of the canvas top-left corner; y goes negative for negative levels."""
        return 0, self.min_level * self.config.level_height

    def canvas_size(self) -> tuple[float, float]:
        """(width, height) of a canvas that holds every node with padding."""
        width = self.max_width + 2 * self.config.padding
        level_span = self.max_level - self.min_level + 1
        height = level_span * self.config.level_height + 2 * self.config.padding
        return width, height


def build_connections(
    graph: ScenarioGraph,
    by_node: Mapping[str, int],
    positions: Mapping[str, Point],
    node_height: float,
) -> list[TreeMapConnection]:
    """Build one connection per choice whose target has a position.

    Iterates nodes in mapping order and choices in choice order. Dangling
    targets produce nothing.
    """
    connections: list[TreeMapConnection] = []
    for source, node in graph.nodes.items():
        for choice_index, choice in enumerate(node.choices):
            target = choice.next
            if not target or target not in positions:
                continue
            kind = classify_edge(by_node[source], by_node[target])
            geometry = build_connection_path(
                Connection.between(positions[source], positions[target], kind),
                node_height,
            )
            connections.append(
                TreeMapConnection(
                    source=source,
                    target=target,
                    choice_index=choice_index,
                    kind=kind,
                    geometry=geometry,
                    arrow=arrow_transform(geometry),
                )
            )
    return connections


def build_tree_map(nodes: NodesInput, start_node: str, config: ConfigInput = None) -> TreeMap:
    """Run the full layout pipeline once and return the assembled tree map."""
    layout_config = LayoutConfig.coerce(config)
    graph = _as_graph(nodes, start_node)

    levels = resolve_graph_levels(graph)
    by_node = effective_levels(graph, start_node, levels)
    placed = assign_positions(by_node, layout_config)
    connections = build_connections(graph, by_node, placed.positions, layout_config.node_height)

    logger.debug(
        "Laid out %d nodes on %d levels with %d connections (start=%r)",
        len(graph),
        len(levels),
        len(connections),
        graph.start_node,
    )

    return TreeMap(
        graph=graph,
        config=layout_config,
        levels=levels,
        effective_levels=by_node,
        positions=placed.positions,
        max_width=placed.max_width,
        max_level=placed.max_level,
        connections=connections,
    )
