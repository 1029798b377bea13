"""choicemap: tree-map layout for branching scenario graphs."""

from choicemap.config import LayoutConfig
from choicemap.errors import (
    BoundaryResult,
    ChoiceMapError,
    ErrorBoundary,
    ErrorHandler,
    RecoveryAction,
    ScenarioFormatError,
)
from choicemap.graph import Choice, ScenarioGraph, ScenarioNode, normalize_nodes, parse_level
from choicemap.layout import (
    ArrowTransform,
    Connection,
    EdgeKind,
    NodeLevel,
    PathGeometry,
    Point,
    PositionResult,
    TreeMap,
    TreeMapConnection,
    arrow_transform,
    build_connection_path,
    build_tree_map,
    classify_edge,
    compute_positions,
    effective_level,
    effective_levels,
    node_level,
    resolve_levels,
)
from choicemap.resources import RESOURCE_ICONS, RESOURCE_LABELS, ResourceType
from choicemap.sanitize import escape_html, sanitize_node_id, sanitize_url

__all__ = [
    "ArrowTransform",
    "BoundaryResult",
    "Choice",
    "ChoiceMapError",
    "Connection",
    "EdgeKind",
    "ErrorBoundary",
    "ErrorHandler",
    "LayoutConfig",
    "NodeLevel",
    "PathGeometry",
    "Point",
    "PositionResult",
    "RESOURCE_ICONS",
    "RESOURCE_LABELS",
    "RecoveryAction",
    "ResourceType",
    "ScenarioFormatError",
    "ScenarioGraph",
    "ScenarioNode",
    "TreeMap",
    "TreeMapConnection",
    "arrow_transform",
    "build_connection_path",
    "build_tree_map",
    "classify_edge",
    "compute_positions",
    "effective_level",
    "effective_levels",
    "escape_html",
    "node_level",
    "normalize_nodes",
    "parse_level",
    "resolve_levels",
    "sanitize_node_id",
    "sanitize_url",
]
