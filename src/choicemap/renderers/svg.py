"""SVG renderer: renders a laid-out scenario map to an SVG string."""

from __future__ import annotations

from choicemap.config import LayoutConfig
from choicemap.errors import ErrorBoundary, RecoveryAction
from choicemap.layout import (
    ORPHAN_LEVEL,
    ConfigInput,
    EdgeKind,
    NodesInput,
    Point,
    TreeMap,
    TreeMapConnection,
    build_tree_map,
    format_number,
)
from choicemap.sanitize import escape_html

# ─── Constants ──────────────────────────────────────────────────────────────

FONT_SIZE = 13
FONT_FAMILY = "sans-serif"
NODE_GAP = 20  # horizontal space left between neighbouring node boxes
NODE_RADIUS = 6
ARROW_LENGTH = 10
ARROW_HALF_WIDTH = 5

FALLBACK_WIDTH = 480
FALLBACK_HEIGHT = 80

_EDGE_STYLES: dict[EdgeKind, str] = {
    EdgeKind.FORWARD: 'stroke="#555" stroke-width="1.5"',
    EdgeKind.LOOP: 'stroke="#b35" stroke-width="1.5" stroke-dasharray="6 4"',
    EdgeKind.SAME_LEVEL: 'stroke="#37a" stroke-width="1.5"',
}

_ARROW_FILLS: dict[EdgeKind, str] = {
    EdgeKind.FORWARD: "#555",
    EdgeKind.LOOP: "#b35",
    EdgeKind.SAME_LEVEL: "#37a",
}

_NODE_STYLE = 'fill="white" stroke="black" stroke-width="1.5"'
_START_STYLE = 'fill="#eef6ee" stroke="#262" stroke-width="2"'
_ORPHAN_STYLE = 'fill="#f4f4f4" stroke="#999" stroke-width="1" stroke-dasharray="4 2"'


def _font(size: int = FONT_SIZE) -> str:
    return f'font-family="{FONT_FAMILY}" font-size="{size}"'


# ─── Node Rendering ─────────────────────────────────────────────────────────


def _node_rect(centre: Point, config: LayoutConfig) -> tuple[float, float, float, float]:
    """Return (x, y, width, height) of the box drawn around a node centre."""
    width = max(config.node_width - NODE_GAP, 1)
    height = config.node_height
    return (centre.x - width / 2, centre.y - height / 2, width, height)


def _render_node(node_id: str, tree_map: TreeMap) -> str:
    centre = tree_map.positions[node_id]
    x, y, w, h = _node_rect(centre, tree_map.config)

    node = tree_map.graph.nodes[node_id]
    label = escape_html(node.label or node_id)

    if node_id == tree_map.start_node:
        css, style = "node start", _START_STYLE
    elif node_id in tree_map.levels.get(ORPHAN_LEVEL, []):
        css, style = "node orphan", _ORPHAN_STYLE
    else:
        css, style = "node", _NODE_STYLE

    return "\n".join(
        [
            f'<g class="{css}" data-node="{escape_html(node_id)}">',
            f'  <rect x="{format_number(x)}" y="{format_number(y)}" width="{format_number(w)}" height="{format_number(h)}" rx="{NODE_RADIUS}" {style}/>',
            f'  <text x="{format_number(centre.x)}" y="{format_number(centre.y)}" dominant-baseline="central" '
            f'text-anchor="middle" {_font()}>{label}</text>',
            "</g>",
        ]
    )


# ─── Edge Rendering ─────────────────────────────────────────────────────────


def _render_edge(conn: TreeMapConnection) -> str:
    kind_css = conn.kind.value.replace("_", "-")
    arrow_pts = f"{-ARROW_LENGTH},{-ARROW_HALF_WIDTH} 0,0 {-ARROW_LENGTH},{ARROW_HALF_WIDTH}"
    return "\n".join(
        [
            f'<path class="edge edge-{kind_css}" d="{conn.geometry.path}" fill="none" {_EDGE_STYLES[conn.kind]}/>',
            f'<polygon class="arrow" points="{arrow_pts}" transform="{conn.arrow.to_svg_transform()}" '
            f'fill="{_ARROW_FILLS[conn.kind]}"/>',
        ]
    )


def _render_fallback(action: RecoveryAction) -> str:
    font = _font()
    return "\n".join(
        [
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{FALLBACK_WIDTH}" height="{FALLBACK_HEIGHT}" '
            f'viewBox="0 0 {FALLBACK_WIDTH} {FALLBACK_HEIGHT}" class="error-boundary">',
            f'<rect width="{FALLBACK_WIDTH}" height="{FALLBACK_HEIGHT}" fill="#fff4f4" stroke="#c33"/>',
            f'<text x="{FALLBACK_WIDTH // 2}" y="{FALLBACK_HEIGHT // 2}" dominant-baseline="central" '
            f'text-anchor="middle" {font} fill="#c33">{escape_html(action.message)}</text>',
            "</svg>",
        ]
    )


# ─── Public Renderer ────────────────────────────────────────────────────────


class SvgRenderer:
    """SVG renderer: consumes a TreeMap, produces an SVG string."""

    def render(self, tree_map: TreeMap) -> str:
        if not tree_map.positions:
            return ""

        origin_x, origin_y = tree_map.canvas_origin()
        width, height = tree_map.canvas_size()
        svg_x, svg_y = format_number(origin_x), format_number(origin_y)
        svg_w, svg_h = format_number(width), format_number(height)

        parts = [
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{svg_w}" height="{svg_h}" '
            f'viewBox="{svg_x} {svg_y} {svg_w} {svg_h}">',
            f'<rect x="{svg_x}" y="{svg_y}" width="{svg_w}" height="{svg_h}" fill="white"/>',
        ]

        # Edges (behind nodes), sorted for deterministic output
        for conn in sorted(tree_map.connections, key=lambda c: (c.source, c.target, c.choice_index)):
            parts.append(_render_edge(conn))

        # Nodes (on top)
        for node_id in tree_map.positions:
            parts.append(_render_node(node_id, tree_map))

        parts.append("</svg>")
        return "\n".join(parts)


def render_svg(
    nodes: NodesInput,
    start_node: str,
    config: ConfigInput = None,
    boundary: ErrorBoundary | None = None,
) -> str:
    """Lay out and render a scenario map, falling back to an error panel on failure."""
    boundary = boundary or ErrorBoundary()
    result = boundary.call(lambda: SvgRenderer().render(build_tree_map(nodes, start_node, config)))
    if result.action is not None:
        return _render_fallback(result.action)
    return result.value or ""
