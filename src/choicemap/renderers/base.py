"""Base renderer protocol."""

from __future__ import annotations

from typing import Protocol

from choicemap.layout import TreeMap


class Renderer(Protocol):
    """Protocol that all renderers must implement."""

    def render(self, tree_map: TreeMap) -> str:
        """Render a laid-out scenario map to an output string."""
        ...
