from choicemap.renderers.base import Renderer
from choicemap.renderers.svg import SvgRenderer, render_svg

__all__ = ["Renderer", "SvgRenderer", "render_svg"]
