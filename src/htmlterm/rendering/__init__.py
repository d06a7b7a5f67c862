# =============================================================================
# Rendering Module
# =============================================================================
# HTML to fixed-width terminal text.
#
# The rendering pipeline:
#   1. Parse markup (BeautifulSoup + lxml) and build the render tree
#   2. Estimate node sizes to proportion table columns
#   3. Lay the tree out into wrapped lines (plain text or annotated spans)
#   4. Optionally style the annotated spans into a control stream
#   5. Group the control stream into page blocks for a pager
# =============================================================================

from htmlterm.rendering.engine import (
    RenderEngine,
    RenderMode,
    RenderResult,
    parse_only,
    render_annotated,
    render_plain,
    render_rich,
)
from htmlterm.rendering.pages import build_page_blocks
from htmlterm.rendering.styles import AnsiStyler, MappedStyler, Styler

__all__ = [
    "AnsiStyler",
    "MappedStyler",
    "RenderEngine",
    "RenderMode",
    "RenderResult",
    "Styler",
    "build_page_blocks",
    "parse_only",
    "render_annotated",
    "render_plain",
    "render_rich",
]
