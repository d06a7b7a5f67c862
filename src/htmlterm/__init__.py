# =============================================================================
# htmlterm: HTML Rendering for the Terminal
# =============================================================================
#
# htmlterm converts HTML into text wrapped to a fixed width, or into an
# annotated control stream for terminal viewers and pagers.
#
# Features:
#   - Paragraphs, lists, block quotes and preformatted text
#   - Tables with proportional column widths and box-drawing borders
#   - Link footnotes in plain text, ANSI styling and hyperlinks in colour
#   - Redaction, no-break and media markers for pagers
#   - XDG Base Directory compliant configuration
#
# =============================================================================

__version__ = "0.1.0"
__app_name__ = "htmlterm"

from htmlterm.rendering import (
    RenderEngine,
    build_page_blocks,
    parse_only,
    render_annotated,
    render_plain,
    render_rich,
)

__all__ = [
    "RenderEngine",
    "build_page_blocks",
    "parse_only",
    "render_annotated",
    "render_plain",
    "render_rich",
    "__version__",
    "__app_name__",
]
