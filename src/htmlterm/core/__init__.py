# =============================================================================
# htmlterm Core Module
# =============================================================================
# Pure data models shared by every rendering stage. No third-party imports,
# so these can be imported anywhere without circular dependencies:
#   - nodes:        the render tree arena and its node variants
#   - annotations:  tags attached to rich layout spans
#   - controls:     the abstract output stream and page blocks
# =============================================================================

from htmlterm.core import annotations, controls, nodes
from htmlterm.core.controls import Control, PageBlock
from htmlterm.core.nodes import (
    RenderNode,
    RenderTable,
    RenderTableCell,
    RenderTableRow,
    RenderTree,
    SizeEstimate,
)

__all__ = [
    "annotations",
    "controls",
    "nodes",
    "Control",
    "PageBlock",
    "RenderNode",
    "RenderTable",
    "RenderTableCell",
    "RenderTableRow",
    "RenderTree",
    "SizeEstimate",
]
