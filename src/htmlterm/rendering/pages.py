# =============================================================================
# Page Blocks
# =============================================================================
# Groups a control stream into PageBlocks: the units a paginator may place
# on a page, each with its height in terminal rows.
#
#   - A plain line is its own block, closed by its LineFeed
#   - A no-break section is one block, however many lines it holds
#   - An image outside a no-break section is a block of its own, as tall as
#     the image; inside one it adds its height to the section
#
# No pagination happens here: packing blocks into a viewport is up to the
# caller.
# =============================================================================

import logging
from typing import Iterable

from htmlterm.core import controls
from htmlterm.core.controls import Control, PageBlock
from htmlterm.exceptions import InvariantViolation

logger = logging.getLogger(__name__)


class PageBlockBuilder:
    """
    Segments a control stream into height-accounted blocks.

    Usage:
        >>> builder = PageBlockBuilder()
        >>> for op in ops:
        ...     builder.push(op)
        >>> blocks = builder.finish()
    """

    def __init__(self) -> None:
        self.blocks: list[PageBlock] = []
        self.current = PageBlock()
        self.in_no_break = False

    def flush(self) -> None:
        """Close the current block, if it holds anything."""
        if self.current:
            self.blocks.append(self.current)
        self.current = PageBlock()

    def push(self, op: Control) -> None:
        """
        Feed one control.

        Raises:
            InvariantViolation: On broken no-break nesting, or a control
                                that cannot appear in a finished stream.
        """
        if isinstance(op, controls.LineFeed):
            self.current.ops.append(op)
            self.current.height += 1
            if not self.in_no_break:
                self.flush()

        elif isinstance(op, controls.NoBreakBegin):
            if self.in_no_break:
                raise InvariantViolation("no-break sections cannot nest")
            self.flush()
            self.current.ops.append(op)
            self.in_no_break = True

        elif isinstance(op, controls.NoBreakEnd):
            if not self.in_no_break:
                raise InvariantViolation("mismatched no-break end")
            self.current.ops.append(op)
            self.in_no_break = False
            self.flush()

        elif isinstance(op, controls.Image):
            if self.in_no_break:
                self.current.ops.append(op)
                self.current.height += op.height
            else:
                self.flush()
                self.blocks.append(PageBlock(ops=[op], height=op.height))

        elif isinstance(op, (controls.Str, controls.StrRedacted, controls.Audio, controls.Bell)):
            self.current.ops.append(op)

        else:
            raise InvariantViolation(f"Unexpected control in page stream: {type(op).__name__}")

    def finish(self) -> list[PageBlock]:
        """
        Flush what is left and return all blocks.

        Raises:
            InvariantViolation: If a no-break section was never closed.
        """
        if self.in_no_break:
            raise InvariantViolation("Unterminated no-break section")
        self.flush()
        logger.debug(f"Built {len(self.blocks)} page blocks")
        return self.blocks


def build_page_blocks(ops: Iterable[Control]) -> list[PageBlock]:
    """Segment a finished control stream into PageBlocks."""
    builder = PageBlockBuilder()
    for op in ops:
        builder.push(op)
    return builder.finish()
