# =============================================================================
# Table Layout
# =============================================================================
# Shares the available width out between table columns, then renders each
# row as a set of side-by-side cell sub-renderers.
#
# Column widths:
#   1. Each column gets a share of the width proportional to its estimated
#      size, but never less than its minimum width (empty columns get 0)
#   2. While the total is too wide, the column with the most room above its
#      minimum (then the widest, then the leftmost) gives up one cell
#   3. Rounding slack goes to the columns with the largest remainders, so
#      the widths always fill the table. This is a deliberate departure
#      from the Rust html2text crate, which leaves the slack unused
#      ([6, 6, 7] rather than [7, 7, 7] for three equal columns at width 20)
#   4. The last column gets one extra cell, since no border is drawn after it
#
# Widths are recomputed on every render; only the size estimates are cached.
# =============================================================================

import logging
from typing import TYPE_CHECKING

from htmlterm.core.nodes import RenderTable, SizeEstimate
from htmlterm.rendering.text import TextRenderer

if TYPE_CHECKING:
    from htmlterm.rendering.layout import LayoutWalker

logger = logging.getLogger(__name__)


def column_widths(columns: list[SizeEstimate], width: int) -> list[int]:
    """
    Compute the width of each column.

    Args:
        columns: Per-column size estimates.
        width: Total width available for the table.

    Returns:
        One width per column, summing to width + 1 when any column has
        content (the extra cell replaces the missing right-hand border).

    Usage:
        >>> column_widths([SizeEstimate(1, 5)] * 3, 12)
        [4, 4, 5]
    """
    total = sum(column.size for column in columns)
    if total == 0:
        widths = [0] * len(columns)
    else:
        widths = [
            0 if column.size == 0 else max(column.size * width // total, column.min_width)
            for column in columns
        ]

    # The minimums may have pushed the total too high
    while sum(widths) > width:
        widest = max(
            range(len(widths)),
            key=lambda i: (max(widths[i] - columns[i].min_width, 0), widths[i], -i),
        )
        if widths[widest] == 0:
            break
        widths[widest] -= 1

    slack = width - sum(widths)
    if slack > 0 and total > 0:
        # Largest remainder first, leftmost on ties
        sized = sorted(
            (i for i, column in enumerate(columns) if column.size > 0),
            key=lambda i: (-(columns[i].size * width % total), i),
        )
        for step in range(slack):
            widths[sized[step % len(sized)]] += 1

    if widths:
        widths[-1] += 1
    return widths


def render_table(walker: "LayoutWalker", renderer: TextRenderer, table: RenderTable) -> None:
    """
    Lay out a table into renderer.

    Each cell is rendered by a sub-renderer one cell narrower than the
    columns it spans (the separator takes the last cell). Cells narrower
    than that are skipped, and rows in which every cell is empty are left
    out. Cells never emit markers, not even redaction bounds.
    """
    widths = column_widths(walker.estimator.column_estimates(table), renderer.width)
    logger.debug(f"Table of {table.column_count} columns at width {renderer.width}: {widths}")

    renderer.start_block()
    renderer.add_horizontal_border()

    for row in table.rows:
        cells: list[TextRenderer] = []
        for column, cell in row.cell_columns():
            cell_width = sum(widths[column:column + cell.colspan])
            if cell_width <= 1:
                continue
            sub = renderer.new_sub_renderer(cell_width - 1, block_markers=False)
            walker.render(sub, cell.content)
            cells.append(sub)

        if any(not sub.is_empty() for sub in cells):
            renderer.append_columns_with_borders(cells, collapse=True)
