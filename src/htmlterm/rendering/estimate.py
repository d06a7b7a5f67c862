# =============================================================================
# Size Estimation
# =============================================================================
# A cheap cost model for render nodes, used to share out table width.
#
#   - Leaves (text, image title, preformatted text): size is the character
#     count, min_width is MIN_WIDTH
#   - Line breaks: size 1, min_width 1
#   - Everything else: children folded with SizeEstimate.add
#   - Tables: per-column estimates (cells split evenly over their colspan),
#     summed, plus one separator cell between each pair of columns
#
# Results are memoized in the tree's side table and reused by every render.
# =============================================================================

from htmlterm.core import nodes
from htmlterm.core.nodes import MIN_WIDTH, RenderTable, RenderTree, SizeEstimate


class SizeEstimator:
    """
    Computes and caches SizeEstimates for the nodes of one RenderTree.

    Usage:
        >>> estimator = SizeEstimator(tree)
        >>> estimator.estimate(tree.root)
        SizeEstimate(size=11, min_width=5)
    """

    def __init__(self, tree: RenderTree) -> None:
        self.tree = tree

    def estimate(self, index: int) -> SizeEstimate:
        """Return the (memoized) estimate of a node."""
        cached = self.tree.estimates.get(index)
        if cached is not None:
            return cached

        node = self.tree[index]
        if isinstance(node, nodes.Text):
            result = SizeEstimate(size=len(node.text), min_width=MIN_WIDTH)
        elif isinstance(node, nodes.Image):
            result = SizeEstimate(size=len(node.title), min_width=MIN_WIDTH)
        elif isinstance(node, nodes.Preformatted):
            result = SizeEstimate(size=len(node.text), min_width=MIN_WIDTH)
        elif isinstance(node, nodes.LineBreak):
            result = SizeEstimate(size=1, min_width=1)
        elif isinstance(node, nodes.Table):
            result = self._table_estimate(node.table)
        else:
            result = self.estimate_all(node.children)

        self.tree.estimates[index] = result
        return result

    def estimate_all(self, indices: tuple[int, ...]) -> SizeEstimate:
        """Fold the estimates of a run of nodes."""
        result = SizeEstimate()
        for index in indices:
            result = result.add(self.estimate(index))
        return result

    def column_estimates(self, table: RenderTable) -> list[SizeEstimate]:
        """
        Estimate each column of a table.

        A cell spanning n columns contributes size // n to each of them, and
        min_width // n to their minimum widths.
        """
        columns = [SizeEstimate() for _ in range(table.column_count)]
        for row in table.rows:
            for column, cell in row.cell_columns():
                cell_estimate = self.estimate(cell.content)
                share = SizeEstimate(
                    size=cell_estimate.size // cell.colspan,
                    min_width=cell_estimate.min_width // cell.colspan,
                )
                for offset in range(cell.colspan):
                    columns[column + offset] = columns[column + offset].add(share)
        return columns

    def _table_estimate(self, table: RenderTable) -> SizeEstimate:
        columns = self.column_estimates(table)
        return SizeEstimate(
            size=sum(column.size for column in columns),
            min_width=sum(column.min_width for column in columns) + max(table.column_count - 1, 0),
        )
