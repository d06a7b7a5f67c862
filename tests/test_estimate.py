# =============================================================================
# Size Estimation Tests
# =============================================================================

from htmlterm.core import nodes
from htmlterm.core.nodes import (
    MIN_WIDTH,
    RenderTable,
    RenderTableCell,
    RenderTableRow,
    RenderTree,
    SizeEstimate,
)
from htmlterm.rendering.engine import parse_only
from htmlterm.rendering.estimate import SizeEstimator


def text_cell(tree, text, colspan=1):
    """Add a cell holding a single text node."""
    content = tree.add(nodes.Container(nodes=(tree.add(nodes.Text(text=text)),)))
    return RenderTableCell(colspan=colspan, content=content)


class TestSizeEstimate:
    """SizeEstimate arithmetic."""

    def test_add(self):
        combined = SizeEstimate(3, 5).add(SizeEstimate(4, 2))
        assert combined == SizeEstimate(size=7, min_width=5)

    def test_default_is_identity(self):
        assert SizeEstimate().add(SizeEstimate(2, 9)) == SizeEstimate(2, 9)


class TestLeaves:
    """Estimates of leaf nodes."""

    def test_text(self):
        tree = RenderTree()
        index = tree.add(nodes.Text(text="hello"))
        assert SizeEstimator(tree).estimate(index) == SizeEstimate(5, MIN_WIDTH)

    def test_line_break(self):
        tree = RenderTree()
        index = tree.add(nodes.LineBreak())
        assert SizeEstimator(tree).estimate(index) == SizeEstimate(1, 1)

    def test_image_uses_title(self):
        tree = RenderTree()
        index = tree.add(nodes.Image(title="a cat", src="cat.png"))
        assert SizeEstimator(tree).estimate(index) == SizeEstimate(5, MIN_WIDTH)

    def test_preformatted(self):
        tree = RenderTree()
        index = tree.add(nodes.Preformatted(text="a\nbc"))
        assert SizeEstimator(tree).estimate(index) == SizeEstimate(4, MIN_WIDTH)


class TestParents:
    """Estimates of nodes with children."""

    def test_children_are_folded(self):
        tree = RenderTree()
        first = tree.add(nodes.Text(text="ab"))
        second = tree.add(nodes.Text(text="abcdefg"))
        parent = tree.add(nodes.Block(nodes=(first, second)))
        assert SizeEstimator(tree).estimate(parent) == SizeEstimate(9, MIN_WIDTH)

    def test_empty_parent(self):
        tree = RenderTree()
        index = tree.add(nodes.Container())
        assert SizeEstimator(tree).estimate(index) == SizeEstimate(0, 0)

    def test_results_are_memoized(self):
        tree = parse_only("<p>Hello <b>world</b></p>")
        estimator = SizeEstimator(tree)
        first = estimator.estimate(tree.root)
        assert tree.estimates[tree.root] is first
        assert SizeEstimator(tree).estimate(tree.root) is first


class TestTables:
    """Estimates of tables and their columns."""

    def test_simple_table(self):
        tree = RenderTree()
        row = RenderTableRow(cells=tuple(text_cell(tree, t) for t in "123"))
        index = tree.add(nodes.Table(table=RenderTable.from_rows([row])))
        estimate = SizeEstimator(tree).estimate(index)
        assert estimate == SizeEstimate(size=3, min_width=3 * MIN_WIDTH + 2)

    def test_colspan_is_split_between_columns(self):
        tree = RenderTree()
        rows = [
            RenderTableRow(cells=(text_cell(tree, "abcd", colspan=2),)),
            RenderTableRow(cells=(text_cell(tree, "a"), text_cell(tree, "bb"))),
        ]
        table = RenderTable.from_rows(rows)
        columns = SizeEstimator(tree).column_estimates(table)
        assert columns == [SizeEstimate(3, MIN_WIDTH), SizeEstimate(4, MIN_WIDTH)]

    def test_short_rows_leave_columns_empty(self):
        tree = RenderTree()
        rows = [
            RenderTableRow(cells=(text_cell(tree, "a"), text_cell(tree, "b"))),
            RenderTableRow(cells=(text_cell(tree, "c"),)),
        ]
        columns = SizeEstimator(tree).column_estimates(RenderTable.from_rows(rows))
        assert columns == [SizeEstimate(2, MIN_WIDTH), SizeEstimate(1, MIN_WIDTH)]
