# =============================================================================
# Render Tree Model
# =============================================================================
# The render tree is a width-independent, semantic view of an HTML document.
# It is built once per parse and can then be laid out any number of times at
# any width.
#
# Nodes live in an arena (RenderTree.nodes) and refer to their children by
# index. Nothing in a node is mutable: the only per-tree state that changes
# after building is the size-estimate side table (RenderTree.estimates),
# which is filled lazily by the size estimator and kept across renders.
#
# Node kinds:
#   - Inline:  Text, Container, Link, Emphasis, Strong, Strikeout, Colored,
#              Code, Image, LineBreak, Redacted
#   - Block:   Block, Div, Preformatted, BlockQuote, UnorderedList,
#              OrderedList, Table, NoBreak, Audio
# =============================================================================

from dataclasses import dataclass, field
from typing import ClassVar, Iterator

# Narrowest width (in cells) a leaf can be wrapped to
MIN_WIDTH = 5


@dataclass(frozen=True)
class SizeEstimate:
    """
    Rough size information for a node, used to proportion layouts.

    Attributes:
        size: Approximate number of characters the node will render.
        min_width: Narrowest width the node can still be wrapped to.
    """
    size: int = 0
    min_width: int = 0

    def add(self, other: "SizeEstimate") -> "SizeEstimate":
        """Combine two estimates: sizes add up, the widest minimum wins."""
        return SizeEstimate(
            size=self.size + other.size,
            min_width=max(self.min_width, other.min_width),
        )


# =============================================================================
# Node Variants
# =============================================================================

@dataclass(frozen=True)
class RenderNode:
    """Base class of all render tree nodes."""
    kind: ClassVar[str] = "node"

    @property
    def children(self) -> tuple[int, ...]:
        """Indices of child nodes (empty for leaves)."""
        return ()


@dataclass(frozen=True)
class Parent(RenderNode):
    """A node whose content is an ordered run of child nodes."""
    nodes: tuple[int, ...] = ()

    @property
    def children(self) -> tuple[int, ...]:
        return self.nodes


@dataclass(frozen=True)
class Text(RenderNode):
    """A run of text, whitespace not yet collapsed."""
    kind: ClassVar[str] = "text"
    text: str = ""


@dataclass(frozen=True)
class Container(Parent):
    """Transparent grouping of children."""
    kind: ClassVar[str] = "container"


@dataclass(frozen=True)
class Link(Parent):
    """A hyperlink around its children."""
    kind: ClassVar[str] = "link"
    url: str = ""


@dataclass(frozen=True)
class Emphasis(Parent):
    kind: ClassVar[str] = "emphasis"


@dataclass(frozen=True)
class Strong(Parent):
    kind: ClassVar[str] = "strong"


@dataclass(frozen=True)
class Strikeout(Parent):
    kind: ClassVar[str] = "strikeout"


@dataclass(frozen=True)
class Colored(Parent):
    """Children drawn in an explicit foreground colour."""
    kind: ClassVar[str] = "colored"
    r: int = 0
    g: int = 0
    b: int = 0


@dataclass(frozen=True)
class Code(Parent):
    kind: ClassVar[str] = "code"


@dataclass(frozen=True)
class Image(RenderNode):
    """
    An image, rendered by its title (alt text).

    width/height are the pixel sizes from the markup (0 when unknown).
    """
    kind: ClassVar[str] = "image"
    title: str = ""
    src: str = ""
    width: int = 0
    height: int = 0


@dataclass(frozen=True)
class Block(Parent):
    """A paragraph-like block, separated from neighbours by a blank line."""
    kind: ClassVar[str] = "block"


@dataclass(frozen=True)
class Div(Parent):
    """A block starting and ending on its own line, with no blank line."""
    kind: ClassVar[str] = "div"


@dataclass(frozen=True)
class Preformatted(RenderNode):
    """Verbatim text. info is the language hint, if the markup gave one."""
    kind: ClassVar[str] = "preformatted"
    text: str = ""
    info: str = ""


@dataclass(frozen=True)
class BlockQuote(Parent):
    kind: ClassVar[str] = "blockquote"


@dataclass(frozen=True)
class UnorderedList(Parent):
    """Children are the list items, each one a Block."""
    kind: ClassVar[str] = "unordered_list"


@dataclass(frozen=True)
class OrderedList(Parent):
    """Children are the list items, each one a Block."""
    kind: ClassVar[str] = "ordered_list"


@dataclass(frozen=True)
class LineBreak(RenderNode):
    kind: ClassVar[str] = "line_break"


@dataclass(frozen=True)
class NoBreak(Parent):
    """Content that must not be split across pages."""
    kind: ClassVar[str] = "no_break"


@dataclass(frozen=True)
class Redacted(Parent):
    """Content tagged with a secret; redaction_id names the region."""
    kind: ClassVar[str] = "redacted"
    secret: str = ""
    redaction_id: str = ""


@dataclass(frozen=True)
class Audio(Parent):
    """An audio clip; children are the fallback content."""
    kind: ClassVar[str] = "audio"
    src: str = ""


# =============================================================================
# Tables
# =============================================================================

@dataclass(frozen=True)
class RenderTableCell:
    """
    A table cell.

    Attributes:
        colspan: Number of columns the cell spans (always >= 1).
        content: Index of a Container node holding the cell content.
    """
    colspan: int
    content: int


@dataclass(frozen=True)
class RenderTableRow:
    """A table row: an ordered run of cells."""
    cells: tuple[RenderTableCell, ...] = ()

    def num_cells(self) -> int:
        """Number of columns covered by this row, counting colspans."""
        return sum(cell.colspan for cell in self.cells)

    def cell_columns(self) -> Iterator[tuple[int, RenderTableCell]]:
        """Yield (starting column, cell) pairs, taking colspan into account."""
        column = 0
        for cell in self.cells:
            yield column, cell
            column += cell.colspan


@dataclass(frozen=True)
class RenderTable:
    """
    A table: rows of cells plus the derived column count.

    Build with RenderTable.from_rows() so that column_count is consistent.
    """
    rows: tuple[RenderTableRow, ...] = ()
    column_count: int = 0

    @classmethod
    def from_rows(cls, rows: list[RenderTableRow]) -> "RenderTable":
        """Create a table, sizing it to its widest row."""
        column_count = max((row.num_cells() for row in rows), default=0)
        return cls(rows=tuple(rows), column_count=column_count)


@dataclass(frozen=True)
class Table(RenderNode):
    kind: ClassVar[str] = "table"
    table: RenderTable = field(default_factory=RenderTable)


# =============================================================================
# The Arena
# =============================================================================

class RenderTree:
    """
    Arena holding every node of one parsed document.

    Attributes:
        nodes: All nodes, addressed by index.
        root: Index of the document node.
        estimates: Lazily filled side table of size estimates, keyed by
                   node index. Filled by rendering.estimate; safe to reuse
                   across renders because the nodes never change.

    Not thread-safe: concurrent renders of one tree race on `estimates`.
    """

    def __init__(self) -> None:
        self.nodes: list[RenderNode] = []
        self.root: int | None = None
        self.estimates: dict[int, SizeEstimate] = {}

    def add(self, node: RenderNode) -> int:
        """Append a node to the arena and return its index."""
        self.nodes.append(node)
        return len(self.nodes) - 1

    def __getitem__(self, index: int) -> RenderNode:
        return self.nodes[index]

    def __len__(self) -> int:
        return len(self.nodes)

    def __repr__(self) -> str:
        return f"RenderTree(nodes={len(self.nodes)}, root={self.root})"
