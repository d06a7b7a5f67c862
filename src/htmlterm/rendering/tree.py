# =============================================================================
# Tree Builder
# =============================================================================
# Converts a parsed HTML document (BeautifulSoup, lxml parser) into the
# semantic render tree.
#
# Elements are dispatched to `_build_<tag>` handlers. Anything
# without a handler becomes a transparent Container of its children.
# Unsupported markup is never fatal; it is reported on the diagnostic
# logger and degrades:
#   - head/script/style/meta/link/hr and comments vanish
#   - unknown elements become transparent containers
#   - non-<li> list children and non-row table children are skipped
#   - <img> without alt text is dropped
#   - colspan above 1000 is clamped to 1000
#
# A few attributes wrap an element's node in an extra one:
#   - style="color: ..." / <font color>         -> Colored
#   - <nobr>, style="(page-)break-inside: avoid" -> NoBreak (never nested)
#   - data-redacted="<secret>"                  -> Redacted
# =============================================================================

import logging
import re
import uuid

from bs4 import (
    BeautifulSoup,
    Comment,
    Declaration,
    Doctype,
    NavigableString,
    ProcessingInstruction,
    Tag,
)
from rich.color import Color, ColorParseError

from htmlterm.core import nodes
from htmlterm.core.nodes import RenderTable, RenderTableCell, RenderTableRow, RenderTree

logger = logging.getLogger(__name__)

# Strings that carry no document text
IGNORED_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)

STYLE_COLOUR = re.compile(r'(?:^|;)\s*color\s*:\s*([^;]+)', re.IGNORECASE)
STYLE_NO_BREAK = re.compile(r'(?:^|;)\s*(?:page-)?break-inside\s*:\s*avoid', re.IGNORECASE)
LANGUAGE_CLASS = re.compile(r'^(?:language|lang)-(.+)$')

# Browsers clamp colspan to the same limit
MAX_COLSPAN = 1000


class TreeBuilder:
    """
    Builds a RenderTree from a BeautifulSoup document.

    Usage:
        >>> soup = BeautifulSoup("<p>Hello</p>", "lxml")
        >>> tree = TreeBuilder().build(soup)

    Attributes:
        tree: The arena being filled.
        log: Diagnostic sink for unsupported markup.
    """

    # Elements dropped with all their content
    SKIP_ELEMENTS = frozenset({"head", "script", "style", "meta", "link", "hr"})

    # Elements that only group their children
    CONTAINER_ELEMENTS = frozenset({"html", "body", "span"})

    # Elements rendered as paragraph blocks
    BLOCK_ELEMENTS = frozenset({"h1", "h2", "h3", "h4", "p"})

    def __init__(self, diagnostics: logging.Logger | None = None) -> None:
        """
        Initialize the builder.

        Args:
            diagnostics: Logger receiving unsupported-markup reports.
                         Defaults to this module's logger.
        """
        self.log = diagnostics or logger
        self.tree = RenderTree()
        self._no_break_depth = 0

    def build(self, document: Tag) -> RenderTree:
        """
        Convert a whole document.

        The root always exists: a document that produces nothing becomes an
        empty Container.
        """
        root = self.build_node(document)
        if root is None:
            root = self.tree.add(nodes.Container())
        self.tree.root = root
        return self.tree

    def build_node(self, node) -> int | None:
        """
        Convert one DOM node, returning its arena index or None if the node
        produces nothing.
        """
        if isinstance(node, IGNORED_STRINGS):
            return None

        if isinstance(node, NavigableString):
            return self.tree.add(nodes.Text(text=str(node)))

        if isinstance(node, BeautifulSoup):
            return self.tree.add(nodes.Container(nodes=self._children(node)))

        if not isinstance(node, Tag):
            self.log.debug(f"Unhandled node type: {type(node).__name__}")
            return None

        return self._convert_element(node)

    # =========================================================================
    # Elements
    # =========================================================================

    def _convert_element(self, element: Tag) -> int | None:
        """Build an element, then apply attribute-driven wrappers."""
        tag = element.name.lower()

        if tag in self.SKIP_ELEMENTS:
            return None

        no_break = self._wants_no_break(element)
        if no_break:
            self._no_break_depth += 1
        try:
            index = self._dispatch(tag, element)
        finally:
            if no_break:
                self._no_break_depth -= 1

        if index is None:
            return None

        colour = self._style_colour(element)
        if colour is not None:
            r, g, b = colour
            index = self.tree.add(nodes.Colored(nodes=(index,), r=r, g=g, b=b))

        if no_break:
            index = self.tree.add(nodes.NoBreak(nodes=(index,)))

        secret = element.get("data-redacted")
        if secret is not None:
            redaction_id = element.get("id") or uuid.uuid4().hex
            index = self.tree.add(
                nodes.Redacted(nodes=(index,), secret=secret, redaction_id=redaction_id)
            )

        return index

    def _dispatch(self, tag: str, element: Tag) -> int | None:
        if tag in self.CONTAINER_ELEMENTS:
            return self.tree.add(nodes.Container(nodes=self._children(element)))
        if tag in self.BLOCK_ELEMENTS:
            return self.tree.add(nodes.Block(nodes=self._children(element)))

        handler = getattr(self, f"_build_{tag}", None)
        if handler:
            return handler(element)

        self.log.debug(f"Unhandled element <{tag}>, rendering its children")
        return self.tree.add(nodes.Container(nodes=self._children(element)))

    def _build_a(self, element: Tag) -> int:
        href = element.get("href")
        children = self._children(element)
        if href is None:
            return self.tree.add(nodes.Container(nodes=children))
        return self.tree.add(nodes.Link(nodes=children, url=href))

    def _build_em(self, element: Tag) -> int:
        return self.tree.add(nodes.Emphasis(nodes=self._children(element)))

    def _build_strong(self, element: Tag) -> int:
        return self.tree.add(nodes.Strong(nodes=self._children(element)))

    def _build_b(self, element: Tag) -> int:
        return self._build_strong(element)

    def _build_s(self, element: Tag) -> int:
        return self.tree.add(nodes.Strikeout(nodes=self._children(element)))

    def _build_strike(self, element: Tag) -> int:
        return self._build_s(element)

    def _build_del(self, element: Tag) -> int:
        return self._build_s(element)

    def _build_code(self, element: Tag) -> int:
        return self.tree.add(nodes.Code(nodes=self._children(element)))

    def _build_font(self, element: Tag) -> int:
        children = self._children(element)
        colour = parse_colour(element.get("color"), self.log)
        if colour is None:
            return self.tree.add(nodes.Container(nodes=children))
        r, g, b = colour
        return self.tree.add(nodes.Colored(nodes=children, r=r, g=g, b=b))

    def _build_img(self, element: Tag) -> int | None:
        title = element.get("alt")
        if title is None:
            self.log.debug("Dropping <img> without alt text")
            return None
        return self.tree.add(nodes.Image(
            title=title,
            src=element.get("src", ""),
            width=int_attribute(element, "width", 0),
            height=int_attribute(element, "height", 0),
        ))

    def _build_div(self, element: Tag) -> int:
        return self.tree.add(nodes.Div(nodes=self._children(element)))

    def _build_pre(self, element: Tag) -> int:
        text = text_content(element)
        # A newline straight after <pre> is not content
        if text.startswith("\n"):
            text = text[1:]
        return self.tree.add(nodes.Preformatted(text=text, info=language_hint(element)))

    def _build_br(self, element: Tag) -> int:
        return self.tree.add(nodes.LineBreak())

    def _build_blockquote(self, element: Tag) -> int:
        return self.tree.add(nodes.BlockQuote(nodes=self._children(element)))

    def _build_ul(self, element: Tag) -> int:
        return self.tree.add(nodes.UnorderedList(nodes=self._list_items(element)))

    def _build_ol(self, element: Tag) -> int:
        return self.tree.add(nodes.OrderedList(nodes=self._list_items(element)))

    def _build_audio(self, element: Tag) -> int:
        src = element.get("src")
        if not src:
            source = element.find("source", src=True)
            src = source["src"] if source else None
        children = self._children(element)
        if not src:
            self.log.debug("<audio> without a source, rendering its fallback")
            return self.tree.add(nodes.Container(nodes=children))
        return self.tree.add(nodes.Audio(nodes=children, src=src))

    def _build_table(self, element: Tag) -> int | None:
        rows: list[RenderTableRow] = []
        for child in element.children:
            if isinstance(child, Tag):
                name = child.name.lower()
                if name in ("thead", "tbody", "tfoot"):
                    rows.extend(self._table_rows(child))
                elif name == "tr":
                    rows.append(self._table_row(child))
                else:
                    self.log.info(f"Ignoring table child <{name}>")
            elif isinstance(child, NavigableString) and not isinstance(child, IGNORED_STRINGS):
                if child.strip():
                    self.log.debug(f"Ignoring text directly inside <table>: {child.strip()[:20]!r}")

        if not rows:
            self.log.debug("Dropping table without rows")
            return None
        return self.tree.add(nodes.Table(table=RenderTable.from_rows(rows)))

    # =========================================================================
    # Helpers
    # =========================================================================

    def _children(self, element: Tag) -> tuple[int, ...]:
        """Build all children of an element, dropping the ones that vanish."""
        built = (self.build_node(child) for child in element.children)
        return tuple(index for index in built if index is not None)

    def _list_items(self, element: Tag) -> tuple[int, ...]:
        """Build the direct <li> children of a list, each as a Block."""
        items = []
        for child in element.children:
            if isinstance(child, Tag) and child.name.lower() == "li":
                items.append(self.tree.add(nodes.Block(nodes=self._children(child))))
            elif isinstance(child, Tag):
                self.log.debug(f"Ignoring <{child.name}> inside a list")
        return tuple(items)

    def _table_rows(self, group: Tag) -> list[RenderTableRow]:
        rows = []
        for child in group.children:
            if isinstance(child, Tag):
                if child.name.lower() == "tr":
                    rows.append(self._table_row(child))
                else:
                    self.log.debug(f"Ignoring <{child.name}> inside <{group.name}>")
        return rows

    def _table_row(self, row: Tag) -> RenderTableRow:
        cells = []
        for child in row.children:
            if isinstance(child, Tag):
                if child.name.lower() in ("td", "th"):
                    cells.append(self._table_cell(child))
                else:
                    self.log.debug(f"Ignoring <{child.name}> inside <tr>")
        return RenderTableRow(cells=tuple(cells))

    def _table_cell(self, cell: Tag) -> RenderTableCell:
        content = self.tree.add(nodes.Container(nodes=self._children(cell)))
        colspan = parse_colspan(cell.get("colspan"), self.log)
        return RenderTableCell(colspan=colspan, content=content)

    def _wants_no_break(self, element: Tag) -> bool:
        style = element.get("style")
        styled = bool(style) and STYLE_NO_BREAK.search(style) is not None
        if not styled and element.name.lower() != "nobr":
            return False
        if self._no_break_depth > 0:
            self.log.debug(f"Nested no-break <{element.name}> flattened")
            return False
        return True

    def _style_colour(self, element: Tag) -> tuple[int, int, int] | None:
        style = element.get("style")
        if not style:
            return None
        match = STYLE_COLOUR.search(style)
        if not match:
            return None
        return parse_colour(match.group(1).strip(), self.log)


# =============================================================================
# Utility Functions
# =============================================================================

def build_tree(document: Tag, diagnostics: logging.Logger | None = None) -> RenderTree:
    """Convert a parsed document into a RenderTree."""
    return TreeBuilder(diagnostics).build(document)


def text_content(element: Tag) -> str:
    """Depth-first concatenation of all descendant text, verbatim."""
    return "".join(
        str(node)
        for node in element.descendants
        if isinstance(node, NavigableString) and not isinstance(node, IGNORED_STRINGS)
    )


def language_hint(element: Tag) -> str:
    """
    Find a language-xxx / lang-xxx class on a <pre> or its first <code>.

    Returns "" when there is none.
    """
    candidates = [element]
    code = element.find("code")
    if code is not None:
        candidates.append(code)
    for candidate in candidates:
        for css_class in candidate.get("class") or []:
            match = LANGUAGE_CLASS.match(css_class)
            if match:
                return match.group(1)
    return ""


def parse_colspan(value: str | None, log: logging.Logger = logger) -> int:
    """
    Parse a colspan attribute.

    Missing, invalid or non-positive values mean 1. Values above
    MAX_COLSPAN are clamped to it, as browsers do.
    """
    if value is None:
        return 1
    try:
        colspan = int(value.strip())
    except ValueError:
        return 1
    if colspan > MAX_COLSPAN:
        log.warning(f"colspan={colspan} clamped to {MAX_COLSPAN}")
        return MAX_COLSPAN
    return colspan if colspan > 0 else 1


def int_attribute(element: Tag, name: str, default: int) -> int:
    """Read a non-negative integer attribute such as width="120"."""
    value = element.get(name)
    if value is None:
        return default
    digits = re.match(r'\s*(\d+)', value)
    return int(digits.group(1)) if digits else default


def parse_colour(value: str | None, log: logging.Logger = logger) -> tuple[int, int, int] | None:
    """
    Parse a colour name or #rrggbb value into an RGB triple.

    Unparseable colours are reported and give None.
    """
    if not value:
        return None
    try:
        triplet = Color.parse(value.strip().lower()).get_truecolor()
    except ColorParseError:
        log.debug(f"Ignoring unparseable colour {value!r}")
        return None
    return triplet.red, triplet.green, triplet.blue
