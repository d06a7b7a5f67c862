# =============================================================================
# Layout Walker
# =============================================================================
# Walks a RenderTree and drives a TextRenderer.
#
# Nodes are dispatched on their kind to `_render_<kind>` handlers. Inline
# nodes render straight into the current renderer; quotes and list items go
# through width-reduced sub-renderers spliced back with a line prefix;
# tables are handed to the table layout.
#
# The same walk serves every output mode: the renderer's decorator decides
# whether links become footnotes, nothing, or annotations, and whether
# markers (no-break, redaction, media) are emitted at all.
# =============================================================================

from itertools import repeat

from htmlterm.core import nodes
from htmlterm.core.nodes import RenderTree
from htmlterm.exceptions import InvariantViolation
from htmlterm.rendering.estimate import SizeEstimator
from htmlterm.rendering.media import ImageSizer
from htmlterm.rendering.table import render_table
from htmlterm.rendering.text import TextRenderer, prefix_sequence

QUOTE_PREFIX = "> "
BULLET_PREFIX = "* "


class LayoutWalker:
    """
    Renders the nodes of one RenderTree.

    Usage:
        >>> walker = LayoutWalker(tree)
        >>> renderer = TextRenderer(80, PlainDecorator())
        >>> walker.render(renderer, tree.root)
        >>> text = renderer.into_string()

    Attributes:
        tree: The tree being rendered.
        estimator: Size estimator sharing the tree's estimate cache.
        image_sizer: Converts image pixel sizes into cells.
    """

    def __init__(self, tree: RenderTree, image_sizer: ImageSizer | None = None) -> None:
        self.tree = tree
        self.estimator = SizeEstimator(tree)
        self.image_sizer = image_sizer or ImageSizer()

    def render(self, renderer: TextRenderer, index: int) -> None:
        node = self.tree[index]
        handler = getattr(self, f"_render_{node.kind}", None)
        if handler is None:
            raise InvariantViolation(f"No layout for node kind {node.kind!r}")
        handler(renderer, node)

    def render_children(self, renderer: TextRenderer, node: nodes.RenderNode) -> None:
        for child in node.children:
            self.render(renderer, child)

    # =========================================================================
    # Inline Nodes
    # =========================================================================

    def _render_text(self, renderer: TextRenderer, node: nodes.Text) -> None:
        renderer.add_inline_text(node.text)

    def _render_container(self, renderer: TextRenderer, node: nodes.Container) -> None:
        self.render_children(renderer, node)

    def _render_link(self, renderer: TextRenderer, node: nodes.Link) -> None:
        renderer.start_link(node.url)
        self.render_children(renderer, node)
        renderer.end_link()

    def _render_emphasis(self, renderer: TextRenderer, node: nodes.Emphasis) -> None:
        renderer.start_emphasis()
        self.render_children(renderer, node)
        renderer.end_emphasis()

    def _render_strong(self, renderer: TextRenderer, node: nodes.Strong) -> None:
        renderer.start_strong()
        self.render_children(renderer, node)
        renderer.end_strong()

    def _render_strikeout(self, renderer: TextRenderer, node: nodes.Strikeout) -> None:
        renderer.start_strikeout()
        self.render_children(renderer, node)
        renderer.end_strikeout()

    def _render_code(self, renderer: TextRenderer, node: nodes.Code) -> None:
        renderer.start_code()
        self.render_children(renderer, node)
        renderer.end_code()

    def _render_colored(self, renderer: TextRenderer, node: nodes.Colored) -> None:
        renderer.start_colour(node.r, node.g, node.b)
        self.render_children(renderer, node)
        renderer.end_colour()

    def _render_image(self, renderer: TextRenderer, node: nodes.Image) -> None:
        width = height = 0
        if renderer.block_markers_allowed and node.src:
            width, height = self.image_sizer.cells(node.width, node.height, renderer.width)
        renderer.add_image(node.title, node.src, width, height)

    def _render_line_break(self, renderer: TextRenderer, node: nodes.LineBreak) -> None:
        renderer.new_line()

    def _render_redacted(self, renderer: TextRenderer, node: nodes.Redacted) -> None:
        if not renderer.block_markers_allowed:
            self.render_children(renderer, node)
            return
        renderer.start_redacted(node.secret, node.redaction_id)
        self.render_children(renderer, node)
        renderer.end_redacted(node.redaction_id)

    # =========================================================================
    # Block Nodes
    # =========================================================================

    def _render_block(self, renderer: TextRenderer, node: nodes.Block) -> None:
        renderer.start_block()
        self.render_children(renderer, node)
        renderer.end_block()

    def _render_div(self, renderer: TextRenderer, node: nodes.Div) -> None:
        renderer.new_line()
        self.render_children(renderer, node)
        renderer.new_line()

    def _render_preformatted(self, renderer: TextRenderer, node: nodes.Preformatted) -> None:
        renderer.add_preformatted_block(node.text, node.info)

    def _render_blockquote(self, renderer: TextRenderer, node: nodes.BlockQuote) -> None:
        sub = renderer.new_sub_renderer(renderer.width - len(QUOTE_PREFIX))
        self.render_children(sub, node)

        renderer.start_block()
        renderer.append_subrender(sub, repeat(QUOTE_PREFIX))
        renderer.end_block()

    def _render_unordered_list(self, renderer: TextRenderer, node: nodes.UnorderedList) -> None:
        renderer.start_block()
        indent = " " * len(BULLET_PREFIX)
        for item in node.children:
            sub = renderer.new_sub_renderer(renderer.width - len(BULLET_PREFIX))
            self.render(sub, item)
            renderer.append_subrender(sub, prefix_sequence(BULLET_PREFIX, indent))

    def _render_ordered_list(self, renderer: TextRenderer, node: nodes.OrderedList) -> None:
        items = node.children
        renderer.start_block()

        prefix_width = len(str(len(items))) + 2
        indent = " " * prefix_width
        for number, item in enumerate(items, start=1):
            sub = renderer.new_sub_renderer(renderer.width - prefix_width)
            self.render(sub, item)
            renderer.append_subrender(sub, prefix_sequence(f"{number}.".ljust(prefix_width), indent))

    def _render_table(self, renderer: TextRenderer, node: nodes.Table) -> None:
        render_table(self, renderer, node.table)

    # =========================================================================
    # Marker Nodes
    # =========================================================================

    def _render_no_break(self, renderer: TextRenderer, node: nodes.NoBreak) -> None:
        if not renderer.block_markers_allowed:
            self.render_children(renderer, node)
            return
        renderer.start_no_break()
        self.render_children(renderer, node)
        renderer.end_no_break()

    def _render_audio(self, renderer: TextRenderer, node: nodes.Audio) -> None:
        if renderer.block_markers_allowed:
            renderer.add_audio(node.src)
        else:
            self.render_children(renderer, node)
