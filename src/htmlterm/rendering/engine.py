# =============================================================================
# Rendering Engine
# =============================================================================
# Entry points tying the stages together:
#
#   source --parse_only--> RenderTree --render_plain-----> str
#                                     --render_rich------> [TaggedLine]
#                                     --render_annotated-> [Control]
#                                                          --build_page_blocks--> [PageBlock]
#
# Every render_* function accepts either raw markup or a tree from
# parse_only; one tree can be rendered any number of times at any width.
#
# RenderEngine bundles the same operations with a RenderingConfig, and
# picks the output mode (plain, literal or colour) from it.
# =============================================================================

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import IO, TYPE_CHECKING, Union

from bs4 import BeautifulSoup, ParserRejectedMarkup

from htmlterm.core.controls import Control, PageBlock
from htmlterm.core.nodes import RenderTree
from htmlterm.exceptions import MalformedMarkupError
from htmlterm.rendering.controls import annotate
from htmlterm.rendering.layout import LayoutWalker
from htmlterm.rendering.media import ImageSizer
from htmlterm.rendering.pages import build_page_blocks
from htmlterm.rendering.styles import AnsiStyler, StyleMapping, Styler, coerce_styler
from htmlterm.rendering.text import (
    LiteralDecorator,
    PlainDecorator,
    RichDecorator,
    TaggedLine,
    TextRenderer,
)
from htmlterm.rendering.tree import build_tree

if TYPE_CHECKING:
    from htmlterm.config import RenderingConfig, StyleConfig

logger = logging.getLogger(__name__)

Source = Union[bytes, bytearray, str, IO[bytes], IO[str]]


# =============================================================================
# Parsing
# =============================================================================

def read_source(source: Source) -> str:
    """
    Read markup from bytes, a string or a file object.

    Bytes are decoded as UTF-8.

    Raises:
        MalformedMarkupError: If the bytes are not valid UTF-8.
    """
    if hasattr(source, "read"):
        source = source.read()
    if isinstance(source, (bytes, bytearray)):
        try:
            return bytes(source).decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedMarkupError("Input is not valid UTF-8", str(e)) from e
    if isinstance(source, str):
        return source
    raise TypeError(f"Cannot read markup from {type(source).__name__}")


def parse_document(source: Source) -> BeautifulSoup:
    """
    Parse markup with BeautifulSoup and lxml.

    Raises:
        MalformedMarkupError: If the input cannot be decoded or parsed.
    """
    text = read_source(source)
    try:
        return BeautifulSoup(text, "lxml")
    except ParserRejectedMarkup as e:
        raise MalformedMarkupError("Parser rejected the input", str(e)) from e


def parse_only(source: Source, *, diagnostics: logging.Logger | None = None) -> RenderTree:
    """
    Parse markup into a RenderTree that can be rendered repeatedly.

    Args:
        source: Markup as bytes (UTF-8), str, or a file object.
        diagnostics: Logger for unsupported-markup reports.
    """
    return build_tree(parse_document(source), diagnostics)


def _as_tree(source_or_tree: Source | RenderTree) -> RenderTree:
    if isinstance(source_or_tree, RenderTree):
        return source_or_tree
    return parse_only(source_or_tree)


# =============================================================================
# Rendering
# =============================================================================

def render_plain(source_or_tree: Source | RenderTree, width: int, *, literal: bool = False) -> str:
    """
    Render to plain text wrapped at width.

    Links become [text][N] with a numbered list of URLs at the end, unless
    literal is set, in which case only the document's text is output.

    Usage:
        >>> render_plain(b'<a href="http://x/">w</a>', 80)
        '[w][1]\\n\\n[1] http://x/\\n'
    """
    tree = _as_tree(source_or_tree)
    decorator = LiteralDecorator() if literal else PlainDecorator()
    renderer = TextRenderer(width, decorator)
    LayoutWalker(tree).render(renderer, tree.root)
    return renderer.into_string()


def render_rich(
    source_or_tree: Source | RenderTree,
    width: int,
    *,
    image_sizer: ImageSizer | None = None,
) -> list[TaggedLine]:
    """
    Render to lines of annotated spans.

    Args:
        source_or_tree: Markup or a parsed tree.
        width: Wrap width (clamped to at least 1).
        image_sizer: Converts image pixel sizes to cells. Defaults to an
                     80x40 cell limit with 8x16 pixel cells.

    Returns:
        One TaggedLine per output line; each span's tags list the active
        annotations, outer first.
    """
    tree = _as_tree(source_or_tree)
    renderer = TextRenderer(width, RichDecorator())
    LayoutWalker(tree, image_sizer).render(renderer, tree.root)
    return renderer.into_tagged_lines()


def render_annotated(
    tree: Source | RenderTree,
    width: int,
    styler: Styler | StyleMapping,
    *,
    image_sizer: ImageSizer | None = None,
    diagnostics: logging.Logger | None = None,
) -> list[Control]:
    """
    Render to a stream of Controls.

    Args:
        tree: A parsed tree (or markup, which is parsed first).
        width: Wrap width.
        styler: A Styler, or a function mapping one Annotation to
                (prefix, transform, suffix).
        image_sizer: See render_rich().
        diagnostics: Logger for ignored annotations.

    Raises:
        InvariantViolation: If the markers in the rendered output are
                            inconsistent.
    """
    lines = render_rich(tree, width, image_sizer=image_sizer)
    return annotate(lines, coerce_styler(styler), diagnostics)


# =============================================================================
# Engine
# =============================================================================

class RenderMode(Enum):
    """Available output modes."""
    PLAIN = auto()      # Decorated text with link footnotes
    LITERAL = auto()    # Text only
    COLOUR = auto()     # Control stream with ANSI styling


@dataclass
class RenderResult:
    """
    Result of rendering a document.

    Attributes:
        text: The rendered text (plain and literal modes).
        controls: The control stream (colour mode).
        blocks: The control stream grouped into page blocks (colour mode).
        mode_used: Which mode produced this result.
    """
    text: str = ""
    controls: list[Control] = field(default_factory=list)
    blocks: list[PageBlock] = field(default_factory=list)
    mode_used: RenderMode = RenderMode.PLAIN


class RenderEngine:
    """
    Renders documents according to a RenderingConfig.

    Usage:
        >>> engine = RenderEngine(config.rendering, config.styles)
        >>> result = engine.render(html)
        >>> print(result.text)

    Attributes:
        config: Rendering configuration.
        styles: Terminal styles for colour mode.
        image_sizer: Image sizing derived from the config.
    """

    def __init__(self, config: "RenderingConfig", styles: "StyleConfig | None" = None) -> None:
        """
        Initialize the rendering engine.

        Args:
            config: Rendering configuration.
            styles: Terminal styles. Defaults to StyleConfig().

        Raises:
            ConfigError: If the styles are invalid.
        """
        from htmlterm.config import StyleConfig

        self.config = config
        self.styles = styles or StyleConfig()
        self.image_sizer = ImageSizer(
            max_width=config.max_image_width,
            max_height=config.max_image_height,
            cell_width=config.cell_width,
            cell_height=config.cell_height,
        )
        self._styler: Styler | None = None

    @property
    def styler(self) -> Styler:
        """The ANSI styler, built on first use."""
        if self._styler is None:
            self._styler = AnsiStyler(self.styles)
        return self._styler

    @property
    def mode(self) -> RenderMode:
        """The mode selected by the configuration; colour wins over literal."""
        if self.config.colour:
            return RenderMode.COLOUR
        if self.config.literal:
            return RenderMode.LITERAL
        return RenderMode.PLAIN

    def parse(self, source: Source, *, diagnostics: logging.Logger | None = None) -> RenderTree:
        return parse_only(source, diagnostics=diagnostics)

    def render(
        self,
        source_or_tree: Source | RenderTree,
        *,
        force_mode: RenderMode | None = None,
    ) -> RenderResult:
        """
        Render a document.

        Args:
            source_or_tree: Markup or a parsed tree.
            force_mode: Use this mode instead of the configured one.

        Returns:
            RenderResult with the rendered content.
        """
        mode = force_mode or self.mode
        tree = _as_tree(source_or_tree)
        width = self.config.width
        logger.debug(f"Rendering {tree!r} at width {width} in {mode.name} mode")

        if mode == RenderMode.COLOUR:
            ops = render_annotated(tree, width, self.styler, image_sizer=self.image_sizer)
            return RenderResult(
                controls=ops,
                blocks=build_page_blocks(ops),
                mode_used=mode,
            )

        text = render_plain(tree, width, literal=mode == RenderMode.LITERAL)
        return RenderResult(text=text, mode_used=mode)
