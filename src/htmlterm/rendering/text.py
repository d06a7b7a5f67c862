# =============================================================================
# Text Layout
# =============================================================================
# The line-building half of the renderer: everything here works on finished
# strings and knows nothing about the render tree.
#
#   - TaggedLine / TaggedString:  a line as a run of annotated spans
#   - BorderHoriz:                a horizontal table border that can grow
#                                 junctions (┬ ┴ ┼) as columns are merged
#   - WrappedBlock:               greedy word wrapping into fixed-width lines
#   - Decorators:                 what links, emphasis, images... look like
#                                 (plain footnotes, literal text, or rich
#                                 annotations)
#   - TextRenderer:               blocks, lines, sub-renderers and column
#                                 merging on top of the above
#
# Widths are measured in terminal cells (rich.cells.cell_len), so wide
# characters count double.
# =============================================================================

import unicodedata
from dataclasses import dataclass, field
from enum import Enum
from itertools import repeat
from typing import Iterable, Iterator

from rich.cells import cell_len

from htmlterm.core import annotations as ann
from htmlterm.core.annotations import Annotation
from htmlterm.exceptions import InvariantViolation

VERTICAL_BORDER = "│"


def char_width(char: str) -> int:
    return cell_len(char)


def is_control_char(char: str) -> bool:
    """True for C0/C1 control characters, which are never rendered."""
    return unicodedata.category(char) == "Cc"


# =============================================================================
# Tagged Lines
# =============================================================================

@dataclass
class TaggedString:
    """A run of text with the annotations active over it (outer first)."""
    text: str
    tags: tuple[Annotation, ...] = ()

    @property
    def width(self) -> int:
        return cell_len(self.text)

    @property
    def is_marker(self) -> bool:
        return any(ann.is_marker(tag) for tag in self.tags)


@dataclass
class TaggedLine:
    """
    One output line as a sequence of TaggedStrings.

    Adjacent spans with identical tags are merged as they are pushed, except
    for marker spans, which always stay separate.
    """
    spans: list[TaggedString] = field(default_factory=list)

    def push_str(self, text: str, tags: tuple[Annotation, ...] = ()) -> None:
        self.push(TaggedString(text, tags))

    def push(self, span: TaggedString) -> None:
        if span.is_marker:
            self.spans.append(span)
            return
        if not span.text:
            return
        if self.spans and self.spans[-1].tags == span.tags and not self.spans[-1].is_marker:
            last = self.spans[-1]
            self.spans[-1] = TaggedString(last.text + span.text, last.tags)
        else:
            self.spans.append(span)

    def push_char(self, char: str, tags: tuple[Annotation, ...] = ()) -> None:
        self.push_str(char, tags)

    def insert_front(self, span: TaggedString) -> None:
        if span.text or span.is_marker:
            self.spans.insert(0, span)

    def consume(self, other: "TaggedLine") -> None:
        """Move all of another line's spans onto the end of this one."""
        for span in other.spans:
            self.push(span)
        other.spans = []

    @property
    def width(self) -> int:
        return sum(span.width for span in self.spans)

    def pad_to(self, width: int) -> None:
        """Pad with untagged spaces up to the given width."""
        missing = width - self.width
        if missing > 0:
            self.push_str(" " * missing)

    def is_empty(self) -> bool:
        return not self.spans

    def is_marker_only(self) -> bool:
        """True if the line holds only zero-width marker spans."""
        return bool(self.spans) and all(span.is_marker and not span.text for span in self.spans)

    def __iter__(self) -> Iterator[TaggedString]:
        return iter(self.spans)

    def __str__(self) -> str:
        return "".join(span.text for span in self.spans)


# =============================================================================
# Borders
# =============================================================================

class BorderSeg(Enum):
    """One cell of a horizontal border."""
    STRAIGHT = "─"
    JOIN_ABOVE = "┴"
    JOIN_BELOW = "┬"
    JOIN_CROSS = "┼"


class BorderHoriz:
    """
    A horizontal border line whose cells can join vertical lines above,
    below or both.

    Usage:
        >>> border = BorderHoriz(5)
        >>> border.join_below(2)
        >>> str(border)
        '──┬──'
    """

    def __init__(self, width: int) -> None:
        self.segments = [BorderSeg.STRAIGHT] * width

    @property
    def width(self) -> int:
        return len(self.segments)

    def stretch_to(self, width: int) -> None:
        missing = width - len(self.segments)
        if missing > 0:
            self.segments.extend([BorderSeg.STRAIGHT] * missing)

    def join_above(self, pos: int) -> None:
        if 0 <= pos < len(self.segments):
            seg = self.segments[pos]
            if seg is BorderSeg.STRAIGHT:
                self.segments[pos] = BorderSeg.JOIN_ABOVE
            elif seg is BorderSeg.JOIN_BELOW:
                self.segments[pos] = BorderSeg.JOIN_CROSS

    def join_below(self, pos: int) -> None:
        if 0 <= pos < len(self.segments):
            seg = self.segments[pos]
            if seg is BorderSeg.STRAIGHT:
                self.segments[pos] = BorderSeg.JOIN_BELOW
            elif seg is BorderSeg.JOIN_ABOVE:
                self.segments[pos] = BorderSeg.JOIN_CROSS

    def merge_from_below(self, other: "BorderHoriz", pos: int) -> None:
        """Absorb the downward junctions of a nested top border at pos."""
        for offset, seg in enumerate(other.segments):
            if seg in (BorderSeg.JOIN_BELOW, BorderSeg.JOIN_CROSS):
                self.join_below(pos + offset)

    def merge_from_above(self, other: "BorderHoriz", pos: int) -> None:
        """Absorb the upward junctions of a nested bottom border at pos."""
        for offset, seg in enumerate(other.segments):
            if seg in (BorderSeg.JOIN_ABOVE, BorderSeg.JOIN_CROSS):
                self.join_above(pos + offset)

    def to_vertical_lines_above(self) -> str:
        """The vertical lines that run into this border from above."""
        return "".join(
            VERTICAL_BORDER if seg in (BorderSeg.JOIN_ABOVE, BorderSeg.JOIN_CROSS) else " "
            for seg in self.segments
        )

    def to_tagged_line(self, tags: tuple[Annotation, ...] = ()) -> TaggedLine:
        line = TaggedLine()
        line.push_str(str(self), tags)
        return line

    def __str__(self) -> str:
        return "".join(seg.value for seg in self.segments)

    def __repr__(self) -> str:
        return f"BorderHoriz({str(self)!r})"


RenderLine = TaggedLine | BorderHoriz


# =============================================================================
# Word Wrapping
# =============================================================================

class WrappedBlock:
    """
    Greedy word wrapper.

    Text is accumulated a word at a time; whitespace ends a word and is
    otherwise collapsed. A word that does not fit the current line moves to
    the next one, and a word wider than the whole block is split between
    characters.

    Attributes:
        width: Line width in cells.
    """

    def __init__(self, width: int) -> None:
        self.width = width
        self.text: list[TaggedLine] = []
        self.line = TaggedLine()
        self.linelen = 0
        self.word = TaggedLine()
        self.wordlen = 0
        self.spacetag: tuple[Annotation, ...] = ()

    def add_text(self, text: str, tags: tuple[Annotation, ...]) -> None:
        for char in text:
            if char.isspace():
                self.flush_word()
                self.spacetag = tags
            elif is_control_char(char):
                continue
            else:
                self.word.push_char(char, tags)
                self.wordlen += char_width(char)

    def add_marker(self, tags: tuple[Annotation, ...]) -> None:
        """Add a zero-width marker span to the current word."""
        self.word.push(TaggedString("", tags))

    def flush_word(self) -> None:
        if self.word.is_empty():
            self.wordlen = 0
            return

        if self.wordlen == 0:
            # Only markers: they stick to the end of the line
            self.line.consume(self.word)
            return

        space_needed = self.wordlen + (1 if self.linelen > 0 else 0)
        if space_needed <= self.width - self.linelen:
            if self.linelen > 0:
                self.line.push_str(" ", self.spacetag)
                self.linelen += 1
            self.line.consume(self.word)
            self.linelen += self.wordlen
        else:
            self.flush_line()
            if self.wordlen <= self.width:
                self.line, self.word = self.word, TaggedLine()
                self.linelen = self.wordlen
            else:
                self._split_word()
        self.wordlen = 0

    def _split_word(self) -> None:
        """Break an over-long word across as many lines as it needs."""
        pieces = self.word.spans
        self.word = TaggedLine()
        lineleft = self.width - self.linelen
        for piece in pieces:
            if piece.is_marker:
                self.line.push(piece)
                continue
            chunk = ""
            for char in piece.text:
                width = char_width(char)
                if width > lineleft and (chunk or self.linelen > 0):
                    self.line.push_str(chunk, piece.tags)
                    self.flush_line()
                    chunk = ""
                    lineleft = self.width
                chunk += char
                lineleft -= width
                self.linelen += width
            self.line.push_str(chunk, piece.tags)

    def flush_line(self) -> None:
        if not self.line.is_empty():
            self.text.append(self.line)
        self.line = TaggedLine()
        self.linelen = 0

    def flush(self) -> None:
        self.flush_word()
        self.flush_line()

    def into_lines(self) -> list[TaggedLine]:
        self.flush()
        return self.text

    def is_empty(self) -> bool:
        return not self.text and self.line.is_empty() and self.word.is_empty()


# =============================================================================
# Decorators
# =============================================================================

class TextDecorator:
    """
    Decides how inline markup is shown.

    Each decorate_* method returns the text to insert and the annotation to
    tag the enclosed text with (None for no annotation).
    """

    supports_markers = False

    def decorate_link_start(self, url: str) -> tuple[str, Annotation | None]:
        return "", None

    def decorate_link_end(self) -> str:
        return ""

    def decorate_em_start(self) -> tuple[str, Annotation | None]:
        return "", None

    def decorate_em_end(self) -> str:
        return ""

    def decorate_strong_start(self) -> tuple[str, Annotation | None]:
        return "", None

    def decorate_strong_end(self) -> str:
        return ""

    def decorate_strikeout_start(self) -> tuple[str, Annotation | None]:
        return "", None

    def decorate_strikeout_end(self) -> str:
        return ""

    def decorate_code_start(self) -> tuple[str, Annotation | None]:
        return "", None

    def decorate_code_end(self) -> str:
        return ""

    def decorate_colour(self, r: int, g: int, b: int) -> Annotation | None:
        return None

    def decorate_preformat(self, info: str) -> Annotation | None:
        return None

    def decorate_image(self, title: str, src: str = "", width: int = 0,
                       height: int = 0) -> tuple[str, Annotation | None]:
        return title, None

    def make_subblock_decorator(self) -> "TextDecorator":
        return self

    def finalise(self) -> list[str]:
        """Lines to append after the document (e.g. link footnotes)."""
        return []


class PlainDecorator(TextDecorator):
    """
    Plain-text decoration: [link][N] with numbered footnotes, *emphasis*,
    `code` and [image title].

    Sub-block decorators share the link list with their parent, so numbering
    runs through the whole document and only the root emits the footnotes.
    """

    def __init__(self, links: list[str] | None = None, root: bool = True) -> None:
        self.links: list[str] = links if links is not None else []
        self.root = root

    def decorate_link_start(self, url: str) -> tuple[str, Annotation | None]:
        self.links.append(url)
        return "[", None

    def decorate_link_end(self) -> str:
        return f"][{len(self.links)}]"

    def decorate_em_start(self) -> tuple[str, Annotation | None]:
        return "*", None

    def decorate_em_end(self) -> str:
        return "*"

    def decorate_code_start(self) -> tuple[str, Annotation | None]:
        return "`", None

    def decorate_code_end(self) -> str:
        return "`"

    def decorate_image(self, title: str, src: str = "", width: int = 0,
                       height: int = 0) -> tuple[str, Annotation | None]:
        return f"[{title}]", None

    def make_subblock_decorator(self) -> "PlainDecorator":
        return PlainDecorator(self.links, root=False)

    def finalise(self) -> list[str]:
        if not self.root:
            return []
        return [f"[{number}] {url}" for number, url in enumerate(self.links, start=1)]


class LiteralDecorator(TextDecorator):
    """No decoration at all: only the document's own text."""


class RichDecorator(TextDecorator):
    """Annotations instead of decoration characters."""

    supports_markers = True

    def decorate_link_start(self, url: str) -> tuple[str, Annotation | None]:
        return "", ann.Link(url)

    def decorate_em_start(self) -> tuple[str, Annotation | None]:
        return "", ann.Emphasis()

    def decorate_strong_start(self) -> tuple[str, Annotation | None]:
        return "", ann.Strong()

    def decorate_strikeout_start(self) -> tuple[str, Annotation | None]:
        return "", ann.Strikeout()

    def decorate_code_start(self) -> tuple[str, Annotation | None]:
        return "", ann.Code()

    def decorate_colour(self, r: int, g: int, b: int) -> Annotation | None:
        return ann.Colored(r, g, b)

    def decorate_preformat(self, info: str) -> Annotation | None:
        return ann.Preformat(info)

    def decorate_image(self, title: str, src: str = "", width: int = 0,
                       height: int = 0) -> tuple[str, Annotation | None]:
        return f"[{title}]", ann.Image(src, width, height)


# =============================================================================
# Text Renderer
# =============================================================================

class TextRenderer:
    """
    Builds wrapped lines from a sequence of layout operations.

    Blocks are separated by a blank line; new_line only ends the current
    line. Nested regions (quotes, list items, table cells) are laid out by
    sub-renderers and spliced back in with append_subrender or
    append_columns_with_borders.

    Usage:
        >>> renderer = TextRenderer(20, PlainDecorator())
        >>> renderer.start_block()
        >>> renderer.add_inline_text("Hello, world!")
        >>> renderer.end_block()
        >>> renderer.into_string()
        'Hello, world!\\n'

    Attributes:
        width: Line width in cells (always >= 1).
        decorator: Inline decoration policy.
        block_markers: Whether markers (no-break, redaction bounds, images
                       and audio with a size) may be emitted. Off inside table
                       cells, whose lines are merged column by column.
    """

    def __init__(self, width: int, decorator: TextDecorator, *, block_markers: bool = True) -> None:
        self.width = max(width, 1)
        self.decorator = decorator
        self.block_markers = block_markers
        self.lines: list[RenderLine] = []
        self.at_block_end = False
        self.wrapping: WrappedBlock | None = None
        self.ann_stack: list[Annotation | None] = []

    @property
    def tags(self) -> tuple[Annotation, ...]:
        """The active annotations, outer first."""
        return tuple(tag for tag in self.ann_stack if tag is not None)

    @property
    def block_markers_allowed(self) -> bool:
        """Whether markers of any kind may be emitted."""
        return self.decorator.supports_markers and self.block_markers

    # =========================================================================
    # Blocks and Lines
    # =========================================================================

    def _flush_wrapping(self) -> None:
        if self.wrapping is not None:
            self.lines.extend(self.wrapping.into_lines())
            self.wrapping = None

    def _ensure_wrapping(self) -> WrappedBlock:
        if self.wrapping is None:
            self.wrapping = WrappedBlock(self.width)
        return self.wrapping

    def _has_content(self) -> bool:
        return any(
            isinstance(line, BorderHoriz) or not line.is_marker_only()
            for line in self.lines
        )

    def add_empty_line(self) -> None:
        self._flush_wrapping()
        self.lines.append(TaggedLine())

    def start_block(self) -> None:
        """Start a paragraph-like block, after a blank line if needed."""
        self._flush_wrapping()
        if self._has_content():
            self.add_empty_line()
        self.at_block_end = False

    def end_block(self) -> None:
        self.at_block_end = True

    def new_line(self) -> None:
        self._flush_wrapping()

    def add_inline_text(self, text: str) -> None:
        """Add text to the current paragraph, collapsing whitespace."""
        if self.at_block_end:
            if not text or text.isspace():
                return
            self.start_block()
        self._ensure_wrapping().add_text(text, self.tags)

    def add_preformatted_block(self, text: str, info: str = "") -> None:
        """Add text verbatim, one output line per source line."""
        self.start_block()
        annotation = self.decorator.decorate_preformat(info)
        self.ann_stack.append(annotation)
        tags = self.tags
        self.ann_stack.pop()

        source_lines = text.split("\n")
        if source_lines and source_lines[-1] == "":
            source_lines.pop()
        for source_line in source_lines:
            line = TaggedLine()
            line.push_str(source_line, tags)
            self.lines.append(line)
        self.end_block()

    def add_horizontal_border(self) -> None:
        self._flush_wrapping()
        self.lines.append(BorderHoriz(self.width))

    # =========================================================================
    # Inline Decoration
    # =========================================================================

    def start_link(self, url: str) -> None:
        text, annotation = self.decorator.decorate_link_start(url)
        self.ann_stack.append(annotation)
        self.add_inline_text(text)

    def end_link(self) -> None:
        self.add_inline_text(self.decorator.decorate_link_end())
        self.ann_stack.pop()

    def start_emphasis(self) -> None:
        text, annotation = self.decorator.decorate_em_start()
        self.ann_stack.append(annotation)
        self.add_inline_text(text)

    def end_emphasis(self) -> None:
        self.add_inline_text(self.decorator.decorate_em_end())
        self.ann_stack.pop()

    def start_strong(self) -> None:
        text, annotation = self.decorator.decorate_strong_start()
        self.ann_stack.append(annotation)
        self.add_inline_text(text)

    def end_strong(self) -> None:
        self.add_inline_text(self.decorator.decorate_strong_end())
        self.ann_stack.pop()

    def start_strikeout(self) -> None:
        text, annotation = self.decorator.decorate_strikeout_start()
        self.ann_stack.append(annotation)
        self.add_inline_text(text)

    def end_strikeout(self) -> None:
        self.add_inline_text(self.decorator.decorate_strikeout_end())
        self.ann_stack.pop()

    def start_code(self) -> None:
        text, annotation = self.decorator.decorate_code_start()
        self.ann_stack.append(annotation)
        self.add_inline_text(text)

    def end_code(self) -> None:
        self.add_inline_text(self.decorator.decorate_code_end())
        self.ann_stack.pop()

    def start_colour(self, r: int, g: int, b: int) -> None:
        self.ann_stack.append(self.decorator.decorate_colour(r, g, b))

    def end_colour(self) -> None:
        self.ann_stack.pop()

    def add_image(self, title: str, src: str = "", width: int = 0, height: int = 0) -> None:
        """
        Add an image.

        An image with a source and a size in cells becomes a marker line
        when block markers are allowed; otherwise its title is shown inline.
        """
        if self.block_markers_allowed and src and width > 0 and height > 0:
            self._add_marker_line(ann.Image(src, width, height))
            return
        text, annotation = self.decorator.decorate_image(title, src)
        self.ann_stack.append(annotation)
        self.add_inline_text(text)
        self.ann_stack.pop()

    # =========================================================================
    # Markers
    # =========================================================================

    def _add_marker_line(self, marker: Annotation) -> None:
        self._flush_wrapping()
        line = TaggedLine()
        line.push(TaggedString("", self.tags + (marker,)))
        self.lines.append(line)

    def _add_inline_marker(self, marker: Annotation) -> None:
        if self.at_block_end:
            self.start_block()
        self._ensure_wrapping().add_marker(self.tags + (marker,))

    def start_no_break(self) -> None:
        self._add_marker_line(ann.NoBreakBegin())

    def end_no_break(self) -> None:
        self._add_marker_line(ann.NoBreakEnd())

    def start_redacted(self, secret: str, redaction_id: str) -> None:
        self._add_inline_marker(ann.RedactedBegin(secret, redaction_id))

    def end_redacted(self, redaction_id: str) -> None:
        self._add_inline_marker(ann.RedactedEnd(redaction_id))

    def add_audio(self, src: str) -> None:
        self._add_marker_line(ann.Custom("audio", (src,)))

    # =========================================================================
    # Sub-renderers
    # =========================================================================

    def new_sub_renderer(self, width: int, *, block_markers: bool | None = None) -> "TextRenderer":
        """
        Create an independent renderer for a nested region.

        Args:
            width: Width of the region (clamped to at least 1).
            block_markers: Override marker-line support; inherited if None.
        """
        if block_markers is None:
            block_markers = self.block_markers
        return TextRenderer(
            width,
            self.decorator.make_subblock_decorator(),
            block_markers=block_markers,
        )

    def append_subrender(self, sub: "TextRenderer", prefixes: Iterable[str]) -> None:
        """
        Splice a sub-renderer's lines in, each prefixed with the next prefix.

        Stops when the prefixes run out. Marker-only lines are spliced
        without a prefix and do not use one up. Borders turn into text.
        """
        self._flush_wrapping()
        prefixes = iter(prefixes)
        tags = self.tags
        for line in sub.into_lines():
            if isinstance(line, TaggedLine) and line.is_marker_only():
                self.lines.append(line)
                continue
            prefix = next(prefixes, None)
            if prefix is None:
                break
            if isinstance(line, BorderHoriz):
                line = line.to_tagged_line()
            line.insert_front(TaggedString(prefix, tags))
            self.lines.append(line)

    def append_columns_with_borders(self, subs: list["TextRenderer"], collapse: bool = True) -> None:
        """
        Merge the renderers of one table row side by side.

        Cells are padded to their widths and joined with a vertical line.
        The previous line must be a border: it gains junctions above each
        separator, and a new border with matching junctions closes the row.
        With collapse, borders at the top or bottom of a cell (nested
        tables) are merged into the surrounding borders.
        """
        self._flush_wrapping()
        if not subs:
            return

        columns: list[tuple[int, list[RenderLine]]] = []
        for sub in subs:
            width = sub.width
            sublines = sub.into_lines()
            for line in sublines:
                if isinstance(line, TaggedLine):
                    line.pad_to(width)
                else:
                    line.stretch_to(width)
            columns.append((width, sublines))

        prev_border = self.lines[-1] if self.lines else None
        if not isinstance(prev_border, BorderHoriz):
            raise InvariantViolation("Expected a border line before table columns")

        next_border = BorderHoriz(self.width)
        pos = 0
        for width, _ in columns[:-1]:
            prev_border.join_below(pos + width)
            next_border.join_above(pos + width)
            pos += width + 1

        column_padding: list[str | None] = [None] * len(columns)
        if collapse:
            pos = 0
            for width, sublines in columns:
                if sublines and isinstance(sublines[0], BorderHoriz):
                    prev_border.merge_from_below(sublines.pop(0), pos)
                pos += width + 1

            pos = 0
            for index, (width, sublines) in enumerate(columns):
                if sublines and isinstance(sublines[-1], BorderHoriz):
                    bottom = sublines.pop()
                    next_border.merge_from_above(bottom, pos)
                    column_padding[index] = bottom.to_vertical_lines_above()
                pos += width + 1

        tags = self.tags
        height = max(len(sublines) for _, sublines in columns)
        last = len(columns) - 1
        for row in range(height):
            line = TaggedLine()
            for index, (width, sublines) in enumerate(columns):
                if row < len(sublines):
                    piece = sublines[row]
                    if isinstance(piece, BorderHoriz):
                        line.push_str(str(piece), tags)
                    else:
                        line.consume(piece)
                else:
                    line.push_str(column_padding[index] or " " * width, tags)
                if index != last:
                    line.push_char(VERTICAL_BORDER, tags)
            self.lines.append(line)
        self.lines.append(next_border)

    # =========================================================================
    # Output
    # =========================================================================

    def is_empty(self) -> bool:
        return not self.lines and (self.wrapping is None or self.wrapping.is_empty())

    def into_lines(self) -> list[RenderLine]:
        """
        Finish rendering and return the lines.

        The decorator's trailer (link footnotes) is added as its own block,
        hard-wrapped to the width.
        """
        self._flush_wrapping()
        trailer = self.decorator.finalise()
        if trailer:
            self.start_block()
            for text in trailer:
                self.lines.extend(hard_wrap(text, self.width))
        return self.lines

    def into_tagged_lines(self) -> list[TaggedLine]:
        """Finish rendering, turning borders into plain text lines."""
        return [
            line.to_tagged_line() if isinstance(line, BorderHoriz) else line
            for line in self.into_lines()
        ]

    def into_string(self) -> str:
        return "".join(f"{line}\n" for line in self.into_lines())


def hard_wrap(text: str, width: int) -> list[TaggedLine]:
    """Cut text into lines of at most width cells, ignoring word boundaries."""
    lines = []
    chunk = ""
    used = 0
    for char in text:
        if is_control_char(char):
            continue
        char_cells = char_width(char)
        if used + char_cells > width and chunk:
            lines.append(TaggedLine([TaggedString(chunk)]))
            chunk, used = "", 0
        chunk += char
        used += char_cells
    if chunk:
        lines.append(TaggedLine([TaggedString(chunk)]))
    return lines


def prefix_sequence(first: str, rest: str) -> Iterator[str]:
    """The prefixes for a list item: first, then rest forever."""
    yield first
    yield from repeat(rest)
