# =============================================================================
# Page Block Tests
# =============================================================================

import pytest

from htmlterm.core.controls import (
    Audio,
    Control,
    Image,
    LineFeed,
    NoBreakBegin,
    NoBreakEnd,
    PageBlock,
    Str,
    StrRedacted,
)
from htmlterm.exceptions import InvariantViolation
from htmlterm.rendering.engine import render_annotated
from htmlterm.rendering.pages import PageBlockBuilder, build_page_blocks


class TestPageBlocks:
    """Grouping controls into blocks."""

    def test_each_line_is_a_block(self):
        blocks = build_page_blocks([Str("a"), LineFeed(), Str("b"), StrRedacted("c", "r"), LineFeed()])
        assert blocks == [
            PageBlock([Str("a"), LineFeed()], 1),
            PageBlock([Str("b"), StrRedacted("c", "r"), LineFeed()], 1),
        ]

    def test_trailing_text_without_line_feed(self):
        blocks = build_page_blocks([Str("a")])
        assert blocks == [PageBlock([Str("a")], 0)]

    def test_no_break_section_is_one_block(self):
        ops = [
            Str("x"), LineFeed(),
            NoBreakBegin(), Str("a"), LineFeed(), Str("b"), LineFeed(), NoBreakEnd(),
            Str("y"), LineFeed(),
        ]
        blocks = build_page_blocks(ops)
        assert [block.height for block in blocks] == [1, 2, 1]
        assert blocks[1].ops[0] == NoBreakBegin()
        assert blocks[1].ops[-1] == NoBreakEnd()

    def test_no_break_flushes_pending_text(self):
        blocks = build_page_blocks([Str("a"), NoBreakBegin(), Str("b"), LineFeed(), NoBreakEnd()])
        assert blocks == [
            PageBlock([Str("a")], 0),
            PageBlock([NoBreakBegin(), Str("b"), LineFeed(), NoBreakEnd()], 1),
        ]

    def test_image_is_its_own_block(self):
        blocks = build_page_blocks([Str("a"), LineFeed(), Image("p.png", 10, 4), Audio("a.ogg")])
        assert blocks == [
            PageBlock([Str("a"), LineFeed()], 1),
            PageBlock([Image("p.png", 10, 4)], 4),
            PageBlock([Audio("a.ogg")], 0),
        ]

    def test_image_inside_no_break_adds_height(self):
        blocks = build_page_blocks([
            NoBreakBegin(), Str("a"), LineFeed(), Image("p.png", 10, 4), NoBreakEnd(),
        ])
        assert len(blocks) == 1
        assert blocks[0].height == 5

    def test_empty_stream(self):
        assert build_page_blocks([]) == []

    def test_from_a_document(self, plain_styler):
        html = b'<div style="break-inside: avoid"><p>one</p><p>two</p></div><p>three</p>'
        blocks = build_page_blocks(render_annotated(html, 80, plain_styler))
        assert [block.height for block in blocks] == [3, 1, 1]
        for block in blocks:
            begins = block.ops.count(NoBreakBegin())
            assert begins == block.ops.count(NoBreakEnd())


class TestBrokenStreams:
    """Invalid no-break structure."""

    def test_nested_begin(self):
        builder = PageBlockBuilder()
        builder.push(NoBreakBegin())
        with pytest.raises(InvariantViolation):
            builder.push(NoBreakBegin())

    def test_end_without_begin(self):
        with pytest.raises(InvariantViolation):
            build_page_blocks([NoBreakEnd()])

    def test_unterminated(self):
        with pytest.raises(InvariantViolation):
            build_page_blocks([NoBreakBegin(), Str("a"), LineFeed()])

    def test_unexpected_control(self):
        with pytest.raises(InvariantViolation):
            build_page_blocks([Control()])
