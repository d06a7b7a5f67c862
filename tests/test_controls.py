# =============================================================================
# Control Pipeline Tests
# =============================================================================

import logging

import pytest

from htmlterm.config import ConfigError, StyleConfig
from htmlterm.core import annotations as ann
from htmlterm.core.controls import (
    Audio,
    Bell,
    Image,
    LineFeed,
    NoBreakBegin,
    NoBreakEnd,
    Str,
    StrRedacted,
)
from htmlterm.exceptions import InvariantViolation
from htmlterm.rendering.controls import annotate
from htmlterm.rendering.engine import render_annotated
from htmlterm.rendering.styles import AnsiStyler, MappedStyler, coerce_styler, plain_mapping
from htmlterm.rendering.text import TaggedLine, TaggedString


def line(*spans):
    """Build a TaggedLine from (text, tags) pairs."""
    return TaggedLine([TaggedString(text, tags) for text, tags in spans])


class TestRenderAnnotated:
    """Documents through the whole pipeline."""

    def test_styled_spans(self, tag_styler):
        ops = render_annotated(b"<p>Hello <em>world</em></p>", 80, tag_styler)
        assert ops == [Str("Hello "), Str("<em>world</em>"), LineFeed()]

    def test_nested_annotations(self, tag_styler):
        ops = render_annotated(b'<p><a href="u"><em>x</em></a></p>', 80, tag_styler)
        assert ops == [Str("<link><em>x</link></em>"), LineFeed()]

    def test_accepts_a_mapping_function(self):
        ops = render_annotated(b"<p>a</p><p>b</p>", 80, plain_mapping)
        assert ops == [Str("a"), LineFeed(), LineFeed(), Str("b"), LineFeed()]

    def test_redaction(self, plain_styler):
        html = b'<p>a <span data-redacted="pin" id="r1">secret</span> b</p>'
        ops = render_annotated(html, 80, plain_styler)
        assert ops == [Str("a "), StrRedacted("secret", "r1"), Str(" b"), LineFeed()]

    def test_no_break(self, plain_styler):
        html = b'<div style="break-inside: avoid"><p>one</p><p>two</p></div><p>three</p>'
        ops = render_annotated(html, 80, plain_styler)
        assert ops == [
            NoBreakBegin(),
            Str("one"), LineFeed(),
            LineFeed(),
            Str("two"), LineFeed(),
            NoBreakEnd(),
            LineFeed(),
            Str("three"), LineFeed(),
        ]

    def test_image(self, plain_styler):
        html = b'<p>See <img src="pic.png" alt="pic" width="160" height="64"></p>'
        ops = render_annotated(html, 80, plain_styler)
        assert ops == [Str("See"), LineFeed(), Image("pic.png", 20, 4)]

    def test_redacted_cells_side_by_side(self, plain_styler):
        html = (
            b'<table><tr>'
            b'<td><span data-redacted="s" id="a">aaaa bbbb cccc</span></td>'
            b'<td><span data-redacted="s" id="b">dddd eeee ffff gggg hhhh</span></td>'
            b'</tr></table>'
        )
        ops = render_annotated(html, 20, plain_styler)
        assert not any(isinstance(op, StrRedacted) for op in ops)
        text = "".join(op.text for op in ops if isinstance(op, Str))
        assert "aaaa" in text
        assert "hhhh" in text

    def test_redacted_cell_does_not_leak_into_its_neighbour(self, plain_styler):
        html = (
            b'<table><tr>'
            b'<td><span data-redacted="s" id="a">one two</span></td><td>plain</td>'
            b'</tr></table>'
        )
        ops = render_annotated(html, 20, plain_styler)
        assert not any(isinstance(op, StrRedacted) for op in ops)
        assert any(isinstance(op, Str) and "plain" in op.text for op in ops)

    def test_audio(self, plain_styler):
        ops = render_annotated(b'<audio src="clip.ogg">fallback</audio>', 80, plain_styler)
        assert ops == [Audio("clip.ogg")]

    def test_tree_input(self, sample_tree, plain_styler):
        ops = render_annotated(sample_tree, 40, plain_styler)
        text = "".join(op.text if isinstance(op, Str) else "\n" for op in ops)
        assert "Release notes" in text
        assert "[1]" not in text


class TestPipeline:
    """annotate() on hand-built lines."""

    def test_every_text_line_ends_with_a_line_feed(self, plain_styler):
        ops = annotate([line(("a", ())), TaggedLine(), line(("b", ()))], plain_styler)
        assert ops == [Str("a"), LineFeed(), LineFeed(), Str("b"), LineFeed()]

    def test_marker_only_lines_have_no_line_feed(self, plain_styler):
        ops = annotate([
            line(("", (ann.NoBreakBegin(),))),
            line(("a", ())),
            line(("", (ann.NoBreakEnd(),))),
        ], plain_styler)
        assert ops == [NoBreakBegin(), Str("a"), LineFeed(), NoBreakEnd()]

    def test_bell(self, plain_styler):
        ops = annotate([line(("ding", (ann.Bell(),)))], plain_styler)
        assert ops == [Bell("ding"), LineFeed()]

    def test_unknown_custom_annotation_is_ignored(self, tag_styler, caplog):
        log = logging.getLogger("tests.pipeline")
        caplog.set_level(logging.DEBUG, logger="tests.pipeline")
        ops = annotate([line(("hi", (ann.Custom("blink"), ann.Code())))], tag_styler, log)
        assert ops == [Str("<code>hi</code>"), LineFeed()]
        assert any("blink" in record.getMessage() for record in caplog.records)

    def test_nested_redactions_report_the_innermost(self, plain_styler):
        ops = annotate([line(
            ("", (ann.RedactedBegin("s", "outer"),)),
            ("a", ()),
            ("", (ann.RedactedBegin("s", "inner"),)),
            ("b", ()),
            ("", (ann.RedactedEnd("inner"),)),
            ("", (ann.RedactedEnd("outer"),)),
        )], plain_styler)
        assert ops == [StrRedacted("a", "outer"), StrRedacted("b", "inner"), LineFeed()]

    def test_marker_span_with_text(self, plain_styler):
        with pytest.raises(InvariantViolation):
            annotate([line(("x", (ann.NoBreakBegin(),)))], plain_styler)

    def test_overlapping_redactions(self, plain_styler):
        with pytest.raises(InvariantViolation):
            annotate([line(
                ("", (ann.RedactedBegin("s", "a"),)),
                ("", (ann.RedactedBegin("s", "b"),)),
                ("", (ann.RedactedEnd("a"),)),
            )], plain_styler)

    def test_unterminated_redaction(self, plain_styler):
        with pytest.raises(InvariantViolation):
            annotate([line(("", (ann.RedactedBegin("s", "a"),)), ("x", ()))], plain_styler)

    def test_nested_no_break(self, plain_styler):
        with pytest.raises(InvariantViolation):
            annotate([
                line(("", (ann.NoBreakBegin(),))),
                line(("", (ann.NoBreakBegin(),))),
            ], plain_styler)

    def test_mismatched_no_break_end(self, plain_styler):
        with pytest.raises(InvariantViolation):
            annotate([line(("", (ann.NoBreakEnd(),)))], plain_styler)

    def test_unterminated_no_break(self, plain_styler):
        with pytest.raises(InvariantViolation):
            annotate([line(("", (ann.NoBreakBegin(),))), line(("a", ()))], plain_styler)


class TestMappedStyler:
    """Prefix, transform and suffix composition."""

    def test_order(self, tag_styler):
        assert tag_styler.render("x", (ann.Link("u"), ann.Emphasis())) == "<link><em>x</link></em>"

    def test_transforms_chain(self):
        styler = MappedStyler(lambda a: ("<", str.upper, ">"))
        assert styler.render("hi", (ann.Emphasis(), ann.Code())) == "<<HI>>"

    def test_no_annotations(self, tag_styler):
        assert tag_styler.render("x", ()) == "x"

    def test_coerce(self, plain_styler):
        assert coerce_styler(plain_styler) is plain_styler
        assert isinstance(coerce_styler(plain_mapping), MappedStyler)
        with pytest.raises(TypeError):
            coerce_styler("bold")


class TestAnsiStyler:
    """rich-based terminal styling."""

    def test_emphasis_is_bold(self):
        styler = AnsiStyler(StyleConfig())
        assert styler.render("x", (ann.Emphasis(),)) == "\x1b[1mx\x1b[0m"

    def test_unstyled_text_is_unchanged(self):
        styler = AnsiStyler(StyleConfig())
        assert styler.render("x", ()) == "x"
        assert styler.render("x", (ann.Bell(),)) == "x"

    def test_colour(self):
        styler = AnsiStyler(StyleConfig())
        assert "38;2;255;0;0" in styler.render("x", (ann.Colored(255, 0, 0),))

    def test_hyperlinks(self):
        on = AnsiStyler(StyleConfig(hyperlinks=True)).render("x", (ann.Link("http://x/"),))
        off = AnsiStyler(StyleConfig(hyperlinks=False)).render("x", (ann.Link("http://x/"),))
        assert "\x1b]8;" in on
        assert "http://x/" in on
        assert off == "\x1b[4mx\x1b[0m"

    def test_invalid_style(self):
        with pytest.raises(ConfigError):
            AnsiStyler(StyleConfig(emphasis="bold notacolour"))

    def test_unknown_colour_system(self):
        with pytest.raises(ConfigError):
            AnsiStyler(StyleConfig(), color_system="16m")
