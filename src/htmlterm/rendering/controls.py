# =============================================================================
# Annotated Control Pipeline
# =============================================================================
# Turns rich layout output (lines of annotated spans) into a flat stream of
# Controls.
#
# Each span is either:
#   - a marker (empty text, carries a structural annotation):
#       NoBreakBegin/End       -> NoBreakBegin/End control
#       RedactedBegin/End      -> push/pop the redaction id, no control
#       Image with an area     -> Image control
#       Custom("audio", (src,))-> Audio control
#   - text: styled by the Styler, then emitted as Str, as StrRedacted when
#     inside a redacted region, or as Bell when it carries a Bell annotation
#
# Every line ends with a LineFeed, except lines made only of markers.
#
# Broken nesting (overlapping redactions, nested no-break sections) and
# marker spans with text are contract violations and raise
# InvariantViolation.
# =============================================================================

import logging
from dataclasses import dataclass, field
from typing import Iterable

from htmlterm.core import annotations as ann
from htmlterm.core import controls
from htmlterm.core.annotations import Annotation
from htmlterm.exceptions import InvariantViolation
from htmlterm.rendering.styles import Styler
from htmlterm.rendering.text import TaggedLine, TaggedString

logger = logging.getLogger(__name__)


@dataclass
class PipelineState:
    """
    Mutable state of one pipeline run.

    Attributes:
        redactions: Stack of open redaction ids, innermost last.
        in_no_break: Whether a no-break section is open.
        marker_only: Whether the current line has held only markers so far.
    """
    redactions: list[str] = field(default_factory=list)
    in_no_break: bool = False
    marker_only: bool = True


class ControlPipeline:
    """
    Converts annotated lines into Controls.

    Usage:
        >>> pipeline = ControlPipeline(MappedStyler(plain_mapping))
        >>> ops = pipeline.run(render_rich(html, 80))

    Attributes:
        styler: Styles the text of non-marker spans.
        log: Diagnostic sink.
    """

    def __init__(self, styler: Styler, diagnostics: logging.Logger | None = None) -> None:
        self.styler = styler
        self.log = diagnostics or logger

    def run(self, lines: Iterable[TaggedLine]) -> list[controls.Control]:
        """
        Process a whole document.

        Raises:
            InvariantViolation: On broken marker nesting, a marker span
                                with text, or a region left open at the end.
        """
        state = PipelineState()
        out: list[controls.Control] = []
        for line in lines:
            self.process_line(line, state, out)

        if state.redactions:
            raise InvariantViolation("Unterminated redaction region", state.redactions[-1])
        if state.in_no_break:
            raise InvariantViolation("Unterminated no-break section")
        return out

    def process_line(self, line: TaggedLine, state: PipelineState, out: list[controls.Control]) -> None:
        state.marker_only = bool(line.spans)
        for span in line:
            markers = [tag for tag in span.tags if ann.is_marker(tag)]
            if markers:
                if span.text:
                    raise InvariantViolation("Marker span carries text", repr(span.text))
                for marker in markers:
                    self._apply_marker(marker, state, out)
            else:
                state.marker_only = False
                self._emit_text(span, state, out)

        if not state.marker_only:
            out.append(controls.LineFeed())

    def _apply_marker(self, marker: Annotation, state: PipelineState, out: list[controls.Control]) -> None:
        if isinstance(marker, ann.NoBreakBegin):
            if state.in_no_break:
                raise InvariantViolation("no-break sections cannot nest")
            state.in_no_break = True
            out.append(controls.NoBreakBegin())

        elif isinstance(marker, ann.NoBreakEnd):
            if not state.in_no_break:
                raise InvariantViolation("mismatched no-break end")
            state.in_no_break = False
            out.append(controls.NoBreakEnd())

        elif isinstance(marker, ann.RedactedBegin):
            state.redactions.append(marker.redaction_id)

        elif isinstance(marker, ann.RedactedEnd):
            if not state.redactions or state.redactions[-1] != marker.redaction_id:
                raise InvariantViolation("redaction regions must not nest", marker.redaction_id)
            state.redactions.pop()

        elif isinstance(marker, ann.Image):
            out.append(controls.Image(marker.src, marker.width, marker.height))

        elif isinstance(marker, ann.Custom):
            src = marker.values[0] if marker.values else ""
            out.append(controls.Audio(src))

    def _emit_text(self, span: TaggedString, state: PipelineState, out: list[controls.Control]) -> None:
        if not span.text:
            return

        tags = []
        for tag in span.tags:
            if isinstance(tag, ann.Custom):
                self.log.debug(f"Ignoring unknown custom annotation {tag.tag!r}")
            else:
                tags.append(tag)

        text = self.styler.render(span.text, tuple(tags))
        if any(isinstance(tag, ann.Bell) for tag in tags):
            out.append(controls.Bell(text))
        elif state.redactions:
            out.append(controls.StrRedacted(text, state.redactions[-1]))
        else:
            out.append(controls.Str(text))


def annotate(lines: Iterable[TaggedLine], styler: Styler,
             diagnostics: logging.Logger | None = None) -> list[controls.Control]:
    """Run the control pipeline over rich layout output."""
    return ControlPipeline(styler, diagnostics).run(lines)
