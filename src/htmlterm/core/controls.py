# =============================================================================
# Control Stream
# =============================================================================
# The annotated pipeline turns rich layout output into a flat stream of
# Controls: styled text runs, line feeds, media and no-break markers. A
# terminal writer or a paginator consumes the stream; the page block
# builder groups it into height-accounted PageBlocks.
# =============================================================================

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Control:
    """Base class of all output controls."""


@dataclass(frozen=True)
class Str(Control):
    text: str


@dataclass(frozen=True)
class StrRedacted(Control):
    """Text inside a redacted region, tagged with the region's id."""
    text: str
    redaction_id: str


@dataclass(frozen=True)
class LineFeed(Control):
    pass


@dataclass(frozen=True)
class Image(Control):
    """An image occupying width x height terminal cells."""
    src: str
    width: int
    height: int


@dataclass(frozen=True)
class Audio(Control):
    src: str


@dataclass(frozen=True)
class Bell(Control):
    text: str


@dataclass(frozen=True)
class NoBreakBegin(Control):
    pass


@dataclass(frozen=True)
class NoBreakEnd(Control):
    pass


@dataclass
class PageBlock:
    """
    A run of controls a paginator must keep together.

    Attributes:
        ops: The controls, in output order.
        height: Number of terminal rows the block occupies.
    """
    ops: list[Control] = field(default_factory=list)
    height: int = 0

    def __bool__(self) -> bool:
        return bool(self.ops)
