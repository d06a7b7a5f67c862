# =============================================================================
# Span Annotations
# =============================================================================
# Rich layout tags every emitted text span with the annotations active at
# that point, outermost first. Most annotations describe style (links,
# emphasis, colours); a few are zero-width structural markers carried by
# spans with empty text:
#   - NoBreakBegin / NoBreakEnd:      page-unbreakable regions
#   - RedactedBegin / RedactedEnd:    redacted regions
#   - Image with a positive area:     an inline graphic of known size
#   - Custom("audio", (src,)):        an audio clip
# =============================================================================

from dataclasses import dataclass


@dataclass(frozen=True)
class Annotation:
    """Base class of all span annotations."""


@dataclass(frozen=True)
class Default(Annotation):
    """No particular annotation."""


@dataclass(frozen=True)
class Link(Annotation):
    url: str


@dataclass(frozen=True)
class Image(Annotation):
    """An image; width/height are in terminal cells (0 when unknown)."""
    src: str = ""
    width: int = 0
    height: int = 0

    @property
    def has_area(self) -> bool:
        return self.width > 0 and self.height > 0


@dataclass(frozen=True)
class Emphasis(Annotation):
    pass


@dataclass(frozen=True)
class Strong(Annotation):
    pass


@dataclass(frozen=True)
class Strikeout(Annotation):
    pass


@dataclass(frozen=True)
class Code(Annotation):
    pass


@dataclass(frozen=True)
class Preformat(Annotation):
    """Preformatted text; info is the language hint ("" if none)."""
    info: str = ""


@dataclass(frozen=True)
class Colored(Annotation):
    r: int
    g: int
    b: int


@dataclass(frozen=True)
class Bell(Annotation):
    pass


@dataclass(frozen=True)
class NoBreakBegin(Annotation):
    pass


@dataclass(frozen=True)
class NoBreakEnd(Annotation):
    pass


@dataclass(frozen=True)
class RedactedBegin(Annotation):
    secret: str
    redaction_id: str


@dataclass(frozen=True)
class RedactedEnd(Annotation):
    redaction_id: str


@dataclass(frozen=True)
class Custom(Annotation):
    """An application-defined annotation, e.g. Custom("audio", (src,))."""
    tag: str
    values: tuple[str, ...] = ()


def is_marker(annotation: Annotation) -> bool:
    """
    True if the annotation is a zero-width structural marker.

    Spans carrying a marker must have empty text.
    """
    if isinstance(annotation, (NoBreakBegin, NoBreakEnd, RedactedBegin, RedactedEnd)):
        return True
    if isinstance(annotation, Image):
        return annotation.has_area
    if isinstance(annotation, Custom):
        return annotation.tag == "audio"
    return False
