# =============================================================================
# Span Styling
# =============================================================================
# A Styler turns a span's text plus its active annotations into the text
# that goes into the control stream. Two implementations:
#
#   - MappedStyler: wraps a caller-supplied function mapping one annotation
#     to (prefix, transform, suffix); prefixes and suffixes concatenate in
#     annotation order and transforms chain
#   - AnsiStyler:   terminal styling through rich, driven by StyleConfig
#                   (links also become OSC 8 hyperlinks when enabled)
# =============================================================================

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable

from rich.color import Color, ColorSystem
from rich.errors import StyleSyntaxError
from rich.style import Style

from htmlterm.core import annotations as ann
from htmlterm.core.annotations import Annotation

if TYPE_CHECKING:
    from htmlterm.config import StyleConfig

StyleTriple = tuple[str, Callable[[str], str], str]
StyleMapping = Callable[[Annotation], StyleTriple]

COLOR_SYSTEMS = {
    "standard": ColorSystem.STANDARD,
    "256": ColorSystem.EIGHT_BIT,
    "truecolor": ColorSystem.TRUECOLOR,
}


def _identity(text: str) -> str:
    return text


def plain_mapping(annotation: Annotation) -> StyleTriple:
    """A mapping that leaves every span untouched."""
    return "", _identity, ""


class Styler(ABC):
    """Renders the text of one span given its full annotation set."""

    @abstractmethod
    def render(self, text: str, annotations: tuple[Annotation, ...]) -> str:
        """
        Style a span.

        Args:
            text: The span's text.
            annotations: Active annotations, outer first. Markers and
                         unknown custom annotations are already removed.

        Returns:
            The styled text.
        """


class MappedStyler(Styler):
    """
    Styler built from a per-annotation mapping function.

    Usage:
        >>> styler = MappedStyler(lambda a: ("<", str.upper, ">"))
        >>> styler.render("hi", (Emphasis(), Code()))
        '<<HI>>'
    """

    def __init__(self, mapping: StyleMapping) -> None:
        self.mapping = mapping

    def render(self, text: str, annotations: tuple[Annotation, ...]) -> str:
        prefix = ""
        suffix = ""
        for annotation in annotations:
            before, transform, after = self.mapping(annotation)
            prefix += before
            text = transform(text)
            suffix += after
        return f"{prefix}{text}{suffix}"


class AnsiStyler(Styler):
    """
    Terminal styling with rich.

    The styles of all annotations on a span are combined into one rich
    Style (inner annotations win on conflicts) and rendered as ANSI escape
    sequences.

    Attributes:
        styles: Style strings per annotation kind.
        color_system: rich colour system used for output.
    """

    def __init__(self, styles: "StyleConfig", color_system: str | None = None) -> None:
        """
        Initialize the styler.

        Args:
            styles: Style configuration.
            color_system: One of "standard", "256" or "truecolor".
                          Defaults to styles.color_system.

        Raises:
            ConfigError: If a style string or the colour system is invalid.
        """
        from htmlterm.config import ConfigError

        color_system = color_system or styles.color_system
        if color_system not in COLOR_SYSTEMS:
            raise ConfigError(f"Unknown colour system: {color_system}")
        self.styles = styles
        self.color_system = COLOR_SYSTEMS[color_system]

        try:
            self._by_kind: dict[type, Style] = {
                ann.Link: Style.parse(styles.link),
                ann.Image: Style.parse(styles.image),
                ann.Emphasis: Style.parse(styles.emphasis),
                ann.Strong: Style.parse(styles.strong),
                ann.Strikeout: Style.parse(styles.strikeout),
                ann.Code: Style.parse(styles.code),
                ann.Preformat: Style.parse(styles.preformat),
            }
        except StyleSyntaxError as e:
            raise ConfigError(f"Invalid style: {e}") from e

    def style_for(self, annotation: Annotation) -> Style | None:
        """The rich Style for one annotation, or None if it has none."""
        if isinstance(annotation, ann.Colored):
            return Style(color=Color.from_rgb(annotation.r, annotation.g, annotation.b))
        style = self._by_kind.get(type(annotation))
        if isinstance(annotation, ann.Link) and self.styles.hyperlinks:
            style = (style or Style()) + Style(link=annotation.url)
        return style

    def render(self, text: str, annotations: tuple[Annotation, ...]) -> str:
        styles = [style for style in map(self.style_for, annotations) if style]
        if not styles or not text:
            return text
        return Style.combine(styles).render(text, color_system=self.color_system)


def coerce_styler(styler: Styler | StyleMapping) -> Styler:
    """Accept either a Styler or a bare mapping function."""
    if isinstance(styler, Styler):
        return styler
    if callable(styler):
        return MappedStyler(styler)
    raise TypeError(f"Expected a Styler or a mapping function, got {type(styler).__name__}")
