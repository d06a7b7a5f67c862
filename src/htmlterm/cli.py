# =============================================================================
# Command Line Interface
# =============================================================================
# htmlterm [infile] [-w WIDTH] [-h HEIGHT] [-o OUTPUT] [-L] [--colour]
#
# Reads HTML from a file or standard input and writes it as wrapped text.
# With --colour, the annotated control stream is written with ANSI styling
# by the TerminalWriter.
#
# Settings come from the config file, then command-line flags. -h is the
# height (as in most pagers), so help is --help only.
# =============================================================================

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, TextIO

from rich.console import Console
from rich.logging import RichHandler

from htmlterm import __app_name__, __version__
from htmlterm.config import Config, ConfigError, print_paths
from htmlterm.core import controls
from htmlterm.core.controls import Control
from htmlterm.exceptions import HtmlTermError
from htmlterm.rendering.engine import RenderEngine, RenderResult

logger = logging.getLogger(__name__)


# =============================================================================
# Terminal Output
# =============================================================================

class TerminalWriter:
    """
    Writes a control stream to a text stream.

    Media cannot be shown inline, so images and audio are written as a
    one-line placeholder. No-break markers only matter to a pager and
    write nothing.

    Usage:
        >>> TerminalWriter(sys.stdout).write_all(result.controls)
    """

    def __init__(self, stream: TextIO) -> None:
        self.stream = stream

    def write(self, op: Control) -> None:
        if isinstance(op, (controls.Str, controls.StrRedacted)):
            self.stream.write(op.text)
        elif isinstance(op, controls.LineFeed):
            self.stream.write("\n")
        elif isinstance(op, controls.Bell):
            self.stream.write(f"{op.text}\a")
        elif isinstance(op, controls.Image):
            self.stream.write(f"[image: {op.src}]\n")
        elif isinstance(op, controls.Audio):
            self.stream.write(f"[audio: {op.src}]\n")

    def write_all(self, ops: Iterable[Control]) -> None:
        for op in ops:
            self.write(op)


def write_result(result: RenderResult, stream: TextIO) -> None:
    """Write a render result: its text, or its control stream in colour mode."""
    if result.controls:
        TerminalWriter(stream).write_all(result.controls)
    else:
        stream.write(result.text)


# =============================================================================
# CLI Entry Point
# =============================================================================

def setup_logging(debug: bool = False) -> None:
    """Send log records to stderr through rich."""
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=debug,
        rich_tracebacks=True,
    )
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        prog=__app_name__,
        description="Render HTML as text wrapped for the terminal",
        add_help=False,
    )

    parser.add_argument(
        "infile",
        nargs="?",
        type=Path,
        help="Input HTML file (default is standard input)",
    )

    parser.add_argument(
        "-w", "--width",
        type=int,
        help="Column width to format to (default is 80)",
    )

    parser.add_argument(
        "-h", "--height",
        type=int,
        help="Terminal height to format to (default is 40)",
    )

    parser.add_argument(
        "-o", "--output",
        type=Path,
        help="Output file (default is standard output)",
    )

    parser.add_argument(
        "-L", "--literal",
        action="store_true",
        default=None,
        help="Output only literal text (no decorations)",
    )

    parser.add_argument(
        "--colour",
        action="store_true",
        default=None,
        help="Use ANSI terminal colours",
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config file (default: XDG config location)",
    )

    parser.add_argument(
        "--write-config",
        action="store_true",
        help="Write the effective settings to the config file and exit",
    )

    parser.add_argument(
        "--paths",
        action="store_true",
        help="Print configuration paths and exit",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode (verbose logging)",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--help",
        action="help",
        help="Show this help message and exit",
    )

    return parser.parse_args(argv)


def apply_overrides(config: Config, args: argparse.Namespace) -> None:
    """Let command-line flags override the loaded configuration."""
    rendering = config.rendering
    if args.width is not None:
        rendering.width = args.width
    if args.height is not None:
        rendering.height = args.height
    if args.literal is not None:
        rendering.literal = args.literal
    if args.colour is not None:
        rendering.colour = args.colour


def fail(message: str) -> int:
    print(f"{__app_name__}: {message}", file=sys.stderr)
    return 1


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for htmlterm.

    This function:
        1. Parses command-line arguments
        2. Handles special commands (--paths, --write-config)
        3. Loads configuration and applies flag overrides
        4. Renders the input and writes the output

    Returns:
        Exit code (0 for success, 1 for errors).
    """
    args = parse_args(argv)
    setup_logging(args.debug)

    # Handle --paths flag
    if args.paths:
        print_paths()
        return 0

    try:
        config = Config.load(args.config)
    except ConfigError as e:
        return fail(str(e))
    apply_overrides(config, args)

    if args.write_config:
        try:
            path = config.save(args.config)
        except OSError as e:
            return fail(f"Cannot write config file: {e}")
        print(f"Wrote {path}")
        return 0

    logger.debug(f"Terminal height {config.rendering.height} (not used for layout)")

    try:
        if args.infile:
            data = args.infile.read_bytes()
        else:
            data = sys.stdin.buffer.read()
    except OSError as e:
        return fail(f"Cannot read input: {e}")

    try:
        engine = RenderEngine(config.rendering, config.styles)
        result = engine.render(data)
    except HtmlTermError as e:
        return fail(str(e))

    try:
        if args.output:
            with open(args.output, "w", encoding="utf-8") as f:
                write_result(result, f)
        else:
            write_result(result, sys.stdout)
    except OSError as e:
        return fail(f"Cannot write output: {e}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
