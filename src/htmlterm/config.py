# =============================================================================
# Configuration Management
# =============================================================================
# Handles loading and saving htmlterm configuration.
#
# XDG Base Directory Compliance (https://specifications.freedesktop.org/basedir-spec/):
#   - Config:  $XDG_CONFIG_HOME/htmlterm/  (default: ~/.config/htmlterm/)
#
# Files:
#   - config.toml: Rendering defaults and terminal styles
#
# Command-line flags always override values from the file.
# =============================================================================

import os
import tomllib  # Built into Python 3.11+
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import tomli_w  # For writing TOML (tomllib is read-only)

from htmlterm.exceptions import HtmlTermError


# =============================================================================
# XDG Directory Management
# =============================================================================

# Application identifier used in all XDG paths
APP_NAME = "htmlterm"


def get_xdg_config_home() -> Path:
    """
    Returns the XDG config directory for htmlterm.

    Respects $XDG_CONFIG_HOME if set, otherwise uses ~/.config/htmlterm/
    """
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        base = Path(xdg_config)
    else:
        base = Path.home() / ".config"
    return base / APP_NAME


# =============================================================================
# Configuration Data Structures
# =============================================================================

@dataclass
class RenderingConfig:
    """
    Configuration for rendering.

    Attributes:
        width: Column width to wrap to.
        height: Terminal height. Only carried for a pager; layout ignores it.
        literal: Output only literal text (no link/emphasis decoration).
        colour: Use the annotated pipeline with ANSI terminal styling.
        max_image_width: Maximum width for images (in terminal cells).
        max_image_height: Maximum height for images (in terminal rows).
        cell_width: Pixel width of one terminal cell, for image sizing.
        cell_height: Pixel height of one terminal cell, for image sizing.
    """
    width: int = 80
    height: int = 40
    literal: bool = False
    colour: bool = False
    max_image_width: int = 80           # Max image width in terminal columns
    max_image_height: int = 40          # Max image height in terminal rows
    cell_width: int = 8
    cell_height: int = 16


@dataclass
class StyleConfig:
    """
    Terminal styles for the --colour output, as rich style strings
    (e.g. "bold", "blue", "underline bright_white").

    Attributes:
        link: Style of link text.
        image: Style of image titles.
        emphasis: Style of <em> text.
        strong: Style of <strong>/<b> text.
        strikeout: Style of <s>/<del> text.
        code: Style of inline code.
        preformat: Style of <pre> blocks.
        hyperlinks: Also emit OSC 8 terminal hyperlinks for links.
        color_system: "standard", "256" or "truecolor".
    """
    link: str = "underline"
    image: str = "blue"
    emphasis: str = "bold"
    strong: str = "bright_yellow"
    strikeout: str = "bright_black"
    code: str = "blue"
    preformat: str = "blue"
    hyperlinks: bool = True
    color_system: str = "truecolor"


@dataclass
class Config:
    """
    Main configuration container for htmlterm.

    Attributes:
        rendering: Rendering configuration.
        styles: Terminal style configuration.

    Usage:
        >>> config = Config.load()
        >>> config.rendering.width
        80
    """
    rendering: RenderingConfig = field(default_factory=RenderingConfig)
    styles: StyleConfig = field(default_factory=StyleConfig)

    # -------------------------------------------------------------------------
    # File Paths
    # -------------------------------------------------------------------------

    @staticmethod
    def config_file_path() -> Path:
        """Returns the path to the main config file."""
        return get_xdg_config_home() / "config.toml"

    # -------------------------------------------------------------------------
    # Loading and Saving
    # -------------------------------------------------------------------------

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """
        Load configuration from a config file.

        If the config file doesn't exist, returns default configuration.

        Args:
            path: File to read. Defaults to the XDG config file.

        Returns:
            Loaded Config object.

        Raises:
            ConfigError: If the config file exists but is invalid.
        """
        config_path = path or cls.config_file_path()

        if not config_path.exists():
            # No config file yet - return defaults
            return cls()

        # Load and parse the TOML file
        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid config file: {e}") from e
        except OSError as e:
            raise ConfigError(f"Cannot read config file: {e}") from e

        return cls._from_dict(data)

    def save(self, path: Path | None = None) -> Path:
        """
        Save configuration to a config file.

        Creates the config directory if it doesn't exist.

        Returns:
            The path written to.
        """
        config_path = path or self.config_file_path()
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "wb") as f:
            tomli_w.dump(self._to_dict(), f)
        return config_path

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "Config":
        """
        Create a Config object from a dictionary (parsed TOML).

        Each table ([rendering], [styles]) is optional; missing keys keep
        their defaults.
        """
        return cls(
            rendering=_section(RenderingConfig, data, "rendering"),
            styles=_section(StyleConfig, data, "styles"),
        )

    def _to_dict(self) -> dict[str, Any]:
        """Convert Config to a dictionary for TOML serialization."""
        return {
            "rendering": {f.name: getattr(self.rendering, f.name) for f in fields(self.rendering)},
            "styles": {f.name: getattr(self.styles, f.name) for f in fields(self.styles)},
        }


def _section(section_cls: type, data: dict[str, Any], name: str):
    """
    Build one config dataclass from its TOML table.

    Raises:
        ConfigError: On unknown keys or values of the wrong type.
    """
    table = data.get(name, {})
    if not isinstance(table, dict):
        raise ConfigError(f"[{name}] must be a table")

    defaults = section_cls()
    values = {}
    known = {f.name for f in fields(section_cls)}
    for key, value in table.items():
        if key not in known:
            raise ConfigError(f"Unknown setting {name}.{key}")
        expected = type(getattr(defaults, key))
        # bool is a subclass of int; don't accept one for the other
        if type(value) is not expected:
            raise ConfigError(
                f"{name}.{key} must be {expected.__name__}, got {type(value).__name__}"
            )
        values[key] = value
    return section_cls(**values)


# =============================================================================
# Exceptions
# =============================================================================

class ConfigError(HtmlTermError):
    """Raised when there's an error loading or parsing configuration."""
    pass


# =============================================================================
# Utility Functions
# =============================================================================

def print_paths() -> None:
    """
    Print the configuration paths.
    Useful for users wondering where their config is stored.
    """
    print(f"Config:       {get_xdg_config_home()}")
    print(f"Config file:  {Config.config_file_path()}")
