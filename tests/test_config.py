# =============================================================================
# Configuration Tests
# =============================================================================

import pytest

from htmlterm.config import (
    Config,
    ConfigError,
    RenderingConfig,
    StyleConfig,
    get_xdg_config_home,
    print_paths,
)


class TestPaths:
    """XDG path resolution."""

    def test_xdg_config_home(self, monkeypatch, temp_dir):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(temp_dir))
        assert get_xdg_config_home() == temp_dir / "htmlterm"
        assert Config.config_file_path() == temp_dir / "htmlterm" / "config.toml"

    def test_default_location(self, monkeypatch):
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        assert get_xdg_config_home().parts[-2:] == (".config", "htmlterm")

    def test_print_paths(self, monkeypatch, temp_dir, capsys):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(temp_dir))
        print_paths()
        assert str(temp_dir / "htmlterm" / "config.toml") in capsys.readouterr().out


class TestLoad:
    """Reading config files."""

    def test_missing_file_gives_defaults(self, temp_dir):
        config = Config.load(temp_dir / "absent.toml")
        assert config.rendering == RenderingConfig()
        assert config.styles == StyleConfig()

    def test_default_path(self, monkeypatch, temp_dir):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(temp_dir))
        path = temp_dir / "htmlterm" / "config.toml"
        path.parent.mkdir()
        path.write_text("[rendering]\nwidth = 60\n")
        assert Config.load().rendering.width == 60

    def test_partial_file(self, temp_dir):
        path = temp_dir / "config.toml"
        path.write_text('[rendering]\nwidth = 72\ncolour = true\n\n[styles]\nlink = "bold blue"\n')
        config = Config.load(path)
        assert config.rendering.width == 72
        assert config.rendering.colour is True
        assert config.rendering.height == 40
        assert config.styles.link == "bold blue"
        assert config.styles.emphasis == "bold"

    def test_invalid_toml(self, temp_dir):
        path = temp_dir / "config.toml"
        path.write_text("[rendering\nwidth = ")
        with pytest.raises(ConfigError):
            Config.load(path)

    def test_unknown_key(self, temp_dir):
        path = temp_dir / "config.toml"
        path.write_text("[rendering]\ncolumns = 80\n")
        with pytest.raises(ConfigError, match="rendering.columns"):
            Config.load(path)

    def test_wrong_type(self, temp_dir):
        path = temp_dir / "config.toml"
        path.write_text('[rendering]\nwidth = "wide"\n')
        with pytest.raises(ConfigError, match="must be int"):
            Config.load(path)

    def test_bool_is_not_an_int(self, temp_dir):
        path = temp_dir / "config.toml"
        path.write_text("[rendering]\nwidth = true\n")
        with pytest.raises(ConfigError):
            Config.load(path)

    def test_section_must_be_a_table(self, temp_dir):
        path = temp_dir / "config.toml"
        path.write_text("styles = 3\n")
        with pytest.raises(ConfigError):
            Config.load(path)


class TestSave:
    """Writing config files."""

    def test_save_creates_directories(self, temp_dir):
        config = Config()
        config.rendering.width = 100
        config.styles.hyperlinks = False
        path = config.save(temp_dir / "nested" / "config.toml")
        assert path.exists()

        loaded = Config.load(path)
        assert loaded.rendering.width == 100
        assert loaded.styles.hyperlinks is False
