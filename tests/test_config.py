"""Tests for configuration loading."""

import logging
from pathlib import Path

import pytest
from mdserve.config import (
    Config,
    ContentConfig,
    LoggingConfig,
    ServerConfig,
)


class TestConfigLoad:
    """Tests for Config.load()."""

    def test__explicit_path__loads_config(self, tmp_path: Path) -> None:
        """Load config from explicit path."""
        config_file = tmp_path / "mdserve.toml"
        config_file.write_text("""
[server]
host = "0.0.0.0"
port = 8000

[content]
root = "site"
base_url = "https://example.com"

[logging]
level = "debug"
""")

        config = Config.load(config_file)

        assert config.server.host == "0.0.0.0"
        assert config.server.port == 8000
        assert config.content.root == tmp_path / "site"
        assert config.content.base_url == "https://example.com"
        assert config.logging.level == "DEBUG"
        assert config.config_path == config_file

    def test__minimal_config__uses_defaults(self, tmp_path: Path) -> None:
        """Load minimal config with defaults relative to config file."""
        config_file = tmp_path / "mdserve.toml"
        config_file.write_text("")

        config = Config.load(config_file)

        assert config.server.host == "127.0.0.1"
        assert config.server.port == 3000
        assert config.content.root == tmp_path / "www"
        assert config.content.base_url is None
        assert config.logging.level == "INFO"

    def test__missing_explicit_path__raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            Config.load(tmp_path / "missing.toml")

    def test__no_config_file__returns_defaults(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Fall back to built-in defaults when nothing is discovered."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(Config, "_discover_config", classmethod(lambda cls: None))

        config = Config.load()

        assert config.server == ServerConfig()
        assert config.content == ContentConfig()
        assert config.config_path is None

    def test__config_in_parent__is_discovered(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Search the current directory and its parents."""
        config_file = tmp_path / "mdserve.toml"
        config_file.write_text("[server]\nport = 4000\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        config = Config.load()

        assert config.server.port == 4000
        assert config.config_path == config_file


class TestConfigValidation:
    """Tests for invalid configuration values."""

    @pytest.mark.parametrize(
        ("content", "message"),
        [
            ('[server]\nport = "80"\n', "server.port must be an integer"),
            ("[server]\nport = true\n", "server.port must be an integer"),
            ("[server]\nhost = 1\n", "server.host must be a string"),
            ("server = 1\n", "server section must be a dictionary"),
            ("[content]\nroot = 1\n", "content.root must be a string"),
            ("[content]\nbase_url = 1\n", "content.base_url must be a string"),
            ('[logging]\nlevel = "loud"\n', "logging.level must be one of"),
        ],
    )
    def test__invalid_values__raise(self, tmp_path: Path, content: str, message: str) -> None:
        config_file = tmp_path / "mdserve.toml"
        config_file.write_text(content)

        with pytest.raises(ValueError, match=message):
            Config.load(config_file)


class TestWithOverrides:
    """Tests for Config.with_overrides()."""

    @pytest.fixture
    def config(self) -> Config:
        return Config(
            server=ServerConfig(host="127.0.0.1", port=3000),
            content=ContentConfig(root=Path("/srv/www"), base_url="https://a.example"),
            logging=LoggingConfig(),
        )

    def test__overrides__are_applied(self, config: Config) -> None:
        updated = config.with_overrides(
            host="0.0.0.0",
            port=9000,
            root=Path("/other"),
            base_url="https://b.example",
            log_level="debug",
        )

        assert updated.server == ServerConfig(host="0.0.0.0", port=9000)
        assert updated.content == ContentConfig(root=Path("/other"), base_url="https://b.example")
        assert updated.logging.level == "DEBUG"

    def test__none_values__keep_existing(self, config: Config) -> None:
        updated = config.with_overrides(port=9000)

        assert updated.server.host == "127.0.0.1"
        assert updated.server.port == 9000
        assert updated.content == config.content

    def test__original__is_not_modified(self, config: Config) -> None:
        config.with_overrides(host="0.0.0.0")

        assert config.server.host == "127.0.0.1"


class TestLoggingConfig:
    """Tests for LoggingConfig."""

    def test__level_number__maps_name(self) -> None:
        assert LoggingConfig(level="WARNING").level_number == logging.WARNING
