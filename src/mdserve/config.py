"""Configuration management for mdserve.

Supports TOML configuration format with auto-discovery.
"""

import logging
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

CONFIG_FILENAME = "mdserve.toml"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ServerConfig:
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 3000


@dataclass
class ContentConfig:
    """Content tree configuration."""

    root: Path = field(default_factory=lambda: Path("www"))
    base_url: str | None = None


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"

    @property
    def level_number(self) -> int:
        return logging.getLevelName(self.level)


@dataclass
class Config:
    """Application configuration."""

    server: ServerConfig
    content: ContentConfig
    logging: LoggingConfig
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Config":
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for mdserve.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls._default()

        return cls._load_from_file(discovered_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents.

        Returns:
            Path to config file or None if not found
        """
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _default(cls) -> "Config":
        return cls(
            server=ServerConfig(),
            content=ContentConfig(),
            logging=LoggingConfig(),
        )

    @classmethod
    def _load_from_file(cls, path: Path) -> "Config":
        """Load configuration from a specific file.

        Args:
            path: Path to TOML configuration file

        Returns:
            Config instance

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            data = tomllib.load(f)

        config_dir = path.parent

        return cls(
            server=cls._parse_server(data.get("server")),
            content=cls._parse_content(data.get("content"), config_dir),
            logging=cls._parse_logging(data.get("logging")),
            config_path=path,
        )

    @classmethod
    def _parse_server(cls, data: object) -> ServerConfig:
        if data is None:
            return ServerConfig()

        if not isinstance(data, dict):
            raise ValueError("server section must be a dictionary")

        host = data.get("host", "127.0.0.1")
        if not isinstance(host, str):
            raise ValueError("server.host must be a string")

        port = data.get("port", 3000)
        if not isinstance(port, int) or isinstance(port, bool):
            raise ValueError("server.port must be an integer")

        return ServerConfig(host=host, port=port)

    @classmethod
    def _parse_content(cls, data: object, config_dir: Path) -> ContentConfig:
        """Parse content configuration section.

        Args:
            data: Raw content section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            ContentConfig instance
        """
        if data is None:
            return ContentConfig(root=config_dir / "www")

        if not isinstance(data, dict):
            raise ValueError("content section must be a dictionary")

        root = data.get("root", "www")
        if not isinstance(root, str):
            raise ValueError("content.root must be a string")

        base_url = data.get("base_url")
        if base_url is not None and not isinstance(base_url, str):
            raise ValueError("content.base_url must be a string")

        return ContentConfig(root=config_dir / root, base_url=base_url or None)

    @classmethod
    def _parse_logging(cls, data: object) -> LoggingConfig:
        if data is None:
            return LoggingConfig()

        if not isinstance(data, dict):
            raise ValueError("logging section must be a dictionary")

        level = data.get("level", "INFO")
        if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
            raise ValueError(f"logging.level must be one of {', '.join(LOG_LEVELS)}")

        return LoggingConfig(level=level.upper())

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        root: Path | None = None,
        base_url: str | None = None,
        log_level: str | None = None,
    ) -> "Config":
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.

        Args:
            host: Override server.host
            port: Override server.port
            root: Override content.root
            base_url: Override content.base_url
            log_level: Override logging.level

        Returns:
            New Config instance with overrides applied
        """
        server = self.server
        if host is not None or port is not None:
            server = replace(
                self.server,
                host=host if host is not None else self.server.host,
                port=port if port is not None else self.server.port,
            )

        content = self.content
        if root is not None or base_url is not None:
            content = replace(
                self.content,
                root=root if root is not None else self.content.root,
                base_url=base_url if base_url is not None else self.content.base_url,
            )

        logging_config = self.logging
        if log_level is not None:
            logging_config = replace(self.logging, level=log_level.upper())

        return replace(self, server=server, content=content, logging=logging_config)
