"""Configuration management for n8n-workflow-sync.

Connection settings come from the environment (``N8N_HOST``,
``N8N_API_KEY``, optionally via a ``.env`` file) and fall back to the
``[n8n]`` table of a settings.toml found in one of:

1. $N8N_WORKFLOW_SYNC_CONFIG (explicit path)
2. ~/.config/n8n-workflow-sync/settings.toml (user home)
3. $XDG_CONFIG_HOME/n8n-workflow-sync/settings.toml (XDG standard)

The resulting :class:`N8nConfig` is built once by the CLI and handed to
every collaborator; nothing here is process-global.
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urljoin, urlparse

from .config_provider import ConfigProvider
from .errors import ConfigError

logger = logging.getLogger(__name__)

APP_NAME = "n8n-workflow-sync"
HOST_ENV = "N8N_HOST"
API_KEY_ENV = "N8N_API_KEY"
CONFIG_PATH_ENV = "N8N_WORKFLOW_SYNC_CONFIG"


class SettingsFile:
    """Optional settings.toml loader."""

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize settings from file.

        Args:
            config_path: Optional explicit path to settings.toml
        """
        self.config_path = config_path or self._find_config_file()
        self.data: Dict[str, Any] = {}

        if config_path is not None and not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")
        if self.config_path is not None:
            self._load_from_file(self.config_path)

    @staticmethod
    def _find_config_file() -> Optional[Path]:
        """Find config file in standard locations.

        Returns:
            Path to config file, or None if not found
        """
        explicit = os.getenv(CONFIG_PATH_ENV)
        if explicit:
            path = Path(explicit).expanduser()
            if path.exists():
                logger.debug(f"Using config from ${CONFIG_PATH_ENV}: {path}")
                return path
            logger.warning(f"${CONFIG_PATH_ENV} points to missing file {path}")

        home_path = Path.home() / ".config" / APP_NAME / "settings.toml"
        if home_path.exists():
            logger.debug(f"Using user config: {home_path}")
            return home_path

        xdg_config = os.getenv("XDG_CONFIG_HOME")
        if xdg_config:
            xdg_path = Path(xdg_config) / APP_NAME / "settings.toml"
            if xdg_path.exists():
                logger.debug(f"Using XDG config: {xdg_path}")
                return xdg_path

        return None

    def _load_from_file(self, path: Path) -> None:
        try:
            with open(path, "rb") as f:
                self.data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigError(f"Failed to load config from {path}: {e}") from e
        logger.debug(f"Loaded config from {path}")

    def get(self, section: str, key: str, default: Any = None) -> Any:
        return self.data.get(section, {}).get(key, default)

    def get_section(self, section: str) -> Dict[str, Any]:
        return self.data.get(section, {})


def normalize_host(host: str) -> str:
    """Normalize an n8n base URL to ``scheme://host[/prefix]/``.

    Trailing slashes and an ``/api/v1`` or ``/v1`` suffix are removed so
    that users can paste either the instance URL or the API URL.

    Raises:
        ConfigError: If the result is not an http(s) URL
    """
    host = host.strip().rstrip("/")
    for suffix in ("/api/v1", "/v1"):
        if host.endswith(suffix):
            host = host[: -len(suffix)]
            break
    host = f"{host}/"

    parsed = urlparse(host)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigError(f"Invalid n8n host URL: {host!r} (expected e.g. https://your-n8n.example.com)")
    return host


@dataclass(frozen=True)
class N8nConfig:
    """Connection settings for one n8n instance."""
    host: str
    api_key: str

    def endpoint(self, path: str) -> str:
        """Public API URL for ``path`` (e.g. 'workflows')."""
        return urljoin(self.host, f"api/v1/{path.lstrip('/')}")

    @classmethod
    def load(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        provider: Optional[ConfigProvider] = None,
    ) -> "N8nConfig":
        """Build config from environment, then settings file.

        Args:
            environ: Environment mapping (default: os.environ)
            provider: Settings provider for the ``[n8n]`` fallback

        Returns:
            N8nConfig

        Raises:
            ConfigError: If host or API key is missing or invalid
        """
        environ = os.environ if environ is None else environ
        section = provider.get_section("n8n") if provider is not None else {}

        host = environ.get(HOST_ENV) or section.get("host")
        api_key = environ.get(API_KEY_ENV) or section.get("api_key")

        missing = []
        if not host:
            missing.append(HOST_ENV)
        if not api_key:
            missing.append(API_KEY_ENV)
        if missing:
            raise ConfigError(
                f"Missing {' and '.join(missing)}. Please set the environment variables, e.g.\n"
                f"  export {HOST_ENV}=https://your-n8n.example.com\n"
                f"  export {API_KEY_ENV}=your-api-key-here\n"
                f"or add them to the [n8n] section of ~/.config/{APP_NAME}/settings.toml"
            )

        return cls(host=normalize_host(str(host)), api_key=str(api_key))

    def describe(self) -> Dict[str, str]:
        """Printable summary with the API key masked."""
        masked = f"{self.api_key[:4]}…" if len(self.api_key) > 8 else "****"
        return {"host": self.host, "api_endpoint": self.endpoint(""), "api_key": masked}
