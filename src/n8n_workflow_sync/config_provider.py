"""Configuration provider abstraction for dependency injection.

Provides a clean interface for reading the optional ``settings.toml`` that
can be injected, mocked in tests, and implemented differently.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional


class ConfigProvider(ABC):
    """Abstract base for configuration providers."""

    @abstractmethod
    def get(self, section: str, key: str, default: Any = None) -> Any:
        """Get a configuration value.

        Args:
            section: Config section (e.g., 'n8n')
            key: Key within section
            default: Default value if not found

        Returns:
            Configuration value or default
        """
        pass

    @abstractmethod
    def get_section(self, section: str) -> Dict[str, Any]:
        """Get entire configuration section.

        Args:
            section: Section name

        Returns:
            Section dict or empty dict
        """
        pass


class TomlConfigProvider(ConfigProvider):
    """Configuration provider backed by settings.toml.

    A missing file is not an error; every lookup then returns its default.
    """

    def __init__(self, config_path: Optional[Path] = None):
        from .config import SettingsFile

        self.settings = SettingsFile(config_path=config_path)

    @property
    def source(self) -> Optional[Path]:
        return self.settings.config_path

    def get(self, section: str, key: str, default: Any = None) -> Any:
        return self.settings.get(section, key, default)

    def get_section(self, section: str) -> Dict[str, Any]:
        return self.settings.get_section(section)


class MockConfigProvider(ConfigProvider):
    """In-memory configuration provider for testing."""

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        """Initialize with test data.

        Args:
            data: Dictionary of {section: {key: value}}
        """
        self.data = data or {}

    def get(self, section: str, key: str, default: Any = None) -> Any:
        return self.data.get(section, {}).get(key, default)

    def get_section(self, section: str) -> Dict[str, Any]:
        return self.data.get(section, {})


def get_default_config_provider() -> ConfigProvider:
    """Get default configuration provider (settings.toml in standard locations)."""
    return TomlConfigProvider()
