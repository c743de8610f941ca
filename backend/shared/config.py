"""
Configuration management for services.
"""

import json
import os
from typing import Any

import yaml

from dotenv import load_dotenv


class ServiceConfig:
    """Configuration management for services using environment variables."""

    def __init__(self) -> None:
        """Initialize configuration by loading environment variables."""
        # Always load .env from backend directory (where app.py is located)
        env_path = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.env"))
        load_dotenv(dotenv_path=env_path, override=True)
        self.config: dict[str, Any] = {}
        self.presentation_config: dict[str, Any] = {}
        self.presentation_config_path = os.getenv(
            "PRESENTATION_CONFIG_PATH",
            os.path.join(os.path.dirname(__file__), "../../config/presentation.yaml"),
        )
        self.load_from_env()
        self.load_presentation_config()

    def load_from_env(self) -> None:
        """Load configuration from environment variables."""
        self.config = {
            "database_url": os.getenv("DATABASE_URL"),
            "sqlite_path": os.getenv(
                "SQLITE_PATH",
                os.path.abspath(os.path.join(os.path.dirname(__file__), "../churchbuddy.db")),
            ),
            "port": int(os.getenv("PORT", "5001")),
            "storage_api_url": os.getenv("STORAGE_API_URL", "http://localhost:5001/api"),
            "http_timeout": int(os.getenv("HTTP_TIMEOUT", "10")),
            "health_cache_ttl": int(os.getenv("HEALTH_CACHE_TTL", "30")),
            "log_level": os.getenv("LOG_LEVEL", "INFO"),
            "debug": os.getenv("DEBUG", "false").lower() == "true",
            "allowed_origins": json.loads(os.getenv("ALLOWED_ORIGINS", '["*"]')),
        }

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key.

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value
        """
        return self.config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """
        Set configuration value.

        Args:
            key: Configuration key
            value: Configuration value
        """
        self.config[key] = value

    def reload(self) -> None:
        """Reload configuration from environment variables."""
        self.load_from_env()
        self.load_presentation_config()

    def load_presentation_config(self) -> None:
        """Load slide and sync settings from the presentation YAML file."""
        path = os.path.abspath(self.presentation_config_path)
        try:
            with open(path, "r", encoding="utf-8") as stream:
                data = yaml.safe_load(stream) or {}
        except FileNotFoundError:
            data = {}
        self.presentation_config = data

    def get_presentation_value(self, path: str, default: Any = None) -> Any:
        """Retrieve a presentation setting via dotted path (e.g. ``sync.debounce_seconds``)."""
        env_override_key = f"PRESENTATION_FLAG_{path.replace('.', '_').upper()}"
        env_value = os.getenv(env_override_key)
        if env_value is not None:
            return self._coerce_env_value(env_value, default)

        node: Any = self.presentation_config
        for part in path.split("."):
            if isinstance(node, dict) and part in node:
                node = node[part]
            else:
                return default
        return node if node is not None else default

    def set_presentation_config(self, presentation_config: dict[str, Any]) -> None:
        """Override presentation settings (useful for tests)."""
        self.presentation_config = presentation_config

    @staticmethod
    def _coerce_env_value(raw: str, default: Any) -> Any:
        lowered = raw.lower()
        if lowered in {"true", "false"}:
            return lowered == "true"
        if lowered.replace(".", "", 1).isdigit():
            try:
                return float(lowered) if "." in lowered else int(lowered)
            except ValueError:
                return raw
        return raw or default


# Global configuration instance
config = ServiceConfig()
