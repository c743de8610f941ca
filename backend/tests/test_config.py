"""Tests for service configuration."""

import pytest

from shared.config import ServiceConfig
from shared.utils import config


class TestPresentationConfig:
    def test_dotted_lookup(self):
        assert config.get_presentation_value("sync.debounce_seconds") == 1.0
        assert config.get_presentation_value("autoplay.loop") is True

    def test_missing_path_returns_default(self):
        assert config.get_presentation_value("sync.nope", "fallback") == "fallback"
        assert config.get_presentation_value("nothing.here") is None

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("true", True), ("FALSE", False), ("2.5", 2.5), ("3", 3), ("style: red", "style: red")],
    )
    def test_env_override(self, monkeypatch, raw, expected):
        monkeypatch.setenv("PRESENTATION_FLAG_SYNC_DEBOUNCE_SECONDS", raw)
        assert config.get_presentation_value("sync.debounce_seconds") == expected

    def test_yaml_file_is_loaded(self, tmp_path, monkeypatch):
        path = tmp_path / "presentation.yaml"
        path.write_text("sync:\n  debounce_seconds: 0.25\n", encoding="utf-8")
        monkeypatch.setenv("PRESENTATION_CONFIG_PATH", str(path))

        loaded = ServiceConfig()

        assert loaded.get_presentation_value("sync.debounce_seconds") == 0.25

    def test_missing_yaml_file_means_defaults(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PRESENTATION_CONFIG_PATH", str(tmp_path / "absent.yaml"))
        assert ServiceConfig().presentation_config == {}


class TestEnvironmentConfig:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("STORAGE_API_URL", raising=False)
        monkeypatch.delenv("PORT", raising=False)
        loaded = ServiceConfig()
        assert loaded.get("port") == 5001
        assert loaded.get("storage_api_url") == "http://localhost:5001/api"

    def test_environment_values(self, monkeypatch):
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("ALLOWED_ORIGINS", '["http://localhost:3000"]')
        loaded = ServiceConfig()
        assert loaded.get("port") == 8080
        assert loaded.get("allowed_origins") == ["http://localhost:3000"]
