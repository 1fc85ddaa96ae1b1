"""Tests for gallerycms.core.config — configuration management.

Tests cover:
- Default values for all configuration fields.
- Environment variable overrides via the GALLERYCMS_ prefix.
- Automatic directory creation on initialisation.
- Pydantic validation constraints (port range, warm-up window).
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from gallerycms.core.config import GalleryCmsConfig


def _config(temp_dir: Path, **overrides) -> GalleryCmsConfig:
    return GalleryCmsConfig(
        data_dir=temp_dir / "data",
        media_dir=temp_dir / "media",
        _env_file=None,
        **overrides,
    )


class TestConfigDefaults:
    """Verify that GalleryCmsConfig provides sensible defaults."""

    def test_default_server_port(self, monkeypatch, temp_dir):
        """Default server port should be 7860."""
        monkeypatch.delenv("GALLERYCMS_SERVER_PORT", raising=False)
        assert _config(temp_dir).server_port == 7860

    def test_default_warmup_window(self, monkeypatch, temp_dir):
        """Dirty tracking warm-up should default to half a second."""
        monkeypatch.delenv("GALLERYCMS_DIRTY_WARMUP_SECONDS", raising=False)
        assert _config(temp_dir).dirty_warmup_seconds == 0.5

    def test_default_categories_include_uncategorized(self, temp_dir):
        """The starting registry must contain the fallback category."""
        cfg = _config(temp_dir)
        assert "uncategorized" in cfg.default_categories
        assert cfg.default_categories == ["general", "hero", "gallery", "blog", "uncategorized"]

    def test_default_allowed_image_types(self, temp_dir):
        """Common web image formats should be accepted out of the box."""
        assert set(_config(temp_dir).allowed_image_types) == {"jpeg", "png", "gif", "webp"}

    def test_database_path_inside_data_dir(self, temp_dir):
        """database_path should combine data_dir and database_name."""
        cfg = _config(temp_dir, database_name="content.db")
        assert cfg.database_path == temp_dir / "data" / "content.db"


class TestConfigEnvironment:
    """Environment variables with the GALLERYCMS_ prefix override defaults."""

    def test_env_overrides_port(self, monkeypatch, temp_dir):
        monkeypatch.setenv("GALLERYCMS_SERVER_PORT", "8123")
        assert _config(temp_dir).server_port == 8123

    def test_env_overrides_api_base_url(self, monkeypatch, temp_dir):
        monkeypatch.setenv("GALLERYCMS_API_BASE_URL", "http://cms.local:9000")
        assert _config(temp_dir).api_base_url == "http://cms.local:9000"

    def test_env_is_case_insensitive(self, monkeypatch, temp_dir):
        monkeypatch.setenv("gallerycms_seed_on_startup", "false")
        assert _config(temp_dir).seed_on_startup is False


class TestConfigDirectories:
    """Required directories are created on initialisation."""

    def test_creates_data_and_media_dirs(self, temp_dir):
        cfg = _config(temp_dir)
        assert cfg.data_dir.is_dir()
        assert cfg.media_dir.is_dir()

    def test_creates_nested_dirs(self, temp_dir):
        cfg = GalleryCmsConfig(
            data_dir=temp_dir / "a" / "b" / "data",
            media_dir=temp_dir / "a" / "media",
            _env_file=None,
        )
        assert cfg.data_dir.is_dir()
        assert cfg.media_dir.is_dir()


class TestConfigValidation:
    """Pydantic constraints reject invalid values."""

    def test_port_below_range_rejected(self, temp_dir):
        with pytest.raises(ValidationError):
            _config(temp_dir, server_port=80)

    def test_port_above_range_rejected(self, temp_dir):
        with pytest.raises(ValidationError):
            _config(temp_dir, server_port=70000)

    def test_negative_warmup_rejected(self, temp_dir):
        with pytest.raises(ValidationError):
            _config(temp_dir, dirty_warmup_seconds=-1)

    def test_zero_warmup_allowed(self, temp_dir):
        assert _config(temp_dir, dirty_warmup_seconds=0).dirty_warmup_seconds == 0
