"""
Unit tests for configuration management (flat Settings).

Tests cover:
- Loading from AUTOCRUD_* environment variables
- Comma-separated list parsing
- Prefix normalization and page size validation
- Grouped api/web views
- Cached singleton behavior
"""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from autocrud.core.config import Settings, get_settings
from autocrud.core.enums import Environment, IndexMode


class TestSettingsFromEnvironment:
    """Environment variable loading."""

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings()
        assert settings.environment == Environment.DEVELOPMENT
        assert settings.api.enabled is True
        assert settings.api.url_prefix == "api"
        assert settings.api.page_size == 10
        assert settings.web.enabled is False
        assert settings.web.route_name_prefix == "web."
        assert settings.index_mode == IndexMode.NEGOTIATED

    def test_csv_lists(self):
        env = {
            "AUTOCRUD_API_ALLOWED_SORTS": "title, created_at,,",
            "AUTOCRUD_CONTROLLER_SEARCH_PATHS": "app.controllers,app.blog.controllers",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = Settings()
        assert settings.api.allowed_sort_fields == ("title", "created_at")
        assert settings.controller_search_paths == ["app.controllers", "app.blog.controllers"]

    def test_prefix_slashes_are_stripped(self):
        with patch.dict(os.environ, {"AUTOCRUD_API_PREFIX": "/api/v1/"}, clear=True):
            settings = Settings()
        assert settings.api.url_prefix == "api/v1"

    def test_index_mode(self):
        with patch.dict(os.environ, {"AUTOCRUD_INDEX_MODE": "api_only"}, clear=True):
            settings = Settings()
        assert settings.index_mode == IndexMode.API_ONLY

    def test_per_page_must_be_positive(self):
        with patch.dict(os.environ, {"AUTOCRUD_API_PER_PAGE": "0"}, clear=True):
            with pytest.raises(ValidationError) as exc_info:
                Settings()
        assert any(
            "api_per_page must be at least 1" in str(error)
            for error in exc_info.value.errors()
        )

    def test_keyword_arguments_win(self):
        with patch.dict(os.environ, {"AUTOCRUD_API_PER_PAGE": "50"}, clear=True):
            settings = Settings(api_per_page=25)
        assert settings.api.page_size == 25


class TestEnvironmentDetection:
    """Environment helpers."""

    @pytest.mark.parametrize(
        ("environment", "attribute"),
        [
            ("development", "is_development"),
            ("testing", "is_testing"),
            ("production", "is_production"),
        ],
    )
    def test_environment_flags(self, environment, attribute):
        with patch.dict(os.environ, {"AUTOCRUD_ENVIRONMENT": environment}, clear=True):
            settings = Settings()
        assert getattr(settings, attribute) is True


class TestGetSettings:
    """Cached settings."""

    def test_returns_same_instance(self):
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()
