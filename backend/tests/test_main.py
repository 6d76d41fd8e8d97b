"""
apidoc — Application Factory Tests
===================================

What we test:
    ✅ The lifespan configures logging at the app's own log level
    ✅ Apps without their own settings fall back to the singleton
"""

from unittest.mock import patch

import pytest
from fastapi import FastAPI

from apidoc.config import Settings, settings
from apidoc.main import create_app, lifespan


class TestLifespan:
    @pytest.mark.asyncio
    async def test_logging_uses_app_settings(self):
        app = create_app(Settings(log_level="debug"))

        with patch("apidoc.main.setup_logging") as mock_setup:
            async with lifespan(app):
                pass

        mock_setup.assert_called_once_with("DEBUG")

    @pytest.mark.asyncio
    async def test_plain_app_uses_singleton(self):
        with patch("apidoc.main.setup_logging") as mock_setup:
            async with lifespan(FastAPI()):
                pass

        mock_setup.assert_called_once_with(settings.log_level)

    def test_settings_stored_on_app(self):
        app_settings = Settings(log_level="ERROR")
        assert create_app(app_settings).state.settings is app_settings
