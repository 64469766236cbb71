"""Tests for the server entry point."""

import logging
from unittest.mock import patch

import pytest
from fastapi import FastAPI

import run_api
from api.app import AUTH_NOT_CONFIGURED_MESSAGE
from shared.config import Settings


@pytest.fixture
def uvicorn_run():
    with patch("run_api.uvicorn.run") as run, patch("run_api.setup_logging"):
        yield run


def use_settings(settings: Settings):
    return patch("run_api.get_settings", return_value=settings)


class TestMain:
    def test_production_without_credentials_exits(self, uvicorn_run, caplog):
        settings = Settings(
            _env_file=None,
            environment="production",
            supabase_url="",
            supabase_service_role_key="",
        )
        with use_settings(settings), caplog.at_level(logging.CRITICAL, logger="run_api"):
            assert run_api.main([]) == 1

        uvicorn_run.assert_not_called()
        assert AUTH_NOT_CONFIGURED_MESSAGE in caplog.text

    def test_serves_built_app(self, uvicorn_run, settings):
        settings.log_level = "WARNING"
        with use_settings(settings):
            assert run_api.main([]) == 0

        target = uvicorn_run.call_args.args[0]
        kwargs = uvicorn_run.call_args.kwargs
        assert isinstance(target, FastAPI)
        assert target.state.settings is settings
        assert kwargs["factory"] is False
        assert kwargs["reload"] is False
        assert kwargs["log_level"] == "warning"
        assert kwargs["host"] == settings.host
        assert kwargs["port"] == settings.port

    def test_reload_uses_factory_path(self, uvicorn_run, settings):
        with use_settings(settings):
            assert run_api.main(["--reload", "--host", "0.0.0.0", "--port", "9000"]) == 0

        assert uvicorn_run.call_args.args[0] == run_api.APP_FACTORY
        kwargs = uvicorn_run.call_args.kwargs
        assert kwargs["factory"] is True
        assert kwargs["reload"] is True
        assert kwargs["host"] == "0.0.0.0"
        assert kwargs["port"] == 9000
