from __future__ import annotations

import importlib
import logging

from production_flow.config import DEFAULT_DATABASE_PATH, FlowSettings
from production_flow.logging_config import _resolve_level


def test_settings_defaults_from_empty_environment() -> None:
    settings = FlowSettings.from_env({})
    assert settings.database_path == DEFAULT_DATABASE_PATH
    assert settings.log_level == "INFO"
    assert settings.seed_demo_data is True


def test_settings_read_environment() -> None:
    settings = FlowSettings.from_env(
        {
            "PRODUCTION_FLOW_DB": "/tmp/line.sqlite3",
            "PRODUCTION_FLOW_LOG_LEVEL": "debug",
            "PRODUCTION_FLOW_DEMO_DATA": "off",
        }
    )
    assert settings.database_path == "/tmp/line.sqlite3"
    assert settings.log_level == "DEBUG"
    assert settings.seed_demo_data is False


def test_resolve_level(monkeypatch) -> None:
    monkeypatch.delenv("PRODUCTION_FLOW_LOG_LEVEL", raising=False)
    assert _resolve_level(logging.DEBUG) == logging.DEBUG
    assert _resolve_level("warning") == logging.WARNING
    assert _resolve_level("nonsense") == logging.INFO

    monkeypatch.setenv("PRODUCTION_FLOW_LOG_LEVEL", "error")
    assert _resolve_level(None) == logging.ERROR


def test_importing_the_web_app_leaves_root_logger_alone(monkeypatch) -> None:
    import production_flow.web.app as web_app

    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    importlib.reload(web_app)

    assert calls == []
