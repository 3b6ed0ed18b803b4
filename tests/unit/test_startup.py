from __future__ import annotations

import pytest

import venturescope.core.startup as startup_module


class _Cfg:
    def __init__(self, required: bool) -> None:
        self.DB_CONNECTIVITY_REQUIRED = required
        self.ENV = "development"
        self.STRIPE_SECRET_KEY = None
        self.LLM_API_KEY = None

    @property
    def is_production(self) -> bool:
        return False


def test_startup_skips_raise_when_db_optional_and_unreachable(monkeypatch):
    monkeypatch.setattr(startup_module, "get_config", lambda: _Cfg(required=False))
    monkeypatch.setattr(startup_module, "verify_database_connection", lambda: False)
    monkeypatch.setattr(startup_module, "get_active_database_url", lambda: "sqlite:///./venturescope.db")

    startup_module.validate_startup_config()


def test_startup_raises_when_db_required_and_unreachable(monkeypatch):
    monkeypatch.setattr(startup_module, "get_config", lambda: _Cfg(required=True))
    monkeypatch.setattr(startup_module, "verify_database_connection", lambda: False)
    monkeypatch.setattr(startup_module, "get_active_database_url", lambda: "postgresql://db:5432/venturescope")

    with pytest.raises(RuntimeError, match="Database connectivity check failed"):
        startup_module.validate_startup_config()


def test_config_rejects_invalid_rate_limit(monkeypatch):
    from venturescope.core.config import _build_config
    from venturescope.core.exceptions import ConfigurationError

    monkeypatch.setenv("INTAKE_RATE_LIMIT_MAX", "0")
    with pytest.raises(ConfigurationError, match="INTAKE_RATE_LIMIT_MAX"):
        _build_config()
