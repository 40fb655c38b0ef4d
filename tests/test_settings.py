from __future__ import annotations

import pytest

from config import get_settings_module


@pytest.mark.parametrize(
    "app_env, module",
    [
        ("production", "config.production"),
        ("PROD", "config.production"),
        ("testing", "config.testing"),
        ("development", "config.development"),
        ("staging", "config.development"),
    ],
)
def test_app_env_picks_the_settings_module(monkeypatch, app_env, module):
    monkeypatch.delenv("HR_SETTINGS_MODULE", raising=False)
    monkeypatch.setenv("APP_ENV", app_env)
    assert get_settings_module() == module


def test_explicit_settings_module_wins(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("HR_SETTINGS_MODULE", "config.testing")
    assert get_settings_module() == "config.testing"


def test_default_is_development(monkeypatch):
    monkeypatch.delenv("HR_SETTINGS_MODULE", raising=False)
    monkeypatch.delenv("APP_ENV", raising=False)
    assert get_settings_module() == "config.development"
