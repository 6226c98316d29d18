"""
tests/test_config.py -- SECRET_KEY policy in core/config.py.
"""

from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from core.config import Settings


def test_debug_generates_secret_key():
    settings = Settings(debug=True, secret_key="", _env_file=None)
    assert len(settings.secret_key) == 64


def test_debug_generated_key_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="vaultkeep.config"):
        Settings(debug=True, secret_key="", _env_file=None)
    assert "WARNING: Using auto-generated SECRET_KEY. Sessions will not persist across restarts." in caplog.messages


def test_production_requires_secret_key():
    with pytest.raises(ValidationError, match="SECRET_KEY is required"):
        Settings(debug=False, secret_key="", _env_file=None)


def test_short_secret_key_rejected():
    with pytest.raises(ValidationError, match="at least 32 characters"):
        Settings(debug=True, secret_key="too-short", _env_file=None)


def test_defaults():
    settings = Settings(debug=True, secret_key="x" * 32, _env_file=None)
    assert settings.token_expire_seconds == 3600
    assert settings.two_factor_step_seconds == 30
    assert settings.backup_code_count == 10
    assert settings.database_url.startswith("sqlite:///")
