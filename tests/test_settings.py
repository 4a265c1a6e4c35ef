"""Tests for settings configuration loading."""

from __future__ import annotations

from textwrap import dedent

import pytest
from pydantic import ValidationError

from defi_overview.settings import DefiSettings, OutputFormat


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep the developer's config files and environment out of the tests."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    for name in (
        "DEFI_OVERVIEW_CONFIG",
        "DEFI_OVERVIEW_API_URL",
        "DEFI_OVERVIEW_API_KEY",
        "DEFI_OVERVIEW_PREMIUM",
        "DEFI_OVERVIEW_TASK_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = DefiSettings()

    assert settings.api_url == "http://127.0.0.1:4242/api/1"
    assert settings.api_key is None
    assert settings.premium is False
    assert settings.task_timeout == 600.0
    assert settings.output_format is OutputFormat.TABLE


def test_config_file_is_read_from_env_path(tmp_path, monkeypatch):
    config_path = tmp_path / "custom.toml"
    config_path.write_text(
        dedent(
            """
            [defi_overview]
            api_url = "http://backend:4242/api/1/"
            premium = true
            task_poll_interval = 0.5
            output_format = "json"
            """
        ).strip()
    )
    monkeypatch.setenv("DEFI_OVERVIEW_CONFIG", str(config_path))

    settings = DefiSettings()

    assert settings.api_url == "http://backend:4242/api/1"
    assert settings.premium is True
    assert settings.task_poll_interval == 0.5
    assert settings.output_format is OutputFormat.JSON


def test_local_config_file_is_discovered(tmp_path):
    (tmp_path / "defi-overview.toml").write_text("max_retries = 2\n")

    assert DefiSettings().max_retries == 2


def test_precedence_cli_over_env_over_file(tmp_path, monkeypatch):
    config_path = tmp_path / "config.toml"
    config_path.write_text('api_url = "http://file"\npremium = true\n')
    monkeypatch.setenv("DEFI_OVERVIEW_CONFIG", str(config_path))
    monkeypatch.setenv("DEFI_OVERVIEW_API_URL", "http://env")

    assert DefiSettings().api_url == "http://env"
    assert DefiSettings().premium is True
    assert DefiSettings(api_url="http://cli").api_url == "http://cli"


def test_api_key_in_config_file_is_rejected(tmp_path, monkeypatch):
    config_path = tmp_path / "config.toml"
    config_path.write_text('api_key = "hunter2"\n')
    monkeypatch.setenv("DEFI_OVERVIEW_CONFIG", str(config_path))

    with pytest.raises(ValueError, match="Security violation"):
        DefiSettings()


def test_api_key_from_env_is_redacted(monkeypatch):
    monkeypatch.setenv("DEFI_OVERVIEW_API_KEY", "hunter2")

    settings = DefiSettings()

    assert settings.api_key is not None
    assert settings.api_key.get_secret_value() == "hunter2"
    assert settings.as_safe_dict()["api_key"] == "***redacted***"
    assert "hunter2" not in str(settings.as_safe_dict())


def test_negative_task_timeout_is_rejected():
    with pytest.raises(ValidationError, match="task_timeout must be positive"):
        DefiSettings(task_timeout=-1)


def test_task_timeout_may_be_unset():
    assert DefiSettings(task_timeout=None).task_timeout is None


@pytest.mark.parametrize(
    "field, value",
    [
        ("request_timeout", 0),
        ("max_retries", 0),
        ("task_poll_interval", 0),
    ],
)
def test_non_positive_limits_are_rejected(field, value):
    with pytest.raises(ValidationError):
        DefiSettings(**{field: value})
