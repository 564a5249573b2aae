"""Tests for provisioner settings."""

from pydantic import ValidationError
import pytest

from searxng_provisioner.config import DEFAULT_PACKAGES, Settings, get_settings


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.searxng_port == 8888  # noqa: PLR2004
    assert settings.service_user == "searxng"
    assert settings.packages == DEFAULT_PACKAGES
    assert "redis-server" in settings.packages
    assert settings.verify_http is False


def test_derived_paths():
    settings = Settings(_env_file=None)

    assert settings.src_dir == "/usr/local/searxng/searxng-src"
    assert settings.venv_python == "/usr/local/searxng/searx-pyenv/bin/python"
    assert settings.settings_path == "/etc/searxng/settings.yml"
    assert settings.unit_path == "/etc/systemd/system/searxng.service"
    assert settings.installed_rev_path == "/usr/local/searxng/searx-pyenv/.installed-rev"
    assert settings.restart_marker == "/usr/local/searxng/.restart-pending"


def test_env_override(monkeypatch):
    monkeypatch.setenv("LXC_STORAGE", "zfs-pool")
    monkeypatch.setenv("VERIFY_ATTEMPTS", "5")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings(_env_file=None)

    assert settings.lxc_storage == "zfs-pool"
    assert settings.verify_attempts == 5  # noqa: PLR2004
    assert settings.log_level == "DEBUG"


def test_invalid_log_level():
    with pytest.raises(ValidationError, match="Invalid log level"):
        Settings(_env_file=None, log_level="LOUD")


def test_attempts_must_be_positive():
    with pytest.raises(ValidationError, match="at least 1"):
        Settings(_env_file=None, verify_attempts=0)


def test_get_settings_is_cached():
    get_settings.cache_clear()
    try:
        assert get_settings() is get_settings()
    finally:
        get_settings.cache_clear()
