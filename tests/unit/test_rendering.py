"""Tests for the systemd unit."""

from searxng_provisioner.config import Settings
from searxng_provisioner.rendering import render_unit


def test_default_unit(settings):
    unit = render_unit(settings)

    assert "After=network.target redis-server.service\n" in unit
    assert "Wants=redis-server.service\n" in unit
    assert "User=searxng\nGroup=searxng\n" in unit
    assert 'Environment="SEARXNG_SETTINGS_PATH=/etc/searxng/settings.yml"\n' in unit
    assert "ExecStart=/usr/local/searxng/searx-pyenv/bin/python -m searx.webapp\n" in unit
    assert "WorkingDirectory=/usr/local/searxng/searxng-src\n" in unit
    assert "Restart=always\n" in unit
    assert unit.endswith("[Install]\nWantedBy=multi-user.target\n")


def test_unit_follows_layout():
    settings = Settings(_env_file=None, install_dir="/opt/searxng", service_user="search")

    unit = render_unit(settings)

    assert "User=search\n" in unit
    assert "ExecStart=/opt/searxng/searx-pyenv/bin/python -m searx.webapp\n" in unit


def test_render_is_deterministic(settings):
    assert render_unit(settings) == render_unit(settings)
