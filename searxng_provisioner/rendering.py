"""systemd unit rendering."""

from .config import Settings

UNIT_TEMPLATE = """\
[Unit]
Description=SearXNG service
After=network.target {cache_service}.service
Wants={cache_service}.service

[Service]
Type=simple
User={user}
Group={user}
Environment="SEARXNG_SETTINGS_PATH={settings_path}"
ExecStart={python} -m searx.webapp
WorkingDirectory={src_dir}
Restart=always

[Install]
WantedBy=multi-user.target
"""


def render_unit(settings: Settings) -> str:
    """Render the SearXNG service unit for the configured layout."""
    return UNIT_TEMPLATE.format(
        cache_service=settings.cache_service,
        user=settings.service_user,
        settings_path=settings.settings_path,
        python=settings.venv_python,
        src_dir=settings.src_dir,
    )
