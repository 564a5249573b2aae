"""Provisioner configuration with pydantic-settings.

Every field can be overridden from the environment or a local ``.env`` file,
e.g. ``LXC_STORAGE=zfs-pool`` or ``VERIFY_ATTEMPTS=30``.

Usage:
    from searxng_provisioner.config import get_settings

    settings = get_settings()
    settings.settings_path  # /etc/searxng/settings.yml
"""

from functools import lru_cache
from pathlib import PurePosixPath
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PACKAGES = (
    "redis-server",
    "git",
    "python3-pip",
    "python3-venv",
    "build-essential",
    "python3-dev",
    "libffi-dev",
    "libssl-dev",
    "python3-yaml",
    "iproute2",
)


class Settings(BaseSettings):
    """Provisioner settings.

    All fields have defaults matching a stock SearXNG install on Debian 12.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Logging ===

    service_name: str = Field(
        default="searxng-provisioner",
        description="Service name for structured logging",
    )
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )

    # === LXC backend defaults ===

    lxc_template: str = Field(
        default="local:vztmpl/debian-12-standard_12.2-1_amd64.tar.zst",
        description="Container OS template volume",
    )
    lxc_storage: str = Field(default="local-lvm", description="Storage for the root disk")
    lxc_bridge: str = Field(default="vmbr0", description="Bridge for eth0")
    lxc_arch: str = Field(default="amd64")

    # === Install layout ===

    service_user: str = Field(default="searxng", description="Unprivileged service account")
    install_dir: str = Field(default="/usr/local/searxng")
    config_dir: str = Field(default="/etc/searxng")
    unit_dir: str = Field(default="/etc/systemd/system")
    app_service: str = Field(default="searxng", description="systemd unit name of the app")
    cache_service: str = Field(default="redis-server", description="systemd unit of the cache")
    repo_url: str = Field(default="https://github.com/searxng/searxng.git")
    packages: tuple[str, ...] = Field(default=DEFAULT_PACKAGES)

    # === SearXNG settings ===

    bind_address: str = Field(
        default="0.0.0.0",  # noqa: S104
        description="Address SearXNG listens on",
    )
    searxng_port: int = Field(default=8888, ge=1, le=65535)
    redis_url: str = Field(default="redis://127.0.0.1:6379/0")

    # === Timeouts and polling ===

    command_timeout: int = Field(
        default=1200,
        ge=1,
        description="Per-command timeout in seconds (apt and pip can be slow)",
    )
    apt_cache_max_age: int = Field(
        default=3600,
        ge=0,
        description="Package index younger than this (seconds) is considered fresh",
    )
    start_attempts: int = Field(default=30, description="Polls while the target boots")
    start_interval: float = Field(default=1.0, ge=0)
    address_attempts: int = Field(default=15, description="Polls for a DHCP address")
    address_interval: float = Field(default=2.0, ge=0)
    cache_ready_attempts: int = Field(default=10)
    cache_ready_interval: float = Field(default=1.0, ge=0)
    verify_attempts: int = Field(default=20)
    verify_interval: float = Field(default=3.0, ge=0)

    # === Verification ===

    verify_http: bool = Field(
        default=False,
        description="Also GET /healthz on the target address from this host",
    )
    http_timeout: float = Field(default=5.0, gt=0)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper_v

    @field_validator(
        "start_attempts", "address_attempts", "cache_ready_attempts", "verify_attempts"
    )
    @classmethod
    def validate_attempts(cls, v: int) -> int:
        """Polls are bounded, but must try at least once."""
        if v < 1:
            raise ValueError("Poll attempts must be at least 1")
        return v

    @property
    def src_dir(self) -> str:
        return str(PurePosixPath(self.install_dir) / "searxng-src")

    @property
    def venv_dir(self) -> str:
        return str(PurePosixPath(self.install_dir) / "searx-pyenv")

    @property
    def venv_python(self) -> str:
        return str(PurePosixPath(self.venv_dir) / "bin" / "python")

    @property
    def installed_rev_path(self) -> str:
        """Source revision the venv was last built from."""
        return str(PurePosixPath(self.venv_dir) / ".installed-rev")

    @property
    def restart_marker(self) -> str:
        """Present while the app has a restart outstanding."""
        return str(PurePosixPath(self.install_dir) / ".restart-pending")

    @property
    def settings_path(self) -> str:
        return str(PurePosixPath(self.config_dir) / "settings.yml")

    @property
    def unit_path(self) -> str:
        return str(PurePosixPath(self.unit_dir) / f"{self.app_service}.service")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
