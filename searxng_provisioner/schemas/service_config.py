"""SearXNG settings file model.

A ``ServiceConfig`` is built once per run with a fresh secret key and rendered
to ``settings.yml``. It is never read back from the target.
"""

import secrets

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator
import yaml

SECRET_KEY_BYTES = 32  # 256 bits


def generate_secret_key() -> SecretStr:
    """Return a new random hex secret with 256 bits of entropy."""
    return SecretStr(secrets.token_hex(SECRET_KEY_BYTES))


class Engine(BaseModel):
    """An enabled search engine (data source)."""

    model_config = ConfigDict(frozen=True)

    name: str
    engine: str = Field(..., description="SearXNG engine module")
    shortcut: str = Field(..., description="Bang alias, e.g. !gg")


DEFAULT_ENGINES = (
    Engine(name="google", engine="google", shortcut="gg"),
    Engine(name="duckduckgo", engine="duckduckgo", shortcut="ddg"),
    Engine(name="wikipedia", engine="wikipedia", shortcut="wp"),
    Engine(name="github", engine="github", shortcut="gh"),
)

DEFAULT_PLUGINS = (
    "Hash plugin",
    "Self Information",
    "Tracker URL remover",
    "Ahmia blacklist",
)


class ServiceConfig(BaseModel):
    """Materialized SearXNG configuration."""

    model_config = ConfigDict(frozen=True)

    bind_address: str = "0.0.0.0"  # noqa: S104
    port: int = Field(8888, ge=1, le=65535)
    secret_key: SecretStr = Field(default_factory=generate_secret_key)
    redis_url: str = "redis://127.0.0.1:6379/0"

    # Feature toggles
    debug: bool = False
    limiter: bool = True
    image_proxy: bool = True

    instance_name: str = "SearXNG"
    safe_search: int = Field(2, ge=0, le=2)
    autocomplete: str = "google"

    enabled_plugins: tuple[str, ...] = DEFAULT_PLUGINS
    engines: tuple[Engine, ...] = DEFAULT_ENGINES

    @field_validator("engines")
    @classmethod
    def validate_unique_shortcuts(cls, v: tuple[Engine, ...]) -> tuple[Engine, ...]:
        shortcuts = [engine.shortcut for engine in v]
        if len(shortcuts) != len(set(shortcuts)):
            raise ValueError(f"Engine shortcuts must be unique: {shortcuts}")
        return v

    def to_settings(self) -> dict:
        """Build the settings.yml document. Key order is part of the format."""
        return {
            "use_default_settings": True,
            "general": {
                "debug": self.debug,
                "instance_name": self.instance_name,
                "privacypolicy_url": False,
                "contact_url": False,
            },
            "server": {
                "bind_address": self.bind_address,
                "port": self.port,
                "secret_key": self.secret_key.get_secret_value(),
                "limiter": self.limiter,
                "image_proxy": self.image_proxy,
            },
            "redis": {"url": self.redis_url},
            "ui": {"static_use_hash": True},
            "enabled_plugins": list(self.enabled_plugins),
            "search": {
                "safe_search": self.safe_search,
                "autocomplete": self.autocomplete,
            },
            "engines": [engine.model_dump() for engine in self.engines],
        }

    def render(self) -> str:
        """Render settings.yml content."""
        body = yaml.safe_dump(
            self.to_settings(),
            sort_keys=False,
            default_flow_style=False,
            allow_unicode=True,
        )
        return f"# SearXNG settings\n{body}"
