"""Pydantic schemas for provisioning targets and the SearXNG settings file."""

from .service_config import (
    DEFAULT_ENGINES,
    DEFAULT_PLUGINS,
    Engine,
    ServiceConfig,
    generate_secret_key,
)
from .target import ProvisioningTarget, TargetSizing, TargetSpec, TargetState

__all__ = [
    "DEFAULT_ENGINES",
    "DEFAULT_PLUGINS",
    "Engine",
    "ProvisioningTarget",
    "ServiceConfig",
    "TargetSizing",
    "TargetSpec",
    "TargetState",
    "generate_secret_key",
]
