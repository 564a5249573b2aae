"""Target backends."""

from ..config import Settings
from .base import CommandFailed, CommandResult, TargetBackend, run_command
from .local import LocalBackend
from .lxc import LxcBackend

BACKENDS = ("lxc", "local")


def get_backend(name: str, settings: Settings) -> TargetBackend:
    """Instantiate a backend by name."""
    if name == "lxc":
        return LxcBackend(settings)
    if name == "local":
        return LocalBackend()
    raise ValueError(f"Unknown backend: {name}. Must be one of {BACKENDS}")


__all__ = [
    "BACKENDS",
    "CommandFailed",
    "CommandResult",
    "LocalBackend",
    "LxcBackend",
    "TargetBackend",
    "get_backend",
    "run_command",
]
