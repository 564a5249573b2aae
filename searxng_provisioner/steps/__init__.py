"""The ordered provisioning step sequence."""

from .application import BuildPythonEnv, FetchApplicationSource
from .base import Step
from .configuration import GenerateConfig, InstallServiceDefinition, build_service_config
from .services import EnableAndStartServices, Verify
from .system import BootstrapOs, EnsureDirectories, EnsureServiceAccount, InstallDependencies
from .target import CreateTarget, StartTarget


def default_steps() -> list[Step]:
    """Return a fresh list of every step in execution order."""
    return [
        CreateTarget(),
        StartTarget(),
        BootstrapOs(),
        InstallDependencies(),
        EnsureServiceAccount(),
        EnsureDirectories(),
        FetchApplicationSource(),
        BuildPythonEnv(),
        GenerateConfig(),
        InstallServiceDefinition(),
        EnableAndStartServices(),
        Verify(),
    ]


__all__ = [
    "BootstrapOs",
    "BuildPythonEnv",
    "CreateTarget",
    "EnableAndStartServices",
    "EnsureDirectories",
    "EnsureServiceAccount",
    "FetchApplicationSource",
    "GenerateConfig",
    "InstallDependencies",
    "InstallServiceDefinition",
    "StartTarget",
    "Step",
    "Verify",
    "build_service_config",
    "default_steps",
]
