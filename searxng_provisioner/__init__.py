"""Idempotent SearXNG provisioning for LXC containers and hosts."""

from .context import ProvisionContext, ProvisionState
from .errors import (
    BackendError,
    FilesystemError,
    NetworkError,
    PackageError,
    ProvisionError,
    ServiceError,
    VerificationError,
)
from .provisioner import Provisioner, provision

__all__ = [
    "BackendError",
    "FilesystemError",
    "NetworkError",
    "PackageError",
    "ProvisionContext",
    "ProvisionError",
    "ProvisionState",
    "Provisioner",
    "ServiceError",
    "VerificationError",
    "provision",
]
