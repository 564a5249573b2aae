"""Schemas describing the host being provisioned."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TargetState(str, Enum):
    """Lifecycle state of a target as reported by a backend."""

    ABSENT = "absent"
    STOPPED = "stopped"
    RUNNING = "running"


class TargetSizing(BaseModel):
    """Resources allocated to a container."""

    model_config = ConfigDict(frozen=True)

    cores: int = Field(2, ge=1, description="CPU cores")
    memory_mb: int = Field(2048, ge=16, description="Memory in MB")
    swap_mb: int = Field(512, ge=0, description="Swap in MB")
    disk_gb: int = Field(8, ge=1, description="Root disk size in GB")


class TargetSpec(BaseModel):
    """What the operator asked for.

    ``target_id`` may be omitted, in which case the backend allocates one.
    Pass it explicitly to re-run against an existing target.
    """

    target_id: str | None = Field(None, description="Container ID (CTID) or host name")
    name: str = Field("searxng", description="Display name")
    hostname: str = Field("searxng-server", pattern=r"^[a-zA-Z0-9]([a-zA-Z0-9-]{0,62})$")
    sizing: TargetSizing = Field(default_factory=TargetSizing)


class ProvisioningTarget(BaseModel):
    """The host being configured during a run.

    ``target_id`` is filled in by ``create_target`` when the backend allocates
    it. ``address`` stays ``None`` until the target has a routable IPv4 address.
    """

    target_id: str | None = None
    name: str
    hostname: str
    sizing: TargetSizing
    address: str | None = None

    @classmethod
    def from_spec(cls, spec: TargetSpec) -> "ProvisioningTarget":
        return cls(
            target_id=spec.target_id,
            name=spec.name,
            hostname=spec.hostname,
            sizing=spec.sizing,
        )
