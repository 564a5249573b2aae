"""Run state threaded through every provisioning step."""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
import time

from .backends import TargetBackend
from .config import Settings
from .schemas import ProvisioningTarget, ServiceConfig, TargetSpec
from .shell import TargetShell


class ProvisionState(str, Enum):
    """Per-run progress. States only move forward."""

    PENDING = "pending"
    TARGET_CREATED = "target_created"
    TARGET_RUNNING = "target_running"
    OS_PROVISIONED = "os_provisioned"
    APP_INSTALLED = "app_installed"
    CONFIG_WRITTEN = "config_written"
    SERVICE_ENABLED = "service_enabled"
    VERIFIED = "verified"
    FAILED = "failed"


STATE_ORDER = [state for state in ProvisionState if state is not ProvisionState.FAILED]


@dataclass
class ProvisionContext:
    """Everything a step may read or update."""

    spec: TargetSpec
    target: ProvisioningTarget
    backend: TargetBackend
    settings: Settings
    regenerate_config: bool = False
    sleep: Callable[[float], None] = time.sleep

    service_config: ServiceConfig | None = None
    state: ProvisionState = ProvisionState.PENDING
    history: list[ProvisionState] = field(default_factory=lambda: [ProvisionState.PENDING])
    failed_step: str | None = None
    run_id: str | None = None

    # Set by steps, consumed by later steps
    source_changed: bool = False
    config_written: bool = False
    restart_required: bool = False

    @property
    def shell(self) -> TargetShell:
        if self.target.target_id is None:
            raise RuntimeError("Target has no identifier yet")
        return TargetShell(
            self.backend, self.target.target_id, timeout=self.settings.command_timeout
        )

    def request_restart(self) -> None:
        """Record an outstanding app restart on the target itself.

        The marker survives a failed run, so the next run still restarts.
        """
        self.shell.run(["touch", self.settings.restart_marker])
        self.restart_required = True

    def restart_pending(self) -> bool:
        return self.restart_required or self.shell.path_exists(self.settings.restart_marker)

    def advance(self, state: ProvisionState) -> None:
        """Move to ``state``. Skipping or going back is a programming error."""
        if self.state is ProvisionState.FAILED:
            raise RuntimeError("Cannot advance a failed run")
        expected = STATE_ORDER[STATE_ORDER.index(self.state) + 1]
        if state is not expected:
            raise RuntimeError(f"Invalid transition {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    def fail(self, step: str) -> None:
        self.failed_step = step
        self.state = ProvisionState.FAILED
        self.history.append(ProvisionState.FAILED)
