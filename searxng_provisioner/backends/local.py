"""Backend for provisioning the machine the provisioner runs on."""

from collections.abc import Sequence
import socket

from ..schemas import TargetSpec, TargetState
from .base import CommandResult, TargetBackend, run_command


class LocalBackend(TargetBackend):
    """The current host. It always exists and is always running."""

    name = "local"

    def status(self, target_id: str) -> TargetState:
        return TargetState.RUNNING

    def create(self, spec: TargetSpec) -> str:
        raise RuntimeError("The local backend cannot create targets")

    def start(self, target_id: str) -> None:
        raise RuntimeError("The local backend cannot start targets")

    def exec(
        self,
        target_id: str,
        argv: Sequence[str],
        input: str | None = None,
        timeout: float | None = None,
    ) -> CommandResult:
        return run_command(argv, input=input, timeout=timeout)

    def get_address(self, target_id: str) -> str | None:
        result = run_command(["hostname", "-I"], timeout=10)
        if result.ok and result.stdout.split():
            return result.stdout.split()[0]
        return None

    @staticmethod
    def default_target_id() -> str:
        return socket.gethostname()
