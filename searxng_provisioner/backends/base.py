"""Target control interface.

A backend knows how to create, start, query and run commands on one kind of
target. The provisioner core only talks to targets through this interface.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
import shlex
import subprocess
import time

import structlog

from ..schemas import TargetSpec, TargetState

logger = structlog.get_logger()

MAX_LOG_LENGTH = 1000
TIMEOUT_EXIT_CODE = 124


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one command."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class CommandFailed(Exception):
    """A command exited non-zero."""

    def __init__(self, argv: Sequence[str], result: CommandResult):
        self.argv = list(argv)
        self.result = result
        detail = (result.stderr or result.stdout).strip()[-MAX_LOG_LENGTH:]
        super().__init__(
            f"`{shlex.join(self.argv)}` exited with {result.exit_code}"
            + (f": {detail}" if detail else "")
        )


def run_command(
    cmd: Sequence[str],
    input: str | None = None,
    timeout: float | None = None,
) -> CommandResult:
    """Run a local command and capture its output.

    A timeout is reported as exit code 124 rather than raised, like coreutils
    ``timeout``.
    """
    start = time.time()
    try:
        process = subprocess.run(  # noqa: S603
            list(cmd),
            input=input,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        logger.error("command_timeout", command=cmd[0], timeout=timeout)
        return CommandResult(TIMEOUT_EXIT_CODE, "", f"Timeout after {timeout}s")

    duration = time.time() - start
    logger.debug(
        "command_complete",
        command=shlex.join(cmd)[:MAX_LOG_LENGTH],
        exit_code=process.returncode,
        duration_sec=round(duration, 2),
    )
    if process.returncode != 0 and process.stderr:
        logger.debug("command_stderr", output=process.stderr[-MAX_LOG_LENGTH:])

    return CommandResult(process.returncode, process.stdout, process.stderr)


class TargetBackend(ABC):
    """Create/start/exec/address operations plus a read-only status query."""

    name: str = "abstract"

    @abstractmethod
    def status(self, target_id: str) -> TargetState:
        """Report whether the target exists and is running."""

    @abstractmethod
    def create(self, spec: TargetSpec) -> str:
        """Allocate a target with the requested sizing and return its identifier."""

    @abstractmethod
    def start(self, target_id: str) -> None:
        """Start a stopped target."""

    @abstractmethod
    def exec(
        self,
        target_id: str,
        argv: Sequence[str],
        input: str | None = None,
        timeout: float | None = None,
    ) -> CommandResult:
        """Run ``argv`` inside the target. Never raises on non-zero exit."""

    @abstractmethod
    def get_address(self, target_id: str) -> str | None:
        """Return the target's IPv4 address, or None if it has none yet."""
