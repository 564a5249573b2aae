"""Proxmox VE LXC backend driven through ``pct`` and ``pvesh``."""

from collections.abc import Sequence
import re

import structlog

from ..config import Settings
from ..schemas import TargetSpec, TargetState
from .base import CommandFailed, CommandResult, TargetBackend, run_command

logger = structlog.get_logger()

IPV4_PATTERN = re.compile(r"inet\s+(\d{1,3}(?:\.\d{1,3}){3})")
CONTROL_TIMEOUT = 120


class LxcBackend(TargetBackend):
    """Containers on the local Proxmox node."""

    name = "lxc"

    def __init__(self, settings: Settings, interface: str = "eth0"):
        self.settings = settings
        self.interface = interface

    def _pct(self, *args: str, timeout: float = CONTROL_TIMEOUT) -> CommandResult:
        return run_command(["pct", *args], timeout=timeout)

    def next_id(self) -> str:
        """Ask the cluster for the next free VMID."""
        cmd = ["pvesh", "get", "/cluster/nextid"]
        result = run_command(cmd, timeout=CONTROL_TIMEOUT)
        if not result.ok:
            raise CommandFailed(cmd, result)
        return result.stdout.strip().strip('"')

    def status(self, target_id: str) -> TargetState:
        result = self._pct("status", target_id)
        if not result.ok:
            if "does not exist" in result.stderr:
                return TargetState.ABSENT
            raise CommandFailed(["pct", "status", target_id], result)

        # "status: running"
        state = result.stdout.split(":", 1)[-1].strip()
        return TargetState.RUNNING if state == "running" else TargetState.STOPPED

    def create_args(self, target_id: str, spec: TargetSpec) -> list[str]:
        s = self.settings
        sizing = spec.sizing
        return [
            "pct",
            "create",
            target_id,
            s.lxc_template,
            "--arch",
            s.lxc_arch,
            "--cores",
            str(sizing.cores),
            "--hostname",
            spec.hostname,
            "--memory",
            str(sizing.memory_mb),
            "--swap",
            str(sizing.swap_mb),
            "--rootfs",
            f"{s.lxc_storage}:{sizing.disk_gb}",
            "--features",
            "nesting=1",
            "--onboot",
            "1",
            "--net0",
            f"name={self.interface},bridge={s.lxc_bridge},ip=dhcp",
        ]

    def create(self, spec: TargetSpec) -> str:
        target_id = spec.target_id or self.next_id()
        cmd = self.create_args(target_id, spec)

        logger.info(
            "lxc_create_start",
            target_id=target_id,
            hostname=spec.hostname,
            cores=spec.sizing.cores,
            memory_mb=spec.sizing.memory_mb,
            swap_mb=spec.sizing.swap_mb,
            disk_gb=spec.sizing.disk_gb,
        )
        result = run_command(cmd, timeout=self.settings.command_timeout)
        if not result.ok:
            raise CommandFailed(cmd, result)
        return target_id

    def start(self, target_id: str) -> None:
        result = self._pct("start", target_id)
        if not result.ok:
            raise CommandFailed(["pct", "start", target_id], result)

    def exec(
        self,
        target_id: str,
        argv: Sequence[str],
        input: str | None = None,
        timeout: float | None = None,
    ) -> CommandResult:
        return run_command(["pct", "exec", target_id, "--", *argv], input=input, timeout=timeout)

    def get_address(self, target_id: str) -> str | None:
        result = self.exec(
            target_id, ["ip", "-4", "-o", "addr", "show", self.interface], timeout=30
        )
        if not result.ok:
            return None
        match = IPV4_PATTERN.search(result.stdout)
        return match.group(1) if match else None
