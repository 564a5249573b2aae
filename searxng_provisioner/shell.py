"""Command helpers bound to one target.

Steps never build ``pct exec`` lines or parse tool output themselves; they go
through ``TargetShell`` so the same step works against every backend.
"""

from collections.abc import Mapping, Sequence

import structlog

from .backends import CommandFailed, CommandResult, TargetBackend

logger = structlog.get_logger()


class TargetShell:
    """Run argv lists on a target through its backend."""

    def __init__(self, backend: TargetBackend, target_id: str, timeout: float | None = None):
        self.backend = backend
        self.target_id = target_id
        self.timeout = timeout

    def run(
        self,
        argv: Sequence[str],
        *,
        input: str | None = None,
        user: str | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
        timeout: float | None = None,
    ) -> CommandResult:
        """Run a command, optionally as ``user`` and with extra ``env``.

        Raises:
            CommandFailed: if ``check`` and the command exited non-zero
        """
        cmd = list(argv)
        if env:
            cmd = ["env", *(f"{key}={value}" for key, value in env.items()), *cmd]
        if user:
            cmd = ["runuser", "-u", user, "--", *cmd]

        result = self.backend.exec(
            self.target_id, cmd, input=input, timeout=timeout or self.timeout
        )
        if check and not result.ok:
            raise CommandFailed(cmd, result)
        return result

    def succeeds(self, argv: Sequence[str], **kwargs) -> bool:
        return self.run(argv, check=False, **kwargs).ok

    def output(self, argv: Sequence[str], **kwargs) -> str:
        return self.run(argv, **kwargs).stdout.strip()

    # === Files ===

    def path_exists(self, path: str, test_flag: str = "-e") -> bool:
        return self.succeeds(["test", test_flag, path])

    def read_file(self, path: str) -> str | None:
        result = self.run(["cat", path], check=False)
        return result.stdout if result.ok else None

    def owner_of(self, path: str) -> str | None:
        """Return ``user:group`` of a path, or None if it does not exist."""
        result = self.run(["stat", "-c", "%U:%G", path], check=False)
        return result.stdout.strip() if result.ok else None

    def permissions_of(self, path: str) -> str | None:
        """Return ``mode:user:group`` (e.g. ``640:searxng:searxng``), or None."""
        result = self.run(["stat", "-c", "%a:%U:%G", path], check=False)
        return result.stdout.strip() if result.ok else None

    def mtime_of(self, path: str) -> int | None:
        result = self.run(["stat", "-c", "%Y", path], check=False)
        return int(result.stdout.strip()) if result.ok else None

    def install_file(
        self,
        path: str,
        content: str,
        mode: str,
        owner: str | None = None,
        group: str | None = None,
    ) -> None:
        """Write ``content`` to ``path`` with mode and ownership set in one call."""
        cmd = ["install", "-m", mode]
        if owner:
            cmd += ["-o", owner]
        if group:
            cmd += ["-g", group]
        cmd += ["/dev/stdin", path]
        self.run(cmd, input=content)

    # === Packages ===

    def missing_packages(self, packages: Sequence[str]) -> list[str]:
        """Return the subset of ``packages`` dpkg does not report as installed."""
        result = self.run(
            ["dpkg-query", "-W", "-f=${Package} ${Status}\\n", *packages], check=False
        )
        installed = set()
        for line in result.stdout.splitlines():
            name, _, status = line.partition(" ")
            if status.strip() == "install ok installed":
                installed.add(name)
        return [pkg for pkg in packages if pkg not in installed]

    # === Services ===

    def service_active(self, unit: str) -> bool:
        return self.succeeds(["systemctl", "is-active", "--quiet", unit])

    def service_enabled(self, unit: str) -> bool:
        return self.succeeds(["systemctl", "is-enabled", "--quiet", unit])

    def unit_needs_reload(self, unit: str) -> bool:
        """True when the unit file changed on disk since systemd last loaded it."""
        result = self.run(
            ["systemctl", "show", "-p", "NeedDaemonReload", "--value", unit], check=False
        )
        return result.ok and result.stdout.strip() == "yes"

    def listening_ports(self) -> set[int]:
        """TCP ports in LISTEN state on the target."""
        result = self.run(["ss", "-Htln"], check=False)
        ports = set()
        for line in result.stdout.splitlines():
            fields = line.split()
            if len(fields) < 4:  # noqa: PLR2004
                continue
            _, _, port = fields[3].rpartition(":")
            if port.isdigit():
                ports.add(int(port))
        return ports
