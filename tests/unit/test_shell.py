"""Tests for TargetShell command wrapping and output parsing."""

from unittest.mock import MagicMock

import pytest

from searxng_provisioner.backends import CommandFailed, CommandResult
from searxng_provisioner.shell import TargetShell

SS_OUTPUT = """\
LISTEN 0      511        127.0.0.1:6379      0.0.0.0:*
LISTEN 0      4096         0.0.0.0:8888      0.0.0.0:*
LISTEN 0      128             [::]:22           [::]:*
"""


@pytest.fixture
def backend():
    backend = MagicMock()
    backend.exec.return_value = CommandResult(0, "")
    return backend


@pytest.fixture
def shell(backend):
    return TargetShell(backend, "101", timeout=60)


class TestRun:
    def test_plain_command(self, backend, shell):
        shell.run(["systemctl", "daemon-reload"])

        backend.exec.assert_called_once_with(
            "101", ["systemctl", "daemon-reload"], input=None, timeout=60
        )

    def test_user_and_env_wrapping(self, backend, shell):
        shell.run(["git", "pull"], user="searxng", env={"HOME": "/usr/local/searxng"})

        argv = backend.exec.call_args.args[1]
        assert argv == [
            "runuser",
            "-u",
            "searxng",
            "--",
            "env",
            "HOME=/usr/local/searxng",
            "git",
            "pull",
        ]

    def test_per_call_timeout_wins(self, backend, shell):
        shell.run(["true"], timeout=5)

        assert backend.exec.call_args.kwargs["timeout"] == 5  # noqa: PLR2004

    def test_failure_raises(self, backend, shell):
        backend.exec.return_value = CommandResult(100, "", "E: Unable to locate package")

        with pytest.raises(CommandFailed, match="Unable to locate package") as exc_info:
            shell.run(["apt-get", "install", "-y", "nope"])

        assert exc_info.value.result.exit_code == 100  # noqa: PLR2004

    def test_unchecked_failure_returns_result(self, backend, shell):
        backend.exec.return_value = CommandResult(1, "", "")

        assert shell.run(["test", "-d", "/nope"], check=False).exit_code == 1
        assert shell.succeeds(["test", "-d", "/nope"]) is False


class TestFiles:
    def test_install_file_passes_content_on_stdin(self, backend, shell):
        shell.install_file("/etc/searxng/settings.yml", "a: 1\n", "640", "searxng", "searxng")

        backend.exec.assert_called_once_with(
            "101",
            [
                "install",
                "-m",
                "640",
                "-o",
                "searxng",
                "-g",
                "searxng",
                "/dev/stdin",
                "/etc/searxng/settings.yml",
            ],
            input="a: 1\n",
            timeout=60,
        )

    def test_read_missing_file(self, backend, shell):
        backend.exec.return_value = CommandResult(1, "", "No such file")

        assert shell.read_file("/etc/searxng/settings.yml") is None

    def test_owner_and_mtime(self, backend, shell):
        backend.exec.side_effect = [
            CommandResult(0, "searxng:searxng\n"),
            CommandResult(0, "1700000000\n"),
        ]

        assert shell.owner_of("/etc/searxng") == "searxng:searxng"
        assert shell.mtime_of("/var/cache/apt/pkgcache.bin") == 1_700_000_000  # noqa: PLR2004


class TestQueries:
    def test_missing_packages(self, backend, shell):
        backend.exec.return_value = CommandResult(
            1,
            "git install ok installed\nredis-server deinstall ok config-files\n",
            "dpkg-query: no packages found matching python3-venv",
        )

        missing = shell.missing_packages(["git", "redis-server", "python3-venv"])

        assert missing == ["redis-server", "python3-venv"]

    def test_listening_ports(self, backend, shell):
        backend.exec.return_value = CommandResult(0, SS_OUTPUT)

        assert shell.listening_ports() == {6379, 8888, 22}

    def test_service_checks(self, backend, shell):
        backend.exec.return_value = CommandResult(3, "")

        assert shell.service_active("searxng") is False
        assert backend.exec.call_args.args[1] == ["systemctl", "is-active", "--quiet", "searxng"]

    def test_permissions_of(self, backend, shell):
        backend.exec.return_value = CommandResult(0, "640:searxng:searxng\n")

        assert shell.permissions_of("/etc/searxng/settings.yml") == "640:searxng:searxng"
        assert backend.exec.call_args.args[1] == [
            "stat",
            "-c",
            "%a:%U:%G",
            "/etc/searxng/settings.yml",
        ]

    def test_unit_needs_reload(self, backend, shell):
        backend.exec.return_value = CommandResult(0, "yes\n")
        assert shell.unit_needs_reload("searxng") is True

        backend.exec.return_value = CommandResult(0, "no\n")
        assert shell.unit_needs_reload("searxng") is False
        assert backend.exec.call_args.args[1] == [
            "systemctl",
            "show",
            "-p",
            "NeedDaemonReload",
            "--value",
            "searxng",
        ]
