"""OS-level steps: packages, service account, directories."""

import structlog

from ..context import ProvisionContext, ProvisionState
from ..errors import FilesystemError, PackageError
from .base import Step

logger = structlog.get_logger()

APT_CACHE = "/var/cache/apt/pkgcache.bin"
APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}


class BootstrapOs(Step):
    """Refresh the package index and upgrade base packages."""

    name = "bootstrap_os"
    error_class = PackageError

    def is_satisfied(self, ctx: ProvisionContext) -> bool:
        shell = ctx.shell
        mtime = shell.mtime_of(APT_CACHE)
        if mtime is None:
            return False
        now = int(shell.output(["date", "+%s"]))
        age = now - mtime
        logger.debug("apt_cache_age", age_sec=age, max_age_sec=ctx.settings.apt_cache_max_age)
        return age < ctx.settings.apt_cache_max_age

    def apply(self, ctx: ProvisionContext) -> None:
        shell = ctx.shell
        shell.run(["apt-get", "update"], env=APT_ENV)
        shell.run(["apt-get", "-y", "upgrade"], env=APT_ENV)


class InstallDependencies(Step):
    """Install runtime, build toolchain and crypto libraries."""

    name = "install_dependencies"
    error_class = PackageError
    advances_to = ProvisionState.OS_PROVISIONED

    def is_satisfied(self, ctx: ProvisionContext) -> bool:
        missing = ctx.shell.missing_packages(ctx.settings.packages)
        if missing:
            logger.info("packages_missing", packages=missing)
        return not missing

    def apply(self, ctx: ProvisionContext) -> None:
        ctx.shell.run(["apt-get", "install", "-y", *ctx.settings.packages], env=APT_ENV)


class EnsureServiceAccount(Step):
    """Create the unprivileged system account SearXNG runs as."""

    name = "ensure_service_account"
    error_class = FilesystemError

    def is_satisfied(self, ctx: ProvisionContext) -> bool:
        return ctx.shell.succeeds(["id", "-u", ctx.settings.service_user])

    def apply(self, ctx: ProvisionContext) -> None:
        s = ctx.settings
        ctx.shell.run(
            [
                "useradd",
                "--system",
                "--shell",
                "/usr/sbin/nologin",
                "--home-dir",
                s.install_dir,
                "--no-create-home",
                s.service_user,
            ]
        )


class EnsureDirectories(Step):
    """Create install and config directories owned by the service account."""

    name = "ensure_directories"
    error_class = FilesystemError

    def _owner(self, ctx: ProvisionContext) -> str:
        return f"{ctx.settings.service_user}:{ctx.settings.service_user}"

    def _directories(self, ctx: ProvisionContext) -> list[str]:
        return [ctx.settings.install_dir, ctx.settings.config_dir]

    def is_satisfied(self, ctx: ProvisionContext) -> bool:
        owner = self._owner(ctx)
        return all(ctx.shell.owner_of(path) == owner for path in self._directories(ctx))

    def apply(self, ctx: ProvisionContext) -> None:
        shell = ctx.shell
        owner = self._owner(ctx)
        for path in self._directories(ctx):
            if shell.owner_of(path) == owner:
                continue
            shell.run(["mkdir", "-p", path])
            shell.run(["chown", owner, path])
