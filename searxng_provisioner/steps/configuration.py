"""Configuration steps: settings.yml and the systemd unit."""

import structlog

from ..config import Settings
from ..context import ProvisionContext, ProvisionState
from ..errors import FilesystemError, ServiceError
from ..rendering import render_unit
from ..schemas import ServiceConfig
from .base import Step

logger = structlog.get_logger()

CONFIG_MODE = "640"
UNIT_MODE = "644"


def build_service_config(settings: Settings) -> ServiceConfig:
    """Build a ServiceConfig with a freshly generated secret key."""
    return ServiceConfig(
        bind_address=settings.bind_address,
        port=settings.searxng_port,
        redis_url=settings.redis_url,
    )


class GenerateConfig(Step):
    """Write settings.yml readable only by owner and group.

    An existing file is kept unless the run asks for regeneration, so a
    re-run does not rotate the secret key. A kept file with the wrong mode or
    owner has them corrected in place.
    """

    name = "generate_config"
    error_class = FilesystemError
    advances_to = ProvisionState.CONFIG_WRITTEN

    def _expected_permissions(self, ctx: ProvisionContext) -> str:
        user = ctx.settings.service_user
        return f"{CONFIG_MODE}:{user}:{user}"

    def is_satisfied(self, ctx: ProvisionContext) -> bool:
        if ctx.regenerate_config:
            return False
        return ctx.shell.permissions_of(ctx.settings.settings_path) == (
            self._expected_permissions(ctx)
        )

    def apply(self, ctx: ProvisionContext) -> None:
        shell = ctx.shell
        s = ctx.settings

        if not ctx.regenerate_config and shell.path_exists(s.settings_path, "-f"):
            found = shell.permissions_of(s.settings_path)
            shell.run(["chmod", CONFIG_MODE, s.settings_path])
            shell.run(["chown", f"{s.service_user}:{s.service_user}", s.settings_path])
            logger.info(
                "config_permissions_fixed",
                path=s.settings_path,
                found=found,
                expected=self._expected_permissions(ctx),
            )
            return

        ctx.service_config = build_service_config(s)
        ctx.request_restart()
        shell.install_file(
            s.settings_path,
            ctx.service_config.render(),
            mode=CONFIG_MODE,
            owner=s.service_user,
            group=s.service_user,
        )
        ctx.config_written = True
        logger.info(
            "config_written",
            path=s.settings_path,
            port=ctx.service_config.port,
            engines=[engine.shortcut for engine in ctx.service_config.engines],
        )


class InstallServiceDefinition(Step):
    """Write the systemd unit when missing or different, then reload systemd."""

    name = "install_service_definition"
    error_class = ServiceError

    def is_satisfied(self, ctx: ProvisionContext) -> bool:
        shell = ctx.shell
        if shell.read_file(ctx.settings.unit_path) != render_unit(ctx.settings):
            return False
        return not shell.unit_needs_reload(ctx.settings.app_service)

    def apply(self, ctx: ProvisionContext) -> None:
        shell = ctx.shell
        ctx.request_restart()
        shell.install_file(ctx.settings.unit_path, render_unit(ctx.settings), mode=UNIT_MODE)
        shell.run(["systemctl", "daemon-reload"])
