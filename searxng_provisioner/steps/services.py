"""Service steps: start the cache and the app, then verify they serve."""

import httpx
import structlog

from ..context import ProvisionContext, ProvisionState
from ..errors import ServiceError, VerificationError
from ..polling import PollTimeout, wait_until
from .base import Step

logger = structlog.get_logger()


class EnableAndStartServices(Step):
    """Enable and start the cache service first, then SearXNG.

    A restart recorded by an earlier step, in this run or a failed earlier
    one, is carried out here; the marker is removed only once it succeeded.
    """

    name = "enable_and_start_services"
    error_class = ServiceError
    advances_to = ProvisionState.SERVICE_ENABLED

    def is_satisfied(self, ctx: ProvisionContext) -> bool:
        if ctx.restart_pending():
            return False
        shell = ctx.shell
        units = (ctx.settings.cache_service, ctx.settings.app_service)
        return all(shell.service_enabled(u) and shell.service_active(u) for u in units)

    def apply(self, ctx: ProvisionContext) -> None:
        shell = ctx.shell
        s = ctx.settings
        restart = ctx.restart_pending()

        shell.run(["systemctl", "enable", "--now", s.cache_service])
        wait_until(
            lambda: shell.service_active(s.cache_service),
            description=f"{s.cache_service} active",
            attempts=s.cache_ready_attempts,
            interval=s.cache_ready_interval,
            sleep=ctx.sleep,
        )

        shell.run(["systemctl", "enable", s.app_service])
        action = "restart" if restart else "start"
        shell.run(["systemctl", action, s.app_service])
        if restart:
            shell.run(["rm", "-f", s.restart_marker])
        logger.info("app_service_started", unit=s.app_service, action=action)
        ctx.restart_required = False


class Verify(Step):
    """Poll until the cache and app are active and the port accepts connections.

    Converts "every command exited 0" into "the service is reachable".
    """

    name = "verify"
    error_class = VerificationError
    advances_to = ProvisionState.VERIFIED

    def failing_checks(self, ctx: ProvisionContext) -> list[str]:
        shell = ctx.shell
        s = ctx.settings
        failures = []

        if not shell.service_active(s.cache_service):
            failures.append(f"{s.cache_service} not active")
        if not shell.service_active(s.app_service):
            failures.append(f"{s.app_service} not active")
        if s.searxng_port not in shell.listening_ports():
            failures.append(f"port {s.searxng_port} not listening")
        elif s.verify_http and ctx.target.address:
            url = f"http://{ctx.target.address}:{s.searxng_port}/healthz"
            if not self.http_healthy(url, s.http_timeout):
                failures.append(f"{url} not healthy")
        return failures

    @staticmethod
    def http_healthy(url: str, timeout: float) -> bool:
        try:
            response = httpx.get(url, timeout=timeout)
        except httpx.HTTPError as e:
            logger.debug("healthz_request_failed", url=url, error=str(e))
            return False
        return response.status_code == httpx.codes.OK

    def apply(self, ctx: ProvisionContext) -> None:
        if ctx.target.address is None:
            ctx.target.address = ctx.backend.get_address(ctx.target.target_id)

        failures: list[str] = []

        def probe() -> bool:
            failures[:] = self.failing_checks(ctx)
            return not failures

        try:
            wait_until(
                probe,
                description="service healthy",
                attempts=ctx.settings.verify_attempts,
                interval=ctx.settings.verify_interval,
                sleep=ctx.sleep,
            )
        except PollTimeout as e:
            raise VerificationError(
                self.name,
                f"checks failing after {e.attempts} attempts: {', '.join(failures)}",
                cause=e,
            ) from e
