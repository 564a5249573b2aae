"""Target lifecycle steps: create and start."""

import structlog

from ..context import ProvisionContext, ProvisionState
from ..errors import BackendError
from ..polling import PollTimeout, wait_until
from ..schemas import TargetState
from .base import Step

logger = structlog.get_logger()


class CreateTarget(Step):
    """Allocate the container unless one with the requested ID exists."""

    name = "create_target"
    error_class = BackendError
    advances_to = ProvisionState.TARGET_CREATED

    def is_satisfied(self, ctx: ProvisionContext) -> bool:
        target_id = ctx.target.target_id
        if target_id is None:
            return False
        return ctx.backend.status(target_id) is not TargetState.ABSENT

    def apply(self, ctx: ProvisionContext) -> None:
        spec = ctx.spec.model_copy(update={"target_id": ctx.target.target_id})
        target_id = ctx.backend.create(spec)
        ctx.target.target_id = target_id
        structlog.contextvars.bind_contextvars(target_id=target_id)
        logger.info("target_created", backend=ctx.backend.name)


class StartTarget(Step):
    """Start the target and wait until it runs commands."""

    name = "start_target"
    error_class = BackendError
    advances_to = ProvisionState.TARGET_RUNNING

    def _responsive(self, ctx: ProvisionContext) -> bool:
        return ctx.shell.succeeds(["true"], timeout=30)

    def is_satisfied(self, ctx: ProvisionContext) -> bool:
        status = ctx.backend.status(ctx.target.target_id)
        return status is TargetState.RUNNING and self._responsive(ctx)

    def apply(self, ctx: ProvisionContext) -> None:
        if ctx.backend.status(ctx.target.target_id) is not TargetState.RUNNING:
            ctx.backend.start(ctx.target.target_id)

        wait_until(
            lambda: self._responsive(ctx),
            description="target responsive",
            attempts=ctx.settings.start_attempts,
            interval=ctx.settings.start_interval,
            sleep=ctx.sleep,
        )

    def run(self, ctx: ProvisionContext) -> ProvisionContext:
        super().run(ctx)
        self.resolve_address(ctx)
        return ctx

    def resolve_address(self, ctx: ProvisionContext) -> None:
        """Record the target address. A missing address is not fatal here."""
        if ctx.target.address:
            return
        try:
            ctx.target.address = wait_until(
                lambda: ctx.backend.get_address(ctx.target.target_id),
                description="target address",
                attempts=ctx.settings.address_attempts,
                interval=ctx.settings.address_interval,
                sleep=ctx.sleep,
            )
            logger.info("target_address_resolved", address=ctx.target.address)
        except PollTimeout as e:
            logger.warning("target_address_unresolved", error=str(e))
