"""Provisioner - runs the step sequence against one target.

Execution is strictly sequential. The first failing step halts the run;
whatever earlier steps changed stays in place, and re-running picks up from
there because every step is idempotent.
"""

from collections.abc import Callable, Sequence
import time
import uuid

import structlog

from .backends import TargetBackend
from .config import Settings, get_settings
from .context import ProvisionContext, ProvisionState
from .errors import ProvisionError
from .logging import bind_run_context, clear_run_context
from .schemas import ProvisioningTarget, TargetSpec
from .steps import Step, default_steps

logger = structlog.get_logger()


class Provisioner:
    """Idempotent step sequencer."""

    def __init__(
        self,
        backend: TargetBackend,
        settings: Settings | None = None,
        steps: Sequence[Step] | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.backend = backend
        self.settings = settings or get_settings()
        self.steps = list(steps) if steps is not None else default_steps()
        self.sleep = sleep

    def new_context(self, spec: TargetSpec, regenerate_config: bool = False) -> ProvisionContext:
        return ProvisionContext(
            spec=spec,
            target=ProvisioningTarget.from_spec(spec),
            backend=self.backend,
            settings=self.settings,
            regenerate_config=regenerate_config,
            sleep=self.sleep,
        )

    def run(self, ctx: ProvisionContext) -> ProvisionContext:
        """Run every step in order against ``ctx``.

        Raises:
            ProvisionError: from the first failing step; ``ctx`` is left FAILED
        """
        ctx.run_id = uuid.uuid4().hex[:12]
        bind_run_context(ctx.run_id, ctx.target.target_id)
        try:
            return self._run_steps(ctx)
        finally:
            clear_run_context()

    def _run_steps(self, ctx: ProvisionContext) -> ProvisionContext:
        logger.info(
            "provisioning_start",
            backend=self.backend.name,
            hostname=ctx.target.hostname,
            steps=[step.name for step in self.steps],
        )
        start = time.time()

        for step in self.steps:
            try:
                step.run(ctx)
            except ProvisionError as e:
                ctx.fail(step.name)
                logger.error(
                    "provisioning_step_failed",
                    step=e.step,
                    error=e.message,
                    error_type=type(e).__name__,
                    cause_type=type(e.cause).__name__ if e.cause else None,
                )
                raise

        logger.info(
            "provisioning_complete",
            target_id=ctx.target.target_id,
            address=ctx.target.address,
            config_written=ctx.config_written,
            duration_sec=round(time.time() - start, 2),
        )
        return ctx

    def provision(self, spec: TargetSpec, regenerate_config: bool = False) -> ProvisioningTarget:
        """Provision ``spec`` and return the resulting target."""
        return self.run(self.new_context(spec, regenerate_config)).target


def provision(
    spec: TargetSpec,
    backend: TargetBackend,
    settings: Settings | None = None,
    *,
    regenerate_config: bool = False,
) -> ProvisioningTarget:
    """Bring ``spec`` from bare image to a verified running SearXNG.

    Raises:
        ProvisionError: naming the failing step and its cause
    """
    return Provisioner(backend, settings).provision(spec, regenerate_config=regenerate_config)


__all__ = ["Provisioner", "ProvisionState", "provision"]
