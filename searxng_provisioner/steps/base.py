"""Base class for idempotent provisioning steps.

Each step is a guard/mutate pair:
- ``is_satisfied`` inspects the target and returns True when nothing needs doing
- ``apply`` performs the mutation

``run`` ties them together, logs the outcome, advances the run state and turns
any failure into the step's ``ProvisionError`` subclass.
"""

from abc import ABC, abstractmethod
import time

import structlog

from ..context import ProvisionContext, ProvisionState
from ..errors import ProvisionError

logger = structlog.get_logger()


class Step(ABC):
    """One idempotent unit of provisioning."""

    name: str = "step"
    error_class: type[ProvisionError] = ProvisionError
    advances_to: ProvisionState | None = None

    def is_satisfied(self, ctx: ProvisionContext) -> bool:
        """Return True when the target already is in the desired state."""
        return False

    @abstractmethod
    def apply(self, ctx: ProvisionContext) -> None:
        """Bring the target into the desired state."""

    def run(self, ctx: ProvisionContext) -> ProvisionContext:
        """Run guard then mutation.

        Raises:
            ProvisionError: the step's ``error_class`` wrapping the cause, or a
                ``ProvisionError`` raised by the step itself
        """
        structlog.contextvars.bind_contextvars(step=self.name)
        start = time.time()
        try:
            if self.is_satisfied(ctx):
                logger.info("step_skipped", reason="already_satisfied")
            else:
                logger.info("step_start")
                self.apply(ctx)
                logger.info("step_complete", duration_sec=round(time.time() - start, 2))
        except ProvisionError:
            raise
        except Exception as e:
            raise self.error_class(self.name, str(e), cause=e) from e
        finally:
            structlog.contextvars.unbind_contextvars("step")

        if self.advances_to is not None:
            ctx.advance(self.advances_to)
        return ctx

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
