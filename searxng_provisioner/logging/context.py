import structlog

RUN_CONTEXT_KEYS = ("run_id", "target_id", "step")


def bind_run_context(run_id: str, target_id: str | None = None) -> None:
    """Bind provisioning run identifiers for the current context.

    A ``target_id`` left over from an earlier run is dropped when none is given.
    """
    structlog.contextvars.bind_contextvars(run_id=run_id)
    if target_id is not None:
        structlog.contextvars.bind_contextvars(target_id=target_id)
    else:
        structlog.contextvars.unbind_contextvars("target_id")


def clear_run_context() -> None:
    """Remove run identifiers; process-wide fields such as ``service`` stay."""
    structlog.contextvars.unbind_contextvars(*RUN_CONTEXT_KEYS)
