from .config import setup_logging
from .context import bind_run_context, clear_run_context

__all__ = ["setup_logging", "bind_run_context", "clear_run_context"]
