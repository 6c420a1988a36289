"""Context propagation for structured logging.

Fields pushed with :class:`log_context` are injected into every log record
emitted inside the scope. Context lives in a ContextVar; worker threads start
with an empty context, so tasks handed to an executor must be wrapped with
:func:`bind_log_context` to keep the submitting scope's fields.
"""

from contextvars import ContextVar, Token, copy_context
from typing import Any, Callable, Dict, Optional, TypeVar

T = TypeVar("T")

LogContextVar: ContextVar[Dict[str, Any]] = ContextVar("log_context", default={})


def get_log_context() -> Dict[str, Any]:
    """Get a copy of the current logging context."""
    return LogContextVar.get().copy()


def push_log_context(**kwargs) -> Token:
    """Merge new fields into the logging context.

    Args:
        **kwargs: Key-value pairs to add to the logging context

    Returns:
        Token that restores the previous context via pop_log_context()

    Example:
        >>> token = push_log_context(run_id="abc123", organization="Acme GmbH")
        >>> pop_log_context(token)
    """
    current = LogContextVar.get()
    return LogContextVar.set({**current, **kwargs})


def pop_log_context(token: Token) -> None:
    """Restore the logging context to the state captured in ``token``."""
    LogContextVar.reset(token)


def clear_log_context() -> None:
    """Clear all logging context fields (mainly for tests)."""
    LogContextVar.set({})


def bind_log_context(func: Callable[..., T]) -> Callable[..., T]:
    """Wrap ``func`` so it runs in a copy of the caller's context.

    Use when submitting work to a thread pool:

        >>> with log_context(organization="Acme GmbH"):
        ...     executor.submit(bind_log_context(task), arg)

    Each call of the returned wrapper runs in its own copy, so fields pushed
    inside the task never leak back to the submitter or to sibling tasks.
    """
    context = copy_context()

    def runner(*args: Any, **kwargs: Any) -> T:
        return context.copy().run(func, *args, **kwargs)

    return runner


class log_context:
    """Context manager for scoped logging context.

    Example:
        >>> with log_context(run_id="abc123", organization="Acme GmbH"):
        ...     logger.info("Processing organization")  # includes both fields
    """

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.token: Optional[Token] = None

    def __enter__(self):
        self.token = push_log_context(**self.kwargs)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.token is not None:
            pop_log_context(self.token)
        return False
