"""Telemetry helpers: execution timing and scoped log context."""

import functools
import inspect
import logging
import time
import uuid
from collections.abc import Callable
from contextvars import Token
from typing import Any, ParamSpec, TypeVar, overload

from media_pipeline.commons.telemetry.logger import (
    correlation_id_var,
    get_log_context,
    get_logger,
    log_context_var,
)

P = ParamSpec("P")
R = TypeVar("R")


@overload
def timed(
    func: Callable[P, R],
) -> Callable[P, R]: ...


@overload
def timed(
    *,
    logger: logging.Logger | None = None,
    level: int = logging.DEBUG,
    threshold_ms: float | None = None,
) -> Callable[[Callable[P, R]], Callable[P, R]]: ...


def timed(
    func: Callable[P, R] | None = None,
    *,
    logger: logging.Logger | None = None,
    level: int = logging.DEBUG,
    threshold_ms: float | None = None,
) -> Callable[P, R] | Callable[[Callable[P, R]], Callable[P, R]]:
    """Log how long a sync or async callable took.

    Args:
        func: The function to decorate (when used without parentheses).
        logger: Optional logger instance. Defaults to the function's module logger.
        level: Log level for timing messages.
        threshold_ms: Only log when the call took at least this long.

    Returns:
        Decorated function.
    """

    def decorator(fn: Callable[P, R]) -> Callable[P, R]:
        log = logger or get_logger(fn.__module__)

        def report(started: float, failed: bool) -> None:
            elapsed_ms = (time.perf_counter() - started) * 1000
            if threshold_ms is not None and elapsed_ms < threshold_ms:
                return
            log.log(
                level,
                f"{fn.__qualname__} {'failed' if failed else 'completed'}",
                extra={"duration_ms": round(elapsed_ms, 2)},
            )

        if inspect.iscoroutinefunction(fn):

            @functools.wraps(fn)
            async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> Any:
                started = time.perf_counter()
                try:
                    result = await fn(*args, **kwargs)  # type: ignore[misc]
                except Exception:
                    report(started, failed=True)
                    raise
                report(started, failed=False)
                return result

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(fn)
        def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            started = time.perf_counter()
            try:
                result = fn(*args, **kwargs)
            except Exception:
                report(started, failed=True)
                raise
            report(started, failed=False)
            return result

        return sync_wrapper

    if func is not None:
        return decorator(func)
    return decorator


class LogContext:
    """Scope logging context (and optionally a fresh correlation ID) to a block.

    Usage::

        with LogContext(job_id=job.id, new_correlation_id=True):
            ...
    """

    def __init__(self, *, new_correlation_id: bool = False, **kwargs: Any) -> None:
        self.context = kwargs
        self.new_correlation_id = new_correlation_id
        self._context_token: Token[dict[str, Any] | None] | None = None
        self._cid_token: Token[str | None] | None = None

    def __enter__(self) -> "LogContext":
        self._context_token = log_context_var.set(
            {**get_log_context(), **self.context}
        )
        if self.new_correlation_id:
            self._cid_token = correlation_id_var.set(str(uuid.uuid4()))
        return self

    def __exit__(self, *args: Any) -> None:
        if self._cid_token is not None:
            correlation_id_var.reset(self._cid_token)
            self._cid_token = None
        if self._context_token is not None:
            log_context_var.reset(self._context_token)
            self._context_token = None
