"""Cooperative cancellation for blocking model and tool calls."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import (
    ThreadPoolExecutor,
    TimeoutError as FutureTimeoutError,
)
from typing import (
    Any,
    Callable,
    TypeVar,
)

from thinkact.core.errors import RunCancelledError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_POLL_INTERVAL = 0.1


class CancellationToken:
    """Signal shared between a run and whoever may want to stop it."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise :class:`RunCancelledError` if cancellation was requested."""
        if self._event.is_set():
            raise RunCancelledError("The run was cancelled.")


def run_cancellable(
    fn: Callable[..., T], token: CancellationToken | None, *args: Any, **kwargs: Any
) -> T:
    """
    Call *fn* and return its result, giving up as soon as *token* is cancelled.

    Without a token the call runs inline.  With one, it runs on a worker thread while the caller
    polls the token; a cancelled call is abandoned and its eventual result discarded.

    Raises
    ------
    RunCancelledError
        If the token is cancelled before or while *fn* runs.
    """
    if token is None:
        return fn(*args, **kwargs)

    token.raise_if_cancelled()
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="thinkact-call")
    try:
        future = executor.submit(fn, *args, **kwargs)
        while True:
            try:
                return future.result(timeout=_POLL_INTERVAL)
            except FutureTimeoutError:
                if token.cancelled:
                    future.cancel()
                    logger.info("Abandoning %s after cancellation", getattr(fn, "__name__", fn))
                    raise RunCancelledError("The run was cancelled.") from None
    finally:
        executor.shutdown(wait=False)
