from __future__ import annotations

from collections.abc import Callable
import time
from typing import TypeVar

T = TypeVar("T")


def retry(
    func: Callable[[], T],
    attempts: int = 3,
    delay_seconds: float = 0.05,
    retry_on: tuple[type[Exception], ...] = (Exception,),
    should_retry: Callable[[Exception], bool] | None = None,
    on_error: Callable[[Exception, int], None] | None = None,
) -> T:
    """Call ``func`` until it succeeds, re-raising the last error once
    ``attempts`` are used up or ``should_retry`` rejects it."""
    if attempts < 1:
        raise ValueError("attempts must be >= 1")
    for attempt in range(1, attempts + 1):
        try:
            return func()
        except retry_on as exc:
            if should_retry is not None and not should_retry(exc):
                raise
            if on_error:
                on_error(exc, attempt)
            if attempt >= attempts:
                raise
            if delay_seconds > 0:
                time.sleep(delay_seconds * attempt)
    raise AssertionError("unreachable")
