"""Bounded attempt combinator used by the network-facing stages."""
from __future__ import annotations
import logging
import time
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    value: Optional[T] = None
    error: Optional[BaseException] = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value


def is_retryable(error: BaseException) -> bool:
    return bool(getattr(error, "retryable", False))


def attempt(
    operation: Callable[[], T],
    *,
    attempts: int = 3,
    delay: float = 2.0,
    should_retry: Callable[[BaseException], bool] = is_retryable,
    sleep: Callable[[float], None] = time.sleep,
    log_extra: Optional[dict] = None,
) -> Outcome[T]:
    """Run ``operation`` up to ``attempts`` times with a fixed ``delay`` between tries.

    Never raises for errors the operation throws: the last one is returned in
    the ``Outcome``. Errors ``should_retry`` rejects end the loop immediately.
    """
    if attempts < 1:
        raise ValueError("attempts must be >= 1")
    extra = log_extra or {}
    last: Optional[BaseException] = None
    for n in range(1, attempts + 1):
        try:
            return Outcome(value=operation(), attempts=n)
        except Exception as e:
            last = e
            log.warning("Attempt %d/%d failed: %s", n, attempts, e, extra=extra)
            if not should_retry(e):
                return Outcome(error=e, attempts=n)
            if n < attempts:
                sleep(delay)
    return Outcome(error=last, attempts=attempts)
