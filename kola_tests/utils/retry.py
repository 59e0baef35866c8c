"""Bounded retry of an operation with fixed delay between attempts."""

import dataclasses
import logging
import time
import typing as tp

from kola_tests.cluster import errors

LOGGER = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True, order=True)
class RetryPolicy:
    max_attempts: int
    delay: float = 0.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            msg = f"Invalid `max_attempts` '{self.max_attempts}': must be >= 1"
            raise ValueError(msg)
        if self.delay < 0:
            msg = f"Invalid `delay` '{self.delay}': must be >= 0"
            raise ValueError(msg)

    @property
    def timeout(self) -> float:
        """Return the longest time spent waiting between attempts."""
        return (self.max_attempts - 1) * self.delay


def retry(
    policy: RetryPolicy,
    func: tp.Callable[[], tp.Any],
    *,
    sleep: tp.Callable[[float], None] | None = None,
) -> Exception | None:
    """Call `func` until it succeeds or the attempts are exhausted.

    The function signals failure by raising an exception. Between attempts (but not after
    the last one) the calling thread sleeps for `policy.delay` seconds.

    `FatalAbort` is not a failed attempt. The failure is already recorded in the (sub)test
    scope, so it is propagated immediately and the enclosing body stops.

    Returns:
        Exception | None: `None` on the first successful attempt, otherwise the exception
            raised by the last attempt. Exceptions from earlier attempts are discarded.
    """
    sleep_func = sleep or time.sleep
    last_err: Exception | None = None
    for attempt in range(1, policy.max_attempts + 1):
        try:
            func()
        except errors.FatalAbort:
            raise
        except Exception as err:
            last_err = err
            LOGGER.debug("Attempt %s/%s failed: %s", attempt, policy.max_attempts, err)
        else:
            return None

        if attempt < policy.max_attempts:
            sleep_func(policy.delay)

    return last_err
