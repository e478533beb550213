from __future__ import annotations

import time
from typing import Callable, TypeVar

T = TypeVar("T")


def wait_until(predicate: Callable[[], T], timeout: float, interval: float = 0.2) -> T:
    """Polls ``predicate`` until it is truthy or ``timeout`` seconds pass.

    The predicate is always evaluated at least once, so a zero timeout is a
    single check.
    """

    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        result = predicate()
        if result:
            return result
        time.sleep(min(interval, max(deadline - time.monotonic(), 0.0)))
    return predicate()
