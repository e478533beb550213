from __future__ import annotations

from enum import Enum


class HealingStrategy(str, Enum):
    SELECTOR = "selector-healing"
    TIMING = "timing-healing"
    CONTENT = "content-healing"
    INTERACTION = "interaction-healing"
    GENERIC = "generic-healing"


_SIGNATURES: tuple[tuple[HealingStrategy, tuple[str, ...]], ...] = (
    (HealingStrategy.SELECTOR, ("element not found", "no such element")),
    (HealingStrategy.TIMING, ("timeout", "wait")),
    (HealingStrategy.CONTENT, ("expected", "assertion")),
    (HealingStrategy.INTERACTION, ("click", "interaction")),
)


def classify_failure(error: BaseException | str) -> HealingStrategy:
    """Maps an execution error to the healing family that should handle it.

    Signatures are checked in priority order, so an error mentioning both
    "no such element" and "timeout" is treated as a locator problem. For
    exceptions the class name takes part in the match (TimeoutException,
    AssertionError, ElementClickInterceptedException).
    """

    if isinstance(error, BaseException):
        message = f"{type(error).__name__} {error}".lower()
    else:
        message = error.lower()
    for strategy, needles in _SIGNATURES:
        if any(needle in message for needle in needles):
            return strategy
    return HealingStrategy.GENERIC
