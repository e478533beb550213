from __future__ import annotations

from typing import Iterable

from uiheal.core.metadata import InteractiveElement


def deduplicate(elements: Iterable[InteractiveElement]) -> list[InteractiveElement]:
    """Keeps the most confident element per key, ordered by confidence.

    On equal confidence the first element seen for a key survives, and the
    final sort is stable so discovery order breaks ties between keys.
    """

    survivors: dict[str, InteractiveElement] = {}
    for element in elements:
        key = element.dedup_key
        current = survivors.get(key)
        if current is None or element.confidence > current.confidence:
            survivors[key] = element
    return sorted(survivors.values(), key=lambda item: item.confidence, reverse=True)
