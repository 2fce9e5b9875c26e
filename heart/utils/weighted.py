"""Cumulative-weight selection over heterogeneous candidates."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Generic, Optional, Protocol, Sequence, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    """Anything with a ``random()`` returning a float in [0, 1)."""

    def random(self) -> float:
        ...


@dataclass(frozen=True)
class Weighted(Generic[T]):
    """A candidate paired with its selection weight."""

    item: T
    weight: float


def pick_weighted(
    candidates: Sequence[Weighted[T]],
    rng: Optional[RandomSource] = None,
) -> Optional[T]:
    """Pick one candidate with probability proportional to its weight.

    Draws r in [0, W) and walks the candidates in declared order,
    subtracting each weight until r <= 0. The first candidate to cross
    zero wins. If floating-point rounding exhausts the list, the first
    candidate is returned.

    Returns:
        The selected item, or None when there are no candidates.
    """
    if not candidates:
        return None

    rng = rng or random
    total = sum(c.weight for c in candidates)
    r = rng.random() * total

    for candidate in candidates:
        r -= candidate.weight
        if r <= 0:
            return candidate.item

    return candidates[0].item


def choose(pool: Sequence[T], rng: Optional[RandomSource] = None) -> Optional[T]:
    """Uniformly pick one element using a single ``random()`` draw."""
    if not pool:
        return None
    rng = rng or random
    return pool[min(int(rng.random() * len(pool)), len(pool) - 1)]
