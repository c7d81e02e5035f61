from __future__ import annotations

import random
from collections.abc import Iterable

from ..errors import StateError


def build_gift_cycle(tokens: Iterable[str], rng: random.Random | None = None) -> dict[str, str]:
    """
    Returns giver token -> receiver token forming one cycle through everybody.

    The tokens are shuffled (Fisher-Yates, via random.shuffle) and each one
    gives to the next, the last wrapping round to the first. With n >= 2
    nobody can draw themselves, so there is no retry loop.

    Known limitation: this only ever produces single-cycle derangements
    (e.g. never two separate pairs among four people), so it does not sample
    uniformly among all derangements.
    """
    order = list(tokens)
    if len(order) < 2:
        raise StateError("At least two participants are required to shuffle.")

    (rng or random).shuffle(order)
    n = len(order)
    return {giver: order[(i + 1) % n] for i, giver in enumerate(order)}
