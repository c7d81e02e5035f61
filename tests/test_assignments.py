import random

import pytest

from santa.errors import StateError
from santa.services.assignments import build_gift_cycle


def _walk(mapping):
    start = next(iter(mapping))
    seen = [start]
    current = mapping[start]
    while current != start:
        seen.append(current)
        current = mapping[current]
    return seen


@pytest.mark.parametrize("n", [2, 3, 5, 12])
def test_gift_cycle_is_single_cycle_without_fixed_points(n):
    tokens = [f"t{i}" for i in range(n)]
    mapping = build_gift_cycle(tokens, rng=random.Random(n))

    assert set(mapping) == set(tokens)
    assert set(mapping.values()) == set(tokens)
    assert all(giver != receiver for giver, receiver in mapping.items())
    assert sorted(_walk(mapping)) == sorted(tokens)


def test_gift_cycle_two_people_swap():
    mapping = build_gift_cycle(["a", "b"], rng=random.Random(3))
    assert mapping == {"a": "b", "b": "a"}


def test_gift_cycle_deterministic_with_seed():
    tokens = ["a", "b", "c", "d", "e"]
    assert build_gift_cycle(tokens, rng=random.Random(42)) == build_gift_cycle(tokens, rng=random.Random(42))


def test_gift_cycle_does_not_reorder_input():
    tokens = ["a", "b", "c", "d"]
    build_gift_cycle(tokens, rng=random.Random(7))
    assert tokens == ["a", "b", "c", "d"]


@pytest.mark.parametrize("tokens", [[], ["solo"]])
def test_gift_cycle_needs_two_participants(tokens):
    with pytest.raises(StateError):
        build_gift_cycle(tokens)


def test_gift_cycle_never_splits_into_pairs():
    # Four people could be deranged as two swaps; the cycle construction never does that.
    tokens = ["a", "b", "c", "d"]
    for seed in range(50):
        mapping = build_gift_cycle(tokens, rng=random.Random(seed))
        assert len(_walk(mapping)) == 4
