from random import Random

import pytest

from factories import make_allocation

from token_reshuffle.allocation import Allocation
from token_reshuffle.state import SearchState


@pytest.fixture
def two_owner_initial() -> list[Allocation]:
    """alice holds categories 0 and 1, bob holds categories 2 and 3."""
    return [
        make_allocation("alice", [(0, 0), (1, 1)]),
        make_allocation("bob", [(2, 2), (3, 3)]),
    ]


@pytest.fixture
def two_owner_state(two_owner_initial: list[Allocation]) -> SearchState:
    return SearchState(initial=two_owner_initial, rng=Random(7))


@pytest.fixture
def four_owner_state() -> SearchState:
    """Four owners over eight categories, one with a duplicate category."""
    initial = [
        make_allocation("a", [(10, 0), (11, 0), (12, 1)], num_categories=8),
        make_allocation("b", [(20, 2), (21, 3)], num_categories=8),
        make_allocation("c", [(30, 4), (31, 5), (32, 6)], num_categories=8),
        make_allocation("d", [(40, 7), (41, 1)], num_categories=8),
    ]
    return SearchState(initial=initial, rng=Random(1234))


@pytest.fixture
def two_owner_submissions() -> dict[str, list[tuple[int, int]]]:
    return {
        "bob": [(2, 2), (3, 3)],
        "alice": [(0, 0), (1, 1)],
    }
