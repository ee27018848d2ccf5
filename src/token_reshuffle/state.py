"""Search state explored by the annealing loop."""

from collections.abc import Sequence
from random import Random

from token_reshuffle.allocation import (
    Allocation,
    ScorePenalties,
    ScoreWeights,
    aggregate_penalties,
    pool_tokens,
    total_tokens,
)
from token_reshuffle.errors import InputValidationError

__all__ = [
    "SearchState",
]


class SearchState:
    """Initial and current allocations plus a cached aggregate score.

    The cache holds the integer penalty totals of the non-pool allocations;
    the score is derived from them and the weights, so it never drifts from
    a recompute however many moves are applied.

    `initial` is the read-only reference; position `i` of `initial` and
    `current` always denotes the same owner. Neighbor states share every
    untouched allocation with their parent and own fresh copies of the two
    allocations a move touches, so no allocation is ever mutated after it
    has been handed to a state.
    """

    __slots__ = (
        "_cached_score",
        "_penalties",
        "_pool_tokens",
        "current",
        "initial",
        "rng",
        "weights",
    )

    def __init__(
        self,
        *,
        initial: Sequence[Allocation],
        rng: Random,
        weights: ScoreWeights = ScoreWeights(),
    ) -> None:
        _validate_allocations(initial)
        self.initial: tuple[Allocation, ...] = tuple(initial)
        self.current: list[Allocation] = list(initial)
        self.rng = rng
        self.weights = weights
        self._penalties = aggregate_penalties(
            current=self.current, initial=self.initial
        )
        self._pool_tokens = pool_tokens(self.current)
        self._cached_score = weights.combine(
            self._penalties, pool_tokens=self._pool_tokens
        )

    def num_allocations(self) -> int:
        return len(self.initial)

    def num_tokens(self) -> int:
        return total_tokens(self.current)

    def num_pool_tokens(self) -> int:
        return self._pool_tokens

    def penalties(self) -> ScorePenalties:
        """Cached penalty totals of the non-pool allocations."""
        return self._penalties

    def score(self) -> float:
        """Cached aggregate score of `current` against `initial`."""
        return self._cached_score

    def energy(self) -> float:
        return -self._cached_score

    def _copy_shallow(self) -> "SearchState":
        clone = SearchState.__new__(SearchState)
        clone.initial = self.initial
        clone.current = list(self.current)
        clone.rng = self.rng
        clone.weights = self.weights
        clone._penalties = self._penalties
        clone._pool_tokens = self._pool_tokens
        clone._cached_score = self._cached_score
        return clone

    def swap(
        self,
        allocation_a: int,
        token_a: int,
        allocation_b: int,
        token_b: int,
    ) -> None:
        """Exchange one token between two allocations of this state.

        The two allocations are replaced by copies before the exchange, and
        only their score contributions are recomputed.
        """
        a = self.current[allocation_a].copy()
        b = self.current[allocation_b].copy()
        initial_a = self.initial[allocation_a]
        initial_b = self.initial[allocation_b]

        penalties = self._penalties.minus(a.counted_penalties(initial_a)).minus(
            b.counted_penalties(initial_b)
        )

        a.exchange_tokens(b, token_a, token_b)

        self._penalties = penalties.plus(a.counted_penalties(initial_a)).plus(
            b.counted_penalties(initial_b)
        )
        self._cached_score = self.weights.combine(
            self._penalties, pool_tokens=self._pool_tokens
        )

        self.current[allocation_a] = a
        self.current[allocation_b] = b

    def neighbor(self) -> "SearchState":
        """Return a new state differing by one token swap between two owners."""
        allocation_a = allocation_b = 0
        while allocation_a == allocation_b:
            # a swap within one allocation leaves the state unchanged
            allocation_a = self.rng.randrange(self.num_allocations())
            allocation_b = self.rng.randrange(self.num_allocations())

        token_a = self.current[allocation_a].draw_random_token_index(self.rng)
        token_b = self.current[allocation_b].draw_random_token_index(self.rng)

        neighbor = self._copy_shallow()
        neighbor.swap(allocation_a, token_a, allocation_b, token_b)
        return neighbor


def _validate_allocations(allocations: Sequence[Allocation]) -> None:
    """Check the allocation list can be searched.

    Raises:
        InputValidationError: If there are fewer than two allocations, any
            allocation is empty, or category widths differ.
    """
    if len(allocations) < 2:  # noqa: PLR2004
        msg = f"at least two allocations are required, got {len(allocations)}"
        raise InputValidationError(msg)

    widths = {allocation.num_categories for allocation in allocations}
    if len(widths) != 1:
        msg = f"allocations disagree on the number of categories: {sorted(widths)}"
        raise InputValidationError(msg)

    empty = [str(a.owner) for a in allocations if a.num_tokens() == 0]
    if empty:
        msg = f"allocations without tokens: {', '.join(empty)}"
        raise InputValidationError(msg)
