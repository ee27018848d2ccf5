"""Per-owner token allocations and the allocation score function."""

from collections.abc import Hashable, Sequence
from dataclasses import dataclass
from random import Random
from typing import NamedTuple

from token_reshuffle.category_vector import CategoryVector
from token_reshuffle.tokens import Token, TokenCollection

__all__ = [
    "Allocation",
    "ScorePenalties",
    "ScoreWeights",
    "aggregate_penalties",
    "aggregate_score",
    "average_variability",
    "duplicate_token_ids",
    "pool_tokens",
    "total_per_category",
    "total_tokens",
]


class ScorePenalties(NamedTuple):
    duplication: int = 0
    returned_category: int = 0
    returned_token: int = 0

    def plus(self, other: "ScorePenalties") -> "ScorePenalties":
        return ScorePenalties(*(a + b for a, b in zip(self, other, strict=True)))

    def minus(self, other: "ScorePenalties") -> "ScorePenalties":
        return ScorePenalties(*(a - b for a, b in zip(self, other, strict=True)))


@dataclass(frozen=True, slots=True)
class ScoreWeights:
    """Relative weights of the three penalty terms of `Allocation.score`.

    Attributes:
        duplication: Weight of the quadratic same-category term. Must be
            positive, as it also prices the pool.
        returned_category: Weight of holding categories the owner
            contributed. Must not be negative.
        returned_token: Weight of holding the exact tokens the owner
            contributed. Must not be negative.

    Raises:
        ValueError: If a weight is out of range.
    """

    duplication: float = 1.0
    returned_category: float = 1.0
    returned_token: float = 1.0

    def __post_init__(self) -> None:
        if not self.duplication > 0:
            msg = f"duplication weight must be positive, got {self.duplication}"
            raise ValueError(msg)
        for name in ("returned_category", "returned_token"):
            value = getattr(self, name)
            if not value >= 0:
                msg = f"{name} weight must not be negative, got {value}"
                raise ValueError(msg)

    def combine(self, penalties: ScorePenalties, *, pool_tokens: int = 0) -> float:
        """Weighted score of integer penalty totals, higher is better.

        Every score is derived here from exact integer counts, so equal
        totals always give bit-identical scores.
        """
        return -(
            self.duplication * (penalties.duplication + pool_tokens)
            + self.returned_category * penalties.returned_category
            + self.returned_token * penalties.returned_token
        )


class Allocation:
    """Bag of tokens held by one owner, with a cached category histogram.

    The histogram is kept in sync with `tokens` by `exchange_tokens`, so it
    is never recomputed while searching. The pool flag is fixed at
    construction.
    """

    __slots__ = ("_histogram", "_is_pool", "owner", "tokens")

    def __init__(
        self,
        *,
        owner: Hashable,
        tokens: TokenCollection,
        is_pool: bool = False,
    ) -> None:
        self.owner = owner
        self.tokens = tokens
        self._histogram = tokens.num_per_category()
        self._is_pool = is_pool

    @property
    def is_pool(self) -> bool:
        return self._is_pool

    @property
    def num_categories(self) -> int:
        return self.tokens.num_categories

    def num_tokens(self) -> int:
        return len(self.tokens)

    def num_per_category(self) -> CategoryVector:
        """Cached histogram; callers must not mutate it."""
        return self._histogram

    def variability(self) -> float:
        return self.tokens.variability()

    def copy(self) -> "Allocation":
        """Deep copy sharing no mutable state with the original."""
        clone = Allocation.__new__(Allocation)
        clone.owner = self.owner
        clone.tokens = self.tokens.copy()
        clone._histogram = self._histogram.copy()
        clone._is_pool = self._is_pool
        return clone

    def score_penalties(self, initial: "Allocation") -> ScorePenalties:
        """Raw penalty terms against the owner's initial allocation."""
        current = self._histogram
        return ScorePenalties(
            duplication=current.smul(current),
            returned_category=current.smul(initial.num_per_category().mask()),
            returned_token=self.tokens.num_same_id(initial.tokens),
        )

    def score(
        self,
        initial: "Allocation",
        weights: ScoreWeights = ScoreWeights(),
    ) -> float:
        """Score of this allocation against `initial`, higher is better.

        The pool is exempt from scoring and always returns the ceiling an
        allocation of its size could reach, so it neither helps nor hurts
        the aggregate bound.
        """
        if self._is_pool:
            return weights.combine(ScorePenalties(), pool_tokens=self.num_tokens())
        return weights.combine(self.score_penalties(initial))

    def counted_penalties(self, initial: "Allocation") -> ScorePenalties:
        """Penalty terms this allocation adds to an aggregate; none for the pool."""
        if self._is_pool:
            return ScorePenalties()
        return self.score_penalties(initial)

    def exchange_tokens(
        self,
        other: "Allocation",
        own_index: int,
        other_index: int,
    ) -> None:
        """Swap one token with `other`, updating both histograms in place."""
        own_token: Token = self.tokens[own_index]
        other_token: Token = other.tokens[other_index]

        self._histogram.decrement(own_token.category_id)
        other._histogram.increment(own_token.category_id)
        other._histogram.decrement(other_token.category_id)
        self._histogram.increment(other_token.category_id)

        self.tokens[own_index] = other_token
        other.tokens[other_index] = own_token

    def draw_random_token_index(self, rng: Random) -> int:
        """Uniform token index in `[0, num_tokens())`."""
        return rng.randrange(self.num_tokens())

    def __repr__(self) -> str:
        return (
            f"Allocation(owner={self.owner!r}, tokens={self.tokens!r},"
            f" is_pool={self._is_pool})"
        )


def total_tokens(allocations: Sequence[Allocation]) -> int:
    """Total number of tokens across allocations."""
    return sum(allocation.num_tokens() for allocation in allocations)


def total_per_category(allocations: Sequence[Allocation]) -> CategoryVector:
    """Histogram summed across allocations.

    Raises:
        ValueError: If `allocations` is empty.
    """
    if not allocations:
        msg = "allocations must not be empty"
        raise ValueError(msg)
    total = CategoryVector.zeros(num_categories=allocations[0].num_categories)
    for allocation in allocations:
        total = total.add(allocation.num_per_category())
    return total


def aggregate_penalties(
    *,
    current: Sequence[Allocation],
    initial: Sequence[Allocation],
) -> ScorePenalties:
    """Penalty totals of index-aligned non-pool allocations."""
    totals = ScorePenalties()
    for c, i in zip(current, initial, strict=True):
        totals = totals.plus(c.counted_penalties(i))
    return totals


def pool_tokens(allocations: Sequence[Allocation]) -> int:
    """Number of tokens held by pool allocations."""
    return sum(a.num_tokens() for a in allocations if a.is_pool)


def aggregate_score(
    *,
    current: Sequence[Allocation],
    initial: Sequence[Allocation],
    weights: ScoreWeights = ScoreWeights(),
) -> float:
    """Aggregate score of index-aligned allocations, recomputed from scratch."""
    return weights.combine(
        aggregate_penalties(current=current, initial=initial),
        pool_tokens=pool_tokens(current),
    )


def average_variability(allocations: Sequence[Allocation]) -> float:
    return sum(a.variability() for a in allocations) / len(allocations)


def duplicate_token_ids(allocations: Sequence[Allocation]) -> list[int]:
    """Token IDs seen more than once, in order of their repeated occurrence."""
    seen: set[int] = set()
    dupes: list[int] = []
    for allocation in allocations:
        for token in allocation.tokens:
            if token.token_id in seen:
                dupes.append(token.token_id)
            seen.add(token.token_id)
    return dupes
