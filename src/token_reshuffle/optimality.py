"""Post-run statistics and the trivial-optimum check."""

from dataclasses import dataclass

import networkx as nx

from token_reshuffle.allocation import ScorePenalties
from token_reshuffle.state import SearchState

__all__ = [
    "StateStats",
    "compute_stats",
    "is_trivial_optimum",
    "score_upper_bound",
    "transfer_graph",
]

WEIGHT = "weight"


@dataclass(frozen=True, slots=True)
class StateStats:
    """Aggregate penalty counters over all non-pool allocations.

    Attributes:
        num_returned_tokens: Tokens held by the owner who contributed them.
        num_returned_categories: Tokens in a category their holder
            contributed.
        num_duplicate_category_tokens: Tokens beyond the first per category
            per owner.
    """

    num_returned_tokens: int = 0
    num_returned_categories: int = 0
    num_duplicate_category_tokens: int = 0

    def is_zero(self) -> bool:
        return (
            self.num_returned_tokens == 0
            and self.num_returned_categories == 0
            and self.num_duplicate_category_tokens == 0
        )


def compute_stats(state: SearchState) -> StateStats:
    """Sum the penalty counters of `state`, ignoring the pool."""
    returned_tokens = returned_categories = duplicates = 0
    for current, initial in zip(state.current, state.initial, strict=True):
        if current.is_pool:
            continue
        returned_tokens += current.tokens.num_same_id(initial.tokens)
        returned_categories += current.tokens.num_in_same_categories(initial.tokens)
        duplicates += current.tokens.num_in_duplicate_categories()

    return StateStats(
        num_returned_tokens=returned_tokens,
        num_returned_categories=returned_categories,
        num_duplicate_category_tokens=duplicates,
    )


def score_upper_bound(state: SearchState) -> float:
    """Highest aggregate score any allocation of these tokens could reach.

    The duplication term of an owner holding `n` tokens is at least `n`,
    reached with one token per category; the other two terms are at least
    zero. The pool always scores its own ceiling.
    """
    return state.weights.combine(
        _penalties_at_bound(state), pool_tokens=state.num_pool_tokens()
    )


def is_trivial_optimum(state: SearchState) -> bool:
    """Whether `state` provably cannot be improved.

    Depending on the input this optimum may be unreachable, but once it is
    reached no other allocation scores higher.

    The score is compared through its integer penalty totals: it equals
    `score_upper_bound` exactly when the duplication total is one per
    non-pool token and the other two totals are zero.
    """
    return (
        compute_stats(state).is_zero()
        and state.penalties() == _penalties_at_bound(state)
    )


def _penalties_at_bound(state: SearchState) -> ScorePenalties:
    return ScorePenalties(duplication=state.num_tokens() - state.num_pool_tokens())


def transfer_graph(state: SearchState) -> nx.DiGraph:
    """Directed graph of token flows between owners.

    An edge `u -> v` carries a `weight` attribute counting the tokens `u`
    contributed that `v` holds now. Self-loops are returned tokens.
    """
    graph = nx.DiGraph()
    contributor: dict[int, object] = {}
    for allocation in state.initial:
        graph.add_node(allocation.owner, is_pool=allocation.is_pool)
        for token in allocation.tokens:
            contributor[token.token_id] = allocation.owner

    for allocation in state.current:
        for token in allocation.tokens:
            source = contributor[token.token_id]
            if graph.has_edge(source, allocation.owner):
                graph.edges[source, allocation.owner][WEIGHT] += 1
            else:
                graph.add_edge(source, allocation.owner, weight=1)

    return graph
