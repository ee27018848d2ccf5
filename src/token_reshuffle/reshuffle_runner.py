"""End-to-end reshuffle pipeline."""

import logging
from collections.abc import Collection, Hashable
from dataclasses import dataclass
from enum import Enum

from token_reshuffle.allocation import (
    ScoreWeights,
    average_variability,
    total_per_category,
)
from token_reshuffle.annealing import AnnealingSettings, anneal
from token_reshuffle.errors import InputValidationError, NotTrivialOptimumError
from token_reshuffle.optimality import StateStats, compute_stats, is_trivial_optimum
from token_reshuffle.seed import fold_seed, seeded_rng
from token_reshuffle.state import SearchState
from token_reshuffle.submissions import Submissions, build_initial_allocations

__all__ = [
    "ReshuffleResult",
    "RunStatus",
    "run_reshuffle_pipeline",
]

logger = logging.getLogger(__name__)


class RunStatus(Enum):
    TRIVIAL_OPTIMUM = "trivial_optimum"
    NOT_TRIVIAL_OPTIMUM = "not_trivial_optimum"


@dataclass(frozen=True, slots=True)
class ReshuffleResult:
    """Outcome of a completed reshuffle run.

    Attributes:
        state: Terminal search state.
        initial_stats: Penalty counters before annealing.
        final_stats: Penalty counters of the terminal state.
        status: Whether the terminal state is a provable optimum.
        seed: The folded 64-bit seed the run used.
    """

    state: SearchState
    initial_stats: StateStats
    final_stats: StateStats
    status: RunStatus
    seed: int

    @property
    def is_trivial_optimum(self) -> bool:
        return self.status is RunStatus.TRIVIAL_OPTIMUM


def _log_stats(label: str, state: SearchState, stats: StateStats) -> None:
    logger.info(
        "%s allocation stats: size=%d, energy=%.0f, numReturnedTokens=%d,"
        " numReturnedCategories=%d, numDuplicateCategoryTokens=%d",
        label,
        state.num_tokens(),
        state.energy(),
        stats.num_returned_tokens,
        stats.num_returned_categories,
        stats.num_duplicate_category_tokens,
    )


def _log_highlighted(state: SearchState, categories: Collection[int]) -> None:
    for allocation in state.current:
        num_highlighted = allocation.tokens.num_in_categories(categories)
        if num_highlighted > 0:
            logger.info(
                "%s numTokens=%d, numHighlighted=%d",
                allocation.owner,
                allocation.num_tokens(),
                num_highlighted,
            )


def run_reshuffle_pipeline(
    *,
    submissions: Submissions,
    num_categories: int,
    seed_hex: str,
    pool_owner: Hashable | None = None,
    settings: AnnealingSettings = AnnealingSettings(),
    weights: ScoreWeights = ScoreWeights(),
    require_trivial_optimum: bool = False,
    highlight_categories: Collection[int] = (),
) -> ReshuffleResult:
    """Run build_initial_allocations -> fold_seed -> anneal -> stats.

    Args:
        submissions: Mapping from owner to its `(token_id, category_id)`
            pairs.
        num_categories: Width of the category space.
        seed_hex: Hexadecimal seed of at most 256 bits.
        pool_owner: Owner whose allocation is the score-exempt pool.
        settings: Cooling schedule.
        weights: Penalty term weights.
        require_trivial_optimum: Raise instead of reporting when the
            terminal state is not a trivial optimum.
        highlight_categories: Categories whose holders are logged at the
            end of the run.

    Returns:
        The completed run.

    Raises:
        InputValidationError: If the submissions, the seed or the
            highlighted categories are invalid.
        AnnealingScheduleError: If the cooling schedule is invalid.
        NotTrivialOptimumError: If `require_trivial_optimum` is set and the
            terminal state is not a trivial optimum.
    """
    initial = build_initial_allocations(
        submissions=submissions,
        num_categories=num_categories,
        pool_owner=pool_owner,
    )
    out_of_range = sorted(
        c for c in set(highlight_categories) if not 0 <= c < num_categories
    )
    if out_of_range:
        msg = f"highlighted categories out of range: {out_of_range}"
        raise InputValidationError(msg)
    per_category = total_per_category(initial)
    logger.info("numOwners=%d, numTokens=%d", len(initial), per_category.sum())
    logger.info("Number per category: %s", per_category.to_list())
    logger.info(
        "Proportion per category: %s",
        [round(float(x), 2) for x in per_category.normalised()],
    )

    seed = fold_seed(seed_hex)
    rng = seeded_rng(seed)
    state = SearchState(initial=initial, rng=rng, weights=weights)

    initial_stats = compute_stats(state)
    _log_stats("Initial", state, initial_stats)

    result = anneal(state, rng=rng, settings=settings)
    final_state = result.state

    final_stats = compute_stats(final_state)
    _log_stats("Final", final_state, final_stats)
    logger.info(
        "Average variability: %.3f -> %.3f",
        average_variability(final_state.initial),
        average_variability(final_state.current),
    )
    _log_highlighted(final_state, highlight_categories)

    if is_trivial_optimum(final_state):
        status = RunStatus.TRIVIAL_OPTIMUM
    else:
        status = RunStatus.NOT_TRIVIAL_OPTIMUM
        logger.warning(
            "Final state is not a trivial optimum: score=%s", final_state.score()
        )
        if require_trivial_optimum:
            msg = f"final state is not a trivial optimum: {final_stats}"
            raise NotTrivialOptimumError(msg)

    return ReshuffleResult(
        state=final_state,
        initial_stats=initial_stats,
        final_stats=final_stats,
        status=status,
        seed=seed,
    )
