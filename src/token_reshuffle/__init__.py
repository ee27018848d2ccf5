"""Reshuffle pooled tokens so that every owner ends up with more variety."""

from token_reshuffle.allocation import (
    Allocation,
    ScorePenalties,
    ScoreWeights,
    aggregate_penalties,
    aggregate_score,
    average_variability,
    duplicate_token_ids,
    pool_tokens,
    total_per_category,
    total_tokens,
)
from token_reshuffle.annealing import (
    AnnealingResult,
    AnnealingSettings,
    AnnealingState,
    acceptance_probability,
    anneal,
    iterations_to_lukewarm,
    temperature_at,
)
from token_reshuffle.category_vector import CategoryVector
from token_reshuffle.errors import (
    AnnealingScheduleError,
    InputValidationError,
    NotTrivialOptimumError,
    ReshuffleError,
    SeedError,
)
from token_reshuffle.optimality import (
    StateStats,
    compute_stats,
    is_trivial_optimum,
    score_upper_bound,
    transfer_graph,
)
from token_reshuffle.report import overview_table, reallocation_table, write_reports
from token_reshuffle.reshuffle_runner import (
    ReshuffleResult,
    RunStatus,
    run_reshuffle_pipeline,
)
from token_reshuffle.seed import fold_seed, seeded_rng
from token_reshuffle.state import SearchState
from token_reshuffle.submissions import build_initial_allocations
from token_reshuffle.tokens import (
    Token,
    TokenCollection,
    TokenIdGenerator,
    tokens_from_categories,
)

__all__ = [
    "Allocation",
    "AnnealingResult",
    "AnnealingScheduleError",
    "AnnealingSettings",
    "AnnealingState",
    "CategoryVector",
    "InputValidationError",
    "NotTrivialOptimumError",
    "ReshuffleError",
    "ReshuffleResult",
    "RunStatus",
    "ScorePenalties",
    "ScoreWeights",
    "SearchState",
    "SeedError",
    "StateStats",
    "Token",
    "TokenCollection",
    "TokenIdGenerator",
    "acceptance_probability",
    "aggregate_penalties",
    "aggregate_score",
    "anneal",
    "average_variability",
    "build_initial_allocations",
    "compute_stats",
    "duplicate_token_ids",
    "fold_seed",
    "is_trivial_optimum",
    "iterations_to_lukewarm",
    "overview_table",
    "pool_tokens",
    "reallocation_table",
    "run_reshuffle_pipeline",
    "score_upper_bound",
    "seeded_rng",
    "temperature_at",
    "tokens_from_categories",
    "total_per_category",
    "total_tokens",
    "transfer_graph",
    "write_reports",
]
