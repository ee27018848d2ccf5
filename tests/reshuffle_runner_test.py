"""Tests for token_reshuffle.reshuffle_runner module."""

import logging
from pathlib import Path

import pytest

import token_reshuffle
from token_reshuffle.annealing import AnnealingSettings
from token_reshuffle.errors import (
    AnnealingScheduleError,
    InputValidationError,
    NotTrivialOptimumError,
    SeedError,
)
from token_reshuffle.optimality import StateStats
from token_reshuffle.report import write_reports
from token_reshuffle.reshuffle_runner import (
    ReshuffleResult,
    RunStatus,
    run_reshuffle_pipeline,
)

SLOW = AnnealingSettings(annealing_factor=0.999, progress_every=0)
FAST = AnnealingSettings(annealing_factor=0.99, progress_every=0)


@pytest.fixture
def crowded_submissions() -> dict[str, list[tuple[int, int]]]:
    """Three of four tokens share a category both owners contributed."""
    return {
        "a": [(1, 0), (2, 0)],
        "b": [(3, 0), (4, 1)],
    }


@pytest.fixture
def pooled_submissions() -> dict[str, list[tuple[int, int]]]:
    return {
        "a": [(1, 0), (2, 1)],
        "b": [(3, 2), (4, 3)],
        "c": [(5, 4), (6, 5)],
        "pool": [(7, 6), (8, 7)],
    }


class TestRunReshufflePipeline:
    def test_reaches_trivial_optimum(
        self, two_owner_submissions: dict[str, list[tuple[int, int]]]
    ) -> None:
        result = run_reshuffle_pipeline(
            submissions=two_owner_submissions,
            num_categories=4,
            seed_hex="0x2a",
            settings=SLOW,
        )
        assert isinstance(result, ReshuffleResult)
        assert result.status is RunStatus.TRIVIAL_OPTIMUM
        assert result.is_trivial_optimum
        assert result.final_stats == StateStats()
        assert result.initial_stats.num_returned_tokens == 4
        assert result.seed == 42
        assert sorted(result.state.current[0].tokens.token_ids()) == [2, 3]
        assert sorted(result.state.current[1].tokens.token_ids()) == [0, 1]

    def test_unreachable_optimum_is_reported(
        self, crowded_submissions: dict[str, list[tuple[int, int]]]
    ) -> None:
        result = run_reshuffle_pipeline(
            submissions=crowded_submissions,
            num_categories=2,
            seed_hex="0x1",
            settings=FAST,
        )
        assert result.status is RunStatus.NOT_TRIVIAL_OPTIMUM
        assert not result.is_trivial_optimum

    def test_unreachable_optimum_raises_when_required(
        self, crowded_submissions: dict[str, list[tuple[int, int]]]
    ) -> None:
        with pytest.raises(NotTrivialOptimumError, match="not a trivial optimum"):
            run_reshuffle_pipeline(
                submissions=crowded_submissions,
                num_categories=2,
                seed_hex="0x1",
                settings=FAST,
                require_trivial_optimum=True,
            )

    def test_pool_keeps_token_count(
        self, pooled_submissions: dict[str, list[tuple[int, int]]]
    ) -> None:
        result = run_reshuffle_pipeline(
            submissions=pooled_submissions,
            num_categories=8,
            seed_hex="0xbeef",
            pool_owner="pool",
            settings=FAST,
        )
        pool = result.state.current[3]
        assert pool.is_pool
        assert pool.num_tokens() == 2
        assert result.state.num_tokens() == 8

    def test_duplicate_tokens_abort_before_annealing(self) -> None:
        with pytest.raises(InputValidationError, match="not all tokens unique"):
            run_reshuffle_pipeline(
                submissions={"a": [(1, 0)], "b": [(1, 1)]},
                num_categories=2,
                seed_hex="0x0",
                settings=FAST,
            )

    def test_malformed_seed_aborts(
        self, two_owner_submissions: dict[str, list[tuple[int, int]]]
    ) -> None:
        with pytest.raises(SeedError):
            run_reshuffle_pipeline(
                submissions=two_owner_submissions,
                num_categories=4,
                seed_hex="0xnothex",
                settings=FAST,
            )

    def test_invalid_schedule_aborts(
        self, two_owner_submissions: dict[str, list[tuple[int, int]]]
    ) -> None:
        with pytest.raises(AnnealingScheduleError):
            run_reshuffle_pipeline(
                submissions=two_owner_submissions,
                num_categories=4,
                seed_hex="0x0",
                settings=AnnealingSettings(annealing_factor=1.0),
            )

    def test_identical_runs_write_identical_files(
        self,
        pooled_submissions: dict[str, list[tuple[int, int]]],
        tmp_path: Path,
    ) -> None:
        outputs = []
        for run in ("first", "second"):
            directory = tmp_path / run
            directory.mkdir()
            result = run_reshuffle_pipeline(
                submissions=pooled_submissions,
                num_categories=8,
                seed_hex="0xc0ffee",
                pool_owner="pool",
                settings=FAST,
            )
            paths = write_reports(
                result.state, directory=directory, seed_hex="0xc0ffee"
            )
            outputs.append([path.read_bytes() for path in paths])
        assert outputs[0] == outputs[1]

    def test_opposite_folded_seeds_follow_distinct_trajectories(
        self, pooled_submissions: dict[str, list[tuple[int, int]]]
    ) -> None:
        positive, negative = (
            run_reshuffle_pipeline(
                submissions=pooled_submissions,
                num_categories=8,
                seed_hex=seed_hex,
                settings=FAST,
            )
            for seed_hex in ("0x1", "0xffffffffffffffff")
        )
        assert positive.seed == 1
        assert negative.seed == -1
        assert positive.state.rng.getstate() != negative.state.rng.getstate()

    def test_highlighted_holders_are_logged(
        self,
        pooled_submissions: dict[str, list[tuple[int, int]]],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.INFO, logger="token_reshuffle"):
            result = run_reshuffle_pipeline(
                submissions=pooled_submissions,
                num_categories=8,
                seed_hex="0xbeef",
                pool_owner="pool",
                settings=FAST,
                highlight_categories={0, 7},
            )
        holders = {
            str(a.owner)
            for a in result.state.current
            if a.tokens.num_in_categories({0, 7})
        }
        logged = {
            record.getMessage().split()[0]
            for record in caplog.records
            if "numHighlighted=" in record.getMessage()
        }
        assert logged == holders
        assert len(holders) in (1, 2)

    def test_highlighted_category_out_of_range_aborts(
        self, two_owner_submissions: dict[str, list[tuple[int, int]]]
    ) -> None:
        with pytest.raises(InputValidationError, match=r"out of range: \[4\]"):
            run_reshuffle_pipeline(
                submissions=two_owner_submissions,
                num_categories=4,
                seed_hex="0x0",
                settings=FAST,
                highlight_categories=[1, 4],
            )


class TestTopLevelImports:
    """Verify that public API is accessible from the package root."""

    def test_all_public_symbols_accessible(self) -> None:
        expected = [
            "Allocation",
            "AnnealingSettings",
            "CategoryVector",
            "SearchState",
            "Token",
            "TokenCollection",
            "TokenIdGenerator",
            "anneal",
            "build_initial_allocations",
            "compute_stats",
            "fold_seed",
            "is_trivial_optimum",
            "overview_table",
            "reallocation_table",
            "run_reshuffle_pipeline",
            "seeded_rng",
            "transfer_graph",
            "write_reports",
        ]
        for symbol in expected:
            assert hasattr(token_reshuffle, symbol), f"missing: {symbol}"

    def test_all_matches_exports(self) -> None:
        for symbol in token_reshuffle.__all__:
            assert hasattr(token_reshuffle, symbol), f"missing: {symbol}"
