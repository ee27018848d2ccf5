"""Tabular output of a finished reshuffle."""

from collections.abc import Collection
from pathlib import Path

import pandas as pd

from token_reshuffle.optimality import transfer_graph
from token_reshuffle.state import SearchState

__all__ = [
    "OVERVIEW_COLUMNS",
    "REALLOCATION_COLUMNS",
    "overview_table",
    "reallocation_table",
    "write_reports",
]

REALLOCATION_COLUMNS = ["owner", "token_id", "category_id"]
OVERVIEW_COLUMNS = [
    "owner",
    "is_pool",
    "initial_histogram",
    "final_histogram",
    "variability",
    "num_returned_tokens",
    "num_returned_categories",
    "num_duplicate_category_tokens",
    "num_source_owners",
    "num_highlighted",
]


def reallocation_table(state: SearchState) -> pd.DataFrame:
    """One row per token with the owner that holds it after the run."""
    rows = [
        (str(allocation.owner), token.token_id, token.category_id)
        for allocation in state.current
        for token in allocation.tokens
    ]
    return pd.DataFrame(rows, columns=REALLOCATION_COLUMNS)


def overview_table(
    state: SearchState,
    *,
    highlight_categories: Collection[int] = (),
) -> pd.DataFrame:
    """One row per owner comparing its initial and final allocation.

    `num_source_owners` counts the other owners whose contributed tokens an
    owner now holds. `num_highlighted` counts held tokens in any of
    `highlight_categories`.
    """
    graph = transfer_graph(state)
    rows = []
    for current, initial in zip(state.current, state.initial, strict=True):
        sources = set(graph.predecessors(current.owner)) - {current.owner}
        rows.append(
            (
                str(current.owner),
                current.is_pool,
                str(initial.num_per_category().to_list()),
                str(current.num_per_category().to_list()),
                round(current.variability(), 3),
                current.tokens.num_same_id(initial.tokens),
                current.tokens.num_in_same_categories(initial.tokens),
                current.tokens.num_in_duplicate_categories(),
                len(sources),
                current.tokens.num_in_categories(highlight_categories),
            )
        )
    return pd.DataFrame(rows, columns=OVERVIEW_COLUMNS)


def write_reports(
    state: SearchState,
    *,
    directory: Path,
    seed_hex: str,
    highlight_categories: Collection[int] = (),
) -> tuple[Path, Path]:
    """Write the reallocation and overview tables as CSV files.

    Both tables are rendered before either file is opened. If a write
    fails, files already written by this call are removed, so a run never
    leaves a partial result behind.

    Args:
        state: Terminal state of a completed run.
        directory: Existing output directory.
        seed_hex: Seed the run used; embedded in the file names.
        highlight_categories: Categories counted in `num_highlighted`.

    Returns:
        Paths of the reallocation and overview files.

    Raises:
        OSError: If a file cannot be written.
    """
    reallocations_path = directory / f"reallocations_{seed_hex}.csv"
    overview_path = directory / f"overview_{seed_hex}.csv"
    rendered = {
        reallocations_path: reallocation_table(state).to_csv(
            index=False, lineterminator="\n"
        ),
        overview_path: overview_table(
            state, highlight_categories=highlight_categories
        ).to_csv(index=False, lineterminator="\n"),
    }

    written: list[Path] = []
    try:
        for path, text in rendered.items():
            path.write_text(text, encoding="utf-8")
            written.append(path)
    except OSError:
        for path in written:
            path.unlink(missing_ok=True)
        raise
    return reallocations_path, overview_path
