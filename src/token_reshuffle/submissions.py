"""Conversion of validated submissions into initial allocations."""

from collections import Counter
from collections.abc import Hashable, Mapping, Sequence

from token_reshuffle.allocation import Allocation, duplicate_token_ids
from token_reshuffle.errors import InputValidationError
from token_reshuffle.tokens import Token, TokenCollection

__all__ = [
    "Submissions",
    "build_initial_allocations",
]

Submissions = Mapping[Hashable, Sequence[tuple[int, int]]]


def build_initial_allocations(
    *,
    submissions: Submissions,
    num_categories: int,
    pool_owner: Hashable | None = None,
) -> list[Allocation]:
    """Create one allocation per owner from `(token_id, category_id)` pairs.

    Owners are ordered by their string form, which must be unique, so
    that the allocation order, and therefore the search trajectory, does
    not depend on mapping order.

    Args:
        submissions: Mapping from owner to the tokens it contributed.
        num_categories: Width of the category space.
        pool_owner: Owner whose allocation is the score-exempt pool.

    Returns:
        Allocations in owner order.

    Raises:
        InputValidationError: If token IDs repeat, a category is out of
            range, an owner has no tokens, fewer than two owners are given,
            two owners share a string form, or `pool_owner` is not among
            the owners.
    """
    if num_categories <= 0:
        msg = f"num_categories must be positive, got {num_categories}"
        raise InputValidationError(msg)
    if len(submissions) < 2:  # noqa: PLR2004
        msg = f"at least two owners are required, got {len(submissions)}"
        raise InputValidationError(msg)
    if pool_owner is not None and pool_owner not in submissions:
        msg = f"pool owner {pool_owner!r} has no submission"
        raise InputValidationError(msg)
    names = Counter(str(owner) for owner in submissions)
    clashing = sorted(name for name, n in names.items() if n > 1)
    if clashing:
        msg = f"owners must have distinct names, clashing: {clashing}"
        raise InputValidationError(msg)

    allocations: list[Allocation] = []
    for owner in sorted(submissions, key=str):
        pairs = submissions[owner]
        if not pairs:
            msg = f"owner {owner!r} submitted no tokens"
            raise InputValidationError(msg)
        try:
            tokens = TokenCollection(
                (Token(token_id=t, category_id=c) for t, c in pairs),
                num_categories=num_categories,
            )
        except ValueError as e:
            msg = f"owner {owner!r}: {e}"
            raise InputValidationError(msg) from e
        allocations.append(
            Allocation(
                owner=owner,
                tokens=tokens,
                is_pool=pool_owner is not None and owner == pool_owner,
            )
        )

    dupes = duplicate_token_ids(allocations)
    if dupes:
        msg = f"not all tokens unique: {sorted(set(dupes))}"
        raise InputValidationError(msg)

    return allocations
