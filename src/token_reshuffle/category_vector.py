"""Fixed-width integer histogram indexed by category."""

from collections.abc import Iterable
from typing import Self

import numpy as np
from numpy.typing import NDArray

__all__ = [
    "CategoryVector",
]


class CategoryVector:
    """Vector of non-negative counts, one entry per category.

    The width is fixed at construction and every binary operation requires
    both operands to share it.
    """

    __slots__ = ("_counts",)

    def __init__(self, counts: Iterable[int]) -> None:
        self._counts: NDArray[np.int64] = np.array(list(counts), dtype=np.int64)
        if self._counts.ndim != 1:
            msg = f"counts must be one-dimensional, got shape {self._counts.shape}"
            raise ValueError(msg)
        if (self._counts < 0).any():
            msg = f"counts must be non-negative: {self.to_list()}"
            raise ValueError(msg)

    @classmethod
    def zeros(cls, *, num_categories: int) -> Self:
        """Return an all-zero vector of the given width."""
        if num_categories <= 0:
            msg = f"num_categories must be positive, got {num_categories}"
            raise ValueError(msg)
        return cls([0] * num_categories)

    @property
    def num_categories(self) -> int:
        return int(self._counts.shape[0])

    def _check_width(self, other: "CategoryVector") -> None:
        if other.num_categories != self.num_categories:
            msg = (
                f"category vector widths do not match:"
                f" {self.num_categories} != {other.num_categories}"
            )
            raise ValueError(msg)

    def smul(self, other: "CategoryVector") -> int:
        """Scalar (dot) product of two vectors."""
        self._check_width(other)
        return int(np.dot(self._counts, other._counts))

    def add(self, other: "CategoryVector") -> "CategoryVector":
        """Elementwise sum of two vectors."""
        self._check_width(other)
        return CategoryVector(self._counts + other._counts)

    def mask(self) -> "CategoryVector":
        """Vector with 1 where this vector is positive and 0 elsewhere."""
        return CategoryVector((self._counts > 0).astype(np.int64))

    def sum(self) -> int:
        return int(self._counts.sum())

    def normalised(self) -> NDArray[np.float64]:
        """Proportion per category.

        An all-zero vector has no proportions to speak of and normalises
        to all zeros instead of dividing by zero.
        """
        total = self.sum()
        if total == 0:
            return np.zeros(self.num_categories, dtype=np.float64)
        return self._counts.astype(np.float64) / total

    def copy(self) -> "CategoryVector":
        return CategoryVector(self._counts.copy())

    def increment(self, category_id: int) -> None:
        """Add one to a single entry in place."""
        self._counts[category_id] += 1

    def decrement(self, category_id: int) -> None:
        """Remove one from a single entry in place."""
        if self._counts[category_id] == 0:
            msg = f"count for category {category_id} is already zero"
            raise ValueError(msg)
        self._counts[category_id] -= 1

    def to_list(self) -> list[int]:
        return [int(x) for x in self._counts]

    def __getitem__(self, category_id: int) -> int:
        return int(self._counts[category_id])

    def __len__(self) -> int:
        return self.num_categories

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CategoryVector):
            return NotImplemented
        return bool(np.array_equal(self._counts, other._counts))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"CategoryVector({self.to_list()})"
