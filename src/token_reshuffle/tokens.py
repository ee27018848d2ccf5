"""Uniquely identified tokens and aggregate operations over token lists."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from itertools import count

from token_reshuffle.category_vector import CategoryVector

__all__ = [
    "Token",
    "TokenCollection",
    "TokenIdGenerator",
    "tokens_from_categories",
]


@dataclass(frozen=True, slots=True)
class Token:
    """A single redistributable item.

    Attributes:
        token_id: Globally unique identifier of the token.
        category_id: Index of the category the token belongs to.
    """

    token_id: int
    category_id: int


class TokenCollection:
    """Ordered list of tokens over a fixed category space.

    Tokens themselves are immutable; the collection supports positional
    replacement so that allocations can exchange tokens in place.
    """

    __slots__ = ("_tokens", "num_categories")

    def __init__(self, tokens: Iterable[Token], *, num_categories: int) -> None:
        self._tokens: list[Token] = list(tokens)
        self.num_categories = num_categories
        for token in self._tokens:
            if not 0 <= token.category_id < num_categories:
                msg = (
                    f"token {token.token_id} has category {token.category_id}"
                    f" outside [0, {num_categories})"
                )
                raise ValueError(msg)

    def __len__(self) -> int:
        return len(self._tokens)

    def __iter__(self) -> Iterator[Token]:
        return iter(self._tokens)

    def __getitem__(self, index: int) -> Token:
        return self._tokens[index]

    def __setitem__(self, index: int, token: Token) -> None:
        self._tokens[index] = token

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TokenCollection):
            return NotImplemented
        return (
            self.num_categories == other.num_categories
            and self._tokens == other._tokens
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"TokenCollection({self._tokens!r})"

    def copy(self) -> "TokenCollection":
        return TokenCollection(self._tokens, num_categories=self.num_categories)

    def token_ids(self) -> list[int]:
        return [token.token_id for token in self._tokens]

    def num_per_category(self) -> CategoryVector:
        """Histogram of tokens per category, computed from scratch."""
        histogram = CategoryVector.zeros(num_categories=self.num_categories)
        for token in self._tokens:
            histogram.increment(token.category_id)
        return histogram

    def num_categories_held(self) -> int:
        """Number of distinct categories present in the collection."""
        return self.num_per_category().mask().sum()

    def num_same_id(self, other: Iterable[Token]) -> int:
        """Number of token IDs present in both collections."""
        own_ids = {token.token_id for token in self._tokens}
        return sum(1 for token in other if token.token_id in own_ids)

    def num_in_same_categories(self, other: "TokenCollection") -> int:
        """Number of own tokens whose category also appears in `other`."""
        return self.num_per_category().smul(other.num_per_category().mask())

    def num_in_duplicate_categories(self) -> int:
        """Number of tokens beyond the first in each category."""
        histogram = self.num_per_category()
        return histogram.sum() - histogram.mask().sum()

    def num_in_categories(self, categories: Iterable[int]) -> int:
        """Number of tokens whose category is one of `categories`."""
        wanted = frozenset(categories)
        return sum(1 for token in self._tokens if token.category_id in wanted)

    def variability(self) -> float:
        """Distinct categories per token, in (0, 1] for a non-empty list.

        Raises:
            ValueError: If the collection is empty.
        """
        if not self._tokens:
            msg = "variability is undefined for an empty token collection"
            raise ValueError(msg)
        return self.num_categories_held() / len(self._tokens)


class TokenIdGenerator:
    """Caller-owned source of sequential synthetic token IDs."""

    __slots__ = ("_counter",)

    def __init__(self, start: int = 0) -> None:
        self._counter = count(start)

    def __iter__(self) -> Iterator[int]:
        return self

    def __next__(self) -> int:
        return next(self._counter)


def tokens_from_categories(
    categories: Iterable[int],
    *,
    ids: Iterator[int],
    num_categories: int,
) -> TokenCollection:
    """Build a token collection with freshly minted IDs.

    Args:
        categories: Category index of each token, in order.
        ids: Generator supplying token IDs, typically a `TokenIdGenerator`
            shared across all collections of one fixture.
        num_categories: Width of the category space.

    Returns:
        A collection holding one token per entry of `categories`.
    """
    return TokenCollection(
        (Token(token_id=next(ids), category_id=c) for c in categories),
        num_categories=num_categories,
    )
