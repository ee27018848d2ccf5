"""Folding of hexadecimal seeds into a 64-bit random seed."""

import logging
import string
from random import Random

from token_reshuffle.errors import SeedError

__all__ = [
    "fold_seed",
    "seeded_rng",
]

logger = logging.getLogger(__name__)

MAX_HEX_DIGITS = 64
_WORD_BITS = 64
_WORD_MASK = (1 << _WORD_BITS) - 1
_HEX_DIGITS = frozenset(string.hexdigits)


def fold_seed(seed_hex: str) -> int:
    """Fold a hex string of at most 256 bits into a signed 64-bit seed.

    The value is split into four 64-bit words which are XOR-ed together;
    the result is read as a two's-complement signed integer.

    Args:
        seed_hex: Hexadecimal digits, optionally prefixed with `0x`. An
            empty string is read as zero.

    Returns:
        Seed in `[-2**63, 2**63)`.

    Raises:
        SeedError: If `seed_hex` contains non-hex characters or holds more
            than 256 bits.
    """
    digits = seed_hex.removeprefix("0x").removeprefix("0X")
    if not set(digits) <= _HEX_DIGITS:
        msg = f"hex seed {seed_hex!r} is not valid hexadecimal"
        raise SeedError(msg)
    if len(digits) > MAX_HEX_DIGITS:
        msg = f"hex seed {seed_hex!r} longer than 256 bits"
        raise SeedError(msg)

    value = int(digits or "0", 16)
    folded = 0
    for _ in range(4):
        folded ^= value & _WORD_MASK
        value >>= _WORD_BITS

    if folded >= 1 << (_WORD_BITS - 1):
        folded -= 1 << _WORD_BITS

    logger.info("Seed %r folded into %#x", seed_hex, folded)
    return folded


def seeded_rng(seed: int) -> Random:
    """Random generator for a folded seed.

    `Random` seeds from the absolute value of an integer, so the signed
    seed is reinterpreted as its unsigned 64-bit pattern first; `x` and
    `-x` give distinct streams.
    """
    return Random(seed & _WORD_MASK)  # noqa: S311
