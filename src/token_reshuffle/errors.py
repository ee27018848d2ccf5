"""Exception hierarchy for the reshuffle pipeline."""

__all__ = [
    "AnnealingScheduleError",
    "InputValidationError",
    "NotTrivialOptimumError",
    "ReshuffleError",
    "SeedError",
]


class ReshuffleError(Exception):
    """Base class for all reshuffle errors."""


class InputValidationError(ReshuffleError, ValueError):
    """Input allocations are malformed; raised before the loop starts."""


class SeedError(InputValidationError):
    """Hexadecimal seed is not valid hex or exceeds 256 bits."""


class AnnealingScheduleError(ReshuffleError, ValueError):
    """Cooling schedule cannot be run."""


class NotTrivialOptimumError(ReshuffleError):
    """Run completed but the terminal state is not a provable optimum.

    Only raised when the caller asks for the trivial optimum to be
    enforced; otherwise the condition is reported on the result.
    """
