"""Simulated annealing control loop over an Energy/Neighbor contract."""

import logging
import math
from dataclasses import dataclass
from random import Random
from typing import Generic, Protocol, Self, TypeVar

from token_reshuffle.errors import AnnealingScheduleError

__all__ = [
    "AnnealingResult",
    "AnnealingSettings",
    "AnnealingState",
    "acceptance_probability",
    "anneal",
    "iterations_to_lukewarm",
    "temperature_at",
]

logger = logging.getLogger(__name__)


class AnnealingState(Protocol):
    """What the loop needs from a state: its energy and a random neighbor."""

    def energy(self) -> float: ...

    def neighbor(self) -> Self: ...


StateT = TypeVar("StateT", bound=AnnealingState)


@dataclass(frozen=True, slots=True)
class AnnealingSettings:
    """Geometric cooling schedule.

    Attributes:
        temperature: Starting temperature `T0`.
        annealing_factor: Per-iteration multiplicative cooling factor,
            strictly between 0 and 1.
        progress_every: Log progress every this many iterations. `None`
            logs twenty times per run; `0` disables progress logging.
    """

    temperature: float = 10.0
    annealing_factor: float = 0.999999
    progress_every: int | None = None


@dataclass(frozen=True, slots=True)
class AnnealingResult(Generic[StateT]):
    """Outcome of an annealing run.

    Attributes:
        state: Terminal state of the run.
        energy: Energy of the terminal state.
        best_energy: Lowest energy visited during the run.
        iterations: Number of iterations performed.
        accepted: Number of accepted proposals.
    """

    state: StateT
    energy: float
    best_energy: float
    iterations: int
    accepted: int


def _validate_settings(settings: AnnealingSettings) -> None:
    if not settings.temperature > 0:
        msg = f"temperature must be positive, got {settings.temperature}"
        raise AnnealingScheduleError(msg)
    if not 0 < settings.annealing_factor < 1:
        msg = (
            f"annealing_factor must be in (0, 1), got {settings.annealing_factor}"
        )
        raise AnnealingScheduleError(msg)
    if settings.progress_every is not None and settings.progress_every < 0:
        msg = f"progress_every must not be negative, got {settings.progress_every}"
        raise AnnealingScheduleError(msg)


def iterations_to_lukewarm(settings: AnnealingSettings) -> int:
    """Iterations needed to cool from `T0` down to a temperature of 1.

    At temperature 1 a move that worsens the energy by the smallest possible
    amount is accepted with probability at most 1/e.

    Raises:
        AnnealingScheduleError: If the schedule is invalid or never
            reaches a temperature of 1.
    """
    _validate_settings(settings)
    iterations = int(
        -math.log(settings.temperature) / math.log(settings.annealing_factor)
    )
    if iterations <= 0:
        msg = (
            f"schedule starting at temperature {settings.temperature}"
            " performs no iterations before reaching temperature 1"
        )
        raise AnnealingScheduleError(msg)
    return iterations


def temperature_at(settings: AnnealingSettings, iteration: int) -> float:
    """Temperature `T0 * factor**iteration` of the geometric schedule."""
    return settings.temperature * settings.annealing_factor**iteration


def acceptance_probability(delta_energy: float, temperature: float) -> float:
    """Metropolis acceptance probability for an energy change."""
    if delta_energy <= 0:
        return 1.0
    return math.exp(-delta_energy / temperature)


def anneal(
    state: StateT,
    *,
    rng: Random,
    settings: AnnealingSettings = AnnealingSettings(),
) -> AnnealingResult[StateT]:
    """Run simulated annealing from `state`.

    The loop runs for twice `iterations_to_lukewarm` iterations, giving the
    tail of the schedule room to settle. Its own random source is seeded
    once from `rng` before the first iteration, so identical input and
    seed reproduce the identical trajectory.

    Args:
        state: Starting state.
        rng: Random source the loop's own random source is derived from.
            Pass the same generator the state draws its moves from.
        settings: Cooling schedule.

    Returns:
        The terminal state with run statistics.

    Raises:
        AnnealingScheduleError: If the schedule is invalid.
    """
    max_iterations = 2 * iterations_to_lukewarm(settings)
    progress_every = (
        max(max_iterations // 20, 1)
        if settings.progress_every is None
        else settings.progress_every
    )
    loop_rng = Random(rng.getrandbits(63))  # noqa: S311

    logger.debug(
        "Annealing from T0=%s with factor=%s for %d iterations",
        settings.temperature,
        settings.annealing_factor,
        max_iterations,
    )

    current = state
    current_energy = current.energy()
    best_energy = current_energy
    accepted = 0

    for iteration in range(max_iterations):
        temperature = temperature_at(settings, iteration)
        proposal = current.neighbor()
        proposal_energy = proposal.energy()
        delta = proposal_energy - current_energy

        if delta <= 0 or loop_rng.random() < acceptance_probability(
            delta, temperature
        ):
            current = proposal
            current_energy = proposal_energy
            accepted += 1
            best_energy = min(best_energy, current_energy)

        if progress_every and (iteration + 1) % progress_every == 0:
            logger.info(
                "iteration=%d/%d temperature=%.4f energy=%.0f best=%.0f accepted=%d",
                iteration + 1,
                max_iterations,
                temperature,
                current_energy,
                best_energy,
                accepted,
            )

    return AnnealingResult(
        state=current,
        energy=current_energy,
        best_energy=best_energy,
        iterations=max_iterations,
        accepted=accepted,
    )
