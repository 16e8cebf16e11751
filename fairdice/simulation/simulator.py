import logging
import numpy as np
from fractions import Fraction
from typing import Optional
from dataclasses import dataclass
from ..core.dice import DiceConfiguration
from ..core.probability import ProbabilityEngine, chi_square_uniformity
from ..fairness.commitment import FairRandomGenerator, combine_values


logger = logging.getLogger(__name__)


@dataclass
class SimulationResult:
    """Results from a batch of automated fair rounds."""
    num_rounds: int
    user_die: DiceConfiguration
    house_die: DiceConfiguration
    exact_win_probability: Fraction
    exact_loss_probability: Fraction
    outcomes: np.ndarray
    draw_chi_square: float

    @property
    def wins(self) -> int:
        return int(np.sum(self.outcomes > 0))

    @property
    def losses(self) -> int:
        return int(np.sum(self.outcomes < 0))

    @property
    def ties(self) -> int:
        return int(np.sum(self.outcomes == 0))

    @property
    def win_rate(self) -> float:
        return self.wins / self.num_rounds

    @property
    def loss_rate(self) -> float:
        return self.losses / self.num_rounds

    @property
    def standard_error(self) -> float:
        """Standard error of the empirical win rate under the exact probability."""
        p = float(self.exact_win_probability)
        return float(np.sqrt(p * (1 - p) / self.num_rounds))

    def __str__(self) -> str:
        return (
            f"Simulation Results ({self.num_rounds} rounds, [{self.user_die}] vs [{self.house_die}]):\n"
            f"  Win Rate: {self.win_rate:.2%} (exact {float(self.exact_win_probability):.2%})\n"
            f"  Loss Rate: {self.loss_rate:.2%} (exact {float(self.exact_loss_probability):.2%})\n"
            f"  Ties: {self.ties}\n"
            f"  Draw chi-square: {self.draw_chi_square:.2f}"
        )


class MatchupSimulator:
    """Plays fair commit/reveal rounds between two dice without prompting.

    The user's contribution to every draw is picked from the same secure
    source, so each roll still goes through commit, combine and verify.
    """

    def __init__(self, generator: Optional[FairRandomGenerator] = None,
                 engine: Optional[ProbabilityEngine] = None):
        self.generator = generator or FairRandomGenerator()
        self.engine = engine or ProbabilityEngine()

    def roll(self, die: DiceConfiguration) -> int:
        """One verified fair roll; returns the zero-based face index."""
        commitment = self.generator.commit(len(die))
        user_value = self.generator.source.randbelow(len(die))
        self.generator.verify_strict(commitment)
        return combine_values(commitment.house_value, user_value, commitment.range_size)

    def simulate(self, user_die: DiceConfiguration, house_die: DiceConfiguration,
                 num_rounds: int = 10000) -> SimulationResult:
        if num_rounds < 1:
            raise ValueError("num_rounds must be positive")
        user_indices = np.empty(num_rounds, dtype=np.int64)
        house_indices = np.empty(num_rounds, dtype=np.int64)
        for i in range(num_rounds):
            user_indices[i] = self.roll(user_die)
            house_indices[i] = self.roll(house_die)

        user_faces = np.asarray(user_die.faces)[user_indices]
        house_faces = np.asarray(house_die.faces)[house_indices]
        result = SimulationResult(
            num_rounds=num_rounds,
            user_die=user_die,
            house_die=house_die,
            exact_win_probability=self.engine.win_probability(user_die, house_die),
            exact_loss_probability=self.engine.win_probability(house_die, user_die),
            outcomes=np.sign(user_faces - house_faces),
            draw_chi_square=chi_square_uniformity(user_indices, len(user_die)),
        )
        logger.info("Simulated %d rounds: win rate %.4f", num_rounds, result.win_rate)
        return result
