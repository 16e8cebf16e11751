"""Exact win probabilities between dice configurations."""
from fractions import Fraction
from typing import List, Sequence
import numpy as np
from .dice import DiceConfiguration


ProbabilityTable = List[List[Fraction]]


class ProbabilityEngine:
    """Compares dice configurations by exhaustive pairwise enumeration."""

    def win_probability(self, die: DiceConfiguration, other: DiceConfiguration) -> Fraction:
        """Probability that ``die`` shows a strictly higher face than ``other``."""
        wins = sum(1 for a in die.faces for b in other.faces if a > b)
        return Fraction(wins, len(die) * len(other))

    def tie_fraction(self, die: DiceConfiguration, other: DiceConfiguration) -> Fraction:
        """Probability that both dice show the same face."""
        ties = sum(1 for a in die.faces for b in other.faces if a == b)
        return Fraction(ties, len(die) * len(other))

    def build_table(self, configs: Sequence[DiceConfiguration]) -> ProbabilityTable:
        """Row ``r``, column ``c`` holds the win probability of ``configs[r]`` over ``configs[c]``."""
        return [
            [self.win_probability(row, col) for col in configs]
            for row in configs
        ]

    def best_counter(self, configs: Sequence[DiceConfiguration], against: DiceConfiguration,
                     exclude: Sequence[int] = ()) -> int:
        """Index of the configuration most likely to beat ``against``.

        Ties are broken by the lowest index. Indices in ``exclude`` are skipped.
        """
        candidates = [i for i in range(len(configs)) if i not in exclude]
        if not candidates:
            raise ValueError("No configuration left to choose from")
        return max(candidates, key=lambda i: (self.win_probability(configs[i], against), -i))

    @staticmethod
    def as_array(table: ProbabilityTable) -> np.ndarray:
        """Float matrix view of a probability table."""
        return np.array([[float(p) for p in row] for row in table], dtype=float)


def chi_square_uniformity(values: Sequence[int], range_size: int) -> float:
    """Pearson chi-square statistic of ``values`` against a uniform ``[0, range_size)``."""
    if range_size < 1:
        raise ValueError("range_size must be positive")
    samples = np.asarray(values, dtype=np.int64)
    if samples.size == 0:
        raise ValueError("No samples given")
    observed = np.bincount(samples, minlength=range_size)[:range_size]
    expected = samples.size / range_size
    return float(np.sum((observed - expected) ** 2 / expected))
