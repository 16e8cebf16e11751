"""
Console boundary between the game and whatever is reading and printing lines.
"""
from abc import ABC, abstractmethod
from typing import Sequence
from .dice import DiceConfiguration
from .probability import ProbabilityTable


class ConsoleIO(ABC):
    """Line-oriented input/output used by the round state machine."""

    @abstractmethod
    def ask(self, message: str) -> str:
        """Show a prompt and return the raw answer."""
        pass

    @abstractmethod
    def info(self, message: str):
        pass

    @abstractmethod
    def success(self, message: str):
        pass

    @abstractmethod
    def warning(self, message: str):
        pass

    @abstractmethod
    def error(self, message: str):
        pass

    @abstractmethod
    def show_probability_table(self, configs: Sequence[DiceConfiguration], table: ProbabilityTable):
        """Render the full pairwise win-probability matrix."""
        pass
