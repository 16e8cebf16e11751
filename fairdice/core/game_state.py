"""Game state classes for fairdice."""
from dataclasses import dataclass, field
from typing import List, Optional
from enum import Enum
from .dice import DiceConfiguration
from ..fairness.commitment import SECRET_LENGTH, RevealedDraw


class Phase(Enum):
    """Steps of the round state machine."""
    AWAIT_FIRST_MOVE_GUESS = "await_first_move_guess"
    SELECT_DICE = "select_dice"
    ROLL = "roll"
    RESOLVE = "resolve"
    CONTINUE = "continue"
    EXIT = "exit"


class Side(Enum):
    """The two parties of a game."""
    USER = "user"
    HOUSE = "house"

    @property
    def other(self) -> "Side":
        return Side.HOUSE if self is Side.USER else Side.USER


class Winner(Enum):
    USER = "user"
    HOUSE = "house"
    TIE = "tie"


@dataclass
class GameConfig:
    """Tunable rules of a game session."""
    first_move_range: int = 2
    secret_length: int = SECRET_LENGTH
    # Repeat the first-move guess and dice selection before every round
    reselect_each_round: bool = False
    # When picking second, the house takes the die with the best odds
    house_picks_best_counter: bool = True

    def __post_init__(self):
        if self.first_move_range < 2:
            raise ValueError("first_move_range must be at least 2")
        if self.secret_length < 16:
            raise ValueError("secret_length must be at least 16 bytes")


@dataclass
class RoundResult:
    """Outcome of one resolved round."""
    round_number: int
    user_die: DiceConfiguration
    house_die: DiceConfiguration
    user_face: int
    house_face: int
    user_draw: RevealedDraw
    house_draw: RevealedDraw

    @property
    def winner(self) -> Winner:
        if self.user_face > self.house_face:
            return Winner.USER
        if self.house_face > self.user_face:
            return Winner.HOUSE
        return Winner.TIE

    @property
    def verified(self) -> bool:
        """True only if both draws of the round passed verification."""
        return self.user_draw.verified and self.house_draw.verified


@dataclass
class ScoreBoard:
    """Cumulative results for the lifetime of a session."""
    user_wins: int = 0
    house_wins: int = 0
    ties: int = 0
    unverified_rounds: int = 0
    history: List[RoundResult] = field(default_factory=list)

    def record(self, result: RoundResult):
        """Add a resolved round; exactly one counter moves."""
        winner = result.winner
        if winner is Winner.USER:
            self.user_wins += 1
        elif winner is Winner.HOUSE:
            self.house_wins += 1
        else:
            self.ties += 1
        if not result.verified:
            self.unverified_rounds += 1
        self.history.append(result)

    @property
    def rounds_played(self) -> int:
        return len(self.history)

    @property
    def leader(self) -> Optional[Side]:
        if self.user_wins > self.house_wins:
            return Side.USER
        if self.house_wins > self.user_wins:
            return Side.HOUSE
        return None

    def __str__(self):
        return f"You {self.user_wins} : {self.house_wins} Computer ({self.ties} ties)"
