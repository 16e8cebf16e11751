import logging
from typing import Callable, Dict, List, Optional, Sequence, TypeVar
from .console import ConsoleIO
from .dice import DiceConfiguration
from .errors import InputValidationError, QuitRequested
from .game_state import GameConfig, Phase, RoundResult, ScoreBoard, Side
from .probability import ProbabilityEngine
from ..fairness.commitment import Commitment, FairRandomGenerator, RevealedDraw


logger = logging.getLogger(__name__)

T = TypeVar("T")

QUIT_TOKENS = ("x", "quit")
HELP_TOKENS = ("?", "help")
YES_TOKENS = ("y", "yes")
NO_TOKENS = ("n", "no")

HELP_TEXT = (
    "Commands (case-insensitive):\n"
    "  <number>  answer the current prompt\n"
    "  ?         show help for the current step\n"
    "  X         exit the game\n"
    "Every random value I pick is committed first: I show its HMAC before you answer\n"
    "and reveal the secret afterwards, so you can check I did not change it."
)


def parse_number(answer: str, upper: int) -> int:
    """Accept an integer in ``[0, upper)``."""
    not_a_number = InputValidationError(f"{answer!r} is not a number. Enter a value from 0 to {upper - 1}.")
    if not (answer.isascii() and answer.isdigit()):
        raise not_a_number
    try:
        value = int(answer)
    except ValueError:
        # digit strings beyond the interpreter's conversion limit
        raise not_a_number from None
    if value >= upper:
        raise InputValidationError(f"{value} is out of range. Enter a value from 0 to {upper - 1}.")
    return value


def parse_yes_no(answer: str) -> bool:
    if answer in YES_TOKENS:
        return True
    if answer in NO_TOKENS:
        return False
    raise InputValidationError(f"{answer!r} is not an answer. Enter Y or N.")


class GameSession:
    """Runs the commit/reveal dice game for one user against the house.

    All state of a session (key, score, chosen dice) lives on this object.
    The session only talks to the outside world through ``io``.
    """

    def __init__(self, configs: Sequence[DiceConfiguration], io: ConsoleIO,
                 config: Optional[GameConfig] = None,
                 generator: Optional[FairRandomGenerator] = None,
                 engine: Optional[ProbabilityEngine] = None):
        if not configs:
            raise ValueError("At least one dice configuration is required")
        self.configs: List[DiceConfiguration] = list(configs)
        self.io = io
        self.config = config or GameConfig()
        self.generator = generator or FairRandomGenerator(secret_length=self.config.secret_length)
        self.engine = engine or ProbabilityEngine()
        self.table = self.engine.build_table(self.configs)
        self.scoreboard = ScoreBoard()
        self.phase = Phase.AWAIT_FIRST_MOVE_GUESS
        self.first_mover: Optional[Side] = None
        self.dice: Dict[Side, int] = {}
        self.round_number = 0
        self._pending_rolls: List[Side] = []
        self._draws: Dict[Side, RevealedDraw] = {}
        self._handlers: Dict[Phase, Callable[[], None]] = {
            Phase.AWAIT_FIRST_MOVE_GUESS: self.determine_first_move,
            Phase.SELECT_DICE: self.select_dice,
            Phase.ROLL: self.roll,
            Phase.RESOLVE: self.resolve,
            Phase.CONTINUE: self.ask_continue,
        }

    def run(self) -> ScoreBoard:
        """Play rounds until the user quits or declines another round."""
        self.io.info("The game has started!")
        self.io.show_probability_table(self.configs, self.table)
        try:
            while self.phase is not Phase.EXIT:
                self.step()
        except QuitRequested:
            logger.info("User quit during %s", self.phase.value)
            self.phase = Phase.EXIT
        except (EOFError, KeyboardInterrupt):
            logger.info("Input closed during %s", self.phase.value)
            self.io.warning("Game interrupted.")
            self.phase = Phase.EXIT
        self.finish()
        return self.scoreboard

    def step(self):
        """Execute the handler of the current phase."""
        handler = self._handlers.get(self.phase)
        if handler is None:
            raise RuntimeError(f"No handler for phase {self.phase}")
        handler()

    def finish(self):
        self.io.info(f"Final score: {self.scoreboard}")
        if self.scoreboard.unverified_rounds:
            self.io.warning(f"{self.scoreboard.unverified_rounds} round(s) could not be verified.")
        key = self.generator.disclose_key()
        self.io.info(f"Session key (recompute every HMAC shown above with it): {key}")
        self.io.info("Thanks for playing!")

    # Prompting

    def prompt(self, message: str, parse: Callable[[str], T],
               on_help: Optional[Callable[[], None]] = None) -> T:
        """Ask until ``parse`` accepts the answer.

        Quit raises :class:`QuitRequested`; help and invalid answers re-ask
        the same question without touching any game state.
        """
        while True:
            answer = self.io.ask(message).strip().lower()
            if answer in QUIT_TOKENS:
                raise QuitRequested()
            if answer in HELP_TOKENS:
                (on_help or self.show_help)()
                continue
            try:
                return parse(answer)
            except InputValidationError as exc:
                logger.debug("Rejected input %r: %s", answer, exc)
                self.io.error(str(exc))

    def show_help(self):
        self.io.info(HELP_TEXT)

    def show_table_help(self):
        self.show_help()
        self.io.show_probability_table(self.configs, self.table)

    def show_roll_help(self):
        self.show_help()
        user_die, house_die = self.user_die, self.house_die
        win = self.engine.win_probability(user_die, house_die)
        lose = self.engine.win_probability(house_die, user_die)
        self.io.info(
            f"Your dice [{user_die}] vs my dice [{house_die}]: "
            f"you win {float(win):.2%}, I win {float(lose):.2%}, "
            f"tie {float(1 - win - lose):.2%}."
        )

    # Phases

    def determine_first_move(self):
        self.io.info("Let's determine who makes the first move.")
        n = self.config.first_move_range
        commitment = self.generator.commit(n)
        self.io.info(f"I selected a random value in the range 0..{n - 1} (HMAC={commitment.digest_hex}).")
        guess = self.prompt(f"Try to guess my selection (0..{n - 1})", lambda a: parse_number(a, n))
        house_value = commitment.house_value
        self.io.info(f"My selection: {house_value} (SECRET={commitment.secret_hex}).")
        self.report_verification(commitment)
        if guess == house_value:
            self.io.success("You guessed correctly! You make the first move.")
            self.first_mover = Side.USER
        else:
            self.io.info("Wrong guess. I make the first move.")
            self.first_mover = Side.HOUSE
        logger.info("First move: %s", self.first_mover.value)
        self.phase = Phase.SELECT_DICE

    def select_dice(self):
        self.dice = {}
        if len(self.configs) == 1:
            self.dice = {Side.USER: 0, Side.HOUSE: 0}
            self.io.info(f"There is only one dice [{self.configs[0]}]; we both roll it.")
        elif self.first_mover is Side.USER:
            self.dice[Side.USER] = self.choose_user_die(taken=None)
            self.dice[Side.HOUSE] = self.choose_house_die(taken=self.dice[Side.USER])
        else:
            self.dice[Side.HOUSE] = self.choose_house_die(taken=None)
            self.dice[Side.USER] = self.choose_user_die(taken=self.dice[Side.HOUSE])
        self.start_round()

    def choose_house_die(self, taken: Optional[int]) -> int:
        if taken is None:
            index = self.generator.source.randbelow(len(self.configs))
        elif self.config.house_picks_best_counter:
            index = self.engine.best_counter(self.configs, self.configs[taken], exclude=[taken])
        else:
            remaining = [i for i in range(len(self.configs)) if i != taken]
            index = remaining[self.generator.source.randbelow(len(remaining))]
        self.io.info(f"I choose the [{self.configs[index]}] dice.")
        return index

    def choose_user_die(self, taken: Optional[int]) -> int:
        remaining = [i for i in range(len(self.configs)) if i != taken]
        if len(remaining) == 1:
            index = remaining[0]
            self.io.info(f"You get the remaining [{self.configs[index]}] dice.")
            return index
        lines = [f"  {i} - {self.configs[i]}" for i in remaining]
        self.io.info("Choose your dice:\n" + "\n".join(lines))

        def parse_die(answer: str) -> int:
            index = parse_number(answer, len(self.configs))
            if index == taken:
                raise InputValidationError(f"Dice {index} is already taken. Choose another one.")
            return index

        index = self.prompt("Your selection", parse_die, on_help=self.show_table_help)
        self.io.info(f"You choose the [{self.configs[index]}] dice.")
        return index

    def start_round(self):
        self.round_number += 1
        self._draws = {}
        self._pending_rolls = [self.first_mover, self.first_mover.other]
        logger.info("Round %d: user=%s house=%s", self.round_number, self.user_die, self.house_die)
        self.phase = Phase.ROLL

    def roll(self):
        side = self._pending_rolls[0]
        die = self.user_die if side is Side.USER else self.house_die
        whose = "your" if side is Side.USER else "my"
        n = len(die)
        self.io.info(f"It's time for {whose} roll.")
        commitment = self.generator.commit(n)
        self.io.info(f"I selected a random value in the range 0..{n - 1} (HMAC={commitment.digest_hex}).")
        user_value = self.prompt(f"Add your number modulo {n} (0..{n - 1})",
                                 lambda a: parse_number(a, n), on_help=self.show_roll_help)
        draw = self.generator.reveal(commitment, user_value)
        self.io.info(f"My number is {draw.house_value} (SECRET={commitment.secret_hex}).")
        self.io.info(f"The fair number generation result is {draw}.")
        self.report_verification(commitment, verified=draw.verified)
        self.io.info(f"{whose.capitalize()} roll result is {die.face(draw.result)}.")
        self._draws[side] = draw
        self._pending_rolls.pop(0)
        if not self._pending_rolls:
            self.phase = Phase.RESOLVE

    def resolve(self):
        user_die, house_die = self.user_die, self.house_die
        user_draw, house_draw = self._draws[Side.USER], self._draws[Side.HOUSE]
        result = RoundResult(
            round_number=self.round_number,
            user_die=user_die,
            house_die=house_die,
            user_face=user_die.face(user_draw.result),
            house_face=house_die.face(house_draw.result),
            user_draw=user_draw,
            house_draw=house_draw,
        )
        self.scoreboard.record(result)
        logger.info("Round %d resolved: %s (%d vs %d), verified=%s", result.round_number,
                    result.winner.value, result.user_face, result.house_face, result.verified)
        if result.user_face > result.house_face:
            self.io.success(f"You win ({result.user_face} > {result.house_face})!")
        elif result.house_face > result.user_face:
            self.io.info(f"I win ({result.house_face} > {result.user_face})!")
        else:
            self.io.info(f"It's a tie ({result.user_face} = {result.house_face}).")
        if not result.verified:
            self.io.warning("This round's result is UNVERIFIED.")
        self.io.info(f"Current score: {self.scoreboard}")
        self.phase = Phase.CONTINUE

    def ask_continue(self):
        def show_score():
            self.show_help()
            self.io.info(f"Current score: {self.scoreboard}")

        if self.prompt("Play another round? (y/n)", parse_yes_no, on_help=show_score):
            if self.config.reselect_each_round:
                self.phase = Phase.AWAIT_FIRST_MOVE_GUESS
            else:
                self.start_round()
        else:
            self.phase = Phase.EXIT

    def report_verification(self, commitment: Commitment, verified: Optional[bool] = None):
        if verified is None:
            verified = self.generator.verify(commitment)
        if verified:
            self.io.success(f"HMAC verified for SECRET={commitment.secret_hex}.")
        else:
            logger.error("Fairness breach: digest %s does not match revealed secret", commitment.digest_hex)
            self.io.error(
                f"FAIRNESS BREACH: the revealed secret does not match HMAC={commitment.digest_hex}."
            )

    @property
    def user_die(self) -> DiceConfiguration:
        return self.configs[self.dice[Side.USER]]

    @property
    def house_die(self) -> DiceConfiguration:
        return self.configs[self.dice[Side.HOUSE]]
