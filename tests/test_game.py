"""
Tests for the round state machine, driven through a scripted console.
"""
import pytest
from fairdice.core.game import GameSession, parse_number, parse_yes_no
from fairdice.core.game_state import GameConfig, Phase, ScoreBoard, Side
from fairdice.core.errors import InputValidationError
from fairdice.fairness import FairRandomGenerator, hmac_sha3_256
from conftest import SESSION_KEY, FixedRandomSource, ScriptedIO


def make_session(configs, answers, chunks=(), config=None, keyed_digest=hmac_sha3_256):
    """Session whose secrets are all zero bytes unless ``chunks`` says otherwise."""
    io = ScriptedIO(answers)
    source = FixedRandomSource(chunks)
    generator = FairRandomGenerator(source=source, keyed_digest=keyed_digest, session_key=SESSION_KEY)
    return GameSession(configs, io, config=config, generator=generator), io


def secret_for(value: int) -> bytes:
    return bytes(31) + bytes([value])


class TestInputParsing:

    def test_parse_number(self):
        assert parse_number("3", 6) == 3
        with pytest.raises(InputValidationError):
            parse_number("6", 6)
        with pytest.raises(InputValidationError):
            parse_number("abc", 6)
        with pytest.raises(InputValidationError):
            parse_number("-1", 6)
        with pytest.raises(InputValidationError):
            parse_number("²", 6)

    def test_parse_yes_no(self):
        assert parse_yes_no("y") is True
        assert parse_yes_no("no") is False
        with pytest.raises(InputValidationError):
            parse_yes_no("maybe")


class TestGameSession:

    def test_correct_guess_gives_first_move_and_one_point(self, dice_a, dice_b):
        # Zero secrets: first-move value 0, every house roll contribution 0
        session, io = make_session([dice_a, dice_b], ["0", "0", "4", "0", "n"])
        scoreboard = session.run()

        assert "You guessed correctly! You make the first move." in io.lines
        assert session.first_mover is Side.USER
        assert session.dice == {Side.USER: 0, Side.HOUSE: 1}
        # User rolls index 4 -> 9, house rolls index 0 -> 1
        assert scoreboard.user_wins == 1
        assert scoreboard.house_wins == 0
        assert scoreboard.rounds_played == 1
        assert scoreboard.unverified_rounds == 0
        assert session.phase is Phase.EXIT

    def test_digest_shown_before_prompt_and_secret_after(self, dice_a, dice_b):
        session, io = make_session([dice_a, dice_b], ["0", "0", "4", "0", "n"])
        session.run()
        first_guess_line = next(i for i, line in enumerate(io.lines) if "HMAC=" in line)
        secret_line = next(i for i, line in enumerate(io.lines) if "SECRET=" in line)
        assert first_guess_line < secret_line
        assert io.prompts[0].startswith("Try to guess")

    def test_wrong_guess_gives_house_first_move(self, dice_a, dice_b, dice_c):
        # First-move value 1; house picks die via randbelow with zero bytes -> index 0
        session, io = make_session([dice_a, dice_b, dice_c], ["0", "2", "0", "0", "n"],
                                   chunks=[secret_for(1)])
        session.run()
        assert "Wrong guess. I make the first move." in io.lines
        assert session.first_mover is Side.HOUSE
        assert session.dice[Side.HOUSE] == 0
        assert session.dice[Side.USER] == 2

    def test_house_counters_user_choice(self, dice_a, dice_b, dice_c):
        session, io = make_session([dice_a, dice_b, dice_c], ["0", "0", "0", "0", "n"])
        session.run()
        # [3,3,5,5,7,7] beats [2,2,4,4,9,9] more often than not
        assert session.dice == {Side.USER: 0, Side.HOUSE: 2}

    def test_taken_die_is_rejected(self, dice_a, dice_b, dice_c):
        session, io = make_session([dice_a, dice_b, dice_c], ["1", "0", "7", "1", "0", "0", "n"])
        session.run()
        assert any("already taken" in e for e in io.errors)
        assert any("out of range" in e for e in io.errors)
        assert session.dice[Side.USER] == 1

    def test_single_configuration_is_shared(self, dice_a):
        session, io = make_session([dice_a], ["0", "5", "0", "n"])
        scoreboard = session.run()
        assert session.dice == {Side.USER: 0, Side.HOUSE: 0}
        # 9 vs 2
        assert scoreboard.user_wins == 1

    def test_tie_moves_only_tie_counter(self, dice_a):
        session, io = make_session([dice_a], ["0", "0", "0", "n"])
        scoreboard = session.run()
        assert (scoreboard.user_wins, scoreboard.house_wins, scoreboard.ties) == (0, 0, 1)

    def test_invalid_input_reprompts_without_new_commitment(self, dice_a, dice_b):
        session, io = make_session([dice_a, dice_b], ["abc", "5", "0", "0", "4", "0", "n"])
        session.run()
        assert io.prompts[0] == io.prompts[1] == io.prompts[2]
        # Key was injected; one commitment per draw: coin flip plus two rolls
        assert session.generator.draws_committed == 3
        assert len(io.errors) == 2

    def test_digit_like_input_reprompts(self, dice_a, dice_b):
        session, io = make_session([dice_a, dice_b], ["²", "①", "0", "0", "4", "0", "n"])
        scoreboard = session.run()
        assert io.prompts[0] == io.prompts[1] == io.prompts[2]
        assert len(io.errors) == 2
        assert all("is not a number" in e for e in io.errors)
        assert scoreboard.rounds_played == 1

    @pytest.mark.parametrize("interrupt", [EOFError, KeyboardInterrupt])
    def test_interrupted_input_still_discloses_key(self, dice_a, dice_b, interrupt):
        session, io = make_session([dice_a, dice_b], ["0", "0"])

        def closed(message):
            io.prompts.append(message)
            if io.answers:
                return io.answers.pop(0)
            raise interrupt()

        io.ask = closed
        scoreboard = session.run()
        assert session.phase is Phase.EXIT
        assert scoreboard.rounds_played == 0
        assert "Game interrupted." in io.lines
        assert any(SESSION_KEY.hex().upper() in line for line in io.lines)
        assert session.generator.disclosed

    def test_help_does_not_consume_commitment(self, dice_a, dice_b):
        session, io = make_session([dice_a, dice_b], ["?", "0", "help", "0", "?", "4", "0", "n"])
        session.run()
        assert session.generator.draws_committed == 3
        # Start of game plus help at dice selection
        assert io.tables_shown == 2
        assert any("you win" in line for line in io.lines)

    def test_input_is_case_insensitive(self, dice_a, dice_b):
        session, io = make_session([dice_a, dice_b], ["0", "0", "4", "0", " Y ", "0", "0", "N"])
        scoreboard = session.run()
        assert scoreboard.rounds_played == 2

    def test_continue_keeps_dice_by_default(self, dice_a, dice_b):
        session, io = make_session([dice_a, dice_b], ["0", "0", "4", "0", "y", "0", "0", "n"])
        scoreboard = session.run()
        assert scoreboard.rounds_played == 2
        assert len([p for p in io.prompts if p.startswith("Try to guess")]) == 1
        # Second round: 2 vs 1
        assert scoreboard.user_wins == 2

    def test_reselect_each_round(self, dice_a, dice_b):
        config = GameConfig(reselect_each_round=True)
        answers = ["0", "0", "4", "0", "y", "0", "1", "0", "0", "n"]
        session, io = make_session([dice_a, dice_b], answers, config=config)
        scoreboard = session.run()
        assert len([p for p in io.prompts if p.startswith("Try to guess")]) == 2
        assert scoreboard.rounds_played == 2

    @pytest.mark.parametrize("answers", [
        ["x"],
        ["0", "X"],
        ["0", "0", "quit"],
        ["0", "0", "4", "x"],
    ])
    def test_quit_mid_round_leaves_score_untouched(self, dice_a, dice_b, answers):
        session, io = make_session([dice_a, dice_b], answers)
        scoreboard = session.run()
        assert session.phase is Phase.EXIT
        assert scoreboard.rounds_played == 0
        assert (scoreboard.user_wins, scoreboard.house_wins, scoreboard.ties) == (0, 0, 0)
        assert "Thanks for playing!" in io.lines

    def test_quit_at_continue_prompt(self, dice_a, dice_b):
        session, io = make_session([dice_a, dice_b], ["0", "0", "4", "0", "x"])
        scoreboard = session.run()
        assert scoreboard.rounds_played == 1
        assert scoreboard.user_wins == 1

    def test_session_key_disclosed_at_end(self, dice_a, dice_b):
        session, io = make_session([dice_a, dice_b], ["x"])
        session.run()
        assert any(SESSION_KEY.hex().upper() in line for line in io.lines)
        assert session.generator.disclosed

    def test_verification_failure_is_reported_not_fatal(self, dice_a, dice_b):
        calls = []

        def drifting_digest(key, message):
            calls.append(message)
            return hmac_sha3_256(key + bytes([len(calls) % 2]), message)

        session, io = make_session([dice_a, dice_b], ["0", "0", "4", "0", "n"],
                                   keyed_digest=drifting_digest)
        scoreboard = session.run()
        assert any("FAIRNESS BREACH" in e for e in io.errors)
        assert "This round's result is UNVERIFIED." in io.lines
        assert scoreboard.rounds_played == 1
        assert scoreboard.unverified_rounds == 1


class TestScoreBoard:

    def test_empty_scoreboard(self):
        scoreboard = ScoreBoard()
        assert scoreboard.rounds_played == 0
        assert scoreboard.leader is None
        assert str(scoreboard) == "You 0 : 0 Computer (0 ties)"

    def test_leader_follows_wins(self, dice_a, dice_b):
        session, io = make_session([dice_a, dice_b], ["0", "0", "4", "0", "n"])
        assert session.run().leader is Side.USER
