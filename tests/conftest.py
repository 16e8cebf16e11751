"""
Shared fakes for fairdice tests.
"""
import hashlib
import pytest
from typing import List, Sequence
from fairdice.core.console import ConsoleIO
from fairdice.core.dice import DiceConfiguration
from fairdice.core.probability import ProbabilityTable
from fairdice.fairness.random_source import RandomSource


SESSION_KEY = bytes(range(32))


class CounterRandomSource(RandomSource):
    """Deterministic byte stream: SHA-256 of seed and a block counter."""

    def __init__(self, seed: bytes = b"fairdice-tests"):
        self.seed = seed
        self.counter = 0

    def token_bytes(self, num_bytes: int) -> bytes:
        out = b""
        while len(out) < num_bytes:
            out += hashlib.sha256(self.seed + self.counter.to_bytes(8, "big")).digest()
            self.counter += 1
        return out[:num_bytes]


class FixedRandomSource(RandomSource):
    """Returns queued byte strings, then zero bytes."""

    def __init__(self, chunks: Sequence[bytes] = ()):
        self.chunks = list(chunks)
        self.requests: List[int] = []

    def token_bytes(self, num_bytes: int) -> bytes:
        self.requests.append(num_bytes)
        if self.chunks:
            return self.chunks.pop(0)
        return bytes(num_bytes)


class ScriptedIO(ConsoleIO):
    """Feeds canned answers and records everything shown."""

    def __init__(self, answers: Sequence[str]):
        self.answers = list(answers)
        self.prompts: List[str] = []
        self.lines: List[str] = []
        self.errors: List[str] = []
        self.tables_shown = 0

    def ask(self, message: str) -> str:
        self.prompts.append(message)
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {message}")
        return self.answers.pop(0)

    def info(self, message: str):
        self.lines.append(message)

    def success(self, message: str):
        self.lines.append(message)

    def warning(self, message: str):
        self.lines.append(message)

    def error(self, message: str):
        self.lines.append(message)
        self.errors.append(message)

    def show_probability_table(self, configs: Sequence[DiceConfiguration], table: ProbabilityTable):
        self.tables_shown += 1

    @property
    def output(self) -> str:
        return "\n".join(self.lines)


@pytest.fixture
def dice_a():
    return DiceConfiguration((2, 2, 4, 4, 9, 9))


@pytest.fixture
def dice_b():
    return DiceConfiguration((1, 1, 6, 6, 8, 8))


@pytest.fixture
def dice_c():
    return DiceConfiguration((3, 3, 5, 5, 7, 7))
