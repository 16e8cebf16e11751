from dataclasses import dataclass
from typing import List, Sequence, Tuple
from .errors import StartupConfigError


@dataclass(frozen=True)
class DiceConfiguration:
    """A single non-standard die, described by its faces."""
    faces: Tuple[int, ...]

    def __post_init__(self):
        if not self.faces:
            raise ValueError("A die must have at least one face")
        if not all(isinstance(v, int) and v > 0 for v in self.faces):
            raise ValueError("All die faces must be positive integers")

    def face(self, index: int) -> int:
        """Face shown when the die lands on the zero-based index."""
        return self.faces[index]

    def __len__(self) -> int:
        return len(self.faces)

    def __str__(self) -> str:
        return ",".join(str(v) for v in self.faces)


def parse_face(token: str, text: str) -> int:
    """Parse one face of a configuration, naming the token and configuration on failure."""
    invalid = StartupConfigError(
        f"Invalid face {token!r} in configuration {text!r}: "
        f"all faces must be positive integers"
    )
    stripped = token.strip()
    if not (stripped.isascii() and stripped.isdigit()):
        raise invalid
    try:
        value = int(stripped)
    except ValueError:
        raise invalid from None
    if value <= 0:
        raise invalid
    return value


def parse_configuration(text: str) -> DiceConfiguration:
    """Parse one comma-separated configuration such as ``"2,2,4,4,9,9"``."""
    return DiceConfiguration(tuple(parse_face(token, text) for token in text.split(",")))


def parse_configurations(args: Sequence[str]) -> List[DiceConfiguration]:
    """Parse every command-line configuration, failing on the first bad token."""
    if len(args) < 1:
        raise StartupConfigError(
            "At least one dice configuration is required, e.g. 2,2,4,4,9,9 1,1,6,6,8,8"
        )
    return [parse_configuration(arg) for arg in args]
