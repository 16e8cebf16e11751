"""Exception types for fairdice."""


class FairDiceError(Exception):
    """Base class for all fairdice errors."""


class StartupConfigError(FairDiceError):
    """Dice configurations given on the command line are missing or malformed."""


class InputValidationError(FairDiceError):
    """A single answer at a prompt could not be accepted."""


class CommitmentVerificationFailure(FairDiceError):
    """A revealed secret does not reproduce the digest published before the move."""

    def __init__(self, digest: str, recomputed: str):
        self.digest = digest
        self.recomputed = recomputed
        super().__init__(
            f"Published digest {digest} does not match recomputed digest {recomputed}"
        )


class EntropyFailure(FairDiceError):
    """The secure random source is unavailable."""


class QuitRequested(FairDiceError):
    """The user asked to leave the game at a prompt."""
