"""Provably fair commit/reveal draws."""
from .commitment import (
    Commitment,
    FairRandomGenerator,
    RevealedDraw,
    combine_values,
    commit,
    derive_value,
    verify,
)
from .random_source import RandomSource, SecureRandomSource, hmac_sha3_256

__all__ = [
    "Commitment",
    "FairRandomGenerator",
    "RevealedDraw",
    "combine_values",
    "commit",
    "derive_value",
    "verify",
    "RandomSource",
    "SecureRandomSource",
    "hmac_sha3_256",
]
