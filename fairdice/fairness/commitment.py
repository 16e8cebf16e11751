"""
Commit/reveal protocol for fair random draws.

The house draws a secret, publishes ``HMAC(session_key, secret)`` and only
reveals the secret once the user has answered. The house value is derived
from the secret (never from the published digest) and blended with the
user's number by modular addition.
"""
import hmac
import logging
from dataclasses import dataclass, field
from typing import Optional
from ..core.errors import CommitmentVerificationFailure
from .random_source import KeyedDigest, RandomSource, SecureRandomSource, hmac_sha3_256


logger = logging.getLogger(__name__)

SECRET_LENGTH = 32
KEY_LENGTH = 32


@dataclass(frozen=True)
class Commitment:
    """A published digest binding the house to a secret draw."""
    secret: bytes = field(repr=False)
    digest: bytes
    range_size: int

    @property
    def digest_hex(self) -> str:
        return self.digest.hex().upper()

    @property
    def secret_hex(self) -> str:
        return self.secret.hex().upper()

    @property
    def house_value(self) -> int:
        """House contribution in ``[0, range_size)``."""
        return derive_value(self.secret, self.range_size)


@dataclass(frozen=True)
class RevealedDraw:
    """Outcome of one completed draw."""
    commitment: Commitment
    user_value: int
    result: int
    verified: bool

    @property
    def house_value(self) -> int:
        return self.commitment.house_value

    def __str__(self) -> str:
        n = self.commitment.range_size
        return f"({self.house_value} + {self.user_value}) mod {n} = {self.result}"


def derive_value(data: bytes, range_size: int) -> int:
    """Reduce the full byte string, read as a big-endian integer, modulo ``range_size``."""
    if range_size < 1:
        raise ValueError("range_size must be positive")
    return int.from_bytes(data, "big") % range_size


def combine_values(house_value: int, user_value: int, range_size: int) -> int:
    """Two-party fair combination: ``(house + user) mod range_size``."""
    if range_size < 1:
        raise ValueError("range_size must be positive")
    return (house_value + user_value) % range_size


def commit(session_key: bytes, range_size: int,
           source: Optional[RandomSource] = None,
           keyed_digest: KeyedDigest = hmac_sha3_256,
           secret_length: int = SECRET_LENGTH) -> Commitment:
    """Draw a fresh secret and compute its keyed digest."""
    if range_size < 1:
        raise ValueError("range_size must be positive")
    source = source or SecureRandomSource()
    secret = source.token_bytes(secret_length)
    return Commitment(secret=secret, digest=keyed_digest(session_key, secret), range_size=range_size)


def verify(commitment: Commitment, session_key: bytes,
           keyed_digest: KeyedDigest = hmac_sha3_256) -> bool:
    """Check that the revealed secret reproduces the published digest."""
    recomputed = keyed_digest(session_key, commitment.secret)
    return hmac.compare_digest(recomputed, commitment.digest)


class FairRandomGenerator:
    """Holds the session key and runs commit/reveal draws for one game session."""

    def __init__(self, source: Optional[RandomSource] = None,
                 keyed_digest: KeyedDigest = hmac_sha3_256,
                 session_key: Optional[bytes] = None,
                 secret_length: int = SECRET_LENGTH):
        self.source = source or SecureRandomSource()
        self.keyed_digest = keyed_digest
        self.secret_length = secret_length
        self._session_key = session_key if session_key is not None else self.source.token_bytes(KEY_LENGTH)
        self._disclosed = False
        self.draws_committed = 0

    def commit(self, range_size: int) -> Commitment:
        """Start a draw over ``[0, range_size)``."""
        if self._disclosed:
            raise RuntimeError("Session key already disclosed; start a new session")
        commitment = commit(self._session_key, range_size, self.source,
                            self.keyed_digest, self.secret_length)
        self.draws_committed += 1
        logger.debug("Committed draw %d over range %d, digest=%s",
                     self.draws_committed, range_size, commitment.digest_hex)
        return commitment

    def verify(self, commitment: Commitment) -> bool:
        return verify(commitment, self._session_key, self.keyed_digest)

    def verify_strict(self, commitment: Commitment):
        """Raise :class:`CommitmentVerificationFailure` if the commitment does not check out."""
        if not self.verify(commitment):
            recomputed = self.keyed_digest(self._session_key, commitment.secret)
            raise CommitmentVerificationFailure(commitment.digest_hex, recomputed.hex().upper())

    def reveal(self, commitment: Commitment, user_value: int) -> RevealedDraw:
        """Combine the committed house value with the user's number and verify."""
        if not 0 <= user_value < commitment.range_size:
            raise ValueError(
                f"User value {user_value} outside 0..{commitment.range_size - 1}"
            )
        result = combine_values(commitment.house_value, user_value, commitment.range_size)
        verified = self.verify(commitment)
        if verified:
            logger.debug("Revealed secret=%s result=%d", commitment.secret_hex, result)
        else:
            logger.warning("Verification failed for digest %s", commitment.digest_hex)
        return RevealedDraw(commitment=commitment, user_value=user_value,
                            result=result, verified=verified)

    def disclose_key(self) -> str:
        """Hand out the session key at the end of the session; no draws afterwards."""
        self._disclosed = True
        return self._session_key.hex().upper()

    @property
    def disclosed(self) -> bool:
        return self._disclosed
