"""
Sources of randomness and keyed digests used by the commitment protocol.

Both are injected so tests can replace them with deterministic fakes.
"""
import hashlib
import hmac
import logging
import secrets
from abc import ABC, abstractmethod
from typing import Callable
from ..core.errors import EntropyFailure


logger = logging.getLogger(__name__)


class RandomSource(ABC):
    """Supplies random bytes and bounded integers."""

    @abstractmethod
    def token_bytes(self, num_bytes: int) -> bytes:
        """Return ``num_bytes`` random bytes."""
        pass

    def randbelow(self, upper: int) -> int:
        """Uniform integer in ``[0, upper)``."""
        if upper < 1:
            raise ValueError("upper must be positive")
        # 8 spare bytes keep the modulo bias below 2**-64 for any small range
        width = (upper.bit_length() + 7) // 8 + 8
        return int.from_bytes(self.token_bytes(width), "big") % upper


class SecureRandomSource(RandomSource):
    """Operating-system CSPRNG via :mod:`secrets`."""

    def token_bytes(self, num_bytes: int) -> bytes:
        try:
            return secrets.token_bytes(num_bytes)
        except (OSError, NotImplementedError) as exc:
            logger.critical("Secure random source unavailable: %s", exc)
            raise EntropyFailure("The secure random source is unavailable") from exc

    def randbelow(self, upper: int) -> int:
        if upper < 1:
            raise ValueError("upper must be positive")
        try:
            return secrets.randbelow(upper)
        except (OSError, NotImplementedError) as exc:
            logger.critical("Secure random source unavailable: %s", exc)
            raise EntropyFailure("The secure random source is unavailable") from exc


KeyedDigest = Callable[[bytes, bytes], bytes]


def hmac_sha3_256(key: bytes, message: bytes) -> bytes:
    """HMAC-SHA3-256 of ``message`` under ``key``."""
    return hmac.new(key, message, hashlib.sha3_256).digest()
