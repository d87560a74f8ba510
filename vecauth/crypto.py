"""
crypto.py — salted SHA-256 and salt generation.

Why this exists:
- Keep the hash in one place so the server and the reference client can't
  drift apart on encoding details (UTF-8 in, upper-case hex out).
- Salts come from an explicitly owned generator so the handshake never
  touches a process-wide PRNG seeded from the clock.

Notes:
- Digest is SHA-256 over salt + secret, salt first.
- Comparison of digests is exact and case-sensitive.
"""

import hmac
import random
import string
from typing import Optional

from cryptography.hazmat.primitives import hashes

from .messages import SALT_LENGTH

SALT_ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase


# -----------------------------
# Salted hash
# -----------------------------

def salted_hash(salt: str, secret: str) -> str:
    """Upper-case hex SHA-256 of salt + secret."""
    digest = hashes.Hash(hashes.SHA256())
    digest.update((salt + secret).encode("utf-8"))
    return digest.finalize().hex().upper()


def hashes_match(expected: str, claimed: bytes) -> bool:
    """
    Byte-for-byte comparison of the server's digest with the client's claim.
    Constant-time so a mismatch position can't be timed.
    """
    return hmac.compare_digest(expected.encode("ascii"), claimed)


# -----------------------------
# Salt generation
# -----------------------------

class SaltGenerator:
    """
    Hands out fresh alphanumeric salts.

    The default source is random.SystemRandom (OS entropy, nothing to seed).
    Tests can pass a seeded random.Random to get repeatable salts.
    """

    def __init__(self, rng: Optional[random.Random] = None, length: int = SALT_LENGTH) -> None:
        self._rng = rng or random.SystemRandom()
        self.length = length

    def new_salt(self) -> str:
        return "".join(self._rng.choice(SALT_ALPHABET) for _ in range(self.length))
