"""Password hashing for the self-hosted identity directory.

bcrypt over a SHA-256 pre-hash: bcrypt only reads the first 72 bytes of its
input, so long passphrases are digested to a fixed 44-byte value first.
Hashing is CPU-bound; async callers run it through asyncio.to_thread.
"""

import base64
import hashlib

import bcrypt

DEFAULT_BCRYPT_ROUNDS = 12


def _prehash(password: str) -> bytes:
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


class PasswordHasher:
    """bcrypt hasher with a configurable cost (tests use the minimum, 4)."""

    def __init__(self, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> None:
        self.rounds = rounds
        self._dummy_hash: str | None = None

    def hash(self, password: str) -> str:
        return bcrypt.hashpw(_prehash(password), bcrypt.gensalt(rounds=self.rounds)).decode(
            "utf-8"
        )

    def verify(self, password: str, hashed_password: str) -> bool:
        """Return True if password matches. Malformed hashes never match."""
        try:
            return bool(bcrypt.checkpw(_prehash(password), hashed_password.encode("utf-8")))
        except (ValueError, TypeError):
            return False

    def dummy_hash(self) -> str:
        """A valid hash to compare against when the account does not exist (equal timing)."""
        if self._dummy_hash is None:
            self._dummy_hash = self.hash("not-a-real-password")
        return self._dummy_hash
