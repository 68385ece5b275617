"""bcrypt password hashing for user accounts."""
from __future__ import annotations

from passlib.context import CryptContext

from .config import DEFAULT_BCRYPT_ROUNDS


class HashingError(RuntimeError):
    """Raised when a password cannot be hashed."""


class PasswordHasher:
    """One-way adaptive hashing with a configurable bcrypt cost factor."""

    def __init__(self, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> None:
        self._rounds = rounds
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    @property
    def rounds(self) -> int:
        return self._rounds

    def hash(self, plaintext: str) -> str:
        try:
            return self._context.hash(plaintext)
        except (TypeError, ValueError) as exc:
            raise HashingError("Unable to hash password") from exc

    def verify(self, plaintext: str, hashed: str) -> bool:
        """Return ``True`` if ``plaintext`` matches ``hashed``.

        The comparison is constant-time. A malformed stored hash counts as a
        mismatch rather than an error.
        """

        if not hashed:
            return False
        try:
            return self._context.verify(plaintext, hashed)
        except ValueError:
            return False


__all__ = ["HashingError", "PasswordHasher"]
