"""Tests for bcrypt password hashing."""

from __future__ import annotations

import pytest

from bandboard.config import DEFAULT_BCRYPT_ROUNDS
from bandboard.passwords import HashingError, PasswordHasher


def test_hash_is_not_the_plaintext_and_verifies(hasher: PasswordHasher) -> None:
    hashed = hasher.hash("secret1")

    assert hashed != "secret1"
    assert hasher.verify("secret1", hashed)
    assert not hasher.verify("wrong", hashed)


def test_hashes_are_salted(hasher: PasswordHasher) -> None:
    assert hasher.hash("secret1") != hasher.hash("secret1")


def test_default_cost_factor_is_twelve() -> None:
    hasher = PasswordHasher()

    assert hasher.rounds == DEFAULT_BCRYPT_ROUNDS == 12
    hashed = hasher.hash("secret1")
    assert hashed.startswith("$2b$12$")
    assert hasher.verify("secret1", hashed)


def test_malformed_hash_never_verifies(hasher: PasswordHasher) -> None:
    assert not hasher.verify("secret1", "not-a-bcrypt-hash")
    assert not hasher.verify("secret1", "")


def test_hashing_failure_is_reported(hasher: PasswordHasher) -> None:
    with pytest.raises(HashingError):
        hasher.hash(None)  # type: ignore[arg-type]
