"""
Till Core Security — Credential Hashing
==========================================
Password (and other secret) hashing using bcrypt.

The engine never compares secrets itself. It asks a
CredentialVerifier, so the hashing mechanism can be swapped
without touching the staff engine.
"""

from __future__ import annotations

import logging
from typing import Protocol

import bcrypt

logger = logging.getLogger("till.security")

BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


def hash_password(password: str, rounds: int = 12) -> str:
    """
    Hash a secret using bcrypt.

    Returns:
        Hashed string (includes salt and algorithm info), e.g. $2b$12$...
    """
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a secret against its bcrypt hash. Non-bcrypt hashes never match."""
    if not hashed_password or not hashed_password.startswith(BCRYPT_PREFIXES):
        logger.warning("Credential check against a non-bcrypt hash refused.")
        return False

    return bcrypt.checkpw(
        plain_password.encode("utf-8"), hashed_password.encode("utf-8")
    )


class CredentialVerifier(Protocol):
    """Collaborator that owns the hashing mechanism."""

    def hash(self, secret: str) -> str:
        ...

    def verify(self, secret: str, hashed: str) -> bool:
        ...


class BcryptCredentialVerifier:
    """Default verifier. Tests use rounds=4 to keep hashing fast."""

    def __init__(self, rounds: int = 12):
        self._rounds = rounds

    def hash(self, secret: str) -> str:
        return hash_password(secret, rounds=self._rounds)

    def verify(self, secret: str, hashed: str) -> bool:
        return verify_password(secret, hashed)
