"""
Till Core Security — Public API
==================================
"""

from core.security.password import (
    BcryptCredentialVerifier,
    CredentialVerifier,
    hash_password,
    verify_password,
)

__all__ = [
    "BcryptCredentialVerifier",
    "CredentialVerifier",
    "hash_password",
    "verify_password",
]
