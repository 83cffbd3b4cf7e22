"""Credential hashing and session tokens"""

from .hasher import PasswordHasher, hash_password, verify_password
from .sessions import Session, SessionIssuer

__all__ = [
    "PasswordHasher",
    "Session",
    "SessionIssuer",
    "hash_password",
    "verify_password",
]
