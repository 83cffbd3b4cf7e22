"""
Password hashing with bcrypt.

Hashes are salted per call; only the hash is ever stored.
"""

import bcrypt

DEFAULT_ROUNDS = 12


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Hash a password using bcrypt"""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash"""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash or a password bcrypt refuses (over 72 bytes)
        return False


class PasswordHasher:
    """Hasher bound to a work factor, injected into the directory service."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self.rounds = rounds
        # Compared against when the login is unknown so the miss costs as much as a hit
        self._dummy_hash = hash_password("dummy-password", rounds)

    def hash(self, password: str) -> str:
        return hash_password(password, self.rounds)

    def verify(self, password: str, password_hash: str) -> bool:
        return verify_password(password, password_hash)

    def burn(self, password: str) -> None:
        verify_password(password, self._dummy_hash)
