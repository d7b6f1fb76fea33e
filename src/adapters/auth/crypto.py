import secrets

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError


class Argon2PasswordVerifier:
    """Verifies against a salted argon2 hash of the admin password."""

    def __init__(self, password_hash: str) -> None:
        self.ph = PasswordHasher()
        self._hash = password_hash

    def verify(self, password: str) -> bool:
        try:
            self.ph.verify(self._hash, password)
            return True
        except (VerificationError, InvalidHashError):
            return False


class PlainPasswordVerifier:
    """Legacy plain-text admin password, compared in constant time."""

    def __init__(self, password: str) -> None:
        self._password = password

    def verify(self, password: str) -> bool:
        if not self._password:
            return False
        return secrets.compare_digest(password.encode(), self._password.encode())


class DisabledPasswordVerifier:
    """Used when no admin credential is configured: every login fails."""

    def verify(self, password: str) -> bool:
        return False


def hash_password(password: str) -> str:
    return str(PasswordHasher().hash(password))
