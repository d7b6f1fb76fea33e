from typing import Protocol


class PasswordVerifierPort(Protocol):
    """Checks a submitted password against the configured admin credential."""

    def verify(self, password: str) -> bool: ...
