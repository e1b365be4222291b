"""Credential store port."""

from typing import Protocol


class CredentialStore(Protocol):
    """Port for the opaque API token storage."""

    def save(self, token: str) -> bool:
        """Store the token, replacing any previous one. Returns True on success."""
        ...

    def load(self) -> str | None:
        """Return the stored token, if any."""
        ...

    def delete(self) -> None:
        """Remove the stored token."""
        ...
