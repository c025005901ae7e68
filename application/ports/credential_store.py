"""
Credential Store Interface (Port).

Token issuance and refresh belong to the authentication collaborator; the
gateway only reads the current bearer token.
"""
from typing import Optional, Protocol


class CredentialStore(Protocol):
    """Source of the bearer token attached to every gateway request."""

    def get_token(self) -> Optional[str]:
        """
        Get the current bearer token.

        Returns:
            Token string, or None when no user is signed in.
        """
        ...

    def set_token(self, token: Optional[str]) -> None:
        """Store a new token, or clear it with None (logout)."""
        ...
