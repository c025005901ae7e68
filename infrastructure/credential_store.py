"""
In-memory credential store.

Holds the bearer token for the current process. The login flow (outside
this package) calls ``set_token``; logout clears it.
"""

from typing import Optional


class InMemoryCredentialStore:
    """CredentialStore backed by a single attribute."""

    def __init__(self, token: Optional[str] = None):
        self._token = token or None

    def get_token(self) -> Optional[str]:
        return self._token

    def set_token(self, token: Optional[str]) -> None:
        self._token = token or None

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None
