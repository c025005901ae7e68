"""
Application-layer exceptions.

These exceptions are used across application and infrastructure layers.
Remote errors keep their type all the way to the caller so the UI layer can
tell a re-authentication prompt from a message or a connectivity notice.
"""

from typing import List, Optional, Sequence

from domain.models import Exercise


class GatewayError(Exception):
    """Base class for every failure reported by the remote gateway."""

    pass


class Unauthorized(GatewayError):
    """Credential missing or rejected (HTTP 401)."""

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message)


class ValidationError(GatewayError):
    """The server rejected the request with one or more messages (HTTP 400)."""

    def __init__(self, messages: Sequence[str]):
        self.messages: List[str] = list(messages)
        super().__init__("; ".join(self.messages) or "Validation failed")


class ServerError(GatewayError):
    """Any other non-2xx response."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NetworkError(GatewayError):
    """The request never produced a response (connect failure, timeout...)."""

    def __init__(self, cause: BaseException):
        super().__init__(f"Network error: {cause}")
        self.cause = cause


class DecodingError(GatewayError):
    """A 2xx response body could not be decoded into domain models."""

    pass


class PartialFailure(GatewayError):
    """
    Sequential exercise creation stopped partway.

    The session keeps the exercises created before the failure; nothing is
    rolled back. The causing gateway error is chained as ``__cause__``.
    """

    def __init__(
        self,
        completed_count: int,
        intended_count: int,
        created: Optional[Sequence[Exercise]] = None,
    ):
        super().__init__(
            f"Created {completed_count} of {intended_count} exercises before failing"
        )
        self.completed_count = completed_count
        self.intended_count = intended_count
        self.created: List[Exercise] = list(created or [])

    @property
    def remaining_count(self) -> int:
        return self.intended_count - self.completed_count


class ClientNotFoundError(LookupError):
    """Client id is not held by the local store."""

    pass


class SessionNotFoundError(LookupError):
    """Session id is not held by the local store."""

    pass


class ExerciseNotFoundError(LookupError):
    """Exercise id is not held by any session in the local store."""

    pass
