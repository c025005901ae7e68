"""
Remote Gateway Interface (Port).

This module defines the abstract interface for the REST backend. Every
method returns canonical domain models or raises a ``GatewayError``
subclass from ``application.exceptions``.
"""
from typing import List, Protocol, Sequence

from domain.models import Client, Exercise, Meal, Nutrition, Session


class RemoteGateway(Protocol):
    """
    Abstract interface for client/session/exercise/nutrition CRUD.

    Authentication is attached by the implementation from a credential
    store; the gateway does not manage the credential's lifecycle.
    """

    # -------------------------------------------------------------------------
    # Clients
    # -------------------------------------------------------------------------

    async def fetch_clients(self) -> List[Client]:
        """List the clients owned by the authenticated trainer."""
        ...

    async def create_client(self, client: Client) -> Client:
        ...

    async def update_client(self, client: Client) -> Client:
        """Full replace of a client's attributes."""
        ...

    async def delete_client(self, client_id: str) -> None:
        """Delete a client; the server cascades to sessions and exercises."""
        ...

    # -------------------------------------------------------------------------
    # Sessions
    # -------------------------------------------------------------------------

    async def fetch_sessions(self, client_id: str) -> List[Session]:
        """List a client's sessions with expanded exercises."""
        ...

    async def create_session(self, client_id: str, workout_name: str) -> Session:
        """Create an empty, active session."""
        ...

    async def update_session(self, session: Session) -> Session:
        """
        Send the reduced session payload and return the server echo.

        The echo may hold exercise placeholders (ids only); callers re-attach
        their local exercise objects.
        """
        ...

    async def delete_session(self, session_id: str) -> None:
        ...

    # -------------------------------------------------------------------------
    # Exercises
    # -------------------------------------------------------------------------

    async def fetch_exercises(self, session_id: str) -> List[Exercise]:
        """List a session's exercises in creation order."""
        ...

    async def create_exercise(self, session_id: str, exercise: Exercise) -> Exercise:
        """Create one exercise; the server appends it to the session's order."""
        ...

    async def update_exercise(self, exercise: Exercise) -> Exercise:
        """Full replace of an exercise."""
        ...

    async def delete_exercise(self, exercise_id: str) -> None:
        ...

    # -------------------------------------------------------------------------
    # Nutrition
    # -------------------------------------------------------------------------

    async def fetch_nutrition(self, client_id: str) -> Nutrition:
        """Get a client's plan; an empty Nutrition when none exists."""
        ...

    async def create_nutrition(self, client_id: str, meals: Sequence[Meal]) -> Nutrition:
        ...

    async def update_nutrition(self, nutrition_id: str, meals: Sequence[Meal]) -> Nutrition:
        """Replace the plan's meals."""
        ...

    async def delete_nutrition(self, nutrition_id: str) -> None:
        ...
