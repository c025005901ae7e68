"""
Fake Port Implementations for Testing.

This package provides in-memory fake implementations of the application
ports for fast, isolated testing. No network required.

Features:
- All fakes implement the same Protocol interfaces as real implementations
- Supports seeding with test data
- Supports reset() for test isolation
- Factory functions for common test scenarios

Usage:
    from tests.fakes import FakeRemoteGateway, create_gateway

    # Direct instantiation
    gateway = FakeRemoteGateway()
    gateway.seed_clients([Client(id="c1", name="Alex")])

    # Factory function with a client and one empty session
    gateway = create_gateway(client_id="c1", num_sessions=1)
"""
from typing import List, Optional, Sequence

from domain.models import Client, Exercise, GroupType, Reps, Session
from tests.fakes.credential_store import FakeCredentialStore
from tests.fakes.remote_gateway import FakeRemoteGateway


# =============================================================================
# Factory Functions
# =============================================================================


def make_exercise(
    name: str = "Squat",
    *,
    id: str = "",
    sets: int = 3,
    reps: int = 10,
    weight: float = 0.0,
    group_type: Optional[GroupType] = None,
    group_id: Optional[str] = None,
    session_id: str = "",
) -> Exercise:
    """Build an Exercise with sensible defaults."""
    return Exercise(
        id=id,
        name=name,
        sets=sets,
        metric=Reps(count=reps),
        weight=weight,
        group_type=group_type,
        group_id=group_id,
        session_id=session_id,
    )


def make_session(
    session_id: str = "s1",
    *,
    client_id: str = "c1",
    workout_name: str = "Full Body",
    exercises: Sequence[Exercise] = (),
    session_number: Optional[int] = None,
) -> Session:
    """Build an active Session; exercises are bound to it."""
    bound = [e.model_copy(update={"session_id": session_id}) for e in exercises]
    return Session(
        id=session_id,
        workout_name=workout_name,
        client_id=client_id,
        exercises=bound,
        session_number=session_number,
    )


def create_gateway(
    *,
    client_id: str = "c1",
    client_name: str = "Alex",
    num_sessions: int = 0,
    exercises_per_session: int = 0,
) -> FakeRemoteGateway:
    """
    Create a FakeRemoteGateway holding one client and optional sessions.

    Args:
        client_id: Client ID for generated data
        client_name: Client name
        num_sessions: Number of sessions to create (ids s1, s2, ...)
        exercises_per_session: Ungrouped exercises in each session

    Returns:
        Seeded FakeRemoteGateway instance
    """
    gateway = FakeRemoteGateway()
    gateway.seed_clients([Client(id=client_id, name=client_name)])

    sessions: List[Session] = []
    for i in range(num_sessions):
        session_id = f"s{i + 1}"
        exercises = [
            make_exercise(f"Exercise {j + 1}", id=f"{session_id}-e{j + 1}")
            for j in range(exercises_per_session)
        ]
        sessions.append(
            make_session(
                session_id,
                client_id=client_id,
                workout_name=f"Workout {i + 1}",
                exercises=exercises,
                session_number=i + 1,
            )
        )
    gateway.seed_sessions(sessions)
    return gateway


__all__ = [
    "FakeRemoteGateway",
    "FakeCredentialStore",
    "make_exercise",
    "make_session",
    "create_gateway",
]
