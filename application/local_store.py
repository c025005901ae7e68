"""
Local store: the in-memory view of clients, sessions, exercises and
nutrition plans fetched from the remote gateway.

One LocalStore is built by the composition root (``backend.main``) and
handed to whichever components need it; there is no module-level instance.

Mutation model:
- Every operation awaits the gateway first and touches local state only
  after the canonical entity came back. Nothing is inserted optimistically.
- Local state is changed by synchronous helpers with no await inside, all
  running on the thread that owns the store (the event loop thread).
  Other threads must hop over with ``loop.call_soon_threadsafe`` or
  ``asyncio.run_coroutine_threadsafe``.
- Writes sent to the gateway are shielded: if the calling task is
  cancelled the request still completes, and its result is discarded.
- Nothing is retried. Gateway errors reach the caller unchanged, except in
  ``refresh_sessions`` and the background nutrition fetch, which log and
  keep the previous state.
- A refresh signal is published after every successful mutation.
"""

import asyncio
import logging
import threading
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

from application.events import EventName, RefreshBus
from application.exceptions import (
    ClientNotFoundError,
    ExerciseNotFoundError,
    GatewayError,
    PartialFailure,
    SessionNotFoundError,
)
from application.ports import RemoteGateway
from domain.models import Client, Exercise, Meal, Nutrition, Session, reattach_exercises
from domain.services.grouping import validate_grouping

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LocalStore:
    """
    Authoritative in-memory cache of fetched entities.

    Usage:
        >>> store = LocalStore(gateway=gateway, bus=bus)
        >>> session = await store.create_session("client-1", "Upper Body")
        >>> await store.add_exercises_sequentially(session.id, drafts)
        >>> await store.toggle_completion(store.get_session(session.id))
    """

    def __init__(
        self,
        gateway: RemoteGateway,
        bus: RefreshBus,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """
        Initialize the store with its collaborators.

        Args:
            gateway: Remote gateway used for every CRUD call
            bus: Refresh bus that receives a signal after each mutation
            clock: Source of "now" for completion timestamps
        """
        self._gateway = gateway
        self._bus = bus
        self._clock = clock
        self._owner_thread = threading.get_ident()

        self._clients: Dict[str, Client] = {}
        self._sessions: Dict[str, List[Session]] = {}
        self._nutrition: Dict[str, Nutrition] = {}
        self._nutrition_tasks: Dict[str, asyncio.Task] = {}

    # =========================================================================
    # Reads
    # =========================================================================

    @property
    def clients(self) -> List[Client]:
        return list(self._clients.values())

    def get_client(self, client_id: str) -> Client:
        try:
            return self._clients[client_id]
        except KeyError:
            raise ClientNotFoundError(client_id) from None

    def sessions_for(self, client_id: str) -> List[Session]:
        """Sessions held for a client, in fetch/creation order."""
        return list(self._sessions.get(client_id, ()))

    def get_session(self, session_id: str) -> Session:
        client_id, index = self._locate_session(session_id)
        return self._sessions[client_id][index]

    def get_exercise(self, exercise_id: str) -> Exercise:
        location = self._find_exercise(exercise_id)
        if location is None:
            raise ExerciseNotFoundError(exercise_id)
        client_id, session_index, exercise_index = location
        return self._sessions[client_id][session_index].exercises[exercise_index]

    def nutrition_for(self, client_id: str) -> Optional[Nutrition]:
        return self._nutrition.get(client_id)

    def is_fetching_nutrition(self, client_id: str) -> bool:
        task = self._nutrition_tasks.get(client_id)
        return task is not None and not task.done()

    # =========================================================================
    # Clients
    # =========================================================================

    async def fetch_clients(self) -> List[Client]:
        """Replace the held client list with the server's."""
        clients = await self._gateway.fetch_clients()
        self._assert_owner()
        self._clients = {client.id: client for client in clients}
        logger.info(f"Fetched {len(clients)} clients")
        return clients

    async def add_client(self, client: Client) -> Client:
        created = await self._write(self._gateway.create_client(client))
        self._assert_owner()
        self._clients[created.id] = created
        logger.info(f"Created client {created.id}")
        self._bus.publish(EventName.CLIENT_CHANGED, {"client_id": created.id})
        return created

    async def update_client(self, client: Client) -> Client:
        updated = await self._write(self._gateway.update_client(client))
        self._assert_owner()
        self._clients[updated.id] = updated
        logger.info(f"Updated client {updated.id}")
        self._bus.publish(EventName.CLIENT_CHANGED, {"client_id": updated.id})
        return updated

    async def delete_client(self, client_id: str) -> None:
        """Delete a client; its sessions and plan are dropped locally too."""
        await self._write(self._gateway.delete_client(client_id))
        self._assert_owner()
        self.cancel_fetch(client_id)
        self._clients.pop(client_id, None)
        self._sessions.pop(client_id, None)
        self._nutrition.pop(client_id, None)
        logger.info(f"Deleted client {client_id}")
        self._bus.publish(EventName.CLIENT_CHANGED, {"client_id": client_id})

    # =========================================================================
    # Sessions
    # =========================================================================

    async def fetch_sessions(self, client_id: str) -> List[Session]:
        """Replace the sessions held for a client with the server's."""
        sessions = await self._gateway.fetch_sessions(client_id)
        self._assert_owner()
        self._sessions[client_id] = list(sessions)
        logger.info(f"Fetched {len(sessions)} sessions for client {client_id}")
        return sessions

    async def refresh_sessions(self, client_id: str) -> bool:
        """
        Re-fetch a client's sessions for a refresh handler.

        A failure is logged and the previously held sessions stay in place.

        Returns:
            True if the sessions were refreshed.
        """
        try:
            await self.fetch_sessions(client_id)
        except GatewayError as e:
            logger.warning(f"Session refresh for client {client_id} failed, keeping cache: {e}")
            return False
        return True

    async def create_session(self, client_id: str, workout_name: str) -> Session:
        """
        Create an empty session remotely, then hold it.

        On failure nothing is inserted locally.
        """
        session = await self._write(self._gateway.create_session(client_id, workout_name))
        self._assert_owner()
        self._sessions.setdefault(client_id, []).append(session)
        logger.info(f"Created session {session.id} for client {client_id}")
        self._bus.publish(
            EventName.SESSION_CHANGED, {"client_id": client_id, "session_id": session.id}
        )
        return session

    async def add_exercises_sequentially(
        self,
        session_id: str,
        drafts: Sequence[Exercise],
    ) -> List[Exercise]:
        """
        Create exercises one at a time, in order.

        The server orders a session's exercises by insertion, so each create
        is awaited before the next is sent. Each created exercise is appended
        to the held session as soon as it comes back.

        Args:
            session_id: Session receiving the exercises
            drafts: Exercises to create, in display order

        Returns:
            The created exercises, with server ids.

        Raises:
            SessionNotFoundError: If the session is not held locally.
            GroupingError: If the drafts would break group structure.
            PartialFailure: If a create fails; exercises created before it
                stay in the session and the gateway error is the cause.
        """
        session = self.get_session(session_id)
        drafts = list(drafts)
        validate_grouping([*session.exercises, *drafts])

        created: List[Exercise] = []
        for position, draft in enumerate(drafts, start=1):
            try:
                exercise = await self._write(self._gateway.create_exercise(session_id, draft))
            except GatewayError as e:
                logger.error(
                    f"Exercise {position}/{len(drafts)} for session {session_id} failed: {e}"
                )
                if created:
                    self._publish_session_changed(session_id)
                raise PartialFailure(len(created), len(drafts), created) from e
            created.append(exercise)
            self._append_exercise(session_id, exercise)

        logger.info(f"Created {len(created)} exercises in session {session_id}")
        self._publish_session_changed(session_id)
        return created

    async def update_session(self, client_id: str, session: Session) -> Session:
        """
        Send a session update and hold the result.

        The update carries only the session fields and exercise ids. The
        exercise objects passed in are re-attached to the server echo so no
        exercise detail is lost.
        """
        echoed = await self._write(self._gateway.update_session(session))
        merged = reattach_exercises(echoed, session.exercises)
        if merged.session_number is None and session.session_number is not None:
            merged = merged.model_copy(update={"session_number": session.session_number})

        self._assert_owner()
        sessions = self._sessions.setdefault(client_id, [])
        for index, held in enumerate(sessions):
            if held.id == merged.id:
                sessions[index] = merged
                break
        else:
            sessions.append(merged)

        logger.info(f"Updated session {merged.id}")
        self._bus.publish(
            EventName.SESSION_CHANGED, {"client_id": client_id, "session_id": merged.id}
        )
        return merged

    async def toggle_completion(self, session: Session) -> Session:
        """Flip completion; stamps "now" when completing, clears it otherwise."""
        toggled = session.toggled_completion(self._clock())
        return await self.update_session(session.client_id, toggled)

    async def delete_session(self, client_id: str, session_id: str) -> None:
        """Delete remotely, drop locally, then signal the client's views."""
        await self._write(self._gateway.delete_session(session_id))
        self._assert_owner()
        self._sessions[client_id] = [
            held for held in self._sessions.get(client_id, ()) if held.id != session_id
        ]
        logger.info(f"Deleted session {session_id}")
        self._bus.publish(
            EventName.SESSION_CHANGED, {"client_id": client_id, "session_id": session_id}
        )

    # =========================================================================
    # Exercises
    # =========================================================================

    async def fetch_session_exercises(self, session_id: str) -> List[Exercise]:
        """Fetch a session's exercises and hold them if the session is held."""
        exercises = await self._gateway.fetch_exercises(session_id)
        self._assert_owner()
        try:
            client_id, index = self._locate_session(session_id)
        except SessionNotFoundError:
            return exercises
        sessions = self._sessions[client_id]
        sessions[index] = sessions[index].with_exercises(exercises)
        return exercises

    async def update_exercise(self, exercise: Exercise) -> Exercise:
        """
        Replace an exercise remotely and in its held session.

        Raises:
            ValueError: If the exercise was never created.
            GroupingError: If the replacement would break group structure.
        """
        if exercise.is_new:
            raise ValueError("cannot update an exercise that has not been created")

        location = self._find_exercise(exercise.id)
        if location is not None:
            client_id, session_index, exercise_index = location
            candidate = list(self._sessions[client_id][session_index].exercises)
            candidate[exercise_index] = exercise
            validate_grouping(candidate)

        updated = await self._write(self._gateway.update_exercise(exercise))
        self._assert_owner()
        session_id = self._replace_exercise(updated)
        logger.info(f"Updated exercise {updated.id}")
        self._bus.publish(
            EventName.EXERCISE_CHANGED,
            {"exercise_id": updated.id, "session_id": session_id or updated.session_id},
        )
        return updated

    async def delete_exercise(self, exercise_id: str) -> None:
        """
        Delete an exercise and remove it from its session's order.

        Group membership of the remaining exercises is left as it was;
        display numbers recompute from the new order.
        """
        await self._write(self._gateway.delete_exercise(exercise_id))
        self._assert_owner()

        payload = {"exercise_id": exercise_id}
        location = self._find_exercise(exercise_id)
        if location is not None:
            client_id, session_index, exercise_index = location
            sessions = self._sessions[client_id]
            session = sessions[session_index]
            remaining = [e for i, e in enumerate(session.exercises) if i != exercise_index]
            sessions[session_index] = session.with_exercises(remaining)
            payload.update({"session_id": session.id, "client_id": client_id})

        logger.info(f"Deleted exercise {exercise_id}")
        self._bus.publish(EventName.EXERCISE_CHANGED, payload)

    # =========================================================================
    # Nutrition
    # =========================================================================

    async def load_nutrition(self, client_id: str) -> Nutrition:
        """Fetch and hold a client's nutrition plan (empty if none)."""
        nutrition = await self._gateway.fetch_nutrition(client_id)
        self._assert_owner()
        self._nutrition[client_id] = nutrition
        return nutrition

    def start_nutrition_fetch(self, client_id: str) -> "asyncio.Task[Optional[Nutrition]]":
        """
        Fetch a client's plan in the background.

        Any earlier fetch for the same client is cancelled first. The task
        resolves to None if the fetch failed; the failure is logged.
        """
        self.cancel_fetch(client_id)
        task = asyncio.get_running_loop().create_task(self._fetch_nutrition_task(client_id))
        self._nutrition_tasks[client_id] = task
        return task

    def cancel_fetch(self, client_id: str) -> bool:
        """
        Cancel the background nutrition fetch of a client (view torn down).

        Returns:
            True if a running fetch was cancelled.
        """
        task = self._nutrition_tasks.pop(client_id, None)
        if task is None or task.done():
            return False
        task.cancel()
        logger.debug(f"Cancelled nutrition fetch for client {client_id}")
        return True

    async def save_nutrition(self, client_id: str, meals: Sequence[Meal]) -> Nutrition:
        """Create the client's plan, or replace its meals if one exists."""
        existing = self._nutrition.get(client_id)
        if existing is not None and existing.id:
            saved = await self._write(self._gateway.update_nutrition(existing.id, meals))
        else:
            saved = await self._write(self._gateway.create_nutrition(client_id, meals))
        self._assert_owner()
        self._nutrition[client_id] = saved
        self._bus.publish(EventName.NUTRITION_CHANGED, {"client_id": client_id})
        return saved

    async def delete_nutrition(self, client_id: str) -> None:
        existing = self._nutrition.get(client_id)
        if existing is None or not existing.id:
            logger.debug(f"No stored nutrition plan to delete for client {client_id}")
            return
        await self._write(self._gateway.delete_nutrition(existing.id))
        self._assert_owner()
        self._nutrition[client_id] = Nutrition(client_id=client_id)
        self._bus.publish(EventName.NUTRITION_CHANGED, {"client_id": client_id})

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def clear(self) -> None:
        """Drop every held entity (logout)."""
        self._assert_owner()
        for client_id in list(self._nutrition_tasks):
            self.cancel_fetch(client_id)
        self._clients.clear()
        self._sessions.clear()
        self._nutrition.clear()
        logger.info("Local store cleared")
        self._bus.publish(EventName.LOGGED_OUT)

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _write(self, call: Awaitable[T]) -> T:
        return await asyncio.shield(call)

    async def _fetch_nutrition_task(self, client_id: str) -> Optional[Nutrition]:
        try:
            return await self.load_nutrition(client_id)
        except GatewayError as e:
            logger.warning(f"Nutrition fetch for client {client_id} failed: {e}")
            return None
        finally:
            if self._nutrition_tasks.get(client_id) is asyncio.current_task():
                del self._nutrition_tasks[client_id]

    def _assert_owner(self) -> None:
        if threading.get_ident() != self._owner_thread:
            raise RuntimeError("LocalStore mutated outside its owning thread")

    def _locate_session(self, session_id: str) -> Tuple[str, int]:
        for client_id, sessions in self._sessions.items():
            for index, session in enumerate(sessions):
                if session.id == session_id:
                    return client_id, index
        raise SessionNotFoundError(session_id)

    def _find_exercise(self, exercise_id: str) -> Optional[Tuple[str, int, int]]:
        for client_id, sessions in self._sessions.items():
            for session_index, session in enumerate(sessions):
                exercise_index = session.index_of(exercise_id)
                if exercise_index is not None:
                    return client_id, session_index, exercise_index
        return None

    def _append_exercise(self, session_id: str, exercise: Exercise) -> None:
        self._assert_owner()
        try:
            client_id, index = self._locate_session(session_id)
        except SessionNotFoundError:
            logger.warning(f"Session {session_id} dropped while exercises were being created")
            return
        sessions = self._sessions[client_id]
        sessions[index] = sessions[index].with_exercises([*sessions[index].exercises, exercise])

    def _replace_exercise(self, exercise: Exercise) -> Optional[str]:
        location = self._find_exercise(exercise.id)
        if location is None:
            return None
        client_id, session_index, exercise_index = location
        sessions = self._sessions[client_id]
        session = sessions[session_index]
        exercises = list(session.exercises)
        exercises[exercise_index] = exercise
        sessions[session_index] = session.with_exercises(exercises)
        return session.id

    def _publish_session_changed(self, session_id: str) -> None:
        try:
            client_id, _ = self._locate_session(session_id)
        except SessionNotFoundError:
            client_id = None
        payload = {"session_id": session_id}
        if client_id is not None:
            payload["client_id"] = client_id
        self._bus.publish(EventName.SESSION_CHANGED, payload)

