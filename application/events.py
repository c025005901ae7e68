"""
Refresh signal bus.

Broadcasts "data for X changed, re-fetch" to whichever views are currently
interested. Delivery is synchronous on the publisher's context (the event
loop thread); coroutine handlers are scheduled as tasks on the running loop
so they can re-fetch without blocking the publisher.

There is no replay: a handler subscribed after a publish never sees it.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Set, Union

logger = logging.getLogger(__name__)


class EventName(str, Enum):
    """Closed set of refresh signals."""

    CLIENT_CHANGED = "client_changed"
    SESSION_CHANGED = "session_changed"
    EXERCISE_CHANGED = "exercise_changed"
    NUTRITION_CHANGED = "nutrition_changed"
    LOGGED_OUT = "logged_out"


@dataclass(frozen=True)
class RefreshSignal:
    """
    A published signal.

    Attributes:
        name: Which kind of entity changed
        payload: Ids of the affected entities (e.g. {"client_id": "c1"})
    """

    name: EventName
    payload: Mapping[str, str] = field(default_factory=dict)

    @property
    def client_id(self) -> Optional[str]:
        return self.payload.get("client_id")

    @property
    def session_id(self) -> Optional[str]:
        return self.payload.get("session_id")

    @property
    def exercise_id(self) -> Optional[str]:
        return self.payload.get("exercise_id")


Handler = Callable[[RefreshSignal], Union[None, Awaitable[None]]]


class Subscription:
    """
    Handle returned by ``RefreshBus.subscribe``.

    Cancel it when the subscribing component goes away, or use it as a
    context manager to tie it to a block:

        with bus.subscribe(EventName.SESSION_CHANGED, view.reload):
            ...
    """

    def __init__(self, bus: "RefreshBus", name: EventName, handler: Handler):
        self._bus = bus
        self.name = name
        self.handler = handler
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if self._active:
            self._active = False
            self._bus._remove(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.cancel()


class RefreshBus:
    """
    Many-producer, many-consumer broadcast channel keyed by event name.

    Usage:
        >>> bus = RefreshBus()
        >>> sub = bus.subscribe(EventName.SESSION_CHANGED, lambda s: print(s.session_id))
        >>> bus.publish(EventName.SESSION_CHANGED, {"session_id": "s1"})
        s1
        >>> sub.cancel()
    """

    def __init__(self) -> None:
        self._subscriptions: Dict[EventName, List[Subscription]] = {}
        self._tasks: Set[asyncio.Task] = set()

    def subscribe(self, name: EventName, handler: Handler) -> Subscription:
        """Register ``handler`` for every later publish of ``name``."""
        subscription = Subscription(self, name, handler)
        self._subscriptions.setdefault(name, []).append(subscription)
        return subscription

    def publish(self, name: EventName, payload: Optional[Mapping[str, str]] = None) -> int:
        """
        Deliver a signal to every handler subscribed right now.

        A handler that raises is logged and skipped; the others still run.

        Returns:
            Number of handlers the signal was delivered to.
        """
        signal = RefreshSignal(name=name, payload=dict(payload or {}))
        subscribers = list(self._subscriptions.get(name, ()))
        logger.debug(f"Publishing {name.value} {signal.payload} to {len(subscribers)} handlers")

        delivered = 0
        for subscription in subscribers:
            if not subscription.active:
                continue
            try:
                result = subscription.handler(signal)
                if inspect.isawaitable(result):
                    self._schedule(result, name)
            except Exception:
                logger.exception(f"Refresh handler for {name.value} failed")
                continue
            delivered += 1
        return delivered

    def subscriber_count(self, name: EventName) -> int:
        return len(self._subscriptions.get(name, ()))

    async def drain(self) -> None:
        """Wait for scheduled coroutine handlers to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _schedule(self, awaitable: Awaitable[None], name: EventName) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            raise
        task = loop.create_task(awaitable)
        self._tasks.add(task)

        def _done(finished: asyncio.Task) -> None:
            self._tasks.discard(finished)
            if not finished.cancelled() and finished.exception() is not None:
                logger.error(
                    f"Async refresh handler for {name.value} failed: {finished.exception()}"
                )

        task.add_done_callback(_done)

    def _remove(self, subscription: Subscription) -> None:
        subscribers = self._subscriptions.get(subscription.name, [])
        if subscription in subscribers:
            subscribers.remove(subscription)
