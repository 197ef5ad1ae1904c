"""
In-process bus for user lifecycle events.

Listeners subscribe to an event type and receive the affected user records.
Publishing awaits every matching listener concurrently; a listener that
raises is logged and recorded but never affects the publisher or the other
listeners.
"""

import asyncio
import inspect
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Set, Union

from models.user import User
from utils.clock import utc_now

logger = logging.getLogger(__name__)


class UserEventType(str, Enum):
    """Lifecycle events emitted by the identity side."""
    USERS_CREATED = "users-created"
    USERS_DELETED = "users-deleted"


@dataclass
class UserEvent:
    """One delivery: an event type and the user records it concerns."""
    event_type: UserEventType
    users: List[User]
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=utc_now)


Listener = Callable[[List[User]], Union[Awaitable[Any], Any]]


@dataclass(frozen=True)
class Subscription:
    """Handle returned by subscribe(); pass it to unsubscribe()."""
    token: int
    event_type: UserEventType


@dataclass(frozen=True)
class ListenerError:
    """A listener failure captured during dispatch."""
    event_id: str
    event_type: UserEventType
    listener: str
    error_type: str
    message: str


@dataclass
class PublishResult:
    """What happened when an event was published."""
    event: UserEvent
    results: List[Any] = field(default_factory=list)
    errors: List[ListenerError] = field(default_factory=list)


class UserEventBus:
    """Async user lifecycle event bus with explicit subscribe/unsubscribe."""

    def __init__(self):
        self._listeners: Dict[int, tuple] = {}
        self._next_token = 1
        self._pending: Set[asyncio.Task] = set()
        self._errors: List[ListenerError] = []

    def subscribe(self, event_type: Union[UserEventType, str], listener: Listener) -> Subscription:
        """Register ``listener`` for ``event_type``."""
        if not callable(listener):
            raise ValueError("listener must be callable")
        event_type = UserEventType(event_type)
        token = self._next_token
        self._next_token += 1
        self._listeners[token] = (event_type, listener)
        return Subscription(token=token, event_type=event_type)

    def unsubscribe(self, subscription: Subscription) -> bool:
        """Remove a listener. Returns True when it was still registered."""
        return self._listeners.pop(subscription.token, None) is not None

    def listener_count(self, event_type: Optional[Union[UserEventType, str]] = None) -> int:
        if event_type is None:
            return len(self._listeners)
        event_type = UserEventType(event_type)
        return sum(1 for registered, _ in self._listeners.values() if registered == event_type)

    async def publish(self, event_type: Union[UserEventType, str], users: Sequence[User]) -> PublishResult:
        """
        Deliver ``users`` to every listener of ``event_type`` and wait for them.

        Returns:
            PublishResult with each successful listener's return value and
            every captured listener error
        """
        event = UserEvent(event_type=UserEventType(event_type), users=list(users))
        listeners = [
            listener for registered, listener in self._listeners.values()
            if registered == event.event_type
        ]

        result = PublishResult(event=event)
        if not listeners:
            return result

        returned = await asyncio.gather(
            *(self._call(listener, event) for listener in listeners),
            return_exceptions=True,
        )
        for listener, value in zip(listeners, returned):
            if isinstance(value, Exception):
                error = _listener_error(event, listener, value)
                logger.warning(f"Listener {error.listener} failed on {event.event_type.value}: {value}")
                result.errors.append(error)
            else:
                result.results.append(value)

        self._errors.extend(result.errors)
        return result

    def publish_nowait(self, event_type: Union[UserEventType, str], users: Sequence[User]) -> asyncio.Task:
        """
        Schedule a publish on the running loop without waiting for it.

        Use drain() to wait for every scheduled delivery.
        """
        task = asyncio.get_running_loop().create_task(self.publish(event_type, users))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> List[PublishResult]:
        """Wait for deliveries scheduled with publish_nowait()."""
        pending = list(self._pending)
        if not pending:
            return []
        return list(await asyncio.gather(*pending))

    def errors(self) -> List[ListenerError]:
        """Listener failures recorded so far."""
        return list(self._errors)

    @staticmethod
    async def _call(listener: Listener, event: UserEvent) -> Any:
        value = listener(event.users)
        if inspect.isawaitable(value):
            value = await value
        return value


def _listener_name(listener: Listener) -> str:
    return getattr(listener, "__qualname__", None) or repr(listener)


def _listener_error(event: UserEvent, listener: Listener, exc: Exception) -> ListenerError:
    return ListenerError(
        event_id=event.event_id,
        event_type=event.event_type,
        listener=_listener_name(listener),
        error_type=type(exc).__name__,
        message=str(exc),
    )
