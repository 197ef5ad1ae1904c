"""
Events module - user lifecycle notifications.

Usage:
    from events import UserEventBus, UserEventType

    bus = UserEventBus()
    subscription = bus.subscribe(UserEventType.USERS_CREATED, on_created)
    await bus.publish(UserEventType.USERS_CREATED, users)
    bus.unsubscribe(subscription)
"""

from events.bus import (
    ListenerError,
    PublishResult,
    Subscription,
    UserEvent,
    UserEventBus,
    UserEventType,
)

__all__ = [
    "ListenerError",
    "PublishResult",
    "Subscription",
    "UserEvent",
    "UserEventBus",
    "UserEventType",
]
