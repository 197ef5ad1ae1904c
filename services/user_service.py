"""
User creation and deletion, with lifecycle events.

This is the producer side of the users-created / users-deleted events: it
writes the user rows and then publishes the affected records on the bus.
"""

import asyncio
from typing import List, Optional, Sequence

from sqlalchemy.engine import Engine
from sqlmodel import Session

from events.bus import PublishResult, UserEventBus, UserEventType
from models.user import User
from repositories.user_repository import UserRepository


class UserService:
    """Creates and deletes users and notifies the event bus."""

    def __init__(self, engine: Engine, bus: UserEventBus):
        self.engine = engine
        self.bus = bus

    async def create_users(self, users: Sequence[User]) -> PublishResult:
        """
        Persist new users and publish users-created.

        Args:
            users: Unsaved User records

        Returns:
            PublishResult of the users-created event
        """
        created = await asyncio.to_thread(self._insert, list(users))
        return await self.bus.publish(UserEventType.USERS_CREATED, created)

    async def delete_users(self, usernames: Sequence[str]) -> Optional[PublishResult]:
        """
        Delete users and publish users-deleted with the removed records.

        The records are read before deletion so listeners still see their
        custom data (including the sandbox id).

        Returns:
            PublishResult of the users-deleted event, or None if no user matched
        """
        deleted = await asyncio.to_thread(self._delete, list(usernames))
        if not deleted:
            return None
        return await self.bus.publish(UserEventType.USERS_DELETED, deleted)

    def _insert(self, users: List[User]) -> List[User]:
        with Session(self.engine, expire_on_commit=False) as db:
            return UserRepository(db).create_many(users)

    def _delete(self, usernames: List[str]) -> List[User]:
        with Session(self.engine, expire_on_commit=False) as db:
            repo = UserRepository(db)
            users = repo.get_by_usernames(usernames)
            for user in users:
                db.delete(user)
            db.commit()
            return users
