"""
User repository.

Reads users and patches their custom data. Creating and deleting users
belongs to the identity side (see services.user_service).
"""

from typing import Any, Dict, List, Optional
from sqlmodel import Session, select

from models.user import User
from repositories.base_repository import BaseRepository
from utils.clock import utc_now


class UserRepository(BaseRepository[User]):
    """Repository for managing users."""

    def __init__(self, db_session: Session):
        super().__init__(db_session, User)

    def get_by_username(self, username: str) -> Optional[User]:
        """Get a user by username (primary key)."""
        return self.get_by_id(username)

    def get_by_usernames(self, usernames: List[str]) -> List[User]:
        """
        Get every user whose username is in ``usernames``.

        Args:
            usernames: Usernames to look up

        Returns:
            Matching users (unknown usernames are ignored)
        """
        if not usernames:
            return []
        statement = select(User).where(User.username.in_(usernames))
        return list(self.db.exec(statement).all())

    def get_without_sandbox(self) -> List[User]:
        """
        Get all users whose custom data has no ``sandbox`` key.

        The custom map is a JSON column, so the key check is done in Python
        to stay portable between SQLite and Postgres.
        """
        users = self.db.exec(select(User).order_by(User.created_at)).all()
        return [u for u in users if "sandbox" not in (u.custom or {})]

    def update_custom(self, username: str, custom: Dict[str, Any]) -> bool:
        """
        Replace a user's custom data.

        Args:
            username: User to patch
            custom: The complete new custom map

        Returns:
            True if the user existed and was updated, False otherwise
        """
        user = self.get_by_username(username)
        if not user:
            return False

        # Assign a fresh dict so the JSON column is flagged dirty
        user.custom = dict(custom)
        user.updated_at = utc_now()
        self.update(user)
        return True
