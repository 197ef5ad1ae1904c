"""
User model.

Users are owned by the identity subsystem. The sandbox lifecycle only reads
``username`` and reads/patches the ``sandbox`` key of ``custom``.
"""

from datetime import datetime
from typing import Optional, Dict, Any

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import JSON, DateTime

from utils.clock import utc_now


class User(SQLModel, table=True):
    """Platform user account."""

    __tablename__ = "users"

    username: str = Field(primary_key=True)
    email: Optional[str] = Field(default=None, nullable=True)

    # Free-form custom data; custom["sandbox"] holds the sandbox org id once provisioned
    custom: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True), nullable=False)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True), nullable=False)

    @property
    def sandbox_id(self) -> Optional[str]:
        """Id of the user's sandbox organization, if one was linked."""
        return (self.custom or {}).get("sandbox")
