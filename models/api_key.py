from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime

from utils.clock import utc_now


class APIKey(SQLModel, table=True):
    """Stores hashed API keys and the user each key authenticates as."""

    __tablename__ = "api_keys"

    id: Optional[int] = Field(default=None, primary_key=True)
    key_hash: str = Field(index=True, nullable=False, sa_column_kwargs={"unique": True})
    name: str = Field(nullable=False)
    username: str = Field(nullable=False, index=True)
    is_active: bool = Field(default=True, nullable=False)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True), nullable=False)
    last_used_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True), nullable=True)
