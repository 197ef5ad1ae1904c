from datetime import datetime
from typing import Dict, Any
import uuid

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import JSON, DateTime

from utils.clock import utc_now


class Element(SQLModel, table=True):
    """Model element scoped to exactly one project through ``project``."""

    __tablename__ = "elements"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str = Field(nullable=False)
    project: str = Field(index=True)  # projects.id, by value
    custom: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True), nullable=False)
