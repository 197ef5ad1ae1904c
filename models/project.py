from datetime import datetime
from typing import Dict, Any
import uuid

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import JSON, DateTime

from utils.clock import utc_now


class Project(SQLModel, table=True):
    """Project scoped to exactly one organization through ``org``."""

    __tablename__ = "projects"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str = Field(nullable=False)
    org: str = Field(index=True)  # organizations.id
    custom: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True), nullable=False)
