from datetime import datetime
from typing import Dict, Any, List
import uuid

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import JSON, DateTime

from utils.clock import utc_now


class Organization(SQLModel, table=True):
    """Organizations table, the top-level namespace for projects.

    Permissions map a username to the list of rights it holds on the org
    (subset of "read", "write", "admin"). Sandbox organizations carry
    ``custom["sandbox"] = True`` and are owned by ``created_by``.
    """

    __tablename__ = "organizations"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str = Field(index=True, nullable=False)
    permissions: Dict[str, List[str]] = Field(default_factory=dict, sa_column=Column(JSON))
    created_by: str = Field(index=True, nullable=False)
    last_modified_by: str = Field(nullable=False)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True), nullable=False)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True), nullable=False)
    custom: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))

    @property
    def is_sandbox(self) -> bool:
        return (self.custom or {}).get("sandbox") is True
