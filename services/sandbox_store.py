"""
Entity store used by the sandbox lifecycle.

EntityStore is the collaborator injected into the provisioner, reclaimer and
backfill runner. Every method is a coroutine so each store call is a point
where other lifecycle work can run. Failures are raised as exceptions; the
callers turn them into SandboxOutcome values.

SQLModelEntityStore is the database-backed implementation. Each call opens
its own Session and runs the blocking repository work in a worker thread.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Sequence, TypeVar

from sqlalchemy.engine import Engine
from sqlmodel import Session

from models.organization import Organization
from models.user import User
from repositories.element_repository import ElementRepository
from repositories.organization_repository import OrganizationRepository
from repositories.project_repository import ProjectRepository
from repositories.user_repository import UserRepository

R = TypeVar("R")


class EntityStore(ABC):
    """Storage operations the sandbox lifecycle depends on."""

    @abstractmethod
    async def insert_organizations(self, organizations: Sequence[Organization]) -> None:
        """Insert all organizations atomically; raise if the batch fails."""

    @abstractmethod
    async def update_user_custom(self, username: str, custom: Dict[str, Any]) -> bool:
        """Persist a user's custom map. Returns False if the user does not exist."""

    @abstractmethod
    async def delete_sandbox_organization(self, org_id: str, created_by: str) -> int:
        """
        Delete the organization whose id, creator and ``custom.sandbox`` marker
        all match. Returns the number of organizations removed.
        """

    @abstractmethod
    async def find_project_ids(self, org_id: str) -> List[str]:
        """Ids of every project whose ``org`` equals ``org_id``."""

    @abstractmethod
    async def delete_projects(self, org_id: str) -> int:
        """Delete every project whose ``org`` equals ``org_id``; returns the count."""

    @abstractmethod
    async def delete_elements(self, project_ids: Sequence[str]) -> int:
        """Delete every element in any of ``project_ids``; returns the count."""

    @abstractmethod
    async def find_users_without_sandbox(self) -> List[User]:
        """Users whose custom data has no ``sandbox`` entry."""


class SQLModelEntityStore(EntityStore):
    """EntityStore backed by the SQLModel repositories."""

    def __init__(self, engine: Engine):
        self.engine = engine

    async def _run(self, fn: Callable[[Session], R]) -> R:
        def call() -> R:
            # Keep loaded attributes readable after commit; records leave the session
            with Session(self.engine, expire_on_commit=False) as db:
                return fn(db)

        return await asyncio.to_thread(call)

    async def insert_organizations(self, organizations: Sequence[Organization]) -> None:
        if not organizations:
            return
        await self._run(lambda db: OrganizationRepository(db).insert_many(list(organizations)))

    async def update_user_custom(self, username: str, custom: Dict[str, Any]) -> bool:
        return await self._run(lambda db: UserRepository(db).update_custom(username, custom))

    async def delete_sandbox_organization(self, org_id: str, created_by: str) -> int:
        return await self._run(lambda db: OrganizationRepository(db).delete_sandbox(org_id, created_by))

    async def find_project_ids(self, org_id: str) -> List[str]:
        return await self._run(lambda db: ProjectRepository(db).get_ids_by_org(org_id))

    async def delete_projects(self, org_id: str) -> int:
        return await self._run(lambda db: ProjectRepository(db).delete_by_org(org_id))

    async def delete_elements(self, project_ids: Sequence[str]) -> int:
        return await self._run(lambda db: ElementRepository(db).delete_by_projects(list(project_ids)))

    async def find_users_without_sandbox(self) -> List[User]:
        return await self._run(lambda db: UserRepository(db).get_without_sandbox())
