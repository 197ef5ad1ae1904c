"""
Project repository.

Projects reference their organization by id (``Project.org``).
"""

from typing import List
from sqlmodel import Session, select
from sqlalchemy import delete

from models.project import Project
from repositories.base_repository import BaseRepository


class ProjectRepository(BaseRepository[Project]):
    """Repository for managing projects."""

    def __init__(self, db_session: Session):
        super().__init__(db_session, Project)

    def get_ids_by_org(self, org_id: str) -> List[str]:
        """Get the ids of all projects in an organization."""
        statement = select(Project.id).where(Project.org == org_id)
        return list(self.db.exec(statement).all())

    def delete_by_org(self, org_id: str) -> int:
        """
        Delete every project in an organization in one statement.

        Returns:
            Number of projects removed
        """
        res = self.db.exec(delete(Project).where(Project.org == org_id))
        self.db.commit()
        return res.rowcount or 0
