"""
Element repository.

Elements reference their project by id (``Element.project``).
"""

from typing import List
from sqlmodel import Session
from sqlalchemy import delete

from models.element import Element
from repositories.base_repository import BaseRepository


class ElementRepository(BaseRepository[Element]):
    """Repository for managing elements."""

    def __init__(self, db_session: Session):
        super().__init__(db_session, Element)

    def delete_by_projects(self, project_ids: List[str]) -> int:
        """
        Delete every element in any of the given projects in one statement.

        Args:
            project_ids: Project ids captured before the projects were removed

        Returns:
            Number of elements removed
        """
        if not project_ids:
            return 0
        res = self.db.exec(delete(Element).where(Element.project.in_(project_ids)))
        self.db.commit()
        return res.rowcount or 0
