"""
Organization repository.

Besides the generic CRUD helpers it provides the guarded delete used when a
sandbox organization is reclaimed.
"""

from typing import List, Optional
from sqlmodel import Session, select
from sqlalchemy import delete

from models.organization import Organization
from repositories.base_repository import BaseRepository


class OrganizationRepository(BaseRepository[Organization]):
    """Repository for managing organizations."""

    def __init__(self, db_session: Session):
        super().__init__(db_session, Organization)

    def insert_many(self, organizations: List[Organization]) -> List[Organization]:
        """Insert organizations as one atomic batch."""
        return self.create_many(organizations)

    def get_sandbox(self, org_id: str, created_by: str) -> Optional[Organization]:
        """
        Get the sandbox organization with ``org_id`` owned by ``created_by``.

        All three of id, creator and the ``custom.sandbox`` marker must match;
        anything else returns None.
        """
        statement = (
            select(Organization)
            .where(Organization.id == org_id)
            .where(Organization.created_by == created_by)
        )
        org = self.db.exec(statement).first()
        if org is None or not org.is_sandbox:
            return None
        return org

    def delete_sandbox(self, org_id: str, created_by: str) -> int:
        """
        Delete the sandbox organization matching id, creator and marker.

        The marker is checked on the loaded row. The delete is one statement
        filtered on id and creator, so when another session removed the org
        in between, the rowcount is 0.

        Returns:
            Number of organizations removed (0 or 1)
        """
        if self.get_sandbox(org_id, created_by) is None:
            return 0
        res = self.db.exec(
            delete(Organization)
            .where(Organization.id == org_id)
            .where(Organization.created_by == created_by)
        )
        self.db.commit()
        return res.rowcount or 0
