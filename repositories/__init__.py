"""
Repositories module - Data Access Layer.

Provides repository classes for database operations following the Repository pattern.
Each repository handles CRUD operations for a specific domain entity.

Usage:
    from repositories import (
        OrganizationRepository,
        ProjectRepository,
        ElementRepository,
    )

    # Initialize with a database session
    org_repo = OrganizationRepository(db_session)
    project_repo = ProjectRepository(db_session)

    # Use repository methods
    removed = org_repo.delete_sandbox(sandbox_id, username)
    project_ids = project_repo.get_ids_by_org(sandbox_id)
"""

from repositories.base_repository import BaseRepository
from repositories.user_repository import UserRepository
from repositories.organization_repository import OrganizationRepository
from repositories.project_repository import ProjectRepository
from repositories.element_repository import ElementRepository
from repositories.api_key_repository import APIKeyRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "OrganizationRepository",
    "ProjectRepository",
    "ElementRepository",
    "APIKeyRepository",
]
