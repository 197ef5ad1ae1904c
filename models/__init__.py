from models.api_key import APIKey
from models.user import User
from models.organization import Organization
from models.project import Project
from models.element import Element

__all__ = [
    "APIKey",
    "User",
    "Organization",
    "Project",
    "Element",
]
