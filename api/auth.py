import hashlib
from pydantic import BaseModel
from fastapi import HTTPException, Security, status, Depends
from fastapi.security import APIKeyHeader
from sqlmodel import Session

from utils.database import get_engine
from models.user import User
from repositories.api_key_repository import APIKeyRepository
from repositories.user_repository import UserRepository

# Define API Key security scheme for OpenAPI/Swagger
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=True)


class APIKeyContext(BaseModel):
    """Context info extracted from verified API key."""
    username: str
    api_key_id: int
    api_key_name: str


def _hash_api_key(raw_key: str) -> str:
    """Derive deterministic hash for API key secrets."""
    return hashlib.sha256(raw_key.encode("utf-8")).hexdigest()


async def verify_api_key(api_key: str = Security(api_key_header)) -> APIKeyContext:
    """
    Dependency to verify API key from X-API-Key header, backed by api_keys table.

    Returns:
        APIKeyContext: Username and API key metadata for use in routes

    Raises:
        HTTPException: If API key is missing, invalid or inactive, or validation fails.
    """
    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API key",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    hashed = _hash_api_key(api_key)

    try:
        with Session(get_engine()) as session:
            repo = APIKeyRepository(session)
            record = repo.get_by_hash(hashed)

            if not record:
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail="Invalid API key",
                    headers={"WWW-Authenticate": "ApiKey"},
                )

            if not record.is_active:
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="API key is inactive",
                    headers={"WWW-Authenticate": "ApiKey"},
                )

            repo.touch_last_used(record)

            return APIKeyContext(
                username=record.username,
                api_key_id=record.id,
                api_key_name=record.name
            )
    except HTTPException:
        raise
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to validate API key",
        )


def get_current_user(
    api_key_context: APIKeyContext = Depends(verify_api_key),
) -> User:
    """
    Load the user the verified API key authenticates as.

    Args:
        api_key_context: Verified API key context from auth

    Returns:
        The requesting User

    Usage:
        @router.get("/")
        def home(user: User = Depends(get_current_user)):
            ...
    """
    with Session(get_engine(), expire_on_commit=False) as session:
        user = UserRepository(session).get_by_username(api_key_context.username)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="API key user no longer exists",
        )
    return user
