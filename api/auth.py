"""
API key authentication for the FastAPI API.
"""

import hashlib
import secrets

import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from api.dependencies import get_user_service
from api.models import UserResponse

logger = structlog.get_logger(__name__)

# Security scheme
security = HTTPBearer()


class APIKeyManager:
    """Generates and hashes API keys."""

    @staticmethod
    def generate_api_key() -> str:
        """Generate a new API key."""
        return f"bk_{secrets.token_urlsafe(32)}"

    @staticmethod
    def hash_api_key(api_key: str) -> str:
        """Hash an API key for storage and lookup."""
        return hashlib.sha256(api_key.encode("utf-8")).hexdigest()

    @staticmethod
    def mask_api_key(api_key: str) -> str:
        return api_key[:10] + "..."


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    user_service=Depends(get_user_service),
) -> UserResponse:
    """
    Resolve the bearer API key to the calling user.

    Args:
        credentials: HTTP authorization credentials
        user_service: User directory

    Returns:
        The user owning the API key

    Raises:
        HTTPException: If the API key is unknown
    """
    api_key = credentials.credentials
    user = await user_service.find_by_api_key(api_key)

    if user is None:
        logger.warning("Invalid API key attempted", api_key=APIKeyManager.mask_api_key(api_key))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user
