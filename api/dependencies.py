"""
Service handles shared between the application lifespan and route dependencies.
"""

from typing import TYPE_CHECKING, Optional

from fastapi import HTTPException, status

if TYPE_CHECKING:
    from api.database import BookService, UserService

# Set during application startup, cleared on shutdown
book_service: Optional["BookService"] = None
user_service: Optional["UserService"] = None


def get_book_service() -> "BookService":
    if book_service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database service not available"
        )
    return book_service


def get_user_service() -> "UserService":
    if user_service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database service not available"
        )
    return user_service
