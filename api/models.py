"""
API models and schemas for the FastAPI application.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class Category(str, Enum):
    """Book category enumeration."""
    ADVENTURE = "Adventure"
    CLASSICS = "Classics"
    CRIME = "Crime"
    FANTASY = "Fantasy"


class BookCreate(BaseModel):
    """Fields a caller may supply when creating a book."""
    title: str = Field(..., min_length=1, description="Book title")
    description: Optional[str] = Field(None, description="Book description")
    author: Optional[str] = Field(None, description="Book author")
    price: Optional[float] = Field(None, ge=0, description="Book price")
    category: Optional[Category] = Field(None, description="Book category")

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        """Reject titles made of whitespace only."""
        if not v.strip():
            raise ValueError('title must not be blank')
        return v.strip()

    model_config = {
        "json_schema_extra": {
            "example": {
                "title": "The Count of Monte Cristo",
                "description": "A tale of wrongful imprisonment and revenge.",
                "author": "Alexandre Dumas",
                "price": 12.5,
                "category": "Classics"
            }
        }
    }


class BookUpdate(BaseModel):
    """Partial update payload; only supplied fields are written."""
    title: Optional[str] = Field(None, min_length=1, description="Book title")
    description: Optional[str] = Field(None, description="Book description")
    author: Optional[str] = Field(None, description="Book author")
    price: Optional[float] = Field(None, ge=0, description="Book price")
    category: Optional[Category] = Field(None, description="Book category")

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        """Title may be omitted but never cleared."""
        if v is None or not v.strip():
            raise ValueError('title must not be blank')
        return v.strip()


class BookResponse(BaseModel):
    """Book response model for API."""
    id: str = Field(..., description="Unique book identifier")
    title: str = Field(..., description="Book title")
    description: Optional[str] = Field(None, description="Book description")
    author: Optional[str] = Field(None, description="Book author")
    price: Optional[float] = Field(None, description="Book price")
    category: Optional[Category] = Field(None, description="Book category")
    user: Optional[str] = Field(None, description="Identifier of the owning user")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    @classmethod
    def from_document(cls, document: dict) -> "BookResponse":
        """Build a response from a raw MongoDB document."""
        data = dict(document)
        data["id"] = str(data.pop("_id"))
        if data.get("user") is not None:
            data["user"] = str(data["user"])
        return cls(**data)


class BookListResponse(BaseModel):
    """Response model for a page of books."""
    books: List[BookResponse] = Field(..., description="List of books")
    page: int = Field(..., description="Current page number")
    per_page: int = Field(..., description="Number of books per page")
    keyword: Optional[str] = Field(None, description="Title search keyword")


class BookQueryParams(BaseModel):
    """Query parameters for book listing."""
    page: int = Field(1, ge=1, description="Page number")
    keyword: Optional[str] = Field(None, description="Case-insensitive title search")

    @field_validator('keyword')
    @classmethod
    def empty_keyword_is_none(cls, v):
        """Treat an empty keyword as no keyword."""
        return v or None


class UserResponse(BaseModel):
    """User reference returned by the user service."""
    id: str = Field(..., description="Unique user identifier")
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Contact email")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")

    @classmethod
    def from_document(cls, document: dict) -> "UserResponse":
        """Build a response from a raw MongoDB document."""
        return cls(
            id=str(document["_id"]),
            name=document["name"],
            email=document["email"],
            created_at=document.get("created_at"),
        )


class APIKeyResponse(BaseModel):
    """Newly created user together with their API key."""
    user: UserResponse = Field(..., description="Created user")
    api_key: str = Field(..., description="Generated API key, shown once")


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Additional error details")
    status_code: int = Field(..., description="HTTP status code")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")
    database_status: str = Field(..., description="Database connection status")
