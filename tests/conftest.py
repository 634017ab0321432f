"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId

from api.database import BookService, UserService
from api.models import UserResponse


@pytest.fixture
def mock_cursor():
    """Create a mock Motor cursor supporting limit/skip chaining."""
    cursor = MagicMock()
    cursor.limit.return_value = cursor
    cursor.skip.return_value = cursor
    cursor.sort.return_value = cursor
    cursor.to_list = AsyncMock(return_value=[])
    return cursor


@pytest.fixture
def mock_collection(mock_cursor):
    """Create a mock Motor collection."""
    collection = MagicMock()
    collection.name = "books"
    collection.find.return_value = mock_cursor
    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock()
    collection.find_one_and_update = AsyncMock(return_value=None)
    collection.find_one_and_delete = AsyncMock(return_value=None)
    collection.count_documents = AsyncMock(return_value=0)
    collection.create_index = AsyncMock()
    return collection


@pytest.fixture
def mock_database(mock_collection):
    """Create a mock Motor database whose collections are all ``mock_collection``."""
    database = MagicMock()
    database.__getitem__.return_value = mock_collection
    database.command = AsyncMock(return_value={"ok": 1})
    return database


@pytest.fixture
def book_service(mock_database):
    """Book service over the mock database with the default page size."""
    return BookService(mock_database, page_size=2)


@pytest.fixture
def user_service(mock_database):
    """User service over the mock database."""
    return UserService(mock_database)


@pytest.fixture
def sample_user():
    """Create a sample owner."""
    return UserResponse(
        id="61c0ccf11d7bf83d153d7c06",
        name="Ghulam",
        email="ghulam@example.com"
    )


@pytest.fixture
def sample_book_doc(sample_user):
    """Create a raw book document as MongoDB returns it."""
    return {
        "_id": ObjectId("63463406286196cf0ed335f4"),
        "title": "New Book",
        "description": "Book Description",
        "author": "Author",
        "price": 100.0,
        "category": "Fantasy",
        "user": ObjectId(sample_user.id),
        "created_at": datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc),
        "updated_at": datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc),
    }
