"""
Unit tests for Pydantic models.
Tests data validation, document conversion, and edge cases.
"""

import pytest
from bson import ObjectId
from pydantic import ValidationError

from api.models import BookCreate, BookQueryParams, BookResponse, BookUpdate, Category, UserResponse


class TestBookCreate:
    """Test cases for BookCreate model."""

    def test_title_only(self):
        book = BookCreate(title="New Book 1")

        assert book.title == "New Book 1"
        assert book.category is None
        assert book.price is None

    def test_title_is_trimmed(self):
        assert BookCreate(title="  Dune  ").title == "Dune"

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            BookCreate(title="   ")

        assert "title must not be blank" in str(exc_info.value)

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            BookCreate(title="Dune", price=-1)

    def test_unknown_category_rejected(self):
        with pytest.raises(ValidationError):
            BookCreate(title="Dune", category="Poetry")

    def test_category_values(self):
        assert [c.value for c in Category] == ["Adventure", "Classics", "Crime", "Fantasy"]


class TestBookUpdate:
    """Test cases for BookUpdate model."""

    def test_only_supplied_fields_are_set(self):
        update = BookUpdate(title="Updated name")

        assert update.model_dump(exclude_unset=True) == {"title": "Updated name"}

    def test_empty_update_is_valid(self):
        assert BookUpdate().model_dump(exclude_unset=True) == {}

    def test_title_cannot_be_cleared(self):
        with pytest.raises(ValidationError):
            BookUpdate(title=None)

    def test_description_can_be_cleared(self):
        update = BookUpdate(description=None)

        assert update.model_dump(exclude_unset=True) == {"description": None}


class TestBookQueryParams:
    """Test cases for BookQueryParams model."""

    def test_defaults(self):
        query = BookQueryParams()

        assert query.page == 1
        assert query.keyword is None

    def test_page_coerced_from_string(self):
        assert BookQueryParams(page="2").page == 2

    def test_page_must_be_positive(self):
        with pytest.raises(ValidationError):
            BookQueryParams(page=0)

    def test_empty_keyword_becomes_none(self):
        assert BookQueryParams(keyword="").keyword is None


class TestDocumentConversion:
    """Test conversion of MongoDB documents into response models."""

    def test_book_ids_become_strings(self, sample_book_doc, sample_user):
        book = BookResponse.from_document(sample_book_doc)

        assert book.id == "63463406286196cf0ed335f4"
        assert book.user == sample_user.id
        assert book.category == Category.FANTASY

    def test_source_document_is_not_modified(self, sample_book_doc):
        BookResponse.from_document(sample_book_doc)

        assert isinstance(sample_book_doc["_id"], ObjectId)
        assert isinstance(sample_book_doc["user"], ObjectId)

    def test_book_without_owner(self):
        book = BookResponse.from_document({"_id": ObjectId(), "title": "Legacy"})

        assert book.user is None

    def test_user_from_document(self):
        user_id = ObjectId()
        user = UserResponse.from_document({
            "_id": user_id,
            "name": "Ghulam",
            "email": "ghulam@example.com",
            "api_key_hash": "x" * 64,
        })

        assert user.id == str(user_id)
        assert not hasattr(user, "api_key_hash")
