"""
Database service layer for the FastAPI application.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Union

import structlog
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from api.auth import APIKeyManager
from api.exceptions import InvalidInputError, NotFoundError
from api.models import (
    APIKeyResponse, BookCreate, BookQueryParams, BookResponse, BookUpdate,
    UserResponse
)

logger = structlog.get_logger(__name__)


def _validation_message(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in item['loc'])}: {item['msg']}"
        for item in error.errors()
    )


class BookService:
    """
    Book operations against a MongoDB collection.

    Every identifier-keyed operation checks the identifier with ``is_valid_id``
    before touching the store, and issues a single store call.
    """

    def __init__(
        self,
        database: AsyncIOMotorDatabase,
        page_size: int = 2,
        collection_name: str = "books",
        is_valid_id: Callable[[Any], bool] = ObjectId.is_valid,
    ):
        self.database = database
        self.collection = database[collection_name]
        self.page_size = page_size
        self.is_valid_id = is_valid_id

    def _object_id(self, book_id: str, field: str = "book_id") -> ObjectId:
        if not self.is_valid_id(book_id):
            logger.warning("Rejected malformed identifier", field=field, value=book_id)
            raise InvalidInputError(
                f"Invalid {field}: '{book_id}'", {"field": field, "value": book_id}
            )
        return ObjectId(book_id)

    async def ensure_indexes(self) -> None:
        """Create indexes for title search and owner lookups."""
        try:
            await self.collection.create_index("title")
            await self.collection.create_index("user")
            logger.info("Book indexes ensured", collection=self.collection.name)
        except PyMongoError as e:
            logger.error("Failed to create indexes", error=str(e))
            raise

    async def find_by_id(self, book_id: str) -> BookResponse:
        """
        Get a single book by ID.

        Args:
            book_id: MongoDB ObjectId as a string

        Returns:
            The matching book

        Raises:
            InvalidInputError: If ``book_id`` is not a well-formed ObjectId
            NotFoundError: If no book has this ID
        """
        object_id = self._object_id(book_id)

        try:
            book_doc = await self.collection.find_one({"_id": object_id})
        except PyMongoError as e:
            logger.error("Failed to get book by ID", book_id=book_id, error=str(e))
            raise

        if not book_doc:
            raise NotFoundError("Book", book_id)

        return BookResponse.from_document(book_doc)

    async def find_all(self, query: Optional[BookQueryParams] = None) -> List[BookResponse]:
        """
        Get one page of books, optionally filtered by a title keyword.

        Args:
            query: Page number and keyword; defaults to the first page, unfiltered

        Returns:
            Books on the requested page in store order
        """
        query = query or BookQueryParams()

        filter_query: Dict[str, Any] = {}
        if query.keyword:
            filter_query["title"] = {"$regex": query.keyword, "$options": "i"}

        skip = (query.page - 1) * self.page_size

        try:
            cursor = self.collection.find(filter_query).limit(self.page_size).skip(skip)
            books_docs = await cursor.to_list(length=self.page_size)
        except PyMongoError as e:
            logger.error("Failed to get books", error=str(e), query_params=query.model_dump())
            raise

        logger.debug("Listed books", page=query.page, keyword=query.keyword, count=len(books_docs))
        return [BookResponse.from_document(doc) for doc in books_docs]

    async def create(
        self, book: Union[BookCreate, Dict[str, Any]], user: UserResponse
    ) -> BookResponse:
        """
        Insert a new book owned by ``user``.

        Args:
            book: Book fields supplied by the caller
            user: Authenticated owner of the new book

        Returns:
            The stored book including its assigned ID
        """
        owner_id = self._object_id(user.id, field="user_id")

        if not isinstance(book, BookCreate):
            try:
                book = BookCreate(**book)
            except ValidationError as e:
                raise InvalidInputError(_validation_message(e))

        now = datetime.now(timezone.utc)
        book_doc = book.model_dump(mode="json", exclude_none=True)
        book_doc.update({"user": owner_id, "created_at": now, "updated_at": now})

        try:
            result = await self.collection.insert_one(book_doc)
        except PyMongoError as e:
            logger.error("Failed to create book", title=book.title, user_id=user.id, error=str(e))
            raise

        book_doc["_id"] = result.inserted_id
        logger.info("Book created", book_id=str(result.inserted_id), user_id=user.id)
        return BookResponse.from_document(book_doc)

    async def update_by_id(
        self, book_id: str, update: Union[BookUpdate, Dict[str, Any]]
    ) -> BookResponse:
        """
        Apply a partial update and return the book as stored afterwards.

        Raises:
            InvalidInputError: Malformed ID or invalid field values
            NotFoundError: If no book has this ID
        """
        object_id = self._object_id(book_id)

        if not isinstance(update, BookUpdate):
            try:
                update = BookUpdate(**update)
            except ValidationError as e:
                raise InvalidInputError(_validation_message(e))

        fields = update.model_dump(mode="json", exclude_unset=True)
        fields["updated_at"] = datetime.now(timezone.utc)

        try:
            book_doc = await self.collection.find_one_and_update(
                {"_id": object_id},
                {"$set": fields},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error("Failed to update book", book_id=book_id, error=str(e))
            raise

        if not book_doc:
            raise NotFoundError("Book", book_id)

        logger.info("Book updated", book_id=book_id, fields=sorted(fields))
        return BookResponse.from_document(book_doc)

    async def delete_by_id(self, book_id: str) -> BookResponse:
        """
        Delete a book and return it as it was before deletion.

        Raises:
            InvalidInputError: Malformed ID
            NotFoundError: If no book has this ID
        """
        object_id = self._object_id(book_id)

        try:
            book_doc = await self.collection.find_one_and_delete({"_id": object_id})
        except PyMongoError as e:
            logger.error("Failed to delete book", book_id=book_id, error=str(e))
            raise

        if not book_doc:
            raise NotFoundError("Book", book_id)

        logger.info("Book deleted", book_id=book_id)
        return BookResponse.from_document(book_doc)

    async def health_check(self) -> Dict:
        """
        Perform database health check.

        Returns:
            Dictionary with health status
        """
        try:
            await self.database.command("ping")
            books_count = await self.collection.count_documents({})

            return {
                "status": "healthy",
                "books_collection": "accessible",
                "books_count": books_count
            }
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return {
                "status": "unhealthy",
                "error": str(e)
            }


class UserService:
    """Minimal user directory used to resolve API keys to book owners."""

    def __init__(self, database: AsyncIOMotorDatabase, collection_name: str = "users"):
        self.collection = database[collection_name]

    async def ensure_indexes(self) -> None:
        await self.collection.create_index("api_key_hash", unique=True)
        await self.collection.create_index("email", unique=True)

    async def find_by_api_key(self, api_key: str) -> Optional[UserResponse]:
        """Return the user owning ``api_key``, or None."""
        try:
            user_doc = await self.collection.find_one(
                {"api_key_hash": APIKeyManager.hash_api_key(api_key)}
            )
        except PyMongoError as e:
            logger.error("Failed to look up API key", error=str(e))
            raise

        if not user_doc:
            return None
        return UserResponse.from_document(user_doc)

    async def create_user(self, name: str, email: str) -> APIKeyResponse:
        """
        Create a user with a freshly generated API key.

        The plaintext key is only returned here; the store keeps its hash.
        """
        api_key = APIKeyManager.generate_api_key()
        user_doc = {
            "name": name,
            "email": email,
            "api_key_hash": APIKeyManager.hash_api_key(api_key),
            "created_at": datetime.now(timezone.utc),
        }

        try:
            result = await self.collection.insert_one(user_doc)
        except PyMongoError as e:
            logger.error("Failed to create user", email=email, error=str(e))
            raise

        user_doc["_id"] = result.inserted_id
        logger.info("User created", user_id=str(result.inserted_id), email=email)
        return APIKeyResponse(user=UserResponse.from_document(user_doc), api_key=api_key)

    async def list_users(self) -> List[UserResponse]:
        try:
            cursor = self.collection.find({}, {"api_key_hash": 0}).sort("created_at", 1)
            users_docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error("Failed to list users", error=str(e))
            raise
        return [UserResponse.from_document(doc) for doc in users_docs]
