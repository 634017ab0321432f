"""
FastAPI main application for the Bookshelf API.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import structlog
from fastapi import Depends, FastAPI, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorClient

from api import dependencies
from api.auth import get_current_user
from api.config import config as api_config
from api.database import BookService, UserService
from api.dependencies import get_book_service
from api.exceptions import InvalidInputError, NotFoundError
from api.models import (
    BookCreate, BookListResponse, BookQueryParams, BookResponse, BookUpdate,
    ErrorResponse, HealthResponse, UserResponse
)
from utilities.config import config
from utilities.logger import setup_logging

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    setup_logging(
        log_level=config.log_level,
        log_format=config.log_format,
        log_file=config.get_log_file_path(),
        debug=config.debug
    )
    logger.info("Starting Bookshelf API")

    client = AsyncIOMotorClient(config.mongodb_url)
    try:
        database = client[config.mongodb_database]

        # Test connection
        await database.command("ping")
        logger.info("Database connection established", database=config.mongodb_database)

        dependencies.book_service = BookService(
            database,
            page_size=config.page_size,
            collection_name=config.books_collection
        )
        dependencies.user_service = UserService(database, collection_name=config.users_collection)
        await dependencies.book_service.ensure_indexes()
        await dependencies.user_service.ensure_indexes()

    except Exception as e:
        logger.error("Failed to connect to database", error=str(e))
        client.close()
        raise

    yield

    logger.info("Shutting down Bookshelf API")
    dependencies.book_service = None
    dependencies.user_service = None
    client.close()


app = FastAPI(
    title=api_config.api_title,
    description="""
    REST API for managing books and the users who own them.

    ## Authentication

    Every `/books` endpoint requires an API key in the Authorization header:

    ```
    Authorization: Bearer your_api_key_here
    ```

    Keys are issued with `python manage_users.py create <name> <email>`.
    """,
    version=api_config.api_version,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=api_config.cors_origins,
    allow_credentials=api_config.cors_allow_credentials,
    allow_methods=api_config.cors_allow_methods,
    allow_headers=api_config.cors_allow_headers,
)


# Exception handlers
@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request, exc: InvalidInputError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(
            error=exc.message,
            status_code=status.HTTP_400_BAD_REQUEST
        ).model_dump()
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request, exc: NotFoundError):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=ErrorResponse(
            error=exc.message,
            status_code=status.HTTP_404_NOT_FOUND
        ).model_dump()
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    """Handle HTTP exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=str(exc.detail),
            status_code=exc.status_code
        ).model_dump(),
        headers=exc.headers
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc: Exception):
    """Handle general exceptions."""
    logger.error("Unhandled exception", error=str(exc), path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error="Internal server error",
            detail=str(exc) if api_config.debug else None,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        ).model_dump()
    )


# Health check endpoint (no authentication required)
@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint."""
    db_status = "unavailable"
    if dependencies.book_service:
        health_info = await dependencies.book_service.health_check()
        db_status = health_info.get("status", "unknown")

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        timestamp=datetime.now(timezone.utc),
        version=api_config.api_version,
        database_status=db_status
    )


# Books endpoints
@app.get("/books", response_model=BookListResponse, tags=["Books"])
async def get_books(
    page: int = Query(1, ge=1),
    keyword: Optional[str] = None,
    book_service: BookService = Depends(get_book_service),
    user: UserResponse = Depends(get_current_user)
):
    """
    Get one page of books.

    - **page**: Page number (starts from 1)
    - **keyword**: Case-insensitive title search
    """
    query = BookQueryParams(page=page, keyword=keyword)
    books = await book_service.find_all(query)
    return BookListResponse(
        books=books,
        page=query.page,
        per_page=book_service.page_size,
        keyword=query.keyword
    )


@app.get("/books/{book_id}", response_model=BookResponse, tags=["Books"])
async def get_book(
    book_id: str,
    book_service: BookService = Depends(get_book_service),
    user: UserResponse = Depends(get_current_user)
):
    """
    Get a single book by ID.

    - **book_id**: MongoDB ObjectId of the book
    """
    return await book_service.find_by_id(book_id)


@app.post(
    "/books",
    response_model=BookResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Books"]
)
async def create_book(
    book: BookCreate,
    book_service: BookService = Depends(get_book_service),
    user: UserResponse = Depends(get_current_user)
):
    """Create a book owned by the calling user."""
    return await book_service.create(book, user)


@app.put("/books/{book_id}", response_model=BookResponse, tags=["Books"])
async def update_book(
    book_id: str,
    update: BookUpdate,
    book_service: BookService = Depends(get_book_service),
    user: UserResponse = Depends(get_current_user)
):
    """Update the supplied fields of a book."""
    return await book_service.update_by_id(book_id, update)


@app.delete("/books/{book_id}", response_model=BookResponse, tags=["Books"])
async def delete_book(
    book_id: str,
    book_service: BookService = Depends(get_book_service),
    user: UserResponse = Depends(get_current_user)
):
    """Delete a book and return it as it was."""
    return await book_service.delete_by_id(book_id)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=api_config.host,
        port=api_config.port,
        reload=api_config.debug,
        log_level=api_config.log_level.lower()
    )
