"""
FastAPI RESTful API for the Bookshelf book management service.

This module provides:
- Book lookup, listing with title search, creation, update and deletion
- Ownership attribution of books to users
- API key-based authentication
"""
