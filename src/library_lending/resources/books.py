"""Book Resources - Library Catalog Access

Exposes the catalog and each book's availability via read-only resources.

Resources:
- library://books/list - Every book in id order
- library://books/{book_id} - One book's details and availability
"""

import logging
from typing import Any

from fastmcp.exceptions import ResourceError
from pydantic import BaseModel, Field

from ..lending import get_engine
from ..models.book import Book
from .uri_utils import parse_entity_id

logger = logging.getLogger(__name__)


class BookListResponse(BaseModel):
    """The full catalog with a count."""

    books: list[Book] = Field(..., description="Every book in the catalog")
    total: int = Field(..., description="Number of books")


async def list_books_handler() -> dict[str, Any]:
    """Returns the whole catalog."""
    try:
        logger.debug("MCP Resource Request - books/list")
        books = get_engine().list_books()
        return BookListResponse(books=books, total=len(books)).model_dump(mode="json")

    except Exception as e:
        logger.exception("Error in books/list resource")
        raise ResourceError(f"Failed to retrieve book list: {e!s}") from e


async def get_book_handler(book_id: str) -> dict[str, Any]:
    """Returns details for a specific book, including available copies."""
    try:
        logger.debug("MCP Resource Request - books/%s", book_id)
        book = get_engine().get_book(parse_entity_id(book_id, "book"))

        if book is None:
            raise ResourceError(f"Book not found: {book_id}")

        return book.model_dump(mode="json")

    except ResourceError:
        raise
    except Exception as e:
        logger.exception("Error in books/{book_id} resource")
        raise ResourceError(f"Failed to retrieve book details: {e!s}") from e


book_resources: list[dict[str, Any]] = [
    {
        "uri": "library://books/list",
        "name": "Book Catalog",
        "description": "Every book in the catalog with total and available copies.",
        "mime_type": "application/json",
        "handler": list_books_handler,
    },
    {
        "uri_template": "library://books/{book_id}",
        "name": "Book Details",
        "description": "Details and availability of a specific book by id",
        "mime_type": "application/json",
        "handler": get_book_handler,
    },
]
