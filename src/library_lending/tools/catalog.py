"""
Catalog tools for the Library Lending server.

add_book, update_book and remove_book. Availability is never an input:
new books start with every copy on the shelf, and only borrow and return
move the counter afterwards.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..lending import get_engine
from ..models.book import BookCreate, BookUpdate
from .responses import failure_response, parse_arguments, success_response


class UpdateBookInput(BookUpdate):
    """Book id plus the fields to change."""

    book_id: int = Field(..., description="Id of the book to update", ge=1)


class RemoveBookInput(BaseModel):
    book_id: int = Field(..., description="Id of the book to remove", ge=1)

    model_config = ConfigDict(extra="forbid")


async def add_book_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """
    Handler for the add_book tool.

    Every field rule is checked before anything is stored; a bad payload is
    reported with the full list of violations.
    """
    try:
        engine = get_engine()
        params = parse_arguments(BookCreate, arguments, {"today": engine.clock()})
        book = engine.add_book(params)
    except Exception as e:
        return failure_response("add_book", e)

    return success_response(
        f"Added '{book.title}' by {book.author} (id {book.id}, {book.copies} copies)",
        {"book": book.model_dump(mode="json")},
    )


async def update_book_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    try:
        engine = get_engine()
        params = parse_arguments(UpdateBookInput, arguments, {"today": engine.clock()})
        changes = params.model_dump(exclude={"book_id"}, exclude_unset=True, exclude_none=True)
        book = engine.update_book(params.book_id, changes)
    except Exception as e:
        return failure_response("update_book", e)

    return success_response(
        f"Updated book {book.id}: '{book.title}'",
        {"book": book.model_dump(mode="json")},
    )


async def remove_book_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    try:
        params = parse_arguments(RemoveBookInput, arguments)
        book = get_engine().remove_book(params.book_id)
    except Exception as e:
        return failure_response("remove_book", e)

    return success_response(
        f"Removed '{book.title}' from the catalog",
        {"book": book.model_dump(mode="json")},
    )


add_book = {
    "name": "add_book",
    "description": (
        "Add a book to the catalog. Title, author, ISBN, category, publish year and "
        "number of copies are required; the ISBN must not already be in the catalog."
    ),
    "inputSchema": BookCreate.model_json_schema(),
    "handler": add_book_handler,
}

update_book = {
    "name": "update_book",
    "description": (
        "Update a book's details. Only the supplied fields change. Changing the number "
        "of copies keeps the copies on loan as they are and cannot go below that number."
    ),
    "inputSchema": UpdateBookInput.model_json_schema(),
    "handler": update_book_handler,
}

remove_book = {
    "name": "remove_book",
    "description": "Remove a book from the catalog. Refused while any copy is on loan.",
    "inputSchema": RemoveBookInput.model_json_schema(),
    "handler": remove_book_handler,
}
