"""
Circulation tools for the Library Lending server.

1. borrow_book: lend one copy of a book to a member, due in 14 days
2. return_book: close the loan and report any late fee

Both tools hand already-validated ids to the lending engine, which checks
every precondition before writing and commits the ledger, the catalog and
the member's borrowed set together.
"""

from typing import Any

from pydantic import BaseModel, Field

from ..lending import get_engine
from .responses import failure_response, parse_arguments, success_response


class LoanRequestInput(BaseModel):
    """
    Input schema shared by borrow_book and return_book.

    Numeric strings are accepted and converted, so ``"3"`` and ``3`` name
    the same book.
    """

    member_id: int = Field(
        ...,
        description="Id of the member borrowing or returning the book",
        ge=1,
        examples=[1, 2],
    )

    book_id: int = Field(
        ...,
        description="Id of the book in the catalog",
        ge=1,
        examples=[1, 3],
    )


async def borrow_book_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """
    Handler for the borrow_book tool.

    Args:
        arguments: Raw arguments from the tools/call request

    Returns:
        The new borrow record with book and member summaries, or a
        structured error (not_found, unavailable, conflict, validation_failed)
    """
    try:
        params = parse_arguments(LoanRequestInput, arguments)
        result = get_engine().borrow(params.member_id, params.book_id)
    except Exception as e:
        return failure_response("borrow_book", e)

    message = (
        f"'{result.book.title}' borrowed by {result.member.name}. "
        f"Due date: {result.due_date.strftime('%B %d, %Y')}"
    )
    return success_response(message, result.model_dump(mode="json"))


async def return_book_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """
    Handler for the return_book tool.

    A return on the due date is on time. Each day after it adds the daily
    late fee to ``fine``.
    """
    try:
        params = parse_arguments(LoanRequestInput, arguments)
        result = get_engine().return_book(params.member_id, params.book_id)
    except Exception as e:
        return failure_response("return_book", e)

    message = f"'{result.book.title}' returned by {result.member.name}."
    if result.is_late:
        message += f" Returned {result.days_late} day(s) late, fine: {result.fine}."
    else:
        message += " Returned on time."

    return success_response(message, result.model_dump(mode="json"))


borrow_book = {
    "name": "borrow_book",
    "description": (
        "Borrow a book for a member. Creates an active borrow record due 14 days "
        "from today, takes one copy off the shelf and adds the book to the member's "
        "borrowed set. Fails if the book has no available copies or the member "
        "already holds it."
    ),
    "inputSchema": LoanRequestInput.model_json_schema(),
    "handler": borrow_book_handler,
}

return_book = {
    "name": "return_book",
    "description": (
        "Return a borrowed book. Closes the member's active borrow record, puts the "
        "copy back on the shelf and reports whether the return is late, by how many "
        "days, and the resulting fine."
    ),
    "inputSchema": LoanRequestInput.model_json_schema(),
    "handler": return_book_handler,
}
