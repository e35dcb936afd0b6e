"""Loan Resources - Borrow Record Access

library://loans/list returns every borrow record, active and returned, with
the member's name and the book's title looked up at request time. Records
whose member or book has since been removed show "Unknown".
"""

import logging
from typing import Any

from fastmcp.exceptions import ResourceError
from pydantic import BaseModel, Field

from ..lending import get_engine
from ..models.loan import LoanView

logger = logging.getLogger(__name__)


class LoanListResponse(BaseModel):
    loans: list[LoanView] = Field(..., description="Every borrow record, oldest first")
    total: int = Field(..., description="Number of records")
    active: int = Field(..., description="Records still on loan")


async def list_loans_handler() -> dict[str, Any]:
    try:
        logger.debug("MCP Resource Request - loans/list")
        loans = get_engine().list_loans()
        return LoanListResponse(
            loans=loans,
            total=len(loans),
            active=sum(1 for loan in loans if loan.is_active),
        ).model_dump(mode="json")

    except Exception as e:
        logger.exception("Error in loans/list resource")
        raise ResourceError(f"Failed to retrieve borrow records: {e!s}") from e


loan_resources: list[dict[str, Any]] = [
    {
        "uri": "library://loans/list",
        "name": "Borrow Records",
        "description": (
            "Every borrow record with member name and book title. Removed members "
            "or books are shown as Unknown."
        ),
        "mime_type": "application/json",
        "handler": list_loans_handler,
    },
]
