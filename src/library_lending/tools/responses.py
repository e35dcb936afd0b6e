"""
Response shapes shared by the lending tools.

Every tool returns either a success payload::

    {"content": [{"type": "text", "text": ...}], "data": {...}}

or a structured error::

    {"isError": True, "error": {"kind", "message", "details"}, "content": [...]}

Business failures carry their ``LendingError`` kind. Broken invariants and
unexpected failures are reported as internal errors so a client never
mistakes them for an ordinary refusal.
"""

import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from ..errors import InvariantViolation, LendingError, ValidationFailedError
from ..models.validation import validation_messages

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_arguments(
    schema: type[ModelT],
    arguments: dict[str, Any] | None,
    context: dict[str, Any] | None = None,
) -> ModelT:
    """
    Validate raw tool arguments, with an optional pydantic validation context.

    Raises:
        ValidationFailedError: listing every violated rule
    """
    try:
        return schema.model_validate(arguments or {}, context=context)
    except ValidationError as e:
        raise ValidationFailedError(validation_messages(e)) from e


def success_response(message: str, data: dict[str, Any]) -> dict[str, Any]:
    return {
        "content": [{"type": "text", "text": message}],
        "data": data,
    }


def error_response(error: LendingError) -> dict[str, Any]:
    return {
        "isError": True,
        "error": error.to_dict(),
        "content": [{"type": "text", "text": error.message}],
    }


def internal_error_response(kind: str, message: str) -> dict[str, Any]:
    """Error result for failures that are not the caller's to fix."""
    return {
        "isError": True,
        "error": {"kind": kind, "message": message, "details": {}},
        "content": [{"type": "text", "text": message}],
    }


def failure_response(tool_name: str, exc: Exception) -> dict[str, Any]:
    """
    Map an exception raised while running a tool to its error result.

    Must be called from the ``except`` block that caught ``exc``.
    """
    # Business refusals keep their kind and details for the client
    # Broken invariants and unexpected failures become internal errors: the
    # transaction was rolled back and the caller cannot fix the cause
    if isinstance(exc, LendingError):
        logger.info("%s rejected (%s): %s", tool_name, exc.kind, exc.message)
        return error_response(exc)
    if isinstance(exc, InvariantViolation):
        logger.error("%s aborted, lending invariant violated: %s", tool_name, exc)
        return internal_error_response(
            "invariant_violation", f"Internal error, no changes were made: {exc}"
        )
    logger.exception("Unexpected error in %s tool", tool_name)
    return internal_error_response("internal_error", f"An unexpected error occurred: {exc!s}")
