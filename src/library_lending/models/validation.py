"""Turning Pydantic validation errors into field rule messages."""

from pydantic import ValidationError

_LABELS = {"isbn": "ISBN", "member_id": "Member ID", "book_id": "Book ID"}


def field_label(name: str) -> str:
    """Human label for a field name: ``publish_year`` -> ``Publish year``."""
    return _LABELS.get(name, name.replace("_", " ").capitalize())


def validation_messages(exc: ValidationError) -> list[str]:
    """
    List every violated rule in ``exc`` as a readable sentence.

    Value errors raised by our own validators already carry the sentence
    ("Invalid email format"); Pydantic's built-in errors are prefixed with
    the field label.
    """
    messages: list[str] = []
    for error in exc.errors():
        loc = error.get("loc", ())
        label = field_label(str(loc[0])) if loc else "Input"
        kind = error.get("type")
        if kind == "missing":
            message = f"{label} is required"
        elif kind == "extra_forbidden":
            message = f"{label} cannot be set"
        elif kind == "value_error" and "error" in error.get("ctx", {}):
            message = str(error["ctx"]["error"])
        else:
            message = f"{label}: {error['msg']}"
        if message not in messages:
            messages.append(message)
    return messages
