"""Helpers for the parameters of templated library:// resource URIs."""

from fastmcp.exceptions import ResourceError


def parse_entity_id(raw: str | int, entity: str) -> int:
    """
    Turn the ``{book_id}``/``{member_id}`` part of a URI into an integer id.

    Raises:
        ResourceError: If the value is not a positive integer
    """
    try:
        value = int(str(raw).strip())
    except ValueError as e:
        raise ResourceError(f"Invalid {entity} id: {raw!r}") from e
    if value < 1:
        raise ResourceError(f"Invalid {entity} id: {raw!r}")
    return value
