"""Library Lending MCP Resources Package

Resources are the read-only side of the server: the catalog, the member
list and the borrow records. Changes go through tools.

Each resource is a dictionary with a ``uri`` (or ``uri_template`` for
parameterized URIs such as ``library://books/{book_id}``), a name, a
description, a MIME type and an async handler.
"""

from .books import book_resources
from .loans import loan_resources
from .members import member_resources

all_resources = book_resources + member_resources + loan_resources

__all__ = [
    "all_resources",
    "book_resources",
    "loan_resources",
    "member_resources",
]
