"""
MCP tools for the Library Lending server.

Tools are the operations with side effects: borrowing and returning books,
and maintaining the catalog and the member list. Each tool is a dictionary
with its name, description, input JSON schema and async handler; the
server registers everything in ``all_tools``.
"""

from .catalog import add_book, remove_book, update_book
from .circulation import borrow_book, return_book
from .members import register_member, remove_member, update_member

all_tools = [
    borrow_book,
    return_book,
    add_book,
    update_book,
    remove_book,
    register_member,
    update_member,
    remove_member,
]

__all__ = [
    "add_book",
    "all_tools",
    "borrow_book",
    "register_member",
    "remove_book",
    "remove_member",
    "return_book",
    "update_book",
    "update_member",
]
