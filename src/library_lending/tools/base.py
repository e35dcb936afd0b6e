"""
FastMCP adapter for the lending tool definitions.

Each tool module describes its tools as plain dictionaries (name,
description, input schema, handler). FastMCP would normally derive the
input schema from the handler's signature, which for ``handler(arguments)``
is a single nested ``arguments`` object. ``LendingTool`` advertises the
pydantic input model's schema instead, so clients send flat arguments::

    borrow_book {"member_id": 2, "book_id": 3}

Arguments reach the handler as sent. The handler validates them itself and
reports every broken rule as one ``validation_failed`` error.
"""

from collections.abc import Awaitable, Callable
from typing import Any

from fastmcp.tools import Tool, ToolResult
from pydantic import PrivateAttr

ToolHandler = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]


class LendingTool(Tool):
    """A tool whose input schema comes from its pydantic input model."""

    _handler: ToolHandler = PrivateAttr()

    def __init__(
        self,
        name: str,
        description: str,
        parameters: dict[str, Any],
        handler: ToolHandler,
    ):
        super().__init__(name=name, description=description, parameters=parameters)
        self._handler = handler

    @classmethod
    def from_definition(cls, definition: dict[str, Any]) -> "LendingTool":
        return cls(
            name=definition["name"],
            description=definition["description"],
            parameters=definition["inputSchema"],
            handler=definition["handler"],
        )

    async def run(self, arguments: dict[str, Any]) -> ToolResult:
        result = await self._handler(arguments)
        text = "\n".join(block["text"] for block in result["content"])

        # Refusals are tool results, not protocol errors: the client gets the
        # error kind in structured content alongside isError
        if result.get("isError"):
            return ToolResult(
                content=text,
                structured_content={"error": result["error"]},
                is_error=True,
            )
        return ToolResult(content=text, structured_content=result["data"])
