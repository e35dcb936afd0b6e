"""Tests for server wiring: the FastMCP instance and its registrations."""

import pytest
from fastmcp import Client

from library_lending.models.book import BookCreate
from library_lending.tools.circulation import LoanRequestInput


@pytest.fixture
def server_module(clean_env, monkeypatch):
    monkeypatch.setenv("LIBRARY_LENDING_SERVER_NAME", "test-lending-server")
    import importlib

    import library_lending.server as server

    return importlib.reload(server)


def test_server_uses_config(server_module):
    assert server_module.mcp.name == "test-lending-server"
    assert server_module.config.server_name == "test-lending-server"


def test_unsupported_transport_exits(server_module, monkeypatch):
    monkeypatch.setattr(server_module.config, "transport", "streamable_http")

    with pytest.raises(SystemExit) as exc_info:
        server_module.main()
    assert exc_info.value.code == 1


def test_unreachable_database_stops_startup(server_module, tool_engine, monkeypatch):
    monkeypatch.setattr(server_module.signal, "signal", lambda *args: None)
    monkeypatch.setattr(server_module, "get_engine", lambda: tool_engine)
    monkeypatch.setattr(tool_engine.db, "verify_connection", lambda: False)

    with pytest.raises(SystemExit) as exc_info:
        server_module.run_stdio_server()
    assert exc_info.value.code == 1


class TestToolsOverMcp:
    """Tools called the way an MCP client calls them."""

    async def test_tools_advertise_their_input_models(self, server_module):
        async with Client(server_module.mcp) as client:
            tools = {tool.name: tool for tool in await client.list_tools()}

        assert len(tools) == 8
        for name in ("borrow_book", "return_book"):
            schema = tools[name].input_schema
            assert set(schema["properties"]) == set(LoanRequestInput.model_fields)
            assert set(schema["required"]) == {"member_id", "book_id"}

        add_book = tools["add_book"].input_schema
        assert set(add_book["properties"]) == set(BookCreate.model_fields)
        assert "arguments" not in add_book["properties"]

    async def test_borrow_and_return_with_flat_arguments(self, server_module, tool_engine):
        async with Client(server_module.mcp) as client:
            borrowed = await client.call_tool("borrow_book", {"member_id": 2, "book_id": 3})
            returned = await client.call_tool("return_book", {"member_id": 2, "book_id": 3})

        assert borrowed.is_error is False
        assert "'1984' borrowed by Jane Smith" in borrowed.content[0].text
        assert borrowed.structured_content["due_date"] == "2024-11-15"
        assert borrowed.structured_content["record"]["status"] == "active"

        assert returned.is_error is False
        assert returned.structured_content["record"]["status"] == "returned"
        assert (returned.structured_content["is_late"], returned.structured_content["fine"]) == (
            False,
            0,
        )
        assert tool_engine.get_book(3).available_copies == 6

    async def test_refusal_is_an_error_result(self, server_module, tool_engine):
        async with Client(server_module.mcp) as client:
            result = await client.call_tool(
                "borrow_book", {"member_id": 1, "book_id": 1}, raise_on_error=False
            )

        assert result.is_error is True
        assert result.content[0].text == "Member has already borrowed this book"
        assert result.structured_content["error"]["kind"] == "conflict"
        assert tool_engine.get_book(1).available_copies == 4
