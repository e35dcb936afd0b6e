"""Tests for the membership tools (register_member, update_member, remove_member)."""

from library_lending.tools.members import (
    register_member_handler,
    remove_member_handler,
    update_member_handler,
)


class TestRegisterMemberTool:
    async def test_register(self, tool_engine, member_data):
        result = await register_member_handler(member_data)

        assert result["content"][0]["text"] == "Registered Ada Lovelace as member 3"
        assert result["data"]["member"] == {
            "id": 3,
            "name": "Ada Lovelace",
            "email": "ada@example.com",
            "phone": "5551234567",
            "membership_date": "2024-11-01",
            "borrowed_books": [],
        }

    async def test_register_lists_every_violation(self, tool_engine):
        result = await register_member_handler({"name": "", "email": "a@b", "phone": "12-34"})

        assert result["error"]["errors"] == [
            "Name is required",
            "Invalid email format",
            "Phone must be 10 digits",
        ]
        assert len(tool_engine.list_members()) == 2

    async def test_email_taken_in_other_case(self, tool_engine, member_data):
        result = await register_member_handler({**member_data, "email": "John.Doe@Email.com"})

        assert result["error"]["kind"] == "duplicate_key"


class TestUpdateMemberTool:
    async def test_update(self, tool_engine):
        result = await update_member_handler({"member_id": 2, "phone": "5550001111"})

        member = result["data"]["member"]
        assert member["phone"] == "5550001111"
        assert member["email"] == "jane.smith@email.com"

    async def test_update_to_taken_email(self, tool_engine):
        result = await update_member_handler({"member_id": 2, "email": "JOHN.DOE@email.com"})
        assert result["error"]["kind"] == "duplicate_key"

    async def test_borrowed_books_cannot_be_set(self, tool_engine):
        result = await update_member_handler({"member_id": 2, "borrowed_books": [1]})

        assert result["error"]["kind"] == "validation_failed"
        assert tool_engine.get_member(2).borrowed_books == []


class TestRemoveMemberTool:
    async def test_remove(self, tool_engine):
        result = await remove_member_handler({"member_id": 2})

        assert "isError" not in result
        assert tool_engine.get_member(2) is None

    async def test_remove_member_with_loans(self, tool_engine):
        result = await remove_member_handler({"member_id": 1})

        assert result["error"] == {
            "kind": "conflict",
            "message": "Cannot delete member with borrowed books",
            "details": {"member_id": 1, "borrowed_books": [1]},
        }

    async def test_remove_after_return(self, tool_engine):
        from library_lending.tools.circulation import return_book_handler

        await return_book_handler({"member_id": 1, "book_id": 1})
        result = await remove_member_handler({"member_id": 1})

        assert result["data"]["member"]["name"] == "John Doe"
