"""
Membership tools for the Library Lending server.

register_member, update_member and remove_member. A member's borrowed set
is not an input to any of them.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..lending import get_engine
from ..models.member import MemberCreate, MemberUpdate
from .responses import failure_response, parse_arguments, success_response


class UpdateMemberInput(MemberUpdate):
    member_id: int = Field(..., description="Id of the member to update", ge=1)


class RemoveMemberInput(BaseModel):
    member_id: int = Field(..., description="Id of the member to remove", ge=1)

    model_config = ConfigDict(extra="forbid")


async def register_member_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """
    Handler for the register_member tool.

    Name, a well-formed email and a 10-digit phone number are required. The
    email must not belong to another member in any letter case.
    """
    try:
        params = parse_arguments(MemberCreate, arguments)
        member = get_engine().register_member(params)
    except Exception as e:
        return failure_response("register_member", e)

    return success_response(
        f"Registered {member.name} as member {member.id}",
        {"member": member.model_dump(mode="json")},
    )


async def update_member_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    try:
        params = parse_arguments(UpdateMemberInput, arguments)
        changes = params.model_dump(exclude={"member_id"}, exclude_unset=True, exclude_none=True)
        member = get_engine().update_member(params.member_id, changes)
    except Exception as e:
        return failure_response("update_member", e)

    return success_response(
        f"Updated member {member.id}: {member.name}",
        {"member": member.model_dump(mode="json")},
    )


async def remove_member_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handler for the remove_member tool; refused while the member holds books."""
    try:
        params = parse_arguments(RemoveMemberInput, arguments)
        member = get_engine().remove_member(params.member_id)
    except Exception as e:
        return failure_response("remove_member", e)

    return success_response(
        f"Removed member {member.id}: {member.name}",
        {"member": member.model_dump(mode="json")},
    )


register_member = {
    "name": "register_member",
    "description": (
        "Register a new library member with name, email and 10-digit phone number. "
        "Emails are unique regardless of letter case."
    ),
    "inputSchema": MemberCreate.model_json_schema(),
    "handler": register_member_handler,
}

update_member = {
    "name": "update_member",
    "description": "Update a member's name, email or phone. Only the supplied fields change.",
    "inputSchema": UpdateMemberInput.model_json_schema(),
    "handler": update_member_handler,
}

remove_member = {
    "name": "remove_member",
    "description": (
        "Remove a member. Refused while the member still has borrowed books; the "
        "error lists the ids of the books they hold."
    ),
    "inputSchema": RemoveMemberInput.model_json_schema(),
    "handler": remove_member_handler,
}
