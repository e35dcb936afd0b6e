"""Member Resources - Library Membership Access

Resources:
- library://members/list - Every registered member in id order
- library://members/{member_id} - One member, with the ids of the books they hold
"""

import logging
from typing import Any

from fastmcp.exceptions import ResourceError
from pydantic import BaseModel, Field

from ..lending import get_engine
from ..models.member import Member
from .uri_utils import parse_entity_id

logger = logging.getLogger(__name__)


class MemberListResponse(BaseModel):
    members: list[Member] = Field(..., description="Every registered member")
    total: int = Field(..., description="Number of members")


async def list_members_handler() -> dict[str, Any]:
    try:
        logger.debug("MCP Resource Request - members/list")
        members = get_engine().list_members()
        return MemberListResponse(members=members, total=len(members)).model_dump(mode="json")

    except Exception as e:
        logger.exception("Error in members/list resource")
        raise ResourceError(f"Failed to retrieve member list: {e!s}") from e


async def get_member_handler(member_id: str) -> dict[str, Any]:
    """Returns a member's profile and borrowed set."""
    try:
        logger.debug("MCP Resource Request - members/%s", member_id)
        member = get_engine().get_member(parse_entity_id(member_id, "member"))

        if member is None:
            raise ResourceError(f"Member not found: {member_id}")

        return member.model_dump(mode="json")

    except ResourceError:
        raise
    except Exception as e:
        logger.exception("Error in members/{member_id} resource")
        raise ResourceError(f"Failed to retrieve member details: {e!s}") from e


member_resources: list[dict[str, Any]] = [
    {
        "uri": "library://members/list",
        "name": "Member List",
        "description": "Every registered member with their currently borrowed book ids.",
        "mime_type": "application/json",
        "handler": list_members_handler,
    },
    {
        "uri_template": "library://members/{member_id}",
        "name": "Member Details",
        "description": "Profile and borrowed books of a specific member by id",
        "mime_type": "application/json",
        "handler": get_member_handler,
    },
]
