"""
Internal chat: direct conversations and admin-created groups.

Each message is its own KV record keyed under the conversation or group it
belongs to, so a prefix scan returns one partition. Clients poll for new
messages; there is no push channel.
"""

from __future__ import annotations

from typing import Iterable, Optional

from rupantor.types import CHAT_CONV_PREFIX, CHAT_GROUP_PREFIX, GROUP_PREFIX
from rupantor.utils import new_id, now_iso, sortable_key_suffix

CONVERSATION_SEPARATOR = "_"


def conversation_id(user_a: str, user_b: str) -> str:
    """Canonical id for a two-party conversation, independent of direction."""
    first, second = sorted((user_a, user_b))
    return f"{first}{CONVERSATION_SEPARATOR}{second}"


def conversation_participants(conv_id: str) -> tuple[str, ...]:
    return tuple(conv_id.split(CONVERSATION_SEPARATOR))


def group_key(group_id: str) -> str:
    return f"{GROUP_PREFIX}{group_id}"


def group_messages_prefix(group_id: str) -> str:
    return f"{CHAT_GROUP_PREFIX}{group_id}:"


def conversation_messages_prefix(conv_id: str) -> str:
    return f"{CHAT_CONV_PREFIX}{conv_id}:"


def new_group(name: str, member_ids: Iterable[str], created_by: str) -> dict:
    members = list(dict.fromkeys(member_ids))
    if created_by not in members:
        members.append(created_by)
    return {
        "id": new_id(),
        "name": name,
        "member_ids": members,
        "created_by": created_by,
        "created_at": now_iso(),
    }


def is_member(group: dict, user_id: str) -> bool:
    return user_id in (group.get("member_ids") or [])


def groups_for(groups: Iterable[dict], user_id: str) -> list[dict]:
    return [g for g in groups if is_member(g, user_id)]


def new_message(
    from_user_id: str,
    from_user_name: Optional[str],
    text: str,
    *,
    to_user_id: Optional[str] = None,
    group_id: Optional[str] = None,
) -> tuple[str, dict]:
    """Build a message record and the KV key it is stored under."""
    if bool(to_user_id) == bool(group_id):
        raise ValueError("Exactly one of to_user_id or group_id is required")
    if group_id:
        prefix = group_messages_prefix(group_id)
    else:
        prefix = conversation_messages_prefix(conversation_id(from_user_id, to_user_id))
    key = f"{prefix}{sortable_key_suffix()}"
    message = {
        "id": key,
        "from_user_id": from_user_id,
        "from_user_name": from_user_name,
        "to_user_id": to_user_id,
        "group_id": group_id,
        "message": text,
        "timestamp": now_iso(),
    }
    return key, message


def sort_messages(messages: list[dict]) -> list[dict]:
    return sorted(messages, key=lambda m: (m.get("timestamp") or "", m.get("id") or ""))
