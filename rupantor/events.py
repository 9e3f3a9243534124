"""
Event records: creation, admin edits, likes, comments and registrations.

Functions here operate on plain event dicts and mutate them in place; the
routes own the KV read/write around them.
"""

from __future__ import annotations

from typing import Optional

from rupantor.types import EVENT_PREFIX
from rupantor.utils import new_id, normalize_email, now_iso

# Fields an admin edit never overwrites.
PROTECTED_FIELDS = ("id", "likes", "comments", "registrations", "created_at")


class AlreadyRegisteredError(Exception):
    pass


def event_key(event_id: str) -> str:
    return f"{EVENT_PREFIX}{event_id}"


def new_event(fields: dict) -> dict:
    event = dict(fields)
    event.update(
        {
            "id": new_id(),
            "likes": [],
            "comments": [],
            "registrations": [],
            "created_at": now_iso(),
        }
    )
    return event


def apply_update(event: dict, updates: dict) -> dict:
    merged = {**event, **updates}
    for name in PROTECTED_FIELDS:
        merged[name] = event.get(name)
    merged["updated_at"] = now_iso()
    return merged


def sort_events(events: list[dict]) -> list[dict]:
    return sorted(
        events, key=lambda e: (e.get("date") or "", e.get("created_at") or "")
    )


def toggle_like(event: dict, user_id: str) -> bool:
    """Add or remove the user's like. Returns True when the event is now liked."""
    likes = event.get("likes") or []
    if user_id in likes:
        event["likes"] = [uid for uid in likes if uid != user_id]
        return False
    event["likes"] = [*likes, user_id]
    return True


def add_comment(
    event: dict, user_id: str, user_name: Optional[str], text: str
) -> dict:
    comment = {
        "id": new_id(),
        "user_id": user_id,
        "user_name": user_name or "Anonymous",
        "text": text,
        "created_at": now_iso(),
    }
    event["comments"] = [*(event.get("comments") or []), comment]
    return comment


def _is_guest(registration: dict) -> bool:
    return registration.get("is_guest") is True


def register_member(
    event: dict, user_id: str, user_name: Optional[str], email: Optional[str]
) -> bool:
    """Append a member registration unless one exists. Returns True if added."""
    registrations = event.get("registrations") or []
    for registration in registrations:
        if not _is_guest(registration) and registration.get("user_id") == user_id:
            return False
    event["registrations"] = [
        *registrations,
        {
            "user_id": user_id,
            "user_name": user_name,
            "email": email,
            "registered_at": now_iso(),
            "is_guest": False,
        },
    ]
    return True


def unregister_member(event: dict, user_id: str) -> int:
    registrations = event.get("registrations") or []
    kept = [
        r for r in registrations if _is_guest(r) or r.get("user_id") != user_id
    ]
    event["registrations"] = kept
    return len(registrations) - len(kept)


def _guest_matches(registration: dict, email: str) -> bool:
    return _is_guest(registration) and normalize_email(registration.get("email")) == email


def register_guest(
    event: dict,
    name: str,
    email: str,
    whatsapp: str,
    class_: Optional[str] = None,
    school: Optional[str] = None,
) -> dict:
    normalized = normalize_email(email)
    registrations = event.get("registrations") or []
    if any(_guest_matches(r, normalized) for r in registrations):
        raise AlreadyRegisteredError(
            "This email is already registered for this event"
        )
    registration = {
        "user_name": name,
        "email": normalized,
        "whatsapp": whatsapp,
        "class": class_,
        "school": school,
        "registered_at": now_iso(),
        "is_guest": True,
    }
    event["registrations"] = [*registrations, registration]
    return registration


def unregister_guest(event: dict, email: str) -> int:
    normalized = normalize_email(email)
    registrations = event.get("registrations") or []
    kept = [r for r in registrations if not _guest_matches(r, normalized)]
    event["registrations"] = kept
    return len(registrations) - len(kept)
