"""
Profile records and role rules.
"""

from __future__ import annotations

from typing import Iterable, Optional

from rupantor.types import USER_PREFIX, Role
from rupantor.utils import normalize_email, now_iso

STAFF_ROLES = (Role.VOLUNTEER.value, Role.ADMIN.value)


class RoleNotAllowedError(Exception):
    """Raised when a signup asks for a role it may not grant itself."""


def user_key(user_id: str) -> str:
    return f"{USER_PREFIX}{user_id}"


def resolve_signup_role(
    requested: Optional[Role], email: str, admin_emails: Iterable[str]
) -> Role:
    """
    Pick the stored role for a new account.

    Self-service signups default to public and may ask for volunteer. The
    admin role is only granted to emails listed in the bootstrap setting;
    everyone else is promoted later by an existing admin.
    """
    if normalize_email(email) in set(admin_emails):
        return Role.ADMIN
    if requested is None:
        return Role.PUBLIC
    if requested == Role.ADMIN:
        raise RoleNotAllowedError(
            "Admin role must be granted by an existing admin"
        )
    return requested


def new_profile(
    user_id: str, email: str, name: str, role: Role, team: Optional[str]
) -> dict:
    return {
        "id": user_id,
        "email": email,
        "name": name,
        "role": role.value,
        "team": team or None,
        "created_at": now_iso(),
    }


def find_by_email(profiles: Iterable[dict], email: str) -> Optional[dict]:
    wanted = normalize_email(email)
    for profile in profiles:
        if normalize_email(profile.get("email")) == wanted:
            return profile
    return None


def staff_members(profiles: Iterable[dict]) -> list[dict]:
    return [p for p in profiles if p.get("role") in STAFF_ROLES]
