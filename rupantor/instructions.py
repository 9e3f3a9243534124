"""
Task instructions for volunteers.

An instruction is visible to a volunteer through any of three independent
assignment mechanisms: an explicit volunteer list, a team list (with the
"All teams" wildcard) and the legacy single `assigned_to` field. Progress is
tracked per user in `individual_statuses`, separately from the coarse
admin-set `status`.
"""

from __future__ import annotations

from typing import Iterable, Optional

from rupantor.types import (
    ALL_TEAMS,
    INSTRUCTION_PREFIX,
    LEGACY_ASSIGN_ALL,
    Role,
    TaskStatus,
)
from rupantor.utils import new_id, now_iso

PRESERVED_FIELDS = ("id", "created_by", "created_by_name", "created_at")


def instruction_key(instruction_id: str) -> str:
    return f"{INSTRUCTION_PREFIX}{instruction_id}"


def new_instruction(
    fields: dict, created_by: str, created_by_name: Optional[str]
) -> dict:
    instruction = dict(fields)
    instruction.update(
        {
            "id": new_id(),
            "status": TaskStatus.TODO.value,
            "individual_statuses": [],
            "updates": [],
            "updates_locked": False,
            "created_by": created_by,
            "created_by_name": created_by_name,
            "created_at": now_iso(),
        }
    )
    return instruction


def is_assigned(instruction: dict, user_id: str, team: Optional[str]) -> bool:
    if instruction.get("assigned_to") in (user_id, LEGACY_ASSIGN_ALL):
        return True
    if user_id in (instruction.get("assigned_volunteers") or []):
        return True
    teams = instruction.get("assigned_teams") or []
    if team and team in teams:
        return True
    if team and ALL_TEAMS in teams:
        return True
    return False


def sort_newest_first(instructions: list[dict]) -> list[dict]:
    return sorted(instructions, key=lambda i: i.get("created_at") or "", reverse=True)


def visible_to(
    instructions: Iterable[dict],
    user_id: str,
    team: Optional[str],
    role: Optional[str],
) -> list[dict]:
    if role == Role.ADMIN.value:
        visible = list(instructions)
    else:
        visible = [i for i in instructions if is_assigned(i, user_id, team)]
    return sort_newest_first(visible)


def apply_admin_update(instruction: dict, updates: dict) -> dict:
    merged = {**instruction, **updates}
    for name in PRESERVED_FIELDS:
        merged[name] = instruction.get(name)
    merged["updated_at"] = now_iso()
    return merged


def set_individual_status(
    instruction: dict,
    user_id: str,
    user_name: Optional[str],
    user_team: Optional[str],
    status: TaskStatus,
) -> dict:
    """Upsert the caller's own status entry; nothing else changes."""
    entry = {
        "user_id": user_id,
        "user_name": user_name or "Unknown",
        "user_team": user_team,
        "status": TaskStatus(status).value,
        "updated_at": now_iso(),
    }
    statuses = list(instruction.get("individual_statuses") or [])
    for index, existing in enumerate(statuses):
        if existing.get("user_id") == user_id:
            statuses[index] = entry
            break
    else:
        statuses.append(entry)
    instruction["individual_statuses"] = statuses
    instruction["updated_at"] = entry["updated_at"]
    return entry


def add_progress_update(
    instruction: dict,
    user_id: str,
    user_name: Optional[str],
    user_team: Optional[str],
    text: str,
) -> dict:
    update = {
        "id": new_id(),
        "user_id": user_id,
        "user_name": user_name or "Unknown",
        "user_team": user_team,
        "update": text.strip(),
        "created_at": now_iso(),
    }
    instruction["updates"] = [*(instruction.get("updates") or []), update]
    return update


def toggle_lock(instruction: dict) -> bool:
    instruction["updates_locked"] = not instruction.get("updates_locked", False)
    return instruction["updates_locked"]


def expand_assignees(instruction: dict, profiles: Iterable[dict]) -> list[dict]:
    """Profiles of everyone the instruction is assigned to, in a stable order."""
    profiles = list(profiles)
    by_id = {p.get("id"): p for p in profiles}
    teams = instruction.get("assigned_teams") or []
    assignees: dict[str, dict] = {}

    for profile in profiles:
        if profile.get("role") != Role.VOLUNTEER.value:
            continue
        if profile.get("team") and (
            ALL_TEAMS in teams or profile["team"] in teams
        ):
            assignees[profile["id"]] = profile

    for user_id in instruction.get("assigned_volunteers") or []:
        assignees.setdefault(user_id, by_id.get(user_id) or {"id": user_id})

    legacy = instruction.get("assigned_to")
    if legacy and legacy != LEGACY_ASSIGN_ALL:
        assignees.setdefault(legacy, by_id.get(legacy) or {"id": legacy})
    elif legacy == LEGACY_ASSIGN_ALL:
        for profile in profiles:
            if profile.get("role") == Role.VOLUNTEER.value:
                assignees.setdefault(profile["id"], profile)

    return list(assignees.values())


def derive_status(statuses: list[str]) -> TaskStatus:
    if statuses and all(s == TaskStatus.COMPLETED.value for s in statuses):
        return TaskStatus.COMPLETED
    if any(s != TaskStatus.TODO.value for s in statuses):
        return TaskStatus.IN_PROGRESS
    return TaskStatus.TODO


def build_insights(instruction: dict, profiles: Iterable[dict]) -> dict:
    entries = {
        s.get("user_id"): s for s in instruction.get("individual_statuses") or []
    }
    rows = []
    for profile in expand_assignees(instruction, profiles):
        entry = entries.get(profile["id"]) or {}
        rows.append(
            {
                "user_id": profile["id"],
                "user_name": profile.get("name") or entry.get("user_name"),
                "user_team": profile.get("team") or entry.get("user_team"),
                "status": entry.get("status") or TaskStatus.TODO.value,
                "updated_at": entry.get("updated_at"),
            }
        )
    counts = {status.value: 0 for status in TaskStatus}
    for row in rows:
        counts[row["status"]] = counts.get(row["status"], 0) + 1
    return {
        "instruction_id": instruction["id"],
        "status": instruction.get("status") or TaskStatus.TODO.value,
        "derived_status": derive_status([row["status"] for row in rows]),
        "counts": counts,
        "assignees": rows,
    }
