"""
Shared enums and constants for stored records.
"""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    ADMIN = "admin"
    VOLUNTEER = "volunteer"
    PUBLIC = "public"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


ALL_TEAMS = "All teams"
LEGACY_ASSIGN_ALL = "all"

TEAMS = (
    "Communication team",
    "Treasurer team",
    "Event management team",
    "Branding team",
)

USER_PREFIX = "user:"
EVENT_PREFIX = "event:"
INSTRUCTION_PREFIX = "instruction:"
GROUP_PREFIX = "group:"
CHAT_GROUP_PREFIX = "chat:group:"
CHAT_CONV_PREFIX = "chat:conv:"
