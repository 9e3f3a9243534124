"""
Pydantic schemas for request and response bodies.

Stored records are plain dicts, so responses wrap them in thin envelopes.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from rupantor.types import Priority, Role, TaskStatus


class _Payload(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


def _reject_null(value):
    if value is None:
        raise ValueError("must not be null")
    return value


class SignupRequest(_Payload):
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    role: Optional[Role] = None
    team: Optional[str] = None


class RoleUpdateRequest(_Payload):
    role: Role
    team: Optional[str] = None


class UserResponse(BaseModel):
    user: Optional[dict] = None


class VolunteersResponse(BaseModel):
    volunteers: list[dict]


class EventCreate(_Payload):
    title: str = Field(..., min_length=1, max_length=300)
    description: str = ""
    date: Optional[str] = None
    time: Optional[str] = None
    location: Optional[str] = None
    category: Optional[str] = None
    speakers: list[str] = Field(default_factory=list)
    agenda: Optional[str] = None
    image: Optional[str] = None


class EventUpdate(_Payload):
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    description: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    location: Optional[str] = None
    category: Optional[str] = None
    speakers: Optional[list[str]] = None
    agenda: Optional[str] = None
    image: Optional[str] = None

    @field_validator("title", "description", "speakers")
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)


class CommentRequest(_Payload):
    comment: str = Field(
        ..., max_length=2000, validation_alias=AliasChoices("comment", "text")
    )


class GuestRegistrationRequest(_Payload):
    model_config = ConfigDict(
        str_strip_whitespace=True, extra="ignore", populate_by_name=True
    )

    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=254)
    whatsapp: str = Field(..., min_length=1, max_length=32)
    class_: Optional[str] = Field(None, alias="class")
    school: Optional[str] = None


class GuestUnregisterRequest(_Payload):
    email: str = Field(..., min_length=1, max_length=254)


class EventResponse(BaseModel):
    event: dict


class GuestRegistrationResponse(BaseModel):
    event: dict
    success: bool


class EventsResponse(BaseModel):
    events: list[dict]


class InstructionCreate(_Payload):
    title: str = Field(..., min_length=1, max_length=300)
    description: str = ""
    priority: Priority = Priority.MEDIUM
    assigned_to: Optional[str] = None
    assigned_to_name: Optional[str] = None
    assigned_teams: list[str] = Field(default_factory=list)
    assigned_volunteers: list[str] = Field(default_factory=list)


class InstructionUpdate(_Payload):
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    description: Optional[str] = None
    priority: Optional[Priority] = None
    assigned_to: Optional[str] = None
    assigned_to_name: Optional[str] = None
    assigned_teams: Optional[list[str]] = None
    assigned_volunteers: Optional[list[str]] = None
    status: Optional[TaskStatus] = None
    updates_locked: Optional[bool] = None

    @field_validator(
        "title",
        "description",
        "priority",
        "assigned_teams",
        "assigned_volunteers",
        "status",
        "updates_locked",
    )
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)


class StatusUpdate(_Payload):
    """The part of an instruction update a non-admin may send."""

    status: Optional[TaskStatus] = None


class ProgressUpdateRequest(_Payload):
    update: str = Field(..., max_length=4000)


class InstructionResponse(BaseModel):
    instruction: dict


class InstructionsResponse(BaseModel):
    instructions: list[dict]


class AssigneeStatus(BaseModel):
    user_id: str
    user_name: Optional[str] = None
    user_team: Optional[str] = None
    status: TaskStatus
    updated_at: Optional[str] = None


class InstructionInsightsResponse(BaseModel):
    instruction_id: str
    status: str
    derived_status: TaskStatus
    counts: dict[str, int]
    assignees: list[AssigneeStatus]


class ChatMessageRequest(_Payload):
    to_user_id: Optional[str] = None
    group_id: Optional[str] = None
    message: str = Field(..., max_length=4000)


class ChatMessageResponse(BaseModel):
    message: dict


class ChatMessagesResponse(BaseModel):
    messages: list[dict]


class ChatGroupRequest(_Payload):
    name: str = Field(..., min_length=1, max_length=200)
    member_ids: list[str] = Field(default_factory=list)


class ChatGroupResponse(BaseModel):
    group: dict


class ChatGroupsResponse(BaseModel):
    groups: list[dict]


class ChatConfigResponse(BaseModel):
    poll_interval_seconds: int


class HealthResponse(BaseModel):
    status: Literal["ok"]
    timestamp: str
