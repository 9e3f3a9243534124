"""
Chat routes. Clients poll `GET /chat/messages` on a fixed interval.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from rupantor import chat
from rupantor.auth import Session, get_session, require_admin
from rupantor.config import Settings, get_settings
from rupantor.dependencies import get_kv_store
from rupantor.kv import KvStore
from rupantor.schemas import (
    ChatConfigResponse,
    ChatGroupRequest,
    ChatGroupResponse,
    ChatGroupsResponse,
    ChatMessageRequest,
    ChatMessageResponse,
    ChatMessagesResponse,
)
from rupantor.types import GROUP_PREFIX

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


def _load_group_for(kv: KvStore, group_id: str, session: Session) -> dict:
    group = kv.get(chat.group_key(group_id))
    if not group:
        raise HTTPException(status_code=404, detail="Group not found")
    if not chat.is_member(group, session.user_id) and not session.is_admin:
        raise HTTPException(status_code=403, detail="Not a member of this group")
    return group


@router.get("/messages", response_model=ChatMessagesResponse)
def get_messages(
    conversation_id: Optional[str] = Query(None),
    group_id: Optional[str] = Query(None),
    with_user_id: Optional[str] = Query(None),
    session: Session = Depends(get_session),
    kv: KvStore = Depends(get_kv_store),
):
    selectors = [s for s in (group_id, conversation_id, with_user_id) if s]
    if not selectors:
        raise HTTPException(status_code=400, detail="Missing conversation or group id")
    if len(selectors) > 1:
        raise HTTPException(
            status_code=400,
            detail="Only one of group_id, conversation_id or with_user_id is allowed",
        )

    if group_id:
        _load_group_for(kv, group_id, session)
        prefix = chat.group_messages_prefix(group_id)
    else:
        if with_user_id:
            conversation_id = chat.conversation_id(session.user_id, with_user_id)
        if session.user_id not in chat.conversation_participants(conversation_id):
            raise HTTPException(
                status_code=403, detail="Not a participant in this conversation"
            )
        prefix = chat.conversation_messages_prefix(conversation_id)
    return ChatMessagesResponse(messages=chat.sort_messages(kv.get_by_prefix(prefix)))


@router.post("/messages", response_model=ChatMessageResponse)
def send_message(
    payload: ChatMessageRequest,
    session: Session = Depends(get_session),
    kv: KvStore = Depends(get_kv_store),
):
    if bool(payload.to_user_id) == bool(payload.group_id):
        raise HTTPException(
            status_code=400,
            detail="Exactly one of to_user_id or group_id is required",
        )
    if not payload.message:
        raise HTTPException(status_code=400, detail="Message text is required")
    if payload.group_id:
        _load_group_for(kv, payload.group_id, session)

    key, message = chat.new_message(
        session.user_id,
        session.name,
        payload.message,
        to_user_id=payload.to_user_id,
        group_id=payload.group_id,
    )
    kv.set(key, message)
    return ChatMessageResponse(message=message)


@router.post("/groups", response_model=ChatGroupResponse)
def create_group(
    payload: ChatGroupRequest,
    session: Session = Depends(require_admin),
    kv: KvStore = Depends(get_kv_store),
):
    group = chat.new_group(payload.name, payload.member_ids, session.user_id)
    kv.set(chat.group_key(group["id"]), group)
    logger.info(
        "Admin %s created chat group %s with %d members",
        session.user_id,
        group["id"],
        len(group["member_ids"]),
    )
    return ChatGroupResponse(group=group)


@router.get("/groups", response_model=ChatGroupsResponse)
def list_groups(
    session: Session = Depends(get_session),
    kv: KvStore = Depends(get_kv_store),
):
    return ChatGroupsResponse(
        groups=chat.groups_for(kv.get_by_prefix(GROUP_PREFIX), session.user_id)
    )


@router.get("/config", response_model=ChatConfigResponse)
def chat_config(settings: Settings = Depends(get_settings)):
    return ChatConfigResponse(poll_interval_seconds=settings.chat_poll_interval_seconds)
