"""
Event listing, admin management, engagement and registration routes.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from rupantor import events as ev
from rupantor.auth import Session, get_session, require_admin
from rupantor.dependencies import get_kv_store
from rupantor.kv import KvStore
from rupantor.schemas import (
    CommentRequest,
    EventCreate,
    EventResponse,
    EventsResponse,
    EventUpdate,
    GuestRegistrationRequest,
    GuestRegistrationResponse,
    GuestUnregisterRequest,
)
from rupantor.types import EVENT_PREFIX

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["events"])


def _load_event(kv: KvStore, event_id: str) -> dict:
    event = kv.get(ev.event_key(event_id))
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


def _save_event(kv: KvStore, event: dict) -> None:
    kv.set(ev.event_key(event["id"]), event)


@router.get("", response_model=EventsResponse)
def list_events(kv: KvStore = Depends(get_kv_store)):
    return EventsResponse(events=ev.sort_events(kv.get_by_prefix(EVENT_PREFIX)))


@router.post("", response_model=EventResponse)
def create_event(
    payload: EventCreate,
    session: Session = Depends(require_admin),
    kv: KvStore = Depends(get_kv_store),
):
    event = ev.new_event(payload.model_dump())
    _save_event(kv, event)
    logger.info("Admin %s created event %s", session.user_id, event["id"])
    return EventResponse(event=event)


@router.get("/{event_id}", response_model=EventResponse)
def get_event(event_id: str, kv: KvStore = Depends(get_kv_store)):
    return EventResponse(event=_load_event(kv, event_id))


@router.patch("/{event_id}", response_model=EventResponse)
def update_event(
    event_id: str,
    payload: EventUpdate,
    _: Session = Depends(require_admin),
    kv: KvStore = Depends(get_kv_store),
):
    event = _load_event(kv, event_id)
    updated = ev.apply_update(event, payload.model_dump(exclude_unset=True))
    _save_event(kv, updated)
    return EventResponse(event=updated)


@router.post("/{event_id}/like", response_model=EventResponse)
def like_event(
    event_id: str,
    session: Session = Depends(get_session),
    kv: KvStore = Depends(get_kv_store),
):
    event = _load_event(kv, event_id)
    ev.toggle_like(event, session.user_id)
    _save_event(kv, event)
    return EventResponse(event=event)


@router.post("/{event_id}/comment", response_model=EventResponse)
def comment_on_event(
    event_id: str,
    payload: CommentRequest,
    session: Session = Depends(get_session),
    kv: KvStore = Depends(get_kv_store),
):
    if not payload.comment:
        raise HTTPException(status_code=400, detail="Comment text is required")
    event = _load_event(kv, event_id)
    ev.add_comment(event, session.user_id, session.name, payload.comment)
    _save_event(kv, event)
    return EventResponse(event=event)


@router.post("/{event_id}/register", response_model=EventResponse)
def register_for_event(
    event_id: str,
    session: Session = Depends(get_session),
    kv: KvStore = Depends(get_kv_store),
):
    event = _load_event(kv, event_id)
    if ev.register_member(event, session.user_id, session.name, session.email):
        _save_event(kv, event)
    return EventResponse(event=event)


@router.post("/{event_id}/unregister", response_model=EventResponse)
def unregister_from_event(
    event_id: str,
    session: Session = Depends(get_session),
    kv: KvStore = Depends(get_kv_store),
):
    event = _load_event(kv, event_id)
    if ev.unregister_member(event, session.user_id):
        _save_event(kv, event)
    return EventResponse(event=event)


@router.post(
    "/{event_id}/register-guest", response_model=GuestRegistrationResponse
)
def register_guest(
    event_id: str,
    payload: GuestRegistrationRequest,
    kv: KvStore = Depends(get_kv_store),
):
    event = _load_event(kv, event_id)
    try:
        ev.register_guest(
            event,
            name=payload.name,
            email=payload.email,
            whatsapp=payload.whatsapp,
            class_=payload.class_,
            school=payload.school,
        )
    except ev.AlreadyRegisteredError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    _save_event(kv, event)
    logger.info("Guest registered for event %s", event_id)
    return GuestRegistrationResponse(event=event, success=True)


@router.post(
    "/{event_id}/unregister-guest", response_model=GuestRegistrationResponse
)
def unregister_guest(
    event_id: str,
    payload: GuestUnregisterRequest,
    kv: KvStore = Depends(get_kv_store),
):
    event = _load_event(kv, event_id)
    if not ev.unregister_guest(event, payload.email):
        raise HTTPException(
            status_code=404, detail="Guest registration not found for this email"
        )
    _save_event(kv, event)
    logger.info("Guest unregistered from event %s", event_id)
    return GuestRegistrationResponse(event=event, success=True)
