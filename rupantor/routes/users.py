"""
Signup, profile lookup and role management routes.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from rupantor.auth import Session, get_session, require_admin
from rupantor.config import Settings, get_settings
from rupantor.dependencies import get_identity_provider, get_kv_store
from rupantor.identity import IdentityProvider, IdentityProviderError
from rupantor.kv import KvStore
from rupantor.schemas import (
    RoleUpdateRequest,
    SignupRequest,
    UserResponse,
    VolunteersResponse,
)
from rupantor.types import USER_PREFIX
from rupantor.users import (
    RoleNotAllowedError,
    find_by_email,
    new_profile,
    resolve_signup_role,
    staff_members,
    user_key,
)
from rupantor.utils import now_iso

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])


@router.post("/signup", response_model=UserResponse)
def signup(
    payload: SignupRequest,
    kv: KvStore = Depends(get_kv_store),
    identity: IdentityProvider = Depends(get_identity_provider),
    settings: Settings = Depends(get_settings),
):
    try:
        role = resolve_signup_role(payload.role, payload.email, settings.admin_emails)
    except RoleNotAllowedError as exc:
        raise HTTPException(status_code=403, detail=str(exc))

    team = payload.team or None
    try:
        user = identity.create_user(
            payload.email,
            payload.password,
            {"name": payload.name, "role": role.value, "team": team},
        )
    except IdentityProviderError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    profile = new_profile(user.id, payload.email, payload.name, role, team)
    kv.set(user_key(user.id), profile)
    logger.info("Created %s account %s", role.value, user.id)
    return UserResponse(user=profile)


@router.get("/users/by-email/{email}", response_model=UserResponse)
def get_user_by_email(email: str, kv: KvStore = Depends(get_kv_store)):
    profile = find_by_email(kv.get_by_prefix(USER_PREFIX), email)
    if not profile:
        raise HTTPException(status_code=404, detail="User not found")
    return UserResponse(user=profile)


@router.get("/profile", response_model=UserResponse)
def get_profile(session: Session = Depends(get_session)):
    return UserResponse(user=session.profile)


@router.get("/volunteers", response_model=VolunteersResponse)
def list_volunteers(
    _: Session = Depends(require_admin),
    kv: KvStore = Depends(get_kv_store),
):
    return VolunteersResponse(volunteers=staff_members(kv.get_by_prefix(USER_PREFIX)))


@router.patch("/users/{user_id}/role", response_model=UserResponse)
def update_user_role(
    user_id: str,
    payload: RoleUpdateRequest,
    session: Session = Depends(require_admin),
    kv: KvStore = Depends(get_kv_store),
):
    profile = kv.get(user_key(user_id))
    if not profile:
        raise HTTPException(status_code=404, detail="User not found")
    previous = profile.get("role")
    profile["role"] = payload.role.value
    if "team" in payload.model_fields_set:
        profile["team"] = payload.team or None
    profile["updated_at"] = now_iso()
    kv.set(user_key(user_id), profile)
    logger.info(
        "Admin %s changed role of %s from %s to %s",
        session.user_id,
        user_id,
        previous,
        payload.role.value,
    )
    return UserResponse(user=profile)
