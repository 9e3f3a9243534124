"""
Task instruction routes: role-filtered listing, admin edits, per-volunteer
status and progress notes.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError

from rupantor import instructions as ins
from rupantor.auth import Session, get_session, require_admin
from rupantor.dependencies import get_kv_store
from rupantor.kv import KvStore
from rupantor.schemas import (
    InstructionCreate,
    InstructionInsightsResponse,
    InstructionResponse,
    InstructionsResponse,
    InstructionUpdate,
    ProgressUpdateRequest,
    StatusUpdate,
)
from rupantor.types import INSTRUCTION_PREFIX, USER_PREFIX

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/instructions", tags=["instructions"])


def _load_instruction(kv: KvStore, instruction_id: str) -> dict:
    instruction = kv.get(ins.instruction_key(instruction_id))
    if not instruction:
        raise HTTPException(status_code=404, detail="Instruction not found")
    return instruction


def _save_instruction(kv: KvStore, instruction: dict) -> None:
    kv.set(ins.instruction_key(instruction["id"]), instruction)


def _parse(schema: type[BaseModel], body: dict) -> BaseModel:
    try:
        return schema.model_validate(body)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors(include_url=False))


@router.get("", response_model=InstructionsResponse)
def list_instructions(
    session: Session = Depends(get_session),
    kv: KvStore = Depends(get_kv_store),
):
    all_instructions = kv.get_by_prefix(INSTRUCTION_PREFIX)
    visible = ins.visible_to(
        all_instructions, session.user_id, session.team, session.role
    )
    logger.debug(
        "User %s (role=%s, team=%s) sees %d of %d instructions",
        session.user_id,
        session.role,
        session.team,
        len(visible),
        len(all_instructions),
    )
    return InstructionsResponse(instructions=visible)


@router.post("", response_model=InstructionResponse)
def create_instruction(
    payload: InstructionCreate,
    session: Session = Depends(require_admin),
    kv: KvStore = Depends(get_kv_store),
):
    instruction = ins.new_instruction(
        payload.model_dump(mode="json"), session.user_id, session.name
    )
    _save_instruction(kv, instruction)
    logger.info("Admin %s created instruction %s", session.user_id, instruction["id"])
    return InstructionResponse(instruction=instruction)


@router.patch("/{instruction_id}", response_model=InstructionResponse)
def update_instruction(
    instruction_id: str,
    body: dict = Body(...),
    session: Session = Depends(get_session),
    kv: KvStore = Depends(get_kv_store),
):
    instruction = _load_instruction(kv, instruction_id)

    if session.is_admin:
        payload = _parse(InstructionUpdate, body)
        updates = payload.model_dump(mode="json", exclude_unset=True)
        updated = ins.apply_admin_update(instruction, updates)
        _save_instruction(kv, updated)
        return InstructionResponse(instruction=updated)

    # Everyone else may only record their own status.
    payload = _parse(StatusUpdate, body)
    if payload.status is not None:
        ins.set_individual_status(
            instruction, session.user_id, session.name, session.team, payload.status
        )
        _save_instruction(kv, instruction)
    return InstructionResponse(instruction=instruction)


@router.post("/{instruction_id}/update", response_model=InstructionResponse)
def add_instruction_update(
    instruction_id: str,
    payload: ProgressUpdateRequest,
    session: Session = Depends(get_session),
    kv: KvStore = Depends(get_kv_store),
):
    instruction = _load_instruction(kv, instruction_id)
    if instruction.get("updates_locked") and not session.is_admin:
        raise HTTPException(
            status_code=403, detail="Updates are locked for this instruction"
        )
    if not payload.update:
        raise HTTPException(status_code=400, detail="Update text is required")

    ins.add_progress_update(
        instruction, session.user_id, session.name, session.team, payload.update
    )
    _save_instruction(kv, instruction)
    return InstructionResponse(instruction=instruction)


@router.patch("/{instruction_id}/toggle-lock", response_model=InstructionResponse)
def toggle_instruction_lock(
    instruction_id: str,
    session: Session = Depends(require_admin),
    kv: KvStore = Depends(get_kv_store),
):
    instruction = _load_instruction(kv, instruction_id)
    locked = ins.toggle_lock(instruction)
    _save_instruction(kv, instruction)
    logger.info(
        "Admin %s %s updates on instruction %s",
        session.user_id,
        "locked" if locked else "unlocked",
        instruction_id,
    )
    return InstructionResponse(instruction=instruction)


@router.get(
    "/{instruction_id}/insights", response_model=InstructionInsightsResponse
)
def instruction_insights(
    instruction_id: str,
    _: Session = Depends(require_admin),
    kv: KvStore = Depends(get_kv_store),
):
    instruction = _load_instruction(kv, instruction_id)
    return ins.build_insights(instruction, kv.get_by_prefix(USER_PREFIX))
