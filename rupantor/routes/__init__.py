"""
HTTP routes for the Rupantor API.
"""

from fastapi import APIRouter

from rupantor.routes import chat, events, instructions, meta, users

router = APIRouter()
router.include_router(meta.router)
router.include_router(users.router)
router.include_router(events.router)
router.include_router(instructions.router)
router.include_router(chat.router)
