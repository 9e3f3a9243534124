"""
Auth gate: resolves the bearer token to an identity-provider user and loads
the locally stored profile that carries the role and team.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException

from rupantor.dependencies import get_identity_provider, get_kv_store
from rupantor.identity import IdentityProvider, IdentityUser
from rupantor.kv import KvStore
from rupantor.types import USER_PREFIX, Role


def parse_bearer(header: Optional[str]) -> Optional[str]:
    if not header:
        return None
    scheme, _, token = header.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


@dataclass
class Session:
    """Per-request caller context."""

    user: IdentityUser
    profile: Optional[dict] = None

    @property
    def user_id(self) -> str:
        return self.user.id

    @property
    def role(self) -> Optional[str]:
        return (self.profile or {}).get("role")

    @property
    def team(self) -> Optional[str]:
        return (self.profile or {}).get("team") or None

    @property
    def name(self) -> Optional[str]:
        return (self.profile or {}).get("name")

    @property
    def email(self) -> str:
        return (self.profile or {}).get("email") or self.user.email

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value


def resolve_session(
    token: Optional[str], identity: IdentityProvider, kv: KvStore
) -> Optional[Session]:
    if not token:
        return None
    user = identity.get_user(token)
    if not user:
        return None
    return Session(user=user, profile=kv.get(f"{USER_PREFIX}{user.id}"))


def get_optional_session(
    authorization: Optional[str] = Header(None),
    identity: IdentityProvider = Depends(get_identity_provider),
    kv: KvStore = Depends(get_kv_store),
) -> Optional[Session]:
    return resolve_session(parse_bearer(authorization), identity, kv)


def get_session(
    session: Optional[Session] = Depends(get_optional_session),
) -> Session:
    if session is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return session


def require_admin(session: Session = Depends(get_session)) -> Session:
    if not session.is_admin:
        raise HTTPException(status_code=403, detail="Forbidden - Admin only")
    return session
