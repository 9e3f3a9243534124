"""
Identity provider abstraction for Supabase auth and in-memory testing.

The provider owns accounts, passwords and token issuance. The backend only
creates accounts at signup and resolves bearer tokens to users.
"""

from __future__ import annotations

import hashlib
import logging
import secrets
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol

import requests

logger = logging.getLogger(__name__)


class IdentityProviderError(Exception):
    """Raised when the provider rejects an account operation."""


@dataclass
class IdentityUser:
    id: str
    email: str
    metadata: dict = field(default_factory=dict)


class IdentityProvider(Protocol):
    """Defines the operations the API needs from the identity provider."""

    def create_user(self, email: str, password: str, metadata: dict) -> IdentityUser:
        ...

    def get_user(self, token: str) -> Optional[IdentityUser]:
        ...


def _hash_password(password: str) -> str:
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


class InMemoryIdentityProvider:
    """Test double for identity interactions."""

    def __init__(self):
        self.users: Dict[str, IdentityUser] = {}
        self.passwords: Dict[str, str] = {}
        self.tokens: Dict[str, str] = {}

    def create_user(self, email: str, password: str, metadata: dict) -> IdentityUser:
        normalized = email.strip().lower()
        if any(u.email.lower() == normalized for u in self.users.values()):
            raise IdentityProviderError(
                "A user with this email address has already been registered"
            )
        user = IdentityUser(id=str(uuid.uuid4()), email=email, metadata=dict(metadata))
        self.users[user.id] = user
        self.passwords[user.id] = _hash_password(password)
        return user

    def get_user(self, token: str) -> Optional[IdentityUser]:
        user_id = self.tokens.get(token)
        return self.users.get(user_id) if user_id else None

    def issue_token(self, user_id: str) -> str:
        if user_id not in self.users:
            raise KeyError(user_id)
        token = secrets.token_urlsafe(24)
        self.tokens[token] = user_id
        return token

    def sign_in(self, email: str, password: str) -> Optional[str]:
        normalized = email.strip().lower()
        for user in self.users.values():
            if user.email.lower() != normalized:
                continue
            if self.passwords.get(user.id) == _hash_password(password):
                return self.issue_token(user.id)
            return None
        return None


def _error_message(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    for key in ("msg", "message", "error_description", "error"):
        if payload.get(key):
            return str(payload[key])
    return f"HTTP {response.status_code}"


def _to_identity_user(payload: dict) -> IdentityUser:
    return IdentityUser(
        id=payload["id"],
        email=payload.get("email") or "",
        metadata=payload.get("user_metadata") or {},
    )


@dataclass
class SupabaseIdentityProvider:
    """
    Client for the Supabase auth REST API using the service-role key.
    """

    url: str
    service_role_key: str
    timeout: float = 10.0

    def _headers(self, bearer: str) -> dict:
        return {
            "apikey": self.service_role_key,
            "Authorization": f"Bearer {bearer}",
        }

    def create_user(self, email: str, password: str, metadata: dict) -> IdentityUser:
        response = requests.post(
            f"{self.url.rstrip('/')}/auth/v1/admin/users",
            headers=self._headers(self.service_role_key),
            json={
                "email": email,
                "password": password,
                "user_metadata": metadata,
                # No mail server is configured, so accounts are confirmed on creation.
                "email_confirm": True,
            },
            timeout=self.timeout,
        )
        if not response.ok:
            message = _error_message(response)
            logger.warning("Identity provider rejected signup for %s: %s", email, message)
            raise IdentityProviderError(message)
        return _to_identity_user(response.json())

    def get_user(self, token: str) -> Optional[IdentityUser]:
        try:
            response = requests.get(
                f"{self.url.rstrip('/')}/auth/v1/user",
                headers=self._headers(token),
                timeout=self.timeout,
            )
        except requests.RequestException:
            logger.exception("Identity provider lookup failed")
            return None
        if not response.ok:
            return None
        payload = response.json()
        if not payload or not payload.get("id"):
            return None
        return _to_identity_user(payload)
