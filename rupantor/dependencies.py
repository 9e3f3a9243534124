"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging

from rupantor.config import get_settings
from rupantor.identity import (
    IdentityProvider,
    InMemoryIdentityProvider,
    SupabaseIdentityProvider,
)
from rupantor.kv import InMemoryKvStore, KvStore, RedisKvStore, SqlKvStore

logger = logging.getLogger(__name__)

_kv_store: KvStore | None = None
_identity_provider: IdentityProvider | None = None


def get_kv_store() -> KvStore:
    """
    Return a singleton KV store so records persist across requests.
    """
    global _kv_store
    if _kv_store:
        return _kv_store

    settings = get_settings()
    if settings.use_in_memory_backends:
        _kv_store = InMemoryKvStore()
    elif settings.database_url:
        _kv_store = SqlKvStore(settings.database_url)
    elif settings.redis_url:
        _kv_store = RedisKvStore(
            url=settings.redis_url,
            key_prefix=settings.redis_key_prefix,
        )
    else:
        logger.warning("No DATABASE_URL or REDIS_URL configured; using in-memory store")
        _kv_store = InMemoryKvStore()
    return _kv_store


def get_identity_provider() -> IdentityProvider:
    global _identity_provider
    if _identity_provider:
        return _identity_provider

    settings = get_settings()
    if (
        settings.use_in_memory_backends
        or not settings.supabase_url
        or not settings.supabase_service_role_key
    ):
        _identity_provider = InMemoryIdentityProvider()
    else:
        _identity_provider = SupabaseIdentityProvider(
            url=settings.supabase_url,
            service_role_key=settings.supabase_service_role_key,
            timeout=settings.identity_timeout_seconds,
        )
    return _identity_provider

