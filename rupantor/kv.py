"""
Key-value store abstraction with in-memory, SQL and Redis implementations.

Records are plain JSON objects. The API only ever needs `get`, `set` and a
prefix scan; there are no transactions, so every endpoint performs an
unguarded read-modify-write.
"""

from __future__ import annotations

import json
import re
from typing import Dict, Optional, Protocol

import redis
from sqlalchemy import JSON, Column, String, create_engine, select
from sqlalchemy.orm import Session, declarative_base, sessionmaker


class KvStore(Protocol):
    """Interface for key-value access."""

    def get(self, key: str) -> Optional[dict]:
        ...

    def set(self, key: str, value: dict) -> None:
        ...

    def get_by_prefix(self, prefix: str) -> list[dict]:
        ...

    def delete(self, key: str) -> None:
        ...


def delete_records(store: KvStore, prefix: str) -> int:
    """Delete every record stored under `<prefix><id>`; returns how many went."""
    records = store.get_by_prefix(prefix)
    for record in records:
        store.delete(f"{prefix}{record['id']}")
    return len(records)


def _copy(value: dict) -> dict:
    return json.loads(json.dumps(value, default=str))


class InMemoryKvStore:
    """Simple in-memory store for development and tests."""

    def __init__(self):
        self.items: Dict[str, dict] = {}

    def get(self, key: str) -> Optional[dict]:
        value = self.items.get(key)
        return _copy(value) if value is not None else None

    def set(self, key: str, value: dict) -> None:
        # Stored as a detached copy so callers cannot mutate it by reference.
        self.items[key] = _copy(value)

    def get_by_prefix(self, prefix: str) -> list[dict]:
        return [
            _copy(self.items[key])
            for key in sorted(self.items)
            if key.startswith(prefix)
        ]

    def delete(self, key: str) -> None:
        self.items.pop(key, None)

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.items.clear()


Base = declarative_base()


class KvRow(Base):
    __tablename__ = "kv_store"

    key = Column(String, primary_key=True)
    value = Column(JSON, nullable=False)


class SqlKvStore:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlKvStore")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def get(self, key: str) -> Optional[dict]:
        with self.Session() as session:
            row = session.get(KvRow, key)
            return row.value if row else None

    def set(self, key: str, value: dict) -> None:
        with self.Session() as session:
            existing = session.get(KvRow, key)
            if existing:
                existing.value = value
            else:
                session.add(KvRow(key=key, value=value))
            session.commit()

    def get_by_prefix(self, prefix: str) -> list[dict]:
        with self.Session() as session:
            stmt = (
                select(KvRow)
                .where(KvRow.key.startswith(prefix, autoescape=True))
                .order_by(KvRow.key.asc())
            )
            return [row.value for row in session.execute(stmt).scalars()]

    def delete(self, key: str) -> None:
        with self.Session() as session:
            row = session.get(KvRow, key)
            if row:
                session.delete(row)
                session.commit()


_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


class RedisKvStore:
    """Redis-backed store keeping each record as a JSON string."""

    def __init__(self, url: str, key_prefix: str = "rupantor:"):
        self.url = url
        self.key_prefix = key_prefix
        self.client = redis.Redis.from_url(url)

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def get(self, key: str) -> Optional[dict]:
        raw = self.client.get(self._key(key))
        return json.loads(raw) if raw is not None else None

    def set(self, key: str, value: dict) -> None:
        self.client.set(self._key(key), json.dumps(value, default=str))

    def get_by_prefix(self, prefix: str) -> list[dict]:
        pattern = _GLOB_SPECIAL.sub(r"\\\1", self._key(prefix)) + "*"
        keys = sorted(self.client.scan_iter(match=pattern, count=500))
        if not keys:
            return []
        # Keys may disappear between SCAN and MGET.
        return [json.loads(raw) for raw in self.client.mget(keys) if raw is not None]

    def delete(self, key: str) -> None:
        self.client.delete(self._key(key))
