#!/usr/bin/env python3
"""
Shared SQLAlchemy base and mixin for the Social Network API.

- UUID primary key (String(36)) with defaults
- created_at / updated_at timestamps
- delete() that goes through DBStorage

Timestamps get a Python-side default as well as the server default so a
freshly flushed object can be serialized without a refresh round trip.
"""

from __future__ import annotations

from datetime import datetime, timezone
import uuid

# Importing 'models' gives access to the global 'storage' instance (DBStorage)
# defined in models/__init__.py
import models

from sqlalchemy import Column, String, DateTime
from sqlalchemy.types import TypeDecorator
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

# Declarative base for all models
Base = declarative_base()


def _uuid_str() -> str:
    """Return a canonical UUIDv4 string (36 chars, with hyphens)."""
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Timestamps are always UTC-aware in Python.
    SQLite drops the zone on storage, so naive values read back are tagged UTC.
    """
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class BaseModel:
    """
    Base mixin for all persistent models.
    - id, created_at, updated_at
    - delete() wired to DBStorage
    """

    id = Column(String(36), primary_key=True, default=_uuid_str, nullable=False)
    created_at = Column(UTCDateTime(), default=_utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(
        UTCDateTime(), default=_utcnow, server_default=func.now(), onupdate=_utcnow, nullable=False
    )

    def __init__(self, *args, **kwargs):
        """
        Allow attribute initialization via kwargs without requiring a session here.
        """
        for key, value in kwargs.items():
            if key != "__class__":
                setattr(self, key, value)
        if getattr(self, "id", None) is None:
            self.id = _uuid_str()

    def __str__(self) -> str:
        return f"[{self.__class__.__name__}] ({self.id})"

    def delete(self):
        """
        Hard delete the current instance.
        Not committed here; caller decides when to commit.
        """
        models.storage.delete(self)
