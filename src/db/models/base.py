"""Declarative base shared by all ORM models."""

from __future__ import annotations

import uuid

from sqlalchemy.orm import DeclarativeBase


def new_id() -> str:
    """Primary key generator (UUID4 text, portable across PostgreSQL and SQLite)."""
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    pass
