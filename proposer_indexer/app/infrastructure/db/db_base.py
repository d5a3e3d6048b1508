from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class BaseDB(DeclarativeBase):
    """Declarative base shared by all ORM models (and Alembic autogenerate)."""
