"""Declarative base, timestamp mixin and object identifiers."""

from datetime import UTC, datetime

from bson import ObjectId
from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def new_object_id() -> str:
    """Generate a 24-character hex identifier.

    ObjectIds start with a timestamp and end with a process counter, so ids
    created later sort after ids created earlier. Listings rely on this for
    their id tie-break.
    """
    return str(ObjectId())


def is_valid_object_id(value: object) -> bool:
    """Check that a value is a 24-character hex identifier."""
    return isinstance(value, str) and len(value) == 24 and ObjectId.is_valid(value)


def utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all models."""


class IdMixin:
    """Opaque string primary key."""

    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=new_object_id)


class TimestampMixin:
    """Adds created_at / updated_at columns."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )
