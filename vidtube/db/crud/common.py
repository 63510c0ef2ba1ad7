"""Lookups shared by the CRUD modules."""

import enum
from typing import TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.errors import BadRequestError, NotFoundError
from vidtube.models import Base, is_valid_object_id

ModelT = TypeVar("ModelT", bound=Base)


class ToggleOutcome(str, enum.Enum):
    """Result of flipping a (actor, target) relation."""

    CREATED = "created"
    REMOVED = "removed"


def require_object_id(value: str, label: str) -> str:
    """Reject malformed ids before they reach the database."""
    if not is_valid_object_id(value):
        raise BadRequestError(f"Invalid {label} id")
    return value


async def get_or_404(db: AsyncSession, model: type[ModelT], object_id: str, label: str) -> ModelT:
    """Load a row by id.

    Raises:
        BadRequestError: malformed id
        NotFoundError: no such row
    """
    require_object_id(object_id, label)
    result = await db.execute(select(model).where(model.id == object_id))  # type: ignore[attr-defined]
    instance = result.scalar_one_or_none()
    if instance is None:
        raise NotFoundError(f"{label.capitalize()} not found")
    return instance
