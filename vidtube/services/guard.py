"""Ownership checks run after a resource has been loaded."""

from vidtube.errors import BadRequestError, ForbiddenError


def authorize(caller_id: str, owner_id: str, *, resource: str = "resource") -> None:
    """Allow only the owner to act on a resource.

    Raises:
        ForbiddenError: when the caller is not the owner
    """
    if caller_id != owner_id:
        raise ForbiddenError(f"You do not have permission to modify this {resource}")


def ensure_not_self(caller_id: str, target_id: str) -> None:
    if caller_id == target_id:
        raise BadRequestError("You cannot subscribe to your own channel")
