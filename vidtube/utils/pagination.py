"""Offset pagination shared by every listing endpoint.

Page numbers and sizes arrive as raw query strings. Anything missing,
malformed or out of range falls back to a sane default rather than failing
the request, and the page size is clamped to the endpoint's ceiling.
"""

import math
from dataclasses import dataclass

from vidtube.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE


@dataclass(frozen=True)
class PageParams:
    """Validated page request."""

    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def _parse_positive_int(raw: str | int | None) -> int | None:
    """Parse a positive integer, returning None for anything else."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw if raw > 0 else None
    try:
        value = int(str(raw).strip())
    except ValueError:
        return None
    return value if value > 0 else None


def parse_page_params(
    page: str | int | None,
    limit: str | int | None,
    *,
    max_limit: int,
    default_limit: int = DEFAULT_PAGE_SIZE,
) -> PageParams:
    """Build page parameters from caller-supplied values. Never raises.

    Args:
        page: Requested page number (1-based)
        limit: Requested page size
        max_limit: Ceiling for this endpoint
        default_limit: Size used when limit is missing or invalid

    Returns:
        PageParams with page >= 1 and 1 <= page_size <= max_limit
    """
    page_number = _parse_positive_int(page) or DEFAULT_PAGE
    page_size = _parse_positive_int(limit) or default_limit
    page_size = max(1, min(page_size, max_limit))
    return PageParams(page=page_number, page_size=page_size)


def total_pages(total_count: int, page_size: int) -> int:
    """ceil(total_count / page_size); zero for an empty collection."""
    if total_count <= 0:
        return 0
    return math.ceil(total_count / page_size)
