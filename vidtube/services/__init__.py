"""Application services."""

from vidtube.services.guard import authorize, ensure_not_self
from vidtube.services.storage import BlobStorage, StoredBlob, get_storage

__all__ = [
    "authorize",
    "ensure_not_self",
    "BlobStorage",
    "StoredBlob",
    "get_storage",
]
