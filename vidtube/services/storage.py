"""Blob storage for uploaded media.

Uploads arrive as multipart files, are spooled to ``settings.upload_dir`` and
then pushed to Cloudinary. The spool file is removed once the upload attempt
finishes, whatever the outcome.
"""

import hashlib
import re
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Protocol

import httpx
from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from vidtube.config import get_settings
from vidtube.constants import CLOUDINARY_API_BASE_URL, STORAGE_TIMEOUT
from vidtube.errors import InternalError
from vidtube.utils.logging import get_logger
from vidtube.utils.retry import RetryConfig, retry_async

logger = get_logger(__name__)

ResourceType = Literal["auto", "image", "video", "raw"]

_UPLOAD_RETRY = RetryConfig(max_retries=2, base_delay=1.0)
SPOOL_CHUNK_SIZE = 1024 * 1024

# Connection pool limits
_POOL_LIMITS = httpx.Limits(
    max_connections=10,
    max_keepalive_connections=5,
    keepalive_expiry=30,
)


@dataclass(frozen=True)
class StoredBlob:
    """A file held by the blob store."""

    url: str
    public_id: str
    resource_type: str
    duration: float = 0.0


class BlobStorage(Protocol):
    async def upload(self, local_path: Path, *, resource_type: ResourceType = "auto") -> StoredBlob: ...

    async def delete(self, public_id: str, *, resource_type: ResourceType = "image") -> None: ...

    async def close(self) -> None: ...


def extract_public_id(url: str | None) -> str | None:
    """Recover the public id from a Cloudinary delivery URL.

    ``https://res.cloudinary.com/demo/video/upload/v1712/folder/clip.mp4``
    yields ``folder/clip``.
    """
    if not url or "/upload/" not in url:
        return None
    path = url.split("/upload/", 1)[1].split("?", 1)[0]
    segments = [s for s in path.split("/") if s]
    if segments and re.fullmatch(r"v\d+", segments[0]):
        segments = segments[1:]
    if not segments:
        return None
    segments[-1] = segments[-1].rsplit(".", 1)[0]
    return "/".join(segments)


def thumbnail_from_video_url(url: str) -> str:
    """Poster frame URL served by Cloudinary for a video (extension swapped to .jpg)."""
    thumbnail, replaced = re.subn(r"\.\w+$", ".jpg", url)
    return thumbnail if replaced else f"{url}.jpg"


async def spool_upload(upload: UploadFile) -> Path:
    """Write a multipart upload to the local spool directory.

    File system calls run in the threadpool so large videos do not block the
    event loop.
    """
    spool_dir = Path(get_settings().upload_dir)
    await run_in_threadpool(spool_dir.mkdir, parents=True, exist_ok=True)
    suffix = Path(upload.filename or "").suffix
    path = spool_dir / f"{uuid.uuid4().hex}{suffix}"
    out = await run_in_threadpool(path.open, "wb")
    try:
        while chunk := await upload.read(SPOOL_CHUNK_SIZE):
            await run_in_threadpool(out.write, chunk)
    finally:
        await run_in_threadpool(out.close)
    return path


class CloudinaryStorage:
    """Cloudinary REST client using signed requests."""

    def __init__(self, cloud_name: str, api_key: str, api_secret: str) -> None:
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self._client: httpx.AsyncClient | None = None

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=STORAGE_TIMEOUT, limits=_POOL_LIMITS)
        return self._client

    def _endpoint(self, resource_type: str, action: str) -> str:
        return f"{CLOUDINARY_API_BASE_URL}/{self.cloud_name}/{resource_type}/{action}"

    def sign(self, params: dict[str, str]) -> str:
        """SHA-1 over the sorted ``key=value`` pairs followed by the API secret."""
        payload = "&".join(f"{key}={params[key]}" for key in sorted(params))
        return hashlib.sha1(f"{payload}{self.api_secret}".encode()).hexdigest()

    def _signed(self, params: dict[str, str]) -> dict[str, str]:
        params = {**params, "timestamp": str(int(time.time()))}
        return {**params, "api_key": self.api_key, "signature": self.sign(params)}

    async def upload(self, local_path: Path, *, resource_type: ResourceType = "auto") -> StoredBlob:
        """Upload a spooled file and remove it locally.

        Raises:
            InternalError: when storage is unconfigured or the upload fails
        """
        try:
            if not self.configured:
                raise InternalError("Blob storage is not configured")

            data = self._signed({})
            url = self._endpoint(resource_type, "upload")

            async def post_file() -> httpx.Response:
                # Each attempt streams from a fresh handle
                fh = await run_in_threadpool(local_path.open, "rb")
                try:
                    return await self._get_client().post(
                        url, data=data, files={"file": (local_path.name, fh)}
                    )
                finally:
                    await run_in_threadpool(fh.close)

            try:
                response = await retry_async(
                    post_file,
                    config=_UPLOAD_RETRY,
                    operation_name=f"cloudinary upload {local_path.name}",
                )
            except httpx.HTTPError as e:
                raise InternalError("Failed to upload file") from e

            if response.status_code != 200:
                logger.error(f"Cloudinary upload failed ({response.status_code}): {response.text[:200]}")
                raise InternalError("Failed to upload file")

            body = response.json()
            return StoredBlob(
                url=body["secure_url"],
                public_id=body["public_id"],
                resource_type=body.get("resource_type", resource_type),
                duration=float(body.get("duration") or 0.0),
            )
        finally:
            await run_in_threadpool(local_path.unlink, missing_ok=True)

    async def delete(self, public_id: str, *, resource_type: ResourceType = "image") -> None:
        if not self.configured:
            raise InternalError("Blob storage is not configured")

        response = await retry_async(
            self._get_client().post,
            self._endpoint(resource_type, "destroy"),
            data=self._signed({"public_id": public_id}),
            config=_UPLOAD_RETRY,
            operation_name=f"cloudinary destroy {public_id}",
        )
        result = response.json().get("result") if response.status_code == 200 else None
        if result not in ("ok", "not found"):
            raise InternalError(f"Failed to delete blob {public_id}")

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


async def delete_quietly(
    storage: BlobStorage, public_id: str | None, *, resource_type: ResourceType = "image"
) -> None:
    """Best-effort blob removal: failures are logged, never raised."""
    if not public_id:
        return
    try:
        await storage.delete(public_id, resource_type=resource_type)
    except (InternalError, httpx.HTTPError, ValueError) as e:
        logger.error(f"Failed to delete blob {public_id} ({resource_type}): {e}")


async def upload_or_none(
    storage: BlobStorage, upload: UploadFile | None, *, resource_type: ResourceType = "auto"
) -> StoredBlob | None:
    """Spool and upload an optional multipart file."""
    if upload is None or not upload.filename:
        return None
    path = await spool_upload(upload)
    return await storage.upload(path, resource_type=resource_type)


_storage: CloudinaryStorage | None = None


def get_storage() -> BlobStorage:
    """Dependency providing the configured blob store."""
    global _storage
    if _storage is None:
        settings = get_settings()
        _storage = CloudinaryStorage(
            settings.cloudinary_cloud_name,
            settings.cloudinary_api_key,
            settings.cloudinary_api_secret,
        )
    return _storage


async def close_storage() -> None:
    """Close the storage HTTP client. Call during app shutdown."""
    if _storage is not None:
        await _storage.close()
