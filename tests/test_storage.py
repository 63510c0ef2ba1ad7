"""Tests for the Cloudinary blob store and its helpers."""

import hashlib
import io
from pathlib import Path

import httpx
import pytest
from fastapi import UploadFile

from vidtube.errors import InternalError
from vidtube.services import storage as storage_module
from vidtube.services.storage import (
    CloudinaryStorage,
    delete_quietly,
    extract_public_id,
    spool_upload,
    thumbnail_from_video_url,
    upload_or_none,
)
from vidtube.utils.retry import RetryConfig, retry_async


def _storage_with(handler) -> CloudinaryStorage:
    storage = CloudinaryStorage("demo", "key", "secret")
    storage._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return storage


@pytest.fixture
def spooled_file(tmp_path: Path) -> Path:
    path = tmp_path / "clip.mp4"
    path.write_bytes(b"not really a video")
    return path


class TestUrlHelpers:
    def test_extract_public_id_strips_version_and_extension(self):
        url = "https://res.cloudinary.com/demo/video/upload/v1712/vidtube/clip.mp4"
        assert extract_public_id(url) == "vidtube/clip"

    def test_extract_public_id_without_version(self):
        assert extract_public_id("https://res.cloudinary.com/demo/image/upload/avatar.png") == "avatar"

    def test_extract_public_id_rejects_foreign_urls(self):
        assert extract_public_id("https://cdn.example.com/avatar.png") is None
        assert extract_public_id(None) is None

    def test_thumbnail_swaps_extension(self):
        url = "https://res.cloudinary.com/demo/video/upload/v1/clip.mp4"
        assert thumbnail_from_video_url(url) == "https://res.cloudinary.com/demo/video/upload/v1/clip.jpg"

    def test_thumbnail_without_extension(self):
        assert thumbnail_from_video_url("https://host/clip") == "https://host/clip.jpg"


class TestSigning:
    def test_signature_matches_sorted_params(self):
        storage = CloudinaryStorage("demo", "key", "secret")

        signature = storage.sign({"timestamp": "100", "public_id": "clip"})

        expected = hashlib.sha1(b"public_id=clip&timestamp=100secret").hexdigest()
        assert signature == expected

    def test_configured(self):
        assert CloudinaryStorage("demo", "key", "secret").configured
        assert not CloudinaryStorage("", "key", "secret").configured


class TestUpload:
    @pytest.mark.asyncio
    async def test_upload_returns_blob_and_removes_spool_file(self, spooled_file: Path):
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            return httpx.Response(
                200,
                json={
                    "secure_url": "https://res.cloudinary.com/demo/video/upload/v1/clip.mp4",
                    "public_id": "clip",
                    "resource_type": "video",
                    "duration": 12.5,
                },
            )

        storage = _storage_with(handler)
        blob = await storage.upload(spooled_file, resource_type="video")
        await storage.close()

        assert seen == ["/v1_1/demo/video/upload"]
        assert blob.public_id == "clip"
        assert blob.duration == 12.5
        assert not spooled_file.exists()

    @pytest.mark.asyncio
    async def test_retried_upload_resends_whole_file(self, spooled_file: Path, monkeypatch):
        monkeypatch.setattr(storage_module, "_UPLOAD_RETRY", RetryConfig(max_retries=2, base_delay=0))
        bodies: list[bytes] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(request.content)
            if len(bodies) == 1:
                return httpx.Response(503)
            return httpx.Response(
                200, json={"secure_url": "https://cdn/clip.mp4", "public_id": "clip"}
            )

        storage = _storage_with(handler)
        blob = await storage.upload(spooled_file, resource_type="video")
        await storage.close()

        assert blob.public_id == "clip"
        assert len(bodies) == 2
        assert all(b"not really a video" in body for body in bodies)
        assert not spooled_file.exists()

    @pytest.mark.asyncio
    async def test_rejected_upload_raises_and_removes_spool_file(self, spooled_file: Path):
        storage = _storage_with(lambda request: httpx.Response(400, json={"error": "bad"}))

        with pytest.raises(InternalError):
            await storage.upload(spooled_file)
        await storage.close()

        assert not spooled_file.exists()

    @pytest.mark.asyncio
    async def test_unconfigured_storage_raises(self, spooled_file: Path):
        storage = CloudinaryStorage("", "", "")

        with pytest.raises(InternalError):
            await storage.upload(spooled_file)

        assert not spooled_file.exists()


class TestDelete:
    @pytest.mark.asyncio
    async def test_missing_blob_counts_as_deleted(self):
        storage = _storage_with(lambda request: httpx.Response(200, json={"result": "not found"}))

        await storage.delete("clip", resource_type="video")
        await storage.close()

    @pytest.mark.asyncio
    async def test_failed_delete_raises(self):
        storage = _storage_with(lambda request: httpx.Response(200, json={"result": "error"}))

        with pytest.raises(InternalError):
            await storage.delete("clip")
        await storage.close()

    @pytest.mark.asyncio
    async def test_delete_quietly_swallows_failures(self, fake_storage):
        fake_storage.fail_deletes = True

        await delete_quietly(fake_storage, "clip", resource_type="video")

        assert fake_storage.deleted == []

    @pytest.mark.asyncio
    async def test_delete_quietly_skips_empty_id(self, fake_storage):
        await delete_quietly(fake_storage, None)

        assert fake_storage.deleted == []


class TestRetry:
    @pytest.mark.asyncio
    async def test_retries_retryable_status(self):
        statuses = iter([503, 200])
        calls = 0

        async def call() -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(next(statuses))

        response = await retry_async(call, config=RetryConfig(base_delay=0))

        assert response.status_code == 200
        assert calls == 2

    @pytest.mark.asyncio
    async def test_returns_last_response_when_exhausted(self):
        async def call() -> httpx.Response:
            return httpx.Response(503)

        response = await retry_async(call, config=RetryConfig(max_retries=1, base_delay=0))

        assert response.status_code == 503

    @pytest.mark.asyncio
    async def test_reraises_after_last_attempt(self):
        async def call() -> httpx.Response:
            raise httpx.ConnectError("refused")

        with pytest.raises(httpx.ConnectError):
            await retry_async(call, config=RetryConfig(max_retries=2, base_delay=0))

    @pytest.mark.asyncio
    async def test_non_retryable_errors_propagate_immediately(self):
        calls = 0

        async def call() -> httpx.Response:
            nonlocal calls
            calls += 1
            raise ValueError("boom")

        with pytest.raises(ValueError):
            await retry_async(call, config=RetryConfig(base_delay=0))
        assert calls == 1


class TestSpooling:
    @pytest.mark.asyncio
    async def test_spool_writes_upload_to_disk(self):
        upload = UploadFile(file=io.BytesIO(b"frame" * 1000), filename="clip.mp4")

        path = await spool_upload(upload)

        assert path.suffix == ".mp4"
        assert path.read_bytes() == b"frame" * 1000
        path.unlink()

    @pytest.mark.asyncio
    async def test_upload_or_none_skips_missing_file(self, fake_storage):
        assert await upload_or_none(fake_storage, None) is None
        assert fake_storage.uploaded == []
