"""Tests for page parameter parsing and the page envelope."""

import pytest
from httpx import AsyncClient

from vidtube.constants import MAX_VIDEOS_PAGE_SIZE
from vidtube.models.schemas import Page
from vidtube.utils.pagination import PageParams, parse_page_params, total_pages


class TestParsePageParams:
    """Tests for parse_page_params."""

    def test_defaults_when_missing(self):
        params = parse_page_params(None, None, max_limit=50)
        assert params == PageParams(page=1, page_size=10)
        assert params.offset == 0

    @pytest.mark.parametrize("raw", ["abc", "0", "-3", "", "1.5"])
    def test_invalid_values_fall_back(self, raw):
        params = parse_page_params(raw, raw, max_limit=50)
        assert params.page == 1
        assert params.page_size == 10

    def test_limit_is_clamped_to_ceiling(self):
        params = parse_page_params("2", "1000", max_limit=50)
        assert params.page == 2
        assert params.page_size == 50
        assert params.offset == 50

    def test_numeric_strings_with_whitespace(self):
        params = parse_page_params(" 3 ", " 7 ", max_limit=100)
        assert params == PageParams(page=3, page_size=7)

    def test_custom_default_limit(self):
        params = parse_page_params(None, "nope", max_limit=100, default_limit=25)
        assert params.page_size == 25


class TestPageEnvelope:
    """Tests for Page.build and total_pages."""

    def test_total_pages(self):
        assert total_pages(0, 10) == 0
        assert total_pages(1, 10) == 1
        assert total_pages(10, 10) == 1
        assert total_pages(11, 10) == 2

    def test_empty_page(self):
        page = Page.build([], 0, PageParams(page=1, page_size=10))
        assert page.total_pages == 0
        assert page.has_next is False
        assert page.has_prev is False

    def test_middle_page(self):
        page = Page.build(["x"] * 5, 12, PageParams(page=2, page_size=5))
        assert page.total_pages == 3
        assert page.has_next is True
        assert page.has_prev is True

    def test_last_page(self):
        page = Page.build(["x", "y"], 12, PageParams(page=3, page_size=5))
        assert page.has_next is False
        assert page.has_prev is True

    def test_serializes_camel_case(self):
        page = Page.build([], 0, PageParams(page=1, page_size=10))
        dumped = page.model_dump(by_alias=True)
        assert set(dumped) == {
            "items",
            "totalCount",
            "page",
            "pageSize",
            "totalPages",
            "hasNext",
            "hasPrev",
        }


class TestPaginatedListing:
    """Pagination through the video listing endpoint."""

    @pytest.mark.asyncio
    async def test_pages_partition_the_collection(self, client: AsyncClient, test_user, make_video):
        for i in range(12):
            await make_video(test_user, title=f"Video {i}")

        seen: list[str] = []
        sizes = []
        for page in (1, 2, 3):
            response = await client.get("/api/v1/videos", params={"page": page, "limit": 5})
            assert response.status_code == 200
            data = response.json()["data"]
            assert data["totalCount"] == 12
            assert data["totalPages"] == 3
            assert len(data["items"]) <= data["pageSize"]
            sizes.append(len(data["items"]))
            seen.extend(item["id"] for item in data["items"])

        assert sizes == [5, 5, 2]
        assert len(seen) == len(set(seen)) == 12

    @pytest.mark.asyncio
    async def test_page_past_end_is_empty(self, client: AsyncClient, test_user, make_video):
        for i in range(3):
            await make_video(test_user, title=f"Video {i}")

        response = await client.get("/api/v1/videos", params={"page": 9, "limit": 2})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["items"] == []
        assert data["totalCount"] == 3
        assert data["hasNext"] is False
        assert data["hasPrev"] is True

    @pytest.mark.asyncio
    async def test_oversized_limit_is_clamped(self, client: AsyncClient):
        response = await client.get("/api/v1/videos", params={"limit": 1000, "page": "junk"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["pageSize"] == MAX_VIDEOS_PAGE_SIZE
        assert data["page"] == 1
