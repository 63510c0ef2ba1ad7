"""API routers."""

from vidtube.api.router import api_router

__all__ = ["api_router"]
