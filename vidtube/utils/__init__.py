"""Utility modules for the VidTube application."""

from vidtube.utils.logging import LogContext, get_logger, setup_logging
from vidtube.utils.pagination import PageParams, parse_page_params, total_pages
from vidtube.utils.retry import RetryConfig, retry_async

__all__ = [
    # Logging
    "get_logger",
    "LogContext",
    "setup_logging",
    # Pagination
    "PageParams",
    "parse_page_params",
    "total_pages",
    # Retry
    "retry_async",
    "RetryConfig",
]
