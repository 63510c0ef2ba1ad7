"""Logging setup shared by the API, the CRUD layer and the storage client."""

import logging
import sys
from collections.abc import MutableMapping
from typing import Any, Literal

from vidtube.config import get_settings

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_HANDLER_NAME = "vidtube"

# Third-party loggers and the floor they are raised to
_QUIET_LOGGERS = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "uvicorn.access": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
    "aiosqlite": logging.WARNING,
    "passlib": logging.ERROR,
}


def _default_level() -> LogLevel:
    settings = get_settings()
    if settings.is_production:
        return "INFO"
    if settings.app_env == "test":
        return "WARNING"
    return "DEBUG"


def setup_logging(level: LogLevel | None = None) -> None:
    """Configure the root logger once for the process.

    Args:
        level: Explicit level; otherwise INFO in production, WARNING under
            tests and DEBUG in development
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level or _default_level()))

    if not any(h.get_name() == _HANDLER_NAME for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(handler)

    for name, floor in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(floor)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class LogContext(logging.LoggerAdapter):
    """Logger adapter that prefixes every message with ``[key=value]`` pairs.

    Usable directly or as a context manager around a unit of work::

        with LogContext(logger, video_id=video.id) as ctx:
            ctx.info("Video deleted")
    """

    def __init__(self, logger: logging.Logger, **context: Any) -> None:
        super().__init__(logger, context)
        self.prefix = " ".join(f"[{key}={value}]" for key, value in context.items())

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        return f"{self.prefix} {msg}", kwargs

    def __enter__(self) -> "LogContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc is not None:
            self.debug(f"left with {type(exc).__name__}: {exc}")
