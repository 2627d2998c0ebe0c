from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from loguru import logger as _loguru_logger


class InterceptHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:  # pragma: no cover
        try:
            level = _loguru_logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        _loguru_logger.bind(logger=record.name).opt(depth=6, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(level: int = logging.INFO) -> None:
    # aiohttp.access and sqlalchemy loggers end up in loguru as well
    logging.basicConfig(handlers=[InterceptHandler()], level=level, force=True)
    _loguru_logger.remove()
    _loguru_logger.add(sys.stdout, serialize=True, backtrace=False, diagnose=False, level=level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


def get_logger(name: str = "volmatch") -> Any:
    return structlog.get_logger(name)
