import logging
import sys

import structlog
from loguru import logger

from core.config import settings

CONSOLE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"

# stdlib loggers that install their own handlers and do not propagate
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def level_number(level_name: str) -> int:
    name = str(level_name).strip().upper()
    if name.isdigit():
        return int(name)
    level = logging.getLevelName(name)
    # getLevelName answers "Level X" for unknown names
    return level if isinstance(level, int) else logging.INFO


class InterceptHandler(logging.Handler):
    """Hands stdlib records (config diagnostics, uvicorn, APScheduler) over to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1
        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _route_stdlib_logging(level: int) -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=level, force=True)
    for name in UVICORN_LOGGERS:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False


def configure_logging() -> None:
    """Console logging through loguru, JSON audit events through structlog."""
    level = level_number(settings.log_level)

    logger.remove()
    logger.add(
        sys.stdout,
        level=level,
        format=CONSOLE_FORMAT,
        backtrace=False,
        diagnose=False,
        enqueue=True,
    )
    _route_stdlib_logging(level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=False),
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logger.info("Logging configured | level={} | env={}", logging.getLevelName(level), settings.app_env)


def audit_logger(name: str):
    """Lazy structlog logger for audit events, tagged with service and environment."""
    return structlog.get_logger(name, service=settings.app_name, env=settings.app_env)
