from __future__ import annotations

import logging

import structlog

_CONFIGURED = False


def configure_logging(log_level: str = "INFO", json_logs: bool = True) -> None:
    global _CONFIGURED
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.format_exc_info,
    ]

    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[*shared_processors, structlog.processors.EventRenamer(to="event"), renderer],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, log_level.upper(), logging.INFO)),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )
    _CONFIGURED = True


def get_logger(name: str):
    if not _CONFIGURED:
        configure_logging()
    return structlog.get_logger(name)
