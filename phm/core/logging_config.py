# phm/core/logging_config.py
import logging
import sys

import structlog

from phm.core.settings import settings

SERVICE_NAME = "phm-api"


def _add_service(logger, method_name, event_dict):
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict.setdefault("env", settings.APP_ENV)
    return event_dict


def setup_logging() -> None:
    """
    structlog over stdlib logging, JSON to stdout, one event per line.
    Every event carries the service name and environment; anything bound
    with ``structlog.contextvars`` is merged in as well.
    """
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    # uvicorn's access log duplicates request_finished
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    renderer = (
        structlog.dev.ConsoleRenderer()
        if settings.is_development and sys.stdout.isatty()
        else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            _add_service,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


logger = structlog.get_logger("phm")
