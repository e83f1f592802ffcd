"""
structlog setup for the analysis service.

Every event carries `service`, `version` and a `severity` field. Events
emitted while an analysis runs also carry the `url` under analysis, bound
through contextvars so analyzers and the fetcher need not pass it around.
"""

import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator

import structlog
from structlog.types import EventDict, Processor

from pageaudit.core.config import Settings, get_settings

SEVERITY_BY_METHOD = {
    "debug": "DEBUG",
    "info": "INFO",
    "warning": "WARNING",
    "error": "ERROR",
    "critical": "CRITICAL",
}

NOISY_LOGGERS = ("httpx", "httpcore", "openai")


def add_severity(logger: Any, method: str, event_dict: EventDict) -> EventDict:
    """Severity field for log aggregators; unknown methods report INFO."""
    event_dict["severity"] = SEVERITY_BY_METHOD.get(method, "INFO")
    return event_dict


def service_stamp(settings: Settings) -> Processor:
    def stamp(logger: Any, method: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", "pageaudit")
        event_dict.setdefault("version", settings.APP_VERSION)
        return event_dict
    return stamp


@contextmanager
def analysis_context(url: str) -> Iterator[None]:
    """Attach url to every event logged inside the block."""
    with structlog.contextvars.bound_contextvars(url=url):
        yield


def configure_logging(settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_severity,
        service_stamp(settings),
    ]
    if settings.LOG_FORMAT == "json":
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    # Library loggers still go through stdlib logging
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)
    if settings.ENV == "production":
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
