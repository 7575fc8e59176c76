"""Structured logging configuration for Weatherly.

Log events are emitted with structlog so that every entry carries its context
(city, provider status, error text) as discrete fields. Inside AWS Lambda, or
when LOG_FORMAT=json, entries are rendered as JSON for CloudWatch; otherwise a
human-readable console renderer is used.

Environment Variables:
    LOG_LEVEL: Minimum level to emit (default: INFO).
    LOG_FORMAT: "json" or "console". Defaults to json inside Lambda, console elsewhere.
"""

import logging
import os
import sys
from typing import Any, List, Optional

import structlog
from structlog.typing import Processor


def add_service_context(service_name: str):
    """Builds a processor that stamps every log entry with the service name."""
    def processor(logger: Any, method_name: str, event_dict: dict) -> dict:
        event_dict.setdefault("service", service_name)
        return event_dict

    return processor


def use_json_output(environ: Optional[dict] = None) -> bool:
    """Decides between JSON and console output from the environment."""
    environ = os.environ if environ is None else environ
    log_format = environ.get("LOG_FORMAT", "").lower()
    if log_format:
        return log_format == "json"
    return "AWS_LAMBDA_FUNCTION_NAME" in environ


def configure_logging(service_name: str, log_level: Optional[str] = None) -> None:
    """Configures structlog and the standard library root logger for a Weatherly process.

        Safe to call more than once; the last call wins.

        Args:
            service_name: Name stamped on every log entry (e.g. 'weather-gateway').
            log_level: Minimum level name. Defaults to the LOG_LEVEL env var, then INFO.
    """
    level_name = (log_level or os.getenv("LOG_LEVEL", "INFO")).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    processors: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_service_context(service_name),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
    ]
    if use_json_output():
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors += [structlog.dev.set_exc_info, structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]

    # Lambda captures stdout/stderr into CloudWatch, so a plain stream handler is enough
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level, force=True)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
