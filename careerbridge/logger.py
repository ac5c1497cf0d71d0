"""
Structured logging setup.

All modules log through ``structlog.get_logger(__name__)``; ``configure_logging`` is
called once by the app factory.

    logger = structlog.get_logger(__name__)
    logger.info("Gateway call", operation="match_jobs", model="gemini-3-flash-preview")
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import structlog
from structlog.types import EventDict, WrappedLogger

# Matches GITHUB_TOKEN and GEMINI_API_KEY style names
CREDENTIAL_SUFFIXES = ("token", "api_key", "secret")


def mask_credentials(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Mask values logged under credential names (``github_token``, ``gemini_api_key``)."""
    for key, value in event_dict.items():
        if key.lower().endswith(CREDENTIAL_SUFFIXES) and value:
            event_dict[key] = "***MASKED***"
    return event_dict


def configure_logging(log_level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure structlog with JSON output on stdout and, optionally, a log file.

    Args:
        log_level: Standard logging level name
        log_file: Optional path of a file to also write logs to
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper()),
        handlers=handlers,
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            mask_credentials,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
