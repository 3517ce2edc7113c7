"""
log — structlog-on-stdlib logging setup for the CLI.

Modules log through ``logging.getLogger(__name__)``; structlog formats the
records (console renderer by default, JSON with log_format = "json").
Output goes to stderr so it never mixes with the prompts.
"""

import logging
import sys

import structlog

from .config import LOG_FORMAT, LOG_LEVEL


def setup_logging(level=None, fmt=None):
    shared_processors = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if (fmt or LOG_FORMAT) == "json":
        final_processor = structlog.processors.JSONRenderer()
    else:
        final_processor = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=final_processor,
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(getattr(logging, (level or LOG_LEVEL).upper(), logging.WARNING))
