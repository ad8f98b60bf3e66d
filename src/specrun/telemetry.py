"""Logging configuration.

Runner modules log lifecycle events through module-level structlog
loggers. This module routes those events through the standard logging
machinery to the standard error stream, keeping the standard output
stream free for reporter output.
"""

import logging
import sys

import structlog

BASE_LOGGER_NAME = 'specrun'


def setup_logging(level: int = logging.WARNING, json_logs: bool = False) -> None:
    """Configure structlog for the runner.

    Args:
        level: Minimal level of emitted events.
        json_logs: Render events as JSON lines instead of console text.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt='iso', utc=True),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    renderer: structlog.types.Processor
    if json_logs:
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(processor=renderer))

    logger = logging.getLogger(BASE_LOGGER_NAME)
    for old_handler in list(logger.handlers):
        old_handler.close()
        logger.removeHandler(old_handler)

    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

    structlog.get_logger(BASE_LOGGER_NAME).debug('Logging configured', level=logging.getLevelName(level))
