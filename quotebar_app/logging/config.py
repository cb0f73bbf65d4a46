"""
Centralized logging configuration for the quotebar engine.

Every module logs through structlog so poller, rotation and supervisor
events share one structured format.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False
) -> None:
    """
    Route structlog through stdlib logging on stderr.

    Args:
        level: Logging level name
        format_json: Render JSON lines instead of the console format
    """
    log_level = getattr(logging, level.upper())

    # stderr keeps the console tray's title lines on stdout clean
    logging.basicConfig(
        level=log_level,
        stream=sys.stderr,
        format="%(message)s"
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if format_json:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_poller_logger(name: str, code: str) -> FilteringBoundLogger:
    """
    Get a logger bound to one instrument's poller.

    Args:
        name: Logger name (typically __name__)
        code: Instrument code the poller fetches

    Returns:
        Structlog logger carrying the poller subsystem and code
    """
    return get_logger(name).bind(
        subsystem="poller",
        code=code
    )


def log_reconciliation(
    logger: FilteringBoundLogger,
    added: list[str],
    removed: list[str],
    restarted: list[str],
    rotation_rebuilt: bool,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log the outcome of a configuration reconciliation pass.

    Args:
        logger: Structlog logger instance
        added: Codes whose pollers were started
        removed: Codes whose pollers and state were torn down
        restarted: Codes whose pollers were replaced with new settings
        rotation_rebuilt: Whether the rotation controller was replaced
        context: Additional context data
    """
    bound_logger = logger.bind(
        added=added,
        removed=removed,
        restarted=restarted,
        rotation_rebuilt=rotation_rebuilt,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    if added or removed or restarted or rotation_rebuilt:
        bound_logger.info("Configuration applied")
    else:
        bound_logger.debug("Configuration applied without changes")
