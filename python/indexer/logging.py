"""Structured logging configuration using structlog.

Provides JSON-formatted logs with consistent context including:
- block_height: Height of the block carrying the event being projected
- tx_hash: Hash of the transaction that emitted the event
- event_type: Fully-qualified ledger event name
- timestamp: ISO8601 formatted timestamp

Usage:
    from indexer.logging import get_logger, configure_logging

    # Configure once at startup
    configure_logging()

    # Get a logger for a module
    logger = get_logger(__name__)
    logger.info("something_happened", extra_field="value")

Event Logging:
    from indexer.logging import set_event_context, clear_event_context

    set_event_context(block_height=42, tx_hash="0x..", event_type="greenfield.storage.EventCreateBucket")
    try:
        ...
    finally:
        clear_event_context()
"""

import logging
import sys
from contextvars import ContextVar

import structlog

# Context variables for event-scoped logging
block_height_var: ContextVar[int | None] = ContextVar("block_height", default=None)
tx_hash_var: ContextVar[str | None] = ContextVar("tx_hash", default=None)
event_type_var: ContextVar[str | None] = ContextVar("event_type", default=None)


def add_event_context(logger: logging.Logger, method_name: str, event_dict: dict) -> dict:
    """Add event context to all log entries.

    Injects all non-None ContextVar values into the log event dict.
    """
    block_height = block_height_var.get()
    tx_hash = tx_hash_var.get()
    event_type = event_type_var.get()

    if block_height is not None:
        event_dict["block_height"] = block_height
    if tx_hash:
        event_dict["tx_hash"] = tx_hash
    if event_type:
        event_dict["event_type"] = event_type

    return event_dict


def configure_logging(json_format: bool = True, level: str = "INFO") -> None:
    """Configure structlog for the indexer.

    Args:
        json_format: If True, output JSON logs. If False, output console-friendly logs.
        level: Root log level name.
    """
    # Shared processors for both stdlib and structlog loggers
    shared_processors = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_event_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=shared_processors
        + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # Silence noisy loggers
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("alembic").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger for the given name.

    Args:
        name: Logger name (typically __name__).

    Returns:
        A bound structlog logger.
    """
    return structlog.get_logger(name)


def set_event_context(
    block_height: int | None,
    tx_hash: str | None = None,
    event_type: str | None = None,
) -> None:
    """Set event context for the event currently being projected.

    Args:
        block_height: Height of the block carrying the event.
        tx_hash: Hash of the emitting transaction (optional).
        event_type: Fully-qualified event name (optional).
    """
    block_height_var.set(block_height)
    if tx_hash is not None:
        tx_hash_var.set(tx_hash)
    if event_type is not None:
        event_type_var.set(event_type)


def clear_event_context() -> None:
    """Clear all event-scoped context once the event is done."""
    block_height_var.set(None)
    tx_hash_var.set(None)
    event_type_var.set(None)
