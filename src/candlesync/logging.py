"""Logging for the candle sync service.

structlog renders through the stdlib root handler, so sync cycle events and
the warnings ccxt and aiosqlite emit via ``logging`` share one stream and one
format. Modules call ``get_logger(__name__)`` and bind per-series context
(symbol, timeframe) on the returned logger.
"""

import logging
import os

import structlog


def setup_logging(log_level: str = "INFO", log_format: str | None = None) -> None:
    """Install the root handler and structlog pipeline. Call once at startup.

    ``log_format`` is "json" for one event per line (log shippers) or
    "console" (default). When omitted, LOG_FORMAT from the environment is
    used. An unknown ``log_level`` falls back to INFO.
    """
    log_format = (log_format or os.environ.get("LOG_FORMAT", "console")).lower()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # ccxt logs every request at DEBUG; keep it out of the sync log
    logging.getLogger("ccxt").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger with the given name."""
    return structlog.get_logger(name)
