"""
structlog setup shared by the engines and scripts.
"""

import logging
from typing import Optional

import structlog


def configure_logging(level: str = "INFO", json_output: bool = True) -> None:
    """
    Configure structlog for the settlement engine.

    Args:
        level: Minimum log level name (e.g. "INFO", "DEBUG")
        json_output: Render JSON lines when True, console output otherwise
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str, logger: Optional[structlog.BoundLogger] = None) -> structlog.BoundLogger:
    """Return the given logger or a new one bound to an engine name."""
    return logger or structlog.get_logger(engine_name=name)
