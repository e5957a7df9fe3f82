"""structlog setup for processes that embed the runtime.

Library modules only call ``structlog.get_logger()``; entry points
(the dev node, scripts) call configure_logging() once at startup.
"""

import logging

import structlog


def configure_logging(level: str | int = "INFO") -> None:
    """Configure structlog with console rendering at the given level."""
    if isinstance(level, str):
        level = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )
