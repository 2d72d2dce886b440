"""
Logging utilities for the comparison engine.

Library modules obtain loggers through get_logger() and never configure
handlers themselves. Applications (the CLI, or an embedding service) call
setup_logging() once to attach console output.
"""

import logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme


_LOG_THEME = Theme({
    "logging.level.debug": "dim cyan",
    "logging.level.info": "green",
    "logging.level.warning": "yellow",
    "logging.level.error": "bold red",
    "logging.level.critical": "bold white on red",
    "log.time": "dim",
    "log.path": "dim",
})

# Logs go to stderr so JSON written to stdout stays parseable
_console = Console(theme=_LOG_THEME, stderr=True)

ROOT_LOGGER_NAME = "comparison_engine"

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_loggers: dict[str, logging.Logger] = {}

_logging_configured = False


def setup_logging(
    level: str = "INFO",
    log_format: Optional[str] = None,
    include_console: bool = True,
    rich_tracebacks: bool = True,
    show_path: bool = False,
    show_time: bool = True,
    dev_mode: bool = False,
) -> logging.Logger:
    """
    Configure the package root logger.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Format string for the plain handler. Defaults to DEFAULT_LOG_FORMAT.
        include_console: Whether to attach a console handler at all
        rich_tracebacks: Render exception tracebacks with rich (dev mode only)
        show_path: Show the emitting file path (dev mode only)
        show_time: Show timestamps (dev mode only)
        dev_mode: Use rich console output instead of a plain stream handler

    Returns:
        The configured root logger.
    """
    global _logging_configured

    level_value = getattr(logging, level.upper())
    log_format = log_format or DEFAULT_LOG_FORMAT

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level_value)
    logger.handlers.clear()

    if include_console:
        if dev_mode:
            console_handler: logging.Handler = RichHandler(
                console=_console,
                level=level_value,
                show_time=show_time,
                show_path=show_path,
                rich_tracebacks=rich_tracebacks,
                markup=False,
            )
        else:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(logging.Formatter(log_format))
        console_handler.setLevel(level_value)
        logger.addHandler(console_handler)
    else:
        logger.addHandler(logging.NullHandler())

    logger.propagate = False
    _logging_configured = True
    return logger


def is_logging_configured() -> bool:
    """Whether setup_logging() has been called in this process."""
    return _logging_configured


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a package component.

    Args:
        name: Component name (e.g. "scorer"). A leading "comparison_engine."
              is accepted, so passing __name__ works too.

    Returns:
        A child of the package root logger.
    """
    if name.startswith(ROOT_LOGGER_NAME + ".") or name == ROOT_LOGGER_NAME:
        full_name = name
    else:
        full_name = f"{ROOT_LOGGER_NAME}.{name}" if name else ROOT_LOGGER_NAME

    if full_name not in _loggers:
        _loggers[full_name] = logging.getLogger(full_name)

    return _loggers[full_name]


# Silence "no handler" warnings until an application configures logging
_root_logger = logging.getLogger(ROOT_LOGGER_NAME)
_root_logger.addHandler(logging.NullHandler())
