"""
Logging configuration for unionview.

Every module logs under the "unionview" namespace; nothing is printed
unless the application configures logging or calls one of the helpers
below. Routing decisions (which member was skipped, queried or matched)
are logged at DEBUG by unionview.union.

Usage:
    from unionview._logging import get_logger, member_label

    logger = get_logger(__name__)
    logger.debug(f"find_first: {member_label(0, member)} empty, skipped")

    # Trace only union routing, leave the sources quiet
    enable_debug_logging("union")
"""

import logging
from typing import IO, Any, Optional

DEFAULT_FORMAT = "%(levelname)s [%(name)s] %(message)s"

ROOT_LOGGER_NAME = "unionview"

# Child loggers raised to DEBUG by enable_debug_logging(*modules)
_debug_modules: set[str] = set()


def get_logger(name: str) -> logging.Logger:
    """Get logger for unionview module."""
    if not name.startswith(ROOT_LOGGER_NAME):
        name = ROOT_LOGGER_NAME if name == "__main__" else f"{ROOT_LOGGER_NAME}.{name}"

    return logging.getLogger(name)


def member_label(position: int, member: Any) -> str:
    """Short description of a union member for routing messages."""
    return f"member {position} ({member!r})"


def setup_basic_logging(
    level: int = logging.INFO,
    format: Optional[str] = None,
    stream: Optional[IO[str]] = None,
) -> logging.Handler:
    """
    Attach a console handler to the unionview logger.

    Repeated calls reuse the existing handler and only change levels (and
    the stream, when given), so configuring twice never duplicates output.

    Args:
        level: Level for the package logger and its handler
        format: logging format string (default: DEFAULT_FORMAT)
        stream: Text stream to write to (default: sys.stderr)

    Returns:
        The handler writing unionview records
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in logger.handlers:
        if isinstance(handler, logging.StreamHandler):
            handler.setLevel(level)
            if format is not None:
                handler.setFormatter(logging.Formatter(format))
            if stream is not None:
                handler.setStream(stream)
            return handler

    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(format or DEFAULT_FORMAT))
    logger.addHandler(handler)
    return handler


def enable_debug_logging(*modules: str, stream: Optional[IO[str]] = None) -> None:
    """
    Enable DEBUG output.

    With no arguments every unionview module logs at DEBUG. Given module
    names relative to the package ("union", "sources.duckdb"), only those
    loggers go to DEBUG and the rest of the package stays at INFO.
    """
    if not modules:
        setup_basic_logging(level=logging.DEBUG, stream=stream)
        return

    handler = setup_basic_logging(level=logging.INFO, stream=stream)
    handler.setLevel(logging.DEBUG)

    for module in modules:
        name = get_logger(module).name
        logging.getLogger(name).setLevel(logging.DEBUG)
        _debug_modules.add(name)


def disable_logging() -> None:
    """Disable all unionview logging, including per-module DEBUG overrides."""
    for name in _debug_modules:
        logging.getLogger(name).setLevel(logging.NOTSET)
    _debug_modules.clear()

    logging.getLogger(ROOT_LOGGER_NAME).setLevel(logging.CRITICAL + 1)
