"""Structured logging for DnD Master AI.

Every module logs through structlog with keyword context. Events are
handed to the standard library so one set of handlers serves both our
own loggers and third-party ones (openai, httpx). Output goes to stderr,
never to stdout where the story is printed, and optionally to a file.

Example:
    >>> from dnd_master.core.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Player moved", direction="north", location="loc_0_1")
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import Processor

from dnd_master import __version__


if TYPE_CHECKING:
    from structlog.types import EventDict, WrappedLogger


_QUIET_LIBRARIES = ("httpx", "httpcore", "openai")


def add_game_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Stamp each entry with the application name and version."""
    event_dict.setdefault("app", "dnd_master")
    event_dict.setdefault("version", __version__)
    return event_dict


def _formatter(shared: list[Processor], *, json_format: bool, colors: bool) -> logging.Formatter:
    renderer: list[Processor]
    if json_format:
        renderer = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        renderer = [
            structlog.dev.ConsoleRenderer(
                colors=colors,
                exception_formatter=structlog.dev.plain_traceback,
            )
        ]
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *renderer],
    )


def configure_logging(
    *,
    level: str = "WARNING",
    json_format: bool = False,
    log_file: str | None = None,
) -> None:
    """Configure structlog and the root standard library logger.

    Calling it again replaces the previous handlers.

    Args:
        level: Minimum level (DEBUG, INFO, WARNING, ERROR, CRITICAL);
            unknown names fall back to WARNING.
        json_format: Render entries as JSON lines instead of console text.
        log_file: Optional file that receives the same entries, uncoloured.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.WARNING

    shared: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_game_context,
        structlog.processors.StackInfoRenderer(),
    ]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(_formatter(shared, json_format=json_format, colors=sys.stderr.isatty()))
    handlers: list[logging.Handler] = [console]

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(_formatter(shared, json_format=json_format, colors=False))
        handlers.append(file_handler)

    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(numeric_level)

    # Request-level chatter from the HTTP stack only at WARNING and above.
    for name in _QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a logger, typically with ``__name__``."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind values included in every following entry, e.g. ``player="Aria"``."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


__all__ = [
    "add_game_context",
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
]
