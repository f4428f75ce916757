"""structlog setup shared by the preview tool and anything embedding tileworld.

Library modules only ever call ``structlog.get_logger(__name__)``; nothing is
configured until an entry point calls :func:`setup_logging`.
"""

import logging
import sys
from typing import Optional, Union

import structlog
from structlog.stdlib import add_log_level, add_logger_name


def parse_log_level(name: str) -> int:
    """Translate a level name such as ``"debug"`` into a :mod:`logging` level."""
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name}")
    return level


def setup_logging(
    level: Union[int, str] = logging.INFO, *, colors: Optional[bool] = None
) -> None:
    """Route structlog through stdlib logging on stderr at ``level``.

    Map output goes to stdout, so log lines never interleave with it.  Colours
    default to on only when stderr is a terminal.  Calling this again replaces
    the previous configuration.
    """
    if isinstance(level, str):
        level = parse_log_level(level)
    if colors is None:
        colors = sys.stderr.isatty()

    logging.basicConfig(level=level, format="%(message)s", stream=sys.stderr, force=True)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_logger_name,
            add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=False),
            structlog.dev.ConsoleRenderer(colors=colors),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
