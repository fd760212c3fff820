"""
Logging setup for the chkoverlap tool.

Library modules only create module loggers; the CLI calls setup_logging()
once to attach a rich console handler on stderr. Stdout is left free for
the trace and the overlap report.
"""

from __future__ import annotations
import logging
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

__all__ = ['setup_logging']


def setup_logging(
    name: str = "chkoverlap",
    console_level: Union[int, str] = logging.WARNING,
    console: Optional[Console] = None,
) -> logging.Logger:
    """
    Configure and return the tool logger.

    The ``pdp8_tape`` package logger shares the same handler so decoder
    and scanner debug output shows up with ``--log-level DEBUG``.
    """
    if isinstance(console_level, str):
        console_level = logging.getLevelName(console_level.upper())

    handler = RichHandler(
        level=console_level,
        console=console or Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger(name)
    for target in (logger, logging.getLogger("pdp8_tape")):
        for old in list(target.handlers):
            target.removeHandler(old)
        target.addHandler(handler)
        target.setLevel(console_level)
        target.propagate = False

    logger.debug("Logger initialized: %s (console level %s)",
                 name, logging.getLevelName(console_level))
    return logger
