# GitRanger Logging
# Route library log records through rich on stderr

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(message)s"


def setup_logging(verbose: bool = False, console: Optional[Console] = None) -> logging.Logger:
    """
    Configure logging for the command line.

    Library modules log through logging.getLogger(__name__); this attaches a
    single RichHandler to the "gitranger" logger.

    Args:
        verbose: Log DEBUG and up instead of WARNING and up.
        console: Rich console to write to (stderr by default).

    Returns:
        The configured package logger.
    """
    level = logging.DEBUG if verbose else logging.WARNING

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=verbose,
        show_time=verbose,
        markup=False,
        rich_tracebacks=verbose,
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger = logging.getLogger("gitranger")
    for existing in list(logger.handlers):
        if isinstance(existing, RichHandler):
            logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
