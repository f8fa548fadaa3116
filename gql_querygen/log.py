"""Console logging for the gql-querygen command line."""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "gql_querygen"


def configure_logging(verbose: bool = False, console: Console | None = None) -> logging.Logger:
    """Route the package loggers to a RichHandler.

    INFO by default, DEBUG when verbose. Calling it again replaces the
    previously installed handler.

    Args:
        verbose: Enable debug traces of schema and selection resolution
        console: Console to write to (stderr if omitted)
    """
    log = logging.getLogger(LOGGER_NAME)
    for handler in list(log.handlers):
        if isinstance(handler, RichHandler):
            log.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        rich_tracebacks=True,
        show_time=False,
        show_path=verbose,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    log.addHandler(handler)
    log.setLevel(logging.DEBUG if verbose else logging.INFO)
    return log
