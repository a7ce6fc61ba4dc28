import logging

from rich.console import Console
from rich.logging import RichHandler

from .config import LOG_LEVEL


def setup_logging(level=LOG_LEVEL):
    """Sends log records to stderr through rich, leaving stdout for results."""
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.WARNING),
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
