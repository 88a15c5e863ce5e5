import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "swocker"


def setup_logging(log_level: str = "INFO", label: str = "Swocker") -> logging.Logger:
    """
    Configure lifecycle logging.

    Container logs are parsed by external tooling, so non-interactive output
    is one plain `[<label>] message` line per record. Interactive terminals
    get rich formatting.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        label: Bracketed prefix for every line
    """
    stream = sys.stdout
    if stream.isatty():
        handler: logging.Handler = RichHandler(
            console=Console(file=stream),
            show_path=False,
            rich_tracebacks=True,
            markup=False,
        )
        handler.setFormatter(logging.Formatter(f"[{label}] %(message)s", datefmt="[%X]"))
    else:
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(f"[{label}] %(message)s"))

    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(log_level.upper())

    return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Get a logger instance"""
    return logging.getLogger(name)
