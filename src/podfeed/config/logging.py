"""Logging configuration for podfeed."""

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

NOISY_LOGGERS = ("botocore", "boto3", "urllib3", "s3transfer")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    verbose: bool = False,
    log_file: Path | None = None,
    level: str = "WARNING",
) -> None:
    """Configure the ``podfeed`` logger.

    Args:
        verbose: Log at DEBUG, including third-party libraries
        log_file: Also write plain-text logs to this file
        level: Level used when not verbose
    """
    log_level = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.WARNING)

    logger = logging.getLogger("podfeed")
    logger.setLevel(log_level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_path=verbose,
        rich_tracebacks=True,
    )
    console_handler.setLevel(log_level)
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)
        logger.setLevel(logging.DEBUG)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)
