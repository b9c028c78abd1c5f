"""Logging setup for the janitor CLI."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

# Third-party loggers that are only useful when debugging
NOISY_LOGGERS = ("boto3", "botocore", "urllib3", "s3transfer")


def setup_logging(level: str = "INFO", verbose: bool = False) -> None:
    """Configure root logging with a Rich handler.

    Args:
        level: Log level name for janitor loggers
        verbose: Also show debug output from boto3 and botocore
    """
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=verbose)],
        force=True,
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)
