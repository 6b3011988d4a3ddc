"""Logging configuration for the verdant executables."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

NOISY_LOGGERS = ("httpx", "openai", "httpcore", "urllib3")


def setup_logging(
    verbose: bool = False,
    log_file: str | Path | None = None,
) -> logging.Logger:
    """
    Configure the root logger for the CLI and the server.

    Args:
        verbose: DEBUG on the console instead of INFO
        log_file: Optional file receiving DEBUG output with timestamps

    Returns:
        The "verdant" package logger
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(
        logging.Formatter("%(levelname)-8s | %(name)s | %(message)s")
    )
    root.addHandler(console_handler)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, mode="a")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root.addHandler(file_handler)

    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return logging.getLogger("verdant")
