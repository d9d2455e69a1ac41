"""Logging configuration for the changeguard CLI and worker processes."""

from __future__ import annotations

import logging
import os
from typing import TextIO


def setup_logging(
    logger_name: str,
    log_file: str | None = None,
    verbose: bool = False,
    stream: TextIO | None = None,
) -> logging.Logger:
    """
    Configure dual-handler logging (console + file).

    Calling it again replaces the handlers installed by the previous call.

    Args:
        logger_name: Name for the logger (e.g., "changeguard")
        log_file: Path to log file (None for no file logging)
        verbose: Enable DEBUG level on console (default INFO)
        stream: Console stream (default stderr). Workers must keep stdout
            free for their response envelope.

    Returns:
        Configured logger instance
    """
    # Console handler
    console_handler = logging.StreamHandler(stream)
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(
        logging.Formatter("%(levelname)-8s | %(name)s | %(message)s")
    )

    # File handler (if path provided)
    file_handler = None
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="w")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    logger = logging.getLogger(logger_name)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    logger.setLevel(logging.DEBUG)
    logger.addHandler(console_handler)
    if file_handler:
        logger.addHandler(file_handler)

    # Suppress noisy 3rd party loggers
    for noisy in ["httpx", "httpcore"]:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return logger
