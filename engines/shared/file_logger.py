"""
File Logger Utility

Configures logging to write to both console and a rotating file for the
Symposium service entry points.
"""

import logging
import os
import sys
from pathlib import Path
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import Iterable, Optional

DEFAULT_LOG_DIR = "output/logs"


def setup_file_logger(
    service_name: str,
    log_level: str = "INFO",
    output_dir: Optional[str] = None,
    console_output: bool = True,
    max_bytes: int = 10 * 1024 * 1024,  # 10 MB
    backup_count: int = 5,
    attach: Iterable[str] = ()
) -> logging.Logger:
    """
    Set up logging to write to both console and file.

    Args:
        service_name: Name of the service (e.g., "orchestrator", "api")
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        output_dir: Directory to write log files (defaults to LOG_DIR env var)
        console_output: Whether to also output to console
        max_bytes: Maximum size of each log file before rotation
        backup_count: Number of backup files to keep
        attach: Other logger names (e.g. package loggers) that share these handlers

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(service_name)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Remove any existing handlers
    logger.handlers.clear()

    detailed_formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_formatter = logging.Formatter(
        fmt='[%(name)s] %(levelname)s: %(message)s'
    )

    output_path = Path(output_dir or os.getenv("LOG_DIR", DEFAULT_LOG_DIR))
    output_path.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = output_path / f"{service_name}_{timestamp}.log"

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding='utf-8'
    )
    file_handler.setLevel(logging.DEBUG)  # Capture all levels in file
    file_handler.setFormatter(detailed_formatter)
    logger.addHandler(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(getattr(logging, log_level.upper(), logging.INFO))
        console_handler.setFormatter(console_formatter)
        logger.addHandler(console_handler)

    for name in attach:
        attached = logging.getLogger(name)
        attached.setLevel(logger.level)
        attached.handlers.clear()
        for handler in logger.handlers:
            attached.addHandler(handler)

    logger.info(f"File logging initialized: {log_file}")

    return logger
