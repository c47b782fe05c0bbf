"""
Centralized logging configuration for camfrustum.
"""

import logging
import sys
from typing import Optional

# Top-level packages whose module loggers follow the configured level
PACKAGE_LOGGERS = ("camfrustum", "camera", "shared", "main")


def setup_logging(level: str = "INFO",
                 log_file: Optional[str] = None,
                 format_string: Optional[str] = None) -> logging.Logger:
    """
    Set up standardized logging configuration.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file to write logs to
        format_string: Custom format string

    Returns:
        Configured logger
    """
    if format_string is None:
        format_string = "[%(asctime)s] %(name)s:%(levelname)s - %(message)s"

    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    # Configure root logger
    logging.basicConfig(
        level=numeric_level,
        format=format_string,
        handlers=[
            logging.StreamHandler(sys.stdout),
            *([] if log_file is None else [logging.FileHandler(log_file)])
        ],
        force=True
    )
    for name in PACKAGE_LOGGERS:
        logging.getLogger(name).setLevel(numeric_level)

    return logging.getLogger("camfrustum")


def get_logger(name: str) -> logging.Logger:
    """Get a logger with standardized naming convention."""
    return logging.getLogger(f"camfrustum.{name}")
