"""Centralized logging configuration for PhotoMetaFixer."""

import os
import sys
import logging
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .models import FixerConfig

STRUCTURED_FORMAT = (
    "%(asctime)s | %(name)s | %(levelname)-8s | "
    "%(filename)s:%(lineno)d | %(funcName)s() | %(message)s"
)
SIMPLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(
    name: str = "photo-meta-fixer",
    level: Optional[str] = None,
    format_type: str = "structured",
    debug: bool = False,
) -> logging.Logger:
    """
    Setup centralized logging with environment variable configuration.

    Args:
        name: Logger name (defaults to "photo-meta-fixer")
        level: Log level override (defaults to env var or INFO)
        format_type: Logging format ("structured" or "simple")
        debug: Force DEBUG regardless of ``level`` and LOG_LEVEL

    Returns:
        Configured logger instance

    Environment Variables:
        LOG_LEVEL: Set logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_FORMAT: Set format type ("structured" or "simple")
    """
    logger = logging.getLogger(name)

    if debug:
        log_level = logging.DEBUG
    elif level:
        log_level = getattr(logging, level.upper(), logging.INFO)
    else:
        env_level = os.getenv("LOG_LEVEL", "INFO").upper()
        log_level = getattr(logging, env_level, logging.INFO)

    logger.setLevel(log_level)

    # Avoid duplicate handlers
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        env_format = os.getenv("LOG_FORMAT", format_type).lower()
        fmt = STRUCTURED_FORMAT if env_format == "structured" else SIMPLE_FORMAT
        handler.setFormatter(logging.Formatter(fmt, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def get_logger(name: str = "photo-meta-fixer") -> logging.Logger:
    """Get a logger instance with consistent configuration."""
    return setup_logger(name)


def configure_logging(
    config: "FixerConfig", name: str = "photo-meta-fixer"
) -> logging.Logger:
    """
    Configure the application logger for one session.

    With ``config.debug`` the application logger and the root logger drop to
    DEBUG, and the tool and library locations in use are logged so a missing
    exiftool can be diagnosed from the output alone.
    """
    logger = setup_logger(name, debug=config.debug)
    if config.debug:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug(f"Photo library: {config.library_root}")
        logger.debug(f"exiftool: {config.exiftool_path}")
        logger.debug(f"Support library: {config.support_library_dir}")
        logger.debug(f"Temporary exports: {config.effective_temp_dir}")
    return logger


logger = setup_logger()
