"""Centralized logging configuration for Solfege Tuner.

This module provides a consistent way to configure logging across the application.
"""

import logging
import sys
from typing import Optional

# Log levels for different modules
MODULE_LOG_LEVELS = {
    # Core modules
    "solfege_tuner": logging.INFO,
    "solfege_tuner.cli": logging.INFO,
    "solfege_tuner.core": logging.INFO,
    "solfege_tuner.solfege": logging.INFO,
    # Per-tick chatter lives here, keep it quiet unless debugging
    "solfege_tuner.detection": logging.INFO,
    "solfege_tuner.services": logging.INFO,
    "solfege_tuner.audio": logging.INFO,
    "solfege_tuner.logger": logging.WARNING,  # Logger module itself should be quiet
    # Libraries/third-party
    "aubio": logging.ERROR,
    # Root logger
    "": logging.ERROR,
}

# Shared console handler
_console_handler: Optional[logging.Handler] = None


def setup_logging(level: Optional[str] = None) -> None:
    """Set up logging configuration for the application.

    Args:
        level: If provided, override all 'solfege_tuner' log levels with this level (e.g., "DEBUG").
    """
    global _console_handler

    # Create a single, shared console handler if it doesn't exist
    if _console_handler is None:
        _console_handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        _console_handler.setFormatter(formatter)

    # Determine log levels
    log_levels = MODULE_LOG_LEVELS.copy()
    if level:
        numeric_level = logging.getLevelName(level.upper())
        if isinstance(numeric_level, int):
            for module_name in log_levels:
                if module_name.startswith("solfege_tuner"):
                    log_levels[module_name] = numeric_level
        else:
            logging.getLogger(__name__).error(f"Invalid log level: {level}")

    # Apply module-specific levels. Child modules propagate up to these
    # package loggers, so only the listed names get the shared handler.
    for module_name, module_level in log_levels.items():
        logger = logging.getLogger(module_name)
        logger.setLevel(module_level)

        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        logger.addHandler(_console_handler)
        logger.propagate = False

    logging.getLogger("solfege_tuner").info("Logging configuration complete")
