"""
Logging Configuration
Sets up the package logger for the layout editor and its adapters.
"""
import logging
import sys
from typing import Optional

NAMESPACES = ("craftcut_playground", "craftcut_api")


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Configures the loggers for the 'craftcut_playground' and 'craftcut_api' namespaces.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path to save logs to a file.
    """
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    handlers = []
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    for name in NAMESPACES:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        # Avoid duplicate output when called twice (tests, CLI re-entry)
        if logger.hasHandlers():
            logger.handlers.clear()
        for handler in handlers:
            logger.addHandler(handler)

    logging.getLogger(NAMESPACES[0]).info("Logging initialized.")
