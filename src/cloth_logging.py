"""
Logging Configuration
Sets up the loggers of the simulation modules.
"""
import logging
import sys
from typing import Optional

# Modules that log; each one uses logging.getLogger(__name__).
LOGGER_NAMES = ("cloth3d", "fixed_step", "cloth_config", "cloth_cli")

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Configures the simulation loggers.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path to save logs to a file.
    """
    formatter = logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S')

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    file_handler = None
    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)

    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        logger.setLevel(level)

        # Avoid duplicate lines when called more than once
        if logger.hasHandlers():
            for handler in list(logger.handlers):
                handler.close()
            logger.handlers.clear()

        logger.addHandler(console_handler)
        if file_handler is not None:
            logger.addHandler(file_handler)
        logger.propagate = False

    logging.getLogger("cloth_cli").debug("Logging initialized.")
