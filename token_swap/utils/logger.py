# token_swap/utils/logger.py

import logging
import os

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


def setup_logging(level=None) -> None:
    """Configures the root handler once. Level falls back to $LOG_LEVEL, then INFO."""
    global _configured
    if _configured:
        return
    level = level or os.getenv("LOG_LEVEL", "INFO")
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
