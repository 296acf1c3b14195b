import logging
import os
from datetime import datetime
from typing import Optional

from lunchbox.core.config import get_settings

def setup_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Set up a logger with detailed formatting.

    Args:
        name: Logger name (usually __name__)
        level: Optional logging level override

    Returns:
        Configured logger instance
    """
    settings = get_settings()
    logger = logging.getLogger(name)

    # Set level from settings or default to INFO
    log_level = (level or settings.LOG_LEVEL or 'INFO').upper()
    logger.setLevel(getattr(logging, log_level, logging.INFO))

    formatter = logging.Formatter(
        fmt=settings.LOG_FORMAT,
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Add handlers if they haven't been added already
    if not logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        # File logging only when a directory is configured
        if settings.LOG_DIR:
            os.makedirs(settings.LOG_DIR, exist_ok=True)
            file_handler = logging.FileHandler(
                os.path.join(
                    settings.LOG_DIR,
                    f"{datetime.now().strftime('%Y-%m-%d')}.log"
                )
            )
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger

def mask_token(token: Optional[str]) -> str:
    """Render a credential for log output without exposing it."""
    if not token:
        return 'None'
    return f"{'*' * 10}{token[-5:]}"
