"""
Logging configuration.

Sets up console logging and, when LOG_DIR is set, a rotating log file.
"""

import logging
import logging.handlers
import os
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s:%(lineno)d - %(message)s"


def setup_logging(level: Optional[str] = None, log_dir: Optional[str] = None) -> None:
    """Configure the root logger for the application.

    Calling this more than once does not add duplicate handlers.

    Args:
        level: Log level name, defaults to LOG_LEVEL or INFO.
        log_dir: Directory for ``fantasy_map.log``, defaults to LOG_DIR.
            No file is written when neither is set.
    """
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_dir = log_dir or os.getenv("LOG_DIR")

    formatter = logging.Formatter(LOG_FORMAT)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    if not any(getattr(h, "_fantasy_map", False) for h in root_logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        console_handler._fantasy_map = True
        root_logger.addHandler(console_handler)

        if log_dir:
            log_path = Path(log_dir)
            log_path.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                log_path / "fantasy_map.log",
                maxBytes=5_242_880,  # 5MB
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            file_handler._fantasy_map = True
            root_logger.addHandler(file_handler)

    # SQL echo is too chatty below WARNING
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
