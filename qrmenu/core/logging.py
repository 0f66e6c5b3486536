# qrmenu/core/logging.py
import logging
import sys
from typing import Union

# Storage SDK and HTTP client loggers log every request at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "hpack", "supabase", "storage3", "postgrest", "gotrue")


def setup_logging(level: Union[int, str] = logging.INFO) -> logging.Logger:
    """Route all application logs to stdout at ``level`` (a number or a name like "DEBUG")"""

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Never more verbose than WARNING, even when the app runs at DEBUG
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(root_logger.level, logging.WARNING))

    return root_logger
