"""
Basic logging configuration for the directory service.

``setup_logging`` configures the root logger once with a console
handler and, when ``LOG_FILE`` is set, a file handler.  Modules log
through ``logging.getLogger(__name__)`` so records carry the
``bookshop_directory.app...`` logger name.  Chatty HTTP and Google
client loggers are capped at WARNING so that backend scans do not flood
the output at INFO level.
"""

import logging
from pathlib import Path
from typing import Optional

_NOISY_LOGGERS = ("urllib3", "google", "google.auth", "gspread")


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Configure the root logger.

    Parameters
    ----------
    level : str
        Logging level name (e.g. ``"DEBUG"``, ``"INFO"``).  Case
        insensitive; unknown names fall back to INFO.
    logfile : Optional[str]
        Path to a file to additionally log to.  Resolved relative to the
        current working directory.
    """
    logger = logging.getLogger()
    if logger.handlers:
        # Already configured (uvicorn, pytest or a repeated create_app call).
        return

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(numeric_level)

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if logfile:
        log_path = Path(logfile).resolve()
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))
