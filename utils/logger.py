import logging
import os
from typing import Optional

LOGGER_NAME = "spotify_lookup.cli"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_logger = logging.getLogger(LOGGER_NAME)


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """Configure console output (and optionally a log file) for the CLI.

    Library loggers under ``spotify_lookup`` propagate here, so DEBUG shows
    every request url.
    """
    root = logging.getLogger()
    root.setLevel(level)

    if not any(getattr(h, "_spotify_lookup", False) for h in root.handlers):
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter("%(message)s"))
        console._spotify_lookup = True
        root.addHandler(console)

        if log_file:
            log_dir = os.path.dirname(log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            file_handler._spotify_lookup = True
            root.addHandler(file_handler)

    # httpx logs every request at INFO; keep it quiet unless debugging.
    logging.getLogger("httpx").setLevel(logging.DEBUG if level <= logging.DEBUG else logging.WARNING)
    return _logger


def log_info(message: str) -> None:
    _logger.info(message)


def log_success(message: str) -> None:
    _logger.info(f"✓ {message}")


def log_warning(message: str) -> None:
    _logger.warning(message)


def log_error(message: str) -> None:
    _logger.error(message)
