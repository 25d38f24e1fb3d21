"""
Spendwatch - forecast-vs-actual ad spend deviation detection.
"""

import logging
import os
import sys
from typing import Any, Optional
from pathlib import Path
from dotenv import load_dotenv

__version__ = "1.0.0"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Global configuration state
_config = {
    "verbose": False,
}


def _exception_handler(
    exc_type: type, exc_value: BaseException, exc_traceback: Any
) -> None:
    """
    Custom exception handler that prints only the error message when verbose=False.

    Args:
        exc_type: The exception class.
        exc_value: The exception instance.
        exc_traceback: The traceback object.
    """
    if _config["verbose"]:
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
    else:
        print(f"{exc_type.__name__}: {exc_value}")


def _configure_logging(log_level: str) -> None:
    """Attach a single stream handler to the package logger."""
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log_level: '{log_level}'")

    logger = logging.getLogger(__name__)
    logger.setLevel(numeric_level)

    if not any(getattr(h, "_spendwatch", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handler._spendwatch = True
        logger.addHandler(handler)

    for handler in logger.handlers:
        handler.setLevel(numeric_level)


def configure(
    env_file_path: Optional[str] = None,
    verbose: bool = False,
    log_level: Optional[str] = None,
    **kwargs: Any,
) -> bool:
    """
    Configure the Spendwatch library.

    Loads environment variables (thresholds, missing-forecast policy, Slack
    token) from a .env file, sets the exception verbosity and the package
    log level.

    Args:
        env_file_path (str, optional): Path to the .env file. If None, searches for
            .env in the current directory and parent directories.
        verbose (bool): If True, show full exception tracebacks. If False (default),
            show only the error message for cleaner output.
        log_level (str, optional): Logging level for the ``spendwatch`` logger
            (e.g. "INFO", "DEBUG"). Falls back to SPENDWATCH_LOG_LEVEL from the
            environment; logging is left untouched when neither is set.
        **kwargs: Reserved for future configuration parameters.

    Returns:
        bool: True if a .env file was found and loaded, False otherwise.
    """
    _config["verbose"] = verbose
    sys.excepthook = _exception_handler

    if env_file_path:
        env_file = Path(env_file_path)
        if env_file.exists():
            env_loaded = load_dotenv(dotenv_path=env_file)
        else:
            env_loaded = False
    else:
        env_loaded = load_dotenv()

    level = log_level or os.getenv("SPENDWATCH_LOG_LEVEL")
    if level:
        _configure_logging(level)

    return env_loaded
