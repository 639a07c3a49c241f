"""Logging for lxcpilot: Rich console output plus an optional log file.

Every module logs through ``get_logger(__name__)`` under the ``lxcpilot``
namespace. The CLI calls ``configure_logging`` once per invocation with
the ``--verbose`` flag and the log file chosen by ``--log-file`` or the
``log_file`` config setting.
"""
import logging
import os
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

console = Console(stderr=True)

ROOT_LOGGER = "lxcpilot"
FALLBACK_DIR = Path("/tmp")

FILE_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"

_file_handler: Optional[logging.FileHandler] = None


def setup_file_logging(log_file: str, verbose: bool = False) -> Path:
    """Send lxcpilot logs to ``log_file`` as well as the console.

    A second call with another path replaces the previous file handler.
    When the log directory cannot be created the file goes to /tmp under
    the same name.

    Returns:
        Path of the file actually written to
    """
    global _file_handler

    target = Path(log_file)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except PermissionError:
        target = FALLBACK_DIR / target.name

    root_logger = logging.getLogger(ROOT_LOGGER)
    level = logging.DEBUG if verbose else logging.INFO

    if _file_handler is not None:
        if Path(_file_handler.baseFilename) == Path(os.path.abspath(target)):
            _file_handler.setLevel(level)
            return target
        root_logger.removeHandler(_file_handler)
        _file_handler.close()

    _file_handler = logging.FileHandler(target)
    _file_handler.setLevel(level)
    _file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root_logger.addHandler(_file_handler)
    root_logger.setLevel(level)

    root_logger.info(f"lxcpilot logging to {target}")
    return target


def set_console_level(verbose: bool = False):
    """Raise or lower the console verbosity of every lxcpilot logger."""
    level = logging.DEBUG if verbose else logging.INFO
    for name, logger in logging.root.manager.loggerDict.items():
        if name.startswith(ROOT_LOGGER) and isinstance(logger, logging.Logger):
            logger.setLevel(level)


def configure_logging(verbose: bool = False, log_file: Optional[str] = None) -> Optional[Path]:
    """Apply the CLI logging options; returns the log file in use, if any."""
    set_console_level(verbose)
    if log_file:
        return setup_file_logging(log_file, verbose=verbose)
    return None


def get_logger(name: str) -> logging.Logger:
    """Get a logger that prints to the stderr console through Rich.

    Args:
        name: Logger name (typically __name__)
    """
    logger = logging.getLogger(name)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=console, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)

    return logger
