"""
Logging helpers.

Library modules only create named loggers (``logger = get_logger(__name__)``)
and emit debug records; nothing is configured unless the application calls
``setup_logging``.
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Optional, Union

_DEFAULT_FMT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    *,
    level: Union[int, str] = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    fmt: str = _DEFAULT_FMT,
    datefmt: str = _DEFAULT_DATEFMT,
    force: bool = False,
) -> None:
    """
    Configure application-wide logging.

    Parameters
    ----------
    level : int or str
        Logging level, e.g. ``"DEBUG"`` or ``logging.INFO``.
    log_file : str or Path, optional
        Also write records to this file.
    fmt, datefmt : str
        Record and timestamp formats.
    force : bool
        Replace handlers that are already installed.
    """
    if isinstance(level, str):
        level = level.upper()

    handlers: List[logging.Handler] = []

    console = logging.StreamHandler(stream=sys.stderr)
    console.setFormatter(logging.Formatter(fmt=fmt, datefmt=datefmt))
    handlers.append(console)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(fmt=fmt, datefmt=datefmt))
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers, force=force)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
