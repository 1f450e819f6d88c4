# colorblind_theme/core/logging_config.py
"""Root logging setup for the host application and the CLI."""

import logging
import sys
from pathlib import Path
from typing import IO, Optional, Union

DEFAULT_FORMAT = "%(asctime)s.%(msecs)03d [%(levelname)-8s] %(name)s | %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    fmt: str = DEFAULT_FORMAT,
    stream: Optional[IO[str]] = None,
) -> None:
    """Configure global logging with console and optional file output."""
    handlers = [logging.StreamHandler(stream or sys.stdout)]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    logging.basicConfig(
        level=level,
        format=fmt,
        datefmt=DEFAULT_DATEFMT,
        handlers=handlers,
        force=True,
    )
    # Reduce noise from third-party libraries
    logging.getLogger("watchdog").setLevel(logging.WARNING)
