from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

DEFAULT_LOG_PATH = "/var/log/znx.log"


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    also_console: bool = False,
) -> str:
    """Configure logging.

    Every external command and store mutation is recorded to the log file.
    Writing to /var/log needs root; when that fails we fall back to a file in
    the temp directory. The console handler is opt-in (--verbose) because
    stdout/stderr carry the command's own user-facing output.

    Returns the actual file path being used.
    """

    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG if also_console else level)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_znx_configured", False):
        return getattr(logger, "_znx_log_path", log_path)

    chosen_path = log_path
    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    file_handler: Optional[logging.Handler] = None
    try:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
    except OSError:
        chosen_path = str(Path(tempfile.gettempdir()) / "znx.log")
        file_handler = logging.FileHandler(chosen_path)
    file_handler.setFormatter(fmt)
    file_handler.setLevel(level)
    handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler()
        console.setFormatter(fmt)
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_znx_configured", True)
    setattr(logger, "_znx_log_path", chosen_path)

    logging.getLogger(__name__).debug(
        "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
    )
    return chosen_path
