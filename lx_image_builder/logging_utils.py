from __future__ import annotations

import logging
import sys
from pathlib import Path

DEFAULT_LOG_PATH = "logs/lx-image-build.log"

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%dT%H:%M:%S%z"
_CONSOLE_FORMAT = "%(levelname)s: %(message)s"


def _open_log_file(log_path: str) -> tuple[logging.FileHandler, str]:
    try:
        Path(log_path).parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(log_path, encoding="utf-8"), log_path
    except OSError:
        fallback = str(Path.cwd() / Path(log_path).name)
        return logging.FileHandler(fallback, encoding="utf-8"), fallback


def configure_logging(log_path: str = DEFAULT_LOG_PATH, level: int = logging.INFO) -> str:
    """Send the full build transcript to log_path and a summary to stderr.

    The file always records DEBUG, including command output. level only
    controls what reaches the console. If log_path cannot be opened the
    file lands in the working directory instead.

    Returns the actual file path being used.
    """

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    console = getattr(root, "_lx_image_console", None)
    if console is not None:
        console.setLevel(level)
        return root._lx_image_log_path

    file_handler, chosen_path = _open_log_file(log_path)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT))
    root.addHandler(file_handler)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(fmt=_CONSOLE_FORMAT))
    root.addHandler(console)

    root._lx_image_console = console
    root._lx_image_log_path = chosen_path

    logging.getLogger(__name__).debug("Logging to %s (requested %s)", chosen_path, log_path)
    return chosen_path
