"""Logging for the chronosync command line.

Everything goes to ``<log_dir>/chronosync.log`` at DEBUG. The terminal shows
chronosync's own records from ``console_level`` up, while uvicorn, fastapi
and other libraries only reach it at WARNING or above. Sync records carry the
owner and counts only, so neither destination ever sees a password, key or
task text.
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE = "chronosync.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _is_ours(record: logging.LogRecord) -> bool:
    return record.name == "chronosync" or record.name.startswith("chronosync.")


def setup_logging(*, log_dir: str | Path, console_level: int = logging.INFO) -> Path:
    """Replace the root handlers with the console and file pair; return the log path."""
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(lambda r: _is_ours(r) or r.levelno >= logging.WARNING)
    root.addHandler(console)

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)
    return log_file
