from __future__ import annotations
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOG_DIR = Path("logs")
LOG_FILE = "poagov.log"
MAX_LOG_BYTES = 4 * 1024 * 1024
LOG_BACKUPS = 2          # poagov.log + 2 rotated files
FILE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(*, to_file: bool = False, level: int = logging.INFO,
                      console: Console | None = None, log_dir: Path = LOG_DIR) -> logging.Handler:
    """Attach one handler to the `poagov` logger: rich console output, or rotating files under `log_dir`."""
    if to_file:
        log_dir.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = RotatingFileHandler(
            log_dir / LOG_FILE, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8",
        )
        handler.setFormatter(logging.Formatter(FILE_FORMAT))
    else:
        handler = RichHandler(console=console or Console(stderr=True), show_path=False, rich_tracebacks=True)
        handler.setFormatter(logging.Formatter("%(message)s"))

    root = logging.getLogger("poagov")
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    root.addHandler(handler)
    root.setLevel(level)
    root.propagate = False
    return handler
