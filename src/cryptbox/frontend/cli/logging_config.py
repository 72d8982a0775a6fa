"""Lightweight logging setup for the TUI."""

import logging
import sys
from pathlib import Path
from typing import Optional


def configure_logging(level: int = logging.INFO, log_file: Optional[str | Path] = None) -> None:
    # Configure root logger once. The TUI owns the terminal, so it logs to a file.
    handler_opts = {"filename": str(log_file)} if log_file else {"stream": sys.stdout}
    logging.basicConfig(
        level=level,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        **handler_opts,
    )
