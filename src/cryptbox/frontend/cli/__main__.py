"""Run the TUI with `python -m cryptbox.frontend.cli [box-name]`."""

from __future__ import annotations

import sys
from typing import Optional

from cryptbox.core.config import resolve_storage_root
from cryptbox.frontend.cli.app import CryptBoxApp
from cryptbox.frontend.cli.context import build_context
from cryptbox.frontend.cli.logging_config import configure_logging


def main(argv: Optional[list[str]] = None) -> None:
    """Open the named box (default "default"); logs go to cryptbox.log in the storage directory."""
    args = sys.argv[1:] if argv is None else argv
    name = args[0] if args else "default"
    root = resolve_storage_root()
    root.mkdir(parents=True, exist_ok=True)
    configure_logging(log_file=root / "cryptbox.log")
    CryptBoxApp(ctx=build_context(name, storage_root=root)).run()


if __name__ == "__main__":
    main()
