"""Convenience entry point to run the CryptBox TUI app.

Allows starting the application with `python main.py [box-name]` from the project root.
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the src/ directory is on sys.path so `import cryptbox` works
ROOT = Path(__file__).resolve().parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from cryptbox.frontend.cli.__main__ import main


if __name__ == "__main__":
    main()
