"""Clipboard utilities for the CLI frontend.

Uses pyperclip for cross-platform clipboard access.
"""

from __future__ import annotations

import json
from typing import Any

import pyperclip


def format_value(value: Any) -> str:
    """Render a box value as text: strings as-is, everything else as JSON."""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, sort_keys=True)


def copy_to_clipboard(value: Any) -> str:
    """Copy a box value to the system clipboard and return the copied text.

    Raises:
        pyperclip.PyperclipException: If clipboard access fails.
    """
    text = format_value(value)
    pyperclip.copy(text)
    return text
