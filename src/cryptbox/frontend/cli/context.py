"""Small helper to build a CryptBox app context for the TUI."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from cryptbox.core.box import Box
from cryptbox.core.config import password_from_env
from cryptbox.core.lifecycle import LifecycleHost, get_host


@dataclass
class AppContext:
    """Container for runtime objects the UI needs."""

    box: Box
    host: LifecycleHost
    password: Optional[str] = None
    first_run: bool = False


def build_context(
    name: str = "default",
    storage_root: Optional[str | Path] = None,
    algorithm: Optional[str] = None,
    host: Optional[LifecycleHost] = None,
) -> AppContext:
    """
    Create the Box the TUI works on and hook it to the lifecycle host.

    Key behaviour for the TUI:

    - If the environment variable ``CRYPTBOX_PASSWORD`` is set, it is handed
      to the app which then loads the box without prompting.
    - Otherwise the app opens an unlock modal on mount.

    The default host gets an ``atexit`` hook so the box is saved when the
    interpreter exits, even if the UI is killed without a clean quit.
    """
    host = host or get_host()
    host.install_atexit()

    box = Box(name, algorithm=algorithm, storage_root=storage_root, host=host)
    first_run = not box.exists()

    return AppContext(box=box, host=host, password=password_from_env(), first_run=first_run)
