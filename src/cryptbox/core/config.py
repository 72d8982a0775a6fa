"""
Configuration defaults for CryptBox.

Values can be overridden through the environment:

- ``CRYPTBOX_HOME``: directory holding the ``<name>.crypt`` files
  (default ``~/.cryptbox``)
- ``CRYPTBOX_ALGORITHM``: cipher used by boxes created without an explicit one
- ``CRYPTBOX_PASSWORD``: key used by the TUI instead of prompting
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional


EXTENSION = "crypt"
HEADER_KEY = "_header"
FORMAT_VERSION = 1

DEFAULT_ALGORITHM = "aes-256-gcm"
# the ECB mode older boxes were written with
LEGACY_ALGORITHM = "aes-256-ecb"

ENV_HOME = "CRYPTBOX_HOME"
ENV_ALGORITHM = "CRYPTBOX_ALGORITHM"
ENV_PASSWORD = "CRYPTBOX_PASSWORD"


def resolve_storage_root(root: Optional[str | Path] = None) -> Path:
    """Return the directory boxes are stored in.

    An explicit ``root`` wins over ``CRYPTBOX_HOME``, which wins over
    ``~/.cryptbox``.
    """
    if root:
        return Path(root).expanduser()
    env_root = os.getenv(ENV_HOME)
    if env_root:
        return Path(env_root).expanduser()
    return Path.home() / ".cryptbox"


def resolve_algorithm(algorithm: Optional[str] = None) -> str:
    if algorithm:
        return algorithm.strip().lower()
    return (os.getenv(ENV_ALGORITHM) or DEFAULT_ALGORITHM).strip().lower()


def password_from_env() -> Optional[str]:
    # Empty values count as unset so the TUI still prompts.
    return os.getenv(ENV_PASSWORD) or None
