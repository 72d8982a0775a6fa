"""
Header record stored inside every box under the reserved ``_header`` key.

All timestamps are integer epoch seconds. ``created`` is written once; the
other stamps only ever move forward, even if the wall clock steps back.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from .config import FORMAT_VERSION


def _now() -> int:
    return int(time.time())


@dataclass
class Header:
    version: int = FORMAT_VERSION
    created: Optional[int] = None
    saved: Optional[int] = None
    loaded: Optional[int] = None
    accessed: Optional[int] = None
    modified: Optional[int] = None

    @classmethod
    def fresh(cls) -> "Header":
        """A header for a box that has never been written."""
        return cls(created=_now())

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Header":
        """Rebuild a header from its serialized form.

        Unknown keys are ignored and missing ones default to ``None`` so
        headers written by older versions still load.
        """
        if not isinstance(data, dict):
            return cls()

        def stamp(key: str) -> Optional[int]:
            value = data.get(key)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                return None
            return int(value)

        version = data.get("version")
        return cls(
            version=version if isinstance(version, int) and not isinstance(version, bool) else FORMAT_VERSION,
            created=stamp("created"),
            saved=stamp("saved"),
            loaded=stamp("loaded"),
            accessed=stamp("accessed"),
            modified=stamp("modified"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def _advance(self, field_name: str) -> None:
        previous = getattr(self, field_name)
        now = _now()
        setattr(self, field_name, now if previous is None else max(previous, now))

    def on_create(self) -> None:
        if self.created is None:
            self.created = _now()

    def on_save(self) -> None:
        self._advance("saved")

    def on_load(self) -> None:
        self._advance("loaded")

    def on_access(self) -> None:
        self._advance("accessed")

    def on_modify(self) -> None:
        self._advance("modified")
