"""Host lifecycle notifications for boxes.

A ``LifecycleHost`` is the thing a box subscribes to at construction and
unsubscribes from at ``destroy()``. The host decides when the application is
starting, suspending, resuming or exiting and forwards that to every
listener. Boxes save on ``SUSPEND`` and ``EXIT``.

Listeners may be called from a thread other than the one using the box
(``atexit``, signal handlers), so boxes lock their own state.
"""

from __future__ import annotations

import atexit
import logging
import threading
from enum import Enum
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class LifecycleEvent(Enum):
    START = "start"
    SUSPEND = "suspend"
    RESUME = "resume"
    EXIT = "exit"


Listener = Callable[[LifecycleEvent], None]


class LifecycleHost:
    def __init__(self):
        self._listeners: List[Listener] = []
        self._lock = threading.Lock()
        self._atexit_installed = False

    def subscribe(self, listener: Listener) -> None:
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        with self._lock:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def emit(self, event: LifecycleEvent) -> None:
        """Deliver ``event`` to every listener.

        A failing listener is logged and does not stop delivery to the rest.
        """
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("Lifecycle listener failed on %s", event.value)

    def install_atexit(self) -> None:
        # Emit EXIT once when the interpreter shuts down.
        with self._lock:
            if self._atexit_installed:
                return
            self._atexit_installed = True
        atexit.register(self.emit, LifecycleEvent.EXIT)

    def set_sync(self, filename: str, sync: bool) -> Optional[bool]:
        """Toggle backup inclusion for ``filename``.

        Plain desktop hosts have no such control and return ``None``; hosts
        that do should override this.
        """
        return None


# module-level default host
_default_host = LifecycleHost()


def get_host() -> LifecycleHost:
    return _default_host
