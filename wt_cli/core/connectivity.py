"""Online/offline tracking for the workout API."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

Probe = Callable[[], bool]


class ConnectivityMonitor:
    """Tracks API reachability and announces offline-to-online transitions.

    Until the first probe has run, ``is_online`` reports True so callers see a
    consistent state before anything is known.
    """

    def __init__(self, probe: Probe, force_offline: bool = False) -> None:
        self._probe = probe
        self.force_offline = force_offline
        self._online = True
        self._checked = False
        self._callbacks: List[Callable[[], None]] = []

    @property
    def is_client(self) -> bool:
        return self._checked

    @property
    def is_online(self) -> bool:
        if self.force_offline:
            return False
        return self._online if self._checked else True

    def on_online(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register a reconnect callback; returns a function that unregisters it."""
        self._callbacks.append(callback)

        def unregister() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unregister

    def set_online(self, online: bool) -> None:
        previous: Optional[bool] = self._online if self._checked else None
        self._online = online
        self._checked = True

        if online and previous is False:
            logger.info("Connection restored")
            for callback in list(self._callbacks):
                callback()
        elif not online and previous is not False:
            logger.info("Connection lost")

    def check(self) -> bool:
        """Probe the server, update state and return the new value."""
        if self.force_offline:
            self._checked = True
            self._online = False
            return False
        self.set_online(bool(self._probe()))
        return self._online
