"""
Session Resources Module

Tracks the media capture handles (camera, microphone, recognizers) held on behalf
of a running interview session and releases them exactly once.

Author: @kcaparas1630
"""

from typing import Callable, Dict
from loguru import logger

ReleaseCallback = Callable[[], None]


class SessionResources:
    """Registry of release callbacks for one interview session."""

    def __init__(self):
        self._handles: Dict[str, ReleaseCallback] = {}
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    @property
    def names(self):
        return list(self._handles)

    def acquire(self, name: str, release: ReleaseCallback) -> bool:
        """
        Register a handle. Returns False once the session has released its resources,
        in which case the handle is released immediately.
        """
        if self._released:
            logger.warning(f"[SessionResources] '{name}' acquired after release; releasing it now")
            self._call(name, release)
            return False
        self._handles[name] = release
        return True

    def release_all(self) -> None:
        """Release every registered handle. Subsequent calls do nothing."""
        if self._released:
            return
        self._released = True
        handles, self._handles = self._handles, {}
        for name, release in handles.items():
            self._call(name, release)

    @staticmethod
    def _call(name: str, release: ReleaseCallback) -> None:
        try:
            release()
            logger.debug(f"[SessionResources] Released '{name}'")
        except Exception as e:
            logger.error(f"[SessionResources] Failed to release '{name}': {e}")
