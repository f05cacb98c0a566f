"""Hold the window's content orientation while a session runs."""

from __future__ import annotations

import logging

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QWidget

logger = logging.getLogger(__name__)


class OrientationLock:
    """Pins content orientation to whatever the screen reports at lock time.

    ``unlock()`` hands control back to the platform by reporting
    ``PrimaryOrientation``.  Both calls are idempotent and never raise.
    """

    def __init__(self, window: QWidget | None = None) -> None:
        self._window = window
        self._locked: Qt.ScreenOrientation | None = None

    @property
    def locked_orientation(self) -> Qt.ScreenOrientation | None:
        return self._locked

    def lock(self) -> None:
        if self._locked is not None:
            return
        handle = self._handle()
        if handle is None:
            return
        try:
            orientation = handle.screen().orientation()
            handle.reportContentOrientationChange(orientation)
        except (AttributeError, RuntimeError):
            logger.warning("Orientation lock failed", exc_info=True)
            return
        self._locked = orientation
        logger.info("Orientation locked to %s", orientation.name)

    def unlock(self) -> None:
        if self._locked is None:
            return
        self._locked = None
        handle = self._handle()
        if handle is None:
            return
        try:
            handle.reportContentOrientationChange(Qt.ScreenOrientation.PrimaryOrientation)
        except (AttributeError, RuntimeError):
            logger.warning("Orientation unlock failed", exc_info=True)
            return
        logger.info("Orientation unlocked")

    def _handle(self):
        if self._window is None:
            return None
        try:
            return self._window.windowHandle()
        except RuntimeError:  # underlying C++ widget already deleted
            return None
