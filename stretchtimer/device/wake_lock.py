"""Keep the display awake while a session runs.

The lock is a child process that holds an OS sleep inhibitor for as
long as it lives:

    macOS   caffeinate -d -i
    Linux   systemd-inhibit --what=idle:sleep ... sleep infinity

Killing the process drops the inhibitor.  Platforms without a known
command get a lock whose calls do nothing.
"""

from __future__ import annotations

import logging
import shutil
import sys

from PyQt6.QtCore import QObject, QProcess

logger = logging.getLogger(__name__)

START_TIMEOUT_MS = 1000
STOP_TIMEOUT_MS = 1000


def default_inhibit_command() -> list[str] | None:
    """The inhibitor command for this platform, or None if unsupported."""
    if sys.platform == "darwin" and shutil.which("caffeinate"):
        return ["caffeinate", "-d", "-i"]
    if sys.platform.startswith("linux") and shutil.which("systemd-inhibit"):
        return [
            "systemd-inhibit",
            "--what=idle:sleep",
            "--who=StretchTimer",
            "--why=Interval session running",
            "sleep", "infinity",
        ]
    return None


class WakeLock(QObject):
    """Idempotent, failure-tolerant wake lock."""

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        command: list[str] | None = None,
    ) -> None:
        super().__init__(parent)
        self._command = command
        self._process: QProcess | None = None

    @property
    def supported(self) -> bool:
        return bool(self._command)

    @property
    def is_held(self) -> bool:
        return (
            self._process is not None
            and self._process.state() != QProcess.ProcessState.NotRunning
        )

    def acquire(self) -> None:
        if not self._command or self.is_held:
            return
        process = QProcess(self)
        process.start(self._command[0], self._command[1:])
        if not process.waitForStarted(START_TIMEOUT_MS):
            logger.warning(
                "Wake lock unavailable (%s): %s",
                self._command[0], process.errorString(),
            )
            process.deleteLater()
            return
        self._process = process
        logger.info("Wake lock acquired")

    def release(self) -> None:
        process, self._process = self._process, None
        if process is None:
            return
        if process.state() != QProcess.ProcessState.NotRunning:
            process.terminate()
            if not process.waitForFinished(STOP_TIMEOUT_MS):
                process.kill()
                process.waitForFinished(STOP_TIMEOUT_MS)
        process.deleteLater()
        logger.info("Wake lock released")
