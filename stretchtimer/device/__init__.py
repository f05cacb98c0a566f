"""Device-level helpers: keep the display awake and hold its orientation."""

from .wake_lock import WakeLock, default_inhibit_command
from .orientation import OrientationLock

__all__ = ["WakeLock", "default_inhibit_command", "OrientationLock"]
