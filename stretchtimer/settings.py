"""Application settings.

Two stores are involved:

* App preferences (sound, device behaviour, window geometry) are a
  dataclass persisted as JSON at
  ``~/Library/Application Support/StretchTimer/settings.json``.
* The interval configuration (work, rest, rounds) lives in the
  key/value table of the database, one key per value, and is re-read
  on every launch.

Usage::

    settings = load_settings()
    settings.sound_volume = 50
    save_settings(settings)

    config = load_interval_config()
    save_interval_config(clamp_interval(45, 10, 8))
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError

from .database.store import get_value, set_value
from .timer.engine import (
    IntervalConfig,
    DEFAULT_WORK_SECONDS,
    DEFAULT_REST_SECONDS,
    DEFAULT_TOTAL_ROUNDS,
    WORK_RANGE,
    REST_RANGE,
    ROUNDS_RANGE,
)

logger = logging.getLogger(__name__)


APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "StretchTimer"
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"

# ── interval configuration keys ──────────────────────────────────────────

WORK_KEY = "stretchTimer_workTime"
REST_KEY = "stretchTimer_restTime"
ROUNDS_KEY = "stretchTimer_repeats"


@dataclass
class Settings:
    """All user-configurable preferences outside the interval itself."""

    # ── audio ─────────────────────────────────────────────────────────
    sound_enabled: bool = True
    sound_volume: int = 100                # 0-100

    # ── device ────────────────────────────────────────────────────────
    keep_awake: bool = True
    lock_orientation: bool = True

    # ── window ────────────────────────────────────────────────────────
    window_x: int | None = None
    window_y: int | None = None
    window_width: int = 420
    window_height: int = 560


def load_settings() -> Settings:
    """Load settings from disk, falling back to defaults."""
    try:
        if SETTINGS_PATH.exists():
            data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
            valid_keys = {f.name for f in fields(Settings)}
            filtered = {k: v for k, v in data.items() if k in valid_keys}
            return Settings(**filtered)
    except (OSError, ValueError, TypeError):
        logger.warning("Unreadable settings at %s; using defaults", SETTINGS_PATH, exc_info=True)
    return Settings()


def save_settings(settings: Settings) -> None:
    """Write settings to disk as JSON."""
    APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
    SETTINGS_PATH.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )


# ══════════════════════════════════════════════════════════════════════════
#  INTERVAL CONFIGURATION
# ══════════════════════════════════════════════════════════════════════════


def clamp_interval(work_seconds: int, rest_seconds: int, total_rounds: int) -> IntervalConfig:
    """Build an :class:`IntervalConfig` with every value forced into range."""
    return IntervalConfig.clamped(work_seconds, rest_seconds, total_rounds)


def _read_int(key: str, default: int) -> int:
    raw = get_value(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring corrupt value %r for %s", raw, key)
        return default


def load_interval_config() -> IntervalConfig:
    """Stored work/rest/rounds, defaulting each missing or corrupt value."""
    try:
        return clamp_interval(
            _read_int(WORK_KEY, DEFAULT_WORK_SECONDS),
            _read_int(REST_KEY, DEFAULT_REST_SECONDS),
            _read_int(ROUNDS_KEY, DEFAULT_TOTAL_ROUNDS),
        )
    except SQLAlchemyError:
        logger.warning("Preference store unreadable; using defaults", exc_info=True)
        return IntervalConfig()


def save_interval_config(config: IntervalConfig) -> None:
    set_value(WORK_KEY, config.work_seconds)
    set_value(REST_KEY, config.rest_seconds)
    set_value(ROUNDS_KEY, config.total_rounds)
