"""Timer package."""

from .engine import (
    IntervalSession,
    IntervalConfig,
    SessionSnapshot,
    Phase,
    CueKind,
    WARMUP_SECONDS,
    COUNTDOWN_FROM,
    DEFAULT_WORK_SECONDS,
    DEFAULT_REST_SECONDS,
    DEFAULT_TOTAL_ROUNDS,
    WORK_RANGE,
    REST_RANGE,
    ROUNDS_RANGE,
)

__all__ = [
    "IntervalSession",
    "IntervalConfig",
    "SessionSnapshot",
    "Phase",
    "CueKind",
    "WARMUP_SECONDS",
    "COUNTDOWN_FROM",
    "DEFAULT_WORK_SECONDS",
    "DEFAULT_REST_SECONDS",
    "DEFAULT_TOTAL_ROUNDS",
    "WORK_RANGE",
    "REST_RANGE",
    "ROUNDS_RANGE",
]
