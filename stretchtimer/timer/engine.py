"""Interval-training state machine for StretchTimer.

Phases
------
IDLE       Not running, waiting for the user to start.
WARMUP     Fixed pre-roll before the first work interval.
WORK       Work interval counting down.
REST       Rest interval counting down.
FINISHED   Every round completed; terminal until ``start()``.

Transitions
-----------
IDLE | FINISHED → WARMUP                      (start)
WARMUP → WORK                                (clock reaches 0)
WORK → REST                                  (clock reaches 0, rounds left)
WORK → FINISHED                              (clock reaches 0, final round)
REST → WORK                                  (clock reaches 0)
Any → IDLE                                   (stop / reset)

Timing
------
The tick whose decrement reaches 0 performs the transition and primes
the next phase's full duration, so an N-second phase spans exactly N
ticks.  A phase entered with 0 seconds transitions on the next tick.

A warmup or rest tick that starts with 3, 2 or 1 seconds left plays
the countdown pip before decrementing, so the pip for 1 shares its
tick with the work-start cue.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

logger = logging.getLogger(__name__)


# ── enums ─────────────────────────────────────────────────────────────────


class Phase(Enum):
    IDLE = "idle"
    WARMUP = "warmup"
    WORK = "work"
    REST = "rest"
    FINISHED = "finished"


class CueKind(Enum):
    COUNTDOWN = "countdown"
    WORK_START = "work_start"
    ROUND_END = "round_end"
    SESSION_COMPLETE = "session_complete"


# ── constants ─────────────────────────────────────────────────────────────

WARMUP_SECONDS = 10
COUNTDOWN_FROM = 3  # audible cue on the last 3 seconds of warmup/rest
TICK_INTERVAL_MS = 1000

DEFAULT_WORK_SECONDS = 30
DEFAULT_REST_SECONDS = 15
DEFAULT_TOTAL_ROUNDS = 12

WORK_RANGE = (1, 300)      # seconds
REST_RANGE = (1, 180)      # seconds
ROUNDS_RANGE = (1, 20)

_COUNTDOWN_PHASES = (Phase.WARMUP, Phase.REST)


def _clamp(value: int, bounds: tuple[int, int]) -> int:
    low, high = bounds
    return max(low, min(value, high))


# ── value types ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class IntervalConfig:
    """Durations for one session.  Immutable while a run is in progress."""

    work_seconds: int = DEFAULT_WORK_SECONDS
    rest_seconds: int = DEFAULT_REST_SECONDS
    total_rounds: int = DEFAULT_TOTAL_ROUNDS
    warmup_seconds: int = WARMUP_SECONDS

    def __post_init__(self) -> None:
        for name in ("work_seconds", "rest_seconds", "warmup_seconds"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")
        if self.total_rounds < 1:
            raise ValueError("total_rounds must be >= 1")

    @classmethod
    def clamped(
        cls, work_seconds: int, rest_seconds: int, total_rounds: int,
    ) -> IntervalConfig:
        """Build a config with user input forced into the accepted ranges."""
        return cls(
            work_seconds=_clamp(work_seconds, WORK_RANGE),
            rest_seconds=_clamp(rest_seconds, REST_RANGE),
            total_rounds=_clamp(total_rounds, ROUNDS_RANGE),
        )

    @property
    def total_seconds(self) -> int:
        """Wall-clock length of a full run, warmup included."""
        return (
            self.warmup_seconds
            + self.work_seconds * self.total_rounds
            + self.rest_seconds * (self.total_rounds - 1)
        )


@dataclass(frozen=True)
class SessionSnapshot:
    phase: Phase
    remaining: int
    round: int
    total_rounds: int
    running: bool


# ── session ───────────────────────────────────────────────────────────────


class IntervalSession(QObject):
    """Warmup followed by alternating work/rest rounds.

    Signals
    -------
    phase_entered(phase: Phase)
        Emitted whenever the phase changes, including WARMUP on start
        and IDLE on stop.
    cue(kind: CueKind)
        Emitted alongside every audible cue handed to the audio player.
    tick(remaining_seconds: int)
        Emitted after every scheduler tick and on start/stop.
    running_changed(running: bool)

    Collaborators
    -------------
    ``audio`` needs ``play(kind)`` and optionally ``prepare(on_ready)``.
    ``wake_lock`` needs ``acquire()`` / ``release()``.
    ``orientation_lock`` needs ``lock()`` / ``unlock()``.
    Any of them may be ``None``.  Exceptions they raise are logged and
    never reach the state machine.
    """

    phase_entered = pyqtSignal(object)
    cue = pyqtSignal(object)
    tick = pyqtSignal(int)
    running_changed = pyqtSignal(bool)

    def __init__(
        self,
        config: IntervalConfig | None = None,
        parent: QObject | None = None,
        *,
        audio=None,
        wake_lock=None,
        orientation_lock=None,
        idle_round: int = 1,
    ) -> None:
        super().__init__(parent)

        # ── configuration ─────────────────────────────────────────────
        self._config: IntervalConfig = config or IntervalConfig()
        self._idle_round: int = idle_round

        # ── collaborators ─────────────────────────────────────────────
        self._audio = audio
        self._wake_lock = wake_lock
        self._orientation_lock = orientation_lock

        # ── runtime state ─────────────────────────────────────────────
        self._phase: Phase = Phase.IDLE
        self._remaining: int = 0
        self._round: int = idle_round
        self._running: bool = False
        self._in_tick: bool = False

        # ── pending start (audio preparation may finish later) ────────
        self._start_pending: bool = False
        self._start_generation: int = 0

        # ── Qt timer ──────────────────────────────────────────────────
        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(TICK_INTERVAL_MS)
        self._qt_timer.timeout.connect(self._on_tick)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def config(self) -> IntervalConfig:
        return self._config

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def remaining(self) -> int:
        """Seconds left in the current phase."""
        return self._remaining

    @property
    def current_round(self) -> int:
        """1-based work round; the idle sentinel while stopped."""
        return self._round

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_starting(self) -> bool:
        """True between ``start()`` and the end of audio preparation."""
        return self._start_pending

    @property
    def confirm_before_close(self) -> bool:
        """Whether the host should ask before tearing the session down."""
        return self._running or self._start_pending

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            phase=self._phase,
            remaining=self._remaining,
            round=self._round,
            total_rounds=self._config.total_rounds,
            running=self._running,
        )

    def configure(self, config: IntervalConfig) -> bool:
        """Swap in a new configuration.  Refused while running."""
        if self._running or self._start_pending:
            logger.debug("configure() ignored while a session is running")
            return False
        self._config = config
        return True

    def set_device_locks(self, wake_lock=None, orientation_lock=None) -> bool:
        """Swap the wake and orientation locks.  Refused while running."""
        if self._running or self._start_pending:
            logger.debug("set_device_locks() ignored while a session is running")
            return False
        self._wake_lock = wake_lock
        self._orientation_lock = orientation_lock
        return True

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> None:
        """Run the pre-start hooks, then arm the scheduler in WARMUP.

        No-op while running or while a previous start is still
        preparing.
        """
        if self._running or self._start_pending:
            return

        self._start_pending = True
        self._start_generation += 1
        generation = self._start_generation

        self._call_safely("wake_lock.acquire", self._wake_lock, "acquire")
        self._call_safely("orientation_lock.lock", self._orientation_lock, "lock")

        prepare = getattr(self._audio, "prepare", None)
        if prepare is None:
            self._arm(generation)
            return
        try:
            prepare(lambda: self._arm(generation))
        except Exception:
            logger.warning("Audio preparation failed; starting without it", exc_info=True)
            self._arm(generation)

    def stop(self) -> None:
        """Force the session back to IDLE.  Safe to call in any state."""
        self._start_generation += 1  # a pending start must never arm
        self._start_pending = False
        self._qt_timer.stop()

        was_running = self._running
        previous_phase = self._phase

        self._running = False
        self._phase = Phase.IDLE
        self._remaining = 0
        self._round = self._idle_round

        self._release_device()

        if previous_phase != Phase.IDLE:
            logger.info("Session stopped during %s", previous_phase.value)
            self.tick.emit(0)
            self.phase_entered.emit(Phase.IDLE)
        if was_running:
            self.running_changed.emit(False)

    def reset(self) -> None:
        self.stop()

    def shutdown(self) -> None:
        """Teardown hook for the owning window or application."""
        self.stop()

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL — timer mechanics
    # ══════════════════════════════════════════════════════════════════

    def _arm(self, generation: int) -> None:
        if generation != self._start_generation or not self._start_pending:
            logger.debug("Discarding stale start (generation %d)", generation)
            return
        self._start_pending = False

        self._phase = Phase.WARMUP
        self._remaining = self._config.warmup_seconds
        self._round = 1
        self._running = True

        logger.info(
            "Session started: work=%ds rest=%ds rounds=%d",
            self._config.work_seconds,
            self._config.rest_seconds,
            self._config.total_rounds,
        )
        self._notify(
            generation,
            (self.running_changed, True),
            (self.tick, self._remaining),
            (self.phase_entered, Phase.WARMUP),
        )
        # A listener may have stopped us already.
        if self._running and generation == self._start_generation:
            self._qt_timer.start()

    def _on_tick(self) -> None:
        if not self._running or self._in_tick:
            return
        self._in_tick = True
        try:
            self._advance_clock()
        finally:
            self._in_tick = False

    def _advance_clock(self) -> None:
        generation = self._start_generation
        if self._phase in _COUNTDOWN_PHASES and 0 < self._remaining <= COUNTDOWN_FROM:
            self._emit_cue(CueKind.COUNTDOWN)
            if generation != self._start_generation:
                return
        if self._remaining > 0:
            self._remaining -= 1
            if self._remaining > 0:
                self.tick.emit(self._remaining)
                return
        self._cross_boundary()

    def _cross_boundary(self) -> None:
        if self._phase in (Phase.WARMUP, Phase.REST):
            self._enter(Phase.WORK, self._config.work_seconds, CueKind.WORK_START)
        elif self._phase == Phase.WORK:
            if self._round >= self._config.total_rounds:
                self._finish()
            else:
                self._round += 1
                self._enter(Phase.REST, self._config.rest_seconds, CueKind.ROUND_END)

    def _enter(self, phase: Phase, seconds: int, cue: CueKind) -> None:
        generation = self._start_generation
        self._phase = phase
        self._remaining = seconds
        self._emit_cue(cue)
        self._notify(
            generation,
            (self.tick, seconds),
            (self.phase_entered, phase),
        )

    def _finish(self) -> None:
        generation = self._start_generation
        self._qt_timer.stop()
        self._phase = Phase.FINISHED
        self._remaining = 0
        self._running = False

        self._release_device()
        logger.info("Session complete after %d rounds", self._round)

        self._emit_cue(CueKind.SESSION_COMPLETE)
        self._notify(
            generation,
            (self.tick, 0),
            (self.running_changed, False),
            (self.phase_entered, Phase.FINISHED),
        )

    def _notify(self, generation: int, *emissions) -> None:
        """Emit ``(signal, value)`` pairs in order, dropping the rest once
        a listener has stopped or restarted the session."""
        for signal, value in emissions:
            if generation != self._start_generation:
                return
            signal.emit(value)

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL — collaborators
    # ══════════════════════════════════════════════════════════════════

    def _emit_cue(self, kind: CueKind) -> None:
        self._call_safely("audio.play", self._audio, "play", kind)
        self.cue.emit(kind)

    def _release_device(self) -> None:
        self._call_safely("wake_lock.release", self._wake_lock, "release")
        self._call_safely("orientation_lock.unlock", self._orientation_lock, "unlock")

    @staticmethod
    def _call_safely(label: str, target, method: str, *args) -> None:
        if target is None:
            return
        fn: Callable | None = getattr(target, method, None)
        if fn is None:
            return
        try:
            fn(*args)
        except Exception:
            logger.warning("%s failed", label, exc_info=True)
