"""Shared test helpers for StretchTimer."""

from stretchtimer.timer.engine import IntervalSession, Phase


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def __call__(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def count(self, value) -> int:
        return self.items.count(value)

    def clear(self):
        self.items.clear()


class RecordingAudio:
    """Audio cue player that remembers what it was asked to play.

    With ``deferred=True`` the ready callback from ``prepare`` is held
    until ``finish_loading()`` is called.
    """

    def __init__(self, *, deferred: bool = False):
        self.played: list = []
        self.deferred = deferred
        self._pending: list = []

    def play(self, kind):
        self.played.append(kind)

    def prepare(self, on_ready):
        if self.deferred:
            self._pending.append(on_ready)
        else:
            on_ready()

    def finish_loading(self):
        pending, self._pending = self._pending, []
        for callback in pending:
            callback()


class RecordingDevice:
    """Records wake-lock and orientation-lock calls in order."""

    def __init__(self):
        self.calls: list[str] = []

    def acquire(self):
        self.calls.append("acquire")

    def release(self):
        self.calls.append("release")

    def lock(self):
        self.calls.append("lock")

    def unlock(self):
        self.calls.append("unlock")


class ExplodingCollaborator:
    """Every capability raises."""

    def play(self, kind):
        raise RuntimeError("no audio device")

    def prepare(self, on_ready):
        raise RuntimeError("decode failed")

    def acquire(self):
        raise OSError("wake lock denied")

    def release(self):
        raise OSError("wake lock gone")

    def lock(self):
        raise RuntimeError("orientation unsupported")

    def unlock(self):
        raise RuntimeError("orientation unsupported")


def run_ticks(session: IntervalSession, limit: int = 10_000) -> list[Phase]:
    """Tick until the session stops running.

    Returns the phase observed at the start of every tick.
    """
    observed: list[Phase] = []
    while session.is_running:
        if len(observed) >= limit:
            raise AssertionError(f"session still running after {limit} ticks")
        observed.append(session.phase)
        session._on_tick()
    return observed
