"""Cue synthesis and playback using numpy + QSoundEffect.

Every cue is generated programmatically as a WAV file (sine partials
shaped by an ADSR envelope) and cached to disk, so later launches only
load the files.

Cue names
---------
- ``countdown``        — short pip on each of the last 3 seconds
- ``work_start``       — bright rising two-tone "go"
- ``round_end``        — falling two-tone at the end of a work interval
- ``session_complete`` — long resolving arpeggio after the final round
"""

from __future__ import annotations

import io
import logging
import wave
from pathlib import Path
from typing import Callable

import numpy as np

from PyQt6.QtCore import QObject, QTimer, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from ..timer.engine import CueKind

logger = logging.getLogger(__name__)


# ── paths ────────────────────────────────────────────────────────────────

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "StretchTimer"
SOUNDS_DIR = APP_SUPPORT_DIR / "sounds"

SOUND_NAMES = tuple(kind.value for kind in CueKind)

# Relative loudness per cue; the countdown pip sits under the others.
CUE_GAIN: dict[str, float] = {
    CueKind.COUNTDOWN.value: 0.6,
    CueKind.WORK_START.value: 1.0,
    CueKind.ROUND_END.value: 1.0,
    CueKind.SESSION_COMPLETE.value: 1.0,
}

SAMPLE_RATE = 44100
PREPARE_TIMEOUT_MS = 2000


# ═══════════════════════════════════════════════════════════════════════════
#  WAV SYNTHESIS HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _envelope(
    length: int,
    attack: int = 200,
    decay: int = 400,
    sustain_level: float = 0.7,
    release: int = 800,
) -> np.ndarray:
    """ADSR envelope (all durations in samples)."""
    env = np.full(length, sustain_level, dtype=np.float64)
    a = min(attack, length)
    if a > 0:
        env[:a] = np.linspace(0.0, 1.0, a)
    d_end = min(a + decay, length)
    if d_end > a:
        env[a:d_end] = np.linspace(1.0, sustain_level, d_end - a)
    r_start = max(length - release, d_end)
    if r_start < length:
        env[r_start:] = np.linspace(env[r_start - 1] if r_start else 1.0, 0.0, length - r_start)
    return env


def _tone(freq: float, duration_s: float, *, harmonics: tuple[float, ...] = ()) -> np.ndarray:
    """Sine at *freq* Hz plus optional quieter integer harmonics."""
    t = np.arange(int(SAMPLE_RATE * duration_s)) / SAMPLE_RATE
    wave_ = np.sin(2 * np.pi * freq * t)
    for n, level in enumerate(harmonics, start=2):
        wave_ += level * np.sin(2 * np.pi * freq * n * t)
    return wave_


def _silence(duration_s: float) -> np.ndarray:
    return np.zeros(int(SAMPLE_RATE * duration_s))


def _to_wav_bytes(samples: np.ndarray) -> bytes:
    """Encode float samples in -1..1 as mono 16-bit PCM WAV."""
    pcm = (np.clip(samples, -1.0, 1.0) * 32767).astype(np.int16)
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(pcm.tobytes())
    return buf.getvalue()


def _note(freq: float, duration_s: float, level: float, **env) -> np.ndarray:
    tone = _tone(freq, duration_s, harmonics=(0.15,)) * level
    return tone * _envelope(len(tone), **env)


# ═══════════════════════════════════════════════════════════════════════════
#  CUE GENERATORS
# ═══════════════════════════════════════════════════════════════════════════


def _generate_countdown() -> bytes:
    """Single 880 Hz pip, short enough to sit inside one second."""
    pip = _note(880.0, 0.12, 0.6, attack=60, decay=300, sustain_level=0.5, release=1500)
    return _to_wav_bytes(np.concatenate([pip, _silence(0.05)]))


def _generate_work_start() -> bytes:
    """A5 then E6, the second note held."""
    first = _note(880.0, 0.10, 0.6, attack=60, decay=200, sustain_level=0.5, release=400)
    second = _note(1318.5, 0.45, 0.65, attack=80, decay=600, sustain_level=0.6, release=6000)
    return _to_wav_bytes(np.concatenate([first, _silence(0.03), second]))


def _generate_round_end() -> bytes:
    """E5 falling to A4, softer attack than the start cue."""
    first = _note(659.25, 0.18, 0.55, attack=300, decay=600, sustain_level=0.5, release=1200)
    second = _note(440.0, 0.40, 0.5, attack=300, decay=1200, sustain_level=0.4, release=8000)
    return _to_wav_bytes(np.concatenate([first, _silence(0.04), second]))


def _generate_session_complete() -> bytes:
    """C5 → E5 → G5 → C6 with the top note ringing out."""
    notes = (523.25, 659.25, 783.99, 1046.50)
    parts: list[np.ndarray] = []
    for freq in notes[:-1]:
        parts.append(_note(freq, 0.11, 0.5, attack=60, decay=150, sustain_level=0.35, release=250))
        parts.append(_silence(0.02))
    parts.append(
        _note(notes[-1], 0.8, 0.55, attack=80, decay=2000, sustain_level=0.45, release=int(SAMPLE_RATE * 0.5))
    )
    return _to_wav_bytes(np.concatenate(parts))


_GENERATORS: dict[str, Callable[[], bytes]] = {
    CueKind.COUNTDOWN.value: _generate_countdown,
    CueKind.WORK_START.value: _generate_work_start,
    CueKind.ROUND_END.value: _generate_round_end,
    CueKind.SESSION_COMPLETE.value: _generate_session_complete,
}


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND MANAGER
# ═══════════════════════════════════════════════════════════════════════════


class SoundManager(QObject):
    """Audio cue player handed to :class:`IntervalSession`.

    Usage::

        mgr = SoundManager(parent=self)
        mgr.set_volume(70)
        mgr.play(CueKind.WORK_START)
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
    ) -> None:
        super().__init__(parent)
        self._enabled = True
        self._volume = 0.7  # 0.0–1.0
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._effects: dict[str, QSoundEffect] = {}
        self._waiting: list[Callable[[], None]] = []
        self._failed: set[str] = set()

        self._prepare_timeout = QTimer(self)
        self._prepare_timeout.setSingleShot(True)
        self._prepare_timeout.setInterval(PREPARE_TIMEOUT_MS)
        self._prepare_timeout.timeout.connect(self._on_prepare_timeout)

        self._ensure_wav_files()
        self._load_effects()

    # ── public API ────────────────────────────────────────────────────

    def set_volume(self, level: int) -> None:
        """Set master volume (0-100).  Updates all loaded effects."""
        self._volume = max(0, min(level, 100)) / 100.0
        for name, effect in self._effects.items():
            effect.setVolume(self._volume * CUE_GAIN.get(name, 1.0))

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def play(self, cue: CueKind | str) -> None:
        """Fire-and-forget playback.  Never raises."""
        if not self._enabled:
            return
        name = cue.value if isinstance(cue, CueKind) else cue
        effect = self._effects.get(name)
        if effect is None:
            logger.debug("No sound loaded for %r", name)
            return
        try:
            effect.play()
        except Exception:
            logger.warning("Playback of %r failed", name, exc_info=True)

    def prepare(self, on_ready: Callable[[], None]) -> None:
        """Call *on_ready* once no cue is still loading.

        Effects that failed to load do not block; the session simply
        runs without them.
        """
        if not self.is_loading:
            on_ready()
            return
        self._waiting.append(on_ready)
        self._prepare_timeout.start()

    @property
    def is_loading(self) -> bool:
        return any(
            e.status() == QSoundEffect.Status.Loading for e in self._effects.values()
        )

    @property
    def volume(self) -> int:
        """Current master volume as 0-100 integer."""
        return round(self._volume * 100)

    @property
    def enabled(self) -> bool:
        return self._enabled

    # ── internal ──────────────────────────────────────────────────────

    def _ensure_wav_files(self) -> None:
        """Generate any missing WAV files into the cache directory."""
        try:
            self._sounds_dir.mkdir(parents=True, exist_ok=True)
            for name, gen_fn in _GENERATORS.items():
                path = self._sounds_dir / f"{name}.wav"
                if not path.exists():
                    path.write_bytes(gen_fn())
        except OSError:
            logger.warning("Could not write cue files to %s", self._sounds_dir, exc_info=True)

    def _load_effects(self) -> None:
        """Create QSoundEffect instances from cached WAV files."""
        for name in SOUND_NAMES:
            path = self._sounds_dir / f"{name}.wav"
            if not path.exists():
                logger.warning("Missing cue file %s", path)
                continue
            effect = QSoundEffect(self)
            effect.setSource(QUrl.fromLocalFile(str(path)))
            effect.setVolume(self._volume * CUE_GAIN.get(name, 1.0))
            effect.statusChanged.connect(self._on_status_changed)
            self._effects[name] = effect

    def _on_status_changed(self) -> None:
        for name, effect in self._effects.items():
            if effect.status() == QSoundEffect.Status.Error and name not in self._failed:
                self._failed.add(name)
                logger.warning("Cue %r failed to load", name)
        if not self.is_loading:
            self._release_waiting()

    def _on_prepare_timeout(self) -> None:
        if self._waiting:
            logger.warning("Cues still loading after %d ms; starting anyway", PREPARE_TIMEOUT_MS)
        self._release_waiting()

    def _release_waiting(self) -> None:
        self._prepare_timeout.stop()
        waiting, self._waiting = self._waiting, []
        for callback in waiting:
            callback()
