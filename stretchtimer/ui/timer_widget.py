"""Main timer display widget.

Layout (top → bottom):
    - Work / Rest / Rounds inputs (locked while a session runs)
    - Phase label, coloured per phase
    - MM:SS clock
    - Subtitle: total duration when idle, "Round r of n" when running
    - Start / Reset buttons
"""

from __future__ import annotations

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QFormLayout,
    QLabel, QPushButton, QSpinBox, QFrame,
)

from ..settings import WORK_RANGE, REST_RANGE, ROUNDS_RANGE, clamp_interval
from ..timer.engine import IntervalConfig, IntervalSession, Phase


PHASE_LABELS: dict[Phase, str] = {
    Phase.IDLE:     "READY",
    Phase.WARMUP:   "WARM UP",
    Phase.WORK:     "WORK",
    Phase.REST:     "REST",
    Phase.FINISHED: "FINISHED",
}

PHASE_COLORS: dict[Phase, str] = {
    Phase.IDLE:     "#a1a1aa",
    Phase.WARMUP:   "#facc15",
    Phase.WORK:     "#4ade80",
    Phase.REST:     "#f87171",
    Phase.FINISHED: "#60a5fa",
}


def format_clock(seconds: int) -> str:
    m, s = divmod(max(0, seconds), 60)
    return f"{m:02d}:{s:02d}"


class TimerWidget(QWidget):
    """Observer of an :class:`IntervalSession`; never touches its state
    except through ``start()``, ``reset()`` and ``configure()``."""

    config_changed = pyqtSignal(object)  # IntervalConfig

    def __init__(self, session: IntervalSession, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._session = session
        self._build_ui()
        self._populate(session.config)
        self._connect_signals()
        self._refresh()

    # ── build ─────────────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(24, 20, 24, 20)
        root.setSpacing(16)

        # ── inputs ───────────────────────────────────────────────────
        form_card = QFrame(self)
        form_card.setObjectName("card")
        form = QFormLayout(form_card)
        form.setHorizontalSpacing(20)
        form.setVerticalSpacing(10)

        self._work_spin = self._make_spin(WORK_RANGE, " sec")
        self._rest_spin = self._make_spin(REST_RANGE, " sec")
        self._rounds_spin = self._make_spin(ROUNDS_RANGE, "")
        form.addRow("Work:", self._work_spin)
        form.addRow("Rest:", self._rest_spin)
        form.addRow("Rounds:", self._rounds_spin)
        root.addWidget(form_card)

        # ── display ──────────────────────────────────────────────────
        display = QFrame(self)
        display.setObjectName("card")
        display_layout = QVBoxLayout(display)
        display_layout.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._phase_label = QLabel(display)
        self._phase_label.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._clock_label = QLabel(display)
        self._clock_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._clock_label.setStyleSheet(
            "font-size: 64px; font-weight: bold; font-family: monospace;"
        )

        self._subtitle_label = QLabel(display)
        self._subtitle_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._subtitle_label.setStyleSheet("color: #a1a1aa;")

        display_layout.addWidget(self._phase_label)
        display_layout.addWidget(self._clock_label)
        display_layout.addWidget(self._subtitle_label)
        root.addWidget(display)

        # ── controls ─────────────────────────────────────────────────
        btn_row = QHBoxLayout()
        btn_row.setSpacing(12)
        self._start_btn = QPushButton("Start", self)
        self._start_btn.setObjectName("primaryButton")
        self._reset_btn = QPushButton("Reset", self)
        self._reset_btn.setObjectName("secondaryButton")
        btn_row.addWidget(self._start_btn)
        btn_row.addWidget(self._reset_btn)
        root.addLayout(btn_row)

    def _make_spin(self, bounds: tuple[int, int], suffix: str) -> QSpinBox:
        spin = QSpinBox(self)
        spin.setRange(*bounds)
        spin.setSuffix(suffix)
        return spin

    def _populate(self, config: IntervalConfig) -> None:
        self._work_spin.setValue(config.work_seconds)
        self._rest_spin.setValue(config.rest_seconds)
        self._rounds_spin.setValue(config.total_rounds)

    # ── signals ───────────────────────────────────────────────────────────

    def _connect_signals(self) -> None:
        self._start_btn.clicked.connect(self._on_start)
        self._reset_btn.clicked.connect(self._session.reset)
        for spin in (self._work_spin, self._rest_spin, self._rounds_spin):
            spin.valueChanged.connect(self._on_inputs_changed)

        self._session.tick.connect(self._refresh)
        self._session.phase_entered.connect(self._refresh)
        self._session.running_changed.connect(self._refresh)

    # ── slots ─────────────────────────────────────────────────────────────

    def _on_start(self) -> None:
        self._session.start()
        self._refresh()

    def _on_inputs_changed(self) -> None:
        config = clamp_interval(
            self._work_spin.value(),
            self._rest_spin.value(),
            self._rounds_spin.value(),
        )
        if self._session.configure(config):
            self.config_changed.emit(config)
            self._refresh()

    def _refresh(self, *_args) -> None:
        snap = self._session.snapshot()
        busy = self._session.confirm_before_close

        self._phase_label.setText(PHASE_LABELS[snap.phase])
        self._phase_label.setStyleSheet(
            f"font-size: 14px; font-weight: 600; color: {PHASE_COLORS[snap.phase]};"
        )
        self._clock_label.setText(format_clock(snap.remaining))
        if snap.running:
            self._subtitle_label.setText(f"Round {snap.round} of {snap.total_rounds}")
        else:
            total = format_clock(self._session.config.total_seconds)
            self._subtitle_label.setText(f"Total duration: {total}")

        for spin in (self._work_spin, self._rest_spin, self._rounds_spin):
            spin.setEnabled(not busy)
        self._start_btn.setEnabled(not busy)
