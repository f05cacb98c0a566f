"""Preferences dialog for StretchTimer.

Sound and device options.  Every change is written to disk at once;
the caller re-applies the settings once the dialog closes.
"""

from __future__ import annotations

from typing import Callable

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QFormLayout,
    QLabel, QSlider, QCheckBox, QPushButton,
    QFrame, QWidget,
)

from ..settings import Settings, save_settings


class SettingsDialog(QDialog):
    """Modal dialog for the preferences kept in ``settings.json``."""

    def __init__(
        self,
        settings: Settings,
        parent: QWidget | None = None,
        *,
        sound_preview_callback: Callable[[], None] | None = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Preferences")
        self.setMinimumWidth(360)
        self.setModal(True)

        self._settings = settings
        self._sound_preview = sound_preview_callback

        self._build_ui()
        self._populate()
        self._connect_signals()

    # ══════════════════════════════════════════════════════════════════
    #  BUILD UI
    # ══════════════════════════════════════════════════════════════════

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(24, 20, 24, 20)
        root.setSpacing(16)

        # ── Sound section ────────────────────────────────────────────
        root.addWidget(self._section_label("Sound"))
        snd_form = QFormLayout()
        snd_form.setContentsMargins(0, 0, 0, 0)
        snd_form.setHorizontalSpacing(20)
        snd_form.setVerticalSpacing(10)

        self._sound_cb = QCheckBox("Audible cues")
        snd_form.addRow("", self._sound_cb)

        vol_row = QHBoxLayout()
        vol_row.setSpacing(10)
        self._vol_slider = QSlider(Qt.Orientation.Horizontal)
        self._vol_slider.setRange(0, 100)
        self._vol_slider.setTickInterval(10)
        self._vol_label = QLabel()
        self._vol_label.setMinimumWidth(36)
        vol_row.addWidget(self._vol_slider)
        vol_row.addWidget(self._vol_label)

        vol_wrapper = QWidget()
        vol_wrapper.setLayout(vol_row)
        snd_form.addRow("Volume:", vol_wrapper)
        root.addLayout(snd_form)

        root.addWidget(self._separator())

        # ── Device section ───────────────────────────────────────────
        root.addWidget(self._section_label("While a session runs"))
        dev_form = QFormLayout()
        dev_form.setContentsMargins(0, 0, 0, 0)

        self._awake_cb = QCheckBox("Keep the display awake")
        dev_form.addRow("", self._awake_cb)
        self._orientation_cb = QCheckBox("Lock screen orientation")
        dev_form.addRow("", self._orientation_cb)
        root.addLayout(dev_form)

        self._note_label = QLabel("Device options apply from the next session.")
        self._note_label.setStyleSheet("color: #a1a1aa; font-size: 11px;")
        root.addWidget(self._note_label)

        # ── close button ─────────────────────────────────────────────
        root.addStretch()
        btn_row = QHBoxLayout()
        btn_row.addStretch()
        close_btn = QPushButton("Close")
        close_btn.setObjectName("secondaryButton")
        close_btn.clicked.connect(self.accept)
        btn_row.addWidget(close_btn)
        root.addLayout(btn_row)

    @staticmethod
    def _section_label(text: str) -> QLabel:
        lbl = QLabel(text)
        lbl.setStyleSheet("font-size: 15px; font-weight: 700; margin-top: 4px;")
        return lbl

    @staticmethod
    def _separator() -> QFrame:
        line = QFrame()
        line.setFrameShape(QFrame.Shape.HLine)
        line.setFixedHeight(1)
        return line

    # ══════════════════════════════════════════════════════════════════
    #  POPULATE / SIGNALS
    # ══════════════════════════════════════════════════════════════════

    def _populate(self) -> None:
        s = self._settings
        self._sound_cb.setChecked(s.sound_enabled)
        self._vol_slider.setValue(s.sound_volume)
        self._vol_label.setText(f"{s.sound_volume}%")
        self._awake_cb.setChecked(s.keep_awake)
        self._orientation_cb.setChecked(s.lock_orientation)

    def _connect_signals(self) -> None:
        for cb in (self._sound_cb, self._awake_cb, self._orientation_cb):
            cb.toggled.connect(self._on_toggle_changed)
        self._vol_slider.valueChanged.connect(self._on_volume_changed)
        self._vol_slider.sliderReleased.connect(self._on_volume_released)

    # ══════════════════════════════════════════════════════════════════
    #  CHANGE HANDLERS — save immediately
    # ══════════════════════════════════════════════════════════════════

    def _on_toggle_changed(self) -> None:
        self._settings.sound_enabled = self._sound_cb.isChecked()
        self._settings.keep_awake = self._awake_cb.isChecked()
        self._settings.lock_orientation = self._orientation_cb.isChecked()
        self._save()

    def _on_volume_changed(self, value: int) -> None:
        self._vol_label.setText(f"{value}%")
        self._settings.sound_volume = value
        self._save()

    def _on_volume_released(self) -> None:
        """Play a pip at the new level when the slider is let go."""
        if self._sound_preview:
            self._sound_preview()

    def _save(self) -> None:
        save_settings(self._settings)

    @property
    def settings(self) -> Settings:
        return self._settings
