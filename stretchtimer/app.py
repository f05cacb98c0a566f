"""Main application window for StretchTimer."""

from __future__ import annotations

import logging

from PyQt6.QtCore import QTimer
from PyQt6.QtGui import QAction, QCloseEvent, QKeySequence
from PyQt6.QtWidgets import QMainWindow, QMessageBox, QStatusBar
from sqlalchemy.exc import SQLAlchemyError

from .timer.engine import IntervalConfig, IntervalSession, Phase
from .ui.timer_widget import TimerWidget
from .settings import (
    Settings, load_settings, save_settings,
    load_interval_config, save_interval_config,
)
from .audio.sounds import SoundManager
from .device import OrientationLock, WakeLock, default_inhibit_command

logger = logging.getLogger(__name__)


STATUS_MESSAGES: dict[Phase, str] = {
    Phase.IDLE:     "Ready when you are",
    Phase.WARMUP:   "Warming up…",
    Phase.WORK:     "Work!",
    Phase.REST:     "Rest",
    Phase.FINISHED: "All rounds complete",
}


class StretchTimerApp(QMainWindow):
    """Main application window."""

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        config: IntervalConfig | None = None,
        sound_manager: SoundManager | None = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle("StretchTimer")
        self.setMinimumSize(360, 480)

        # ── settings ──────────────────────────────────────────────────
        self._settings: Settings = settings or load_settings()
        config = config or load_interval_config()

        self._geometry_save_timer = QTimer(self)
        self._geometry_save_timer.setSingleShot(True)
        self._geometry_save_timer.setInterval(500)
        self._geometry_save_timer.timeout.connect(self._save_geometry)

        # ── collaborators ─────────────────────────────────────────────
        self._sound_manager = sound_manager or SoundManager(parent=self)
        self._sound_manager.set_volume(self._settings.sound_volume)
        self._sound_manager.set_enabled(self._settings.sound_enabled)

        self._wake_lock = WakeLock(self, command=default_inhibit_command())
        self._orientation_lock = OrientationLock(self)

        # ── session ───────────────────────────────────────────────────
        self._session = IntervalSession(
            config,
            self,
            audio=self._sound_manager,
        )
        self._apply_device_settings()

        # ── widgets ───────────────────────────────────────────────────
        self._timer_widget = TimerWidget(self._session, self)
        self.setCentralWidget(self._timer_widget)
        self._status_bar = QStatusBar(self)
        self.setStatusBar(self._status_bar)

        self._timer_widget.config_changed.connect(self._on_config_changed)
        self._session.phase_entered.connect(self._on_phase_entered)
        self._session.running_changed.connect(self._on_running_changed)
        self._on_phase_entered(self._session.phase)

        self._build_menu()
        self._restore_geometry()

    @property
    def session(self) -> IntervalSession:
        return self._session

    # ══════════════════════════════════════════════════════════════════
    #  SESSION SIGNALS
    # ══════════════════════════════════════════════════════════════════

    def _on_phase_entered(self, phase: Phase) -> None:
        self._status_bar.showMessage(STATUS_MESSAGES.get(phase, ""))

    def _on_config_changed(self, config: IntervalConfig) -> None:
        try:
            save_interval_config(config)
        except SQLAlchemyError:
            logger.warning("Could not persist interval configuration", exc_info=True)

    def _on_running_changed(self, running: bool) -> None:
        # Device toggles made mid-session wait for the session to end.
        if not running:
            self._apply_device_settings()

    # ══════════════════════════════════════════════════════════════════
    #  SETTINGS
    # ══════════════════════════════════════════════════════════════════

    def _build_menu(self) -> None:
        prefs_action = QAction("Preferences…", self)
        prefs_action.setMenuRole(QAction.MenuRole.PreferencesRole)
        prefs_action.setShortcut(QKeySequence("Ctrl+,"))
        prefs_action.triggered.connect(self._open_settings)

        app_menu = self.menuBar().addMenu("StretchTimer")
        app_menu.addAction(prefs_action)
        self._prefs_action = prefs_action

    def _open_settings(self) -> None:
        """Open the preferences dialog and apply any changes."""
        from .ui.settings_dialog import SettingsDialog

        def _preview_pip():
            self._sound_manager.set_volume(self._settings.sound_volume)
            self._sound_manager.set_enabled(self._settings.sound_enabled)
            self._sound_manager.play("countdown")

        dlg = SettingsDialog(
            self._settings,
            parent=self,
            sound_preview_callback=_preview_pip,
        )
        dlg.exec()
        self._apply_settings()

    def _apply_settings(self) -> None:
        """Push current Settings into the sound player and device locks."""
        s = self._settings
        self._sound_manager.set_volume(s.sound_volume)
        self._sound_manager.set_enabled(s.sound_enabled)
        self._apply_device_settings()

    def _apply_device_settings(self) -> None:
        s = self._settings
        self._session.set_device_locks(
            wake_lock=self._wake_lock if s.keep_awake else None,
            orientation_lock=self._orientation_lock if s.lock_orientation else None,
        )

    # ══════════════════════════════════════════════════════════════════
    #  WINDOW STATE
    # ══════════════════════════════════════════════════════════════════

    def _restore_geometry(self) -> None:
        s = self._settings
        if s.window_x is not None and s.window_y is not None:
            self.move(s.window_x, s.window_y)
        if s.window_width and s.window_height:
            self.resize(s.window_width, s.window_height)

    def _save_geometry(self) -> None:
        if not self.isVisible():
            return
        pos = self.pos()
        size = self.size()
        self._settings.window_x = pos.x()
        self._settings.window_y = pos.y()
        self._settings.window_width = size.width()
        self._settings.window_height = size.height()
        try:
            save_settings(self._settings)
        except OSError:
            logger.warning("Could not save window geometry", exc_info=True)

    def moveEvent(self, event) -> None:
        super().moveEvent(event)
        self._geometry_save_timer.start()

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        self._geometry_save_timer.start()

    # ══════════════════════════════════════════════════════════════════
    #  LEAVE GUARD
    # ══════════════════════════════════════════════════════════════════

    def _confirm_leave(self) -> bool:
        """Ask before closing while a session is live."""
        if not self._session.confirm_before_close:
            return True
        reply = QMessageBox.question(
            self,
            "Quit StretchTimer?",
            "Timer is running. Are you sure you want to leave?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No,
        )
        return reply == QMessageBox.StandardButton.Yes

    def closeEvent(self, event: QCloseEvent) -> None:
        if not self._confirm_leave():
            event.ignore()
            return
        self._save_geometry()
        self._session.shutdown()
        event.accept()
