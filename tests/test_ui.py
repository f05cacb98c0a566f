"""Tests for the timer widget and main window.

Covers:
- Display text per phase (label, clock, subtitle)
- Inputs locked while running, persisted on change
- Leave guard on close
- Preferences dialog and applying its changes
"""

from __future__ import annotations

import pytest
from PyQt6.QtWidgets import QMessageBox

from stretchtimer.app import StretchTimerApp
from stretchtimer.settings import Settings, load_interval_config, load_settings
from stretchtimer.timer.engine import IntervalConfig, IntervalSession, Phase
from stretchtimer.ui.timer_widget import TimerWidget, format_clock, PHASE_LABELS
from stretchtimer.ui.settings_dialog import SettingsDialog

from helpers import RecordingAudio


class TestFormatClock:
    @pytest.mark.parametrize("seconds,expected", [
        (0, "00:00"),
        (9, "00:09"),
        (75, "01:15"),
        (535, "08:55"),
        (-3, "00:00"),
    ])
    def test_format(self, seconds, expected):
        assert format_clock(seconds) == expected


@pytest.mark.usefixtures("qapp")
class TestTimerWidget:

    @pytest.fixture
    def widget_session(self):
        s = IntervalSession(IntervalConfig(work_seconds=30, rest_seconds=5, total_rounds=3))
        w = TimerWidget(s)
        yield w, s
        s.shutdown()

    def test_idle_display(self, widget_session):
        w, _ = widget_session
        assert w._phase_label.text() == "READY"
        assert w._clock_label.text() == "00:00"
        assert w._subtitle_label.text() == "Total duration: 01:50"

    def test_inputs_populated_from_config(self, widget_session):
        w, _ = widget_session
        assert w._work_spin.value() == 30
        assert w._rest_spin.value() == 5
        assert w._rounds_spin.value() == 3

    def test_start_button_starts_session(self, widget_session):
        w, s = widget_session
        w._start_btn.click()
        assert s.phase == Phase.WARMUP
        assert w._phase_label.text() == "WARM UP"
        assert w._clock_label.text() == "00:10"
        assert w._subtitle_label.text() == "Round 1 of 3"

    def test_inputs_locked_while_running(self, widget_session):
        w, s = widget_session
        s.start()
        assert not w._work_spin.isEnabled()
        assert not w._start_btn.isEnabled()
        s.stop()
        assert w._work_spin.isEnabled()
        assert w._start_btn.isEnabled()

    def test_display_follows_ticks(self, widget_session):
        w, s = widget_session
        s.start()
        for _ in range(10):
            s._on_tick()
        assert w._phase_label.text() == PHASE_LABELS[Phase.WORK]
        assert w._clock_label.text() == "00:30"

    def test_reset_button(self, widget_session):
        w, s = widget_session
        s.start()
        w._reset_btn.click()
        assert s.phase == Phase.IDLE
        assert w._phase_label.text() == "READY"

    def test_finished_display(self, widget_session):
        w, s = widget_session
        s.start()
        while s.is_running:
            s._on_tick()
        assert w._phase_label.text() == "FINISHED"
        assert w._subtitle_label.text().startswith("Total duration")

    def test_input_change_reconfigures(self, widget_session):
        w, s = widget_session
        seen = []
        w.config_changed.connect(seen.append)
        w._rounds_spin.setValue(5)
        assert s.config.total_rounds == 5
        assert seen[-1].total_rounds == 5
        assert w._subtitle_label.text() == "Total duration: " + format_clock(
            s.config.total_seconds
        )


@pytest.mark.usefixtures("qapp")
class TestMainWindow:

    @pytest.fixture
    def window(self, tmp_path, monkeypatch):
        monkeypatch.setattr("stretchtimer.settings.SETTINGS_PATH", tmp_path / "settings.json")
        monkeypatch.setattr("stretchtimer.settings.APP_SUPPORT_DIR", tmp_path)
        win = StretchTimerApp(
            settings=Settings(keep_awake=False, lock_orientation=False),
            config=IntervalConfig(work_seconds=20, rest_seconds=10, total_rounds=4),
            sound_manager=_QuietSounds(),
        )
        win.show()
        yield win
        win.session.shutdown()

    def test_session_uses_given_config(self, window):
        assert window.session.config.work_seconds == 20

    def test_config_change_is_persisted(self, window):
        window._timer_widget._work_spin.setValue(40)
        assert load_interval_config().work_seconds == 40

    def test_status_bar_follows_phase(self, window):
        window.session.start()
        assert window._status_bar.currentMessage().startswith("Warming up")

    def test_close_when_idle_accepts(self, window):
        assert window.close() is True

    def test_close_while_running_asks(self, window, monkeypatch):
        asked = []

        def fake_question(*args, **kwargs):
            asked.append(args)
            return QMessageBox.StandardButton.No

        monkeypatch.setattr(QMessageBox, "question", fake_question)
        window.session.start()
        assert window.close() is False
        assert asked
        assert window.session.is_running is True

    def test_close_confirmed_stops_session(self, window, monkeypatch):
        monkeypatch.setattr(
            QMessageBox, "question",
            lambda *a, **k: QMessageBox.StandardButton.Yes,
        )
        window.session.start()
        assert window.close() is True
        assert window.session.is_running is False
        assert window.session.phase == Phase.IDLE


class _QuietSounds(RecordingAudio):
    """Stands in for SoundManager inside the window."""

    def __init__(self):
        super().__init__()
        self.volume = None
        self.enabled = None

    def set_volume(self, level):
        self.volume = level

    def set_enabled(self, enabled):
        self.enabled = enabled


@pytest.mark.usefixtures("qapp")
class TestSettingsDialog:

    @pytest.fixture(autouse=True)
    def settings_path(self, tmp_path, monkeypatch):
        path = tmp_path / "settings.json"
        monkeypatch.setattr("stretchtimer.settings.SETTINGS_PATH", path)
        monkeypatch.setattr("stretchtimer.settings.APP_SUPPORT_DIR", tmp_path)
        return path

    def test_create(self):
        dlg = SettingsDialog(Settings())
        assert dlg.windowTitle() == "Preferences"

    def test_reflects_settings(self):
        s = Settings(sound_volume=50, keep_awake=False, lock_orientation=True)
        dlg = SettingsDialog(s)
        assert dlg._vol_slider.value() == 50
        assert dlg._vol_label.text() == "50%"
        assert dlg._awake_cb.isChecked() is False
        assert dlg._orientation_cb.isChecked() is True

    def test_checkbox_toggles_are_saved(self):
        s = Settings()
        dlg = SettingsDialog(s)
        dlg._awake_cb.setChecked(False)
        dlg._sound_cb.setChecked(False)
        assert s.keep_awake is False
        assert s.sound_enabled is False
        reloaded = load_settings()
        assert reloaded.keep_awake is False
        assert reloaded.sound_enabled is False

    def test_volume_slider_updates_label(self):
        s = Settings()
        dlg = SettingsDialog(s)
        dlg._vol_slider.setValue(85)
        assert dlg._vol_label.text() == "85%"
        assert s.sound_volume == 85

    def test_sound_preview_callback(self):
        calls: list[bool] = []
        dlg = SettingsDialog(Settings(), sound_preview_callback=lambda: calls.append(True))
        dlg._on_volume_released()
        assert calls == [True]


@pytest.mark.usefixtures("qapp")
class TestApplySettings:

    @pytest.fixture
    def window(self, tmp_path, monkeypatch):
        monkeypatch.setattr("stretchtimer.settings.SETTINGS_PATH", tmp_path / "settings.json")
        monkeypatch.setattr("stretchtimer.settings.APP_SUPPORT_DIR", tmp_path)
        win = StretchTimerApp(
            settings=Settings(keep_awake=False, lock_orientation=False),
            config=IntervalConfig(work_seconds=20, rest_seconds=10, total_rounds=4),
            sound_manager=_QuietSounds(),
        )
        yield win
        win.session.shutdown()

    def test_disabled_locks_are_not_handed_to_session(self, window):
        assert window.session._wake_lock is None
        assert window.session._orientation_lock is None

    def test_preferences_action_in_menu(self, window):
        assert window._prefs_action.text().startswith("Preferences")

    def test_sound_settings_applied(self, window):
        window._settings.sound_volume = 30
        window._settings.sound_enabled = False
        window._apply_settings()
        assert window._sound_manager.volume == 30
        assert window._sound_manager.enabled is False

    def test_device_settings_applied_when_idle(self, window):
        window._settings.keep_awake = True
        window._settings.lock_orientation = True
        window._apply_settings()
        assert window.session._wake_lock is window._wake_lock
        assert window.session._orientation_lock is window._orientation_lock

    def test_device_settings_wait_for_session_end(self, window):
        window.session.start()
        window._settings.keep_awake = True
        window._apply_settings()
        assert window.session._wake_lock is None
        window.session.stop()
        assert window.session._wake_lock is window._wake_lock
