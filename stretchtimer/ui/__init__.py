"""UI package."""

from .timer_widget import TimerWidget, format_clock

__all__ = ["TimerWidget", "format_clock"]
