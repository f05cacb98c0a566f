"""StretchTimer: warmup plus work/rest interval rounds with audible cues."""

__version__ = "0.1.0"
