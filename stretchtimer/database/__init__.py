"""Database package."""

from .db import get_session, init_db, configure_engine
from .models import Preference
from .store import get_value, set_value

__all__ = [
    "get_session", "init_db", "configure_engine",
    "Preference", "get_value", "set_value",
]
