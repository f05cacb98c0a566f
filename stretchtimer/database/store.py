"""Key/value access on top of the ``preferences`` table.

Values are stored as strings; callers parse them.
"""

from __future__ import annotations

from .db import get_session
from .models import Preference


def get_value(key: str, default: str | None = None) -> str | None:
    with get_session() as db:
        row = db.query(Preference).filter_by(key=key).one_or_none()
        if row is None or row.value is None:
            return default
        return row.value


def set_value(key: str, value) -> None:
    with get_session() as db:
        row = db.query(Preference).filter_by(key=key).one_or_none()
        if row is None:
            db.add(Preference(key=key, value=str(value)))
        else:
            row.value = str(value)
