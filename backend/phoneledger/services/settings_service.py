# Overview: Key-value settings store (gate password hash, last rollover time).

from __future__ import annotations

from ..extensions import db
from ..models import AppSetting

GATE_PASSWORD_KEY = "gate_password_hash"
LAST_ROLLOVER_KEY = "last_rollover_at"


def get_setting(key: str, default: str | None = None) -> str | None:
    row = db.session.query(AppSetting).filter_by(key=key).first()
    if row is None:
        return default
    return row.value


def set_setting(key: str, value: str | None, *, commit: bool = True) -> AppSetting:
    """Insert or overwrite a setting."""
    row = db.session.query(AppSetting).filter_by(key=key).first()
    if row is None:
        row = AppSetting(key=key, value=value)
        db.session.add(row)
    else:
        row.value = value
    if commit:
        db.session.commit()
    else:
        db.session.flush()
    return row


def delete_setting(key: str) -> bool:
    deleted = db.session.query(AppSetting).filter_by(key=key).delete()
    db.session.commit()
    return bool(deleted)
