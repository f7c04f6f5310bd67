from __future__ import annotations

from ..extensions import db
from phoneledger.time_utils import to_utc_z, utcnow


class AppSetting(db.Model):
    """
    Key-value settings for the single local ledger.

    Known keys:
    - gate_password_hash: bcrypt hash of the shared gate password
    - last_rollover_at: ISO timestamp of the most recent monthly rollover
    """
    __tablename__ = "app_settings"
    __table_args__ = (
        db.UniqueConstraint("key", name="uq_app_settings_key"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(128), nullable=False)
    value = db.Column(db.Text, nullable=True)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "key": self.key,
            "value": self.value,
            "updated_at": to_utc_z(self.updated_at),
        }


class GateSession(db.Model):
    """
    Unlock token issued by the password gate.

    Only the SHA-256 hash of the token is stored. A session is valid while
    it is not revoked and not past expires_at.
    """
    __tablename__ = "gate_sessions"
    __table_args__ = (
        db.UniqueConstraint("token_hash", name="uq_gate_sessions_token_hash"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    token_hash = db.Column(db.String(64), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False)
    revoked_at = db.Column(db.DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<GateSession id={self.id} expires_at={self.expires_at} revoked={self.revoked_at is not None}>"
