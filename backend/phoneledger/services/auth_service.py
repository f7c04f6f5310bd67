# Overview: Service-layer operations for the password gate.

"""
Password Gate

WHY: The ledger is a single-user, local tool. One shared password keeps a
casual passer-by out of the screens; it is not an access-control system.

- The password is stored as a bcrypt hash in app_settings
- First run: set_password() is allowed once; afterwards change_password()
  requires the current password
- unlock() returns a random token; only its SHA-256 hash is stored
- Tokens expire after GATE_SESSION_HOURS and are revoked by lock()
"""

import hashlib
import secrets
from datetime import timedelta

import bcrypt
from flask import current_app

from ..extensions import db
from ..models import GateSession
from ..validation import ConflictError
from .settings_service import GATE_PASSWORD_KEY, get_setting, set_setting
from phoneledger.time_utils import utcnow


class PasswordValidationError(Exception):
    """Raised when a new password is unusable."""
    pass


class GateLockedError(Exception):
    """Raised when the password is wrong or not set yet."""
    pass


def validate_password_strength(password: str) -> None:
    """
    The gate only asks for a non-blank password of a minimum length
    (GATE_MIN_PASSWORD_LENGTH, default 4).
    """
    min_length = current_app.config.get("GATE_MIN_PASSWORD_LENGTH", 4)
    if not isinstance(password, str) or not password.strip():
        raise PasswordValidationError("Password cannot be blank")
    if len(password) < min_length:
        raise PasswordValidationError(f"Password must be at least {min_length} characters long")


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt (cost factor BCRYPT_ROUNDS, default 12).

    Password is validated before hashing.
    """
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=current_app.config.get("BCRYPT_ROUNDS", 12))
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    Returns True if password matches hash, False otherwise.
    """
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed hash in storage
        return False


def is_password_set() -> bool:
    return get_setting(GATE_PASSWORD_KEY) is not None


def set_password(password: str) -> None:
    """
    First-run setup.

    Raises:
        ConflictError: a password is already set
        PasswordValidationError: password too short / blank
    """
    if is_password_set():
        raise ConflictError("Password is already set")
    set_setting(GATE_PASSWORD_KEY, hash_password(password))
    current_app.logger.info("Gate password set")


def check_password(password: str) -> bool:
    stored = get_setting(GATE_PASSWORD_KEY)
    if stored is None:
        return False
    return verify_password(password, stored)


def change_password(current_password: str, new_password: str) -> None:
    """
    Replace the gate password and revoke every open session.

    Raises:
        GateLockedError: current password wrong
        PasswordValidationError: new password unusable
    """
    if not check_password(current_password):
        raise GateLockedError("Current password is incorrect")
    new_hash = hash_password(new_password)
    set_setting(GATE_PASSWORD_KEY, new_hash, commit=False)
    revoke_all_sessions(commit=False)
    db.session.commit()
    current_app.logger.info("Gate password changed; sessions revoked")


def reset_password(new_password: str) -> None:
    """Overwrite the password without the old one (CLI only)."""
    set_setting(GATE_PASSWORD_KEY, hash_password(new_password), commit=False)
    revoke_all_sessions(commit=False)
    db.session.commit()
    current_app.logger.info("Gate password reset from CLI")


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def unlock(password: str) -> tuple[GateSession, str]:
    """
    Open the gate.

    Returns (session_record, plaintext_token). Only the hash is stored.

    Raises:
        GateLockedError: no password set, or the password does not match
    """
    if not is_password_set():
        raise GateLockedError("Password has not been set")
    if not check_password(password):
        raise GateLockedError("Incorrect password")

    token = secrets.token_hex(32)
    now = utcnow()
    hours = current_app.config.get("GATE_SESSION_HOURS", 12)
    session = GateSession(
        token_hash=hash_token(token),
        created_at=now,
        expires_at=now + timedelta(hours=hours),
    )
    db.session.add(session)
    db.session.commit()
    return session, token


def validate_session(token: str) -> GateSession | None:
    if not token:
        return None
    session = db.session.query(GateSession).filter_by(token_hash=hash_token(token)).first()
    if session is None or session.revoked_at is not None:
        return None
    if session.expires_at <= utcnow():
        return None
    return session


def lock(token: str) -> bool:
    session = db.session.query(GateSession).filter_by(token_hash=hash_token(token)).first()
    if session is None or session.revoked_at is not None:
        return False
    session.revoked_at = utcnow()
    db.session.commit()
    return True


def revoke_all_sessions(*, commit: bool = True) -> int:
    count = (
        db.session.query(GateSession)
        .filter(GateSession.revoked_at.is_(None))
        .update({GateSession.revoked_at: utcnow()}, synchronize_session=False)
    )
    if commit:
        db.session.commit()
    return count
