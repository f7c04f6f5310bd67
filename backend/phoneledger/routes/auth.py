# Overview: Flask API routes for the password gate; parses input and returns JSON responses.

# backend/phoneledger/routes/auth.py
"""
Password gate routes. These are the only ledger routes reachable while locked.

- GET  /api/auth/status    -> is a password set, is this request unlocked
- POST /api/auth/setup     -> first-run password
- POST /api/auth/unlock    -> token for the Authorization header
- POST /api/auth/lock      -> revoke the caller's token
- POST /api/auth/password  -> change password (revokes every token)
"""

from flask import Blueprint, request, jsonify, current_app

from ..decorators import bearer_token, require_unlocked
from ..services import auth_service
from ..services.auth_service import GateLockedError, PasswordValidationError
from ..validation import ConflictError
from phoneledger.time_utils import to_utc_z

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.get("/status")
def status_route():
    token = bearer_token()
    return {
        "password_set": auth_service.is_password_set(),
        "unlocked": bool(token and auth_service.validate_session(token)),
    }


@auth_bp.post("/setup")
def setup_route():
    data = request.get_json(silent=True) or {}
    password = data.get("password")

    try:
        auth_service.set_password(password)
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except PasswordValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to set gate password")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"ok": True}), 201


@auth_bp.post("/unlock")
def unlock_route():
    data = request.get_json(silent=True) or {}
    password = data.get("password") or ""

    try:
        session, token = auth_service.unlock(password)
    except GateLockedError as e:
        return jsonify({"error": str(e)}), 401
    except Exception:
        current_app.logger.exception("Failed to unlock ledger")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({
        "token": token,
        "expires_at": to_utc_z(session.expires_at),
    }), 200


@auth_bp.post("/lock")
@require_unlocked
def lock_route():
    auth_service.lock(bearer_token())
    return jsonify({"ok": True}), 200


@auth_bp.post("/password")
@require_unlocked
def change_password_route():
    data = request.get_json(silent=True) or {}

    try:
        auth_service.change_password(
            data.get("current_password") or "",
            data.get("new_password"),
        )
    except GateLockedError as e:
        return jsonify({"error": str(e)}), 401
    except PasswordValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to change gate password")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"ok": True}), 200
