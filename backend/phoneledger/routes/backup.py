# Overview: Flask API routes for whole-store backup and restore.

from flask import Blueprint, request, jsonify, current_app

from ..services import backup_service
from ..services.backup_service import BackupFormatError
from ..decorators import require_unlocked

backup_bp = Blueprint("backup", __name__, url_prefix="/api/backup")


@backup_bp.get("/export")
@require_unlocked
def export_route():
    return jsonify(backup_service.export_backup()), 200


@backup_bp.post("/import")
@require_unlocked
def import_route():
    """
    Replace all ledger data with a backup.

    Body: {"confirm": true, "backup": {...exported document...}}
    """
    data = request.get_json(silent=True) or {}
    if data.get("confirm") is not True:
        return jsonify({"error": "Import replaces all data; send confirm=true"}), 400

    try:
        counts = backup_service.import_backup(data.get("backup"))
    except BackupFormatError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to import backup")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"ok": True, "counts": counts}), 200
