# Overview: Flask API routes for monthly periods and the stock rollover.

from flask import Blueprint, request, jsonify, current_app

from ..services import periods_service
from ..services.accounting import parse_month_year
from ..decorators import require_unlocked

periods_bp = Blueprint("periods", __name__, url_prefix="/api/periods")


def _month_arg(value):
    if value in (None, ""):
        return None
    parse_month_year(value)
    return value


@periods_bp.get("")
@require_unlocked
def list_periods_route():
    result = periods_service.list_periods()
    active = periods_service.get_active_period()
    result["active"] = active.to_dict() if active else None
    return result


@periods_bp.get("/rollover")
@require_unlocked
def preview_rollover_route():
    """
    What a rollover would do right now.

    Query params:
    - current_month: YYYY-MM (optional, defaults to this month)
    """
    try:
        current = _month_arg(request.args.get("current_month"))
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(periods_service.preview_rollover(current)), 200


@periods_bp.post("/rollover")
@require_unlocked
def rollover_route():
    """
    Move every unsold product to the next month. Irreversible.

    Body: {"confirm": true, "current_month": "YYYY-MM" (optional)}
    """
    data = request.get_json(silent=True) or {}
    if data.get("confirm") is not True:
        return jsonify({"error": "Rollover cannot be undone; send confirm=true"}), 400

    try:
        current = _month_arg(data.get("current_month"))
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    try:
        result = periods_service.perform_rollover(current)
    except Exception:
        current_app.logger.exception("Failed to roll over month")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(result.to_dict()), 200
