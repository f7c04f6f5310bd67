# Overview: Flask API route for the dashboard figures.

from flask import Blueprint, request, jsonify

from ..services.reporting_service import get_dashboard_stats
from ..services.accounting import parse_month_year
from ..decorators import require_unlocked

reports_bp = Blueprint("reports", __name__, url_prefix="/api/dashboard")


@reports_bp.get("")
@require_unlocked
def dashboard_route():
    """
    Query params:
    - month: YYYY-MM (optional) - month for monthly_profit_cents
    """
    month = request.args.get("month") or None
    if month is not None:
        try:
            parse_month_year(month)
        except ValueError as e:
            return jsonify({"error": str(e)}), 400
    return jsonify(get_dashboard_stats(month)), 200
