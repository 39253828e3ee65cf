"""
Portal analytics for counselors.
"""

from __future__ import annotations

from flask import Blueprint
from flask_jwt_extended import jwt_required

from ..security import require_counselor
from ..services import portal_analytics


analytics_bp = Blueprint("analytics", __name__)


@analytics_bp.route("/analytics", methods=["GET"])
@jwt_required()
def get_analytics() -> tuple[dict, int]:
    """Return student, session, wellness and resource statistics.

    Only counselors may view analytics. Returns 403 for other roles.
    """
    require_counselor()
    return portal_analytics(), 200
