"""
Directory routes: listing students and counselors, and deactivating
accounts.

Accounts are never deleted. A counselor can deactivate a user, which
blocks logins and invalidates their existing tokens while keeping
their history for reporting.
"""

from __future__ import annotations

from flask import Blueprint
from flask_jwt_extended import jwt_required

from .. import db
from ..models import User, Role
from ..schemas import UserSchema, CounselorSchema
from ..security import require_counselor
from ..services import account_service


users_bp = Blueprint("users", __name__)


@users_bp.route("/students", methods=["GET"])
@jwt_required()
def list_students() -> tuple[list[dict], int]:
    """Return all active students ordered by name. Counselors only."""
    require_counselor()
    students = (
        User.query.filter_by(role=Role.STUDENT, is_active=True)
        .order_by(User.first_name.asc(), User.last_name.asc())
        .all()
    )
    return UserSchema(many=True).dump(students), 200


@users_bp.route("/counselors", methods=["GET"])
@jwt_required()
def list_counselors() -> tuple[list[dict], int]:
    """Return active counselors for the booking screen."""
    counselors = (
        User.query.filter_by(role=Role.COUNSELOR, is_active=True)
        .order_by(User.first_name.asc(), User.last_name.asc())
        .all()
    )
    return CounselorSchema(many=True).dump(counselors), 200


@users_bp.route("/users/<int:user_id>/deactivate", methods=["PUT"])
@jwt_required()
def deactivate_user(user_id: int) -> tuple[dict, int]:
    require_counselor()
    user = db.get_or_404(User, user_id, description="User not found.")
    account_service.deactivate_user(user)
    return {"success": True, "message": "User deactivated successfully"}, 200
