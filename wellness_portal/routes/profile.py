"""
Routes for viewing and editing the current user's own profile.

Every user can read and update the shared fields through
``/profile``. Students and counselors additionally have a
role-specific endpoint exposing the fields only their role carries.
"""

from __future__ import annotations

from flask import Blueprint, request
from flask_jwt_extended import jwt_required, current_user

from ..models import Role
from ..schemas import UserSchema
from ..security import require_role
from ..services import account_service


profile_bp = Blueprint("profile", __name__)

GENERAL_FIELDS = ("first_name", "last_name", "phone", "hostel_name", "room_number")
PROFILE_DATA_FIELDS = (
    "date_of_birth",
    "specialization",
    "qualifications",
    "years_of_experience",
    "course",
    "year_of_study",
)
STUDENT_FIELDS = (
    "first_name",
    "last_name",
    "phone",
    "hostel_name",
    "room_number",
    "course",
    "year_of_study",
    "date_of_birth",
    "department",
    "emergency_contact",
)
COUNSELOR_FIELDS = (
    "first_name",
    "last_name",
    "phone",
    "specialization",
    "experience",
    "license_number",
    "qualifications",
)


@profile_bp.route("/profile", methods=["GET"])
@jwt_required()
def get_profile() -> tuple[dict, int]:
    return UserSchema().dump(current_user), 200


@profile_bp.route("/profile", methods=["PUT"])
@jwt_required()
def update_profile() -> tuple[dict, int]:
    """Update the shared profile fields.

    Accepts ``first_name``, ``last_name``, ``phone``, ``hostel_name`` and
    ``room_number`` at the top level and a nested ``profile_data`` object
    with ``date_of_birth``, ``specialization``, ``qualifications``,
    ``years_of_experience``, ``course`` and ``year_of_study``. Blank
    strings clear optional fields.
    """
    data = request.get_json(silent=True) or {}
    changes = {name: data[name] for name in GENERAL_FIELDS if name in data}
    profile_data = data.get("profile_data")
    if isinstance(profile_data, dict):
        changes.update({name: profile_data[name] for name in PROFILE_DATA_FIELDS if name in profile_data})
    user = account_service.update_profile(current_user, changes, GENERAL_FIELDS + PROFILE_DATA_FIELDS)
    return UserSchema().dump(user), 200


@profile_bp.route("/profile/student", methods=["GET"])
@jwt_required()
def get_student_profile() -> tuple[dict, int]:
    require_role(Role.STUDENT)
    return UserSchema().dump(current_user), 200


@profile_bp.route("/profile/student", methods=["PUT"])
@jwt_required()
def update_student_profile() -> tuple[dict, int]:
    """Update student details such as course, year of study and residence."""
    require_role(Role.STUDENT)
    data = request.get_json(silent=True) or {}
    user = account_service.update_profile(current_user, data, STUDENT_FIELDS)
    return UserSchema().dump(user), 200


@profile_bp.route("/profile/counselor", methods=["GET"])
@jwt_required()
def get_counselor_profile() -> tuple[dict, int]:
    require_role(Role.COUNSELOR)
    return UserSchema().dump(current_user), 200


@profile_bp.route("/profile/counselor", methods=["PUT"])
@jwt_required()
def update_counselor_profile() -> tuple[dict, int]:
    """Update professional details such as specialization and licence."""
    require_role(Role.COUNSELOR)
    data = request.get_json(silent=True) or {}
    user = account_service.update_profile(current_user, data, COUNSELOR_FIELDS)
    return UserSchema().dump(user), 200


@profile_bp.route("/profile/change-password", methods=["POST"])
@jwt_required()
def change_password() -> tuple[dict, int]:
    """Change the current user's password.

    Expects ``current_password`` and ``new_password``. The current
    password must match; the new one must be at least six characters.
    """
    data = request.get_json(silent=True) or {}
    account_service.change_password(current_user, data.get("current_password") or "", data.get("new_password") or "")
    return {"success": True, "message": "Password changed successfully"}, 200
