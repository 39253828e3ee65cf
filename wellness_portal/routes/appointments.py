"""
Routes for booking and managing counselling appointments.

Students book sessions with counselors and may cancel their own
bookings. Counselors see every appointment, complete sessions and can
delete bookings outright. Responses include the first and last names of
both participants so clients do not need a second lookup.
"""

from __future__ import annotations

from flask import Blueprint, request
from flask_jwt_extended import jwt_required, current_user

from .. import db
from ..errors import ForbiddenError, ValidationError
from ..models import Appointment, Role, User
from ..schemas import AppointmentSchema, AppointmentInputSchema, AppointmentStatusSchema
from ..security import is_counselor, require_counselor, require_self_or_counselor
from ..services import appointment_service


appointments_bp = Blueprint("appointments", __name__)


def _get_appointment(appointment_id: int) -> Appointment:
    """Load an appointment visible to the current user or abort."""
    appointment = db.get_or_404(Appointment, appointment_id, description="Appointment not found.")
    if not (is_counselor() or appointment.involves(current_user.id)):
        raise ForbiddenError("Access denied")
    return appointment


@appointments_bp.route("/appointments/my", methods=["GET"])
@jwt_required()
def my_appointments() -> tuple[list[dict], int]:
    """Return the current user's appointments, latest date first."""
    appointments = appointment_service.appointments_for_user(current_user.id, current_user.role)
    return AppointmentSchema(many=True).dump(appointments), 200


@appointments_bp.route("/appointments", methods=["GET"])
@jwt_required()
def list_appointments() -> tuple[list[dict], int]:
    """Return appointments for ``user_id`` as ``user_role``.

    Both query parameters default to the current user. Only counselors
    may look at another user's appointments.
    """
    try:
        user_id = int(request.args.get("user_id", current_user.id))
    except ValueError:
        raise ValidationError("Invalid user_id parameter.", {"user_id": request.args.get("user_id")})
    require_self_or_counselor(user_id)
    user = db.get_or_404(User, user_id, description="User not found.")
    role_str = request.args.get("user_role")
    try:
        role = Role(role_str) if role_str else user.role
    except ValueError:
        raise ValidationError("Invalid user_role parameter.", {"user_role": role_str})
    appointments = appointment_service.appointments_for_user(user_id, role)
    return AppointmentSchema(many=True).dump(appointments), 200


@appointments_bp.route("/appointments/upcoming", methods=["GET"])
@jwt_required()
def upcoming_appointments() -> tuple[list[dict], int]:
    appointments = appointment_service.upcoming_for_user(current_user.id, current_user.role)
    return AppointmentSchema(many=True).dump(appointments), 200


@appointments_bp.route("/appointments/stats", methods=["GET"])
@jwt_required()
def appointment_stats() -> tuple[dict, int]:
    appointments = appointment_service.appointments_for_user(current_user.id, current_user.role)
    return appointment_service.appointment_stats(appointments), 200


@appointments_bp.route("/counselors/availability", methods=["GET"])
@jwt_required()
def counselor_availability() -> tuple[list[dict], int]:
    """Active counselors ordered by how few upcoming sessions they have."""
    return appointment_service.counselor_availability(), 200


@appointments_bp.route("/appointments/<int:appointment_id>", methods=["GET"])
@jwt_required()
def get_appointment(appointment_id: int) -> tuple[dict, int]:
    return AppointmentSchema().dump(_get_appointment(appointment_id)), 200


@appointments_bp.route("/appointments", methods=["POST"])
@jwt_required()
def create_appointment() -> tuple[dict, int]:
    """Book an appointment.

    Expects ``student_id``, ``counselor_id`` and ``appointment_date``
    (ISO 8601) with optional ``duration_minutes`` (default 60) and
    ``reason``. Students can only book appointments for themselves.
    """
    data = AppointmentInputSchema().load(request.get_json(silent=True) or {})
    if current_user.role == Role.STUDENT and data["student_id"] != current_user.id:
        raise ForbiddenError("Students can only book appointments for themselves")
    appointment = appointment_service.book(data)
    return AppointmentSchema().dump(appointment), 201


@appointments_bp.route("/appointments/<int:appointment_id>", methods=["PUT"])
@jwt_required()
def update_appointment(appointment_id: int) -> tuple[dict, int]:
    """Set an appointment's ``status`` and optional ``notes``."""
    appointment = _get_appointment(appointment_id)
    data = AppointmentStatusSchema().load(request.get_json(silent=True) or {})
    appointment = appointment_service.set_status(appointment, data["status"], data.get("notes"))
    return AppointmentSchema().dump(appointment), 200


@appointments_bp.route("/appointments/<int:appointment_id>/cancel", methods=["PUT"])
@jwt_required()
def cancel_appointment(appointment_id: int) -> tuple[dict, int]:
    appointment = appointment_service.cancel(_get_appointment(appointment_id))
    return AppointmentSchema().dump(appointment), 200


@appointments_bp.route("/appointments/<int:appointment_id>/complete", methods=["PUT"])
@jwt_required()
def complete_appointment(appointment_id: int) -> tuple[dict, int]:
    """Mark a scheduled session as completed. Counselors only."""
    require_counselor()
    appointment = _get_appointment(appointment_id)
    data = request.get_json(silent=True) or {}
    appointment = appointment_service.complete(appointment, data.get("notes"))
    return AppointmentSchema().dump(appointment), 200


@appointments_bp.route("/appointments/<int:appointment_id>", methods=["DELETE"])
@jwt_required()
def delete_appointment(appointment_id: int) -> tuple[dict, int]:
    require_counselor()
    appointment = _get_appointment(appointment_id)
    db.session.delete(appointment)
    db.session.commit()
    return {"success": True, "message": "Appointment deleted successfully"}, 200
