"""Appointment booking and status changes."""
from __future__ import annotations

import logging
from typing import List, Optional

from .. import db
from ..errors import ConflictError, ValidationError
from ..models import Appointment, AppointmentStatus, Role, User, utcnow
from ..util.sanitization import clean_optional

logger = logging.getLogger(__name__)

CANCEL_NOTE = "Appointment cancelled by user"
COMPLETE_NOTE = "Session completed successfully"


def _participant_filter(user_id: int, role: Role):
    if role == Role.STUDENT:
        return Appointment.student_id == user_id
    return Appointment.counselor_id == user_id


def appointments_for_user(user_id: int, role: Role) -> List[Appointment]:
    return (
        Appointment.query.filter(_participant_filter(user_id, role))
        .order_by(Appointment.appointment_date.desc())
        .all()
    )


def upcoming_for_user(user_id: int, role: Role) -> List[Appointment]:
    return (
        Appointment.query.filter(
            _participant_filter(user_id, role),
            Appointment.status == AppointmentStatus.SCHEDULED,
            Appointment.appointment_date > utcnow(),
        )
        .order_by(Appointment.appointment_date.asc())
        .all()
    )


def book(data: dict) -> Appointment:
    """Create a scheduled appointment from ``AppointmentInputSchema`` data."""
    student = db.session.get(User, data["student_id"])
    counselor = db.session.get(User, data["counselor_id"])
    if student is None or student.role != Role.STUDENT or not student.is_active:
        raise ValidationError("Invalid student ID", {"student_id": data["student_id"]})
    if counselor is None or counselor.role != Role.COUNSELOR or not counselor.is_active:
        raise ValidationError("Invalid counselor ID", {"counselor_id": data["counselor_id"]})

    appointment = Appointment(
        student_id=student.id,
        counselor_id=counselor.id,
        appointment_date=data["appointment_date"],
        duration_minutes=data.get("duration_minutes") or 60,
        reason=clean_optional(data.get("reason")),
        status=AppointmentStatus.SCHEDULED,
    )
    db.session.add(appointment)
    db.session.commit()
    logger.info("Appointment created: %s with %s", counselor.full_name, student.full_name)
    return appointment


def set_status(appointment: Appointment, status: AppointmentStatus, notes: Optional[str] = None) -> Appointment:
    appointment.status = status
    appointment.notes = clean_optional(notes)
    appointment.updated_at = utcnow()
    db.session.commit()
    logger.info("Appointment %s status updated to: %s", appointment.id, status.value)
    return appointment


def _require_scheduled(appointment: Appointment, action: str) -> None:
    if appointment.status != AppointmentStatus.SCHEDULED:
        raise ConflictError(f"Only scheduled appointments can be {action} (current status: {appointment.status.value}).")


def cancel(appointment: Appointment) -> Appointment:
    _require_scheduled(appointment, "cancelled")
    return set_status(appointment, AppointmentStatus.CANCELLED, CANCEL_NOTE)


def complete(appointment: Appointment, notes: Optional[str] = None) -> Appointment:
    _require_scheduled(appointment, "completed")
    return set_status(appointment, AppointmentStatus.COMPLETED, notes or COMPLETE_NOTE)


def appointment_stats(appointments: List[Appointment]) -> dict:
    now = utcnow()
    counts = {status.value: 0 for status in AppointmentStatus}
    for appointment in appointments:
        counts[appointment.status.value] += 1
    return {
        "total": len(appointments),
        "scheduled": counts["scheduled"],
        "completed": counts["completed"],
        "cancelled": counts["cancelled"],
        "no_show": counts["no_show"],
        "upcoming": sum(
            1 for a in appointments
            if a.status == AppointmentStatus.SCHEDULED and a.appointment_date > now
        ),
    }


def counselor_availability() -> List[dict]:
    """Active counselors with their total and upcoming appointment counts."""
    now = utcnow()
    counselors = User.query.filter_by(role=Role.COUNSELOR, is_active=True).all()
    rows = []
    for counselor in counselors:
        appointments = Appointment.query.filter_by(counselor_id=counselor.id).all()
        rows.append({
            "id": counselor.id,
            "first_name": counselor.first_name,
            "last_name": counselor.last_name,
            "specialization": counselor.specialization,
            "total_appointments": len(appointments),
            "upcoming_appointments": sum(
                1 for a in appointments
                if a.status == AppointmentStatus.SCHEDULED and a.appointment_date > now
            ),
        })
    rows.sort(key=lambda row: (row["upcoming_appointments"], row["first_name"]))
    return rows
