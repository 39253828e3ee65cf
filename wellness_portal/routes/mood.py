"""
Routes for mood and sleep check-ins and the wellness summary.

Creating an entry recomputes the user's wellness score and streak and
may raise notifications; see ``services.mood_service``. Students log
entries for themselves, counselors may log on behalf of a student.
"""

from __future__ import annotations

from flask import Blueprint, request
from flask_jwt_extended import jwt_required, current_user

from .. import db
from ..errors import ValidationError
from ..models import MoodEntry, Role, User
from ..schemas import MoodEntrySchema, MoodEntryInputSchema, SleepEntryInputSchema
from ..security import is_counselor, require_self_or_counselor
from ..services import mood_service, wellness_service


mood_bp = Blueprint("mood", __name__)


def _target_user_id(requested) -> int:
    """The user an entry is logged for: self, or ``user_id`` for counselors."""
    if is_counselor() and requested:
        target = db.get_or_404(User, requested, description="User not found.")
        if target.role != Role.STUDENT:
            raise ValidationError("Entries can only be logged for students", {"user_id": requested})
        return target.id
    return current_user.id


def _int_arg(name: str, default: int | None) -> int | None:
    value = request.args.get(name)
    if value in (None, ""):
        return default
    try:
        number = int(value)
    except ValueError:
        raise ValidationError(f"Invalid {name} parameter.", {name: value})
    if number < 1:
        raise ValidationError(f"{name} must be a positive number.", {name: value})
    return number


@mood_bp.route("/mood-entries", methods=["POST"])
@jwt_required()
def create_mood_entry() -> tuple[dict, int]:
    """Log a mood check-in.

    Expects ``mood_level``, ``sleep_hours`` (0-24) and ``stress_level``
    (1-10) with optional ``energy_level`` (1-10) and ``notes``. When the
    energy level is omitted it is estimated from the other values.
    """
    data = MoodEntryInputSchema().load(request.get_json(silent=True) or {})
    entry = mood_service.record_mood_entry(_target_user_id(data.get("user_id")), data)
    return MoodEntrySchema().dump(entry), 201


@mood_bp.route("/sleep-entries", methods=["POST"])
@jwt_required()
def create_sleep_entry() -> tuple[dict, int]:
    """Log a night's sleep as ``sleep_hours`` and ``sleep_quality`` (1-5)."""
    data = SleepEntryInputSchema().load(request.get_json(silent=True) or {})
    entry = mood_service.record_sleep_entry(_target_user_id(data.get("user_id")), data)
    return MoodEntrySchema().dump(entry), 201


@mood_bp.route("/mood-entries/user/<int:user_id>", methods=["GET"])
@jwt_required()
def user_mood_entries(user_id: int) -> tuple[list[dict], int]:
    require_self_or_counselor(user_id)
    entries = mood_service.recent_entries(user_id, _int_arg("limit", None))
    return MoodEntrySchema(many=True).dump(entries), 200


@mood_bp.route("/mood-entries/<int:entry_id>", methods=["GET"])
@jwt_required()
def get_mood_entry(entry_id: int) -> tuple[dict, int]:
    entry = db.get_or_404(MoodEntry, entry_id, description="Mood entry not found.")
    require_self_or_counselor(entry.user_id)
    return MoodEntrySchema().dump(entry), 200


@mood_bp.route("/mood-entries/<int:entry_id>", methods=["DELETE"])
@jwt_required()
def delete_mood_entry(entry_id: int) -> tuple[dict, int]:
    entry = db.get_or_404(MoodEntry, entry_id, description="Mood entry not found.")
    require_self_or_counselor(entry.user_id)
    db.session.delete(entry)
    db.session.commit()
    return {"success": True, "message": "Mood entry deleted successfully"}, 200


@mood_bp.route("/mood-entries/user/<int:user_id>/stats", methods=["GET"])
@jwt_required()
def user_mood_stats(user_id: int) -> tuple[dict, int]:
    """Mood or sleep statistics over the last ``days`` days.

    ``type`` selects ``mood`` (default) or ``sleep``.
    """
    require_self_or_counselor(user_id)
    days = _int_arg("days", 30)
    stats_type = request.args.get("type", "mood")
    entries = mood_service.recent_entries(user_id)
    if stats_type == "sleep":
        return wellness_service.sleep_stats(entries, days), 200
    if stats_type != "mood":
        raise ValidationError("type must be 'mood' or 'sleep'.", {"type": stats_type})
    result = wellness_service.mood_stats(entries, days)
    result["mood_entries"] = MoodEntrySchema(many=True).dump(result["mood_entries"])
    return result, 200


@mood_bp.route("/wellness/user/<int:user_id>", methods=["GET"])
@jwt_required()
def user_wellness(user_id: int) -> tuple[dict, int]:
    """Wellness score, streaks, recent activity and the at-risk flag."""
    require_self_or_counselor(user_id)
    entries = mood_service.recent_entries(user_id)
    return wellness_service.wellness_summary(entries, mood_service.user_goals(user_id)), 200
