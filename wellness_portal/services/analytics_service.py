"""Portal-wide statistics for the counselor dashboard.

Everything is recomputed per request from the current rows. At the
scale of a single campus portal this is a handful of queries and a few
passes over small lists.
"""
from __future__ import annotations

import logging
from datetime import timedelta

from ..models import Appointment, AppointmentStatus, MoodEntry, Resource, ResourceType, Role, User, utcnow
from .mood_service import recent_entries, user_goals
from .wellness_service import AT_RISK_THRESHOLD, DEFAULT_SCORE, average_mood_rating, calculate_wellness_score

logger = logging.getLogger(__name__)


def portal_analytics(now=None) -> dict:
    now = now or utcnow()
    week_ago = now - timedelta(days=7)
    month_ago = now - timedelta(days=30)

    students = User.query.filter_by(role=Role.STUDENT).all()
    student_ids = {s.id for s in students}
    appointments = Appointment.query.all()
    mood_entries = MoodEntry.query.all()
    resources = Resource.query.all()

    monthly_active: set[int] = set()
    weekly_active: set[int] = set()
    activity = [(a.student_id, a.created_at) for a in appointments]
    activity += [(e.user_id, e.created_at) for e in mood_entries if e.user_id in student_ids]
    for user_id, created_at in activity:
        if created_at >= month_ago:
            monthly_active.add(user_id)
        if created_at >= week_ago:
            weekly_active.add(user_id)

    at_risk = 0
    scores: list[int] = []
    ratings: list[float] = []
    for student in students:
        entries = recent_entries(student.id, 30)
        if not entries:
            continue
        score = calculate_wellness_score(entries, user_goals(student.id))
        scores.append(score)
        ratings.append(average_mood_rating(entries))
        if score < AT_RISK_THRESHOLD:
            at_risk += 1

    total_sessions = len(appointments)
    completed = sum(1 for a in appointments if a.status == AppointmentStatus.COMPLETED)
    stats = {
        "total_students": len(students),
        "active_students": len(monthly_active),
        "students_at_risk": at_risk,
        "total_sessions": total_sessions,
        "completed_sessions": completed,
        "cancelled_sessions": sum(1 for a in appointments if a.status == AppointmentStatus.CANCELLED),
        "scheduled_sessions": sum(1 for a in appointments if a.status == AppointmentStatus.SCHEDULED),
        "completion_rate": round(completed / total_sessions * 100) if total_sessions else 0,
        "average_wellness_score": round(sum(scores) / len(scores)) if scores else DEFAULT_SCORE,
        "average_mood_rating": round(sum(ratings) / len(ratings), 1) if ratings else 3.0,
        "total_mood_entries": len(mood_entries),
        "total_resources": len(resources),
        "resources_by_type": {t.value: sum(1 for r in resources if r.type == t) for t in ResourceType},
        "weekly_active_users": len(weekly_active),
        "monthly_active_users": len(monthly_active),
        "last_updated": now.isoformat(),
    }
    logger.info(
        "Analytics calculated: %d students, %d sessions, %d%% completion",
        stats["total_students"], stats["total_sessions"], stats["completion_rate"],
    )
    return stats
