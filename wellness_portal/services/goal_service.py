"""Goal creation, progress updates and goal statistics."""
from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterable, Optional

from .. import db
from ..errors import ValidationError
from ..models import WellnessGoal, utcnow
from ..util.sanitization import clean_optional, strip_tags
from .notification_service import notify_goal_completed

logger = logging.getLogger(__name__)

TITLE_MIN = 3
TITLE_MAX = 200


def clean_title(title: Optional[str]) -> str:
    title = strip_tags(title or "")
    if not title:
        raise ValidationError("Goal title is required", {"title": "required"})
    if len(title) < TITLE_MIN:
        raise ValidationError("Title must be at least 3 characters", {"title": "too short"})
    if len(title) > TITLE_MAX:
        raise ValidationError("Title must not exceed 200 characters", {"title": "too long"})
    return title


def create_goal(user_id: int, data: dict) -> WellnessGoal:
    goal = WellnessGoal(
        user_id=user_id,
        title=clean_title(data.get("title")),
        description=clean_optional(data.get("description")),
        category=(data.get("category") or "wellness").strip().lower(),
        target_date=data.get("target_date"),
    )
    db.session.add(goal)
    db.session.commit()
    logger.info("Goal created: %r for user %s", goal.title, goal.user_id)
    return goal


def _finish_update(goal: WellnessGoal, was_completed: bool) -> WellnessGoal:
    goal.updated_at = utcnow()
    if goal.is_completed and not was_completed:
        notify_goal_completed(goal)
    db.session.commit()
    return goal


def update_progress(goal: WellnessGoal, progress: float) -> WellnessGoal:
    """Set progress (0-100); reaching 100 marks the goal completed."""
    if isinstance(progress, bool) or not isinstance(progress, (int, float)) or not 0 <= progress <= 100:
        raise ValidationError("Progress percentage must be between 0 and 100", {"progress_percentage": progress})
    was_completed = goal.is_completed
    goal.progress_percentage = int(progress)
    goal.is_completed = progress >= 100
    logger.info("Goal %s progress updated to %s%%", goal.id, goal.progress_percentage)
    return _finish_update(goal, was_completed)


def update_goal(goal: WellnessGoal, changes: dict) -> WellnessGoal:
    """Apply validated field changes from ``GoalUpdateSchema``."""
    was_completed = goal.is_completed
    if "title" in changes:
        goal.title = clean_title(changes["title"])
    if "description" in changes:
        goal.description = clean_optional(changes["description"])
    if "category" in changes:
        goal.category = changes["category"].strip().lower()
    if "target_date" in changes:
        goal.target_date = changes["target_date"]
    if "progress_percentage" in changes:
        goal.progress_percentage = changes["progress_percentage"]
        if "is_completed" not in changes:
            goal.is_completed = goal.progress_percentage >= 100
    if "is_completed" in changes:
        goal.is_completed = changes["is_completed"]
        if goal.is_completed:
            goal.progress_percentage = 100
    return _finish_update(goal, was_completed)


def goal_stats(goals: Iterable[WellnessGoal], today: Optional[date] = None) -> dict:
    today = today or utcnow().date()
    goals = list(goals)
    recent_cutoff = utcnow() - timedelta(days=7)
    open_goals = [g for g in goals if not g.is_completed]
    return {
        "total": len(goals),
        "completed": len(goals) - len(open_goals),
        "in_progress": sum(1 for g in open_goals if g.target_date is None or g.target_date >= today),
        "overdue": sum(1 for g in open_goals if g.target_date is not None and g.target_date < today),
        "average_progress": round(sum(g.progress_percentage for g in goals) / len(goals)) if goals else 0,
        "recently_updated": sum(1 for g in goals if g.updated_at and g.updated_at > recent_cutoff),
    }
