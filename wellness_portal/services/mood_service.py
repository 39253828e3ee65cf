"""Recording mood and sleep check-ins.

Saving an entry is the only write that fans out: the wellness score is
computed before and after the insert and the notification triggers
compare the two. All of it happens in one transaction.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from .. import db
from ..models import MoodEntry, MoodLevel, WellnessGoal, utcnow
from ..util.sanitization import clean_optional
from . import notification_service
from .wellness_service import (
    calculate_mood_streak,
    calculate_wellness_score,
    derive_energy_level,
    energy_from_sleep,
    mood_from_sleep,
    stress_from_sleep,
)

logger = logging.getLogger(__name__)

# The streak is capped at 365 days; older rows cannot affect it.
STREAK_LOOKBACK = 366


def recent_entries(user_id: int, limit: Optional[int] = None) -> List[MoodEntry]:
    """Entries for ``user_id``, newest first."""
    query = MoodEntry.query.filter_by(user_id=user_id).order_by(MoodEntry.created_at.desc(), MoodEntry.id.desc())
    if limit:
        query = query.limit(limit)
    return query.all()


def user_goals(user_id: int) -> List[WellnessGoal]:
    return WellnessGoal.query.filter_by(user_id=user_id).all()


def _save_with_triggers(entry: MoodEntry) -> MoodEntry:
    user_id = entry.user_id
    before = recent_entries(user_id, STREAK_LOOKBACK)
    goals = user_goals(user_id)
    previous_score = calculate_wellness_score(before, goals) if before else None
    previous_streak = calculate_mood_streak(before)

    db.session.add(entry)
    db.session.flush()

    after = [entry] + before
    current_score = calculate_wellness_score(after, goals)
    notification_service.notify_wellness_score_change(user_id, previous_score, current_score)
    notification_service.notify_streak(user_id, previous_streak, calculate_mood_streak(after))
    notification_service.notify_mood_pattern(user_id, after)
    db.session.commit()
    return entry


def record_mood_entry(user_id: int, data: dict) -> MoodEntry:
    """Store a check-in validated by ``MoodEntryInputSchema``.

    A missing energy level is estimated from mood, sleep and stress.
    """
    mood_level: MoodLevel = data["mood_level"]
    energy = data.get("energy_level") or derive_energy_level(mood_level, data["sleep_hours"], data["stress_level"])
    entry = MoodEntry(
        user_id=user_id,
        mood_level=mood_level,
        notes=clean_optional(data.get("notes")),
        energy_level=energy,
        sleep_hours=data["sleep_hours"],
        stress_level=data["stress_level"],
        created_at=utcnow(),
    )
    _save_with_triggers(entry)
    logger.info("Mood entry created: %s for user %s", entry.mood_level.value, user_id)
    return entry


def record_sleep_entry(user_id: int, data: dict) -> MoodEntry:
    """Store a sleep log as a mood entry whose other fields derive from sleep."""
    hours = data["sleep_hours"]
    quality = data.get("sleep_quality") or 3
    entry = MoodEntry(
        user_id=user_id,
        mood_level=mood_from_sleep(hours, quality),
        notes=clean_optional(data.get("notes")),
        energy_level=energy_from_sleep(hours, quality),
        sleep_hours=hours,
        stress_level=stress_from_sleep(hours, quality),
        created_at=utcnow(),
    )
    _save_with_triggers(entry)
    logger.info("Sleep entry created: %sh sleep for user %s", hours, user_id)
    return entry
