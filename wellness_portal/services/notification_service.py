"""Notification creation, preferences and automatic triggers.

Triggers run synchronously after the primary write of a request (a
mood entry, a sleep entry or a goal reaching 100%). Each one checks the
user's ``NotificationPreference`` first, decides whether anything is
worth saying and, if so, adds a ``Notification`` to the session. The
caller commits.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta
from typing import Optional, Sequence

from flask import current_app

from .. import db
from ..errors import NotFoundError
from ..models import (
    MoodEntry,
    Notification,
    NotificationFrequency,
    NotificationPreference,
    NotificationType,
    Priority,
    User,
    WellnessGoal,
    utcnow,
)
from .wellness_service import detect_mood_pattern

logger = logging.getLogger(__name__)

STREAK_MILESTONES = (3, 7, 14, 30, 50, 100)
TIME_RE = re.compile(r"^\d{2}:\d{2}$")

BOOLEAN_PREFERENCES = (
    "enable_wellness_score_notifications",
    "enable_goal_completion_notifications",
    "enable_streak_notifications",
    "enable_mood_pattern_notifications",
    "enable_daily_reminders",
    "email_notifications",
    "push_notifications",
)


def create_notification(
    user_id: int,
    type: NotificationType,
    title: str,
    message: str,
    priority: Priority = Priority.LOW,
    previous_score: Optional[int] = None,
    current_score: Optional[int] = None,
    score_change: Optional[int] = None,
) -> Notification:
    """Add a notification to the session and flush it."""
    if db.session.get(User, user_id) is None:
        raise NotFoundError("User not found.")
    notification = Notification(
        user_id=user_id,
        type=type,
        title=title.strip(),
        message=message.strip(),
        priority=priority,
        previous_score=previous_score,
        current_score=current_score,
        score_change=score_change,
    )
    db.session.add(notification)
    db.session.flush()
    logger.info("Notification %s (%s) created for user %s", notification.id, type.value, user_id)
    return notification


def delete_old_notifications(older_than_days: int = 30) -> int:
    cutoff = utcnow() - timedelta(days=older_than_days)
    deleted = Notification.query.filter(Notification.created_at < cutoff).delete(synchronize_session=False)
    logger.info("Deleted %d notifications older than %d days", deleted, older_than_days)
    return deleted


# ---------------------------------------------------------------------------
# Preferences
# ---------------------------------------------------------------------------


def get_preferences(user_id: int) -> NotificationPreference:
    """Return the user's preferences, creating the defaults on first access."""
    prefs = NotificationPreference.query.filter_by(user_id=user_id).first()
    if prefs is None:
        prefs = NotificationPreference(user_id=user_id)
        db.session.add(prefs)
        db.session.flush()
    return prefs


def update_preferences(user_id: int, data: dict) -> NotificationPreference:
    """Apply the well-typed values in ``data``; anything else is ignored."""
    prefs = get_preferences(user_id)
    for name in BOOLEAN_PREFERENCES:
        if isinstance(data.get(name), bool):
            setattr(prefs, name, data[name])
    reminder_time = data.get("reminder_time")
    if isinstance(reminder_time, str) and TIME_RE.match(reminder_time):
        prefs.reminder_time = reminder_time
    if data.get("frequency") in {f.value for f in NotificationFrequency}:
        prefs.frequency = NotificationFrequency(data["frequency"])
    threshold = data.get("min_score_change_threshold")
    if isinstance(threshold, (int, float)) and not isinstance(threshold, bool) and 1 <= threshold <= 50:
        prefs.min_score_change_threshold = int(threshold)

    quiet_hours = data.get("quiet_hours")
    if isinstance(quiet_hours, dict):
        enabled = quiet_hours.get("enabled")
        start = quiet_hours.get("start_time")
        end = quiet_hours.get("end_time")
        prefs.quiet_hours_enabled = enabled if isinstance(enabled, bool) else False
        prefs.quiet_hours_start = start if isinstance(start, str) and TIME_RE.match(start) else "22:00"
        prefs.quiet_hours_end = end if isinstance(end, str) and TIME_RE.match(end) else "08:00"
    prefs.updated_at = utcnow()
    return prefs


# ---------------------------------------------------------------------------
# Triggers
# ---------------------------------------------------------------------------


def _last_scored_notification(user_id: int) -> Optional[Notification]:
    return (
        Notification.query.filter(Notification.user_id == user_id, Notification.current_score.isnot(None))
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .first()
    )


def should_create_notification(last_time: Optional[datetime], now: Optional[datetime] = None,
                               cooldown_hours: Optional[float] = None) -> bool:
    """Return False while the score-notification cooldown is running."""
    if last_time is None:
        return True
    if cooldown_hours is None:
        cooldown_hours = current_app.config.get("NOTIFICATION_COOLDOWN_HOURS", 4)
    now = now or utcnow()
    return now - last_time >= timedelta(hours=cooldown_hours)


def build_wellness_score_message(previous: Optional[int], current: int, threshold: int = 5) -> Optional[dict]:
    """Pick the notification (if any) for a score moving from ``previous`` to ``current``.

    ``previous`` is ``None`` for a user's first ever entry. The rules are
    checked in order and the first match wins.
    """
    if previous is None:
        return {
            "type": NotificationType.MILESTONE,
            "title": "Welcome to Wellness Tracking!",
            "message": (
                f"Your initial wellness score is {current}%. We'll help you track your mental health "
                "journey and notify you of important changes."
            ),
            "priority": Priority.LOW,
            "previous_score": 0,
            "current_score": current,
            "score_change": 0,
        }

    change = current - previous
    if abs(change) < threshold:
        return None

    if change >= 15:
        kind, priority, title, message = (
            NotificationType.IMPROVEMENT, Priority.MEDIUM, "Amazing Progress!",
            f"Your wellness score improved by {change} points to {current}%! "
            "You're doing fantastic. Keep up the great work!",
        )
    elif change >= 8:
        kind, priority, title, message = (
            NotificationType.IMPROVEMENT, Priority.LOW, "Great Improvement!",
            f"Your wellness score increased by {change} points to {current}%. "
            "Small steps lead to big changes!",
        )
    elif current >= 80 > previous:
        kind, priority, title, message = (
            NotificationType.MILESTONE, Priority.MEDIUM, "Excellent Wellness Achievement!",
            f"Congratulations! Your wellness score has reached {current}%. "
            "You're maintaining excellent mental health!",
        )
    elif current >= 70 > previous:
        kind, priority, title, message = (
            NotificationType.MILESTONE, Priority.MEDIUM, "Great Milestone Reached!",
            f"Well done! Your wellness score has improved to {current}%. You're on a great track!",
        )
    elif current < 30:
        kind, priority, title, message = (
            NotificationType.ALERT, Priority.HIGH, "We're Here to Support You",
            f"Your wellness score is {current}%. Remember, it's okay to have difficult days. "
            "Consider reaching out to a counselor for support.",
        )
    elif current < 50 <= previous:
        kind, priority, title, message = (
            NotificationType.ALERT, Priority.MEDIUM, "Wellness Check-In",
            f"Your wellness score has decreased to {current}%. Take some time for self-care today. "
            "Support resources are available if needed.",
        )
    elif change <= -15:
        kind, priority, title, message = (
            NotificationType.DECLINE, Priority.MEDIUM, "Let's Focus on Self-Care",
            f"Your wellness score decreased by {abs(change)} points to {current}%. "
            "Consider some relaxation techniques or speaking with someone you trust.",
        )
    elif change <= -8:
        kind, priority, title, message = (
            NotificationType.DECLINE, Priority.LOW, "Wellness Update",
            f"Your wellness score changed by {change} points to {current}%. "
            "It's normal to have ups and downs. Take care of yourself!",
        )
    else:
        return None

    return {
        "type": kind,
        "title": title,
        "message": message,
        "priority": priority,
        "previous_score": previous,
        "current_score": current,
        "score_change": change,
    }


def notify_wellness_score_change(user_id: int, previous: Optional[int], current: int) -> Optional[Notification]:
    prefs = get_preferences(user_id)
    if not prefs.enable_wellness_score_notifications:
        return None
    last = _last_scored_notification(user_id)
    if not should_create_notification(last.created_at if last else None):
        logger.debug("Score notification for user %s suppressed by cooldown", user_id)
        return None
    content = build_wellness_score_message(previous, current, prefs.min_score_change_threshold)
    if content is None:
        return None
    return create_notification(user_id, **content)


def build_streak_message(streak: int, label: str = "mood tracking") -> Optional[dict]:
    if streak not in STREAK_MILESTONES:
        return None
    if streak >= 100:
        return {
            "type": NotificationType.MILESTONE, "priority": Priority.HIGH, "title": "Incredible Streak!",
            "message": f"Amazing! You've maintained your {label} streak for {streak} days! "
                       "You're truly dedicated to your wellness journey.",
        }
    if streak >= 30:
        return {
            "type": NotificationType.MILESTONE, "priority": Priority.MEDIUM, "title": "Monthly Achievement!",
            "message": f"Outstanding! {streak} days of consistent {label}. "
                       "You're building amazing wellness habits!",
        }
    if streak >= 14:
        return {
            "type": NotificationType.MILESTONE, "priority": Priority.MEDIUM, "title": "Two Week Streak!",
            "message": f"Excellent work! You've been consistent with {label} for {streak} days. "
                       "Keep the momentum going!",
        }
    if streak >= 7:
        return {
            "type": NotificationType.MILESTONE, "priority": Priority.LOW, "title": "One Week Strong!",
            "message": f"Great job! You've maintained your {label} streak for a full week. "
                       "Consistency is key to wellness!",
        }
    return {
        "type": NotificationType.IMPROVEMENT, "priority": Priority.LOW, "title": "Building Good Habits!",
        "message": f"Nice work! {streak} days of {label}. You're developing a healthy routine!",
    }


def notify_streak(user_id: int, previous_streak: int, current_streak: int) -> Optional[Notification]:
    # A second entry on the same day does not extend the streak.
    if current_streak <= previous_streak:
        return None
    if not get_preferences(user_id).enable_streak_notifications:
        return None
    content = build_streak_message(current_streak)
    if content is None:
        return None
    return create_notification(user_id, **content)


GOAL_MESSAGES = {
    "sleep": ("Sleep Goal Achieved!",
              "Congratulations! You've completed your sleep goal: \"{title}\". "
              "Better sleep leads to better wellness!"),
    "exercise": ("Exercise Goal Completed!",
                 "Great job! You've achieved your exercise goal: \"{title}\". "
                 "Physical activity is great for your mental health!"),
    "mindfulness": ("Mindfulness Goal Achieved!",
                    "Well done! You've completed your mindfulness goal: \"{title}\". "
                    "Taking time for mental wellness is so important!"),
    "social": ("Social Goal Accomplished!",
               "Awesome! You've achieved your social goal: \"{title}\". "
               "Connecting with others supports your mental health!"),
}
DEFAULT_GOAL_MESSAGE = ("Goal Achieved!",
                        "Congratulations! You've completed your goal: \"{title}\". Every step forward counts!")


def notify_goal_completed(goal: WellnessGoal) -> Optional[Notification]:
    if not get_preferences(goal.user_id).enable_goal_completion_notifications:
        return None
    title, template = GOAL_MESSAGES.get((goal.category or "").lower(), DEFAULT_GOAL_MESSAGE)
    return create_notification(
        goal.user_id,
        NotificationType.MILESTONE,
        title,
        template.format(title=goal.title),
        priority=Priority.MEDIUM,
    )


PATTERN_MESSAGES = {
    "consistent_high": (NotificationType.IMPROVEMENT, Priority.LOW, "Sustained Positivity!",
                        "We've noticed you've been consistently feeling great! {details}. "
                        "Keep up whatever you're doing!"),
    "improving_trend": (NotificationType.IMPROVEMENT, Priority.LOW, "Positive Trend Detected!",
                        "Your mood has been steadily improving over time. {details}. "
                        "You're making great progress!"),
    "declining_trend": (NotificationType.ALERT, Priority.MEDIUM, "Wellness Check Needed",
                        "We've noticed your mood has been declining recently. {details}. "
                        "Consider some self-care or reaching out for support."),
    "volatile": (NotificationType.ALERT, Priority.MEDIUM, "Mood Swings Noticed",
                 "Your mood has been quite variable lately. {details}. "
                 "If this continues, consider talking to a counselor."),
}


def notify_mood_pattern(user_id: int, entries: Sequence[MoodEntry]) -> Optional[Notification]:
    if not get_preferences(user_id).enable_mood_pattern_notifications:
        return None
    pattern = detect_mood_pattern(entries)
    if pattern is None:
        return None
    kind, priority, title, template = PATTERN_MESSAGES[pattern]
    pattern_titles = [message[2] for message in PATTERN_MESSAGES.values()]
    latest = (
        Notification.query.filter(Notification.user_id == user_id, Notification.title.in_(pattern_titles))
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .first()
    )
    if latest is not None and latest.title == title:
        return None
    moods = ", ".join(e.mood_level.value.replace("_", " ") for e in reversed(list(entries)[:5]))
    details = f"Your last five check-ins were: {moods}"
    return create_notification(user_id, kind, title, template.format(details=details), priority=priority)
