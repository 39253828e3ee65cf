"""Service layer for the Student Wellness Portal.

This package contains business logic that sits between the Flask
route handlers and the database models. Separating services into
their own modules keeps the routes thin and makes the core
calculations (wellness score, streaks, notification rules) easy to
unit test.

Nothing in this package performs any HTTP handling. Services return
plain Python data structures or model objects, and raise exceptions
defined in ``wellness_portal.errors`` when something goes wrong.
"""

from .wellness_service import (
    calculate_wellness_score,
    calculate_mood_streak,
    wellness_summary,
    mood_stats,
    sleep_stats,
)
from .mood_service import record_mood_entry, record_sleep_entry, recent_entries
from .goal_service import goal_stats
from .analytics_service import portal_analytics

__all__ = [
    "calculate_wellness_score",
    "calculate_mood_streak",
    "wellness_summary",
    "mood_stats",
    "sleep_stats",
    "record_mood_entry",
    "record_sleep_entry",
    "recent_entries",
    "goal_stats",
    "portal_analytics",
]
