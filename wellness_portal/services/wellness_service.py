"""Wellness score, streak and mood statistics.

These functions encapsulate the arithmetic behind the student
dashboards. Every value is recomputed from the entries passed in; the
functions never touch the session, which keeps the route handlers thin
and makes the calculations easy to unit test.

Entry lists are expected newest first, the order in which
``recent_entries`` returns them.
"""
from __future__ import annotations

from collections import Counter
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Sequence

from ..models import MoodEntry, MoodLevel, WellnessGoal, utcnow

DEFAULT_SCORE = 50
AT_RISK_THRESHOLD = 50
SCORE_WINDOW = 7
MAX_STREAK_DAYS = 365

MOOD_WEIGHT = 0.8
GOAL_WEIGHT = 0.2

MOOD_SCORES = {
    MoodLevel.VERY_LOW: 20,
    MoodLevel.LOW: 40,
    MoodLevel.NEUTRAL: 60,
    MoodLevel.GOOD: 80,
    MoodLevel.EXCELLENT: 100,
}

# 1-5 rating used for average mood.
MOOD_RATINGS = {
    MoodLevel.VERY_LOW: 1,
    MoodLevel.LOW: 2,
    MoodLevel.NEUTRAL: 3,
    MoodLevel.GOOD: 4,
    MoodLevel.EXCELLENT: 5,
}

MOOD_ENERGY = {
    MoodLevel.VERY_LOW: 2,
    MoodLevel.LOW: 3,
    MoodLevel.NEUTRAL: 5,
    MoodLevel.GOOD: 7,
    MoodLevel.EXCELLENT: 9,
}


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; scores round .5 upwards.
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


# ---------------------------------------------------------------------------
# Derived entry fields
# ---------------------------------------------------------------------------


def derive_energy_level(mood_level: MoodLevel, sleep_hours: float, stress_level: int) -> int:
    """Estimate an energy level (1-10) when the user did not report one."""
    if sleep_hours >= 7:
        sleep_bonus = 1
    elif sleep_hours >= 6:
        sleep_bonus = 0
    else:
        sleep_bonus = -1
    if stress_level > 7:
        stress_adjustment = -1
    elif stress_level > 5:
        stress_adjustment = 0
    else:
        stress_adjustment = 1
    return int(_clamp(MOOD_ENERGY[mood_level] + sleep_bonus + stress_adjustment, 1, 10))


def mood_from_sleep(hours: float, quality: int = 3) -> MoodLevel:
    points = 0
    if 7 <= hours <= 9:
        points += 3
    elif 6 <= hours <= 10:
        points += 2
    elif 5 <= hours <= 11:
        points += 1

    if quality >= 4:
        points += 2
    elif quality >= 3:
        points += 1

    if points >= 4:
        return MoodLevel.EXCELLENT
    if points >= 3:
        return MoodLevel.GOOD
    if points >= 2:
        return MoodLevel.NEUTRAL
    if points >= 1:
        return MoodLevel.LOW
    return MoodLevel.VERY_LOW


def energy_from_sleep(hours: float, quality: int = 3) -> int:
    energy = 5
    if 7 <= hours <= 9:
        energy += 3
    elif 6 <= hours <= 10:
        energy += 2
    elif 5 <= hours <= 11:
        energy += 1
    elif hours < 5:
        energy -= 2
    else:
        energy -= 1
    energy += quality - 3
    return int(_clamp(energy, 1, 10))


def stress_from_sleep(hours: float, quality: int = 3) -> int:
    stress = 5
    if hours < 6:
        stress += 2
    elif hours > 10:
        stress += 1
    elif 7 <= hours <= 9:
        stress -= 1
    stress += 3 - quality
    return int(_clamp(stress, 1, 10))


# ---------------------------------------------------------------------------
# Scores and streaks
# ---------------------------------------------------------------------------


def entry_score(entry: MoodEntry) -> int:
    """Raw, unclamped score contribution of a single entry."""
    mood_score = MOOD_SCORES[entry.mood_level]
    energy_bonus = (entry.energy_level - 5) * 2
    if entry.sleep_hours >= 7:
        sleep_bonus = 5
    elif entry.sleep_hours >= 6:
        sleep_bonus = 0
    else:
        sleep_bonus = -5
    stress_reduction = 10 - entry.stress_level
    return mood_score + energy_bonus + sleep_bonus + stress_reduction


def mood_component(entries: Sequence[MoodEntry], window: int = SCORE_WINDOW) -> int:
    """Average entry score over the ``window`` most recent entries, 0-100."""
    recent = list(entries)[:window]
    if not recent:
        return DEFAULT_SCORE
    average = sum(entry_score(e) for e in recent) / len(recent)
    return int(_clamp(_round_half_up(average), 0, 100))


def goal_completion_ratio(goals: Iterable[WellnessGoal]) -> Optional[float]:
    """Fraction of goals completed, or ``None`` when there are no goals."""
    goals = list(goals)
    if not goals:
        return None
    return sum(1 for g in goals if g.is_completed) / len(goals)


def calculate_wellness_score(
    entries: Sequence[MoodEntry],
    goals: Optional[Iterable[WellnessGoal]] = None,
    window: int = SCORE_WINDOW,
) -> int:
    """Compute a 0-100 wellness score.

    The mood component averages the most recent ``window`` entries; when
    the user has goals it is blended with the goal completion ratio
    using ``MOOD_WEIGHT`` and ``GOAL_WEIGHT``. Without entries the mood
    component is the neutral ``DEFAULT_SCORE``.

    Parameters
    ----------
    entries: Sequence[MoodEntry]
        The user's entries, newest first.
    goals: Iterable[WellnessGoal] | None
        The user's goals. ``None`` or empty leaves the mood component
        as the score.
    window: int, default 7
        How many of the most recent entries to consider.
    """
    mood = mood_component(entries, window)
    ratio = goal_completion_ratio(goals or [])
    if ratio is None:
        return mood
    blended = MOOD_WEIGHT * mood + GOAL_WEIGHT * ratio * 100
    return int(_clamp(_round_half_up(blended), 0, 100))


def calculate_mood_streak(entries: Iterable[MoodEntry], today: Optional[date] = None) -> int:
    """Count consecutive days, ending today, that have at least one entry."""
    today = today or utcnow().date()
    logged_days = {e.created_at.date() for e in entries}
    streak = 0
    day = today
    while streak < MAX_STREAK_DAYS and day in logged_days:
        streak += 1
        day -= timedelta(days=1)
    return streak


def calculate_wellness_streak(entries: Iterable[MoodEntry], today: Optional[date] = None) -> int:
    # Only mood and sleep check-ins count as wellness activity.
    return calculate_mood_streak(entries, today)


def average_mood_rating(entries: Sequence[MoodEntry], window: int = SCORE_WINDOW) -> float:
    recent = list(entries)[:window]
    if not recent:
        return 3.0
    return round(sum(MOOD_RATINGS[e.mood_level] for e in recent) / len(recent), 1)


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------


def _within(entries: Iterable[MoodEntry], days: int, now: datetime) -> List[MoodEntry]:
    cutoff = now - timedelta(days=days)
    return [e for e in entries if e.created_at > cutoff]


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0


def mood_stats(entries: Sequence[MoodEntry], days: int = 30, now: Optional[datetime] = None) -> dict:
    """Summarise mood entries logged in the last ``days`` days."""
    now = now or utcnow()
    window = _within(entries, days, now)
    counts = Counter(e.mood_level for e in window)
    # Counter.most_common keeps first-seen order for ties, i.e. newest first.
    distribution = [{"mood_level": level.value, "count": count} for level, count in counts.most_common()]
    return {
        "stats": {
            "total_entries": len(window),
            "avg_energy": _mean([e.energy_level for e in window]),
            "avg_sleep": _mean([e.sleep_hours for e in window]),
            "avg_stress": _mean([e.stress_level for e in window]),
            "most_common_mood": distribution[0]["mood_level"] if distribution else MoodLevel.NEUTRAL.value,
        },
        "mood_distribution": distribution,
        "mood_entries": list(entries)[:days],
    }


def sleep_stats(entries: Sequence[MoodEntry], days: int = 30, now: Optional[datetime] = None) -> dict:
    """Summarise sleep over ``days`` days plus a two-week daily pattern."""
    now = now or utcnow()
    window = _within(entries, days, now)
    hours = [e.sleep_hours for e in window]

    by_day: dict[date, list[MoodEntry]] = {}
    for entry in _within(entries, 14, now):
        by_day.setdefault(entry.created_at.date(), []).append(entry)
    pattern = [
        {
            "date": day.isoformat(),
            "sleep_hours": _mean([e.sleep_hours for e in day_entries]),
            "energy_level": _mean([e.energy_level for e in day_entries]),
        }
        for day, day_entries in sorted(by_day.items(), reverse=True)
    ]
    return {
        "stats": {
            "avg_sleep": _mean(hours),
            "min_sleep": min(hours) if hours else 0,
            "max_sleep": max(hours) if hours else 0,
            "avg_energy": _mean([e.energy_level for e in window]),
            "total_entries": len(window),
        },
        "sleep_pattern": pattern,
    }


def wellness_summary(
    entries: Sequence[MoodEntry],
    goals: Optional[Iterable[WellnessGoal]] = None,
    now: Optional[datetime] = None,
) -> dict:
    """Dashboard summary: score, streaks, recent activity and risk flag."""
    now = now or utcnow()
    score = calculate_wellness_score(entries, goals)
    streak = calculate_mood_streak(entries, now.date())
    return {
        "wellness_score": score,
        "mood_streak": streak,
        "wellness_streak": calculate_wellness_streak(entries, now.date()),
        "total_entries": len(_within(entries, 30, now)),
        "average_mood": average_mood_rating(entries),
        "last_entry_date": entries[0].created_at.isoformat() if entries else None,
        "is_at_risk": score < AT_RISK_THRESHOLD,
    }


# ---------------------------------------------------------------------------
# Mood patterns
# ---------------------------------------------------------------------------

PATTERN_WINDOW = 5


def detect_mood_pattern(entries: Sequence[MoodEntry], window: int = PATTERN_WINDOW) -> Optional[str]:
    """Classify the last ``window`` entries into a named mood pattern.

    Returns one of ``consistent_high``, ``improving_trend``,
    ``declining_trend`` or ``volatile``, or ``None`` when there is not
    enough data or nothing stands out.
    """
    recent = list(entries)[:window]
    if len(recent) < window:
        return None
    # Oldest first so that "rising" reads left to right.
    ratings = [MOOD_RATINGS[e.mood_level] for e in reversed(recent)]
    if all(r >= MOOD_RATINGS[MoodLevel.GOOD] for r in ratings):
        return "consistent_high"
    steps = list(zip(ratings, ratings[1:]))
    if all(b >= a for a, b in steps) and ratings[-1] - ratings[0] >= 2:
        return "improving_trend"
    if all(b <= a for a, b in steps) and ratings[0] - ratings[-1] >= 2:
        return "declining_trend"
    if max(ratings) - min(ratings) >= 3:
        return "volatile"
    return None
