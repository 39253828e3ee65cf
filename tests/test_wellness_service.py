"""Unit tests for the wellness calculations. No database is involved."""
from __future__ import annotations

from datetime import datetime, timedelta

from wellness_portal.models import MoodEntry, MoodLevel, WellnessGoal
from wellness_portal.services import wellness_service as ws

NOW = datetime(2024, 5, 20, 12, 0, 0)


def entry(mood="good", energy=7, sleep=8.0, stress=3, days_ago=0, hours_ago=0):
    return MoodEntry(
        user_id=1,
        mood_level=MoodLevel(mood),
        energy_level=energy,
        sleep_hours=sleep,
        stress_level=stress,
        created_at=NOW - timedelta(days=days_ago, hours=hours_ago),
    )


def goal(completed: bool, progress: int = 0):
    return WellnessGoal(user_id=1, title="Walk daily", is_completed=completed, progress_percentage=progress)


def test_entry_score_adds_all_components():
    # 80 mood + 4 energy + 5 sleep + 7 stress reduction
    assert ws.entry_score(entry()) == 96
    assert ws.entry_score(entry("very_low", energy=1, sleep=3, stress=10)) == 7


def test_score_defaults_to_fifty_without_entries():
    assert ws.calculate_wellness_score([]) == 50


def test_score_averages_and_rounds_half_up():
    entries = [entry(), entry("neutral", energy=5, sleep=6.5, stress=5, days_ago=1)]
    # (96 + 65) / 2 = 80.5
    assert ws.calculate_wellness_score(entries) == 81


def test_score_is_clamped_to_one_hundred():
    assert ws.calculate_wellness_score([entry("excellent", energy=10, sleep=8, stress=1)]) == 100


def test_score_only_uses_seven_most_recent_entries():
    recent = [entry(days_ago=i) for i in range(7)]
    older = [entry("very_low", energy=1, sleep=3, stress=10, days_ago=10)]
    assert ws.calculate_wellness_score(recent + older) == 96


def test_goals_are_blended_into_score():
    goals = [goal(True, 100), goal(False, 40)]
    # 0.8 * 96 + 0.2 * 50
    assert ws.calculate_wellness_score([entry()], goals) == 87


def test_no_goals_leaves_mood_component_alone():
    assert ws.calculate_wellness_score([entry()], []) == 96


def test_derive_energy_level():
    assert ws.derive_energy_level(MoodLevel.GOOD, 8, 3) == 9
    assert ws.derive_energy_level(MoodLevel.NEUTRAL, 6, 6) == 5
    assert ws.derive_energy_level(MoodLevel.VERY_LOW, 4, 9) == 1
    assert ws.derive_energy_level(MoodLevel.EXCELLENT, 8, 2) == 10


def test_mood_from_sleep():
    assert ws.mood_from_sleep(8, 3) == MoodLevel.EXCELLENT
    assert ws.mood_from_sleep(8, 1) == MoodLevel.GOOD
    assert ws.mood_from_sleep(5.5, 3) == MoodLevel.NEUTRAL
    assert ws.mood_from_sleep(5.5, 2) == MoodLevel.LOW
    assert ws.mood_from_sleep(4, 1) == MoodLevel.VERY_LOW


def test_energy_and_stress_from_sleep():
    assert ws.energy_from_sleep(8, 3) == 8
    assert ws.energy_from_sleep(4, 1) == 1
    assert ws.energy_from_sleep(12, 5) == 6
    assert ws.stress_from_sleep(8, 3) == 4
    assert ws.stress_from_sleep(4, 1) == 9
    assert ws.stress_from_sleep(11, 3) == 6


def test_streak_counts_consecutive_days_ending_today():
    entries = [entry(days_ago=0), entry(days_ago=0, hours_ago=2), entry(days_ago=1), entry(days_ago=2),
               entry(days_ago=4)]
    assert ws.calculate_mood_streak(entries, NOW.date()) == 3


def test_streak_is_zero_without_entry_today():
    assert ws.calculate_mood_streak([entry(days_ago=1), entry(days_ago=2)], NOW.date()) == 0


def test_streak_is_capped():
    entries = [entry(days_ago=i) for i in range(400)]
    assert ws.calculate_mood_streak(entries, NOW.date()) == ws.MAX_STREAK_DAYS


def test_average_mood_rating():
    assert ws.average_mood_rating([]) == 3.0
    assert ws.average_mood_rating([entry("good"), entry("excellent"), entry("low")]) == 3.7


def test_mood_stats_window_and_distribution():
    entries = [entry("good"), entry("good", days_ago=1), entry("low", days_ago=2), entry("excellent", days_ago=40)]
    result = ws.mood_stats(entries, days=30, now=NOW)
    assert result["stats"]["total_entries"] == 3
    assert result["stats"]["most_common_mood"] == "good"
    assert result["mood_distribution"][0] == {"mood_level": "good", "count": 2}
    assert len(result["mood_entries"]) == 4


def test_mood_stats_default_mood_without_entries():
    result = ws.mood_stats([], now=NOW)
    assert result["stats"]["most_common_mood"] == "neutral"
    assert result["stats"]["total_entries"] == 0


def test_sleep_stats():
    entries = [entry(sleep=8), entry(sleep=6, days_ago=1), entry(sleep=4, days_ago=20)]
    result = ws.sleep_stats(entries, days=30, now=NOW)
    assert result["stats"]["min_sleep"] == 4
    assert result["stats"]["max_sleep"] == 8
    assert result["stats"]["avg_sleep"] == 6
    # Only the last fourteen days are part of the pattern, newest day first.
    assert [day["sleep_hours"] for day in result["sleep_pattern"]] == [8, 6]


def test_wellness_summary_flags_risk():
    low = [entry("very_low", energy=1, sleep=3, stress=10)]
    summary = ws.wellness_summary(low, [], now=NOW)
    assert summary["is_at_risk"] is True
    assert summary["mood_streak"] == 1
    assert summary["wellness_streak"] == 1
    assert summary["average_mood"] == 1.0


def test_wellness_summary_without_entries():
    summary = ws.wellness_summary([], [], now=NOW)
    assert summary["wellness_score"] == 50
    assert summary["is_at_risk"] is False
    assert summary["last_entry_date"] is None


def newest_first(*moods):
    """Build entries from oldest to newest mood and return them newest first."""
    return [entry(mood, hours_ago=i) for i, mood in enumerate(reversed(moods))]


def test_detect_consistent_high():
    assert ws.detect_mood_pattern(newest_first("good", "excellent", "good", "good", "excellent")) == "consistent_high"


def test_detect_improving_and_declining_trends():
    assert ws.detect_mood_pattern(newest_first("very_low", "low", "neutral", "neutral", "good")) == "improving_trend"
    assert ws.detect_mood_pattern(newest_first("good", "neutral", "neutral", "low", "very_low")) == "declining_trend"


def test_detect_volatile():
    assert ws.detect_mood_pattern(newest_first("very_low", "excellent", "low", "good", "neutral")) == "volatile"


def test_no_pattern_for_short_or_flat_history():
    assert ws.detect_mood_pattern(newest_first("good", "good", "good")) is None
    assert ws.detect_mood_pattern(newest_first(*["neutral"] * 5)) is None
