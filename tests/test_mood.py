"""Tests for mood and sleep check-ins and the triggers they fire."""
from __future__ import annotations

from datetime import timedelta

from conftest import auth

from wellness_portal import db
from wellness_portal.models import MoodEntry, MoodLevel, utcnow

GOOD_DAY = {"mood_level": "good", "energy_level": 7, "sleep_hours": 8, "stress_level": 3}
BAD_DAY = {"mood_level": "very_low", "energy_level": 1, "sleep_hours": 3, "stress_level": 10}


def titles(client, token):
    return [n["title"] for n in client.get("/api/notifications", headers=auth(token)).get_json()]


def test_create_mood_entry_derives_energy(client, student):
    token, user = student
    response = client.post("/api/mood-entries", headers=auth(token), json={
        "mood_level": "good", "sleep_hours": 8, "stress_level": 3, "notes": "<b>Nice</b> day",
    })
    assert response.status_code == 201
    entry = response.get_json()
    assert entry["user_id"] == user["id"]
    assert entry["energy_level"] == 9
    assert entry["mood_level"] == "good"
    assert entry["notes"] == "Nice day"


def test_mood_entry_validation(client, student):
    token, _ = student
    response = client.post("/api/mood-entries", headers=auth(token),
                           json={"mood_level": "ecstatic", "sleep_hours": 8, "stress_level": 3})
    assert response.status_code == 400
    assert "mood_level" in response.get_json()["error"]["fields"]
    response = client.post("/api/mood-entries", headers=auth(token),
                           json={"mood_level": "good", "sleep_hours": 30, "stress_level": 3})
    assert response.status_code == 400
    response = client.post("/api/mood-entries", headers=auth(token),
                           json={"mood_level": "good", "sleep_hours": 8, "stress_level": 11})
    assert response.status_code == 400


def test_sleep_entry_is_stored_as_mood_entry(client, student):
    token, _ = student
    response = client.post("/api/sleep-entries", headers=auth(token), json={"sleep_hours": 8})
    assert response.status_code == 201
    entry = response.get_json()
    assert entry["mood_level"] == "excellent"
    assert entry["energy_level"] == 8
    assert entry["stress_level"] == 4

    response = client.post("/api/sleep-entries", headers=auth(token), json={"sleep_hours": 4, "sleep_quality": 1})
    entry = response.get_json()
    assert entry["mood_level"] == "very_low"
    assert entry["energy_level"] == 1
    assert entry["stress_level"] == 9


def test_first_entry_sends_welcome_then_score_changes_notify(client, student):
    token, _ = student
    client.post("/api/mood-entries", headers=auth(token), json=GOOD_DAY)
    assert titles(client, token) == ["Welcome to Wellness Tracking!"]

    # (96 + 7) / 2 rounds to 52: a 44 point drop.
    client.post("/api/mood-entries", headers=auth(token), json=BAD_DAY)
    assert titles(client, token)[0] == "Let's Focus on Self-Care"


def test_cooldown_suppresses_score_notifications(app, client, student):
    app.config["NOTIFICATION_COOLDOWN_HOURS"] = 4
    token, _ = student
    client.post("/api/mood-entries", headers=auth(token), json=GOOD_DAY)
    client.post("/api/mood-entries", headers=auth(token), json=BAD_DAY)
    assert titles(client, token) == ["Welcome to Wellness Tracking!"]


def test_disabled_preference_skips_score_notifications(client, student):
    token, _ = student
    client.put("/api/notification-preferences", headers=auth(token),
               json={"enable_wellness_score_notifications": False})
    client.post("/api/mood-entries", headers=auth(token), json=GOOD_DAY)
    assert titles(client, token) == []


def test_declining_pattern_is_reported_once(client, student):
    token, _ = student
    client.put("/api/notification-preferences", headers=auth(token),
               json={"enable_wellness_score_notifications": False})
    for mood in ("good", "neutral", "low", "low", "very_low"):
        client.post("/api/mood-entries", headers=auth(token),
                    json={"mood_level": mood, "sleep_hours": 7, "stress_level": 5})
    assert titles(client, token) == ["Wellness Check Needed"]
    client.post("/api/mood-entries", headers=auth(token),
                json={"mood_level": "very_low", "sleep_hours": 7, "stress_level": 5})
    assert titles(client, token) == ["Wellness Check Needed"]


def test_counselor_logs_for_student(client, student, counselor):
    _, user = student
    token, _ = counselor
    response = client.post("/api/mood-entries", headers=auth(token), json={**GOOD_DAY, "user_id": user["id"]})
    assert response.status_code == 201
    assert response.get_json()["user_id"] == user["id"]


def test_student_cannot_log_for_someone_else(client, register):
    token, user = register("student")
    _, other = register("student")
    response = client.post("/api/mood-entries", headers=auth(token), json={**GOOD_DAY, "user_id": other["id"]})
    assert response.get_json()["user_id"] == user["id"]


def test_entries_listing_and_access(client, register, counselor):
    token, user = register("student")
    other_token, _ = register("student")
    for _ in range(3):
        client.post("/api/mood-entries", headers=auth(token), json=GOOD_DAY)

    response = client.get(f"/api/mood-entries/user/{user['id']}?limit=2", headers=auth(token))
    assert len(response.get_json()) == 2
    assert client.get(f"/api/mood-entries/user/{user['id']}", headers=auth(other_token)).status_code == 403
    counselor_token, _ = counselor
    assert client.get(f"/api/mood-entries/user/{user['id']}", headers=auth(counselor_token)).status_code == 200


def test_get_and_delete_entry(client, student):
    token, _ = student
    entry_id = client.post("/api/mood-entries", headers=auth(token), json=GOOD_DAY).get_json()["id"]
    assert client.get(f"/api/mood-entries/{entry_id}", headers=auth(token)).status_code == 200
    assert client.delete(f"/api/mood-entries/{entry_id}", headers=auth(token)).status_code == 200
    response = client.get(f"/api/mood-entries/{entry_id}", headers=auth(token))
    assert response.status_code == 404
    assert response.get_json()["error"]["code"] == "NOT_FOUND"


def test_stats_endpoints(client, student):
    token, user = student
    client.post("/api/mood-entries", headers=auth(token), json=GOOD_DAY)
    client.post("/api/mood-entries", headers=auth(token), json=GOOD_DAY)

    mood = client.get(f"/api/mood-entries/user/{user['id']}/stats", headers=auth(token)).get_json()
    assert mood["stats"]["total_entries"] == 2
    assert mood["stats"]["most_common_mood"] == "good"
    assert mood["mood_entries"][0]["mood_level"] == "good"

    sleep = client.get(f"/api/mood-entries/user/{user['id']}/stats?type=sleep&days=7", headers=auth(token))
    assert sleep.get_json()["stats"]["avg_sleep"] == 8

    bad = client.get(f"/api/mood-entries/user/{user['id']}/stats?type=dreams", headers=auth(token))
    assert bad.status_code == 400


def test_wellness_summary(client, student):
    token, user = student
    empty = client.get(f"/api/wellness/user/{user['id']}", headers=auth(token)).get_json()
    assert empty["wellness_score"] == 50
    assert empty["mood_streak"] == 0

    client.post("/api/mood-entries", headers=auth(token), json=GOOD_DAY)
    summary = client.get(f"/api/wellness/user/{user['id']}", headers=auth(token)).get_json()
    assert summary["wellness_score"] == 96
    assert summary["mood_streak"] == 1
    assert summary["average_mood"] == 4.0
    assert summary["is_at_risk"] is False

    client.post("/api/goals", headers=auth(token), json={"title": "Sleep by eleven"})
    summary = client.get(f"/api/wellness/user/{user['id']}", headers=auth(token)).get_json()
    # 0.8 * 96 with no goals completed
    assert summary["wellness_score"] == 77


def backdate_entries(app, user_id, days):
    with app.app_context():
        for days_ago in days:
            db.session.add(MoodEntry(
                user_id=user_id, mood_level=MoodLevel.GOOD, energy_level=7, sleep_hours=8, stress_level=3,
                created_at=utcnow() - timedelta(days=days_ago),
            ))
        db.session.commit()


def test_pattern_not_repeated_when_score_notifications_interleave(client, student):
    token, _ = student
    tired_but_good = {"mood_level": "good", "energy_level": 2, "sleep_hours": 4, "stress_level": 9}
    for _ in range(5):
        client.post("/api/mood-entries", headers=auth(token), json=tired_but_good)
    client.post("/api/mood-entries", headers=auth(token),
                json={"mood_level": "excellent", "energy_level": 10, "sleep_hours": 8, "stress_level": 1})
    seen = titles(client, token)
    assert "Great Improvement!" in seen
    assert seen.count("Sustained Positivity!") == 1


def test_streak_milestone_after_earlier_days(app, client, student):
    token, user = student
    backdate_entries(app, user["id"], (1, 2))
    client.post("/api/mood-entries", headers=auth(token), json=GOOD_DAY)
    assert "Building Good Habits!" in titles(client, token)

    # A second check-in on the same day does not extend the streak.
    client.post("/api/mood-entries", headers=auth(token), json=GOOD_DAY)
    assert titles(client, token).count("Building Good Habits!") == 1


def test_disabled_streak_preference(app, client, student):
    token, user = student
    client.put("/api/notification-preferences", headers=auth(token),
               json={"enable_streak_notifications": False})
    backdate_entries(app, user["id"], (1, 2))
    client.post("/api/mood-entries", headers=auth(token), json=GOOD_DAY)
    assert "Building Good Habits!" not in titles(client, token)


def test_disabled_pattern_preference(client, student):
    token, _ = student
    client.put("/api/notification-preferences", headers=auth(token), json={
        "enable_wellness_score_notifications": False,
        "enable_mood_pattern_notifications": False,
    })
    for mood in ("good", "neutral", "low", "low", "very_low"):
        client.post("/api/mood-entries", headers=auth(token),
                    json={"mood_level": mood, "sleep_hours": 7, "stress_level": 5})
    assert titles(client, token) == []


def test_counselor_cannot_log_for_another_counselor(client, register):
    token, _ = register("counselor")
    _, colleague = register("counselor")
    response = client.post("/api/mood-entries", headers=auth(token), json={**GOOD_DAY, "user_id": colleague["id"]})
    assert response.status_code == 400
    response = client.post("/api/sleep-entries", headers=auth(token), json={"sleep_hours": 7, "user_id": colleague["id"]})
    assert response.status_code == 400
