"""Tests for notifications and notification preferences."""
from __future__ import annotations

from datetime import timedelta

from conftest import auth

from wellness_portal import db
from wellness_portal.models import Notification, utcnow


def post(client, token, **body):
    body.setdefault("type", "alert")
    body.setdefault("title", "Check in")
    body.setdefault("message", "How are you doing today?")
    return client.post("/api/notifications", headers=auth(token), json=body)


def test_create_and_list(client, student):
    token, user = student
    response = post(client, token, priority="high")
    assert response.status_code == 201
    notification = response.get_json()
    assert notification["user_id"] == user["id"]
    assert notification["priority"] == "high"
    assert notification["is_read"] is False
    assert len(client.get("/api/notifications", headers=auth(token)).get_json()) == 1


def test_create_validation(client, student):
    token, _ = student
    assert post(client, token, type="gossip").status_code == 400
    assert post(client, token, priority="urgent").status_code == 400
    assert client.post("/api/notifications", headers=auth(token), json={"type": "alert"}).status_code == 400


def test_counselor_targets_student(client, student, counselor):
    student_token, user = student
    token, _ = counselor
    response = post(client, token, target_user_id=user["id"])
    assert response.get_json()["user_id"] == user["id"]
    assert client.get("/api/notifications/unread-count", headers=auth(student_token)).get_json() == {
        "unread_count": 1
    }


def test_limit_parameter(client, student):
    token, _ = student
    for i in range(3):
        post(client, token, title=f"Note {i}")
    notifications = client.get("/api/notifications?limit=2", headers=auth(token)).get_json()
    assert [n["title"] for n in notifications] == ["Note 2", "Note 1"]
    assert client.get("/api/notifications?limit=abc", headers=auth(token)).status_code == 400


def test_mark_read_and_delete(client, register):
    token, _ = register("student")
    other_token, _ = register("student")
    notification_id = post(client, token).get_json()["id"]

    assert client.put(f"/api/notifications/{notification_id}", headers=auth(other_token)).status_code == 403
    response = client.put(f"/api/notifications/{notification_id}", headers=auth(token))
    assert response.get_json()["is_read"] is True
    assert client.get("/api/notifications/unread-count", headers=auth(token)).get_json()["unread_count"] == 0

    assert client.delete(f"/api/notifications/{notification_id}", headers=auth(token)).status_code == 200
    assert client.get(f"/api/notifications/{notification_id}", headers=auth(token)).status_code == 404


def test_mark_all_read(client, student):
    token, user = student
    post(client, token)
    post(client, token)
    response = client.put(f"/api/notifications/user/{user['id']}", headers=auth(token))
    assert response.get_json()["updated_count"] == 2
    listing = client.get(f"/api/notifications/user/{user['id']}", headers=auth(token)).get_json()
    assert all(n["is_read"] for n in listing)


def test_cleanup_removes_old_notifications(app, client, student, counselor):
    token, user = student
    counselor_token, _ = counselor
    old_id = post(client, token, title="Old news").get_json()["id"]
    post(client, token, title="Fresh news")
    with app.app_context():
        notification = db.session.get(Notification, old_id)
        notification.created_at = utcnow() - timedelta(days=45)
        db.session.commit()

    assert client.delete("/api/notifications/cleanup", headers=auth(token)).status_code == 403
    response = client.delete("/api/notifications/cleanup?days=30", headers=auth(counselor_token))
    assert response.get_json()["deleted_count"] == 1
    titles = [n["title"] for n in client.get("/api/notifications", headers=auth(token)).get_json()]
    assert titles == ["Fresh news"]


def test_preferences_defaults(client, student):
    token, user = student
    prefs = client.get("/api/notification-preferences", headers=auth(token)).get_json()
    assert prefs["user_id"] == user["id"]
    assert prefs["enable_wellness_score_notifications"] is True
    assert prefs["enable_daily_reminders"] is False
    assert prefs["reminder_time"] == "20:00"
    assert prefs["email_notifications"] is False
    assert prefs["push_notifications"] is True
    assert prefs["frequency"] == "immediate"
    assert prefs["min_score_change_threshold"] == 5
    assert prefs["quiet_hours"] == {"enabled": False, "start_time": "22:00", "end_time": "08:00"}


def test_preferences_ignore_bad_values(client, student):
    token, _ = student
    response = client.put("/api/notification-preferences", headers=auth(token), json={
        "enable_streak_notifications": False,
        "email_notifications": "yes",
        "reminder_time": "7pm",
        "frequency": "hourly",
        "min_score_change_threshold": 10,
        "quiet_hours": {"enabled": True, "start_time": "23:00", "end_time": "late"},
    })
    prefs = response.get_json()
    assert prefs["enable_streak_notifications"] is False
    assert prefs["email_notifications"] is False
    assert prefs["reminder_time"] == "20:00"
    assert prefs["frequency"] == "immediate"
    assert prefs["min_score_change_threshold"] == 10
    assert prefs["quiet_hours"] == {"enabled": True, "start_time": "23:00", "end_time": "08:00"}

    response = client.put("/api/notification-preferences", headers=auth(token),
                          json={"min_score_change_threshold": 90, "frequency": "weekly"})
    prefs = response.get_json()
    assert prefs["min_score_change_threshold"] == 10
    assert prefs["frequency"] == "weekly"
    # Saved, not just echoed back.
    assert client.get("/api/notification-preferences", headers=auth(token)).get_json()["frequency"] == "weekly"
