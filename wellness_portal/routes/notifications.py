"""
Routes for in-app notifications and notification preferences.

Most notifications are raised automatically when a student logs a
check-in or completes a goal. These endpoints let users read, mark and
delete them, and let counselors post messages to students directly.
"""

from __future__ import annotations

from flask import Blueprint, request
from flask_jwt_extended import jwt_required, current_user

from .. import db
from ..errors import ValidationError
from ..models import Notification, User
from ..schemas import NotificationSchema, NotificationInputSchema, NotificationPreferenceSchema
from ..security import is_counselor, require_counselor, require_self_or_counselor
from ..services import notification_service


notifications_bp = Blueprint("notifications", __name__)


def _get_notification(notification_id: int) -> Notification:
    notification = db.get_or_404(Notification, notification_id, description="Notification not found.")
    require_self_or_counselor(notification.user_id)
    return notification


def _for_user(user_id: int, limit: int | None = None) -> list[Notification]:
    query = Notification.query.filter_by(user_id=user_id).order_by(
        Notification.created_at.desc(), Notification.id.desc()
    )
    if limit:
        query = query.limit(limit)
    return query.all()


def _positive_int_arg(name: str, default: int) -> int:
    value = request.args.get(name, default)
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {name} parameter.", {name: value})
    if number < 1:
        raise ValidationError(f"{name} must be a positive number.", {name: value})
    return number


@notifications_bp.route("/notifications", methods=["GET"])
@jwt_required()
def list_notifications() -> tuple[list[dict], int]:
    """Return the current user's notifications, newest first (``limit`` 50)."""
    notifications = _for_user(current_user.id, _positive_int_arg("limit", 50))
    return NotificationSchema(many=True).dump(notifications), 200


@notifications_bp.route("/notifications", methods=["POST"])
@jwt_required()
def create_notification() -> tuple[dict, int]:
    """Create a notification.

    Expects ``type``, ``title`` and ``message`` with optional
    ``priority`` and score fields. Counselors may address another user
    with ``target_user_id``; everyone else notifies themselves.
    """
    data = NotificationInputSchema().load(request.get_json(silent=True) or {})
    user_id = current_user.id
    if is_counselor() and data.get("target_user_id"):
        user_id = db.get_or_404(User, data["target_user_id"], description="User not found.").id
    notification = notification_service.create_notification(
        user_id,
        data["type"],
        data["title"],
        data["message"],
        priority=data["priority"],
        previous_score=data.get("previous_score"),
        current_score=data.get("current_score"),
        score_change=data.get("score_change"),
    )
    db.session.commit()
    return NotificationSchema().dump(notification), 201


@notifications_bp.route("/notifications/unread-count", methods=["GET"])
@jwt_required()
def unread_count() -> tuple[dict, int]:
    count = Notification.query.filter_by(user_id=current_user.id, is_read=False).count()
    return {"unread_count": count}, 200


@notifications_bp.route("/notifications/cleanup", methods=["DELETE"])
@jwt_required()
def cleanup_notifications() -> tuple[dict, int]:
    """Delete notifications older than ``days`` days (default 30). Counselors only."""
    require_counselor()
    deleted = notification_service.delete_old_notifications(_positive_int_arg("days", 30))
    db.session.commit()
    return {"success": True, "deleted_count": deleted}, 200


@notifications_bp.route("/notifications/<int:notification_id>", methods=["GET"])
@jwt_required()
def get_notification(notification_id: int) -> tuple[dict, int]:
    return NotificationSchema().dump(_get_notification(notification_id)), 200


@notifications_bp.route("/notifications/<int:notification_id>", methods=["PUT"])
@jwt_required()
def mark_notification_read(notification_id: int) -> tuple[dict, int]:
    notification = _get_notification(notification_id)
    notification.is_read = True
    db.session.commit()
    return NotificationSchema().dump(notification), 200


@notifications_bp.route("/notifications/<int:notification_id>", methods=["DELETE"])
@jwt_required()
def delete_notification(notification_id: int) -> tuple[dict, int]:
    notification = _get_notification(notification_id)
    db.session.delete(notification)
    db.session.commit()
    return {"success": True, "message": "Notification deleted successfully"}, 200


@notifications_bp.route("/notifications/user/<int:user_id>", methods=["GET"])
@jwt_required()
def user_notifications(user_id: int) -> tuple[list[dict], int]:
    require_self_or_counselor(user_id)
    return NotificationSchema(many=True).dump(_for_user(user_id)), 200


@notifications_bp.route("/notifications/user/<int:user_id>", methods=["PUT"])
@jwt_required()
def mark_all_read(user_id: int) -> tuple[dict, int]:
    """Mark every unread notification of ``user_id`` as read."""
    require_self_or_counselor(user_id)
    updated = Notification.query.filter_by(user_id=user_id, is_read=False).update(
        {Notification.is_read: True}, synchronize_session=False
    )
    db.session.commit()
    return {"success": True, "updated_count": updated}, 200


@notifications_bp.route("/notification-preferences", methods=["GET"])
@jwt_required()
def get_preferences() -> tuple[dict, int]:
    prefs = notification_service.get_preferences(current_user.id)
    db.session.commit()
    return NotificationPreferenceSchema().dump(prefs), 200


@notifications_bp.route("/notification-preferences", methods=["PUT"])
@jwt_required()
def update_preferences() -> tuple[dict, int]:
    """Update preferences; values of the wrong type or range are ignored."""
    data = request.get_json(silent=True) or {}
    prefs = notification_service.update_preferences(current_user.id, data)
    db.session.commit()
    return NotificationPreferenceSchema().dump(prefs), 200
