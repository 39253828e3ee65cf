"""
Routes for wellness goals.

Students create and track their own goals; counselors can view and
manage the goals of any student. Completing a goal, either through the
progress endpoint or a direct update, raises a goal completion
notification for its owner.
"""

from __future__ import annotations

from flask import Blueprint, request
from flask_jwt_extended import jwt_required, current_user

from .. import db
from ..models import User, WellnessGoal
from ..schemas import WellnessGoalSchema, GoalInputSchema, GoalUpdateSchema
from ..security import is_counselor, require_self_or_counselor
from ..services import goal_service


goals_bp = Blueprint("goals", __name__)


def _get_goal(goal_id: int) -> WellnessGoal:
    goal = db.get_or_404(WellnessGoal, goal_id, description="Goal not found.")
    require_self_or_counselor(goal.user_id)
    return goal


def _newest_first(query):
    return query.order_by(WellnessGoal.created_at.desc(), WellnessGoal.id.desc()).all()


@goals_bp.route("/goals", methods=["GET"])
@jwt_required()
def list_goals() -> tuple[list[dict], int]:
    """Return the current user's goals; counselors see every goal."""
    query = WellnessGoal.query
    if not is_counselor():
        query = query.filter_by(user_id=current_user.id)
    return WellnessGoalSchema(many=True).dump(_newest_first(query)), 200


@goals_bp.route("/goals", methods=["POST"])
@jwt_required()
def create_goal() -> tuple[dict, int]:
    """Create a goal.

    Expects ``title`` (3-200 characters) with optional ``description``,
    ``category`` and ``target_date``. Counselors may set ``user_id`` to
    create a goal on behalf of a student.
    """
    data = GoalInputSchema().load(request.get_json(silent=True) or {})
    user_id = current_user.id
    if is_counselor() and data.get("user_id"):
        user_id = db.get_or_404(User, data["user_id"], description="User not found.").id
    goal = goal_service.create_goal(user_id, data)
    return WellnessGoalSchema().dump(goal), 201


@goals_bp.route("/goals/<int:goal_id>", methods=["GET"])
@jwt_required()
def get_goal(goal_id: int) -> tuple[dict, int]:
    return WellnessGoalSchema().dump(_get_goal(goal_id)), 200


@goals_bp.route("/goals/<int:goal_id>", methods=["PUT"])
@jwt_required()
def update_goal(goal_id: int) -> tuple[dict, int]:
    goal = _get_goal(goal_id)
    changes = GoalUpdateSchema().load(request.get_json(silent=True) or {})
    goal = goal_service.update_goal(goal, changes)
    return WellnessGoalSchema().dump(goal), 200


@goals_bp.route("/goals/<int:goal_id>/progress", methods=["PUT"])
@jwt_required()
def update_goal_progress(goal_id: int) -> tuple[dict, int]:
    """Set ``progress_percentage`` (0-100); 100 completes the goal."""
    goal = _get_goal(goal_id)
    data = request.get_json(silent=True) or {}
    goal = goal_service.update_progress(goal, data.get("progress_percentage"))
    return WellnessGoalSchema().dump(goal), 200


@goals_bp.route("/goals/<int:goal_id>", methods=["DELETE"])
@jwt_required()
def delete_goal(goal_id: int) -> tuple[dict, int]:
    goal = _get_goal(goal_id)
    db.session.delete(goal)
    db.session.commit()
    return {"success": True, "message": "Goal deleted successfully"}, 200


@goals_bp.route("/goals/user/<int:user_id>", methods=["GET"])
@jwt_required()
def user_goals(user_id: int) -> tuple[list[dict], int]:
    require_self_or_counselor(user_id)
    goals = _newest_first(WellnessGoal.query.filter_by(user_id=user_id))
    return WellnessGoalSchema(many=True).dump(goals), 200


@goals_bp.route("/goals/user/<int:user_id>/stats", methods=["GET"])
@jwt_required()
def user_goal_stats(user_id: int) -> tuple[dict, int]:
    """Totals, completion, overdue count and average progress."""
    require_self_or_counselor(user_id)
    goals = WellnessGoal.query.filter_by(user_id=user_id).all()
    return goal_service.goal_stats(goals), 200
