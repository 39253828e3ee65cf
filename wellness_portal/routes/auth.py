"""
Authentication routes for the Student Wellness Portal.

Provides endpoints for registering new users, logging in to obtain
JSON Web Tokens (JWTs), checking a token and logging out. Tokens are
required for accessing protected resources throughout the API.
"""

from __future__ import annotations

import logging

from flask import Blueprint, request
from flask_jwt_extended import jwt_required, current_user, get_jwt

from ..errors import ValidationError
from ..schemas import UserSchema, RegisterInputSchema
from ..security import issue_token, revoke_token
from ..services import account_service


auth_bp = Blueprint("auth", __name__)
logger = logging.getLogger(__name__)


@auth_bp.route("/auth/register", methods=["POST"])
def register() -> tuple[dict, int]:
    """Register a new user and log them in.

    Expects JSON with ``email``, ``password``, ``first_name``,
    ``last_name`` and ``role`` (``student`` or ``counselor``; ``admin``
    registers a counselor). Counselors must also send
    ``specialization``, ``experience``, ``license_number`` and
    ``qualifications``, either at the top level or inside
    ``profile_data``. Emails must be unique.
    """
    data = RegisterInputSchema().load(request.get_json(silent=True) or {})
    user = account_service.register_user(data)
    return {"success": True, "user": UserSchema().dump(user), "token": issue_token(user)}, 201


@auth_bp.route("/auth/login", methods=["POST"])
def login() -> tuple[dict, int]:
    """Authenticate a user and return a JWT.

    Expects JSON with ``email`` and ``password``. Invalid credentials and
    deactivated accounts return 401.
    """
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip()
    password = data.get("password") or ""
    if not email or not password:
        raise ValidationError("Email and password are required")
    user = account_service.authenticate(email, password)
    logger.info("User %s logged in", user.id)
    return {"success": True, "user": UserSchema().dump(user), "token": issue_token(user)}, 200


@auth_bp.route("/auth/verify", methods=["GET"])
@jwt_required()
def verify() -> tuple[dict, int]:
    """Return the user the presented token belongs to."""
    return {"success": True, "user": UserSchema().dump(current_user)}, 200


@auth_bp.route("/auth/logout", methods=["POST"])
@jwt_required()
def logout() -> tuple[dict, int]:
    """Revoke the presented token so it can no longer be used."""
    revoke_token(get_jwt()["jti"])
    logger.info("User %s logged out", current_user.id)
    return {"success": True, "message": "Logged out successfully"}, 200
