"""Authentication and authorisation helpers.

Access tokens are issued by Flask-JWT-Extended with the user id as the
subject and the role as an additional claim. The callbacks registered
here resolve the token to a ``User`` row (rejecting deactivated
accounts) and reject tokens that were revoked on logout.

Route handlers use ``current_user`` together with the small ownership
helpers below instead of repeating role checks inline.
"""
from __future__ import annotations

from flask import jsonify
from flask_jwt_extended import create_access_token, current_user

from . import db
from .errors import ForbiddenError
from .models import User, Role, TokenBlocklist


def issue_token(user: User) -> str:
    """Create an access token carrying the user's id and role."""
    return create_access_token(identity=str(user.id), additional_claims={"role": user.role.value})


def revoke_token(jti: str) -> None:
    db.session.add(TokenBlocklist(jti=jti))
    db.session.commit()


def register_jwt_callbacks(jwt) -> None:
    """Wire user lookup, revocation and error responses into ``jwt``."""

    @jwt.user_lookup_loader
    def load_user(_jwt_header, jwt_data):
        user = db.session.get(User, int(jwt_data["sub"]))
        if user is None or not user.is_active:
            return None
        return user

    @jwt.token_in_blocklist_loader
    def is_revoked(_jwt_header, jwt_payload) -> bool:
        jti = jwt_payload["jti"]
        return db.session.query(TokenBlocklist.id).filter_by(jti=jti).scalar() is not None

    def _unauthorized(message: str):
        return jsonify({"error": {"code": "UNAUTHORIZED", "message": message}}), 401

    @jwt.user_lookup_error_loader
    def user_lookup_error(_jwt_header, _jwt_data):
        return _unauthorized("Invalid token")

    @jwt.revoked_token_loader
    def revoked_token(_jwt_header, _jwt_payload):
        return _unauthorized("Token has been revoked")

    @jwt.expired_token_loader
    def expired_token(_jwt_header, _jwt_payload):
        return _unauthorized("Token expired")

    @jwt.invalid_token_loader
    def invalid_token(reason: str):
        return _unauthorized("Invalid token")

    @jwt.unauthorized_loader
    def missing_token(reason: str):
        return _unauthorized("Authorization token required")


def is_counselor() -> bool:
    """Return True if the current user is a counselor."""
    return current_user.role == Role.COUNSELOR


def is_self(user_id: int) -> bool:
    """Return True if the current user matches the given ``user_id``."""
    return current_user.id == user_id


def require_counselor() -> None:
    if not is_counselor():
        raise ForbiddenError("Counselor access required")


def require_role(role: Role) -> None:
    if current_user.role != role:
        raise ForbiddenError(f"Access denied: {role.value.capitalize()} role required")


def require_self_or_counselor(user_id: int) -> None:
    """Owners may always access their own data; counselors may access anyone's."""
    if not (is_counselor() or is_self(user_id)):
        raise ForbiddenError("Access denied")
