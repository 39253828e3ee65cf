"""User registration, authentication and profile updates."""
from __future__ import annotations

import logging
from typing import Optional

from .. import db
from ..errors import ConflictError, UnauthorizedError, ValidationError
from ..models import Role, User, utcnow
from ..util.sanitization import clean_optional

logger = logging.getLogger(__name__)

COUNSELOR_REQUIRED = {
    "specialization": "Specialization is required for counselors",
    "experience": "Experience is required for counselors",
    "license_number": "License number is required for counselors",
    "qualifications": "Qualifications are required for counselors",
}

OPTIONAL_PROFILE_FIELDS = (
    "phone",
    "hostel_name",
    "room_number",
    "course",
    "date_of_birth",
    "department",
    "emergency_contact",
    "specialization",
    "experience",
    "license_number",
    "qualifications",
)

MIN_PASSWORD_LENGTH = 6


def find_by_email(email: str) -> Optional[User]:
    return User.query.filter(db.func.lower(User.email) == email.strip().lower()).first()


def parse_role(value: Optional[str]) -> Role:
    """Map a requested role onto the two supported ones."""
    role_str = (value or "").strip().lower()
    # There is no admin role; admins register as counselors.
    if role_str == "admin":
        role_str = Role.COUNSELOR.value
    try:
        return Role(role_str)
    except ValueError:
        raise ValidationError("Invalid role. Only student and counselor are allowed.", {"role": role_str})


def next_student_id() -> str:
    count = User.query.filter_by(role=Role.STUDENT).count()
    return f"STU{count + 1:03d}"


def _parse_year(value) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(str(value))
    except ValueError:
        raise ValidationError("year_of_study must be a whole number.", {"year_of_study": value})


def register_user(data: dict) -> User:
    """Create a student or counselor account from a registration body.

    Counselor-only fields may also be sent inside a nested
    ``profile_data`` object.
    """
    required = ("email", "password", "first_name", "last_name", "role")
    missing = [name for name in required if not data.get(name)]
    if missing:
        raise ValidationError(
            "Email, password, first name, last name, and role are required",
            {name: "required" for name in missing},
        )
    role = parse_role(data.get("role"))
    merged = dict(data)
    for key, value in (data.get("profile_data") or {}).items():
        merged.setdefault(key, value)

    if role == Role.COUNSELOR:
        for field, message in COUNSELOR_REQUIRED.items():
            if not merged.get(field):
                raise ValidationError(message, {field: "required"})

    if len(data["password"]) < MIN_PASSWORD_LENGTH:
        raise ValidationError("Password must be at least 6 characters long", {"password": "too short"})

    email = data["email"].strip().lower()
    if find_by_email(email):
        raise ConflictError("Email already registered")

    user = User(
        email=email,
        first_name=data["first_name"].strip(),
        last_name=data["last_name"].strip(),
        role=role,
        year_of_study=_parse_year(merged.get("year_of_study")),
        student_id=next_student_id() if role == Role.STUDENT else None,
    )
    for field in OPTIONAL_PROFILE_FIELDS:
        value = clean_optional(merged.get(field))
        if value is not None:
            setattr(user, field, value)
    user.set_password(data["password"])
    db.session.add(user)
    db.session.commit()
    logger.info("User created: %s (%s)", user.full_name, user.role.value)
    return user


def authenticate(email: str, password: str) -> User:
    user = find_by_email(email)
    if user is None or not user.check_password(password):
        raise UnauthorizedError("Invalid email or password.")
    if not user.is_active:
        raise UnauthorizedError("Account is deactivated")
    user.last_login_at = utcnow()
    db.session.commit()
    return user


def update_profile(user: User, data: dict, allowed: tuple[str, ...]) -> User:
    """Apply profile changes limited to the ``allowed`` field names.

    Names are only overwritten with non-blank values; optional fields are
    cleared when sent as blank strings.
    """
    for name in ("first_name", "last_name"):
        if name in allowed and data.get(name) and str(data[name]).strip():
            setattr(user, name, str(data[name]).strip())
    for name in allowed:
        if name in ("first_name", "last_name") or name not in data:
            continue
        if name == "year_of_study":
            user.year_of_study = _parse_year(data[name])
        elif name == "years_of_experience":
            value = data[name]
            user.experience = str(value) if value not in (None, "") else None
        else:
            setattr(user, name, clean_optional(data[name]))
    user.updated_at = utcnow()
    db.session.commit()
    return user


def change_password(user: User, current_password: str, new_password: str) -> None:
    if not current_password or not new_password:
        raise ValidationError("Current password and new password are required")
    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise ValidationError("New password must be at least 6 characters long")
    if not user.check_password(current_password):
        raise UnauthorizedError("Current password is incorrect")
    user.set_password(new_password)
    db.session.commit()
    logger.info("Password changed for user %s", user.id)


def deactivate_user(user: User) -> None:
    """Soft delete: the account stays for history but can no longer log in."""
    user.is_active = False
    user.updated_at = utcnow()
    db.session.commit()
    logger.info("User %s deactivated", user.id)
