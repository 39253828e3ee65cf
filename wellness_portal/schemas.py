"""
Serialization schemas using Marshmallow for the Student Wellness Portal.

The ``*Schema`` classes built on ``SQLAlchemyAutoSchema`` convert models
to JSON-friendly dictionaries. Sensitive fields, such as password
hashes, are excluded and enum columns are dumped by value.

The ``*InputSchema`` classes validate request bodies. They raise
``marshmallow.ValidationError`` which the application renders as a
400 response.
"""

from __future__ import annotations

from datetime import datetime, date, timezone

from dateutil.parser import parse as parse_date  # type: ignore
from marshmallow import Schema, fields, validate, EXCLUDE, ValidationError
from marshmallow_sqlalchemy import SQLAlchemyAutoSchema, auto_field

from .models import (
    User,
    Role,
    Appointment,
    AppointmentStatus,
    WellnessGoal,
    MoodEntry,
    MoodLevel,
    Resource,
    ResourceType,
    Notification,
    NotificationType,
    NotificationPreference,
    NotificationFrequency,
    Priority,
)


class FlexibleDateTime(fields.Field):
    """Accept any ISO-8601-ish timestamp and store it as naive UTC."""

    def _deserialize(self, value, attr, data, **kwargs):
        if isinstance(value, datetime):
            parsed = value
        else:
            try:
                parsed = parse_date(str(value))
            except (ValueError, OverflowError) as exc:
                raise ValidationError("Invalid date format. Use ISO 8601.") from exc
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        return parsed

    def _serialize(self, value, attr, obj, **kwargs):
        return value.isoformat() if value is not None else None


class FlexibleDate(FlexibleDateTime):
    def _deserialize(self, value, attr, data, **kwargs):
        if isinstance(value, date) and not isinstance(value, datetime):
            return value
        return super()._deserialize(value, attr, data, **kwargs).date()


# ---------------------------------------------------------------------------
# Output schemas
# ---------------------------------------------------------------------------


class UserSchema(SQLAlchemyAutoSchema):
    """Schema for serialising ``User`` objects."""

    role = fields.Enum(Role, by_value=True)

    class Meta:
        model = User
        load_instance = True
        include_fk = True
        # Exclude password_hash from the serialised output
        exclude = ("password_hash",)


class CounselorSchema(Schema):
    """Public view of a counselor used when booking appointments."""

    id = fields.Integer()
    first_name = fields.String()
    last_name = fields.String()
    email = fields.String()
    specialization = fields.Function(lambda u: u.specialization or "General Counseling")
    experience = fields.Function(lambda u: u.experience or "Experienced Professional")
    phone = fields.String(allow_none=True)
    license_number = fields.String(allow_none=True)
    qualifications = fields.String(allow_none=True)


class AppointmentSchema(SQLAlchemyAutoSchema):
    """Schema for serialising ``Appointment`` objects with participant names."""

    status = fields.Enum(AppointmentStatus, by_value=True)
    student_first_name = fields.String(dump_only=True)
    student_last_name = fields.String(dump_only=True)
    counselor_first_name = fields.String(dump_only=True)
    counselor_last_name = fields.String(dump_only=True)

    class Meta:
        model = Appointment
        load_instance = True
        include_fk = True


class WellnessGoalSchema(SQLAlchemyAutoSchema):
    """Schema for serialising ``WellnessGoal`` objects."""

    title = auto_field(validate=validate.Length(min=3, max=200))

    class Meta:
        model = WellnessGoal
        load_instance = True
        include_fk = True


class MoodEntrySchema(SQLAlchemyAutoSchema):
    """Schema for serialising ``MoodEntry`` objects."""

    mood_level = fields.Enum(MoodLevel, by_value=True)

    class Meta:
        model = MoodEntry
        load_instance = True
        include_fk = True


class ResourceSchema(SQLAlchemyAutoSchema):
    """Schema for serialising ``Resource`` objects."""

    type = fields.Enum(ResourceType, by_value=True)
    tags = fields.List(fields.String(), attribute="tag_list")

    class Meta:
        model = Resource
        load_instance = True


class NotificationSchema(SQLAlchemyAutoSchema):
    """Schema for serialising ``Notification`` objects."""

    type = fields.Enum(NotificationType, by_value=True)
    priority = fields.Enum(Priority, by_value=True)

    class Meta:
        model = Notification
        load_instance = True
        include_fk = True


class NotificationPreferenceSchema(SQLAlchemyAutoSchema):
    """Preferences with the quiet hours folded into a nested object."""

    frequency = fields.Enum(NotificationFrequency, by_value=True)
    quiet_hours = fields.Method("get_quiet_hours")

    class Meta:
        model = NotificationPreference
        load_instance = True
        include_fk = True
        exclude = ("quiet_hours_enabled", "quiet_hours_start", "quiet_hours_end")

    def get_quiet_hours(self, obj: NotificationPreference) -> dict:
        return {
            "enabled": obj.quiet_hours_enabled,
            "start_time": obj.quiet_hours_start,
            "end_time": obj.quiet_hours_end,
        }


# ---------------------------------------------------------------------------
# Input schemas
# ---------------------------------------------------------------------------


class _InputSchema(Schema):
    class Meta:
        unknown = EXCLUDE


class ProfileDataInputSchema(_InputSchema):
    """Optional profile fields, sent flat or nested under ``profile_data``."""

    phone = fields.String(allow_none=True)
    hostel_name = fields.String(allow_none=True)
    room_number = fields.String(allow_none=True)
    course = fields.String(allow_none=True)
    year_of_study = fields.Raw(allow_none=True)
    date_of_birth = fields.String(allow_none=True)
    department = fields.String(allow_none=True)
    emergency_contact = fields.String(allow_none=True)
    specialization = fields.String(allow_none=True)
    experience = fields.String(allow_none=True)
    license_number = fields.String(allow_none=True)
    qualifications = fields.String(allow_none=True)


class RegisterInputSchema(ProfileDataInputSchema):
    email = fields.String(required=True, validate=validate.Length(max=120))
    password = fields.String(required=True)
    first_name = fields.String(required=True, validate=validate.Length(max=50))
    last_name = fields.String(required=True, validate=validate.Length(max=50))
    role = fields.String(required=True)
    profile_data = fields.Nested(ProfileDataInputSchema, load_default=None, allow_none=True)


class MoodEntryInputSchema(_InputSchema):
    user_id = fields.Integer(load_default=None)
    mood_level = fields.Enum(MoodLevel, by_value=True, required=True)
    notes = fields.String(load_default=None, allow_none=True, validate=validate.Length(max=1000))
    energy_level = fields.Integer(
        load_default=None, allow_none=True,
        validate=validate.Range(min=1, max=10, error="Energy level must be between 1 and 10"),
    )
    sleep_hours = fields.Float(
        required=True, validate=validate.Range(min=0, max=24, error="Sleep hours must be between 0 and 24")
    )
    stress_level = fields.Integer(
        required=True, validate=validate.Range(min=1, max=10, error="Stress level must be between 1 and 10")
    )


class SleepEntryInputSchema(_InputSchema):
    user_id = fields.Integer(load_default=None)
    sleep_hours = fields.Float(
        required=True, validate=validate.Range(min=0, max=24, error="Sleep hours must be between 0 and 24")
    )
    sleep_quality = fields.Integer(
        load_default=3, allow_none=True,
        validate=validate.Range(min=1, max=5, error="Sleep quality must be between 1 and 5"),
    )
    notes = fields.String(load_default=None, allow_none=True, validate=validate.Length(max=1000))


class GoalInputSchema(_InputSchema):
    user_id = fields.Integer(load_default=None)
    title = fields.String(required=True)
    description = fields.String(load_default=None, allow_none=True, validate=validate.Length(max=1000))
    category = fields.String(load_default="wellness", validate=validate.Length(min=1, max=50))
    target_date = FlexibleDate(load_default=None, allow_none=True)


class GoalUpdateSchema(_InputSchema):
    title = fields.String()
    description = fields.String(allow_none=True, validate=validate.Length(max=1000))
    category = fields.String(validate=validate.Length(min=1, max=50))
    target_date = FlexibleDate(allow_none=True)
    progress_percentage = fields.Integer(validate=validate.Range(min=0, max=100))
    is_completed = fields.Boolean()


class AppointmentInputSchema(_InputSchema):
    student_id = fields.Integer(required=True)
    counselor_id = fields.Integer(required=True)
    appointment_date = FlexibleDateTime(required=True)
    duration_minutes = fields.Integer(load_default=60, validate=validate.Range(min=1, max=480))
    reason = fields.String(load_default=None, allow_none=True, validate=validate.Length(max=500))


class AppointmentStatusSchema(_InputSchema):
    status = fields.Enum(AppointmentStatus, by_value=True, required=True)
    notes = fields.String(load_default=None, allow_none=True, validate=validate.Length(max=1000))


class ResourceInputSchema(_InputSchema):
    title = fields.String(required=True, validate=validate.Length(min=1, max=200))
    description = fields.String(required=True, validate=validate.Length(min=1, max=2000))
    type = fields.Enum(ResourceType, by_value=True, required=True)
    category = fields.String(load_default="general", validate=validate.Length(max=50))
    url = fields.String(required=True, validate=validate.Length(min=1, max=500))
    author = fields.String(required=True, validate=validate.Length(min=1, max=120))
    tags = fields.List(fields.String(), load_default=list)
    duration = fields.String(load_default=None, allow_none=True, validate=validate.Length(max=50))


class NotificationInputSchema(_InputSchema):
    type = fields.Enum(NotificationType, by_value=True, required=True)
    title = fields.String(required=True, validate=validate.Length(min=1, max=200))
    message = fields.String(required=True, validate=validate.Length(min=1, max=1000))
    previous_score = fields.Integer(load_default=None, allow_none=True)
    current_score = fields.Integer(load_default=None, allow_none=True)
    score_change = fields.Integer(load_default=None, allow_none=True)
    priority = fields.Enum(Priority, by_value=True, load_default=Priority.LOW)
    target_user_id = fields.Integer(load_default=None, allow_none=True)
