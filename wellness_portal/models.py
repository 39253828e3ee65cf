"""
Database models for the Student Wellness Portal.

Users are either students or counselors. Students log mood and sleep
entries, track wellness goals and book appointments with counselors.
Notifications are raised for students when their wellness picture
changes, and counselors curate a library of self-help resources.

Nothing derived (wellness score, streaks) is stored here; those values
are recomputed by ``wellness_portal.services`` on every request.
"""

from __future__ import annotations

import enum
from datetime import datetime, date, timezone
from typing import Optional, List

from werkzeug.security import generate_password_hash, check_password_hash

from . import db


def utcnow() -> datetime:
    """Naive UTC timestamp, as stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _values(enum_cls):
    return [member.value for member in enum_cls]


def _enum_column(enum_cls, **kwargs):
    # Store the lowercase values (``student``), not the member names.
    return db.Column(
        db.Enum(enum_cls, values_callable=_values, validate_strings=True, name=enum_cls.__name__.lower()),
        **kwargs,
    )


class Role(enum.Enum):
    """Enumeration of user roles."""
    STUDENT = "student"
    COUNSELOR = "counselor"


class AppointmentStatus(enum.Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class MoodLevel(enum.Enum):
    """Self-reported mood, ordered from worst to best."""
    VERY_LOW = "very_low"
    LOW = "low"
    NEUTRAL = "neutral"
    GOOD = "good"
    EXCELLENT = "excellent"


class ResourceType(enum.Enum):
    ARTICLE = "article"
    VIDEO = "video"
    BOOK = "book"
    WORKSHEET = "worksheet"
    REFERENCE = "reference"


class NotificationType(enum.Enum):
    WELLNESS_SCORE_CHANGE = "wellness_score_change"
    MOOD_MILESTONE = "mood_milestone"
    STREAK_ACHIEVEMENT = "streak_achievement"
    IMPROVEMENT = "improvement"
    DECLINE = "decline"
    MILESTONE = "milestone"
    ALERT = "alert"


class Priority(enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class NotificationFrequency(enum.Enum):
    IMMEDIATE = "immediate"
    DAILY = "daily"
    WEEKLY = "weekly"


class User(db.Model):
    __allow_unmapped__ = True
    """A user of the portal.

    Students carry academic and residence details, counselors carry
    professional details. Passwords are stored as salted hashes and
    accounts are deactivated rather than deleted.
    """
    __tablename__ = "users"

    id: int = db.Column(db.Integer, primary_key=True)
    email: str = db.Column(db.String(120), unique=True, nullable=False)
    first_name: str = db.Column(db.String(50), nullable=False)
    last_name: str = db.Column(db.String(50), nullable=False)
    password_hash: str = db.Column(db.String(256), nullable=False)
    role: Role = _enum_column(Role, nullable=False)

    phone: Optional[str] = db.Column(db.String(30))
    hostel_name: Optional[str] = db.Column(db.String(100))
    room_number: Optional[str] = db.Column(db.String(20))
    course: Optional[str] = db.Column(db.String(100))
    year_of_study: Optional[int] = db.Column(db.Integer)
    student_id: Optional[str] = db.Column(db.String(20), unique=True)
    date_of_birth: Optional[str] = db.Column(db.String(20))
    department: Optional[str] = db.Column(db.String(100))
    emergency_contact: Optional[str] = db.Column(db.String(100))

    specialization: Optional[str] = db.Column(db.String(120))
    experience: Optional[str] = db.Column(db.String(60))
    license_number: Optional[str] = db.Column(db.String(60))
    qualifications: Optional[str] = db.Column(db.String(255))

    is_active: bool = db.Column(db.Boolean, nullable=False, default=True)
    created_at: datetime = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at: datetime = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    last_login_at: Optional[datetime] = db.Column(db.DateTime)

    # Relationships
    goals: List[WellnessGoal] = db.relationship("WellnessGoal", back_populates="user", cascade="all, delete-orphan")
    mood_entries: List[MoodEntry] = db.relationship("MoodEntry", back_populates="user", cascade="all, delete-orphan")
    notifications: List[Notification] = db.relationship(
        "Notification", back_populates="user", cascade="all, delete-orphan"
    )
    preferences: Optional[NotificationPreference] = db.relationship(
        "NotificationPreference", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_counselor(self) -> bool:
        return self.role == Role.COUNSELOR

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role.value})>"


class Appointment(db.Model):
    __allow_unmapped__ = True
    """A counselling session booked between a student and a counselor."""
    __tablename__ = "appointments"

    id: int = db.Column(db.Integer, primary_key=True)
    student_id: int = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    counselor_id: int = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    appointment_date: datetime = db.Column(db.DateTime, nullable=False)
    duration_minutes: int = db.Column(db.Integer, nullable=False, default=60)
    status: AppointmentStatus = _enum_column(AppointmentStatus, nullable=False, default=AppointmentStatus.SCHEDULED)
    reason: Optional[str] = db.Column(db.String(500))
    notes: Optional[str] = db.Column(db.String(1000))
    created_at: datetime = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at: datetime = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    student: User = db.relationship("User", foreign_keys=[student_id])
    counselor: User = db.relationship("User", foreign_keys=[counselor_id])

    @property
    def student_first_name(self) -> str:
        return self.student.first_name

    @property
    def student_last_name(self) -> str:
        return self.student.last_name

    @property
    def counselor_first_name(self) -> str:
        return self.counselor.first_name

    @property
    def counselor_last_name(self) -> str:
        return self.counselor.last_name

    def involves(self, user_id: int) -> bool:
        return user_id in (self.student_id, self.counselor_id)

    def __repr__(self) -> str:
        return f"<Appointment {self.id} student={self.student_id} counselor={self.counselor_id} {self.status.value}>"


class WellnessGoal(db.Model):
    __allow_unmapped__ = True
    """A personal wellness goal with a completion percentage."""
    __tablename__ = "wellness_goals"

    id: int = db.Column(db.Integer, primary_key=True)
    user_id: int = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    title: str = db.Column(db.String(200), nullable=False)
    description: Optional[str] = db.Column(db.String(1000))
    category: str = db.Column(db.String(50), nullable=False, default="wellness")
    target_date: Optional[date] = db.Column(db.Date)
    is_completed: bool = db.Column(db.Boolean, nullable=False, default=False)
    progress_percentage: int = db.Column(db.Integer, nullable=False, default=0)
    created_at: datetime = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at: datetime = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    user: User = db.relationship("User", back_populates="goals")

    __table_args__ = (
        db.CheckConstraint("progress_percentage >= 0 AND progress_percentage <= 100", name="ck_goal_progress"),
    )

    def __repr__(self) -> str:
        return f"<WellnessGoal {self.title!r} user={self.user_id} {self.progress_percentage}%>"


class MoodEntry(db.Model):
    __allow_unmapped__ = True
    """A daily check-in: mood, energy, sleep and stress."""
    __tablename__ = "mood_entries"

    id: int = db.Column(db.Integer, primary_key=True)
    user_id: int = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    mood_level: MoodLevel = _enum_column(MoodLevel, nullable=False)
    notes: Optional[str] = db.Column(db.String(1000))
    energy_level: int = db.Column(db.Integer, nullable=False)
    sleep_hours: float = db.Column(db.Float, nullable=False)
    stress_level: int = db.Column(db.Integer, nullable=False)
    created_at: datetime = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)

    user: User = db.relationship("User", back_populates="mood_entries")

    __table_args__ = (
        db.CheckConstraint("energy_level >= 1 AND energy_level <= 10", name="ck_mood_energy"),
        db.CheckConstraint("stress_level >= 1 AND stress_level <= 10", name="ck_mood_stress"),
        db.CheckConstraint("sleep_hours >= 0 AND sleep_hours <= 24", name="ck_mood_sleep"),
    )

    def __repr__(self) -> str:
        return f"<MoodEntry user={self.user_id} {self.mood_level.value} {self.created_at}>"


class Resource(db.Model):
    __allow_unmapped__ = True
    """An item in the self-help resource library."""
    __tablename__ = "resources"

    id: int = db.Column(db.Integer, primary_key=True)
    title: str = db.Column(db.String(200), nullable=False)
    description: str = db.Column(db.String(2000), nullable=False)
    type: ResourceType = _enum_column(ResourceType, nullable=False)
    category: str = db.Column(db.String(50), nullable=False, default="general")
    url: str = db.Column(db.String(500), nullable=False)
    author: str = db.Column(db.String(120), nullable=False)
    rating: float = db.Column(db.Float, nullable=False, default=0.0)
    downloads: int = db.Column(db.Integer, nullable=False, default=0)
    # Comma-joined; exposed as a list through ``tag_list``.
    tags: Optional[str] = db.Column(db.String(500))
    duration: Optional[str] = db.Column(db.String(50))
    created_at: datetime = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at: datetime = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    @property
    def tag_list(self) -> list[str]:
        if not self.tags:
            return []
        return [tag.strip() for tag in self.tags.split(",") if tag.strip()]

    @tag_list.setter
    def tag_list(self, values: list[str]) -> None:
        cleaned = [str(v).strip() for v in values or [] if str(v).strip()]
        self.tags = ",".join(cleaned) if cleaned else None

    def __repr__(self) -> str:
        return f"<Resource {self.title!r} ({self.type.value})>"


class Notification(db.Model):
    __allow_unmapped__ = True
    """An in-app message for a user."""
    __tablename__ = "notifications"

    id: int = db.Column(db.Integer, primary_key=True)
    user_id: int = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    type: NotificationType = _enum_column(NotificationType, nullable=False)
    title: str = db.Column(db.String(200), nullable=False)
    message: str = db.Column(db.String(1000), nullable=False)
    previous_score: Optional[int] = db.Column(db.Integer)
    current_score: Optional[int] = db.Column(db.Integer)
    score_change: Optional[int] = db.Column(db.Integer)
    is_read: bool = db.Column(db.Boolean, nullable=False, default=False)
    priority: Priority = _enum_column(Priority, nullable=False, default=Priority.LOW)
    created_at: datetime = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    updated_at: datetime = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    user: User = db.relationship("User", back_populates="notifications")

    def __repr__(self) -> str:
        return f"<Notification {self.type.value} user={self.user_id} read={self.is_read}>"


class NotificationPreference(db.Model):
    __allow_unmapped__ = True
    """Per-user switches for the automatic notification triggers."""
    __tablename__ = "notification_preferences"

    id: int = db.Column(db.Integer, primary_key=True)
    user_id: int = db.Column(db.Integer, db.ForeignKey("users.id"), unique=True, nullable=False)
    enable_wellness_score_notifications: bool = db.Column(db.Boolean, nullable=False, default=True)
    enable_goal_completion_notifications: bool = db.Column(db.Boolean, nullable=False, default=True)
    enable_streak_notifications: bool = db.Column(db.Boolean, nullable=False, default=True)
    enable_mood_pattern_notifications: bool = db.Column(db.Boolean, nullable=False, default=True)
    enable_daily_reminders: bool = db.Column(db.Boolean, nullable=False, default=False)
    reminder_time: str = db.Column(db.String(5), nullable=False, default="20:00")
    email_notifications: bool = db.Column(db.Boolean, nullable=False, default=False)
    push_notifications: bool = db.Column(db.Boolean, nullable=False, default=True)
    frequency: NotificationFrequency = _enum_column(
        NotificationFrequency, nullable=False, default=NotificationFrequency.IMMEDIATE
    )
    min_score_change_threshold: int = db.Column(db.Integer, nullable=False, default=5)
    quiet_hours_enabled: bool = db.Column(db.Boolean, nullable=False, default=False)
    quiet_hours_start: str = db.Column(db.String(5), nullable=False, default="22:00")
    quiet_hours_end: str = db.Column(db.String(5), nullable=False, default="08:00")
    created_at: datetime = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at: datetime = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    user: User = db.relationship("User", back_populates="preferences")

    def __repr__(self) -> str:
        return f"<NotificationPreference user={self.user_id}>"


class TokenBlocklist(db.Model):
    __allow_unmapped__ = True
    """Access tokens revoked by logging out."""
    __tablename__ = "token_blocklist"

    id: int = db.Column(db.Integer, primary_key=True)
    jti: str = db.Column(db.String(36), unique=True, nullable=False, index=True)
    created_at: datetime = db.Column(db.DateTime, nullable=False, default=utcnow)
