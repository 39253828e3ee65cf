"""Seed script for initial data.

Running this script will populate the database with demo counselors,
a demo student and a starter resource library. It can be executed with
``python -m seed.seed`` from the repository root. Existing rows are
left alone, so running it twice is harmless.
"""
from __future__ import annotations

import logging

from dotenv import load_dotenv

from wellness_portal import create_app, db
from wellness_portal.models import Resource, ResourceType, Role, User

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password123"

COUNSELORS = [
    ("dr.sarah@wellness.edu", "Sarah", "Wilson", "Anxiety and Depression", "8 years"),
    ("dr.mike@wellness.edu", "Michael", "Chen", "Student Life and Academic Pressure", "5 years"),
    ("dr.emily@wellness.edu", "Emily", "Johnson", "Stress Management", "10 years"),
]

RESOURCES = [
    dict(
        title="Managing Academic Stress: A Complete Guide",
        description="Comprehensive strategies for handling academic pressure and maintaining mental wellness.",
        type=ResourceType.ARTICLE, category="academic", url="/resources/academic-stress-guide.pdf",
        author="Dr. Sarah Johnson", rating=4.8, downloads=245, tags="stress,academic,coping strategies",
    ),
    dict(
        title="Mindfulness Meditation for Students",
        description="15-minute guided meditation session specifically designed for students.",
        type=ResourceType.VIDEO, category="mindfulness", url="/resources/mindfulness-meditation.mp4",
        author="Dr. Michael Chen", rating=4.9, downloads=189, tags="mindfulness,meditation,relaxation",
        duration="15 min",
    ),
    dict(
        title="Anxiety Coping Techniques Worksheet",
        description="Printable worksheet with practical exercises for managing anxiety symptoms.",
        type=ResourceType.WORKSHEET, category="anxiety", url="/resources/anxiety-worksheet.pdf",
        author="Dr. Emily Davis", rating=4.7, downloads=312, tags="anxiety,coping,exercises",
    ),
    dict(
        title="Building Healthy Relationships",
        description="Guide to developing and maintaining healthy relationships during university years.",
        type=ResourceType.ARTICLE, category="relationships", url="/resources/healthy-relationships.pdf",
        author="Dr. Lisa Brown", rating=4.6, downloads=156, tags="relationships,communication,social skills",
    ),
    dict(
        title="Crisis Support Hotlines & Resources",
        description="Essential contact information and immediate support resources for crisis situations.",
        type=ResourceType.REFERENCE, category="crisis", url="/resources/crisis-support.pdf",
        author="Wellness Team", rating=5.0, downloads=89, tags="crisis,emergency,support",
    ),
]


def run_seeds() -> None:
    """Insert demo users and resources into the database."""
    load_dotenv()
    app = create_app()
    with app.app_context():
        db.create_all()
        users = []
        for email, first_name, last_name, specialization, experience in COUNSELORS:
            if User.query.filter_by(email=email).first():
                continue
            counselor = User(
                email=email,
                first_name=first_name,
                last_name=last_name,
                role=Role.COUNSELOR,
                specialization=specialization,
                experience=experience,
            )
            counselor.set_password(DEMO_PASSWORD)
            users.append(counselor)
        if not User.query.filter_by(email="john.doe@student.edu").first():
            student = User(
                email="john.doe@student.edu",
                first_name="John",
                last_name="Doe",
                role=Role.STUDENT,
                student_id="STU001",
                course="Computer Science",
                year_of_study=2,
            )
            student.set_password(DEMO_PASSWORD)
            users.append(student)
        db.session.add_all(users)

        if Resource.query.count() == 0:
            db.session.add_all([Resource(**row) for row in RESOURCES])
        db.session.commit()
        logger.info("Seed data inserted: %d users", len(users))


if __name__ == "__main__":
    run_seeds()
