"""Database setup utilities.

This module exposes the shared SQLAlchemy ``db`` object used by the
models throughout the portal. The application factory binds it to the
Flask app.
"""
from __future__ import annotations

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
