"""
Pytest configuration and fixtures for testing.
This version ensures CI runs all tests in-memory and isolated.
"""

import os

# Must be set before the app module reads its config.
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["MOOD_STORE"] = "database"
os.environ["MOOD_ANCHOR_POLICY"] = "login"

from datetime import datetime

import pytest
from app import app as flask_app
from extensions import db
from models import MoodEntry, User  # Import models to ensure they are loaded
from observations import MoodObservation


@pytest.fixture(scope="session")
def app():
    """
    Create a Flask app with an in-memory SQLite database.
    This avoids file I/O and works on GitHub CI.
    """
    flask_app.config.update(
        TESTING=True,
        MOOD_STORE="database",
        MOOD_ANCHOR_POLICY="login",
        MOOD_SUPPRESS_INCOMPLETE_WEEK=True,
    )

    with flask_app.app_context():
        # Drop all tables first to ensure fresh schema
        db.drop_all()
        # Create all tables with current model definitions
        db.create_all()
        yield flask_app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    """Provides a Flask test client for HTTP requests."""
    with app.test_client() as client:
        yield client


@pytest.fixture(autouse=True)
def clear_db(app):
    """Clear all data and config overrides between tests to ensure isolation."""
    yield
    app.config.update(
        MOOD_STORE="database",
        MOOD_ANCHOR_POLICY="login",
        MOOD_SUPPRESS_INCOMPLETE_WEEK=True,
    )
    with app.app_context():
        db.session.rollback()
        db.session.query(MoodEntry).delete()
        db.session.query(User).delete()
        db.session.commit()


@pytest.fixture()
def obs():
    """Factory for observations: obs("Bagus", "2024-06-01T09:00")."""
    def make(mood, at, score=None, owner=None):
        if isinstance(at, str):
            at = datetime.fromisoformat(at)
        if score is None:
            return MoodObservation.from_label(mood, at, owner)
        return MoodObservation(mood_label=mood, score=score, at=at, owner=owner)
    return make
