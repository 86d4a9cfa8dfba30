from datetime import datetime
from models import MoodEntry, User
from extensions import db


def test_mood_entry_model_creation(app):
    """Test that a MoodEntry object can be created and stored."""
    with app.app_context():
        entry = MoodEntry(
            user_id="1",
            mood_label="Bagus",
            score=4,
            timestamp=datetime(2025, 10, 23, 9, 30),
        )
        db.session.add(entry)
        db.session.commit()

        saved = MoodEntry.query.first()
        assert saved is not None
        assert saved.mood_label == "Bagus"
        assert saved.score == 4
        assert saved.timestamp == datetime(2025, 10, 23, 9, 30)


def test_mood_entry_without_owner(app):
    """Imported rows may have no owner."""
    with app.app_context():
        db.session.add(MoodEntry(mood_label="Netral", score=3, timestamp=datetime(2025, 10, 22)))
        db.session.commit()
        assert MoodEntry.query.one().user_id is None


def test_user_password_and_signals(app):
    with app.app_context():
        user = User(username="emma", email="emma@example.com")
        user.set_password("secret")
        db.session.add(user)
        db.session.commit()

        assert user.check_password("secret")
        assert not user.check_password("nope")
        assert user.created_at is not None
        assert user.last_login is None
        assert user.previous_login is None
        assert user.owner_key == str(user.id)
