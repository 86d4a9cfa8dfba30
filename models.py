from extensions import db
from datetime import datetime
from werkzeug.security import generate_password_hash, check_password_hash


# ============================
# USER MODEL
# ============================
class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(100), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=True)
    password = db.Column(db.String(200), nullable=False)

    # Anchor signals for the weekly window
    created_at = db.Column(db.DateTime, default=datetime.now)
    last_login = db.Column(db.DateTime, nullable=True)
    # Login before the current one; anchors day 1 once last_login is today
    previous_login = db.Column(db.DateTime, nullable=True)

    def set_password(self, password):
        self.password = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password, password)

    @property
    def owner_key(self):
        """Owner id as stored on mood rows (stores filter by string)."""
        return str(self.id)


# ============================
# MOOD ENTRY MODEL
# ============================
class MoodEntry(db.Model):
    __tablename__ = 'mood_entries'

    id = db.Column(db.Integer, primary_key=True)

    # Optional: rows imported from a file may have no owner
    user_id = db.Column(db.String(64), index=True, nullable=True)

    mood_label = db.Column(db.String(50), nullable=False)
    score = db.Column(db.Integer, nullable=False)

    # Wall-clock time of the observation, no tz
    timestamp = db.Column(db.DateTime, nullable=False, index=True)
