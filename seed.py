# seed.py
from models import User
from app import app, db, get_tracker
from datetime import datetime, timedelta
import random

from mood_scale import MOOD_LABELS


def seed():
    # Create some example users
    users = [
        User(username="Emma", email="emma@example.com"),
        User(username="Koen", email="koen@example.com"),
        User(username="Rachel", email="rachel@example.com"),
        User(username="Tanmay", email="tanmay@example.com"),
    ]

    # Set passwords using the hashing method (REQUIRED for login to work)
    for user in users:
        user.set_password(user.username.lower())

    with app.app_context():
        db.drop_all()
        db.create_all()

        # Accounts created a week ago so every anchor policy has a full window
        now = datetime.now()
        for user in users:
            user.created_at = now - timedelta(days=6)
        db.session.add_all(users)
        db.session.commit()

        # Goes through the configured store, same path as the app
        tracker = get_tracker()
        count = 0
        for user in users:
            for days_ago in range(7):
                for _ in range(random.randint(1, 3)):
                    at = (now - timedelta(days=days_ago)).replace(
                        hour=random.randint(7, 22), minute=random.randint(0, 59), second=0, microsecond=0
                    )
                    if at > now:
                        at = now.replace(microsecond=0)
                    tracker.record_observation(random.choice(list(MOOD_LABELS.values())), at, owner=user.owner_key)
                    count += 1

        print(f"Dummy data added successfully: {count} mood entries.")
        print(f"Created {len(users)} users:")
        for user in users:
            print(f"  - Username: {user.username}, Password: {user.username.lower()}")


if __name__ == "__main__":
    seed()
