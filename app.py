from flask import Flask, request, session, jsonify, make_response
import os
import click
from dotenv import load_dotenv
from extensions import db
from datetime import datetime

from aggregation import REQUIRED_DAYS, IncompleteWeekPolicy
from anchors import AccountSignals, get_anchor_policy
from errors import MoodifyError
from stores import build_store
from timestamps import normalize_timestamp, parse_date_only, to_date
from tracker import MoodTracker

load_dotenv()

app = Flask(__name__)
app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')

basedir = os.path.abspath(os.path.dirname(__file__))
instance_path = os.path.join(basedir, 'instance')
os.makedirs(instance_path, exist_ok=True)

app.config['SQLALCHEMY_DATABASE_URI'] = os.environ.get(
    'DATABASE_URL', 'sqlite:///' + os.path.join(instance_path, 'app.db')
)
app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

# Where mood entries live: database | file | remote
app.config['MOOD_STORE'] = os.environ.get('MOOD_STORE', 'database')
app.config['MOOD_FILE_PATH'] = os.environ.get('MOOD_FILE_PATH', os.path.join(instance_path, 'moods.csv'))
app.config['SUPABASE_URL'] = os.environ.get('SUPABASE_URL')
app.config['SUPABASE_KEY'] = os.environ.get('SUPABASE_KEY')

# Day-1 rule for the weekly window: login | creation | earliest
app.config['MOOD_ANCHOR_POLICY'] = os.environ.get('MOOD_ANCHOR_POLICY', 'login')
# Hide dominant mood / ratios on /stats/weekly until 7 days have data
app.config['MOOD_SUPPRESS_INCOMPLETE_WEEK'] = (
    os.environ.get('MOOD_SUPPRESS_INCOMPLETE_WEEK', 'true').lower() in ('1', 'true', 'yes')
)

db.init_app(app)

from models import User


def get_tracker():
    """Build a tracker from the current config (one per request, no shared state)."""
    return MoodTracker(
        build_store(app.config),
        anchor_policy=get_anchor_policy(app.config['MOOD_ANCHOR_POLICY']),
    )


def _current_user():
    if not session.get('logged_in'):
        return None
    user_id = session.get('user_id')
    return db.session.get(User, user_id) if user_id else None


def _account_signals(user):
    # last_login is the login that opened this session, so the week runs from the one before it.
    return AccountSignals(created_at=user.created_at, last_login_at=user.previous_login)


def _login_required():
    return jsonify({'error': 'login_required'}), 401


def _payload():
    if request.is_json:
        return request.get_json(silent=True) or {}
    return request.form


@app.errorhandler(MoodifyError)
def handle_moodify_error(exc):
    app.logger.warning('%s: %s', exc.code, exc.message)
    return jsonify(exc.to_dict()), exc.http_status


@app.route('/', methods=['GET', 'POST'])
def login():
    if request.method == 'POST':
        data = _payload()
        username = data.get('username')
        password = data.get('password')

        user = User.query.filter_by(username=username).first()

        if user and user.check_password(password or ''):
            user.previous_login = user.last_login
            user.last_login = datetime.now()
            db.session.commit()
            session['logged_in'] = True
            session['user_id'] = user.id
            return jsonify({'logged_in': True, 'username': user.username})

        return jsonify({'error': 'Invalid username or password'}), 401

    return jsonify({'logged_in': bool(session.get('logged_in'))})


@app.route('/register', methods=['POST'])
def register():
    data = _payload()
    username = data.get('username')
    email = data.get('email')
    password = data.get('password')

    if not username or not password:
        return jsonify({'error': 'Username and password are required'}), 400

    if User.query.filter_by(username=username).first():
        return jsonify({'error': 'Username already exists'}), 409

    if email and User.query.filter_by(email=email).first():
        return jsonify({'error': 'Email already exists'}), 409

    new_user = User(username=username, email=email or None)
    new_user.set_password(password)

    db.session.add(new_user)
    db.session.commit()
    return jsonify({'id': new_user.id, 'username': new_user.username}), 201


@app.route('/logout')
def logout():
    session.clear()
    return jsonify({'logged_in': False})


@app.route('/observations', methods=['POST'])
def record_observation():
    user = _current_user()
    if user is None:
        return _login_required()

    data = _payload()
    mood = (data.get('mood') or '').strip()
    if not mood:
        return jsonify({'error': 'Please choose a mood'}), 400

    token = (data.get('timestamp') or '').strip()
    if not token:
        at = datetime.now()
    elif parse_date_only(token) is not None:
        # A bare date gets the current time of day attached.
        at = datetime.combine(parse_date_only(token).date(), datetime.now().time())
    else:
        at = normalize_timestamp(token)

    observation = get_tracker().record_observation(mood, at, owner=user.owner_key)
    return jsonify({
        'mood': observation.mood_label,
        'score': observation.score,
        'timestamp': observation.at.replace(microsecond=0).isoformat(),
    }), 201


@app.route('/history')
def history():
    user = _current_user()
    if user is None:
        return _login_required()

    tracker = get_tracker()
    account = _account_signals(user)
    window = tracker.resolve_window(user.owner_key, account)
    rows = tracker.list_history(user.owner_key, account)
    return jsonify({
        'start': window.start.isoformat(),
        'end': window.end.isoformat(),
        'entries': [row.to_dict() for row in rows],
    })


@app.route('/stats/weekly')
def weekly_stats():
    """Weekly summary.

    Dominant mood and positive ratio are blanked for incomplete weeks when
    MOOD_SUPPRESS_INCOMPLETE_WEEK is on; counts and the average are always shown.
    """
    user = _current_user()
    if user is None:
        return _login_required()

    tracker = get_tracker()
    account = _account_signals(user)
    window = tracker.resolve_window(user.owner_key, account)
    stats = tracker.compute_weekly_stats(user.owner_key, account)

    policy = (IncompleteWeekPolicy.SUPPRESS if app.config['MOOD_SUPPRESS_INCOMPLETE_WEEK']
              else IncompleteWeekPolicy.REPORT)
    body = stats.to_dict(policy)
    body.update({'start': window.start.isoformat(), 'end': window.end.isoformat()})
    return jsonify(body)


@app.route('/graph')
def graph():
    user = _current_user()
    if user is None:
        return _login_required()

    tracker = get_tracker()
    account = _account_signals(user)
    window = tracker.resolve_window(user.owner_key, account)
    slots = tracker.rolling_graph(user.owner_key, account)
    return jsonify({'start': window.start.isoformat(), 'slots': [s.to_dict() for s in slots]})


@app.route('/recommendations')
def recommendations():
    """Advice keyed on the 7-day average, reported even for incomplete weeks."""
    user = _current_user()
    if user is None:
        return _login_required()

    recommendation = get_tracker().recommend(user.owner_key, _account_signals(user))
    return jsonify(recommendation.to_dict())


def _csv_response(observations, filename):
    body = ''.join(obs.to_line() + '\n' for obs in observations)
    response = make_response(body)
    response.headers["Content-Disposition"] = f"attachment; filename={filename}"
    response.headers["Content-type"] = "text/csv"
    return response


@app.route('/export')
def export_all_entries():
    user = _current_user()
    if user is None:
        return _login_required()

    observations = get_tracker().load_observations(user.owner_key)
    return _csv_response(observations, "moods.csv")


@app.route('/export-range')
def export_range():
    user = _current_user()
    if user is None:
        return _login_required()

    start = request.args.get('start_date')
    end = request.args.get('end_date')

    if not start or not end:
        return jsonify({'error': 'Please choose both start and end dates.'}), 400

    start_date = to_date(start)
    end_date = to_date(end)
    if start_date is None or end_date is None:
        return jsonify({'error': 'Invalid date format.'}), 400

    observations = get_tracker().observations_between(start_date, end_date, user.owner_key)
    return _csv_response(observations, f"moods_{start}_to_{end}.csv")


@app.route('/export.json')
def export_json():
    user = _current_user()
    if user is None:
        return _login_required()

    return jsonify(get_tracker().export_payload(user.owner_key))


@app.route('/export/last.json')
def export_last_json():
    user = _current_user()
    if user is None:
        return _login_required()

    entry = get_tracker().last_entry_payload(user.owner_key)
    if entry is None:
        return jsonify({'error': 'No mood entries yet'}), 404
    return jsonify(entry)


def _user_or_fail(username):
    user = User.query.filter_by(username=username).first()
    if user is None:
        raise click.ClickException(f"No user named {username!r}")
    return user


@app.cli.command('weekly-stats')
@click.argument('username')
def weekly_stats_command(username):
    """Print the weekly summary for USERNAME."""
    user = _user_or_fail(username)
    tracker = get_tracker()
    account = _account_signals(user)
    window = tracker.resolve_window(user.owner_key, account)
    stats = tracker.compute_weekly_stats(user.owner_key, account)

    click.echo(f"Weekly stats ({window.start} to {window.end})")
    # The console report always shows partial numbers but hides the mood until the week is full.
    if not stats.is_complete:
        click.echo(f"Weekly stats need {REQUIRED_DAYS} days with data; {stats.days_with_data} so far.")
    data = stats.to_dict(IncompleteWeekPolicy.SUPPRESS)
    click.echo(f"Dominant mood: {data['dominant_mood'] or '-'}")
    click.echo(f"Days with data: {stats.days_with_data}, average score: {stats.average_score:.2f}")
    click.echo(f"Positive days: {stats.positive_days}, negative days: {stats.negative_days}")


@app.cli.command('history')
@click.argument('username')
def history_command(username):
    """Print this week's entries for USERNAME."""
    user = _user_or_fail(username)
    rows = get_tracker().list_history(user.owner_key, _account_signals(user))
    if not rows:
        click.echo("No entries this week.")
    for row in rows:
        click.echo(f"{row.day} (day {row.day_index}) {row.time} - {row.mood_label} (score: {row.score})")


@app.cli.command('export-json')
@click.argument('username')
@click.argument('path', type=click.Path(dir_okay=False))
def export_json_command(username, path):
    """Write every entry of USERNAME to PATH as a JSON payload."""
    user = _user_or_fail(username)
    try:
        count = get_tracker().write_payload(path, user.owner_key)
    except MoodifyError as exc:
        raise click.ClickException(exc.message)
    click.echo(f"Payload with {count} entries written to {path}")


def init_db():
    with app.app_context():
        db.create_all()


if __name__ == '__main__':
    init_db()
    app.run(debug=True)
