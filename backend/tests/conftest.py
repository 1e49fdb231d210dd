import os
import sys
import pytest

# Ensure the backend root (containing the `pathfinder` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from pathfinder import create_app, db, socketio
from pathfinder.services.hunt import clock as clock_source

T0 = 1_000_000.0


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    WTF_CSRF_ENABLED = False
    LOG_LEVEL = 'DEBUG'
    BCRYPT_LOG_ROUNDS = 4
    HUNT_DURATION_SEC = 3600
    HINT_DELAY_SEC = 300
    SKIP_DELAY_SEC = 600
    HINT_PENALTY_DELAYED = 5
    HINT_PENALTY_IMMEDIATE = 10
    SKIP_PENALTY = 0
    PUZZLE_REWARD = 20
    HEARTBEAT_INTERVAL_SEC = 20
    PRESENCE_TTL_SEC = 30
    PATH_IDS = [1]
    EARLY_BIRD_BONUSES = []
    ADMIN_USERNAME = 'admin'
    ADMIN_PASSWORD = 'password'


class FakeClock:
    """Stand-in for the server clock; tests move time explicitly."""

    def __init__(self, start):
        self.current = start

    def __call__(self):
        return self.current

    def set(self, value):
        self.current = value

    def advance(self, seconds):
        self.current += seconds


@pytest.fixture(autouse=True)
def clock(monkeypatch):
    fake = FakeClock(T0)
    monkeypatch.setattr(clock_source, 'now', fake)
    return fake


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import pathfinder.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def admin_client(flask_app):
    from pathfinder.models import User
    user = User(username='admin')
    user.set_password('password')
    db.session.add(user)
    db.session.commit()
    organizer = flask_app.test_client()
    res = organizer.post('/api/admin/login', json={'username': 'admin', 'password': 'password'})
    assert res.status_code == 200
    return organizer


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    if test_client.is_connected('/ws'):
        test_client.disconnect(namespace='/ws')


@pytest.fixture()
def puzzles(flask_app):
    """Four puzzles on path 1, in order."""
    from pathfinder.models import Puzzle
    created = []
    for order in range(4):
        puzzle = Puzzle(
            title=f'Riddle {order + 1}',
            body=f'Body of riddle {order + 1}',
            hint=f'Hint {order + 1}',
            answer=f'Answer {order + 1}',
            path_id=1,
            order=order,
        )
        db.session.add(puzzle)
        created.append(puzzle)
    db.session.commit()
    return [p.id for p in created]


def start_hunt(is_started=True):
    from pathfinder.models import GameSettings
    settings = GameSettings.current()
    settings.is_started = is_started
    db.session.add(settings)
    db.session.commit()


def make_team(members=('Asha', 'Ravi'), house='Halwa', name='Sweet Solvers'):
    from pathfinder.services.hunt.registration import register_team
    outcome = register_team(name, house, list(members))
    assert outcome.ok
    return outcome.value['secret_code']


def fresh_team(team_id):
    """Reload a team, discarding anything cached by earlier requests."""
    from pathfinder.models import Team
    db.session.expire_all()
    return db.session.get(Team, team_id)


@pytest.fixture()
def team_id(flask_app, puzzles):
    return make_team()


@pytest.fixture()
def armed_team(team_id):
    from pathfinder.services.hunt.session import arm
    start_hunt()
    assert arm(team_id, 'Asha').ok
    return team_id


def commit_concurrent_skip(team_id, now):
    """Advance the team one puzzle from outside the call under test."""
    from pathfinder.models import Team
    Team.query.filter(Team.id == team_id).update({
        Team.current_puzzle_index: Team.current_puzzle_index + 1,
        Team.current_puzzle_start_time: now,
        Team.revision: Team.revision + 1,
    }, synchronize_session=False)
    db.session.commit()


def racing_once(original, race):
    """Wrap ``original`` so ``race`` runs before its first call only."""
    raced = []

    def wrapper(*args, **kwargs):
        if not raced:
            raced.append(True)
            race()
        return original(*args, **kwargs)
    return wrapper
