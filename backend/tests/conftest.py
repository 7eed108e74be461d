import os
import sys
import pytest

# Ensure the backend root (containing the `charades` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from charades import create_app, db, socketio
from charades.services.game import registry, turns
from charades.services.game.broadcast import NAMESPACE


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = 'DEBUG'
    PUBLIC_DIR = os.path.join(CURRENT_DIR, 'no-public-dir')
    DEFAULT_TURN_DURATION_SEC = 60
    MAX_TURN_DURATION_SEC = 600
    ROOM_CODE_LENGTH = 4
    ENABLE_ROOM_SWEEPER = False
    TURN_TIMER_AUTOSTART = False
    ADMIN_USERNAME = 'admin'
    ADMIN_PASSWORD = 'charades123'
    BCRYPT_LOG_ROUNDS = 4


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def flask_app(clock):
    registry.clear()
    application = create_app(TestConfig)
    registry.clock = clock
    turns.clock = clock
    with application.app_context():
        import charades.models  # noqa: F401
        from charades.models import ensure_admin_user
        from charades.services.game.words import seed_default_words
        db.create_all()
        ensure_admin_user(TestConfig.ADMIN_USERNAME, TestConfig.ADMIN_PASSWORD)
        seed_default_words()
        yield application
        db.session.remove()
        db.drop_all()
    registry.clear()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    """Connect any number of Socket.IO clients on the game namespace."""
    clients = []

    def _connect():
        test_client = socketio.test_client(flask_app, namespace=NAMESPACE)
        test_client.get_received(NAMESPACE)
        clients.append(test_client)
        return test_client

    yield _connect
    for c in clients:
        if c.is_connected(NAMESPACE):
            c.disconnect(namespace=NAMESPACE)


def payloads(received, name):
    """Payloads of every event called ``name`` in a get_received() batch."""
    return [(e['args'][0] if e['args'] else None) for e in received if e['name'] == name]
