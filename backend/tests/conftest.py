import os
import sys
import pytest

# Ensure the backend root (containing the `rondo` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from rondo import create_app, db, socketio
from rondo.services.match.rooms import generate_room_code


def code_sequence(*codes):
    """Room code factory handing out fixed codes first, then random ones."""
    it = iter(codes)
    return lambda: next(it, None) or generate_room_code()


class TestConfig:
    __test__ = False
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = 'DEBUG'
    CORS_ORIGINS = '*'
    SOCKETIO_NAMESPACE = '/'
    INITIAL_TIME_SEC = 250
    ROOM_CODE_LENGTH = 6
    TURN_DEADLINE_GRACE_SEC = 0
    ROOM_CODE_FACTORY = None


@pytest.fixture()
def config_class():
    return TestConfig


@pytest.fixture()
def flask_app(config_class):
    application = create_app(config_class)
    with application.app_context():
        # Ensure models are imported so tables are created
        import rondo.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_sio_client(flask_app):
    created = []

    def _make():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        created.append(test_client)
        return test_client

    yield _make
    for test_client in created:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass


@pytest.fixture()
def sio_client(make_sio_client):
    return make_sio_client()


def events_named(received, name):
    return [pkt['args'][0] if pkt['args'] else None for pkt in received if pkt['name'] == name]
