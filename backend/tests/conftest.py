import os
import sys
import pytest

# Ensure the backend root (containing the `quizroom` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from quizroom import create_app, db


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SESSION_TTL_HOURS = 24
    SESSION_TOKEN_COOKIE = 'quiz_session'
    CORS_ORIGINS = ['http://localhost:3000']
    LOG_LEVEL = 'DEBUG'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import quizroom.models  # noqa: F401
        db.create_all()
    # No app context stays pushed here: each test request gets a fresh `g`,
    # so Flask-Login resolves the caller from that request's token.
    yield application
    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def app_ctx(flask_app):
    """For tests that call the services directly."""
    with flask_app.app_context():
        yield flask_app
        db.session.remove()


@pytest.fixture()
def join(client):
    """POST /api/rooms/join and return the JSON payload."""
    def _join(name, room_name, is_admin=False, expect=200):
        res = client.post('/api/rooms/join', json={'name': name, 'room_name': room_name, 'is_admin': is_admin})
        assert res.status_code == expect, res.get_json()
        return res.get_json()
    return _join
