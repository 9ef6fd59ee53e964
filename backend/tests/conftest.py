import os
import sys
import itertools
import pytest

# Ensure the backend root (containing the `redlight` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from redlight import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    WTF_CSRF_ENABLED = False
    BCRYPT_LOG_ROUNDS = 4
    LOG_LEVEL = 'INFO'
    LIVENESS_TIMEOUT_SEC = 2.5
    DEFAULT_SENSITIVITY_LEVEL = 15
    DEFAULT_BASE_POINTS = 10
    DEFAULT_REST_SECONDS = 60
    HOST_USERNAME = 'host'
    HOST_PASSWORD = 'password'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import redlight.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def host_client(flask_app):
    from redlight.models import HostUser
    host = HostUser(username='host')
    host.set_password('password')
    db.session.add(host)
    db.session.commit()
    test_client = flask_app.test_client()
    res = test_client.post('/login', json={'username': 'host', 'password': 'password'})
    assert res.status_code == 200
    return test_client


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


_player_seq = itertools.count(1)


@pytest.fixture()
def make_player(flask_app):
    """Create a registered player with a device token."""
    from redlight.models import Player

    def _make(name=None):
        n = next(_player_seq)
        player = Player(
            display_name=name or f'Player {n}',
            public_code=f'T{n:05d}',
            player_token=f'token-{n}',
        )
        db.session.add(player)
        db.session.commit()
        return player

    return _make


@pytest.fixture()
def session_with(flask_app, make_player):
    """Reset a session and seat armed players in it.

    Returns (session_id, {name: player}).
    """
    from redlight.services.game import director, telemetry

    def _setup(names, config=None, armed=True):
        gs = director.reset(config or {})
        players = {}
        for name in names:
            player = make_player(name)
            telemetry.join(player)
            if armed:
                telemetry.heartbeat(player, True)
            players[name] = player
        return gs.id, players

    return _setup
