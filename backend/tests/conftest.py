import os
import sys
import random
import pytest

# Ensure the backend root (containing the `monster_arena` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from monster_arena import create_app, registry, socketio
from monster_arena.models import Creature, MonsterKind
from monster_arena.services.games import GameSession, SessionOptions


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = ['http://localhost:5173']
    ALLOW_PLACEMENT_CONFLICT = True
    DISCONNECT_POLICY = 'forfeit'
    LOG_LEVEL = 'DEBUG'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    registry.reset()
    with application.app_context():
        yield application
    registry.reset()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


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


def make_session(seed=7, **options):
    return GameSession('TEST', options=SessionOptions(**options), rng=random.Random(seed))


@pytest.fixture()
def session():
    """A lobby with no players."""
    return make_session()


@pytest.fixture()
def started_session():
    """Four players joined; round 1 in progress."""
    s = make_session()
    for _ in range(4):
        assert s.join().ok
    return s


def put(session, row, col, kind, owner, round_placed=0):
    """Drop a creature straight onto the board, bypassing placement rules."""
    creature = Creature(id=session._mint_creature_id(), kind=MonsterKind.parse(kind),
                        owner=owner, round_placed=round_placed)
    session.board.set(row, col, creature)
    session.roster.record_gain(owner)
    return creature


def give_turn(session, player_id):
    """Rearrange the current round so that ``player_id`` holds the turn."""
    others = [p for p in session.turn_order if p != player_id]
    session.turn_order = [player_id] + others
    session.turn_index = 0
    session.has_placed_this_turn = False
    session.moved_this_turn.clear()
