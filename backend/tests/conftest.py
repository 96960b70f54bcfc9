import logging
import os
import sys

import pytest

# Ensure the backend root (containing the `quiznight` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from quiznight import create_app, socketio
from quiznight.services.quiz.registry import RoomRegistry
from quiznight.services.quiz.scheduler import QuestionTimer
from quiznight.services.quiz.session import SessionController


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = ['http://localhost:5173']
    ROOM_CODE_LENGTH = 4
    ROOM_CODE_ALPHABET = 'ABCDEFGHJKMNPQRSTUVWXYZ'
    DEFAULT_QUIZ_TITLE = 'Untitled Quiz'
    TIMER_HEARTBEAT_SEC = 0
    LOG_LEVEL = 'DEBUG'


class RecordingBroadcaster:
    """Collects everything the session would send over Socket.IO."""

    def __init__(self):
        self.sent = []
        self.groups = {}

    def emit(self, event, data=None, to=None):
        self.sent.append((event, data, to))

    def enter_room(self, sid, room):
        self.groups.setdefault(room, set()).add(sid)

    def leave_room(self, sid, room):
        self.groups.get(room, set()).discard(sid)

    def close_room(self, room):
        self.groups.pop(room, None)

    def events(self, name, to=None):
        return [data for event, data, target in self.sent if event == name and (to is None or target == to)]

    def last(self, name, to=None):
        found = self.events(name, to)
        return found[-1] if found else None

    def clear(self):
        self.sent = []


class ManualTimer:
    """Captures armed timer workers so tests decide when they fire."""

    def __init__(self):
        self.pending = []

    def spawn(self, fn, *args):
        self.pending.append((fn, args))

    def fire_all(self):
        pending, self.pending = self.pending, []
        for fn, args in pending:
            fn(*args)


MCQ_QUIZ = {
    'title': 'Capitals',
    'questions': [
        {'type': 'mcq', 'question': 'Capital of France?', 'options': ['Paris', 'Lyon'], 'answer': 0, 'time': 10},
    ],
}

MIXED_QUIZ = {
    'title': 'Mixed',
    'questions': [
        {'type': 'mcq', 'question': 'Capital of France?', 'options': ['Paris', 'Lyon', 'Nice'], 'answer': 0},
        {'type': 'text', 'question': 'Capital of Italy?', 'answers': ['Rome', 'roma ']},
    ],
}


@pytest.fixture()
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture()
def manual_timer():
    return ManualTimer()


@pytest.fixture()
def session(broadcaster, manual_timer):
    registry = RoomRegistry(alphabet='ABCDEFGHJKMNPQRSTUVWXYZ', code_length=4)
    timer = QuestionTimer(spawn=manual_timer.spawn, sleep=lambda seconds: None)
    return SessionController(registry, broadcaster, timer, logger=logging.getLogger('quiznight.tests'))


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_sio_client(flask_app):
    clients = []

    def _make():
        test_client = socketio.test_client(flask_app, namespace='/ws')
        clients.append(test_client)
        return test_client

    yield _make
    for test_client in clients:
        try:
            if test_client.is_connected('/ws'):
                test_client.disconnect(namespace='/ws')
        except Exception:
            pass
