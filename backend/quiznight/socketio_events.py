from flask import current_app, request
from flask_socketio import emit

from quiznight import socketio
from quiznight.errors import InvalidQuiz, QuizNightError

NAMESPACE = '/ws'


class SocketBroadcaster:
    """Room-addressed broadcast and unicast over the Socket.IO server.

    Uses the server-level API so it also works from background tasks,
    where there is no request context.
    """

    def __init__(self, sio, namespace: str = NAMESPACE):
        self.sio = sio
        self.namespace = namespace

    def emit(self, event, data=None, to=None):
        if data is None:
            self.sio.emit(event, to=to, namespace=self.namespace)
        else:
            self.sio.emit(event, data, to=to, namespace=self.namespace)

    def enter_room(self, sid, room):
        self.sio.server.enter_room(sid, room, namespace=self.namespace)

    def leave_room(self, sid, room):
        self.sio.server.leave_room(sid, room, namespace=self.namespace)

    def close_room(self, room):
        self.sio.close_room(room, namespace=self.namespace)


def _session():
    return current_app.extensions['quiz_session']


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def handle_connect(auth=None):
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(reason=None):
    _session().disconnect(_get_sid())


def handle_host_create_room(data=None):
    try:
        _session().create_room(_get_sid())
    except QuizNightError as exc:
        emit('host_error', exc.to_dict())


def handle_host_set_quiz(data):
    data = data or {}
    try:
        _session().set_quiz(_get_sid(), data.get('code'), data.get('quiz'), title=data.get('title'))
    except InvalidQuiz as exc:
        emit('host_error', exc.to_dict())


def handle_host_start(data):
    _session().start(_get_sid(), (data or {}).get('code'))


def handle_host_next(data):
    _session().next_question(_get_sid(), (data or {}).get('code'))


def handle_host_end_question(data):
    _session().end_question(_get_sid(), (data or {}).get('code'))


def handle_player_join(data):
    data = data or {}
    try:
        _session().join(_get_sid(), data.get('code'), data.get('name'))
    except QuizNightError as exc:
        emit('player_error', exc.to_dict())


def handle_player_answer(data):
    _session().submit_answer(_get_sid(), (data or {}).get('value'))


def handle_leave_room(data=None):
    _session().leave(_get_sid())
    emit('left', {})


def handle_error(exc):
    # Keep the listener alive; the fault is confined to this one event
    current_app.logger.exception(f"[socket-error] sid={_get_sid()} event={request.event}")  # type: ignore


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on namespace '/ws'."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('host_create_room', handle_host_create_room, namespace=NAMESPACE)
    socketio.on_event('host_set_quiz', handle_host_set_quiz, namespace=NAMESPACE)
    socketio.on_event('host_start', handle_host_start, namespace=NAMESPACE)
    socketio.on_event('host_next', handle_host_next, namespace=NAMESPACE)
    socketio.on_event('host_end_question', handle_host_end_question, namespace=NAMESPACE)
    socketio.on_event('player_join', handle_player_join, namespace=NAMESPACE)
    socketio.on_event('player_answer', handle_player_answer, namespace=NAMESPACE)
    socketio.on_event('leave_room', handle_leave_room, namespace=NAMESPACE)
    socketio.on_error(NAMESPACE)(handle_error)
