"""Room lifecycle and question flow.

``SessionController`` owns every mutation of room state. Each public method is
one reaction to an inbound message (or a timer firing) and runs under a single
dispatch lock, so reactions never overlap. Between reactions anything may have
changed: every method re-fetches its room by code or sid and re-checks the
phase before touching it.

Phases::

    lobby -> started -> question_active <-> question_ended -> ... -> quiz_ended

Host-only actions coming from any other connection are dropped without a
reply.
"""
import logging
import threading
from typing import Any, Optional

from quiznight.errors import AlreadyJoined, InvalidName, NameTaken
from quiznight.models import (
    LOBBY,
    QUESTION_ACTIVE,
    QUESTION_ENDED,
    QUIZ_ENDED,
    STARTED,
    Player,
    Room,
    normalize_name,
)
from .document import parse_quiz
from .ledger import host_answer_list
from .registry import RoomRegistry, normalize_code
from .scheduler import QuestionTimer
from .scoring import leaderboard, score_ledger


class SessionController:

    def __init__(self, registry: RoomRegistry, broadcaster, timer: QuestionTimer, logger=None):
        self.registry = registry
        self.broadcaster = broadcaster
        self.timer = timer
        self.logger = logger or logging.getLogger(__name__)
        self._lock = threading.RLock()

    # ---- helpers ----

    def _emit(self, event: str, data: Any = None, to: Optional[str] = None) -> None:
        self.broadcaster.emit(event, data, to=to)

    def _host_room(self, sid: str, code: Any, action: str) -> Optional[Room]:
        room = self.registry.get_room(code)
        if room is None:
            self.logger.info(f"[stale] {action} for unknown room={normalize_code(code)}")
            return None
        if room.host_sid != sid:
            self.logger.info(f"[ignored] {action} room={room.code} from non-host sid={sid}")
            return None
        return room

    def _broadcast_roster(self, room: Room) -> None:
        self._emit('room_players', room.roster(), to=room.code)

    # ---- room registry ----

    def create_room(self, host_sid: str) -> Room:
        with self._lock:
            if self.registry.code_for(host_sid):
                raise AlreadyJoined()
            room = self.registry.create_room(host_sid)
            self.broadcaster.enter_room(host_sid, room.code)
            self.logger.info(f"[room-create] room={room.code} host={host_sid}")
            self._emit('room_created', {'code': room.code}, to=host_sid)
            return room

    # ---- host actions ----

    def set_quiz(self, sid: str, code: Any, document: Any, title: Optional[str] = None) -> bool:
        """Load a quiz document. Raises ``InvalidQuiz`` for malformed documents."""
        with self._lock:
            room = self._host_room(sid, code, 'set_quiz')
            if room is None:
                return False
            if room.phase == QUESTION_ACTIVE:
                self.logger.info(f"[ignored] set_quiz room={room.code} while a question is active")
                return False
            quiz = parse_quiz(document, title=title, default_title=self.registry.default_title)
            room.quiz = quiz
            room.title = quiz.title
            room.question_index = -1
            room.accepting_answers = False
            room.phase = LOBBY
            self.logger.info(f"[quiz-set] room={room.code} title={quiz.title!r} questions={len(quiz.questions)}")
            self._emit('room_meta', quiz.to_meta(), to=room.code)
            return True

    def start(self, sid: str, code: Any) -> bool:
        with self._lock:
            room = self._host_room(sid, code, 'start')
            if room is None:
                return False
            if room.quiz is None or room.phase != LOBBY:
                self.logger.info(f"[ignored] start room={room.code} phase={room.phase} quiz_loaded={room.quiz is not None}")
                return False
            room.phase = STARTED
            room.question_index = -1
            room.accepting_answers = False
            self.logger.info(f"[start] room={room.code}")
            self._emit('room_started', to=room.code)
            return True

    def next_question(self, sid: str, code: Any) -> bool:
        with self._lock:
            room = self._host_room(sid, code, 'next')
            if room is None:
                return False
            if room.phase not in (STARTED, QUESTION_ENDED):
                self.logger.info(f"[ignored] next room={room.code} phase={room.phase}")
                return False

            room.question_index += 1
            if room.question_index >= len(room.quiz.questions):
                room.accepting_answers = False
                room.phase = QUIZ_ENDED
                self.logger.info(f"[quiz-end] room={room.code} players={len(room.players)}")
                self._emit('quiz_ended', {'leaderboard': leaderboard(room.players)}, to=room.code)
                return True

            index = room.question_index
            question = room.current_question
            room.question_serial += 1
            room.ledger.reset(room.question_serial)
            room.accepting_answers = True
            room.phase = QUESTION_ACTIVE
            self.logger.info(
                f"[q-show] room={room.code} question={index} reveal={room.question_serial} type={question.type}"
            )
            self._emit('question_show', question.player_view(index), to=room.code)
            self._emit('host_question_show', question.host_view(index), to=room.host_sid)
            if question.time_limit:
                self.timer.arm(room.code, room.question_serial, question.time_limit, self._on_timer)
            return True

    def end_question(self, sid: str, code: Any) -> bool:
        with self._lock:
            room = self._host_room(sid, code, 'end_question')
            if room is None:
                return False
            return self._end_question(room)

    def _on_timer(self, code: str, serial: int) -> None:
        # serial, not the question index: the index repeats after a quiz reload
        with self._lock:
            room = self.registry.get_room(code)
            if room is None or room.question_serial != serial or not room.accepting_answers:
                self.logger.info(f"[timer-abort] room={code} reveal={serial} superseded")
                return
            self._end_question(room)

    def _end_question(self, room: Room) -> bool:
        if room.phase != QUESTION_ACTIVE or not room.accepting_answers:
            self.logger.info(f"[ignored] end_question room={room.code} phase={room.phase}")
            return False
        room.accepting_answers = False
        question = room.current_question
        awarded = score_ledger(room.ledger, room.players)
        room.phase = QUESTION_ENDED
        self.logger.info(
            f"[q-end] room={room.code} question={room.question_index} answers={len(room.ledger)} points={awarded}"
        )
        reveal = question.reveal()
        self._emit('question_ended', {
            'index': room.question_index,
            'correct': reveal,
            'leaderboard': leaderboard(room.players),
            'answer_stats': question.stats(room.ledger.entries()),
        }, to=room.code)
        self._emit('host_question_ended', {
            'index': room.question_index,
            'correct': reveal,
            'answers': host_answer_list(room.ledger, room.players),
        }, to=room.host_sid)
        return True

    # ---- players ----

    def join(self, sid: str, code: Any, name: Any) -> Room:
        """Add a player. Raises ``RoomNotFound``, ``InvalidName``, ``NameTaken``."""
        with self._lock:
            room = self.registry.require_room(code)
            key = normalize_name(name)
            if not key:
                raise InvalidName()
            if key in room.names:
                raise NameTaken()
            if self.registry.code_for(sid):
                raise AlreadyJoined()
            player = Player(sid=sid, name=str(name).strip())
            room.players[sid] = player
            room.names[key] = sid
            self.registry.bind(sid, room.code)
            self.broadcaster.enter_room(sid, room.code)
            self.logger.info(f"[join] room={room.code} name={player.name!r} players={len(room.players)}")
            self._emit('player_joined', {'code': room.code, 'title': room.title}, to=sid)
            self._broadcast_roster(room)
            return room

    def submit_answer(self, sid: str, value: Any) -> bool:
        with self._lock:
            room = self.registry.room_for(sid)
            if room is None or sid not in room.players:
                self.logger.info(f"[stale] answer from sid={sid} without a room")
                return False
            if (room.phase != QUESTION_ACTIVE or not room.accepting_answers
                    or room.ledger.serial != room.question_serial):
                self.logger.info(f"[ignored] answer room={room.code} phase={room.phase} from sid={sid}")
                return False
            if room.ledger.has_answered(sid):
                self.logger.info(f"[ignored] duplicate answer room={room.code} question={room.question_index} sid={sid}")
                return False
            entry = room.ledger.record(sid, room.current_question, value)
            self._emit('answer_received', {'correct': entry.correct}, to=sid)
            # departed players' entries stay in the ledger but not in the progress count
            self._emit('host_answer_update', {
                'count': room.ledger.count_present(room.players),
                'total': len(room.players),
            }, to=room.host_sid)
            return True

    def leave(self, sid: str) -> None:
        """Handle an explicit leave or a disconnect for any connection."""
        with self._lock:
            code = self.registry.unbind(sid)
            if code is None:
                return
            room = self.registry.get_room(code)
            if room is None:
                self.logger.info(f"[stale] leave sid={sid} for closed room={code}")
                return
            if room.host_sid == sid:
                self._close_room(room)
                return
            player = room.players.pop(sid, None)
            if player is None:
                return
            room.names.pop(normalize_name(player.name), None)
            self.broadcaster.leave_room(sid, room.code)
            self.logger.info(f"[leave] room={room.code} name={player.name!r} players={len(room.players)}")
            self._broadcast_roster(room)

    disconnect = leave

    def _close_room(self, room: Room) -> None:
        self._emit('room_closed', to=room.code)
        self.registry.delete_room(room.code)
        self.broadcaster.close_room(room.code)
        self.logger.info(f"[room-close] room={room.code} host left, players={len(room.players)}")
