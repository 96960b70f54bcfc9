import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from quiznight.services.quiz.ledger import AnswerLedger

# Room phases
LOBBY = 'lobby'
STARTED = 'started'
QUESTION_ACTIVE = 'question_active'
QUESTION_ENDED = 'question_ended'
QUIZ_ENDED = 'quiz_ended'


def normalize_name(name: Any) -> str:
    """Uniqueness key for a display name: trimmed and lower-cased."""
    return str(name or '').strip().lower()


def generate_room_code(existing, alphabet: str, length: int = 4) -> str:
    """Generate a short room code not present in ``existing``."""
    while True:
        code = ''.join(random.choices(alphabet, k=length))
        if code not in existing:
            return code


def _coerce_index(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    return None


def _fold(value: Any) -> str:
    return str(value if value is not None else '').strip().casefold()


@dataclass
class Player:
    sid: str
    name: str
    score: int = 0

    def to_dict(self):
        return {'name': self.name, 'score': self.score}


@dataclass(frozen=True)
class McqQuestion:
    prompt: str
    options: Tuple[str, ...]
    answer_index: int
    time_limit: Optional[int] = None

    type = 'mcq'

    def is_correct(self, value: Any) -> bool:
        # Anything that is not an integer, or is out of range, is just wrong
        return _coerce_index(value) == self.answer_index

    def player_view(self, index: int) -> Dict[str, Any]:
        return {
            'index': index,
            'type': self.type,
            'prompt': self.prompt,
            'options': list(self.options),
            'time_limit': self.time_limit,
        }

    def host_view(self, index: int) -> Dict[str, Any]:
        view = self.player_view(index)
        view['answer'] = self.answer_index
        return view

    def reveal(self) -> Dict[str, Any]:
        return {'type': self.type, 'answer_index': self.answer_index}

    def stats(self, entries) -> Dict[str, Any]:
        counts = [0] * len(self.options)
        for entry in entries:
            idx = _coerce_index(entry.value)
            if idx is not None and 0 <= idx < len(counts):
                counts[idx] += 1
        return {'type': self.type, 'counts': counts}


@dataclass(frozen=True)
class TextQuestion:
    prompt: str
    accepted: Tuple[str, ...]
    time_limit: Optional[int] = None

    type = 'text'

    def is_correct(self, value: Any) -> bool:
        return _fold(value) in {_fold(a) for a in self.accepted}

    def player_view(self, index: int) -> Dict[str, Any]:
        return {
            'index': index,
            'type': self.type,
            'prompt': self.prompt,
            'time_limit': self.time_limit,
        }

    def host_view(self, index: int) -> Dict[str, Any]:
        view = self.player_view(index)
        view['accepted'] = list(self.accepted)
        return view

    def reveal(self) -> Dict[str, Any]:
        return {'type': self.type, 'accepted': list(self.accepted)}

    def stats(self, entries) -> Dict[str, Any]:
        entries = list(entries)
        return {
            'type': self.type,
            'correct': sum(1 for e in entries if e.correct),
            'total': len(entries),
        }


@dataclass(frozen=True)
class Quiz:
    title: str
    questions: Tuple[Any, ...]

    def to_meta(self):
        return {'title': self.title, 'question_count': len(self.questions)}


@dataclass
class Room:
    code: str
    host_sid: str
    title: str
    phase: str = LOBBY
    quiz: Optional[Quiz] = None
    question_index: int = -1
    # Bumped on every question reveal, never reset; identifies one reveal across quiz reloads
    question_serial: int = 0
    accepting_answers: bool = False
    players: Dict[str, Player] = field(default_factory=dict)
    names: Dict[str, str] = field(default_factory=dict)  # name key -> sid
    ledger: AnswerLedger = field(default_factory=AnswerLedger)

    @property
    def current_question(self):
        if self.quiz is None or not 0 <= self.question_index < len(self.quiz.questions):
            return None
        return self.quiz.questions[self.question_index]

    def roster(self) -> List[Dict[str, Any]]:
        return [p.to_dict() for p in self.players.values()]

    def to_dict(self):
        return {
            'code': self.code,
            'title': self.title,
            'phase': self.phase,
            'question_count': len(self.quiz.questions) if self.quiz else 0,
            'player_count': len(self.players),
        }
