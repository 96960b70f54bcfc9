from typing import Any, Optional

from quiznight.errors import InvalidQuiz
from quiznight.models import McqQuestion, Quiz, TextQuestion


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _time_limit(raw: dict, n: int) -> Optional[int]:
    value = raw.get('time')
    if value is None:
        return None
    if not _is_int(value) or value <= 0:
        raise InvalidQuiz(f'Question {n}: "time" must be a positive whole number of seconds')
    return value


def _strings(value: Any, key: str, n: int):
    if not isinstance(value, list) or not value:
        raise InvalidQuiz(f'Question {n}: "{key}" must be a non-empty list')
    if not all(isinstance(v, str) and v.strip() for v in value):
        raise InvalidQuiz(f'Question {n}: every entry of "{key}" must be a non-empty string')
    return tuple(value)


def parse_question(raw: Any, n: int):
    if not isinstance(raw, dict):
        raise InvalidQuiz(f'Question {n} must be an object')
    prompt = raw.get('question')
    if not isinstance(prompt, str) or not prompt.strip():
        raise InvalidQuiz(f'Question {n}: "question" text is required')

    kind = raw.get('type')
    if kind == 'mcq':
        options = _strings(raw.get('options'), 'options', n)
        answer = raw.get('answer')
        if not _is_int(answer) or not 0 <= answer < len(options):
            raise InvalidQuiz(f'Question {n}: "answer" must be an option index between 0 and {len(options) - 1}')
        return McqQuestion(prompt=prompt, options=options, answer_index=answer, time_limit=_time_limit(raw, n))
    if kind == 'text':
        accepted = _strings(raw.get('answers'), 'answers', n)
        return TextQuestion(prompt=prompt, accepted=accepted, time_limit=_time_limit(raw, n))
    raise InvalidQuiz(f'Question {n}: unknown type {kind!r} (expected "mcq" or "text")')


def parse_quiz(document: Any, title: Optional[str] = None, default_title: str = 'Untitled Quiz') -> Quiz:
    """Validate an uploaded quiz document and build an immutable ``Quiz``.

    Title precedence: explicit ``title``, the document's own title, then
    ``default_title``. Raises ``InvalidQuiz`` describing the first problem.
    """
    if not isinstance(document, dict):
        raise InvalidQuiz('Quiz must be a JSON object')
    questions = document.get('questions')
    if not isinstance(questions, list) or not questions:
        raise InvalidQuiz('Quiz must have a non-empty "questions" array')
    parsed = tuple(parse_question(q, i + 1) for i, q in enumerate(questions))

    chosen = title if isinstance(title, str) and title.strip() else document.get('title')
    if not isinstance(chosen, str) or not chosen.strip():
        chosen = default_title
    return Quiz(title=chosen.strip(), questions=parsed)
