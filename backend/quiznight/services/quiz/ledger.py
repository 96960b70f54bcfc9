import time
from dataclasses import dataclass
from typing import Any, Dict, List


@dataclass(frozen=True)
class AnswerEntry:
    value: Any
    correct: bool
    submitted_at: float


class AnswerLedger:
    """Answers submitted for one room's active question.

    Holds at most one entry per player sid. ``reset(serial)`` starts a new
    question reveal; ``serial`` tells which reveal the entries belong to.
    """

    def __init__(self):
        self.serial = 0
        self._entries: Dict[str, AnswerEntry] = {}

    def reset(self, serial: int) -> None:
        self.serial = serial
        self._entries = {}

    def has_answered(self, sid: str) -> bool:
        return sid in self._entries

    def record(self, sid: str, question, value: Any) -> AnswerEntry:
        if sid in self._entries:
            raise ValueError(f'{sid} already answered reveal {self.serial}')
        entry = AnswerEntry(value=value, correct=question.is_correct(value), submitted_at=time.time())
        self._entries[sid] = entry
        return entry

    def count_present(self, players) -> int:
        """Entries whose player is still in the room."""
        return sum(1 for sid in self._entries if sid in players)

    def items(self):
        return self._entries.items()

    def entries(self):
        return self._entries.values()

    def __len__(self):
        return len(self._entries)


def host_answer_list(ledger: AnswerLedger, players) -> List[Dict[str, Any]]:
    """Per-player answers for the host; answers of departed players are omitted."""
    answers = []
    for sid, entry in ledger.items():
        player = players.get(sid)
        if not player:
            continue
        answers.append({'name': player.name, 'value': entry.value, 'correct': entry.correct})
    return sorted(answers, key=lambda a: a['name'].casefold())
