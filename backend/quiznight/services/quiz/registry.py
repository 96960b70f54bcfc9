from typing import Dict, Optional

from quiznight.errors import RoomNotFound
from quiznight.models import Room, generate_room_code


def normalize_code(code) -> str:
    return str(code or '').strip().upper()


class RoomRegistry:
    """Live rooms by code, plus which room each connection belongs to.

    The single place where rooms are created and deleted.
    """

    def __init__(self, alphabet: str, code_length: int = 4, default_title: str = 'Untitled Quiz'):
        self.alphabet = alphabet
        self.code_length = code_length
        self.default_title = default_title
        self._rooms: Dict[str, Room] = {}
        self._sid_to_code: Dict[str, str] = {}

    def create_room(self, host_sid: str) -> Room:
        code = generate_room_code(self._rooms, self.alphabet, self.code_length)
        room = Room(code=code, host_sid=host_sid, title=self.default_title)
        self._rooms[code] = room
        self._sid_to_code[host_sid] = code
        return room

    def get_room(self, code) -> Optional[Room]:
        return self._rooms.get(normalize_code(code))

    def require_room(self, code) -> Room:
        room = self.get_room(code)
        if room is None:
            raise RoomNotFound()
        return room

    def delete_room(self, code) -> Optional[Room]:
        room = self._rooms.pop(normalize_code(code), None)
        if room is not None:
            stale = [sid for sid, c in self._sid_to_code.items() if c == room.code]
            for sid in stale:
                del self._sid_to_code[sid]
        return room

    def bind(self, sid: str, code: str) -> None:
        self._sid_to_code[sid] = code

    def unbind(self, sid: str) -> Optional[str]:
        return self._sid_to_code.pop(sid, None)

    def code_for(self, sid: str) -> Optional[str]:
        return self._sid_to_code.get(sid)

    def room_for(self, sid: str) -> Optional[Room]:
        code = self._sid_to_code.get(sid)
        return self._rooms.get(code) if code else None

    def __contains__(self, code) -> bool:
        return normalize_code(code) in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)
