import random
import string
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Set, Tuple

from . import events


class RoomStatus(str, Enum):
    WAITING = 'waiting'
    ACTIVE = 'active'
    PLAYER_FINISHED = 'player_finished'
    FINISHED = 'finished'


class RoomError(Exception):
    code = 'room_error'
    message = 'Room error.'

    def __init__(self, room_code: Optional[str] = None):
        super().__init__(self.message)
        self.room_code = room_code


class RoomNotFound(RoomError):
    code = 'room_not_found'
    message = 'Room does not exist.'


class RoomFull(RoomError):
    code = 'room_full'
    message = 'Room is full.'


@dataclass
class Emission:
    """One outbound event. ``to`` is a room code or a single connection id."""
    event: str
    payload: dict
    to: str
    skip_sid: Optional[str] = None


class Room:
    MAX_PLAYERS = 2

    def __init__(self, code: str, creator: str, initial_time: int):
        self.code = code
        self.initial_time = initial_time
        self.players: List[str] = [creator]
        # Seat order as joined; unlike players it never shrinks
        self.seats: List[str] = [creator]
        # Provisional holder until the second player arrives
        self.current_turn: Optional[str] = creator
        self.timers: Dict[str, int] = {creator: initial_time}
        self.scores: Dict[str, int] = {creator: 0}
        self.finished_players: Set[str] = set()
        self.status = RoomStatus.WAITING
        self.turn = 0
        self.turn_started_at: Optional[float] = None
        self.turn_budget = 0

    @property
    def is_live(self) -> bool:
        return self.status in (RoomStatus.ACTIVE, RoomStatus.PLAYER_FINISHED)

    @property
    def is_full(self) -> bool:
        return len(self.players) >= self.MAX_PLAYERS

    def player_number(self, sid: str) -> Optional[int]:
        try:
            return self.players.index(sid) + 1
        except ValueError:
            return None

    def other(self, sid: str) -> Optional[str]:
        return next((p for p in self.players if p != sid), None)

    def all_finished(self) -> bool:
        return bool(self.players) and set(self.players) <= self.finished_players

    def start_turn(self, sid: str, now: float) -> None:
        self.current_turn = sid
        self.turn += 1
        self.turn_started_at = now
        self.turn_budget = self.timers.get(sid, 0)

    def remaining(self, sid: str, now: float) -> int:
        """Server-side view of a player's clock; only the holder's clock runs."""
        stored = self.timers.get(sid, 0)
        if sid != self.current_turn or not self.is_live or self.turn_started_at is None:
            return stored
        elapsed = int(max(0.0, now - self.turn_started_at))
        return max(0, min(stored, self.turn_budget - elapsed))

    def discard(self, sid: str) -> None:
        self.players = [p for p in self.players if p != sid]
        self.timers.pop(sid, None)
        self.finished_players.discard(sid)


@dataclass
class JoinResult:
    room: Room
    player_number: int
    started: bool
    emissions: List[Emission] = field(default_factory=list)


def generate_room_code(length: int = 6) -> str:
    return ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))


class RoomRegistry:
    """All live rooms, keyed by code. Mutations happen under ``lock``."""

    def __init__(self, initial_time: int = 250, code_length: int = 6,
                 code_factory: Optional[Callable[[], str]] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.initial_time = initial_time
        self.code_length = code_length
        self.code_factory = code_factory or (lambda: generate_room_code(self.code_length))
        self.clock = clock
        self.lock = threading.RLock()
        self._rooms: Dict[str, Room] = {}

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, code: str) -> bool:
        return self.get(code) is not None

    def get(self, code: Optional[str]) -> Optional[Room]:
        if not code:
            return None
        return self._rooms.get(code.upper())

    def rooms_for(self, sid: str) -> List[Room]:
        return [room for room in self._rooms.values() if sid in room.players]

    def _new_code(self) -> str:
        while True:
            code = self.code_factory().upper()
            if code not in self._rooms:
                return code

    def create_room(self, sid: str) -> Room:
        with self.lock:
            room = Room(self._new_code(), sid, self.initial_time)
            self._rooms[room.code] = room
            return room

    def join_room(self, code: Optional[str], sid: str) -> JoinResult:
        with self.lock:
            room = self.get(code)
            if room is None:
                raise RoomNotFound(code)
            if sid in room.players:
                # Re-joining your own room is a confirmation, not a new seat
                return JoinResult(room, room.player_number(sid), False,
                                  [Emission('roomJoined', events.room_joined(room, sid), sid)])
            if room.is_full or room.status != RoomStatus.WAITING:
                raise RoomFull(room.code)

            room.players.append(sid)
            room.seats.append(sid)
            room.timers[sid] = self.initial_time
            room.scores[sid] = 0
            number = room.player_number(sid)
            emissions = [Emission('roomJoined', events.room_joined(room, sid), sid)]

            started = room.is_full
            if started:
                room.status = RoomStatus.ACTIVE
                room.start_turn(room.players[0], self.clock())
                emissions.append(Emission('startGame', events.start_game(room), room.code))
            return JoinResult(room, number, started, emissions)

    def release(self, sid: str) -> List[Tuple[Room, bool]]:
        """Drop ``sid`` from every room it sits in.

        Empty rooms are deleted. Returns the rooms that still have players,
        each with whether ``sid`` held the turn there.
        """
        released: List[Tuple[Room, bool]] = []
        with self.lock:
            for room in self.rooms_for(sid):
                held_turn = room.current_turn == sid
                room.discard(sid)
                if not room.players:
                    self._rooms.pop(room.code, None)
                    continue
                released.append((room, held_turn))
        return released
