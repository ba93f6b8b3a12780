from typing import Callable, List, Optional

from . import events
from .rooms import Emission, Room, RoomRegistry, RoomStatus


ACTIONS = ('skip', 'wrongAnswer', 'timeout')


class TurnCoordinator:
    """Authoritative turn ownership and clocks for every room in a registry.

    Every rejection here is silent: the caller gets an empty emission list
    and nothing about the room is revealed to the sender.
    """

    def __init__(self, registry: RoomRegistry, on_game_over: Optional[Callable[[Room], None]] = None):
        self.registry = registry
        self.on_game_over = on_game_over

    @property
    def clock(self):
        return self.registry.clock

    def handle_action(self, code: str, sid: str, action: str, reported_time: Optional[int],
                      turn: Optional[int] = None) -> List[Emission]:
        if action not in ACTIONS:
            return []
        with self.registry.lock:
            room = self.registry.get(code)
            if room is None or not room.is_live or room.current_turn != sid:
                return []
            if turn is not None and turn != room.turn:
                # Stale: the action was meant for an earlier turn
                return []

            now = self.clock()
            remaining = room.remaining(sid, now)
            if action == 'timeout':
                time_left = 0
            else:
                reported = remaining if reported_time is None else max(0, int(reported_time))
                time_left = min(reported, remaining)
            room.timers[sid] = time_left
            if time_left == 0:
                room.finished_players.add(sid)
            return self._advance(room, sid, now)

    def handle_timer_sync(self, code: str, sid: str, time_left: int) -> bool:
        with self.registry.lock:
            room = self.registry.get(code)
            if room is None or sid not in room.players or room.status == RoomStatus.FINISHED:
                return False
            if time_left is None or time_left < 0:
                return False
            ceiling = min(room.timers.get(sid, 0), room.remaining(sid, self.clock()))
            if time_left > ceiling:
                return False
            room.timers[sid] = int(time_left)
            return True

    def handle_move(self, code: str, sid: str, answer: str, is_correct: bool) -> List[Emission]:
        with self.registry.lock:
            room = self.registry.get(code)
            if room is None or sid not in room.players:
                return []
            if is_correct and room.is_live and room.current_turn == sid:
                room.scores[sid] = room.scores.get(sid, 0) + 1
            payload = events.player_move(room, sid, answer, is_correct)
            return [Emission('playerMove', payload, room.code, skip_sid=sid)]

    def handle_player_finished(self, code: str, sid: str) -> List[Emission]:
        with self.registry.lock:
            room = self.registry.get(code)
            if room is None or not room.is_live or sid not in room.players:
                return []
            if sid in room.finished_players:
                return []
            room.finished_players.add(sid)
            if room.current_turn == sid or room.all_finished():
                return self._advance(room, sid, self.clock())
            room.status = RoomStatus.PLAYER_FINISHED
            return []

    def expire_turn(self, code: str, turn: int) -> List[Emission]:
        """Time out the holder if the room is still on ``turn``."""
        with self.registry.lock:
            room = self.registry.get(code)
            if room is None or not room.is_live or room.turn != turn:
                return []
            return self.handle_action(room.code, room.current_turn, 'timeout', 0, turn)

    def remove_connection(self, sid: str) -> List[Emission]:
        """Take ``sid`` out of its rooms and settle what is left behind.

        A live room whose remaining players are all finished ends here;
        otherwise a departing holder hands the turn to whoever is left.
        """
        emissions: List[Emission] = []
        with self.registry.lock:
            for room, held_turn in self.registry.release(sid):
                if not room.is_live:
                    if held_turn:
                        room.current_turn = room.players[0]
                    continue
                if room.all_finished():
                    emissions.extend(self._finish(room))
                    continue
                room.status = RoomStatus.PLAYER_FINISHED if room.finished_players else RoomStatus.ACTIVE
                if held_turn:
                    room.start_turn(room.players[0], self.clock())
                    emissions.append(Emission('turnChanged', events.turn_changed(room), room.code))
        return emissions

    def _finish(self, room: Room) -> List[Emission]:
        room.status = RoomStatus.FINISHED
        room.turn_started_at = None
        if self.on_game_over is not None:
            self.on_game_over(room)
        return [Emission('gameOver', events.game_over(room), room.code)]

    def _advance(self, room: Room, actor: str, now: float) -> List[Emission]:
        if room.all_finished():
            return self._finish(room)

        other = room.other(actor)
        if other is not None and other not in room.finished_players:
            next_holder = other
        else:
            next_holder = actor
        room.status = RoomStatus.PLAYER_FINISHED if room.finished_players else RoomStatus.ACTIVE
        room.start_turn(next_holder, now)
        return [Emission('turnChanged', events.turn_changed(room), room.code)]
