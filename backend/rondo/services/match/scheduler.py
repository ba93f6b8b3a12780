from typing import Callable, List, Set, Tuple

from rondo import socketio
from .rooms import Emission
from .turns import TurnCoordinator


_scheduled_turn_keys: Set[Tuple[str, int]] = set()


def schedule_turn_deadline(app, coordinator: TurnCoordinator, code: str,
                           dispatch: Callable[[List[Emission]], None]) -> None:
    """Expire the current turn of ``code`` once the holder's clock runs out.

    - No-ops in TESTING mode unless ENABLE_SCHEDULER_IN_TESTS is set
    - Ensures a single timer per (room, turn)
    - Fires ``coordinator.expire_turn`` which ignores turns that already moved on
    """
    if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        return

    registry = coordinator.registry
    with registry.lock:
        room = registry.get(code)
        if room is None or not room.is_live:
            return
        turn = room.turn
        key = (room.code, turn)
        if key in _scheduled_turn_keys:
            return
        _scheduled_turn_keys.add(key)
        grace = int(app.config.get('TURN_DEADLINE_GRACE_SEC', 2))
        delay = max(0, room.remaining(room.current_turn, registry.clock())) + grace
        app.logger.info(f"[timer-set] room={room.code} turn={turn} holder={room.current_turn} delay={delay}s")

    def _worker(room_code: str, expected_turn: int, wait: int):
        if wait > 0:
            socketio.sleep(wait)
        _scheduled_turn_keys.discard((room_code, expected_turn))
        with app.app_context():
            emissions = coordinator.expire_turn(room_code, expected_turn)
            if not emissions:
                app.logger.debug(f"[timer-abort] room={room_code} turn={expected_turn} already moved on")
                return
            app.logger.info(f"[timer-fire] room={room_code} turn={expected_turn} expired")
            dispatch(emissions)
            schedule_turn_deadline(app, coordinator, room_code, dispatch)

    if app.config.get('TESTING'):
        _worker(room.code, turn, delay)
    else:
        socketio.start_background_task(_worker, room.code, turn, delay)


def clear_scheduled_turns() -> None:
    _scheduled_turn_keys.clear()
