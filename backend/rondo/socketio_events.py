from flask_socketio import join_room, emit
from flask import current_app, request
from typing import List, Optional

from rondo import socketio, db
from rondo.schemas import (
    JoinRoom, PlayerFinished, PlayerMove, UpdateTimer, ValidationError, parse, parse_action,
)
from rondo.services.catalog.store import record_result
from rondo.services.match import Emission, Room, RoomError, RoomRegistry, TurnCoordinator
from rondo.services.match import events
from rondo.services.match.events import final_scores
from rondo.services.match.scheduler import clear_scheduled_turns, schedule_turn_deadline


registry: Optional[RoomRegistry] = None
coordinator: Optional[TurnCoordinator] = None
_namespace = '/'


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _dispatch(emissions: List[Emission]) -> None:
    for e in emissions:
        socketio.emit(e.event, e.payload, to=e.to, namespace=_namespace, skip_sid=e.skip_sid)


def _schedule(code: str) -> None:
    schedule_turn_deadline(current_app._get_current_object(), coordinator, code, _dispatch)


def _record_game_over(room: Room) -> None:
    """Append the final score to the leaderboard; never breaks the handler."""
    scores = final_scores(room)
    try:
        record_result(scores['player1'], scores['player2'], room_code=room.code)
    except Exception as exc:
        db.session.rollback()
        current_app.logger.warning(f"[game-over] room={room.code} leaderboard write failed: {exc}")
        return
    current_app.logger.info(
        f"[game-over] room={room.code} player1={scores['player1']} player2={scores['player2']}"
    )


def handle_connect(auth=None):
    current_app.logger.debug(f"[connect] sid={_get_sid()}")


def handle_disconnect(reason=None):
    sid = _get_sid()
    emissions = coordinator.remove_connection(sid)
    current_app.logger.info(f"[disconnect] sid={sid} events={[e.event for e in emissions]}")
    _dispatch(emissions)
    for e in emissions:
        _schedule(e.to)


def handle_create_room(data=None):
    sid = _get_sid()
    room = registry.create_room(sid)
    join_room(room.code)
    current_app.logger.info(f"[room-create] room={room.code} sid={sid}")
    emit('roomCreated', events.room_created(room, sid))


def handle_join_room(data):
    sid = _get_sid()
    try:
        msg = parse(JoinRoom, data)
    except ValidationError:
        emit('error', events.error('room is required'))
        return
    try:
        result = registry.join_room(msg.room, sid)
    except RoomError as exc:
        current_app.logger.info(f"[room-join] room={msg.room} sid={sid} rejected={exc.code}")
        emit('error', events.error(exc))
        return
    join_room(result.room.code)
    current_app.logger.info(
        f"[room-join] room={result.room.code} sid={sid} player={result.player_number} started={result.started}"
    )
    _dispatch(result.emissions)
    if result.started:
        _schedule(result.room.code)


def handle_player_action(data):
    sid = _get_sid()
    try:
        msg = parse_action(data)
    except ValidationError:
        current_app.logger.debug(f"[turn] sid={sid} dropped malformed action")
        return
    emissions = coordinator.handle_action(msg.room, sid, msg.action, msg.currentTime, msg.turn)
    if not emissions:
        current_app.logger.debug(f"[turn] room={msg.room} sid={sid} action={msg.action} ignored")
        return
    current_app.logger.info(f"[turn] room={msg.room} sid={sid} action={msg.action} -> {emissions[0].event}")
    _dispatch(emissions)
    _schedule(msg.room)


def handle_update_timer(data):
    sid = _get_sid()
    try:
        msg = parse(UpdateTimer, data)
    except ValidationError:
        return
    accepted = coordinator.handle_timer_sync(msg.room, sid, msg.timeLeft)
    current_app.logger.debug(f"[timer-sync] room={msg.room} sid={sid} timeLeft={msg.timeLeft} accepted={accepted}")


def handle_player_move(data):
    sid = _get_sid()
    try:
        msg = parse(PlayerMove, data)
    except ValidationError:
        return
    _dispatch(coordinator.handle_move(msg.room, sid, msg.answer, msg.isCorrect))


def handle_player_finished(data):
    sid = _get_sid()
    try:
        msg = parse(PlayerFinished, data)
    except ValidationError:
        return
    emissions = coordinator.handle_player_finished(msg.room, sid)
    if not emissions:
        current_app.logger.debug(f"[turn] room={msg.room} sid={sid} finished queue, no transition")
        return
    current_app.logger.info(f"[turn] room={msg.room} sid={sid} finished queue -> {emissions[0].event}")
    _dispatch(emissions)
    _schedule(msg.room)


def register_socketio_handlers(flask_app) -> None:
    """Build a fresh registry from config and register Socket.IO handlers.

    Handlers are bound on the configured namespace (default '/').
    """
    global registry, coordinator, _namespace
    cfg = flask_app.config
    registry = RoomRegistry(
        initial_time=int(cfg.get('INITIAL_TIME_SEC', 250)),
        code_length=int(cfg.get('ROOM_CODE_LENGTH', 6)),
        code_factory=cfg.get('ROOM_CODE_FACTORY'),
    )
    coordinator = TurnCoordinator(registry, on_game_over=_record_game_over)
    clear_scheduled_turns()
    _namespace = cfg.get('SOCKETIO_NAMESPACE', '/')

    socketio.on_event('connect', handle_connect, namespace=_namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=_namespace)
    socketio.on_event('createRoom', handle_create_room, namespace=_namespace)
    socketio.on_event('joinRoom', handle_join_room, namespace=_namespace)
    socketio.on_event('playerAction', handle_player_action, namespace=_namespace)
    socketio.on_event('updateTimer', handle_update_timer, namespace=_namespace)
    socketio.on_event('playerMove', handle_player_move, namespace=_namespace)
    socketio.on_event('playerFinished', handle_player_finished, namespace=_namespace)
