from flask import current_app, request
from flask_socketio import emit, join_room, leave_room
from charades import socketio
from charades.services.game import GameError, InvalidPayload, RoomConfig, StaleAction, registry, turns
from charades.services.game.broadcast import NAMESPACE, room_channel
from typing import Any, Dict
import functools


def _get_sid() -> str:
    return request.sid  # type: ignore


def _report(exc: GameError) -> None:
    current_app.logger.info(f"[rejected] sid={_get_sid()} code={exc.code} message={exc.message}")
    emit('error_msg', exc.to_dict())


def game_event(handler):
    """Turn a GameError raised by ``handler`` into an ``error_msg`` for the requester only."""
    @functools.wraps(handler)
    def wrapper(data=None):
        if data is not None and not isinstance(data, dict):
            _report(InvalidPayload())
            return None
        try:
            return handler(data or {})
        except StaleAction:
            current_app.logger.debug(f"[stale] sid={_get_sid()} event={handler.__name__}")
        except GameError as exc:
            _report(exc)
    return wrapper


def _broadcast_lobby(room) -> None:
    with room.lock:
        payload = room.lobby_payload()
    socketio.emit('update_lobby', payload, to=room_channel(room.code), namespace=NAMESPACE)


def _release_sid(sid: str) -> None:
    """Detach ``sid`` from whatever room it was in, ending its turn if it was acting."""
    room = registry.room_of(sid)
    if room is None:
        return
    turns.abandon_turn(room, sid)
    registry.leave(sid)
    leave_room(room_channel(room.code))
    _broadcast_lobby(room)


def handle_connect(auth=None):
    _ensure_room_sweeper(current_app._get_current_object())
    emit('connected', {'message': f'Connected to {NAMESPACE}'})


def handle_disconnect(*_args):
    _release_sid(_get_sid())


@game_event
def handle_create_room(data: Dict[str, Any]):
    cfg = current_app.config
    config = RoomConfig.from_payload(
        data,
        default_duration=cfg.get('DEFAULT_TURN_DURATION_SEC', 60),
        max_duration=cfg.get('MAX_TURN_DURATION_SEC', 600),
    )
    room = registry.create_room(config)
    emit('room_created', {'roomCode': room.code, 'teamNames': list(config.team_names)})


@game_event
def handle_join_room(data: Dict[str, Any]):
    sid = _get_sid()
    room = registry.lookup_room(data.get('roomCode'))
    previous = registry.room_of(sid)
    registry.join_room(room.code, sid, data.get('playerName'), data.get('teamName'))
    if previous is not None and previous is not room:
        turns.abandon_turn(previous, sid)
        leave_room(room_channel(previous.code))
        _broadcast_lobby(previous)
    join_room(room_channel(room.code))
    _broadcast_lobby(room)
    turns.snapshot_for_joiner(room, sid)


@game_event
def handle_setup_turn(data: Dict[str, Any]):
    room = registry.lookup_room(data.get('roomCode'))
    turns.request_turn_setup(room, _get_sid())


@game_event
def handle_get_word(data: Dict[str, Any]):
    room = registry.lookup_room(data.get('roomCode'))
    category = data.get('category') or data.get('type')
    turns.select_word(room, _get_sid(), category, data.get('difficulty'))


@game_event
def handle_start_acting(data: Dict[str, Any]):
    room = registry.lookup_room(data.get('roomCode'))
    turns.begin_acting(room, _get_sid())


@game_event
def handle_word_found(data: Dict[str, Any]):
    room = registry.lookup_room(data.get('roomCode'))
    turns.resolve_found(room, _get_sid())


def handle_ping(data):
    emit('pong', data or {})


# ---- Idle room expiry ----
_sweeper_started = False


def _ensure_room_sweeper(app) -> None:
    global _sweeper_started
    if _sweeper_started or not app.config.get('ENABLE_ROOM_SWEEPER'):
        return
    _sweeper_started = True
    interval = int(app.config.get('ROOM_SWEEP_INTERVAL_SEC', 300))
    max_idle = int(app.config.get('ROOM_IDLE_TIMEOUT_SEC', 3600))

    def _worker():
        while True:
            socketio.sleep(interval)
            registry.sweep_idle(max_idle)

    app.logger.info(f"[sweeper-start] interval={interval}s max_idle={max_idle}s")
    socketio.start_background_task(_worker)


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on the game namespace."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('create_room', handle_create_room, namespace=NAMESPACE)
    socketio.on_event('join_room', handle_join_room, namespace=NAMESPACE)
    socketio.on_event('setup_turn', handle_setup_turn, namespace=NAMESPACE)
    socketio.on_event('get_word', handle_get_word, namespace=NAMESPACE)
    socketio.on_event('start_acting', handle_start_acting, namespace=NAMESPACE)
    socketio.on_event('word_found', handle_word_found, namespace=NAMESPACE)
    socketio.on_event('ping', handle_ping, namespace=NAMESPACE)
