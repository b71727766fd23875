from flask_socketio import join_room, leave_room, emit
from flask import current_app, request
from monster_arena import registry, socketio
from monster_arena.services.games import Outcome
from typing import Any, Dict, Optional


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(reason=None):
    seat = registry.seat_for(_get_sid())
    if not seat:
        return
    outcome = registry.leave(_get_sid())
    current_app.logger.info(f"[socket-disconnect] game={seat.game_code} player={seat.player_id}")
    if outcome.ok:
        _publish(outcome, seat.game_code)


def handle_join_game(data):
    game_code = (data or {}).get('game_code')
    outcome = registry.join(_get_sid(), game_code)
    if not outcome.ok:
        emit('action_rejected', outcome.rejection_dict('join'))
        return
    code = outcome.snapshot.game_code
    room = _room(code)
    join_room(room)
    if not outcome.events:
        # Already seated: repeat the assignment to this socket only
        seat = outcome.snapshot.player(outcome.player_id)
        emit('player_assigned', {
            'player_number': outcome.player_id,
            'color': seat.color if seat else None,
            'game_code': code,
        })
    emit('joined', {'room': room, 'game_code': code, 'player_number': outcome.player_id})
    _publish(outcome, code)


def handle_leave_game(data=None):
    seat = registry.seat_for(_get_sid())
    if not seat:
        emit('error', {'message': 'You have not joined a game'})
        return
    outcome = registry.leave(_get_sid())
    room = _room(seat.game_code)
    leave_room(room)
    emit('left', {'room': room})
    if outcome.ok:
        _publish(outcome, seat.game_code)


def handle_place_monster(data):
    data = data or {}
    position = data.get('position') if isinstance(data.get('position'), dict) else data
    row = _as_int(position.get('row'))
    col = _as_int(position.get('col'))
    if row is None or col is None:
        emit('error', {'message': 'row and col must be integers'})
        return
    kind = _field(data, 'monster_type', 'monsterType')
    _respond('place', registry.place_monster(_get_sid(), kind, row, col))


def handle_move_monster(data):
    data = data or {}
    coords = [
        _as_int(_field(data, 'start_row', 'startRow')),
        _as_int(_field(data, 'start_col', 'startCol')),
        _as_int(_field(data, 'end_row', 'endRow')),
        _as_int(_field(data, 'end_col', 'endCol')),
    ]
    if any(c is None for c in coords):
        emit('error', {'message': 'start_row, start_col, end_row and end_col must be integers'})
        return
    _respond('move', registry.move_monster(_get_sid(), *coords))


def handle_end_turn(data=None):
    _respond('end_turn', registry.end_turn(_get_sid()))


def handle_ping(data):
    emit('pong', data or {})

# ---- publication helpers ----

def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _room(game_code: str) -> str:
    return f"game:{game_code}"


def _respond(action: str, outcome: Outcome) -> None:
    if not outcome.ok:
        emit('action_rejected', outcome.rejection_dict(action))
        return
    _publish(outcome, outcome.snapshot.game_code)


def _publish(outcome: Outcome, game_code: str) -> None:
    """Push every event of an accepted outcome to its audience."""
    namespace = request.namespace
    sids = registry.sids_for(game_code)
    for event in outcome.events:
        if event.to_player is not None:
            sid = sids.get(event.to_player)
            if sid:
                socketio.emit(event.name, event.payload, to=sid, namespace=namespace)
            continue
        socketio.emit(event.name, event.payload, to=_room(game_code), namespace=namespace)


def _field(data: Dict[str, Any], *names: str) -> Any:
    for name in names:
        if name in data:
            return data[name]
    return None


def _as_int(value) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip('-').isdigit():
        return int(value.strip())
    return None


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    handlers = {
        'connect': handle_connect,
        'disconnect': handle_disconnect,
        'join_game': handle_join_game,
        'leave_game': handle_leave_game,
        'place_monster': handle_place_monster,
        'move_monster': handle_move_monster,
        'end_turn': handle_end_turn,
        'ping': handle_ping,
    }
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        for name, handler in handlers.items():
            socketio.on_event(name, handler, namespace=namespace)
