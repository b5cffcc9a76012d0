# checkers/sockets/game_handlers.py

from flask import request, current_app
from flask_socketio import emit
from marshmallow import ValidationError
from ..extensions import socketio
from ..services.logging_service import log_event
from ..api.schemas import AttemptMoveSchema, OpenRoomSchema
from ..game_core import constants as c


def _emit_all(notifications):
    for msg in notifications:
        emit(msg['event'], msg['payload'], room=msg['room'])


@socketio.on('open_private_room')
def handle_open_private_room(data=None):
    game_service = current_app.game_service
    sid = request.sid
    peer_id = game_service.get_peer_id_by_sid(sid)

    try:
        payload = OpenRoomSchema().load(data or {})
    except ValidationError as err:
        emit('room_rejection', {'code': 'INVALID_REQUEST', 'message': str(err.messages)})
        return

    print(f"[GameService] {peer_id} ({sid}) открывает комнату с {payload['opponent']}.")
    _emit_all(game_service.open_private_room(peer_id, payload['opponent']))


@socketio.on('attempt_move')
def handle_attempt_move(data=None):
    """
    Пир отпустил шашку. Ответ (ack) - {'accepted': bool};
    подробности уходят событиями board_update / move_rejection.
    """
    game_service = current_app.game_service
    sid = request.sid

    game_session = game_service.get_session_by_sid(sid)
    if not game_session:
        emit('move_rejection', {'code': c.REJECT_NO_ROOM, 'message': c.REJECTION_MESSAGES[c.REJECT_NO_ROOM]})
        return {'accepted': False}

    try:
        move = AttemptMoveSchema().load(data or {})
    except ValidationError as err:
        log_event("MOVE_INVALID_PAYLOAD", f"{err.messages}", sid=sid, game_id=game_session.id)
        emit('move_rejection', {'code': c.REJECT_ILLEGAL_MOVE, 'message': c.REJECTION_MESSAGES[c.REJECT_ILLEGAL_MOVE]})
        return {'accepted': False}

    accepted, notifications = game_session.attempt_move(move['from'], move['to'])
    _emit_all(notifications)
    return {'accepted': accepted}


@socketio.on('request_restart')
def handle_request_restart(data=None):
    game_service = current_app.game_service

    game_session = game_service.get_session_by_sid(request.sid)
    if not game_session:
        print(f"[SocketHandler] {request.sid} запросил 'request_restart', но комната не найдена.")
        return

    _emit_all(game_session.request_restart())


@socketio.on('close_private_room')
def handle_close_private_room(data=None):
    game_service = current_app.game_service
    peer_id = game_service.get_peer_id_by_sid(request.sid)

    _emit_all(game_service.close_private_room(peer_id))
