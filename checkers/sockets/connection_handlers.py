# checkers/sockets/connection_handlers.py
import datetime
from flask import request, current_app
from flask_socketio import emit, join_room
from flask_jwt_extended import decode_token
from jwt.exceptions import ExpiredSignatureError, DecodeError
from ..extensions import socketio, sid_to_user_map, sid_to_user_lock
from ..services.logging_service import log_event


@socketio.on('connect')
def handle_connect(auth):
    """
    Личность пира = subject JWT. Токены выпускаются вне хоста,
    здесь они только проверяются.
    """
    sid = request.sid
    token = auth.get('token') if auth else None

    if not token:
        print(f"Клиент {sid} подключился без токена. Отказ.")
        log_event("AUTH_FAILED", "No token provided.", sid=sid)
        return False

    try:
        decoded_token = decode_token(token)
        peer_id = decoded_token['sub']
    except (ExpiredSignatureError, DecodeError, KeyError) as e:
        print(f"Клиент {sid} предоставил невалидный токен: {e}. Отказ.")
        log_event("AUTH_FAILED", f"Invalid or expired token: {e}", sid=sid)
        return False

    with sid_to_user_lock:
        sid_to_user_map[sid] = {
            "username": peer_id,
            "connect_time": datetime.datetime.now(),
        }

    # Все уведомления пира адресуются комнате с его именем
    join_room(peer_id)

    log_event("SESSION_START", f"Peer '{peer_id}' authenticated and joined.", sid=sid)

    game_session = current_app.game_service.get_session_by_peer(peer_id)
    if game_session:
        emit('board_update', game_session.get_board_view())


@socketio.on('disconnect')
def handle_disconnect(*args):
    game_service = current_app.game_service

    sid = request.sid
    duration_str = "N/A"

    with sid_to_user_lock:
        user_data = sid_to_user_map.pop(sid, None)

    if not user_data:
        log_event("SESSION_END", "Disconnected (pre-auth or already popped).", sid=sid)
        return

    connect_time = user_data.get("connect_time")
    peer_id = user_data.get("username", "N/A")

    if connect_time:
        duration = datetime.datetime.now() - connect_time
        duration_str = str(datetime.timedelta(seconds=int(duration.total_seconds())))

    log_event("SESSION_END", f"Peer '{peer_id}' disconnected. Session duration: {duration_str}", sid=sid)

    # Уведомления для самого ушедшего пира адресовать уже некому
    game_service.handle_disconnect(peer_id)
