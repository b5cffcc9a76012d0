# checkers/services/sync_protocol.py
"""
Протокол синхронизации двух пиров.

После каждого принятого хода ходивший пир отправляет сопернику ПОЛНЫЙ
снимок партии (не дифф). Получатель заменяет свое состояние целиком.
Писатель в каждый момент один - тот, чей ход, поэтому сливать нечего.

Снимки и рестарты несут номер партии (generation). Снимок, отправленный
до рестарта, приходит с меньшим номером и отбрасывается.
"""

from typing import Any, Dict, Optional

from checkers.api.schemas import StateSnapshotSchema, dump_piece
from checkers.game_core import find_mandatory_captures

from .game_state import STATE_AWAITING_MOVE, STATE_FINISHED, GameState

# Ключи полезной нагрузки в канале сообщений
PAYLOAD_GAME_STATE = 'game_state'
PAYLOAD_RESTART = 'restart'
PAYLOAD_CLOSE_ROOM = 'close_room'
PAYLOAD_GENERATION = 'generation'

Snapshot = Dict[str, Any]


def _dump_position(position):
    if position is None:
        return None
    return {'x': position.x, 'y': position.y}


def publish(state: GameState) -> Snapshot:
    """Сериализует полное состояние партии для отправки сопернику."""
    last_move = state.last_move or {}
    return {
        'pieces': [dump_piece(p) for p in sorted(state.board, key=lambda p: p.position)],
        'turn': state.turn.value,
        'is_over': state.is_over,
        'winner': state.winner.value if state.winner else None,
        'status_message': state.status_message,
        'from_position': _dump_position(last_move.get('from')),
        'to_position': _dump_position(last_move.get('to')),
        'is_promoted': bool(last_move.get('is_promoted', False)),
        PAYLOAD_GENERATION: state.generation,
    }


def restart_payload(state: GameState) -> Dict[str, Any]:
    """Просьба сопернику сбросить партию; state уже сброшен локально."""
    return {PAYLOAD_RESTART: True, PAYLOAD_GENERATION: state.generation}


def restart_generation(message: Dict[str, Any]) -> Optional[int]:
    """Номер партии из сообщения о рестарте; None, если номера нет."""
    generation = message.get(PAYLOAD_GENERATION)
    if not isinstance(generation, int) or isinstance(generation, bool):
        return None
    return generation


def is_stale_restart(local: GameState, message: Dict[str, Any]) -> bool:
    """
    Рестарт с номером не больше нашего уже применен
    (оба пира нажали рестарт одновременно) или устарел.
    """
    generation = restart_generation(message)
    return generation is not None and generation <= local.generation


def reconcile(local: GameState, incoming: Snapshot) -> Optional[GameState]:
    """
    Заменяет доску, ход, статус и победителя снимком соперника.
    Серия взятий сбрасывается, обязательные взятия пересчитываются локально.
    Снимок из предыдущей партии (generation меньше нашего) не применяется,
    тогда возвращается None.
    Бросает marshmallow.ValidationError, если снимок некорректен
    (в этом случае local не меняется).
    """
    data = StateSnapshotSchema().load(incoming)

    if data['generation'] < local.generation:
        return None
    if data['generation'] > local.generation:
        # Соперник уже в новой партии: старая история не относится к ней
        local.history = []
        local.last_move = None

    local.generation = data['generation']
    local.board = data['board']
    local.turn = data['turn']
    local.is_over = data['is_over']
    local.winner = data['winner']
    local.status_message = data['status_message']
    local.active_multi_capture_piece = None

    if local.is_over:
        local.mandatory_capture_positions = set()
        local.session_state = STATE_FINISHED
    else:
        local.mandatory_capture_positions = find_mandatory_captures(local.board, local.turn)
        local.session_state = STATE_AWAITING_MOVE

    # Справочная информация о ходе: только для истории
    if data['from_position'] is not None and data['to_position'] is not None:
        record = {
            'from': data['from_position'],
            'to': data['to_position'],
            'is_promoted': data['is_promoted'],
        }
        previous = local.history[-1] if local.history else {}
        # Свой же снимок (self-receive) не дублирует запись
        if (previous.get('from'), previous.get('to')) != (record['from'], record['to']):
            local.history.append(record)
        local.last_move = record

    return local
