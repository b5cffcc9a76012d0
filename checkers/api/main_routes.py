# checkers/api/main_routes.py

from flask import (
    Blueprint,
    request,
    current_app,
    jsonify
)
from marshmallow import ValidationError

from ..extensions import limiter
from ..game_core import replay_moves
from .schemas import ReplayRequestSchema, dump_piece

# Создаем новый Blueprint
bp = Blueprint('main', __name__)


def _dump_frame(frame):
    return {
        'pieces': [dump_piece(p) for p in sorted(frame.board, key=lambda p: p.position)],
        'turn': frame.turn.value,
        'mandatory_capture_positions': [
            {'x': p.x, 'y': p.y} for p in sorted(frame.mandatory_capture_positions)
        ],
        'active_multi_capture_piece': (
            {'x': frame.active_multi_capture_piece.x, 'y': frame.active_multi_capture_piece.y}
            if frame.active_multi_capture_piece else None
        ),
        'is_over': frame.is_over,
        'winner': frame.winner.value if frame.winner else None,
    }


@bp.route('/health')
def health():
    """Проверка живости хоста."""
    return jsonify({"status": "ok"})


@bp.route('/api/replay', methods=['POST'])
@limiter.limit(lambda: current_app.config['REPLAY_RATE_LIMIT'])
def handle_replay():
    """
    Принимает записанную партию и возвращает все промежуточные позиции.
    Невалидные ходы пропускаются (см. replay_moves).
    """
    json_data = request.get_json(silent=True)
    if not json_data:
        return jsonify({
            "status": "error",
            "message": "Нет данных.",
            "code": "GENERIC_BAD_REQUEST"
        }), 400

    try:
        data = ReplayRequestSchema().load(json_data)
    except ValidationError as err:
        first_field_with_error = next(iter(err.messages))
        return jsonify({
            "status": "error",
            "message": f"Validation failed on '{first_field_with_error}': {err.messages[first_field_with_error]}",
            "code": "REPLAY_VALIDATION_ERROR"
        }), 400

    max_moves = current_app.config['MAX_REPLAY_MOVES']
    if len(data['moves']) > max_moves:
        return jsonify({
            "status": "error",
            "message": f"Слишком длинная партия (больше {max_moves} ходов).",
            "code": "REPLAY_TOO_LONG"
        }), 400

    frames = replay_moves(data['moves'])
    current_app.logger.info(f"Реплей: {len(data['moves'])} ходов -> {len(frames)} кадров.")

    return jsonify({
        "status": "success",
        "frames": [_dump_frame(frame) for frame in frames],
    })
