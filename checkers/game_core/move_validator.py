# checkers/game_core/move_validator.py

from typing import NamedTuple, Optional

from . import constants as c
from .board_state import Board, Position
from .constants import PieceKind, Team


class MoveOutcome(NamedTuple):
    success: bool
    captured_position: Optional[Position] = None

    @property
    def is_capture(self) -> bool:
        return self.captured_position is not None


ILLEGAL = MoveOutcome(False)


def evaluate_move(from_pos: Position, to_pos: Position, kind: PieceKind, team: Team, board: Board) -> MoveOutcome:
    """
    Чистая геометрическая проверка хода.
    Правило обязательного взятия проверяет вызывающий код (GameTurnManager),
    здесь оно не учитывается. Доска не изменяется.
    """
    if not to_pos.in_bounds() or from_pos == to_pos:
        return ILLEGAL

    if kind == PieceKind.KING:
        return _king_move(from_pos, to_pos, team, board)
    return _man_move(from_pos, to_pos, team, board)


def _man_move(from_pos: Position, to_pos: Position, team: Team, board: Board) -> MoveOutcome:
    dx = to_pos.x - from_pos.x
    dy = to_pos.y - from_pos.y

    # 1. Обычный ход: на одну клетку вперед по диагонали
    if abs(dx) == 1 and dy == c.FORWARD_DIRECTION[team]:
        if board.is_occupied(to_pos):
            return ILLEGAL
        return MoveOutcome(True)

    # 2. Взятие: прыжок через шашку соперника (в любую сторону)
    if abs(dx) == 2 and abs(dy) == 2:
        middle = Position(from_pos.x + dx // 2, from_pos.y + dy // 2)
        if not board.is_occupied(to_pos) and board.is_occupied_by_opponent(middle, team):
            return MoveOutcome(True, middle)

    return ILLEGAL


def _king_move(from_pos: Position, to_pos: Position, team: Team, board: Board) -> MoveOutcome:
    dx = to_pos.x - from_pos.x
    dy = to_pos.y - from_pos.y

    if abs(dx) != abs(dy):
        return ILLEGAL

    step_x = 1 if dx > 0 else -1
    step_y = 1 if dy > 0 else -1
    current = from_pos.shifted(step_x, step_y)
    captured: Optional[Position] = None

    while current != to_pos:
        piece = board.piece_at(current)
        if piece is not None:
            if piece.team == team:
                return ILLEGAL  # своя шашка на пути
            if captured is not None:
                return ILLEGAL  # за один ход бьется только одна шашка
            captured = current
        current = current.shifted(step_x, step_y)

    if board.is_occupied(to_pos):
        return ILLEGAL

    return MoveOutcome(True, captured)
