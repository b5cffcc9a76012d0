# checkers/game_core/transitions.py

from typing import NamedTuple, Optional, Set

from . import constants as c
from .board_state import Board, Position, apply_move_to_board
from .constants import PieceKind, Team
from .move_generator import find_mandatory_captures, has_capture_from
from .move_validator import evaluate_move
from .utils import NOT_OVER, GameOverResult, evaluate_game_over


class MoveResolution(NamedTuple):
    """Результат расчета хода. Ничего не меняет, пока его не применят."""
    accepted: bool
    reason: Optional[str] = None
    board: Optional[Board] = None
    next_turn: Optional[Team] = None
    captured_position: Optional[Position] = None
    continuation_piece: Optional[Position] = None
    mandatory_capture_positions: Set[Position] = frozenset()
    is_promoted: bool = False
    piece_kind: Optional[PieceKind] = None
    game_over: GameOverResult = NOT_OVER


def rejected(reason: str) -> MoveResolution:
    return MoveResolution(False, reason)


def mandatory_for(board: Board, turn: Team, locked: Optional[Position]) -> Set[Position]:
    """Во время серии взятий ходить может только одна шашка."""
    if locked is not None:
        return {locked}
    return find_mandatory_captures(board, turn)


def resolve_move(
    board: Board,
    turn: Team,
    acting_team: Team,
    from_pos: Position,
    to_pos: Position,
    locked: Optional[Position] = None,
    is_over: bool = False,
) -> MoveResolution:
    """
    Фаза "Calculate" одного хода: проверки, перемещение, взятие,
    превращение, решение о передаче хода и проверка конца игры.
    Исходная доска не изменяется.
    """
    # --- 1. Чей ход и блокировка серии ---
    if is_over:
        return rejected(c.REJECT_GAME_OVER)
    if acting_team != turn:
        return rejected(c.REJECT_WRONG_TURN)
    if locked is not None and from_pos != locked:
        return rejected(c.REJECT_CONTINUATION_LOCKED)

    piece = board.piece_at(from_pos)
    if piece is None or piece.team != acting_team:
        return rejected(c.REJECT_NO_PIECE)

    # --- 2. Обязательное взятие ---
    mandatory = mandatory_for(board, turn, locked)
    if mandatory and from_pos not in mandatory:
        return rejected(c.REJECT_CAPTURE_REQUIRED)

    # --- 3. Геометрия ---
    outcome = evaluate_move(from_pos, to_pos, piece.kind, piece.team, board)
    if not outcome.success:
        return rejected(c.REJECT_ILLEGAL_MOVE)
    if mandatory and not outcome.is_capture:
        return rejected(c.REJECT_CAPTURE_REQUIRED)

    # --- 4-5. Перемещение, взятие, превращение ---
    new_board = apply_move_to_board(board, from_pos, to_pos, outcome.captured_position)
    moved = new_board.piece_at(to_pos)
    is_promoted = moved.kind != piece.kind

    # --- 6. Продолжение серии или передача хода ---
    continuation = None
    if outcome.is_capture and has_capture_from(to_pos, moved.kind, moved.team, new_board):
        continuation = to_pos

    if continuation is not None:
        next_turn = turn
        next_mandatory = {continuation}
    else:
        next_turn = turn.opponent()
        next_mandatory = find_mandatory_captures(new_board, next_turn)

    # --- 7. Конец игры ---
    game_over = evaluate_game_over(new_board, next_turn)
    if game_over.is_over:
        continuation = None
        next_mandatory = set()

    return MoveResolution(
        accepted=True,
        board=new_board,
        next_turn=next_turn,
        captured_position=outcome.captured_position,
        continuation_piece=continuation,
        mandatory_capture_positions=next_mandatory,
        is_promoted=is_promoted,
        piece_kind=piece.kind,
        game_over=game_over,
    )
