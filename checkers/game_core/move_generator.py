# checkers/game_core/move_generator.py

from typing import Iterator, List, Optional, Set, Tuple

from . import constants as c
from .board_state import Board, Piece, Position
from .constants import PieceKind, Team
from .move_validator import MoveOutcome, evaluate_move

LegalMove = Tuple[Position, Position, MoveOutcome]


def has_capture_from(position: Position, kind: PieceKind, team: Team, board: Board) -> bool:
    """
    Есть ли у шашки на `position` хотя бы одно взятие.
    Используется и для обязательного взятия, и для продолжения серии.
    """
    if kind == PieceKind.KING:
        return _king_has_capture(position, team, board)
    return _man_has_capture(position, team, board)


def _man_has_capture(position: Position, team: Team, board: Board) -> bool:
    for dx, dy in c.DIAGONALS:
        landing = position.shifted(2 * dx, 2 * dy)
        middle = position.shifted(dx, dy)
        if (
            landing.in_bounds()
            and not board.is_occupied(landing)
            and board.is_occupied_by_opponent(middle, team)
        ):
            return True
    return False


def _king_has_capture(position: Position, team: Team, board: Board) -> bool:
    for dx, dy in c.DIAGONALS:
        current = position.shifted(dx, dy)
        opponent_found = False

        while current.in_bounds():
            if board.is_occupied(current):
                if board.is_occupied_by_opponent(current, team) and not opponent_found:
                    opponent_found = True
                else:
                    # Своя шашка или вторая подряд: луч закрыт
                    break
            elif opponent_found:
                return True
            current = current.shifted(dx, dy)

    return False


def find_mandatory_captures(board: Board, team: Team) -> Set[Position]:
    """
    Возвращает позиции всех шашек команды, которые обязаны бить.
    Если множество не пустое, ходить можно только этими шашками и только со взятием.
    """
    return {
        piece.position
        for piece in board.pieces_of(team)
        if has_capture_from(piece.position, piece.kind, team, board)
    }


def _candidate_targets(piece: Piece) -> Iterator[Position]:
    """Клетки, куда шашка теоретически может пойти (без учета занятости)."""
    origin = piece.position
    if piece.kind == PieceKind.KING:
        for dx, dy in c.DIAGONALS:
            current = origin.shifted(dx, dy)
            while current.in_bounds():
                yield current
                current = current.shifted(dx, dy)
        return

    radius = c.MOBILITY_SCAN_RADIUS
    for dx in range(-radius, radius + 1):
        for dy in range(-radius, radius + 1):
            if dx == 0 and dy == 0:
                continue
            target = origin.shifted(dx, dy)
            if target.in_bounds():
                yield target


def find_legal_moves(board: Board, team: Team, mandatory: Optional[Set[Position]] = None) -> List[LegalMove]:
    """
    Перечисляет все легальные ходы команды с учетом обязательного взятия.
    `mandatory` можно передать заранее (например, {locked} при серии взятий).
    """
    if mandatory is None:
        mandatory = find_mandatory_captures(board, team)

    moves = []
    for piece in board.pieces_of(team):
        if mandatory and piece.position not in mandatory:
            continue
        for target in _candidate_targets(piece):
            outcome = evaluate_move(piece.position, target, piece.kind, team, board)
            if not outcome.success:
                continue
            if mandatory and not outcome.is_capture:
                continue
            moves.append((piece.position, target, outcome))
    return moves


def has_any_legal_move(board: Board, team: Team) -> bool:
    if find_mandatory_captures(board, team):
        return True
    return bool(find_legal_moves(board, team, mandatory=set()))
