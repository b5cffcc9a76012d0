# checkers/game_core/replay.py

import logging
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Set

from . import constants as c
from .board_state import Board, Position, create_initial_board_state
from .constants import Team
from .move_generator import find_mandatory_captures
from .transitions import resolve_move

logger = logging.getLogger(__name__)


class ReplayFrame(NamedTuple):
    board: Board
    turn: Team
    mandatory_capture_positions: Set[Position]
    active_multi_capture_piece: Optional[Position] = None
    is_over: bool = False
    winner: Optional[Team] = None


def replay_moves(records: Iterable[Dict[str, Any]], board: Optional[Board] = None,
                 turn: Team = c.STARTING_TEAM) -> List[ReplayFrame]:
    """
    Восстанавливает все промежуточные позиции партии, прогоняя записанные
    ходы через тот же движок, что и живая игра.
    Первый кадр - стартовая позиция. Невалидные записи пропускаются.
    """
    if board is None:
        board = create_initial_board_state()

    locked = None
    is_over = False
    frames = [ReplayFrame(board, turn, find_mandatory_captures(board, turn))]

    for index, record in enumerate(records, 1):
        acting_team = record.get('team', turn)
        resolution = resolve_move(
            board, turn, acting_team,
            Position(*record['from']), Position(*record['to']),
            locked=locked, is_over=is_over,
        )

        if not resolution.accepted:
            logger.warning(f"[Replay] Ход {index} пропущен ({resolution.reason}): {record}")
            continue

        board = resolution.board
        turn = resolution.next_turn
        locked = resolution.continuation_piece
        is_over = resolution.game_over.is_over

        frames.append(ReplayFrame(
            board=board,
            turn=turn,
            mandatory_capture_positions=resolution.mandatory_capture_positions,
            active_multi_capture_piece=locked,
            is_over=is_over,
            winner=resolution.game_over.winner,
        ))

    return frames
