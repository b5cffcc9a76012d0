# checkers/services/game_state.py

from typing import Any, Dict, List, Optional, Set

from checkers.game_core import Board, Position, Team, STARTING_TEAM, create_initial_board_state, find_mandatory_captures
from checkers.game_core.utils import turn_message

# Обычный ход: ждем ход команды `turn`.
STATE_AWAITING_MOVE = "AWAITING_MOVE"
# Серия взятий: ходить может только шашка `active_multi_capture_piece`.
STATE_AWAITING_CONTINUATION = "AWAITING_CONTINUATION"
STATE_FINISHED = "FINISHED"
# Комната закрыта, сессия больше не принимает ходы.
STATE_CLOSED = "CLOSED"


class GameState:
    """
    Простой класс-хранилище (DTO) для всего состояния партии одного пира.
    Не содержит логики. Меняется только через GameTurnManager
    (свой ход) или sync_protocol.reconcile (ход соперника).
    """
    def __init__(self, turn: Team = STARTING_TEAM, generation: int = 0):
        self.board: Board = create_initial_board_state()
        self.turn: Team = turn
        self.mandatory_capture_positions: Set[Position] = find_mandatory_captures(self.board, turn)
        self.active_multi_capture_piece: Optional[Position] = None
        self.is_over: bool = False
        self.winner: Optional[Team] = None
        self.status_message: str = turn_message(turn)
        self.last_move: Optional[Dict[str, Any]] = None
        self.history: List[Dict[str, Any]] = []
        self.session_state: str = STATE_AWAITING_MOVE
        # Номер партии в комнате, растет при каждом рестарте.
        self.generation: int = generation
