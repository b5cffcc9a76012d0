# checkers/services/game_turn_manager.py

import datetime
import threading
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Tuple

from checkers.game_core import PieceKind, Position, Team, resolve_move
from checkers.game_core import constants as c
from checkers.game_core.utils import game_over_message, turn_message

from .game_state import (
    STATE_AWAITING_CONTINUATION,
    STATE_AWAITING_MOVE,
    STATE_CLOSED,
    STATE_FINISHED,
    GameState,
)

if TYPE_CHECKING:
    from checkers.game_core import MoveResolution

MoveRecord = Dict[str, Any]


def build_move_record(from_pos: Position, to_pos: Position, team: Team, resolution: 'MoveResolution') -> MoveRecord:
    """Запись хода в формате, который понимает replay_moves."""
    return {
        'from': from_pos,
        'to': to_pos,
        'team': team,
        'piece_kind': resolution.piece_kind,
        'is_promoted': resolution.is_promoted,
        'timestamp': datetime.datetime.now().isoformat(),
    }


def match_stats(game_id: str, game_state: GameState, winner: Team, reason: str) -> Dict[str, Any]:
    """Итог партии для STATS_LOG_FILE: результат, длина и что осталось на доске."""
    board = game_state.board
    return {
        'game_id': game_id,
        'generation': game_state.generation,
        'winner': winner.value,
        'reason': reason,
        'moves': len(game_state.history),
        'promotions': sum(1 for record in game_state.history if record.get('is_promoted')),
        'pieces_left': {team.value: board.count(team) for team in Team},
        'kings_left': {
            team.value: sum(1 for piece in board.pieces_of(team) if piece.kind == PieceKind.KING)
            for team in Team
        },
    }


class GameTurnManager:
    """
    Машина состояний хода: проверка, применение хода (Commit),
    серия взятий, передача хода, конец игры, сдача и рестарт.
    Сама логика правил - в game_core.resolve_move.
    """
    def __init__(
        self,
        game_id: str,

        # --- Зависимости, внедренные контейнером ---
        log_event: Callable,
        log_stats: Optional[Callable] = None,
    ):
        self.game_id = game_id
        self.lock = threading.RLock()

        self.log_event = log_event
        self.log_stats = log_stats or (lambda *args, **kwargs: None)

    def set_lock(self, lock: threading.RLock):
        """Устанавливает внешний RLock из GameSession."""
        self.lock = lock

    def apply_move(self, game_state: GameState, acting_team: Team, from_pos: Position, to_pos: Position) -> Tuple[bool, Optional[str], Optional[MoveRecord]]:
        """
        Обрабатывает ОДНУ попытку хода.
        Возвращает (accepted, reason, record). При отказе game_state не меняется.
        """
        with self.lock:
            # --- 1. Проверки-предохранители (Guard Clauses) ---
            if game_state.session_state in (STATE_FINISHED, STATE_CLOSED):
                return False, c.REJECT_GAME_OVER, None

            # --- 2. Фаза "Calculate" ---
            try:
                resolution = resolve_move(
                    game_state.board,
                    game_state.turn,
                    acting_team,
                    from_pos,
                    to_pos,
                    locked=game_state.active_multi_capture_piece,
                    is_over=game_state.is_over,
                )
            except Exception as e:
                self.log_event(
                    "CRITICAL_ERROR",
                    f"Failed during 'apply_move' calculation. Error: {e}",
                    game_id=self.game_id,
                    extra_data={'from': from_pos, 'to': to_pos},
                )
                return False, c.REJECT_ILLEGAL_MOVE, None

            if not resolution.accepted:
                self.log_event(
                    "MOVE_REJECTED",
                    f"Ход {tuple(from_pos)} -> {tuple(to_pos)} отклонен: {resolution.reason}",
                    game_id=self.game_id,
                )
                return False, resolution.reason, None

            # --- 3. Фаза "Commit" (Применение) ---
            record = build_move_record(from_pos, to_pos, acting_team, resolution)

            game_state.board = resolution.board
            game_state.turn = resolution.next_turn
            game_state.mandatory_capture_positions = set(resolution.mandatory_capture_positions)
            game_state.active_multi_capture_piece = resolution.continuation_piece
            game_state.last_move = record
            game_state.history.append(record)

            if resolution.game_over.is_over:
                self._finish(game_state, resolution.game_over.winner, resolution.game_over.reason)
            elif resolution.continuation_piece is not None:
                game_state.session_state = STATE_AWAITING_CONTINUATION
                game_state.status_message = turn_message(game_state.turn, continuation=True)
            else:
                game_state.session_state = STATE_AWAITING_MOVE
                game_state.status_message = turn_message(game_state.turn)

            return True, None, record

    def forfeit(self, game_state: GameState, winner: Team, reason: str = c.OVER_FORFEIT):
        """Принудительное завершение (соперник ушел или закрыл комнату)."""
        with self.lock:
            if game_state.is_over:
                return
            self.log_event("GAME_END_FORFEIT", f"Winner: {winner.value}", game_id=self.game_id)
            self._finish(game_state, winner, reason)

    def reset_state(self, game_state: GameState, turn: Team = c.STARTING_TEAM, generation: Optional[int] = None):
        """
        Полный сброс партии к стартовой расстановке (рестарт).
        Без generation номер партии увеличивается на единицу,
        с ним - принимается номер, пришедший от соперника.
        """
        with self.lock:
            if generation is None:
                generation = game_state.generation + 1
            fresh = GameState(turn, generation=generation)
            game_state.__dict__.update(fresh.__dict__)
            self.log_event(
                "GAME_RESET",
                "Партия сброшена к стартовой позиции.",
                game_id=self.game_id,
                extra_data={'generation': generation},
            )

    def _finish(self, game_state: GameState, winner: Team, reason: str):
        game_state.is_over = True
        game_state.winner = winner
        game_state.status_message = game_over_message(winner, reason)
        game_state.mandatory_capture_positions = set()
        game_state.active_multi_capture_piece = None
        game_state.session_state = STATE_FINISHED

        print(f"[GameTurnManager {self.game_id}] ИГРА ОКОНЧЕНА! Победитель: {winner.value} ({reason}).")
        self.log_event("GAME_END_WIN", f"Winner: {winner.value}, reason: {reason}", game_id=self.game_id)
        self.log_stats(match_stats(self.game_id, game_state, winner, reason))
