# --- Стандартная библиотека ---
import threading
import time
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

# --- Сторонние ---
from marshmallow import ValidationError

# --- Импорты сервисов (локальные) ---
from .game_state import GameState, STATE_CLOSED
from .game_turn_manager import GameTurnManager
from .sync_protocol import (
    PAYLOAD_CLOSE_ROOM,
    PAYLOAD_GAME_STATE,
    PAYLOAD_GENERATION,
    PAYLOAD_RESTART,
    is_stale_restart,
    publish,
    reconcile,
    restart_generation,
    restart_payload,
)

# --- Импорты логики ядра ---
from checkers.game_core import Position, Team
from checkers.game_core import constants as c

logger = logging.getLogger(__name__)

Notification = Dict[str, Any]


def rejection(code: str, room: str) -> Notification:
    return {
        'event': 'move_rejection',
        'payload': {'code': code, 'message': c.REJECTION_MESSAGES.get(code, code)},
        'room': room,
    }


class GameSession:
    """
    Партия С ТОЧКИ ЗРЕНИЯ ОДНОГО пира.
    У каждого из двух игроков своя сессия и своя копия GameState;
    копии сходятся только через снимки, которые пересылает PeerChannel.
    Является "Фасадом" над GameState, GameTurnManager и протоколом синхронизации.
    """

    def __init__(
        self,
        game_id: str,
        room_id: str,
        peer_id: str,
        opponent_id: str,
        team: Team,
        turn_manager: GameTurnManager,
        send_to_peer: Callable[[str, str, Dict[str, Any]], None],
        log_event: Callable,
        on_close: Optional[Callable[[str], None]] = None,
    ):
        self.id = game_id
        self.room_id = room_id
        self.peer_id = peer_id
        self.opponent_id = opponent_id
        self.team = team
        self.log_event = log_event
        self.lock = threading.RLock()

        self.state = GameState()

        self.turn_manager = turn_manager
        self.turn_manager.set_lock(self.lock)

        self.send_to_peer = send_to_peer
        self.on_close = on_close or (lambda *args: None)

        self.last_activity = time.time()

        self.log_event(
            "SESSION_INIT",
            f"Сессия {self.id} создана: {peer_id} ({team.value}) против {opponent_id}.",
            game_id=self.id,
        )

    @property
    def is_closed(self) -> bool:
        return self.state.session_state == STATE_CLOSED

    # --- Локальный ход (из UI) ---

    def attempt_move(self, from_pos: Position, to_pos: Position) -> Tuple[bool, List[Notification]]:
        """
        Вызывается при отпускании шашки. Возвращает (accepted, уведомления для UI).
        При успехе полный снимок уходит сопернику.
        """
        with self.lock:
            self.last_activity = time.time()

            accepted, reason, record = self.turn_manager.apply_move(self.state, self.team, from_pos, to_pos)
            if not accepted:
                return False, [rejection(reason, self.peer_id)]

            self.log_event(
                "MOVE_APPLIED",
                f"{tuple(from_pos)} -> {tuple(to_pos)}",
                game_id=self.id,
                extra_data={'turn': self.state.turn.value, 'over': self.state.is_over},
            )
            self.send_to_peer(self.peer_id, self.opponent_id, {PAYLOAD_GAME_STATE: publish(self.state)})
            return True, [self.board_update()]

    # --- Входящие сообщения соперника ---

    def receive_message(self, message: Dict[str, Any]) -> List[Notification]:
        """
        Единый обработчик сообщений канала: {'from': peer_id, ...payload}.
        Сообщения не от нашего соперника отбрасываются.
        """
        with self.lock:
            sender = message.get('from')
            if sender != self.opponent_id:
                self.log_event(
                    c.REJECT_PROTOCOL_MISMATCH,
                    f"Сообщение от {sender} отброшено (ожидался {self.opponent_id}).",
                    game_id=self.id,
                )
                return []

            if self.is_closed:
                return []

            self.last_activity = time.time()

            if message.get(PAYLOAD_CLOSE_ROOM):
                return self._handle_room_closed_by_opponent()

            if message.get(PAYLOAD_RESTART):
                return self._handle_restart_from_opponent(message)

            snapshot = message.get(PAYLOAD_GAME_STATE)
            if snapshot is None:
                self.log_event("UNKNOWN_MESSAGE", f"Пустое сообщение от {sender}: {message}", game_id=self.id)
                return []

            try:
                applied = reconcile(self.state, snapshot)
            except ValidationError as e:
                self.log_event(
                    c.REJECT_INVALID_SNAPSHOT,
                    f"Снимок от {sender} отброшен: {e.messages}",
                    game_id=self.id,
                )
                return []

            if applied is None:
                self.log_event(
                    c.REJECT_STALE_SNAPSHOT,
                    f"Снимок от {sender} из партии {snapshot.get(PAYLOAD_GENERATION)} отброшен, "
                    f"текущая партия {self.state.generation}.",
                    game_id=self.id,
                )
                return []

            return [self.board_update()]

    def _handle_restart_from_opponent(self, message: Dict[str, Any]) -> List[Notification]:
        if is_stale_restart(self.state, message):
            self.log_event(
                c.REJECT_STALE_SNAPSHOT,
                f"Рестарт партии {message.get(PAYLOAD_GENERATION)} уже применен.",
                game_id=self.id,
            )
            return []
        self.turn_manager.reset_state(self.state, generation=restart_generation(message))
        return [self.board_update()]

    # --- Управляющие действия ---

    def request_restart(self) -> List[Notification]:
        """Локальный сброс + просьба сопернику сделать то же самое."""
        with self.lock:
            if self.is_closed:
                return []
            self.turn_manager.reset_state(self.state)
            self.send_to_peer(self.peer_id, self.opponent_id, restart_payload(self.state))
            return [self.board_update()]

    def close_room(self) -> List[Notification]:
        """Игрок сам закрывает комнату (сдается, если партия еще идет)."""
        with self.lock:
            if self.is_closed:
                return []
            self.turn_manager.forfeit(self.state, self.team.opponent())
            self.send_to_peer(self.peer_id, self.opponent_id, {PAYLOAD_CLOSE_ROOM: True})
            return self._close()

    def _handle_room_closed_by_opponent(self) -> List[Notification]:
        self.turn_manager.forfeit(self.state, self.team)
        return self._close()

    def _close(self) -> List[Notification]:
        notifications = [self.board_update()]
        self.state.session_state = STATE_CLOSED
        notifications.append({
            'event': 'room_closed',
            'payload': {
                'room_id': self.room_id,
                'winner': self.state.winner.value if self.state.winner else None,
                'message': self.state.status_message,
            },
            'room': self.peer_id,
        })
        self.log_event("ROOM_CLOSED", f"Комната {self.room_id} закрыта для {self.peer_id}.", game_id=self.id)
        self.on_close(self.peer_id)
        return notifications

    # --- Проекция для UI ---

    def get_board_view(self) -> Dict[str, Any]:
        """Только для чтения: 64 клетки + статус партии."""
        with self.lock:
            state = self.state
            is_my_turn = state.turn == self.team and not state.is_over

            tiles = []
            for y in range(c.MAX_COORD, c.MIN_COORD - 1, -1):
                for x in range(c.MIN_COORD, c.MAX_COORD + 1):
                    position = Position(x, y)
                    piece = state.board.piece_at(position)
                    tiles.append({
                        'x': x,
                        'y': y,
                        'highlighted': is_my_turn and position in state.mandatory_capture_positions,
                        'piece': {'kind': piece.kind.value, 'team': piece.team.value} if piece else None,
                    })

            return {
                'room_id': self.room_id,
                'my_team': self.team.value,
                'opponent': self.opponent_id,
                'turn': state.turn.value,
                'is_my_turn': is_my_turn,
                'must_continue': is_my_turn and state.active_multi_capture_piece is not None,
                'is_over': state.is_over,
                'winner': state.winner.value if state.winner else None,
                'status_message': state.status_message,
                'tiles': tiles,
            }

    def board_update(self) -> Notification:
        return {'event': 'board_update', 'payload': self.get_board_view(), 'room': self.peer_id}
