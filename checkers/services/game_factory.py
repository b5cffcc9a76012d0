# checkers/services/game_factory.py

import uuid
from typing import Callable, Optional, Tuple

from checkers.game_core import Team

from .game_session import GameSession
from .game_turn_manager import GameTurnManager
from .peer_channel import PeerChannel


class GameFactory:

    def __init__(
        self,
        log_event: Callable,
        peer_channel: PeerChannel,
        finalize_session_callback: Callable[[str], None],
        log_stats: Optional[Callable] = None,
    ):
        self.log_event = log_event
        self.peer_channel = peer_channel
        self.finalize_session_callback = finalize_session_callback
        self.log_stats = log_stats

    def _create_session_internally(self, room_id: str, peer_id: str, opponent_id: str, team: Team) -> GameSession:
        game_id = f"{room_id}/{peer_id}"

        game_turn_manager = GameTurnManager(
            game_id=game_id,
            log_event=self.log_event,
            log_stats=self.log_stats,
        )

        session = GameSession(
            game_id=game_id,
            room_id=room_id,
            peer_id=peer_id,
            opponent_id=opponent_id,
            team=team,
            turn_manager=game_turn_manager,
            send_to_peer=self.peer_channel.send,
            log_event=self.log_event,
            on_close=self.finalize_session_callback,
        )
        return session

    def create_private_room(self, host_id: str, guest_id: str) -> Tuple[GameSession, GameSession]:
        """
        Создает приватную комнату: две независимые сессии, по одной на пира.
        Тот, кто открыл комнату, играет первыми и ходит первым.
        """
        room_id = str(uuid.uuid4())

        host_session = self._create_session_internally(room_id, host_id, guest_id, Team.FIRST)
        guest_session = self._create_session_internally(room_id, guest_id, host_id, Team.SECOND)

        self.log_event("ROOM_CREATED", f"Комната {room_id}: {host_id} vs {guest_id}", game_id=room_id)
        return host_session, guest_session
