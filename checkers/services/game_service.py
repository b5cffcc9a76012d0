# checkers/services/game_service.py

import threading
from typing import Optional, Dict, Any, List

from .game_session import GameSession
from .game_registry import GameRegistry
from .game_factory import GameFactory

from checkers.game_core import constants as c

Notification = Dict[str, Any]


def room_rejection(peer_id: str, code: str, message: str) -> Notification:
    return {
        'event': 'room_rejection',
        'payload': {'code': code, 'message': message},
        'room': peer_id,
    }


class GameService:
    """
    Фасад, координирующий высокоуровневые действия пиров.
    Не владеет состоянием, а делегирует его специализированным сервисам.
    """

    def __init__(self,
                 registry: GameRegistry,
                 factory: GameFactory,
                 sid_to_user_map: Dict[str, Dict[str, Any]],
                 sid_to_user_lock: threading.Lock,
                 log_event=None):
        """
        Инициализируется через Внедрение Зависимостей (Dependency Injection).
        """
        self.registry = registry
        self.factory = factory

        self.sid_to_user = sid_to_user_map
        self.sid_to_user_lock = sid_to_user_lock
        self.log_event = log_event or (lambda *args, **kwargs: None)

    ### Присутствие ###

    def get_peer_id_by_sid(self, sid: str) -> Optional[str]:
        if not sid:
            return None
        with self.sid_to_user_lock:
            user_data = self.sid_to_user.get(sid)
            if user_data:
                return user_data.get("username")
        return None

    def is_peer_online(self, peer_id: str) -> bool:
        with self.sid_to_user_lock:
            return any(data.get("username") == peer_id for data in self.sid_to_user.values())

    ### Публичный API (Прокси к Registry) ###

    def get_session_by_peer(self, peer_id: str) -> Optional[GameSession]:
        """Находит сессию пира."""
        return self.registry.get_by_peer(peer_id)

    def get_session_by_sid(self, sid: str) -> Optional[GameSession]:
        """Находит сессию по SID сокета (через имя пользователя)."""
        peer_id = self.get_peer_id_by_sid(sid)
        if not peer_id:
            return None
        return self.registry.get_by_peer(peer_id)

    ### Комнаты ###

    def open_private_room(self, peer_id: str, opponent_id: str) -> List[Notification]:
        """
        Открывает приватную комнату с названным соперником.
        Всегда возвращает список уведомлений (для обоих пиров или отказ).
        """
        if not opponent_id or opponent_id == peer_id:
            return [room_rejection(peer_id, 'INVALID_OPPONENT', 'Нельзя играть с самим собой.')]

        if self.registry.has_session(peer_id):
            return [room_rejection(peer_id, 'ALREADY_IN_ROOM', 'Вы уже в комнате.')]

        if not self.is_peer_online(opponent_id):
            return [room_rejection(peer_id, 'OPPONENT_OFFLINE', f'Игрок {opponent_id} не в сети.')]

        if self.registry.has_session(opponent_id):
            return [room_rejection(peer_id, 'OPPONENT_BUSY', f'Игрок {opponent_id} уже играет.')]

        host_session, guest_session = self.factory.create_private_room(peer_id, opponent_id)
        self.registry.add_session(host_session)
        self.registry.add_session(guest_session)

        notifications = []
        for session in (host_session, guest_session):
            notifications.append({
                'event': 'room_opened',
                'payload': {
                    'room_id': session.room_id,
                    'my_team': session.team.value,
                    'opponent': session.opponent_id,
                },
                'room': session.peer_id,
            })
            notifications.append(session.board_update())
        return notifications

    def close_private_room(self, peer_id: str) -> List[Notification]:
        session = self.registry.get_by_peer(peer_id)
        if not session:
            return [room_rejection(peer_id, c.REJECT_NO_ROOM, c.REJECTION_MESSAGES[c.REJECT_NO_ROOM])]
        return session.close_room()

    ### Доставка сообщений канала ###

    def deliver_peer_message(self, recipient_id: str, message: Dict[str, Any]) -> List[Notification]:
        """
        Вызывается фоновым воркером для каждого сообщения PeerChannel.
        Возвращает уведомления для UI получателя.
        """
        session = self.registry.get_by_peer(recipient_id)
        if not session:
            self.log_event(
                "PEER_UNDELIVERED",
                f"Сообщение от {message.get('from')} для {recipient_id}: сессия не найдена.",
            )
            return []
        return session.receive_message(message)

    ### Управление подключением ###

    def handle_disconnect(self, peer_id: str) -> List[Notification]:
        """
        Пир потерял последнее соединение: его комната закрывается,
        сопернику уходит close_room (он побеждает сдачей).
        """
        if not peer_id or self.is_peer_online(peer_id):
            return []

        session = self.registry.get_by_peer(peer_id)
        if not session:
            return []

        self.log_event("PEER_LOST", f"{peer_id} пропал, комната {session.room_id} закрывается.", game_id=session.id)
        return session.close_room()
