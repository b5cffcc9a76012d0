# checkers/services/game_registry.py

import threading
from typing import Optional, Dict, Any

class GameRegistry:
    """
    Отвечает ИСКЛЮЧИТЕЛЬНО за хранение и поиск активных сессий пиров.
    Ключ - peer_id (имя пользователя). У каждого пира не больше одной сессии.
    Потокобезопасен.
    """
    def __init__(self, log_event_func):
        self.sessions: Dict[str, Any] = {} # peer_id -> GameSession

        self.lock = threading.RLock()
        self.log_event = log_event_func or (lambda *args, **kwargs: None)

    def add_session(self, session):
        """Регистрирует сессию пира."""
        peer_id = session.peer_id
        with self.lock:
            if peer_id in self.sessions:
                self.log_event("REGISTRY_WARN", f"У {peer_id} уже есть сессия, добавление пропущено.", game_id=session.id)
                return False

            self.sessions[peer_id] = session

            self.log_event("REGISTRY_ADD", f"Сессия {peer_id} добавлена. Всего сессий: {len(self.sessions)}", game_id=session.id)
            return True

    def remove_session(self, peer_id: str):
        """
        Удаляет сессию пира.
        Это коллбэк, который GameSession вызывает при закрытии комнаты.
        """
        if not peer_id:
            return

        with self.lock:
            session = self.sessions.pop(peer_id, None)
            if not session:
                self.log_event("REGISTRY_WARN", f"Попытка удалить несуществующую сессию {peer_id}")
                return

            self.log_event("REGISTRY_REMOVE", f"Сессия {peer_id} удалена. Осталось сессий: {len(self.sessions)}", game_id=session.id)

    def get_by_peer(self, peer_id: str) -> Optional[Any]:
        """Получить сессию по имени пира."""
        with self.lock:
            return self.sessions.get(peer_id)

    def has_session(self, peer_id: str) -> bool:
        with self.lock:
            return peer_id in self.sessions
