# checkers/extensions.py
"""
Инициализация расширений Flask и глобальных объектов.

Экземпляры расширений (SocketIO, Limiter, JWT) создаются здесь,
чтобы избежать циклических импортов в фабрике приложений (app factory).
"""

from flask_socketio import SocketIO
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_jwt_extended import JWTManager
import threading
import queue
from typing import Dict, Any

# --- Расширения Flask ---

# cors_allowed_origins="*" - для production следует указать конкретные домены.
socketio = SocketIO(cors_allowed_origins="*", compress=True)

# Ограничение частоты HTTP-запросов по IP клиента
limiter = Limiter(key_func=get_remote_address)

# JWT: хост только проверяет токены, выпускаются они в другом месте
jwt = JWTManager()


# --- Глобальное состояние присутствия ---

# { 'sid': {'username': ..., 'connect_time': ...}, ... }
# Один пир (username) может держать несколько соединений.
sid_to_user_map: Dict[str, Any] = {}

# SocketIO обрабатывает клиентов в разных потоках
sid_to_user_lock = threading.Lock()

# Очередь уведомлений: сообщения PeerChannel и emit'ы для фонового воркера.
notification_queue: queue.Queue = queue.Queue()
