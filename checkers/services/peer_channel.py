# checkers/services/peer_channel.py

import queue
from typing import Any, Callable, Dict

# Событие, под которым сообщения пира уходят в очередь доставки
PEER_MESSAGE_EVENT = 'private_room_message'


class PeerChannel:
    """
    Канал "точка-точка" между двумя именованными пирами.
    Отправка не блокирует: сообщение кладется в очередь уведомлений,
    а фоновый воркер доставляет его сессии получателя.
    """

    def __init__(self, notification_queue: queue.Queue, log_event: Callable = None):
        self.notification_queue = notification_queue
        self.log_event = log_event or (lambda *args, **kwargs: None)

    def send(self, sender_id: str, peer_id: str, payload: Dict[str, Any]):
        """Ставит сообщение в очередь. Получатель увидит {'from': sender_id, ...payload}."""
        message = {'from': sender_id}
        message.update(payload)

        self.notification_queue.put({
            'event': PEER_MESSAGE_EVENT,
            'payload': message,
            'room': peer_id,
        })
        self.log_event("PEER_SEND", f"{sender_id} -> {peer_id}: {sorted(payload.keys())}")
