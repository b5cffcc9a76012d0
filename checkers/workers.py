# checkers/workers.py

import logging

from .services.peer_channel import PEER_MESSAGE_EVENT

# Получаем логгер для этого модуля
logger = logging.getLogger(__name__)


def _emit_notification(socketio_instance, msg):
    event = msg.get('event')
    room = msg.get('room')

    if not event or not room:
        logger.warning(f"[QueueConsumer] Пропуск невалидного сообщения: {msg}")
        return

    socketio_instance.emit(event, msg.get('payload', {}), room=room)


def _process_notification(socketio_instance, game_service, msg):
    """
    Одно сообщение очереди.
    Сообщения PeerChannel доставляются сессии получателя, а ее ответные
    уведомления уходят в UI. Остальное - обычный emit.
    """
    if msg.get('event') != PEER_MESSAGE_EVENT:
        _emit_notification(socketio_instance, msg)
        return

    notifications = game_service.deliver_peer_message(msg.get('room'), msg.get('payload', {}))
    for notification in notifications:
        _emit_notification(socketio_instance, notification)


def _notification_queue_consumer(app, socketio_instance, queue_instance):
    """
    Фоновый воркер (consumer) для обработки очереди уведомлений.
    Доставка однократная, без таймаутов и повторов.
    """
    logger.info("[QueueConsumer] Поток-потребитель запущен.")
    while True:
        try:
            msg = queue_instance.get()
            if msg is None:
                logger.info("[QueueConsumer] Получен сигнал None, завершение работы.")
                break

            # log_event и log_match_stats читают пути из current_app.config
            with app.app_context():
                _process_notification(socketio_instance, app.game_service, msg)

        except Exception as e:
            logger.error(f"[QueueConsumer] КРИТИЧЕСКАЯ ОШИБКА в потоке-потребителе: {e}", exc_info=True)
            socketio_instance.sleep(1)


def start_notification_consumer(app, socketio_instance, queue_instance):
    """
    Публичная функция для запуска воркера из create_app.
    """
    socketio_instance.start_background_task(
        _notification_queue_consumer,
        app,
        socketio_instance,
        queue_instance,
    )
