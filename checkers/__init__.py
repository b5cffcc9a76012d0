import logging
from flask import Flask
from .extensions import (
    socketio,
    limiter,
    jwt,
    sid_to_user_map,
    sid_to_user_lock,
    notification_queue
)
from .services.logging_service import log_event
from .workers import start_notification_consumer

# Получаем логгер
logger = logging.getLogger(__name__)

def _configure_logging(app):
    """Настраивает файловый логгер."""
    file_handler = logging.FileHandler(app.config['LOG_FILE'], encoding='utf-8')
    file_handler.setLevel(logging.INFO)
    app.logger.addHandler(file_handler)
    app.logger.setLevel(logging.INFO)
    logger.info("Файловый логгер настроен.")

def _init_extensions(app):
    """Инициализирует расширения Flask."""
    socketio.init_app(app)
    limiter.init_app(app)
    jwt.init_app(app)
    logger.info("Расширения Flask (SocketIO, Limiter, JWT) инициализированы.")

def _init_services(app):
    """Инициализирует и внедряет сервисы приложения."""

    from .services.game_service import GameService
    from .services.game_factory import GameFactory
    from .services.game_registry import GameRegistry
    from .services.peer_channel import PeerChannel
    from .services.logging_service import log_match_stats

    registry = GameRegistry(log_event_func=log_event)
    peer_channel = PeerChannel(notification_queue, log_event=log_event)

    game_factory = GameFactory(
        log_event=log_event,
        peer_channel=peer_channel,
        finalize_session_callback=registry.remove_session,
        log_stats=log_match_stats,
    )

    game_service = GameService(
        registry=registry,
        factory=game_factory,
        sid_to_user_map=sid_to_user_map,
        sid_to_user_lock=sid_to_user_lock,
        log_event=log_event,
    )

    # Прикрепляем главный сервис к экземпляру приложения
    app.game_service = game_service
    logger.info("Игровые сервисы (GameService, Factory, Registry, PeerChannel) инициализированы.")

def _register_blueprints(app):
    """Регистрирует маршруты API (Blueprints)."""
    from .api.main_routes import bp as main_bp
    app.register_blueprint(main_bp)

    logger.info("Blueprints (маршруты API) зарегистрированы.")

def _register_socketio_handlers():
    """
    Импортирует обработчики SocketIO для их регистрации.
    """
    # Этот импорт регистрирует обработчики в экземпляре socketio
    from .sockets import connection_handlers
    from .sockets import game_handlers
    logger.info("Обработчики SocketIO (connection, game) зарегистрированы.")

def create_app(test_config=None):
    """
    Фабрика приложений (Паттерн Application Factory).
    """

    app = Flask(__name__, instance_relative_config=True)

    # 1. Загрузка конфигурации
    app.config.from_object('checkers.config.Config')
    app.config.from_pyfile('config.py', silent=True)
    if test_config:
        app.config.from_mapping(test_config)

    # 2. Настройка логирования
    _configure_logging(app)

    # 3. Регистрация обработчиков SocketIO.
    # До init_app: обработчики, объявленные до создания сервера,
    # переносятся на сервер каждого нового приложения.
    _register_socketio_handlers()

    # 4. Инициализация расширений
    _init_extensions(app)

    # 5. Инициализация сервисов
    _init_services(app)

    # 6. Регистрация Blueprints (маршрутов API)
    _register_blueprints(app)

    # 7. Запуск фонового воркера
    if app.config['START_BACKGROUND_WORKERS']:
        logger.info("Запуск фонового потока-потребителя (QueueConsumer)...")
        start_notification_consumer(app, socketio, notification_queue)

    app.logger.info("Приложение 'checkers-peer-host' создано.")
    app.logger.info(f"Путь к логам: {app.config['LOG_FILE']}")

    return app, socketio
