# checkers/config.py

import datetime

class Config:
    """Базовый класс конфигурации (безопасные значения)."""

    JWT_SECRET_KEY = 'super-secret-default-key-SHOULD-BE-CHANGED'
    JWT_ACCESS_TOKEN_EXPIRES = datetime.timedelta(days=15)

    LOG_FILE = 'application.log'
    STATS_LOG_FILE = 'match_stats.log'

    # Тесты выключают воркер и разбирают очередь вручную
    START_BACKGROUND_WORKERS = True

    # --- Реплей ---
    REPLAY_RATE_LIMIT = "30 per minute"
    MAX_REPLAY_MOVES = 1000
