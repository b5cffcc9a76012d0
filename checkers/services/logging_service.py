# checkers/services/logging_service.py
"""
Журналы хоста.

LOG_FILE       - по строке на событие:
                 [время] [ТИП] [Peer: имя] [SID: ...] [GameID: ...] [Data: ...] | текст
STATS_LOG_FILE - по JSON-строке на законченную партию (см. GameTurnManager._finish).

Пути берутся из app.config, поэтому писать можно только внутри контекста
приложения (сокет-обработчики, маршруты, фоновый воркер).
"""

import json
import datetime
import logging
import threading
from flask import current_app

from checkers.extensions import sid_to_user_map, sid_to_user_lock

logger = logging.getLogger(__name__)

file_lock = threading.RLock()


def _timestamp():
    return datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def _append_line(config_key, line):
    path = current_app.config[config_key]
    with file_lock:
        try:
            with open(path, 'a', encoding='utf-8') as f:
                f.write(line)
        except OSError as e:
            logger.error(f"Не удалось записать в {config_key} ({path}): {e}")


def _peer_name(sid):
    if not sid:
        return '-'
    with sid_to_user_lock:
        user_data = sid_to_user_map.get(sid)
    if not user_data:
        return 'Unknown (SID)'
    return user_data.get('username', 'Unknown (SID)')


def format_event(event_type, message, peer='-', sid=None, game_id=None, extra_data=None):
    parts = [f"[{_timestamp()}]", f"[{event_type}]", f"[Peer: {peer}]"]
    if sid:
        parts.append(f"[SID: {sid}]")
    if game_id:
        parts.append(f"[GameID: {game_id}]")
    if extra_data:
        parts.append(f"[Data: {extra_data}]")
    return " ".join(parts) + f" | {message}\n"


def log_event(event_type, message, sid=None, game_id=None, extra_data=None):
    """Одна строка в журнал событий. Имя пира ищется по sid в sid_to_user_map."""
    _append_line('LOG_FILE', format_event(
        event_type,
        message,
        peer=_peer_name(sid),
        sid=sid,
        game_id=game_id,
        extra_data=extra_data,
    ))


def log_match_stats(stats_data):
    """Итог партии одной JSON-строкой; к записи добавляется время окончания."""
    record = {'finished_at': _timestamp(), **stats_data}
    _append_line('STATS_LOG_FILE', json.dumps(record, ensure_ascii=False) + '\n')
