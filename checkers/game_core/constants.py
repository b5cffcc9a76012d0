# checkers/game_core/constants.py

from enum import Enum


class Team(str, Enum):
    FIRST = "FIRST"
    SECOND = "SECOND"

    def opponent(self) -> "Team":
        return Team.SECOND if self is Team.FIRST else Team.FIRST


class PieceKind(str, Enum):
    MAN = "MAN"
    KING = "KING"


# === Настройка доски ===
BOARD_SIZE = 8
MIN_COORD = 0
MAX_COORD = BOARD_SIZE - 1

# Направление движения "вперед" по оси Y
FORWARD_DIRECTION = {
    Team.FIRST: 1,
    Team.SECOND: -1,
}

# Дальняя горизонталь, на которой простая шашка становится дамкой
PROMOTION_ROW = {
    Team.FIRST: MAX_COORD,
    Team.SECOND: MIN_COORD,
}

# Четыре диагональных направления (dx, dy)
DIAGONALS = ((1, 1), (1, -1), (-1, 1), (-1, -1))

# Стартовая расстановка: по 12 шашек, (x, y)
STANDARD_FIRST_SETUP = (
    (0, 0), (2, 0), (4, 0), (6, 0),
    (1, 1), (3, 1), (5, 1), (7, 1),
    (0, 2), (2, 2), (4, 2), (6, 2),
)
STANDARD_SECOND_SETUP = (
    (1, 5), (3, 5), (5, 5), (7, 5),
    (0, 6), (2, 6), (4, 6), (6, 6),
    (1, 7), (3, 7), (5, 7), (7, 7),
)

STARTING_TEAM = Team.FIRST

# Радиус окрестности при проверке "есть ли хоть один ход"
MOBILITY_SCAN_RADIUS = 2

# === Коды отказа (возвращаются вместо исключений) ===

# IllegalMove
REJECT_ILLEGAL_MOVE = "ILLEGAL_MOVE"
REJECT_CAPTURE_REQUIRED = "CAPTURE_REQUIRED"
REJECT_NO_PIECE = "NO_PIECE"
REJECT_GAME_OVER = "GAME_OVER"

# WrongTurn
REJECT_WRONG_TURN = "WRONG_TURN"
REJECT_CONTINUATION_LOCKED = "CONTINUATION_LOCKED"

# ProtocolMismatch
REJECT_PROTOCOL_MISMATCH = "PROTOCOL_MISMATCH"
REJECT_INVALID_SNAPSHOT = "INVALID_SNAPSHOT"
# Снимок или рестарт из партии, которая уже сброшена
REJECT_STALE_SNAPSHOT = "STALE_SNAPSHOT"

# Хост
REJECT_NO_ROOM = "NO_ROOM"

REJECTION_MESSAGES = {
    REJECT_ILLEGAL_MOVE: "Недопустимый ход.",
    REJECT_CAPTURE_REQUIRED: "Взятие обязательно: ходите шашкой, которая может бить.",
    REJECT_NO_PIECE: "На этой клетке нет вашей шашки.",
    REJECT_GAME_OVER: "Игра окончена.",
    REJECT_WRONG_TURN: "Сейчас не ваш ход.",
    REJECT_CONTINUATION_LOCKED: "Продолжайте взятие той же шашкой.",
    REJECT_PROTOCOL_MISMATCH: "Сообщение от неизвестного соперника.",
    REJECT_INVALID_SNAPSHOT: "Получено некорректное состояние игры.",
    REJECT_STALE_SNAPSHOT: "Получено состояние из предыдущей партии.",
    REJECT_NO_ROOM: "Вы не в комнате.",
}

# === Причины окончания игры ===
OVER_NO_PIECES = "no_pieces"
OVER_EDGE_TRAP = "edge_trap"
OVER_NO_MOVES = "no_moves"
OVER_FORFEIT = "forfeit"

GAME_OVER_MESSAGES = {
    OVER_NO_PIECES: "Игра окончена! Победили {winner} (у соперника не осталось шашек).",
    OVER_EDGE_TRAP: "Игра окончена! Победили {winner} (последняя шашка соперника зажата у края).",
    OVER_NO_MOVES: "Игра окончена! Победили {winner} (у соперника нет ходов).",
    OVER_FORFEIT: "Игра окончена! Победили {winner} (соперник покинул игру).",
}
