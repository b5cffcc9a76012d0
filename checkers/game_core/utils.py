# checkers/game_core/utils.py

from typing import NamedTuple, Optional

from . import constants as c
from .board_state import Board
from .constants import Team
from .move_generator import has_any_legal_move


class GameOverResult(NamedTuple):
    is_over: bool
    winner: Optional[Team] = None
    reason: Optional[str] = None
    message: str = ""


NOT_OVER = GameOverResult(False)


def team_label(team: Team) -> str:
    return "первые" if team == Team.FIRST else "вторые"


def game_over_message(winner: Team, reason: str) -> str:
    return c.GAME_OVER_MESSAGES[reason].format(winner=team_label(winner))


def turn_message(turn: Team, continuation: bool = False) -> str:
    message = f"Ходят {team_label(turn)}"
    if continuation:
        message += " - продолжайте взятие!"
    return message


def is_edge_trapped(board: Board, team: Team) -> bool:
    """
    Эвристика "зажат у края": у команды осталась ровно одна шашка,
    она стоит на крайней вертикали (x = 0 или x = 7), и обе соседние
    диагональные клетки в сторону центра заняты соперником.
    Срабатывает раньше, чем обычная проверка на отсутствие ходов.
    """
    pieces = board.pieces_of(team)
    if len(pieces) != 1:
        return False

    position = pieces[0].position
    if position.x == c.MIN_COORD:
        inward = 1
    elif position.x == c.MAX_COORD:
        inward = -1
    else:
        return False

    neighbours = (position.shifted(inward, 1), position.shifted(inward, -1))
    return all(
        n.in_bounds() and board.is_occupied_by_opponent(n, team)
        for n in neighbours
    )


def evaluate_game_over(board: Board, team_to_move: Team) -> GameOverResult:
    """
    Проверяет, закончилась ли игра для команды, которая должна ходить.
    Победитель всегда - другая команда.
    """
    winner = team_to_move.opponent()

    if board.count(team_to_move) == 0:
        reason = c.OVER_NO_PIECES
    elif is_edge_trapped(board, team_to_move):
        reason = c.OVER_EDGE_TRAP
    elif not has_any_legal_move(board, team_to_move):
        reason = c.OVER_NO_MOVES
    else:
        return NOT_OVER

    return GameOverResult(True, winner, reason, game_over_message(winner, reason))
