# checkers/game_core/board_state.py

from dataclasses import dataclass, replace
from typing import Dict, Iterable, Iterator, List, NamedTuple, Optional

from . import constants as c
from .constants import PieceKind, Team


class Position(NamedTuple):
    x: int
    y: int

    def in_bounds(self) -> bool:
        return c.MIN_COORD <= self.x <= c.MAX_COORD and c.MIN_COORD <= self.y <= c.MAX_COORD

    def shifted(self, dx: int, dy: int) -> "Position":
        return Position(self.x + dx, self.y + dy)


@dataclass(frozen=True)
class Piece:
    position: Position
    kind: PieceKind
    team: Team

    def moved_to(self, position: Position) -> "Piece":
        return replace(self, position=position)

    def promoted(self) -> "Piece":
        return replace(self, kind=PieceKind.KING)


class Board:
    """
    Набор шашек, индексированный по позиции.
    На одной клетке не может быть больше одной шашки: это проверяется
    при создании доски, а не исправляется потом.
    Доска не изменяется на месте: все операции возвращают новую доску.
    """

    def __init__(self, pieces: Iterable[Piece] = ()):
        self._pieces: Dict[Position, Piece] = {}
        for piece in pieces:
            if piece.position in self._pieces:
                raise ValueError(f"Две шашки на одной клетке: {tuple(piece.position)}")
            if not piece.position.in_bounds():
                raise ValueError(f"Шашка за пределами доски: {tuple(piece.position)}")
            self._pieces[piece.position] = piece

    def __iter__(self) -> Iterator[Piece]:
        return iter(self._pieces.values())

    def __len__(self) -> int:
        return len(self._pieces)

    def __contains__(self, position) -> bool:
        return position in self._pieces

    def __eq__(self, other) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._pieces == other._pieces

    def __repr__(self) -> str:
        return f"Board({sorted(self._pieces.values(), key=lambda p: p.position)!r})"

    def piece_at(self, position: Position) -> Optional[Piece]:
        return self._pieces.get(position)

    def is_occupied(self, position: Position) -> bool:
        return position in self._pieces

    def is_occupied_by_opponent(self, position: Position, team: Team) -> bool:
        piece = self._pieces.get(position)
        return piece is not None and piece.team != team

    def pieces_of(self, team: Team) -> List[Piece]:
        return [p for p in self._pieces.values() if p.team == team]

    def count(self, team: Team) -> int:
        return sum(1 for p in self._pieces.values() if p.team == team)


def create_initial_board_state() -> Board:
    """
    Создает доску со стандартной расстановкой (по 12 шашек).
    """
    pieces = [Piece(Position(x, y), PieceKind.MAN, Team.FIRST) for x, y in c.STANDARD_FIRST_SETUP]
    pieces += [Piece(Position(x, y), PieceKind.MAN, Team.SECOND) for x, y in c.STANDARD_SECOND_SETUP]
    return Board(pieces)


def should_promote(piece: Piece) -> bool:
    return piece.kind == PieceKind.MAN and piece.position.y == c.PROMOTION_ROW[piece.team]


def promote_pieces(board: Board) -> Board:
    """Превращает в дамки все простые шашки, стоящие на дальней горизонтали."""
    return Board(p.promoted() if should_promote(p) else p for p in board)


def apply_move_to_board(board: Board, from_pos: Position, to_pos: Position,
                        captured: Optional[Position] = None) -> Board:
    """
    Применяет ОДИН уже проверенный ход к копии доски и возвращает ее.
    Снимает взятую шашку и проводит превращение в дамку.
    """
    moving = board.piece_at(from_pos)
    if moving is None:
        raise ValueError(f"Нет шашки на {tuple(from_pos)}")

    pieces = []
    for piece in board:
        if piece.position == from_pos:
            continue
        if captured is not None and piece.position == captured:
            continue
        pieces.append(piece)
    pieces.append(moving.moved_to(to_pos))

    return promote_pieces(Board(pieces))
