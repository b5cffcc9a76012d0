# checkers/api/schemas.py

from marshmallow import Schema, fields, post_load, validates_schema, ValidationError, EXCLUDE
from marshmallow.validate import Range, Length

from checkers.game_core import Board, Piece, PieceKind, Position, Team
from checkers.game_core import constants as c

# --- Базовые типы ---

class PositionSchema(Schema):
    """Клетка доски {x, y}, обе координаты 0..7."""
    x = fields.Int(
        required=True,
        validate=Range(min=c.MIN_COORD, max=c.MAX_COORD, error="Координата x вне доски."),
    )
    y = fields.Int(
        required=True,
        validate=Range(min=c.MIN_COORD, max=c.MAX_COORD, error="Координата y вне доски."),
    )

    @post_load
    def make_position(self, data, **kwargs):
        return Position(data['x'], data['y'])


class PieceSchema(Schema):
    """Шашка на проводе: позиция развернута в плоские x, y."""
    x = fields.Int(required=True, validate=Range(min=c.MIN_COORD, max=c.MAX_COORD))
    y = fields.Int(required=True, validate=Range(min=c.MIN_COORD, max=c.MAX_COORD))
    kind = fields.Enum(PieceKind, required=True)
    team = fields.Enum(Team, required=True)

    @post_load
    def make_piece(self, data, **kwargs):
        return Piece(Position(data['x'], data['y']), data['kind'], data['team'])


def dump_piece(piece: Piece) -> dict:
    return {
        'x': piece.position.x,
        'y': piece.position.y,
        'kind': piece.kind.value,
        'team': piece.team.value,
    }


# --- Снимок состояния (синхронизация пиров) ---

class StateSnapshotSchema(Schema):
    """
    Полный снимок партии, который ходивший пир отправляет сопернику.
    from_position / to_position / is_promoted - справочные поля,
    для корректности используется только доска.
    """
    class Meta:
        unknown = EXCLUDE

    pieces = fields.List(fields.Nested(PieceSchema), required=True)
    turn = fields.Enum(Team, required=True)
    is_over = fields.Bool(required=True)
    winner = fields.Enum(Team, allow_none=True, load_default=None)
    status_message = fields.Str(load_default="")
    from_position = fields.Nested(PositionSchema, allow_none=True, load_default=None)
    to_position = fields.Nested(PositionSchema, allow_none=True, load_default=None)
    is_promoted = fields.Bool(load_default=False)
    generation = fields.Int(load_default=0, validate=Range(min=0))

    @validates_schema
    def validate_pieces(self, data, **kwargs):
        positions = [p.position for p in data.get('pieces', [])]
        if len(positions) != len(set(positions)):
            raise ValidationError("Две шашки на одной клетке.", field_name="pieces")
        if data.get('is_over') is False and data.get('winner') is not None:
            raise ValidationError("Победитель указан, но игра не окончена.", field_name="winner")

    @post_load
    def make_board(self, data, **kwargs):
        data['board'] = Board(data.pop('pieces'))
        return data


# --- Запись хода (реплей) ---

class MoveRecordSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    from_ = fields.Nested(PositionSchema, required=True, data_key="from")
    to = fields.Nested(PositionSchema, required=True)
    team = fields.Enum(Team, required=True)
    piece_kind = fields.Enum(PieceKind, load_default=PieceKind.MAN)
    is_promoted = fields.Bool(load_default=False)
    timestamp = fields.Str(allow_none=True, load_default=None)

    @post_load
    def rename_from(self, data, **kwargs):
        data['from'] = data.pop('from_')
        return data


class ReplayRequestSchema(Schema):
    # Верхняя граница длины проверяется в маршруте (MAX_REPLAY_MOVES из конфига)
    moves = fields.List(
        fields.Nested(MoveRecordSchema),
        required=True,
        error_messages={"required": "Необходимо передать список ходов."}
    )


# --- Входящие события сокетов ---

class OpenRoomSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    opponent = fields.Str(
        required=True,
        validate=Length(min=1, max=64, error="Имя соперника от 1 до 64 символов."),
    )


class AttemptMoveSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    from_ = fields.Nested(PositionSchema, required=True, data_key="from")
    to = fields.Nested(PositionSchema, required=True)

    @post_load
    def rename_from(self, data, **kwargs):
        data['from'] = data.pop('from_')
        return data
