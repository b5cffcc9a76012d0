# checkers/game_core/__init__.py

# Публичный API ядра правил
from .constants import (
    Team, PieceKind, BOARD_SIZE, STARTING_TEAM
)

from .board_state import (
    Position,
    Piece,
    Board,
    create_initial_board_state,
    apply_move_to_board,
    promote_pieces
)

from .move_validator import (
    MoveOutcome,
    evaluate_move
)

from .move_generator import (
    has_capture_from,
    find_mandatory_captures,
    find_legal_moves,
    has_any_legal_move
)

from .utils import (
    GameOverResult,
    evaluate_game_over,
    is_edge_trapped
)

from .transitions import (
    MoveResolution,
    resolve_move
)

from .replay import (
    ReplayFrame,
    replay_moves
)
