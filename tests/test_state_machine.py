"""Tests for move resolution (calculate) and GameTurnManager (commit)."""

import pytest

from checkers.game_core import (
    PieceKind,
    Position,
    Team,
    create_initial_board_state,
    find_mandatory_captures,
    resolve_move,
)
from checkers.game_core import constants as c
from checkers.services.game_state import (
    STATE_AWAITING_CONTINUATION,
    STATE_AWAITING_MOVE,
    STATE_FINISHED,
    GameState,
)
from checkers.services.game_turn_manager import GameTurnManager

from conftest import board_of, king, man


def P(x, y):
    return Position(x, y)


def state_with(board, turn=Team.FIRST):
    state = GameState(turn)
    state.board = board
    state.mandatory_capture_positions = find_mandatory_captures(board, turn)
    return state


@pytest.fixture
def manager(event_log):
    stats = []
    m = GameTurnManager(game_id='test-game', log_event=event_log, log_stats=stats.append)
    m.stats = stats
    return m


# ---------------------------------------------------------------------------
# resolve_move
# ---------------------------------------------------------------------------


class TestResolveMove:

    def test_quiet_opening_move_flips_turn(self):
        board = create_initial_board_state()
        result = resolve_move(board, Team.FIRST, Team.FIRST, P(2, 2), P(3, 3))

        assert result.accepted
        assert result.captured_position is None
        assert result.next_turn == Team.SECOND
        assert result.board.piece_at(P(3, 3)) == man(3, 3)
        assert result.board.piece_at(P(2, 2)) is None

    def test_step_onto_own_piece_is_rejected(self):
        board = create_initial_board_state()
        result = resolve_move(board, Team.FIRST, Team.FIRST, P(2, 0), P(3, 1))
        assert not result.accepted
        assert result.reason == c.REJECT_ILLEGAL_MOVE

    def test_capture_removes_jumped_piece(self):
        board = board_of(man(3, 1), man(4, 2, Team.SECOND), man(7, 7, Team.SECOND))
        result = resolve_move(board, Team.FIRST, Team.FIRST, P(3, 1), P(5, 3))

        assert result.accepted
        assert result.captured_position == P(4, 2)
        assert result.board.piece_at(P(4, 2)) is None
        assert result.next_turn == Team.SECOND
        assert not result.game_over.is_over

    def test_wrong_turn(self):
        board = create_initial_board_state()
        result = resolve_move(board, Team.FIRST, Team.SECOND, P(1, 5), P(0, 4))
        assert result.reason == c.REJECT_WRONG_TURN

    def test_game_over_rejects_everything(self):
        board = create_initial_board_state()
        result = resolve_move(board, Team.FIRST, Team.FIRST, P(2, 2), P(3, 3), is_over=True)
        assert result.reason == c.REJECT_GAME_OVER

    @pytest.mark.parametrize("source", [P(3, 3), P(1, 5)])
    def test_empty_or_foreign_square(self, source):
        board = create_initial_board_state()
        result = resolve_move(board, Team.FIRST, Team.FIRST, source, P(2, 4))
        assert result.reason == c.REJECT_NO_PIECE

    def test_original_board_is_not_mutated(self):
        board = board_of(man(3, 1), man(4, 2, Team.SECOND), man(7, 7, Team.SECOND))
        resolve_move(board, Team.FIRST, Team.FIRST, P(3, 1), P(5, 3))
        assert board.piece_at(P(4, 2)) == man(4, 2, Team.SECOND)
        assert board.piece_at(P(3, 1)) == man(3, 1)


class TestMandatoryCaptureGate:

    @pytest.fixture
    def board(self):
        return board_of(man(2, 2), man(6, 2), man(3, 3, Team.SECOND), man(7, 7, Team.SECOND))

    def test_other_piece_is_rejected(self, board):
        result = resolve_move(board, Team.FIRST, Team.FIRST, P(6, 2), P(7, 3))
        assert result.reason == c.REJECT_CAPTURE_REQUIRED

    def test_quiet_move_of_capturing_piece_is_rejected(self, board):
        result = resolve_move(board, Team.FIRST, Team.FIRST, P(2, 2), P(1, 3))
        assert result.reason == c.REJECT_CAPTURE_REQUIRED

    def test_capture_is_accepted(self, board):
        result = resolve_move(board, Team.FIRST, Team.FIRST, P(2, 2), P(4, 4))
        assert result.accepted
        assert result.captured_position == P(3, 3)

    def test_every_source_outside_the_set_is_rejected(self, board):
        mandatory = find_mandatory_captures(board, Team.FIRST)
        for piece in board.pieces_of(Team.FIRST):
            if piece.position in mandatory:
                continue
            for x in range(8):
                for y in range(8):
                    result = resolve_move(board, Team.FIRST, Team.FIRST, piece.position, P(x, y))
                    assert not result.accepted


class TestMultiCapture:

    @pytest.fixture
    def board(self):
        return board_of(
            man(0, 0), man(6, 0),
            man(1, 1, Team.SECOND), man(3, 3, Team.SECOND), man(7, 7, Team.SECOND),
        )

    def test_first_jump_locks_the_piece(self, board):
        result = resolve_move(board, Team.FIRST, Team.FIRST, P(0, 0), P(2, 2))

        assert result.accepted
        assert result.continuation_piece == P(2, 2)
        assert result.next_turn == Team.FIRST
        assert result.mandatory_capture_positions == {P(2, 2)}

    def test_other_piece_during_chain(self, board):
        first = resolve_move(board, Team.FIRST, Team.FIRST, P(0, 0), P(2, 2))
        result = resolve_move(first.board, Team.FIRST, Team.FIRST, P(6, 0), P(7, 1), locked=P(2, 2))
        assert result.reason == c.REJECT_CONTINUATION_LOCKED

    def test_quiet_step_during_chain(self, board):
        first = resolve_move(board, Team.FIRST, Team.FIRST, P(0, 0), P(2, 2))
        result = resolve_move(first.board, Team.FIRST, Team.FIRST, P(2, 2), P(1, 3), locked=P(2, 2))
        assert result.reason == c.REJECT_CAPTURE_REQUIRED

    def test_chain_ends_and_turn_passes(self, board):
        first = resolve_move(board, Team.FIRST, Team.FIRST, P(0, 0), P(2, 2))
        second = resolve_move(first.board, Team.FIRST, Team.FIRST, P(2, 2), P(4, 4), locked=P(2, 2))

        assert second.accepted
        assert second.continuation_piece is None
        assert second.next_turn == Team.SECOND
        assert second.board.count(Team.SECOND) == 1


class TestPromotion:

    def test_man_reaching_back_rank_becomes_king(self):
        board = board_of(man(2, 6), man(7, 3, Team.SECOND))
        result = resolve_move(board, Team.FIRST, Team.FIRST, P(2, 6), P(3, 7))

        assert result.accepted
        assert result.is_promoted
        assert result.piece_kind == PieceKind.MAN
        assert result.board.piece_at(P(3, 7)).kind == PieceKind.KING

    def test_second_team_promotes_on_row_zero(self):
        board = board_of(man(1, 1, Team.SECOND), man(7, 5))
        result = resolve_move(board, Team.SECOND, Team.SECOND, P(1, 1), P(0, 0))
        assert result.board.piece_at(P(0, 0)) == king(0, 0, Team.SECOND)

    def test_continuation_uses_promoted_kind(self):
        # as a man on (4, 7) nothing is capturable; as a king the (6, 5) ray is open
        board = board_of(
            man(2, 5),
            man(3, 6, Team.SECOND), man(6, 5, Team.SECOND), man(0, 7, Team.SECOND),
        )
        result = resolve_move(board, Team.FIRST, Team.FIRST, P(2, 5), P(4, 7))

        assert result.is_promoted
        assert result.continuation_piece == P(4, 7)

        chained = resolve_move(result.board, Team.FIRST, Team.FIRST, P(4, 7), P(7, 4), locked=P(4, 7))
        assert chained.accepted
        assert chained.captured_position == P(6, 5)
        assert chained.next_turn == Team.SECOND


class TestMoveEndsGame:

    def test_last_piece_captured(self):
        board = board_of(man(3, 1), man(4, 2, Team.SECOND))
        result = resolve_move(board, Team.FIRST, Team.FIRST, P(3, 1), P(5, 3))

        assert result.game_over.is_over
        assert result.game_over.winner == Team.FIRST
        assert result.game_over.reason == c.OVER_NO_PIECES
        assert result.mandatory_capture_positions == set()
        assert result.continuation_piece is None


# ---------------------------------------------------------------------------
# GameTurnManager
# ---------------------------------------------------------------------------


class TestTurnManager:

    def test_accepted_move_commits(self, manager):
        state = GameState()
        accepted, reason, record = manager.apply_move(state, Team.FIRST, P(2, 2), P(3, 3))

        assert accepted and reason is None
        assert state.turn == Team.SECOND
        assert state.session_state == STATE_AWAITING_MOVE
        assert state.history == [record]
        assert state.last_move is record
        assert record['from'] == P(2, 2) and record['to'] == P(3, 3)
        assert record['team'] == Team.FIRST
        assert record['piece_kind'] == PieceKind.MAN
        assert state.status_message == "Ходят вторые"

    def test_rejected_move_leaves_state_untouched(self, manager, event_log):
        state = GameState()
        board_before = state.board

        accepted, reason, record = manager.apply_move(state, Team.SECOND, P(1, 5), P(0, 4))

        assert not accepted
        assert reason == c.REJECT_WRONG_TURN
        assert record is None
        assert state.board is board_before
        assert state.turn == Team.FIRST
        assert state.history == []
        assert "MOVE_REJECTED" in event_log.types

    def test_chain_state(self, manager):
        board = board_of(
            man(0, 0), man(6, 0),
            man(1, 1, Team.SECOND), man(3, 3, Team.SECOND), man(7, 7, Team.SECOND),
        )
        state = state_with(board)

        manager.apply_move(state, Team.FIRST, P(0, 0), P(2, 2))
        assert state.session_state == STATE_AWAITING_CONTINUATION
        assert state.active_multi_capture_piece == P(2, 2)
        assert state.turn == Team.FIRST

        accepted, reason, _ = manager.apply_move(state, Team.FIRST, P(6, 0), P(7, 1))
        assert not accepted
        assert reason == c.REJECT_CONTINUATION_LOCKED

        manager.apply_move(state, Team.FIRST, P(2, 2), P(4, 4))
        assert state.session_state == STATE_AWAITING_MOVE
        assert state.active_multi_capture_piece is None
        assert state.turn == Team.SECOND

    def test_finishing_move(self, manager, event_log):
        state = state_with(board_of(man(3, 1), man(4, 2, Team.SECOND)))

        manager.apply_move(state, Team.FIRST, P(3, 1), P(5, 3))

        assert state.is_over
        assert state.winner == Team.FIRST
        assert state.session_state == STATE_FINISHED
        assert "первые" in state.status_message
        assert "GAME_END_WIN" in event_log.types
        assert manager.stats == [{
            'game_id': 'test-game',
            'generation': 0,
            'winner': 'FIRST',
            'reason': c.OVER_NO_PIECES,
            'moves': 1,
            'promotions': 0,
            'pieces_left': {'FIRST': 1, 'SECOND': 0},
            'kings_left': {'FIRST': 0, 'SECOND': 0},
        }]

        accepted, reason, _ = manager.apply_move(state, Team.SECOND, P(0, 0), P(1, 1))
        assert not accepted
        assert reason == c.REJECT_GAME_OVER

    def test_forfeit(self, manager):
        state = GameState()
        manager.forfeit(state, Team.SECOND)

        assert state.is_over
        assert state.winner == Team.SECOND
        assert state.session_state == STATE_FINISHED

        # a second forfeit does not overwrite the result
        manager.forfeit(state, Team.FIRST)
        assert state.winner == Team.SECOND
        assert len(manager.stats) == 1

    def test_reset(self, manager):
        state = GameState()
        manager.apply_move(state, Team.FIRST, P(2, 2), P(3, 3))
        manager.forfeit(state, Team.FIRST)

        manager.reset_state(state)

        assert state.board == create_initial_board_state()
        assert state.turn == Team.FIRST
        assert not state.is_over
        assert state.winner is None
        assert state.history == []
        assert state.session_state == STATE_AWAITING_MOVE
        assert state.generation == 1

    def test_reset_adopts_given_generation(self, manager):
        state = GameState()

        manager.reset_state(state, generation=5)
        assert state.generation == 5

        manager.reset_state(state)
        assert state.generation == 6

    def test_unexpected_error_is_reported_as_rejection(self, manager, event_log, monkeypatch):
        def explode(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr("checkers.services.game_turn_manager.resolve_move", explode)
        state = GameState()

        accepted, reason, _ = manager.apply_move(state, Team.FIRST, P(2, 2), P(3, 3))

        assert not accepted
        assert reason == c.REJECT_ILLEGAL_MOVE
        assert state.turn == Team.FIRST
        assert "CRITICAL_ERROR" in event_log.types
