"""Tests for the pick/put turn state machine."""

import pytest

from quatter.exceptions import NoSelectionError, OccupiedCellError
from quatter.game.rules import GameStateMachine, new_game
from quatter.utils import GamePhase, PieceState, NUM_PIECES

from .conftest import DARK_ROW, DRAW_BOARD, play_turn


class TestPhaseCycle:
    """Phase transitions without a win."""

    def test_initial_phase(self, game: GameStateMachine):
        assert game.phase == GamePhase.PLAYER1_PICKS
        assert game.winning_line is None

    def test_four_advances_cycle_back(self, game: GameStateMachine, host):
        seen = []
        for _ in range(4):
            game.next_phase()
            seen.append(game.phase)

        assert seen == [GamePhase.PLAYER2_PUTS, GamePhase.PLAYER2_PICKS,
                        GamePhase.PLAYER1_PUTS, GamePhase.PLAYER1_PICKS]
        assert [args[0] for name, args in host.calls if name == "phase"] == seen

    def test_leaving_puts_phase_auto_selects(self, game: GameStateMachine):
        game.next_phase()
        assert game.selection.selected_piece is None
        game.next_phase()
        assert game.phase == GamePhase.PLAYER2_PICKS
        assert game.selection.selected_piece is not None

    def test_phase_helpers(self):
        assert GamePhase.PLAYER2_PUTS.is_putting()
        assert GamePhase.PLAYER2_PICKS.is_picking()
        assert GamePhase.PLAYER1_PUTS.player == 1
        assert GamePhase.QUATTER.player == 0
        assert GamePhase.QUATTER.next() == GamePhase.QUATTER
        assert str(GamePhase.PLAYER2_PICKS) == "Player 2 picks"


class TestQuatter:
    """Winning and the terminal phase."""

    def test_fourth_put_completes_row(self, game: GameStateMachine, host):
        for col, piece_id in enumerate(DARK_ROW[:3]):
            play_turn(game, piece_id, 0, col)
            assert not game.is_over()

        play_turn(game, DARK_ROW[3], 0, 3)

        assert game.phase == GamePhase.QUATTER
        assert game.winning_line.name == "row 0"
        assert game.winner == 1
        assert host.last("win") == (game.winning_line,)

    def test_quatter_is_absorbing(self, game: GameStateMachine):
        for col, piece_id in enumerate(DARK_ROW):
            play_turn(game, piece_id, 0, col)

        game.next_phase()
        assert game.phase == GamePhase.QUATTER
        game.selection.select_piece_id(0)
        assert game.pick() is False
        assert game.put(3, 3) is False
        assert game.phase == GamePhase.QUATTER
        assert game.board.get_piece(3, 3) is None

    def test_no_win_keeps_cycling(self, game: GameStateMachine):
        play_turn(game, 0b0000, 0, 0)
        play_turn(game, 0b1111, 0, 1)
        play_turn(game, 0b0101, 0, 2)
        play_turn(game, 0b1010, 0, 3)
        assert game.phase == GamePhase.PLAYER1_PICKS
        assert game.winning_line is None


class TestPickAndPut:
    """Single actions within a turn."""

    def test_pick_hands_piece_over(self, game: GameStateMachine):
        game.selection.select_piece_id(5)
        assert game.pick()

        assert game.phase == GamePhase.PLAYER2_PUTS
        assert game.picked_piece is game.pieces[5]
        assert game.pieces[5].state == PieceState.PICKED
        assert game.selection.selected_piece is None
        assert game.pieces.selected() is None

    def test_pick_without_selection(self, game: GameStateMachine):
        with pytest.raises(NoSelectionError):
            game.pick()
        assert game.phase == GamePhase.PLAYER1_PICKS

    def test_put_during_pick_phase(self, game: GameStateMachine):
        assert game.put(0, 0) is False

    def test_put_places_picked_piece(self, game: GameStateMachine, host):
        game.selection.select_piece_id(5)
        game.pick()
        game.put(2, 1)

        assert game.board.get_piece(2, 1) is game.pieces[5]
        assert game.pieces[5].state == PieceState.PLACED
        assert game.phase == GamePhase.PLAYER2_PICKS
        assert host.last("place") == (5, 2, 1)

    def test_put_uses_square_cursor(self, game: GameStateMachine):
        game.selection.select_piece_id(5)
        game.pick()
        game.selection.select_square(3, 2)
        game.put()
        assert game.board.get_piece(3, 2) is game.pieces[5]
        assert game.selection.selected_square is None

    def test_put_without_square(self, game: GameStateMachine):
        game.selection.select_piece_id(5)
        game.pick()
        with pytest.raises(NoSelectionError):
            game.put()
        assert game.phase == GamePhase.PLAYER2_PUTS

    def test_put_on_occupied_cell(self, game: GameStateMachine):
        play_turn(game, 5, 1, 1)
        game.selection.select_piece_id(6)
        game.pick()
        with pytest.raises(OccupiedCellError):
            game.put(1, 1)
        assert game.phase == GamePhase.PLAYER1_PUTS
        assert game.pieces[6].state == PieceState.PICKED
        game.put(1, 2)
        assert game.phase == GamePhase.PLAYER1_PICKS


class TestReset:
    """Reset from any phase."""

    def test_reset_after_quatter(self, game: GameStateMachine):
        for col, piece_id in enumerate(DARK_ROW):
            play_turn(game, piece_id, 0, col)
        game.reset()

        assert game.phase == GamePhase.PLAYER1_PICKS
        assert game.winning_line is None
        assert len(game.board.empty_cells()) == 16
        assert game.pieces.count(PieceState.FREE) == NUM_PIECES
        assert game.selection.selected_piece is None
        assert game.selection.last_selected_piece is None

    def test_reset_mid_turn(self, game: GameStateMachine):
        game.selection.select_piece_id(5)
        game.pick()
        game.reset()
        assert game.picked_piece is None
        assert game.pieces[5].state == PieceState.FREE

    def test_reset_clears_highlight(self, game: GameStateMachine, host):
        game.selection.select_piece_id(2)
        game.reset()
        assert ("deselect", (2,)) in host.calls
        assert host.names()[-1] == "phase"
        assert game.pieces[2].state == PieceState.FREE

    def test_reset_after_draw(self, game: GameStateMachine):
        for row, ids in enumerate(DRAW_BOARD):
            for col, piece_id in enumerate(ids):
                play_turn(game, piece_id, row, col)
        assert game.is_draw
        assert game.phase == GamePhase.PLAYER1_PICKS

        game.reset()
        assert not game.is_draw
        assert len(game.board.empty_cells()) == 16


def test_new_game_wires_shared_collaborators():
    game = new_game()
    assert game.selection.pieces is game.pieces
    assert game.selection.board is game.board
    assert game.selection.host is game.host
    assert not game.is_draw
