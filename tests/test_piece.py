"""Tests for piece identity, attributes and the state index."""

import numpy as np
import pytest

from quatter.exceptions import InvalidPieceIdError
from quatter.game.piece import Attribute, Piece, PieceSet
from quatter.utils import NUM_PIECES, PieceState, home_position


class TestPieceIdentity:
    """Piece id and attribute pattern are the same thing."""

    def test_attribute_bits_reproduce_value(self):
        for value in range(NUM_PIECES):
            piece = Piece(value)
            bits = sum(int(piece.get_attribute(i)) << i for i in range(4))
            assert bits == value
            assert piece.id == value
            assert piece.to_int() == value

    def test_piece_set_covers_every_pattern_once(self, pieces: PieceSet):
        values = [piece.to_int() for piece in pieces]
        assert len(pieces) == NUM_PIECES
        assert sorted(values) == list(range(NUM_PIECES))
        assert len(set(values)) == NUM_PIECES

    def test_named_attributes(self):
        piece = Piece(Attribute.DARK | Attribute.SOLID)
        assert piece.has(Attribute.DARK)
        assert piece.has(Attribute.SOLID)
        assert not piece.has(Attribute.TALL)
        assert piece.get_attribute(1)
        assert piece.describe() == "short dark square solid"

    @pytest.mark.parametrize("value", [-1, 16, 255])
    def test_out_of_range_attributes_rejected(self, value):
        with pytest.raises(InvalidPieceIdError):
            Piece(value)

    def test_attribute_index_out_of_range(self):
        with pytest.raises(IndexError):
            Piece(3).get_attribute(4)


class TestPieceLifecycle:
    """State transitions of a single piece."""

    def test_new_piece_is_free_at_home(self):
        piece = Piece(5)
        assert piece.state == PieceState.FREE
        assert piece.coordinate is None
        assert np.allclose(piece.position, home_position(5))

    def test_select_is_idempotent(self):
        piece = Piece(5)
        piece.select()
        piece.select()
        assert piece.state == PieceState.SELECTED

    def test_deselect_requires_selection(self):
        with pytest.raises(ValueError):
            Piece(5).deselect()

    def test_pick_then_place(self):
        piece = Piece(5)
        piece.pick()
        assert piece.state == PieceState.PICKED
        piece.place(2, 3, np.array([1.0, 0.0, 1.0]))
        assert piece.state == PieceState.PLACED
        assert piece.coordinate == (2, 3)
        assert np.allclose(piece.position, [1.0, 0.0, 1.0])

    def test_placed_piece_cannot_be_selected_or_picked(self):
        piece = Piece(5)
        piece.place(0, 0)
        with pytest.raises(ValueError):
            piece.select()
        with pytest.raises(ValueError):
            piece.pick()
        with pytest.raises(ValueError):
            piece.place(1, 1)

    def test_reset_returns_to_free(self):
        piece = Piece(9)
        piece.place(1, 1, np.zeros(3))
        piece.reset()
        assert piece.state == PieceState.FREE
        assert piece.coordinate is None
        assert np.allclose(piece.position, home_position(9))


class TestPieceSet:
    """The state index kept by PieceSet."""

    def test_all_free_initially(self, pieces: PieceSet):
        assert pieces.count(PieceState.FREE) == NUM_PIECES
        assert pieces.selected() is None
        assert pieces.picked() is None

    def test_index_follows_transitions(self, pieces: PieceSet):
        pieces[3].select()
        pieces[7].pick()
        pieces[9].place(0, 0)

        assert pieces.selected() is pieces[3]
        assert pieces.picked() is pieces[7]
        assert pieces.count(PieceState.FREE) == NUM_PIECES - 3
        assert [p.id for p in pieces.with_state(PieceState.PLACED)] == [9]
        assert [p.id for p in pieces.with_state(PieceState.SELECTED, PieceState.PICKED)] == [3, 7]

    def test_reset_clears_index(self, pieces: PieceSet):
        pieces[3].select()
        pieces[9].place(0, 0)
        pieces.reset()
        assert pieces.count(PieceState.FREE) == NUM_PIECES
        assert pieces.count(PieceState.PLACED) == 0

    @pytest.mark.parametrize("piece_id", [-1, 16, 1.5, "3", True])
    def test_invalid_ids(self, pieces: PieceSet, piece_id):
        with pytest.raises(InvalidPieceIdError):
            pieces[piece_id]
