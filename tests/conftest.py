"""Shared fixtures for the Quatter core tests."""

import numpy as np
import pytest

from quatter.game.board import Board
from quatter.game.piece import PieceSet
from quatter.game.rules import GameStateMachine
from quatter.game.selection import SelectionController
from quatter.interfaces.host import Host
from quatter.interfaces.input import InputAggregator
from quatter.utils import home_position

# Four pieces that share only the DARK bit (bit 1)
DARK_ROW = [0b0010, 0b0011, 0b0110, 0b1111]
# Four pieces on which every bit is set on exactly two of them
MIXED_ROW = [0b0000, 0b1111, 0b0101, 0b1010]
# A full board on which no row, column or diagonal shares an attribute
DRAW_BOARD = [[0, 5, 10, 15],
              [14, 11, 4, 1],
              [7, 2, 13, 8],
              [9, 12, 3, 6]]


class RecordingHost(Host):
    """Host that remembers every call made to it."""

    def __init__(self):
        self.calls = []

    def names(self):
        return [name for name, _ in self.calls]

    def last(self, name):
        for call_name, args in reversed(self.calls):
            if call_name == name:
                return args
        return None

    def request_camera_move(self, rotation, zoom):
        self.calls.append(("camera_move", (rotation, zoom)))

    def request_select_visual(self, piece_id):
        self.calls.append(("select", (piece_id,)))

    def request_deselect_visual(self, piece_id):
        self.calls.append(("deselect", (piece_id,)))

    def request_square_visual(self, cell):
        self.calls.append(("square", (cell,)))

    def request_place_visual(self, piece_id, row, col):
        self.calls.append(("place", (piece_id, row, col)))

    def request_screenshot(self):
        self.calls.append(("screenshot", ()))

    def notify_phase_changed(self, phase):
        self.calls.append(("phase", (phase,)))

    def notify_win(self, line):
        self.calls.append(("win", (line,)))


def near(piece_id: int) -> np.ndarray:
    """A camera position just outside the ring, closest to the given piece."""
    return home_position(piece_id) * 1.5 + np.array([0.0, 2.0, 0.0])


@pytest.fixture
def host() -> RecordingHost:
    return RecordingHost()


@pytest.fixture
def pieces() -> PieceSet:
    return PieceSet()


@pytest.fixture
def board() -> Board:
    return Board()


@pytest.fixture
def selection(pieces, board, host) -> SelectionController:
    return SelectionController(pieces, board, host)


@pytest.fixture
def game(board, pieces, selection, host) -> GameStateMachine:
    return GameStateMachine(board, pieces, selection, host)


@pytest.fixture
def aggregator(game) -> InputAggregator:
    return InputAggregator(game)


def play_turn(game: GameStateMachine, piece_id: int, row: int, col: int):
    """Pick a piece for the opponent and have them put it."""
    game.selection.select_piece_id(piece_id)
    game.pick()
    game.put(row, col)
