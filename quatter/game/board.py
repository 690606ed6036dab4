"""
board.py - Board representation and win detection for Quatter

This module implements the Board class which holds the 4x4 grid of placed
pieces and checks the ten winning lines. A line wins when it is full and the
four pieces on it share at least one attribute, whatever the other three
attributes are.
"""

from typing import Dict, List, NamedTuple, Optional, Tuple

import numpy as np

from quatter.debug import debug, DebugLevel
from quatter.exceptions import OccupiedCellError
from quatter.game.piece import Piece, PieceSet
from quatter.utils import (BOARD_SIZE, EMPTY, ATTRIBUTE_MASK, PieceState, Coordinate,
                           is_valid_position, all_cells, square_position, render_board_ascii)


class Line(NamedTuple):
    """A named sequence of four board cells."""
    name: str
    cells: Tuple[Coordinate, ...]


def _build_winning_lines() -> Tuple[Line, ...]:
    lines = []
    for row in range(BOARD_SIZE):
        lines.append(Line(f"row {row}", tuple((row, col) for col in range(BOARD_SIZE))))
    for col in range(BOARD_SIZE):
        lines.append(Line(f"column {col}", tuple((row, col) for row in range(BOARD_SIZE))))
    lines.append(Line("diagonal", tuple((i, i) for i in range(BOARD_SIZE))))
    lines.append(Line("anti-diagonal", tuple((i, BOARD_SIZE - 1 - i) for i in range(BOARD_SIZE))))
    return tuple(lines)


# Rows, then columns, then the two diagonals
WINNING_LINES = _build_winning_lines()


def shared_attributes(values) -> int:
    """
    Compute the attribute bits shared by a group of pieces.

    Each bit position is checked on its own: a bit counts as shared when it is
    set on every piece or clear on every piece.

    Args:
        values: Attribute values of the pieces

    Returns:
        Mask of the bit positions on which all pieces agree
    """
    values = np.asarray(values, dtype=int)
    all_set = np.bitwise_and.reduce(values)
    all_clear = np.bitwise_and.reduce(~values & ATTRIBUTE_MASK)
    return int(all_set | all_clear)


class Board:
    """
    Represents the Quatter board.

    The grid stores piece ids (EMPTY for a free cell). Because a piece id is
    its attribute pattern, win detection works directly on the grid values.
    """

    def __init__(self):
        """Initialize an empty board."""
        debug.debug("Initializing new Board", "board")
        self.reset()

    def reset(self):
        """Reset the board to an empty state."""
        debug.debug("Resetting board", "board")
        self.grid = np.full((BOARD_SIZE, BOARD_SIZE), EMPTY, dtype=int)
        self._pieces: Dict[Coordinate, Piece] = {}
        self.last_move: Optional[Coordinate] = None

    def is_empty(self, row: int, col: int) -> bool:
        """
        Check whether a cell is on the board and holds no piece.

        Args:
            row: Row index
            col: Column index

        Returns:
            True if the cell is empty, False otherwise
        """
        if not is_valid_position(row, col):
            debug.debug(f"Cell ({row}, {col}) out of bounds", "board")
            return False
        return self.grid[row, col] == EMPTY

    def get_piece(self, row: int, col: int) -> Optional[Piece]:
        return self._pieces.get((row, col))

    def empty_cells(self) -> List[Coordinate]:
        """Get the empty cells in row-major order."""
        return [cell for cell in all_cells() if self.grid[cell] == EMPTY]

    def is_full(self) -> bool:
        return not np.any(self.grid == EMPTY)

    def square_position(self, row: int, col: int) -> np.ndarray:
        return square_position(row, col)

    def place(self, piece: Piece, row: int, col: int):
        """
        Put a piece on the board.

        Args:
            piece: The piece to place
            row: Board row (0-3)
            col: Board column (0-3)

        Raises:
            OccupiedCellError: if the cell already holds a piece
            ValueError: if the cell is off the board or the piece is already placed
        """
        debug.debug(f"Placing piece {piece.id} at ({row}, {col})", "board")

        if not is_valid_position(row, col):
            raise ValueError(f"Cell ({row}, {col}) is off the board")
        if self.grid[row, col] != EMPTY:
            raise OccupiedCellError(row, col)
        if piece.state == PieceState.PLACED:
            raise ValueError(f"Piece {piece.id} is already placed at {piece.coordinate}")

        piece.place(row, col, square_position(row, col))
        self.grid[row, col] = piece.id
        self._pieces[(row, col)] = piece
        self.last_move = (row, col)

    def check_line(self, line: Line) -> int:
        """
        Check a single line.

        Args:
            line: The line to check

        Returns:
            Mask of the shared attribute bits, 0 if the line is not a win
        """
        values = [self.grid[cell] for cell in line.cells]
        if EMPTY in values:
            return 0
        return shared_attributes(values)

    def check_win(self) -> Optional[Line]:
        """
        Scan all winning lines.

        Returns:
            The first winning line (rows, columns, then diagonals) or None
        """
        debug.start_timer("win_check")
        winner = None
        for line in WINNING_LINES:
            shared = self.check_line(line)
            if shared:
                debug.info(f"Quatter on {line.name} (shared attributes {shared:04b})", "board")
                winner = line
                break
        debug.end_timer("win_check", "board")
        return winner

    def check_invariants(self) -> bool:
        """
        Verify that grid and placed pieces agree.

        Returns:
            True if every occupied cell holds a PLACED piece whose coordinate is that cell
        """
        for cell in all_cells():
            value = self.grid[cell]
            piece = self._pieces.get(cell)
            if value == EMPTY:
                if piece is not None:
                    return False
                continue
            if piece is None or piece.id != value:
                return False
            if piece.state != PieceState.PLACED or piece.coordinate != cell:
                return False
        return True

    def load(self, pieces: PieceSet, layout: Dict[Coordinate, int]):
        """
        Place several pieces at once, e.g. to set up a position.

        Args:
            pieces: Piece set to take pieces from
            layout: Mapping of cell to piece id
        """
        for (row, col), piece_id in layout.items():
            self.place(pieces[piece_id], row, col)

    def get_state(self) -> np.ndarray:
        """
        Get the current board state as a numpy array.

        Returns:
            2D numpy array of piece ids, EMPTY for free cells
        """
        return self.grid.copy()

    def render(self) -> str:
        return render_board_ascii(self.grid)

    def __str__(self) -> str:
        return self.render()


if __name__ == "__main__":
    debug.configure(level=DebugLevel.DEBUG)

    pieces = PieceSet()
    board = Board()
    # All four are dark (bit 1) and differ otherwise
    board.load(pieces, {(0, 0): 0b0010, (0, 1): 0b0011, (0, 2): 0b0110, (0, 3): 0b1111})
    print(board)
    print(f"Winning line: {board.check_win()}")
