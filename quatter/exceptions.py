"""
exceptions.py - Error types raised by the Quatter core
"""


class QuatterError(Exception):
    """Base class for errors raised by the rules engine."""


class OccupiedCellError(QuatterError):
    """A piece was put on a board cell that already holds a piece."""

    def __init__(self, row: int, col: int):
        super().__init__(f"Cell ({row}, {col}) is already occupied")
        self.row = row
        self.col = col


class InvalidPieceIdError(QuatterError, ValueError):
    """A piece id outside 0..15 was passed in by the host."""

    def __init__(self, piece_id):
        super().__init__(f"Invalid piece id: {piece_id!r}")
        self.piece_id = piece_id


class NoSelectionError(QuatterError):
    """An action needed a selected piece or square and there was none."""
