"""
selection.py - Piece and square selection for Quatter

The SelectionController keeps at most one piece SELECTED and chooses it either
by camera proximity or by stepping through piece ids. During Puts phases it
also keeps a square cursor on the board.
"""

from typing import Optional, Sequence

import numpy as np

from quatter.debug import debug
from quatter.exceptions import InvalidPieceIdError, NoSelectionError
from quatter.game.board import Board
from quatter.game.piece import Piece, PieceSet
from quatter.interfaces.host import Host
from quatter.utils import NUM_PIECES, PieceState, SelectionMode, Coordinate, is_valid_position


class SelectionController:
    """
    Chooses the active piece and the target square.

    Receives the piece set, the board and the host at construction.
    """

    def __init__(self, pieces: PieceSet, board: Board, host: Host = None):
        self.pieces = pieces
        self.board = board
        self.host = host or Host()
        self.mode = SelectionMode.CAMERA
        self.camera_position = np.zeros(3)
        self.selected_piece: Optional[Piece] = None
        self.last_selected_piece: Optional[Piece] = None
        self.selected_square: Optional[Coordinate] = None

    def reset(self):
        """Forget every selection and go back to camera mode."""
        debug.debug("Resetting selection", "selection")
        self.deselect_piece()
        self.last_selected_piece = None
        self.mode = SelectionMode.CAMERA
        self.deselect_square()

    def set_camera_position(self, position: Sequence[float]):
        self.camera_position = np.asarray(position, dtype=float)

    def require_selection(self) -> Piece:
        """
        Get the selected piece.

        Raises:
            NoSelectionError: if nothing is selected
        """
        if self.selected_piece is None:
            raise NoSelectionError("No piece selected")
        return self.selected_piece

    def select_piece(self, piece: Piece) -> bool:
        """
        Make a piece the selected one.

        Args:
            piece: A FREE or already SELECTED piece

        Returns:
            True if the piece is selected afterwards
        """
        if piece is self.selected_piece:
            return True
        if piece.state != PieceState.FREE:
            debug.debug(f"Piece {piece.id} is {piece.state.name}, not selectable", "selection")
            return False

        self.deselect_piece()
        self.selected_piece = piece
        piece.select()
        self.host.request_select_visual(piece.id)
        debug.debug(f"Selected piece {piece.id}", "selection")
        return True

    def select_piece_id(self, piece_id: int) -> bool:
        """
        Select a piece by id on behalf of the host.

        An invalid id is a host bug: it raises while assertions are enabled and
        is logged and ignored under ``python -O``.
        """
        try:
            piece = self.pieces[piece_id]
        except InvalidPieceIdError:
            if __debug__:
                raise
            debug.error(f"Ignoring invalid piece id {piece_id!r}", "selection")
            return False
        return self.select_piece(piece)

    def deselect_piece(self):
        """Demote the selected piece to FREE and remember it as last selected."""
        piece = self.selected_piece
        self.selected_piece = None
        if piece is None:
            return

        self.last_selected_piece = piece
        if piece.state == PieceState.SELECTED:
            piece.deselect()
        self.host.request_deselect_visual(piece.id)
        debug.debug(f"Deselected piece {piece.id}", "selection")

    def release_selected(self) -> Piece:
        """
        Hand the selected piece over to the caller without demoting it.

        The piece is neither selected nor remembered as last selected afterwards.

        Raises:
            NoSelectionError: if nothing is selected
        """
        piece = self.require_selection()
        self.selected_piece = None
        self.host.request_deselect_visual(piece.id)
        return piece

    def nearest_piece(self, camera_position: Sequence[float] = None) -> Optional[Piece]:
        """
        Find the FREE or SELECTED piece closest to the camera.

        Args:
            camera_position: Camera position, defaults to the last one seen

        Returns:
            The nearest candidate, or None if there are none
        """
        if camera_position is not None:
            self.set_camera_position(camera_position)

        candidates = self.pieces.with_state(PieceState.FREE, PieceState.SELECTED)
        if not candidates:
            return None

        positions = np.array([piece.position for piece in candidates])
        distances = np.linalg.norm(positions - self.camera_position, axis=1)
        return candidates[int(np.argmin(distances))]

    def camera_select_piece(self, camera_position: Sequence[float] = None) -> Optional[Piece]:
        """
        Select the piece nearest to the camera.

        Returns:
            The selected piece, or None if no piece can be selected
        """
        nearest = self.nearest_piece(camera_position)
        if nearest is None:
            return None
        if nearest is not self.selected_piece:
            debug.trace(f"Camera nearest piece is {nearest.id}", "selection")
            self.select_piece(nearest)
        return nearest

    def select_last_piece(self) -> bool:
        """Reselect the last selected piece if it is still free."""
        piece = self.last_selected_piece
        if piece is None or piece.state != PieceState.FREE:
            return False
        return self.select_piece(piece)

    def step_select_piece(self, forward: bool = True) -> Optional[Piece]:
        """
        Select the next free piece by id, wrapping around.

        With nothing selected, the last selected piece is tried first and camera
        proximity is the fallback.

        Args:
            forward: Step to higher ids if True, lower ids otherwise

        Returns:
            The selected piece, or None if nothing could be selected
        """
        self.mode = SelectionMode.STEP

        if self.selected_piece is None:
            if self.select_last_piece():
                return self.selected_piece
            return self.camera_select_piece()

        direction = 1 if forward else -1
        start = self.selected_piece.id
        for offset in range(1, NUM_PIECES):
            piece = self.pieces[(start + direction * offset) % NUM_PIECES]
            if piece.state == PieceState.FREE:
                self.select_piece(piece)
                return piece

        debug.debug("No other free piece to step to", "selection")
        return self.selected_piece

    def camera_mode(self):
        """Let camera proximity drive the selection again."""
        if self.mode != SelectionMode.CAMERA:
            debug.debug("Back to camera selection", "selection")
        self.mode = SelectionMode.CAMERA

    def select_square(self, row: int, col: int) -> bool:
        """
        Move the square cursor.

        Returns:
            True if the cursor now points at the cell
        """
        if not is_valid_position(row, col):
            debug.debug(f"Square ({row}, {col}) out of bounds", "selection")
            return False
        if self.selected_square != (row, col):
            self.selected_square = (row, col)
            self.host.request_square_visual(self.selected_square)
        return True

    def deselect_square(self):
        if self.selected_square is not None:
            self.selected_square = None
            self.host.request_square_visual(None)

    def step_select_square(self, forward: bool = True) -> Optional[Coordinate]:
        """
        Move the square cursor to the next empty cell in row-major order.

        Args:
            forward: Step forward if True, backward otherwise

        Returns:
            The new cursor cell, or None if the board is full
        """
        empty = self.board.empty_cells()
        if not empty:
            return None

        if self.selected_square is None:
            cell = empty[0] if forward else empty[-1]
        else:
            current = self.selected_square
            if forward:
                later = [c for c in empty if c > current]
                cell = later[0] if later else empty[0]
            else:
                earlier = [c for c in empty if c < current]
                cell = earlier[-1] if earlier else empty[-1]

        self.select_square(*cell)
        return cell
