"""
rules.py - Turn state machine for Quatter

A turn has two halves. The picking player chooses a piece and hands it to the
opponent, who then puts it on the board. The phases cycle

    PLAYER1_PICKS -> PLAYER2_PUTS -> PLAYER2_PICKS -> PLAYER1_PUTS -> ...

until a put completes a winning line, which moves the game to the terminal
QUATTER phase.
"""

from typing import Optional

from quatter.debug import debug, DebugLevel
from quatter.exceptions import NoSelectionError
from quatter.game.board import Board, Line
from quatter.game.piece import Piece, PieceSet
from quatter.game.selection import SelectionController
from quatter.interfaces.host import Host, ConsoleHost
from quatter.utils import GamePhase


class GameStateMachine:
    """
    Owns the turn phase of a Quatter game.

    Board, pieces and selection are injected so the input layer and the tests
    can share them.
    """

    def __init__(self, board: Board, pieces: PieceSet,
                 selection: SelectionController, host: Host = None):
        debug.debug("Initializing GameStateMachine", "game")
        self.board = board
        self.pieces = pieces
        self.selection = selection
        self.host = host or Host()
        self.phase = GamePhase.PLAYER1_PICKS
        self.winning_line: Optional[Line] = None
        self.winner = 0  # Player who completed the winning line

    @property
    def picked_piece(self) -> Optional[Piece]:
        return self.pieces.picked()

    def is_picking(self) -> bool:
        return self.phase.is_picking()

    def is_putting(self) -> bool:
        return self.phase.is_putting()

    def is_over(self) -> bool:
        return self.phase.is_over()

    @property
    def is_draw(self) -> bool:
        """The board is full and nobody made a Quatter."""
        return not self.is_over() and self.board.is_full()

    def _set_phase(self, phase: GamePhase):
        debug.debug(f"Phase {self.phase.name} -> {phase.name}", "game")
        self.phase = phase
        self.host.notify_phase_changed(phase)

    def next_phase(self):
        """Advance to the next phase of the cycle. Does nothing once the game is over."""
        if self.is_over():
            debug.debug("Game is over, ignoring phase advance", "game")
            return

        was_putting = self.is_putting()
        self._set_phase(self.phase.next())

        if was_putting:
            self.selection.camera_select_piece()

    def quatter(self, line: Line):
        """Enter the terminal phase with the given winning line."""
        if self.is_over():
            return
        self.winner = self.phase.player
        self.winning_line = line
        self._set_phase(GamePhase.QUATTER)
        debug.info(f"Quatter! Player {self.winner} wins on {line.name}", "game")
        self.host.notify_win(line)

    def pick(self) -> bool:
        """
        Hand the selected piece to the opponent.

        Returns:
            True if a piece was picked, False if this is not a picking phase

        Raises:
            NoSelectionError: if no piece is selected
        """
        if not self.is_picking():
            debug.debug(f"Cannot pick during {self.phase.name}", "game")
            return False

        piece = self.selection.release_selected()
        piece.pick()
        debug.debug(f"Player {self.phase.player} picked piece {piece.id} ({piece.describe()})", "game")
        self.next_phase()
        return True

    def put(self, row: int = None, col: int = None) -> bool:
        """
        Put the picked piece on the board and check for a win.

        Args:
            row: Board row, defaults to the selection's square cursor
            col: Board column, defaults to the selection's square cursor

        Returns:
            True if the piece was put, False if this is not a putting phase

        Raises:
            NoSelectionError: if no target cell is given or selected
            OccupiedCellError: if the target cell already holds a piece
        """
        if not self.is_putting():
            debug.debug(f"Cannot put during {self.phase.name}", "game")
            return False

        if row is None or col is None:
            if self.selection.selected_square is None:
                raise NoSelectionError("No square selected")
            row, col = self.selection.selected_square

        piece = self.picked_piece
        if piece is None:
            # Pieces were changed outside the state machine
            raise NoSelectionError("No piece was picked")

        self.board.place(piece, row, col)
        self.host.request_place_visual(piece.id, row, col)
        self.selection.deselect_square()

        line = self.board.check_win()
        if line is not None:
            self.quatter(line)
        else:
            self.next_phase()
        return True

    def reset(self):
        """Start a new game from any phase."""
        debug.info("Resetting game", "game")
        self.selection.reset()
        self.pieces.reset()
        self.board.reset()
        self.winning_line = None
        self.winner = 0
        self._set_phase(GamePhase.PLAYER1_PICKS)

    def render(self) -> str:
        """Render the board and the current phase as a string."""
        lines = [self.board.render(), str(self.phase)]
        picked = self.picked_piece
        if picked is not None:
            lines.append(f"Piece to put: {picked.id:X} ({picked.describe()})")
        return "\n".join(lines)


def new_game(host: Host = None) -> GameStateMachine:
    """Build pieces, board, selection and state machine wired to one host."""
    host = host or Host()
    pieces = PieceSet()
    board = Board()
    selection = SelectionController(pieces, board, host)
    return GameStateMachine(board, pieces, selection, host)


if __name__ == "__main__":
    debug.configure(level=DebugLevel.INFO)

    game = new_game(ConsoleHost())
    # Four dark pieces along row 0, alternating pick and put
    for col, piece_id in enumerate([0b0010, 0b0011, 0b0110, 0b1111]):
        game.selection.select_piece_id(piece_id)
        game.pick()
        game.put(0, col)
    print(game.render())
    print(f"Winning line: {game.winning_line}")
