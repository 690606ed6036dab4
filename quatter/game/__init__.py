"""
quatter.game - Core game mechanics for Quatter

This package contains the pieces, the board with win detection, the turn
state machine and the selection controller.
"""

from quatter.game.piece import Attribute, Piece, PieceSet
from quatter.game.board import Board, Line, WINNING_LINES
from quatter.game.selection import SelectionController
from quatter.game.rules import GameStateMachine, new_game

__all__ = ['Attribute', 'Piece', 'PieceSet', 'Board', 'Line', 'WINNING_LINES',
           'SelectionController', 'GameStateMachine', 'new_game']
