"""
piece.py - Piece representation for Quatter

This module implements the 16 Quatter pieces. Each piece is identified by its
4-bit attribute pattern, so piece id and attributes are the same integer and
every pattern in [0, 15] belongs to exactly one piece.
"""

from enum import IntFlag
from typing import Callable, Dict, Iterator, List, Optional, Set

import numpy as np

from quatter.debug import debug
from quatter.exceptions import InvalidPieceIdError
from quatter.utils import (NUM_ATTRIBUTES, NUM_PIECES, ATTRIBUTE_MASK, PieceState,
                           Coordinate, home_position)


class Attribute(IntFlag):
    """The four independent traits of a piece, one bit each."""
    TALL = 1
    DARK = 2
    ROUND = 4
    SOLID = 8


class Piece:
    """
    A single Quatter piece.

    The attribute value never changes. State, board coordinate and world
    position change as the piece is selected, picked, placed and reset.
    """

    def __init__(self, attributes: int):
        """
        Create a free piece.

        Args:
            attributes: 4-bit attribute pattern, also the piece id
        """
        if not (0 <= int(attributes) <= ATTRIBUTE_MASK):
            raise InvalidPieceIdError(attributes)

        self._attributes = int(attributes)
        self._state = PieceState.FREE
        self.coordinate: Optional[Coordinate] = None
        self.position = home_position(self._attributes)
        self._listeners: List[Callable[['Piece', PieceState], None]] = []

    @property
    def id(self) -> int:
        return self._attributes

    @property
    def attributes(self) -> Attribute:
        return Attribute(self._attributes)

    @property
    def state(self) -> PieceState:
        return self._state

    def to_int(self) -> int:
        return self._attributes

    def get_attribute(self, index: int) -> bool:
        """
        Read a single attribute bit.

        Args:
            index: Bit position (0-3)

        Returns:
            True if the bit is set
        """
        if not (0 <= index < NUM_ATTRIBUTES):
            raise IndexError(f"Attribute index {index} out of range")
        return bool(self._attributes >> index & 1)

    def has(self, attribute: Attribute) -> bool:
        return bool(self._attributes & attribute)

    def add_listener(self, listener: Callable[['Piece', PieceState], None]):
        """Register a callback invoked with (piece, old_state) after each transition."""
        self._listeners.append(listener)

    def _set_state(self, state: PieceState):
        old_state = self._state
        if old_state == state:
            return
        self._state = state
        debug.trace(f"Piece {self.id} {old_state.name} -> {state.name}", "pieces")
        for listener in self._listeners:
            listener(self, old_state)

    def select(self):
        """Mark the piece as selected. Selecting a selected piece does nothing."""
        if self._state == PieceState.SELECTED:
            return
        if self._state != PieceState.FREE:
            raise ValueError(f"Cannot select piece {self.id} in state {self._state.name}")
        self._set_state(PieceState.SELECTED)

    def deselect(self):
        """Return a selected piece to the free pool."""
        if self._state != PieceState.SELECTED:
            raise ValueError(f"Cannot deselect piece {self.id} in state {self._state.name}")
        self._set_state(PieceState.FREE)

    def pick(self):
        """Hand the piece to the opponent."""
        if self._state not in (PieceState.FREE, PieceState.SELECTED):
            raise ValueError(f"Cannot pick piece {self.id} in state {self._state.name}")
        self._set_state(PieceState.PICKED)

    def place(self, row: int, col: int, position: np.ndarray = None):
        """
        Put the piece on a board square.

        Only the Board should call this so grid and piece stay in sync.

        Args:
            row: Board row
            col: Board column
            position: World position of the square, if known
        """
        if self._state == PieceState.PLACED:
            raise ValueError(f"Piece {self.id} is already placed at {self.coordinate}")
        self.coordinate = (row, col)
        if position is not None:
            self.position = np.array(position, dtype=float)
        self._set_state(PieceState.PLACED)

    def reset(self):
        """Return the piece to its free starting state."""
        self.coordinate = None
        self.position = home_position(self._attributes)
        self._set_state(PieceState.FREE)

    def describe(self) -> str:
        """Human readable attribute summary, e.g. 'tall dark round hollow'."""
        return " ".join([
            "tall" if self.has(Attribute.TALL) else "short",
            "dark" if self.has(Attribute.DARK) else "light",
            "round" if self.has(Attribute.ROUND) else "square",
            "solid" if self.has(Attribute.SOLID) else "hollow",
        ])

    def __repr__(self) -> str:
        return f"Piece({self.id:04b}, {self._state.name})"


class PieceSet:
    """
    The full set of 16 pieces, created once per game.

    Keeps an index from state to piece ids that is updated on every piece
    transition, so lookups such as "the selected piece" avoid scanning.
    """

    def __init__(self):
        debug.debug("Creating piece set", "pieces")
        self._pieces = [Piece(attributes) for attributes in range(NUM_PIECES)]
        self._by_state: Dict[PieceState, Set[int]] = {state: set() for state in PieceState}
        self._by_state[PieceState.FREE].update(range(NUM_PIECES))
        for piece in self._pieces:
            piece.add_listener(self._on_state_change)

    def _on_state_change(self, piece: Piece, old_state: PieceState):
        self._by_state[old_state].discard(piece.id)
        self._by_state[piece.state].add(piece.id)

    def __getitem__(self, piece_id: int) -> Piece:
        if isinstance(piece_id, bool) or not isinstance(piece_id, (int, np.integer)):
            raise InvalidPieceIdError(piece_id)
        if not (0 <= piece_id < NUM_PIECES):
            raise InvalidPieceIdError(piece_id)
        return self._pieces[piece_id]

    def __iter__(self) -> Iterator[Piece]:
        return iter(self._pieces)

    def __len__(self) -> int:
        return len(self._pieces)

    def with_state(self, *states: PieceState) -> List[Piece]:
        """Get pieces in any of the given states, ordered by id."""
        ids: Set[int] = set()
        for state in states:
            ids |= self._by_state[state]
        return [self._pieces[piece_id] for piece_id in sorted(ids)]

    def count(self, state: PieceState) -> int:
        return len(self._by_state[state])

    def _single(self, state: PieceState) -> Optional[Piece]:
        ids = self._by_state[state]
        if not ids:
            return None
        return self._pieces[next(iter(ids))]

    def selected(self) -> Optional[Piece]:
        return self._single(PieceState.SELECTED)

    def picked(self) -> Optional[Piece]:
        return self._single(PieceState.PICKED)

    def reset(self):
        """Return every piece to FREE."""
        for piece in self._pieces:
            piece.reset()
