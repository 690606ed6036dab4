"""
utils.py - Constants, enumerations and helpers for the Quatter core

This module provides the board geometry, the input tuning constants, the
phase and state enumerations, the default device code tables and small
helper functions shared across the rules engine and the input aggregator.
"""

from enum import Enum, auto
from typing import Dict, List, Tuple

import numpy as np

# Game constants
BOARD_SIZE = 4
NUM_ATTRIBUTES = 4
NUM_PIECES = 2 ** NUM_ATTRIBUTES
ATTRIBUTE_MASK = NUM_PIECES - 1
EMPTY = -1  # Grid value of an empty cell

# Scene geometry (world units, board centred on the origin)
SQUARE_SIZE = 1.0
PIECE_RING_RADIUS = 4.5

# Input tuning (time-units are whatever the host passes as elapsed time)
IDLE_THRESHOLD = 5.0
STEP_INTERVAL = 0.23
DEADZONE = 0.34
CAMERA_SMOOTHING = 10.0     # Exponential smoothing rate, per time-unit
CAMERA_ROTATE_SPEED = 1.0
CAMERA_ZOOM_SPEED = 1.0
MOUSE_SENSITIVITY = 0.1
CAMERA_EPSILON = 1e-4       # Smoothed motion below this is not sent to the host

Coordinate = Tuple[int, int]


class PieceState(Enum):
    """Lifecycle state of a single piece."""
    FREE = auto()
    SELECTED = auto()
    PICKED = auto()   # Handed to the opponent, waiting to be put
    PLACED = auto()


class GamePhase(Enum):
    """Turn phases. QUATTER is terminal."""
    PLAYER1_PICKS = auto()
    PLAYER2_PUTS = auto()
    PLAYER2_PICKS = auto()
    PLAYER1_PUTS = auto()
    QUATTER = auto()

    def next(self) -> 'GamePhase':
        """Get the phase that follows this one when no win occurs."""
        if self == GamePhase.QUATTER:
            return self
        return PHASE_CYCLE[(PHASE_CYCLE.index(self) + 1) % len(PHASE_CYCLE)]

    def is_picking(self) -> bool:
        return self in (GamePhase.PLAYER1_PICKS, GamePhase.PLAYER2_PICKS)

    def is_putting(self) -> bool:
        return self in (GamePhase.PLAYER1_PUTS, GamePhase.PLAYER2_PUTS)

    def is_over(self) -> bool:
        return self == GamePhase.QUATTER

    @property
    def player(self) -> int:
        """The player acting in this phase, or 0 once the game is over."""
        if self in (GamePhase.PLAYER1_PICKS, GamePhase.PLAYER1_PUTS):
            return 1
        if self in (GamePhase.PLAYER2_PICKS, GamePhase.PLAYER2_PUTS):
            return 2
        return 0

    def __str__(self):
        if self == GamePhase.QUATTER:
            return "Quatter!"
        verb = "picks" if self.is_picking() else "puts"
        return f"Player {self.player} {verb}"


PHASE_CYCLE = (GamePhase.PLAYER1_PICKS, GamePhase.PLAYER2_PUTS,
               GamePhase.PLAYER2_PICKS, GamePhase.PLAYER1_PUTS)


class SelectionMode(Enum):
    """How the selected piece is being chosen."""
    CAMERA = auto()  # Nearest free piece to the camera
    STEP = auto()    # Manual cycling through piece ids


class Action(Enum):
    """Semantic actions recognised by the input aggregator."""
    ACTION = auto()
    STEP_NEXT = auto()
    STEP_PREVIOUS = auto()
    CAMERA_LEFT = auto()
    CAMERA_RIGHT = auto()
    CAMERA_UP = auto()
    CAMERA_DOWN = auto()
    ZOOM_IN = auto()
    ZOOM_OUT = auto()
    SCREENSHOT = auto()
    CANCEL = auto()
    RESET = auto()


STEP_ACTIONS = {Action.STEP_NEXT: True, Action.STEP_PREVIOUS: False}

# Rotation (yaw, pitch) and zoom contributed by held camera actions
CAMERA_ACTIONS: Dict[Action, Tuple[float, float, float]] = {
    Action.CAMERA_LEFT: (-1.0, 0.0, 0.0),
    Action.CAMERA_RIGHT: (1.0, 0.0, 0.0),
    Action.CAMERA_UP: (0.0, 1.0, 0.0),
    Action.CAMERA_DOWN: (0.0, -1.0, 0.0),
    Action.ZOOM_IN: (0.0, 0.0, 1.0),
    Action.ZOOM_OUT: (0.0, 0.0, -1.0),
}

# SDL keycodes
KEY_BACKSPACE = 8
KEY_TAB = 9
KEY_RETURN = 13
KEY_ESCAPE = 27
KEY_SPACE = 32
KEY_A = 97
KEY_D = 100
KEY_E = 101
KEY_Q = 113
KEY_S = 115
KEY_W = 119
KEY_F5 = 0x4000003E
KEY_PRINTSCREEN = 0x40000046
KEY_RIGHT = 0x4000004F
KEY_LEFT = 0x40000050
KEY_DOWN = 0x40000051
KEY_UP = 0x40000052
KEY_KP_MINUS = 0x40000056
KEY_KP_PLUS = 0x40000057

# SDL mouse buttons
MOUSE_LEFT = 1
MOUSE_MIDDLE = 2
MOUSE_RIGHT = 3

# SDL game controller buttons and axes
JOY_A = 0
JOY_B = 1
JOY_BACK = 4
JOY_START = 6
JOY_LEFTSHOULDER = 9
JOY_RIGHTSHOULDER = 10
JOY_DPAD_UP = 11
JOY_DPAD_DOWN = 12
JOY_DPAD_LEFT = 13
JOY_DPAD_RIGHT = 14
AXIS_LEFT_X = 0
AXIS_LEFT_Y = 1
AXIS_RIGHT_X = 2
AXIS_RIGHT_Y = 3

DEFAULT_KEY_MAP: Dict[int, Action] = {
    KEY_SPACE: Action.ACTION,
    KEY_RETURN: Action.ACTION,
    KEY_E: Action.STEP_NEXT,
    KEY_TAB: Action.STEP_NEXT,
    KEY_Q: Action.STEP_PREVIOUS,
    KEY_BACKSPACE: Action.STEP_PREVIOUS,
    KEY_LEFT: Action.CAMERA_LEFT,
    KEY_A: Action.CAMERA_LEFT,
    KEY_RIGHT: Action.CAMERA_RIGHT,
    KEY_D: Action.CAMERA_RIGHT,
    KEY_UP: Action.CAMERA_UP,
    KEY_W: Action.CAMERA_UP,
    KEY_DOWN: Action.CAMERA_DOWN,
    KEY_S: Action.CAMERA_DOWN,
    KEY_KP_PLUS: Action.ZOOM_IN,
    KEY_KP_MINUS: Action.ZOOM_OUT,
    KEY_PRINTSCREEN: Action.SCREENSHOT,
    KEY_ESCAPE: Action.CANCEL,
    KEY_F5: Action.RESET,
}

DEFAULT_MOUSE_MAP: Dict[int, Action] = {
    MOUSE_LEFT: Action.ACTION,
    MOUSE_MIDDLE: Action.CANCEL,
}

# Holding this mouse button turns mouse motion into camera rotation
MOUSE_ROTATE_BUTTON = MOUSE_RIGHT

DEFAULT_JOYSTICK_MAP: Dict[int, Action] = {
    JOY_A: Action.ACTION,
    JOY_B: Action.CANCEL,
    JOY_BACK: Action.SCREENSHOT,
    JOY_START: Action.RESET,
    JOY_LEFTSHOULDER: Action.STEP_PREVIOUS,
    JOY_RIGHTSHOULDER: Action.STEP_NEXT,
    JOY_DPAD_UP: Action.CAMERA_UP,
    JOY_DPAD_DOWN: Action.CAMERA_DOWN,
    JOY_DPAD_LEFT: Action.CAMERA_LEFT,
    JOY_DPAD_RIGHT: Action.CAMERA_RIGHT,
}


def is_valid_position(row: int, col: int) -> bool:
    """
    Check if a position is within the board boundaries.

    Args:
        row: Row index
        col: Column index

    Returns:
        True if position is valid, False otherwise
    """
    return 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE


def all_cells() -> List[Coordinate]:
    """All board cells in row-major order."""
    return [(row, col) for row in range(BOARD_SIZE) for col in range(BOARD_SIZE)]


def square_position(row: int, col: int) -> np.ndarray:
    """World position of the centre of a board square."""
    offset = (BOARD_SIZE - 1) / 2.0
    return np.array([(col - offset) * SQUARE_SIZE, 0.0, (row - offset) * SQUARE_SIZE])


def home_position(piece_id: int, radius: float = PIECE_RING_RADIUS) -> np.ndarray:
    """
    Get the resting position of a free piece.

    Free pieces stand on a ring around the board, ordered by id.

    Args:
        piece_id: Piece identifier (0-15)
        radius: Ring radius in world units

    Returns:
        3D position as a numpy array
    """
    angle = 2.0 * np.pi * piece_id / NUM_PIECES
    return np.array([radius * np.cos(angle), 0.0, radius * np.sin(angle)])


def apply_deadzone(value: float, deadzone: float = DEADZONE) -> float:
    """
    Clamp an analog axis value to [-1, 1] and zero it inside the deadzone.

    NaN is treated as a centred stick.
    """
    value = float(np.clip(value, -1.0, 1.0))
    if not np.isfinite(value) or abs(value) < deadzone:
        return 0.0
    return value


def render_board_ascii(grid: np.ndarray) -> str:
    """
    Render the board as ASCII art.

    Occupied cells show the piece id in hex, empty cells a dot.

    Args:
        grid: The board grid of piece ids

    Returns:
        ASCII representation of the board
    """
    result = ["   " + " ".join(str(col) for col in range(BOARD_SIZE))]
    result.append("  +" + "-" * (BOARD_SIZE * 2 - 1) + "+")

    for row in range(BOARD_SIZE):
        cells = []
        for col in range(BOARD_SIZE):
            value = int(grid[row, col])
            cells.append("." if value == EMPTY else format(value, "X"))
        result.append(f"{row} |" + " ".join(cells) + "|")

    result.append("  +" + "-" * (BOARD_SIZE * 2 - 1) + "+")
    return "\n".join(result)
