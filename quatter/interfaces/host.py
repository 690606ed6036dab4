"""
host.py - Calls from the Quatter core to the rendering/audio host

The core never touches the scene. Everything visual goes through a Host
object handed to the selection controller, the game state machine and the
input aggregator at construction time. The base class does nothing, so a
host only overrides the calls it cares about.
"""

from typing import Optional

import numpy as np

from quatter.debug import debug
from quatter.utils import GamePhase


class Host:
    """No-op host. Subclass and override to drive a real scene."""

    def request_camera_move(self, rotation: np.ndarray, zoom: float):
        """Rotate the camera by (yaw, pitch) and zoom by the given amounts."""

    def request_select_visual(self, piece_id: int):
        """Highlight a piece."""

    def request_deselect_visual(self, piece_id: int):
        """Remove a piece highlight."""

    def request_square_visual(self, cell: Optional[tuple]):
        """Highlight a board square, or clear the highlight when cell is None."""

    def request_place_visual(self, piece_id: int, row: int, col: int):
        """Move a piece onto a board square."""

    def request_screenshot(self):
        """Capture the current frame."""

    def notify_phase_changed(self, phase: GamePhase):
        """The turn phase changed."""

    def notify_win(self, line):
        """A winning line was completed."""


class ConsoleHost(Host):
    """Host that reports every call through the debug logger and prints game events."""

    def __init__(self, echo: bool = True):
        self.echo = echo

    def _say(self, message: str):
        if self.echo:
            print(message)

    def request_camera_move(self, rotation: np.ndarray, zoom: float):
        debug.trace(f"Camera move rotation={rotation} zoom={zoom:.3f}", "host")

    def request_select_visual(self, piece_id: int):
        debug.debug(f"Select piece {piece_id}", "host")

    def request_deselect_visual(self, piece_id: int):
        debug.debug(f"Deselect piece {piece_id}", "host")

    def request_square_visual(self, cell: Optional[tuple]):
        debug.debug(f"Square cursor {cell}", "host")

    def request_place_visual(self, piece_id: int, row: int, col: int):
        debug.debug(f"Place piece {piece_id} at ({row}, {col})", "host")

    def request_screenshot(self):
        debug.info("Screenshot requested", "host")

    def notify_phase_changed(self, phase: GamePhase):
        debug.debug(f"Phase changed to {phase.name}", "host")
        self._say(str(phase))

    def notify_win(self, line):
        self._say(f"Quatter on {line.name}!")
