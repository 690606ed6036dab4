"""
input.py - Device input aggregation for Quatter

This module turns raw keyboard, mouse and joystick events into one protocol:
an idle flag, a smoothed camera intent and semantic actions that are passed
on to the SelectionController and the GameStateMachine.

The host calls the ``on_*`` handlers as it dequeues device events and then
calls ``update`` once per frame with the elapsed time. All timing lives in
``update``; nothing here blocks or runs in the background.
"""

from typing import Dict, Iterator, Optional, Sequence, Set

import numpy as np

from quatter.debug import debug
from quatter.exceptions import NoSelectionError, OccupiedCellError
from quatter.game.rules import GameStateMachine
from quatter.interfaces.host import Host
from quatter.utils import (IDLE_THRESHOLD, STEP_INTERVAL, DEADZONE, CAMERA_SMOOTHING,
                           CAMERA_ROTATE_SPEED, CAMERA_ZOOM_SPEED, CAMERA_EPSILON,
                           MOUSE_SENSITIVITY, MOUSE_ROTATE_BUTTON,
                           AXIS_LEFT_X, AXIS_LEFT_Y, AXIS_RIGHT_Y,
                           DEFAULT_KEY_MAP, DEFAULT_MOUSE_MAP, DEFAULT_JOYSTICK_MAP,
                           Action, STEP_ACTIONS, CAMERA_ACTIONS, SelectionMode, apply_deadzone)


class InputState:
    """Per-frame input bookkeeping. Only the InputAggregator mutates it."""

    def __init__(self, step_interval: float = STEP_INTERVAL):
        self.pressed_keys: Set[int] = set()
        self.pressed_mouse_buttons: Set[int] = set()
        self.pressed_joystick_buttons: Dict[int, Set[int]] = {}
        self.joystick_axes: Dict[int, Dict[int, float]] = {}
        self.idle = False
        self.idle_time = 0.0
        self.since_step = step_interval  # The first step is never delayed
        self.smooth_rotation = np.zeros(2)
        self.smooth_zoom = 0.0
        self.mouse_delta = np.zeros(2)   # Mouse rotation gathered since the last update
        self.wheel_delta = 0.0
        self.last_joystick: Optional[int] = None

    def reset_smoothing(self):
        self.smooth_rotation = np.zeros(2)
        self.smooth_zoom = 0.0

    def active_joysticks(self) -> Set[int]:
        """Joysticks with a button held or a stick outside the deadzone."""
        active = {jid for jid, buttons in self.pressed_joystick_buttons.items() if buttons}
        active |= {jid for jid, axes in self.joystick_axes.items() if any(axes.values())}
        return active


class InputAggregator:
    """
    Merges all input devices into idle state, camera intent and game actions.

    It never changes board or piece state itself; every game effect goes
    through the selection controller or the state machine.
    """

    def __init__(self, game: GameStateMachine, host: Host = None,
                 key_map: Dict[int, Action] = None,
                 mouse_map: Dict[int, Action] = None,
                 joystick_map: Dict[int, Action] = None,
                 idle_threshold: float = IDLE_THRESHOLD,
                 step_interval: float = STEP_INTERVAL,
                 deadzone: float = DEADZONE,
                 smoothing: float = CAMERA_SMOOTHING,
                 primary_joystick: Optional[int] = None):
        """
        Initialize the aggregator.

        Args:
            game: State machine to send pick/put/reset actions to
            host: Rendering collaborator, defaults to the game's host
            key_map: Keyboard code to action mapping
            mouse_map: Mouse button code to action mapping
            joystick_map: Joystick button code to action mapping
            idle_threshold: Time without input before going idle
            step_interval: Minimum time between two step actions
            deadzone: Analog magnitude below which axes read as zero
            smoothing: Exponential smoothing rate of the camera intent
            primary_joystick: Joystick to prefer when several are active at once
        """
        debug.debug("Initializing InputAggregator", "input")
        self.game = game
        self.selection = game.selection
        self.host = host or game.host
        self.key_map = dict(DEFAULT_KEY_MAP if key_map is None else key_map)
        self.mouse_map = dict(DEFAULT_MOUSE_MAP if mouse_map is None else mouse_map)
        self.joystick_map = dict(DEFAULT_JOYSTICK_MAP if joystick_map is None else joystick_map)
        self.idle_threshold = idle_threshold
        self.step_interval = step_interval
        self.deadzone = deadzone
        self.smoothing = smoothing
        self.primary_joystick = primary_joystick
        self.state = InputState(step_interval)

    # Idle handling

    def is_idle(self) -> bool:
        return self.state.idle

    def reset_idle(self):
        """Register player activity."""
        self.state.idle_time = 0.0
        if self.state.idle:
            debug.debug("Leaving idle", "input")
            self.state.idle = False

    def set_idle(self):
        """Enter idle: proximity selection pauses and camera smoothing is dropped."""
        if not self.state.idle:
            debug.debug(f"Idle after {self.state.idle_time:.2f}", "input")
        self.state.idle = True
        self.state.reset_smoothing()

    # Keyboard

    def on_key_down(self, code: int):
        self.reset_idle()
        if code in self.state.pressed_keys:
            return  # Auto-repeat, handled as a held key in update()
        self.state.pressed_keys.add(code)
        self._press(self.key_map.get(code))

    def on_key_up(self, code: int):
        self.state.pressed_keys.discard(code)

    # Mouse

    def on_mouse_button_down(self, code: int):
        self.reset_idle()
        if code in self.state.pressed_mouse_buttons:
            return
        self.state.pressed_mouse_buttons.add(code)
        self._press(self.mouse_map.get(code))

    def on_mouse_button_up(self, code: int):
        self.state.pressed_mouse_buttons.discard(code)

    def on_mouse_move(self, dx: float, dy: float):
        if not dx and not dy:
            return
        self.reset_idle()
        if MOUSE_ROTATE_BUTTON in self.state.pressed_mouse_buttons:
            self.state.mouse_delta += np.array([dx, -dy], dtype=float) * MOUSE_SENSITIVITY

    def on_mouse_wheel(self, delta: float):
        if not delta:
            return
        self.reset_idle()
        self.state.wheel_delta += delta

    # Joysticks

    def on_joystick_button_down(self, joystick_id: int, code: int):
        self.reset_idle()
        self.state.last_joystick = joystick_id
        buttons = self.state.pressed_joystick_buttons.setdefault(joystick_id, set())
        if code in buttons:
            return
        buttons.add(code)
        self._press(self.joystick_map.get(code))

    def on_joystick_button_up(self, joystick_id: int, code: int):
        self.state.pressed_joystick_buttons.get(joystick_id, set()).discard(code)

    def on_axis_move(self, joystick_id: int, axis_id: int, value: float):
        value = apply_deadzone(value, self.deadzone)
        self.state.joystick_axes.setdefault(joystick_id, {})[axis_id] = value
        if value:
            self.state.last_joystick = joystick_id
            self.reset_idle()

    def on_joystick_removed(self, joystick_id: int):
        debug.debug(f"Joystick {joystick_id} removed", "input")
        self.state.pressed_joystick_buttons.pop(joystick_id, None)
        self.state.joystick_axes.pop(joystick_id, None)
        if self.state.last_joystick == joystick_id:
            self.state.last_joystick = None

    def multiple_joysticks(self) -> bool:
        """True when more than one joystick is in use at the same time."""
        return len(self.state.active_joysticks()) > 1

    def get_active_joystick(self) -> Optional[int]:
        """
        Get the joystick that currently controls the camera.

        Returns:
            The most recently used joystick id, the primary joystick when
            several are active at once, or None if no joystick was used
        """
        active = self.state.active_joysticks()
        if len(active) > 1:
            if self.primary_joystick in active:
                return self.primary_joystick
            return min(active)
        return self.state.last_joystick

    def correct_joystick_id(self, joystick_id: int) -> bool:
        return joystick_id == self.get_active_joystick()

    # Actions

    def held_actions(self) -> Iterator[Action]:
        """Actions of every key and button currently held down."""
        for code in self.state.pressed_keys:
            if code in self.key_map:
                yield self.key_map[code]
        for code in self.state.pressed_mouse_buttons:
            if code in self.mouse_map:
                yield self.mouse_map[code]
        for buttons in self.state.pressed_joystick_buttons.values():
            for code in buttons:
                if code in self.joystick_map:
                    yield self.joystick_map[code]

    def _press(self, action: Optional[Action]):
        if action is None:
            return
        debug.trace(f"Action {action.name}", "input")

        if action == Action.ACTION:
            self.handle_action_button()
        elif action in STEP_ACTIONS:
            self.step(STEP_ACTIONS[action])
        elif action == Action.SCREENSHOT:
            self.host.request_screenshot()
        elif action == Action.CANCEL:
            self.selection.deselect_piece()
            self.selection.deselect_square()
        elif action == Action.RESET:
            self.game.reset()
        elif action in CAMERA_ACTIONS:
            self.selection.camera_mode()

    def handle_action_button(self):
        """Pick, put or restart depending on the phase."""
        try:
            if self.game.is_over() or self.game.is_draw:
                self.game.reset()
            elif self.game.is_picking():
                self.game.pick()
            elif self.game.is_putting():
                self.game.put()
        except NoSelectionError as e:
            debug.debug(f"{e}, falling back to automatic selection", "input")
            if self.game.is_putting():
                self.selection.step_select_square()
            else:
                self.selection.camera_select_piece()
        except OccupiedCellError as e:
            debug.warning(str(e), "input")

    def step(self, forward: bool) -> bool:
        """
        Step the selection, at most once per step interval.

        Returns:
            True if a step was made
        """
        if self.state.since_step < self.step_interval:
            return False
        if self.game.is_picking():
            self.selection.step_select_piece(forward)
        elif self.game.is_putting():
            self.selection.step_select_square(forward)
        else:
            return False
        self.state.since_step = 0.0
        return True

    # Camera

    def camera_intent(self, elapsed: float):
        """
        Gather the raw camera motion requested this frame.

        Returns:
            Tuple of (rotation as a 2D numpy array, zoom)
        """
        rotation = np.zeros(2)
        zoom = 0.0
        for action in self.held_actions():
            if action in CAMERA_ACTIONS:
                yaw, pitch, z = CAMERA_ACTIONS[action]
                rotation += (yaw, pitch)
                zoom += z

        axes = self.state.joystick_axes.get(self.get_active_joystick(), {})
        rotation += (axes.get(AXIS_LEFT_X, 0.0), -axes.get(AXIS_LEFT_Y, 0.0))
        zoom -= axes.get(AXIS_RIGHT_Y, 0.0)

        rotation = rotation * CAMERA_ROTATE_SPEED * elapsed + self.state.mouse_delta
        zoom = zoom * CAMERA_ZOOM_SPEED * elapsed + self.state.wheel_delta
        return rotation, zoom

    def smooth_camera_movement(self, rotation: np.ndarray, zoom: float, elapsed: float):
        """Low-pass the camera intent and hand it to the host."""
        factor = min(1.0, self.smoothing * elapsed)
        self.state.smooth_rotation = self.state.smooth_rotation + (rotation - self.state.smooth_rotation) * factor
        self.state.smooth_zoom += (zoom - self.state.smooth_zoom) * factor

        if np.linalg.norm(self.state.smooth_rotation) > CAMERA_EPSILON or abs(self.state.smooth_zoom) > CAMERA_EPSILON:
            self.host.request_camera_move(self.state.smooth_rotation.copy(), self.state.smooth_zoom)

    # Frame update

    def update(self, elapsed: float, camera_position: Sequence[float]):
        """
        Run one frame.

        Args:
            elapsed: Time since the previous frame
            camera_position: Current camera position in world space
        """
        self.selection.set_camera_position(camera_position)
        self.state.since_step += elapsed

        for action in list(self.held_actions()):
            if action in STEP_ACTIONS:
                self.step(STEP_ACTIONS[action])

        rotation, zoom = self.camera_intent(elapsed)
        moving = bool(np.any(rotation)) or bool(zoom)
        if moving:
            self.selection.camera_mode()

        held = (self.state.pressed_keys or self.state.pressed_mouse_buttons
                or self.state.active_joysticks())
        if held or moving:
            self.reset_idle()
        else:
            self.state.idle_time += elapsed
            if self.state.idle_time >= self.idle_threshold and not self.state.idle:
                self.set_idle()

        if not self.state.idle:
            self.smooth_camera_movement(rotation, zoom, elapsed)

        self.state.mouse_delta = np.zeros(2)
        self.state.wheel_delta = 0.0

        # Puts phases aim the square cursor instead, and the picked piece is
        # never a candidate.
        if (not self.state.idle and self.selection.mode == SelectionMode.CAMERA
                and self.game.is_picking()):
            self.selection.camera_select_piece()
