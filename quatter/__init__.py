"""
quatter - Rules engine and input interpretation for the Quatter board game

This package provides the piece and board model with shared-attribute win
detection, the pick/put turn state machine, piece selection, and an input
aggregator that turns keyboard, mouse and joystick events into game actions
for a rendering host.
"""

# Version number
__version__ = '0.1.0'
