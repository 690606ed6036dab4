"""
cli.py - Command-line interface for the Quatter core

This module provides a CLI for playing a hot-seat game in the terminal,
validating win detection and benchmarking the win check.
"""

import argparse
import sys
import time
from typing import List, Optional, Tuple

import numpy as np

from quatter.debug import debug, DebugLevel
from quatter.exceptions import InvalidPieceIdError, NoSelectionError, OccupiedCellError
from quatter.game.board import Board, WINNING_LINES
from quatter.game.piece import PieceSet
from quatter.game.rules import new_game
from quatter.interfaces.host import ConsoleHost
from quatter.utils import NUM_PIECES, PieceState, all_cells


class SimpleCLI:
    """Simple command-line interface for Quatter."""

    def __init__(self):
        """Initialize the CLI."""
        self.host = ConsoleHost(echo=False)
        self.game = new_game(self.host)
        self.args = None

    def parse_args(self, argv: List[str] = None) -> None:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(description='Quatter CLI')
        parser.add_argument('--debug', action='store_true', help='Enable debug output')
        parser.add_argument('--debug-level', default='info',
                            choices=[level.name.lower() for level in DebugLevel],
                            help='Debug level')
        parser.add_argument('--log-file', type=str, help='Also write log output to this file')

        subparsers = parser.add_subparsers(dest='command', help='Command to run')
        subparsers.add_parser('play', help='Play a hot-seat game in the terminal')
        subparsers.add_parser('test_all', help='Run win detection validation tests')
        benchmark_parser = subparsers.add_parser('benchmark', help='Benchmark win detection')
        benchmark_parser.add_argument('--iterations', type=int, default=10000,
                                      help='Number of random boards to check')
        benchmark_parser.add_argument('--seed', type=int, default=None, help='Random seed')

        self.args = parser.parse_args(argv)

        if self.args.debug:
            debug.configure(level=DebugLevel.DEBUG)
        else:
            debug.set_from_string(self.args.debug_level)
        if self.args.log_file:
            debug.configure(log_file=self.args.log_file)

    def run(self, argv: List[str] = None) -> int:
        """Run the CLI based on the parsed arguments."""
        if not self.args:
            self.parse_args(argv)

        if self.args.command == 'play':
            self.play_game()
            return 0
        elif self.args.command == 'test_all':
            return 0 if self.run_all_tests() else 1
        elif self.args.command == 'benchmark':
            self.benchmark()
            return 0

        print("Please specify a command. Use --help for options.")
        return 1

    def play_game(self) -> None:
        """Play Quatter interactively, two players sharing the terminal."""
        print("Starting a new Quatter game!")
        print("Pick a piece for your opponent with 'pick <id>' (hex 0-F),")
        print("put the piece you were given with 'put <row> <col>'.")
        print("Other commands: 'free' to list pieces, 'r' to restart, 'q' to quit.")

        self.game.reset()
        while True:
            print(self.game.render())
            if self.game.is_over() or self.game.is_draw:
                break

            command = self.read_command()
            if command is None:
                continue
            if command == ('quit',):
                print("Quitting game.")
                return
            self.execute(command)

        if self.game.is_over():
            print(f"Player {self.game.winner} wins on {self.game.winning_line.name}!")
        else:
            print("The board is full. It's a draw!")

    def read_command(self) -> Optional[Tuple]:
        """
        Read and parse one command from the player.

        Returns:
            Parsed command tuple, or None if the input was invalid
        """
        try:
            user_input = input(f"{self.game.phase}> ").strip().lower()
        except EOFError:
            return ('quit',)
        return self.parse_command(user_input)

    @staticmethod
    def parse_command(text: str) -> Optional[Tuple]:
        """Parse a command string into a tuple such as ('put', 1, 2)."""
        words = text.split()
        if not words:
            return None

        try:
            if words[0] == 'q':
                return ('quit',)
            if words[0] == 'r':
                return ('reset',)
            if words[0] == 'free':
                return ('free',)
            if words[0] == 'pick' and len(words) == 2:
                return ('pick', int(words[1], 16))
            if words[0] == 'put' and len(words) == 3:
                return ('put', int(words[1]), int(words[2]))
        except ValueError:
            pass

        print("Invalid input. Use 'pick <id>', 'put <row> <col>', 'free', 'r' or 'q'.")
        return None

    def execute(self, command: Tuple) -> None:
        """Apply a parsed command to the game."""
        name = command[0]
        try:
            if name == 'reset':
                self.game.reset()
                print("Game restarted.")
            elif name == 'free':
                for piece in self.game.pieces.with_state(PieceState.FREE, PieceState.SELECTED):
                    print(f"  {piece.id:X}: {piece.describe()}")
            elif name == 'pick':
                if not self.game.is_picking():
                    print("You must put the piece you were given first.")
                elif self.game.selection.select_piece_id(command[1]):
                    self.game.pick()
                else:
                    print(f"Piece {command[1]:X} is not available.")
            elif name == 'put':
                if not self.game.is_putting():
                    print("Pick a piece for your opponent first.")
                else:
                    self.game.put(command[1], command[2])
        except InvalidPieceIdError:
            print(f"Piece ids go from 0 to {NUM_PIECES - 1:X}.")
        except OccupiedCellError as e:
            print(f"{e}. Choose another cell.")
        except (NoSelectionError, ValueError) as e:
            print(f"Invalid move: {e}")

    def run_all_tests(self) -> bool:
        """Run all Quatter win detection validation tests."""
        print("Running all validation tests...")

        tests_run = 0
        tests_passed = 0
        for title, tests in [("winning lines", self.create_winning_line_tests()),
                             ("lines without shared attribute", self.create_no_shared_attribute_tests()),
                             ("incomplete boards", self.create_incomplete_board_tests())]:
            print(f"\nTesting {title}:")
            for i, (board, expected) in enumerate(tests):
                line = board.check_win()
                result = line.name if line else None
                success = result == expected
                tests_run += 1
                tests_passed += 1 if success else 0
                print(f"  Test {i+1}: {'PASSED' if success else 'FAILED'}")
                if not success:
                    print(f"    Expected: {expected}, Got: {result}")
                    print(board.render())

        print(f"\nTest summary: {tests_passed}/{tests_run} tests passed")
        if tests_passed == tests_run:
            print("All tests passed!")
        else:
            print(f"Failed tests: {tests_run - tests_passed}")
        return tests_passed == tests_run

    @staticmethod
    def _board_with(layout) -> Board:
        board = Board()
        board.load(PieceSet(), layout)
        return board

    def create_winning_line_tests(self) -> List[Tuple[Board, Optional[str]]]:
        """One winning board per line, each sharing a single attribute."""
        tests = []
        # 0b0010, 0b0011, 0b0110, 0b1111 agree only on bit 1
        dark = [0b0010, 0b0011, 0b0110, 0b1111]
        for line in WINNING_LINES:
            tests.append((self._board_with(dict(zip(line.cells, dark))), line.name))

        # 0b0000, 0b0001, 0b0010, 0b0100 agree only on bit 3 being clear
        not_solid = [0b0000, 0b0001, 0b0010, 0b0100]
        tests.append((self._board_with(dict(zip(WINNING_LINES[0].cells, not_solid))), "row 0"))
        return tests

    def create_no_shared_attribute_tests(self) -> List[Tuple[Board, Optional[str]]]:
        """Full lines whose pieces disagree on every attribute."""
        # Each bit is set on exactly two of these pieces
        mixed = [0b0000, 0b1111, 0b0101, 0b1010]
        return [(self._board_with(dict(zip(line.cells, mixed))), None) for line in WINNING_LINES]

    def create_incomplete_board_tests(self) -> List[Tuple[Board, Optional[str]]]:
        """Empty and partially filled boards never win."""
        tests = [(Board(), None)]
        tests.append((self._board_with({(0, 0): 0, (0, 1): 1, (0, 2): 2}), None))
        tests.append((self._board_with({(0, 0): 0, (1, 1): 1, (2, 2): 2, (3, 0): 3}), None))
        return tests

    def benchmark(self) -> None:
        """Benchmark check_win on random full boards."""
        iterations = self.args.iterations
        rng = np.random.default_rng(self.args.seed)
        print(f"Benchmarking win detection on {iterations} random boards...")

        wins = 0
        elapsed = 0.0
        cells = all_cells()
        for _ in range(iterations):
            board = self._board_with(dict(zip(cells, rng.permutation(NUM_PIECES).tolist())))
            start = time.perf_counter()
            if board.check_win() is not None:
                wins += 1
            elapsed += time.perf_counter() - start

        print(f"Total time: {elapsed:.4f} seconds")
        print(f"Average per board: {elapsed / max(iterations, 1) * 1e6:.2f} microseconds")
        print(f"Boards with a Quatter: {wins}/{iterations} ({wins / max(iterations, 1):.1%})")


def main(argv: List[str] = None) -> int:
    cli = SimpleCLI()
    return cli.run(argv)


if __name__ == "__main__":
    sys.exit(main())
