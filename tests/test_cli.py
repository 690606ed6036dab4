"""Tests for the command-line interface."""

import pytest

from quatter.interfaces.cli import SimpleCLI
from quatter.utils import GamePhase, PieceState


@pytest.fixture
def cli() -> SimpleCLI:
    return SimpleCLI()


class TestCommands:
    """Command parsing and execution."""

    @pytest.mark.parametrize("text,expected", [
        ("pick a", ('pick', 10)),
        ("put 1 2", ('put', 1, 2)),
        ("q", ('quit',)),
        ("r", ('reset',)),
        ("free", ('free',)),
        ("", None),
        ("put x 2", None),
        ("jump", None),
    ])
    def test_parse_command(self, text, expected):
        assert SimpleCLI.parse_command(text) == expected

    def test_pick_then_put(self, cli: SimpleCLI):
        cli.execute(('pick', 10))
        assert cli.game.phase == GamePhase.PLAYER2_PUTS
        cli.execute(('put', 1, 2))
        assert cli.game.board.get_piece(1, 2).id == 10
        assert cli.game.phase == GamePhase.PLAYER2_PICKS

    def test_errors_are_reported(self, cli: SimpleCLI, capsys):
        cli.execute(('pick', 42))
        cli.execute(('put', 0, 0))
        cli.execute(('pick', 3))
        cli.execute(('put', 0, 0))
        cli.execute(('pick', 3))
        cli.execute(('pick', 4))
        cli.execute(('put', 0, 0))

        out = capsys.readouterr().out
        assert "Piece ids go from 0 to F." in out
        assert "Pick a piece for your opponent first." in out
        assert "Piece 3 is not available." in out
        assert "Choose another cell." in out
        assert cli.game.pieces[4].state == PieceState.PICKED

    def test_play_until_quatter(self, cli: SimpleCLI, monkeypatch, capsys):
        moves = iter(["pick 2", "put 0 0", "pick 3", "put 0 1",
                      "pick 6", "put 0 2", "pick f", "put 0 3"])
        monkeypatch.setattr("builtins.input", lambda prompt="": next(moves))
        cli.play_game()
        assert "Player 1 wins on row 0!" in capsys.readouterr().out

    def test_play_quit_on_eof(self, cli: SimpleCLI, monkeypatch, capsys):
        def no_input(prompt=""):
            raise EOFError
        monkeypatch.setattr("builtins.input", no_input)
        cli.play_game()
        assert "Quitting game." in capsys.readouterr().out


class TestValidation:
    """The built-in validation and benchmark commands."""

    def test_all_validation_tests_pass(self, cli: SimpleCLI, capsys):
        assert cli.run(['test_all']) == 0
        assert "All tests passed!" in capsys.readouterr().out

    def test_benchmark(self, cli: SimpleCLI, capsys):
        assert cli.run(['benchmark', '--iterations', '20', '--seed', '1']) == 0
        assert "Boards with a Quatter" in capsys.readouterr().out

    def test_no_command(self, cli: SimpleCLI):
        assert cli.run([]) == 1
