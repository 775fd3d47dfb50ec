"""Tests for the console client."""
import io

import pytest

from netreversi.engine.board import Cell
from netreversi.main import ConsoleListener, main, run_command
from netreversi.protocol.constants import MoveStatus
from netreversi.protocol.interface import GameOutcome
from tests.conftest import start_game


@pytest.fixture
def console(connected):
    session, server = connected
    listener = ConsoleListener(out=io.StringIO())
    listener.session = session
    return session, server, listener


class TestRunCommand:
    def test_move(self, console):
        session, server, listener = console

        assert run_command(session, listener, ["move", "1", "2"])
        assert server.recv_line() == "MOVE;1;2\n"

    def test_bad_move_arguments(self, console):
        session, _, listener = console

        assert run_command(session, listener, ["move", "a"])
        assert "Usage: move X Y" in listener.out.getvalue()

    @pytest.mark.parametrize("words,line", [
        (["game"], "WANT_GAME;\n"),
        (["wait"], "OPP_DISCONNECTED;WAIT\n"),
        (["leave"], "OPP_DISCONNECTED;NOT_WAIT\n"),
    ])
    def test_simple_commands(self, console, words, line):
        session, server, listener = console

        assert run_command(session, listener, words)
        assert server.recv_line() == line

    def test_quit_logs_out(self, console):
        session, server, listener = console

        assert not run_command(session, listener, ["quit"])
        assert server.recv_line() == "LOGOUT;\n"

    def test_unknown_prints_help(self, console):
        session, _, listener = console

        assert run_command(session, listener, ["dance"])
        assert "Commands:" in listener.out.getvalue()


class TestConsoleListener:
    def test_board_after_game_start(self, connected, listener):
        session, server = connected
        start_game(session, server, listener)
        console = ConsoleListener(out=io.StringIO())
        console.session = session

        console.on_game_started("Bob", Cell.BLUE, True)

        output = console.out.getvalue()
        assert "Game against Bob (BLUE)" in output
        assert "1 . R B ." in output
        assert "Your turn!" in output

    def test_messages(self):
        console = ConsoleListener(out=io.StringIO())

        console.on_move_rejected(MoveStatus.FIELD_TAKEN)
        console.on_game_ended(GameOutcome.WIN)
        assert console.on_opponent_disconnected() is None

        output = console.out.getvalue()
        assert "FIELD_TAKEN" in output
        assert "Winner winner chicken dinner!" in output


def test_main_without_command_prints_help(capsys):
    assert main([]) == 0
    assert "connect" in capsys.readouterr().out
