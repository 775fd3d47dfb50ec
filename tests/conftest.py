"""Pytest fixtures for the network client tests."""
import socket
import threading
from typing import Dict, Optional, Tuple

import pytest

from netreversi.config import SessionConfig
from netreversi.engine.board import Board, Cell
from netreversi.net.session import ProtocolSession
from netreversi.net.transport import SocketTransport
from netreversi.protocol.interface import SessionListener

WAIT_TIMEOUT = 2.0


def make_board(cells: Dict[Tuple[int, int], Cell], size: int = 4) -> Board:
    """Build a board from {(x, y): cell}; every other cell is empty."""
    board = Board(size)
    for (x, y), cell in cells.items():
        board.grid[y][x] = cell
    return board


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class RecordingListener(SessionListener):
    """Records every callback as (name, args) and lets tests wait for one."""

    def __init__(self, disconnect_answer: Optional[bool] = None):
        self.events = []
        self.disconnect_answer = disconnect_answer
        self._condition = threading.Condition()

    def _record(self, name: str, *args):
        with self._condition:
            self.events.append((name, args))
            self._condition.notify_all()

    def names(self):
        with self._condition:
            return [name for name, _ in self.events]

    def calls(self, name: str):
        with self._condition:
            return [args for event, args in self.events if event == name]

    def wait_for(self, name: str, count: int = 1, timeout: float = WAIT_TIMEOUT):
        with self._condition:
            ok = self._condition.wait_for(
                lambda: sum(1 for event, _ in self.events if event == name) >= count,
                timeout=timeout,
            )
        assert ok, f"{name} not called {count} time(s); got {self.names()}"
        return self.calls(name)[count - 1]

    def on_login_accepted(self, name):
        self._record("on_login_accepted", name)

    def on_color_assigned(self, color):
        self._record("on_color_assigned", color)

    def on_game_started(self, opponent_name, opponent_color, is_local_turn):
        self._record("on_game_started", opponent_name, opponent_color, is_local_turn)

    def on_move_rejected(self, status):
        self._record("on_move_rejected", status)

    def on_local_move_applied(self, x, y):
        self._record("on_local_move_applied", x, y)

    def on_opponent_move_applied(self, x, y):
        self._record("on_opponent_move_applied", x, y)

    def on_game_ended(self, outcome):
        self._record("on_game_ended", outcome)

    def on_opponent_disconnected(self):
        self._record("on_opponent_disconnected")
        return self.disconnect_answer

    def on_reconnected(self):
        self._record("on_reconnected")

    def on_connection_warning(self):
        self._record("on_connection_warning")

    def on_zombie_timeout(self, elapsed):
        self._record("on_zombie_timeout", elapsed)

    def on_fatal_error(self, reason):
        self._record("on_fatal_error", reason)


class FakeServer:
    """Server end of a socket pair speaking raw protocol lines."""

    def __init__(self, sock: socket.socket):
        self.sock = sock
        self.sock.settimeout(WAIT_TIMEOUT)
        self.reader = sock.makefile("r", encoding="ascii", newline="\n")

    def send(self, *lines: str):
        for line in lines:
            self.sock.sendall((line + "\n").encode("ascii"))

    def recv_line(self) -> str:
        return self.reader.readline()

    def close(self):
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self.reader.close()
        self.sock.close()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def config() -> SessionConfig:
    return SessionConfig(soft_timeout=6.5, zombie_timeout=20.0, poll_interval=0.05)


@pytest.fixture
def connected(listener, config, clock):
    """A started session wired to a FakeServer through socket.socketpair()."""
    client_sock, server_sock = socket.socketpair()
    server = FakeServer(server_sock)
    session = ProtocolSession(listener, config, clock=clock)
    assert session.start(SocketTransport(client_sock))
    yield session, server
    session.close()
    server.close()
    session.join(timeout=WAIT_TIMEOUT)


def login(session, server, listener, name: str = "alice"):
    session.login(name)
    assert server.recv_line() == f"LOGIN;{name}\n"
    server.send(f"LOGIN;{name}")
    listener.wait_for("on_login_accepted")


def start_game(session, server, listener, local_color: str = "R", opponent: str = "Bob",
               opponent_color: str = "B", local_first: str = "1"):
    login(session, server, listener)
    session.request_game()
    assert server.recv_line() == "WANT_GAME;\n"
    server.send(f"WANT_GAME;{local_color}")
    listener.wait_for("on_color_assigned")
    server.send(f"START_GAME;{opponent};{opponent_color};{local_first}")
    listener.wait_for("on_game_started")
