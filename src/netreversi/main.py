from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from netreversi.config import DEFAULT_PORT, SessionConfig
from netreversi.engine.board import Cell
from netreversi.net.session import ProtocolSession
from netreversi.protocol.constants import BOARD_SIZE, MoveStatus, ProtocolDialect
from netreversi.protocol.interface import GameOutcome, SessionListener

DIALECTS = {dialect.value: dialect for dialect in ProtocolDialect}

HELP_TEXT = """Commands:
  game          request a new game
  move X Y      play column X, row Y
  wait          keep waiting for a disconnected opponent
  leave         stop waiting for a disconnected opponent
  board         show the board
  quit          log out and exit"""

RESULT_TEXT = {
    GameOutcome.WIN: "Winner winner chicken dinner!",
    GameOutcome.LOSS: "Better luck next time...",
    GameOutcome.DRAW: "DRAW",
    GameOutcome.OPPONENT_LEFT: "OPPONENT DID NOT WANT TO WAIT FOR YOU",
}


class ConsoleListener(SessionListener):
    """Print session events; the console owns no game state of its own."""

    def __init__(self, out=sys.stdout):
        self.out = out
        self.session: Optional[ProtocolSession] = None

    def show(self, text: str):
        print(text, file=self.out, flush=True)

    def show_board(self):
        if self.session is None:
            return
        snapshot = self.session.game_snapshot()
        self.show("  " + " ".join(str(x) for x in range(BOARD_SIZE)))
        for y, row in enumerate(snapshot.board):
            self.show(f"{y} " + " ".join(cell.value if cell is not Cell.EMPTY else "." for cell in row))

    def on_login_accepted(self, name: str):
        self.show(f"Logged in as {name}. Type 'game' to find an opponent.")

    def on_color_assigned(self, color: Cell):
        self.show(f"You play {color.name}. Waiting for an opponent...")

    def on_game_started(self, opponent_name: str, opponent_color: Cell, is_local_turn: bool):
        self.show(f"Game against {opponent_name} ({opponent_color.name}).")
        self.show_board()
        self.show("Your turn!" if is_local_turn else "Waiting for opponent move")

    def on_move_rejected(self, status: MoveStatus):
        self.show(f"Invalid move ({status.name}), try again")

    def on_local_move_applied(self, x: int, y: int):
        self.show_board()
        self.show("Waiting for opponent move")

    def on_opponent_move_applied(self, x: int, y: int):
        self.show(f"Opponent played {x} {y}")
        self.show_board()
        self.show("Your turn!")

    def on_game_ended(self, outcome: GameOutcome):
        self.show(RESULT_TEXT[outcome])

    def on_opponent_disconnected(self):
        self.show("Opponent disconnected. Type 'wait' or 'leave'.")
        return None

    def on_reconnected(self):
        self.show("Game restored.")
        self.show_board()

    def on_connection_warning(self):
        self.show("Connection problem: no heartbeat from the server.")

    def on_zombie_timeout(self, elapsed: float):
        self.show(f"Connection inactive for {elapsed:.0f}s")

    def on_fatal_error(self, reason: str):
        self.show(f"Error: {reason}")


def run_command(session: ProtocolSession, listener: ConsoleListener, words: List[str]) -> bool:
    """Run one console command; returns False when the console should exit."""
    if not words:
        return True
    command = words[0].lower()

    if command == "quit":
        session.logout()
        return False
    elif command == "game":
        session.request_game()
    elif command == "move":
        if len(words) != 3 or not all(word.lstrip("-").isdigit() for word in words[1:]):
            listener.show("Usage: move X Y")
            return True
        session.propose_move(int(words[1]), int(words[2]))
    elif command == "wait":
        session.respond_to_opponent_disconnect(True)
    elif command == "leave":
        session.respond_to_opponent_disconnect(False)
    elif command == "board":
        listener.show_board()
    else:
        listener.show(HELP_TEXT)
    return True


def run_connect(args: argparse.Namespace) -> int:
    config = SessionConfig(
        host=args.host,
        port=args.port,
        dialect=DIALECTS[args.dialect],
        close_on_zombie=args.close_on_zombie,
    )
    listener = ConsoleListener()
    session = ProtocolSession(listener, config)
    listener.session = session

    if not session.start():
        return 1
    try:
        session.login(args.name)
    except ValueError as exc:
        listener.show(f"Error: {exc}")
        session.close()
        return 2
    listener.show(HELP_TEXT)

    for raw in sys.stdin:
        if session.is_terminal:
            break
        if not run_command(session, listener, raw.split()):
            break
    else:
        session.logout()

    session.join(timeout=2.0)
    return 1 if session.fault_reason else 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Networked 4x4 Reversi client")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    connect_parser = subparsers.add_parser("connect", help="Connect to a game server and play from the console")
    connect_parser.add_argument("host", help="Server address")
    connect_parser.add_argument("port", type=int, nargs="?", default=DEFAULT_PORT, help=f"Server port (default: {DEFAULT_PORT})")
    connect_parser.add_argument("--name", required=True, help="Player name (at most 20 characters)")
    connect_parser.add_argument(
        "--dialect",
        choices=sorted(DIALECTS),
        default=ProtocolDialect.WANT_GAME.value,
        help="Server message dialect (default: want-game)",
    )
    connect_parser.add_argument(
        "--close-on-zombie",
        action="store_true",
        help="Drop the connection once the server has been silent past the zombie timeout",
    )
    connect_parser.set_defaults(func=run_connect)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if hasattr(args, "func"):
        return args.func(args)
    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
