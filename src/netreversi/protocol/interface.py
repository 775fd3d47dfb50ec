from __future__ import annotations

from enum import Enum
from typing import Optional

from netreversi.engine.board import Cell
from netreversi.protocol.constants import MoveStatus


class GameOutcome(Enum):
    WIN = "WIN"
    LOSS = "LOSS"
    DRAW = "DRAW"
    OPPONENT_LEFT = "OPPONENT_LEFT"


class SessionListener:
    """
    Notifications from the protocol session to the presentation shell.
    This decouples the display from the network core: the shell overrides
    what it cares about and reads game state only through snapshots.

    Callbacks run on the session's receive or health-monitor thread. An
    exception raised from a callback faults the session.
    """

    def on_login_accepted(self, name: str):
        pass

    def on_color_assigned(self, color: Cell):
        pass

    def on_game_started(self, opponent_name: str, opponent_color: Cell, is_local_turn: bool):
        pass

    def on_move_rejected(self, status: MoveStatus):
        pass

    def on_local_move_applied(self, x: int, y: int):
        pass

    def on_opponent_move_applied(self, x: int, y: int):
        pass

    def on_game_ended(self, outcome: GameOutcome):
        pass

    def on_opponent_disconnected(self) -> Optional[bool]:
        """Return True/False to answer the wait prompt now, or None to answer later
        through ``respond_to_opponent_disconnect``."""
        return None

    def on_reconnected(self):
        pass

    def on_connection_warning(self):
        pass

    def on_zombie_timeout(self, elapsed: float):
        pass

    def on_fatal_error(self, reason: str):
        pass
