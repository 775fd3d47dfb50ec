from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from netreversi.engine.board import Board, Cell
from netreversi.errors import GameStateError
from netreversi.protocol.constants import BOARD_SIZE, PLAYER_NAME_LENGTH


class Turn(Enum):
    LOCAL = "LOCAL"
    REMOTE = "REMOTE"


@dataclass
class Player:
    name: Optional[str] = None
    color: Optional[Cell] = None

    @property
    def is_ready(self) -> bool:
        return self.name is not None and self.color is not None


@dataclass(frozen=True)
class GameSnapshot:
    """Read-only copy of the game handed to the presentation shell."""

    local_name: Optional[str]
    local_color: Optional[Cell]
    remote_name: Optional[str]
    remote_color: Optional[Cell]
    turn: Optional[Turn]
    over: bool
    opponent_present: bool
    board: Tuple[Tuple[Cell, ...], ...]


def validate_name(name: str) -> str:
    if not name:
        raise ValueError("Player name must not be empty")
    if len(name) > PLAYER_NAME_LENGTH:
        raise ValueError(f"Player name longer than {PLAYER_NAME_LENGTH} characters: {name!r}")
    return name


def _check_color(color: Cell) -> Cell:
    if color is Cell.EMPTY:
        raise GameStateError("A player cannot be assigned the empty colour")
    return color


class GameSession:
    """Player bookkeeping, turn tracking and the board it drives."""

    def __init__(self, board_size: int = BOARD_SIZE):
        self.board = Board(size=board_size)
        self.local = Player()
        self.remote = Player()
        self.turn: Optional[Turn] = None
        self.over = False
        self.opponent_present = False

    # ------------------------------------------------------------------
    # Player assignment
    # ------------------------------------------------------------------
    def assign_local_name(self, name: str):
        self.local.name = validate_name(name)

    def assign_local_color(self, color: Cell):
        # A colour comes with a new matchmaking round, so the previous opponent is dropped.
        self.local.color = _check_color(color)
        self.remote = Player()
        self.turn = None
        self.opponent_present = False

    def assign_remote(self, name: str, color: Cell):
        color = _check_color(color)
        if self.local.color is not None and self.local.color is color:
            raise GameStateError(f"Opponent colour {color.name} equals the local colour")
        self.remote.name = validate_name(name)
        self.remote.color = color
        self.opponent_present = True

    # ------------------------------------------------------------------
    # Game transitions
    # ------------------------------------------------------------------
    def start_new_game(self, local_is_first: bool):
        self._require_players()
        self.board.reset(local_is_first, self.local.color, self.remote.color)
        self.turn = Turn.LOCAL if local_is_first else Turn.REMOTE
        self.over = False

    def set_turn(self, is_local: bool):
        self._require_players()
        self.turn = Turn.LOCAL if is_local else Turn.REMOTE

    def end_game(self):
        self._require_players()
        self.over = True

    def apply_local_move(self, x: int, y: int) -> List[Tuple[int, int]]:
        self._require_players()
        flipped = self.board.apply_move(x, y, self.local.color)
        self.turn = Turn.REMOTE
        return flipped

    def apply_remote_move(self, x: int, y: int) -> List[Tuple[int, int]]:
        self._require_players()
        flipped = self.board.apply_move(x, y, self.remote.color)
        self.turn = Turn.LOCAL
        return flipped

    def mark_opponent_gone(self):
        self._require_players()
        self.opponent_present = False
        self.turn = Turn.REMOTE

    def restore(self, flat: str, local_turn: bool, remote_name: str, remote_color: Cell):
        """Resynchronize after a reconnect.

        Everything is validated before the first mutation so a bad message
        leaves the session as it was.
        """
        if self.local.name is None:
            raise GameStateError("Cannot restore a game before login")
        remote_color = _check_color(remote_color)
        remote_name = validate_name(remote_name)
        grid = Board.parse_snapshot(flat, self.board.size)
        local_color = self.local.color
        if local_color is None:
            local_color = remote_color.opponent()
        elif local_color is remote_color:
            raise GameStateError(f"Opponent colour {remote_color.name} equals the local colour")

        self.board.grid = grid
        self.local.color = local_color
        self.remote.name = remote_name
        self.remote.color = remote_color
        self.opponent_present = True
        self.turn = Turn.LOCAL if local_turn else Turn.REMOTE
        self.over = False

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def is_local_turn(self) -> bool:
        return self.turn is Turn.LOCAL

    def snapshot(self) -> GameSnapshot:
        return GameSnapshot(
            local_name=self.local.name,
            local_color=self.local.color,
            remote_name=self.remote.name,
            remote_color=self.remote.color,
            turn=self.turn,
            over=self.over,
            opponent_present=self.opponent_present,
            board=tuple(tuple(row) for row in self.board.grid),
        )

    def _require_players(self):
        if not self.local.is_ready or not self.remote.is_ready:
            raise GameStateError("Both players need a name and a colour before the game can change")
