from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from netreversi.engine.board import Cell
from netreversi.protocol.constants import MoveStatus

# ----------------------------------------------------------------------
# Server -> client
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class LoginAccepted:
    name: str


@dataclass(frozen=True)
class ColorAssigned:
    color: Cell


@dataclass(frozen=True)
class GameStarted:
    opponent_name: str
    opponent_color: Cell
    local_first: bool


@dataclass(frozen=True)
class MoveResult:
    status: int
    x: Optional[int] = None
    y: Optional[int] = None

    @property
    def rejection(self) -> Optional[MoveStatus]:
        return MoveStatus.rejection(self.status)


@dataclass(frozen=True)
class OpponentMoved:
    x: int
    y: int


@dataclass(frozen=True)
class GameStatus:
    result: str


@dataclass(frozen=True)
class OpponentDisconnected:
    pass


@dataclass(frozen=True)
class Reconnected:
    board: str
    turn_player: str
    opponent_name: str
    opponent_color: Cell


@dataclass(frozen=True)
class Ping:
    pass


ServerMessage = Union[
    LoginAccepted,
    ColorAssigned,
    GameStarted,
    MoveResult,
    OpponentMoved,
    GameStatus,
    OpponentDisconnected,
    Reconnected,
    Ping,
]

# ----------------------------------------------------------------------
# Client -> server
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class Login:
    name: str


@dataclass(frozen=True)
class RequestGame:
    pass


@dataclass(frozen=True)
class ProposeMove:
    x: int
    y: int


@dataclass(frozen=True)
class OpponentDisconnectReply:
    wait: bool


@dataclass(frozen=True)
class Logout:
    pass


@dataclass(frozen=True)
class Pong:
    pass


ClientCommand = Union[Login, RequestGame, ProposeMove, OpponentDisconnectReply, Logout, Pong]

