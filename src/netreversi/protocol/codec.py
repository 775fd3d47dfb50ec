from __future__ import annotations

from typing import List

from netreversi.engine.board import Cell
from netreversi.errors import MalformedMessageError, UnknownTagError
from netreversi.protocol.constants import (
    DELIMITER,
    LINE_END,
    ProtocolDialect,
    Tag,
    WaitReply,
)
from netreversi.protocol.messages import (
    ClientCommand,
    ColorAssigned,
    GameStarted,
    GameStatus,
    Login,
    LoginAccepted,
    Logout,
    MoveResult,
    OpponentDisconnected,
    OpponentDisconnectReply,
    OpponentMoved,
    Ping,
    Pong,
    ProposeMove,
    Reconnected,
    RequestGame,
    ServerMessage,
)


class ProtocolCodec:
    """Translate between ``;``-separated wire lines and typed messages.

    A codec speaks exactly one :class:`ProtocolDialect`; the other dialect's
    game-request tag is treated as unknown.
    """

    def __init__(self, dialect: ProtocolDialect = ProtocolDialect.WANT_GAME):
        self.dialect = dialect

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------
    def decode(self, line: str) -> ServerMessage:
        raw = line.rstrip("\r\n")
        parts = raw.split(DELIMITER)
        if parts and parts[-1] == "" and len(parts) > 1:
            parts.pop()
        tag = parts[0]

        if tag == "":
            raise MalformedMessageError(raw, "Empty message")
        elif tag == Tag.LOGIN:
            return LoginAccepted(name=self._field(parts, 1, raw))
        elif tag == self.dialect.game_tag:
            return ColorAssigned(color=self._color(parts, 1, raw))
        elif tag == Tag.START_GAME:
            return GameStarted(
                opponent_name=self._field(parts, 1, raw),
                opponent_color=self._color(parts, 2, raw),
                local_first=self._flag(parts, 3, raw),
            )
        elif tag == Tag.MOVE:
            status = self._int(parts, 1, raw)
            result = MoveResult(status=status)
            if result.rejection is not None and len(parts) < 4:
                return result
            return MoveResult(status=status, x=self._int(parts, 2, raw), y=self._int(parts, 3, raw))
        elif tag == Tag.OPP_MOVE:
            return OpponentMoved(x=self._int(parts, 1, raw), y=self._int(parts, 2, raw))
        elif tag == Tag.GAME_STATUS:
            return GameStatus(result=self._field(parts, 1, raw))
        elif tag == Tag.OPP_DISCONNECTED:
            return OpponentDisconnected()
        elif tag == Tag.RECONNECT:
            return Reconnected(
                board=self._field(parts, 1, raw),
                turn_player=self._field(parts, 2, raw),
                opponent_name=self._field(parts, 3, raw),
                opponent_color=self._color(parts, 4, raw),
            )
        elif tag == Tag.PING:
            return Ping()
        raise UnknownTagError(raw)

    @staticmethod
    def _field(parts: List[str], index: int, raw: str) -> str:
        if len(parts) <= index:
            raise MalformedMessageError(raw, f"Missing field {index}")
        return parts[index]

    @classmethod
    def _int(cls, parts: List[str], index: int, raw: str) -> int:
        value = cls._field(parts, index, raw)
        try:
            return int(value)
        except ValueError:
            raise MalformedMessageError(raw, f"Field {index} is not a number") from None

    @classmethod
    def _color(cls, parts: List[str], index: int, raw: str) -> Cell:
        value = cls._field(parts, index, raw)
        if value not in (Cell.RED.value, Cell.BLUE.value):
            raise MalformedMessageError(raw, f"Field {index} is not a player colour")
        return Cell.from_char(value)

    @classmethod
    def _flag(cls, parts: List[str], index: int, raw: str) -> bool:
        value = cls._field(parts, index, raw)
        if value not in ("0", "1"):
            raise MalformedMessageError(raw, f"Field {index} is not a 0/1 flag")
        return value == "1"

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------
    def encode(self, command: ClientCommand) -> str:
        if isinstance(command, Login):
            return self._line(Tag.LOGIN, command.name)
        elif isinstance(command, RequestGame):
            return self._line(self.dialect.game_tag)
        elif isinstance(command, ProposeMove):
            return self._line(Tag.MOVE, str(command.x), str(command.y))
        elif isinstance(command, OpponentDisconnectReply):
            reply = WaitReply.WAIT if command.wait else WaitReply.NOT_WAIT
            return self._line(self.dialect.wait_reply_tag, reply)
        elif isinstance(command, Logout):
            return self._line(Tag.LOGOUT)
        elif isinstance(command, Pong):
            return self._line(Tag.PONG)
        raise TypeError(f"Cannot encode {command!r}")

    @staticmethod
    def _line(tag: str, *fields: str) -> str:
        for field in fields:
            if not field.isascii() or any(char in field for char in (DELIMITER, "\r", "\n")):
                raise ValueError(f"Field {field!r} contains a reserved or non-ASCII character")
        if not fields:
            return f"{tag}{DELIMITER}{LINE_END}"
        return DELIMITER.join((tag,) + fields) + LINE_END
