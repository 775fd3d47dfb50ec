from enum import Enum, IntEnum

DELIMITER = ";"
LINE_END = "\n"

PLAYER_NAME_LENGTH = 20
BOARD_SIZE = 4


class Tag:
    LOGIN = "LOGIN"
    WANT_GAME = "WANT_GAME"           # WANT_GAME [color]
    JOIN_GAME = "JOIN_GAME"           # JOIN_GAME [color], older server dialect
    START_GAME = "START_GAME"         # START_GAME <opp_name> <opp_color> <local_first>
    MOVE = "MOVE"                     # in: MOVE <status> [x y], out: MOVE <x> <y>
    OPP_MOVE = "OPP_MOVE"             # OPP_MOVE <x> <y>
    GAME_STATUS = "GAME_STATUS"       # GAME_STATUS <DRAW|OPP_DISCONNECTED|winner>
    OPP_DISCONNECTED = "OPP_DISCONNECTED"
    WAIT_REPLY = "WAIT_REPLY"         # reply to OPP_DISCONNECTED, older server dialect
    RECONNECT = "RECONNECT"           # RECONNECT <board> <turn_name> <opp_name> <opp_color>
    PING = "PING"
    PONG = "PONG"
    LOGOUT = "LOGOUT"


class GameStatusValue:
    DRAW = "DRAW"
    OPPONENT_LEFT = "OPP_DISCONNECTED"


class WaitReply:
    WAIT = "WAIT"
    NOT_WAIT = "NOT_WAIT"


class MoveStatus(IntEnum):
    GAME_NOT_FOUND = 5
    NOT_MY_TURN = 6
    INVALID_MOVE = 7
    FIELD_TAKEN = 8

    @classmethod
    def rejection(cls, code: int) -> "MoveStatus | None":
        """Return the rejection reason for ``code``, or None if the move was accepted."""
        try:
            return cls(code)
        except ValueError:
            return None


class ProtocolDialect(Enum):
    """The two server variants name the game request and the wait reply differently."""

    WANT_GAME = "want-game"
    JOIN_GAME = "join-game"

    @property
    def game_tag(self) -> str:
        return Tag.WANT_GAME if self is ProtocolDialect.WANT_GAME else Tag.JOIN_GAME

    @property
    def wait_reply_tag(self) -> str:
        return Tag.OPP_DISCONNECTED if self is ProtocolDialect.WANT_GAME else Tag.WAIT_REPLY
