class NetReversiError(Exception):
    """Base class for every error raised by the client core."""


class MoveError(NetReversiError):
    pass


class OutOfBoundsError(MoveError):
    def __init__(self, x: int, y: int, size: int):
        super().__init__(f"Coordinate ({x}, {y}) is outside a {size}x{size} board")
        self.x = x
        self.y = y


class MalformedSnapshotError(MoveError):
    def __init__(self, snapshot: str, reason: str):
        super().__init__(f"Malformed board snapshot {snapshot!r}: {reason}")
        self.snapshot = snapshot


class GameStateError(NetReversiError):
    """A game-affecting call was made before the session was ready for it."""


class ProtocolViolation(NetReversiError):
    pass


class DecodeError(ProtocolViolation):
    def __init__(self, raw_line: str, reason: str):
        super().__init__(f"{reason}: {raw_line!r}")
        self.raw_line = raw_line
        self.reason = reason


class UnknownTagError(DecodeError):
    def __init__(self, raw_line: str):
        super().__init__(raw_line, "Unknown message tag")


class MalformedMessageError(DecodeError):
    pass


class TransportError(NetReversiError):
    pass


class ListenerError(NetReversiError):
    """A presentation-shell callback raised; the session treats it as fatal."""
