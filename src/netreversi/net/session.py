from __future__ import annotations

import logging
import threading
import time
from enum import Enum, auto
from typing import Callable, Optional

from netreversi.config import SessionConfig
from netreversi.engine.game import GameSession, GameSnapshot, validate_name
from netreversi.errors import (
    GameStateError,
    ListenerError,
    NetReversiError,
    ProtocolViolation,
    TransportError,
)
from netreversi.net.health import ConnectionHealthMonitor
from netreversi.net.transport import SocketTransport
from netreversi.protocol.codec import ProtocolCodec
from netreversi.protocol.constants import GameStatusValue
from netreversi.protocol.interface import GameOutcome, SessionListener
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

logger = logging.getLogger(__name__)


class SessionState(Enum):
    CONNECTING = auto()
    LOGGED_OUT = auto()     # connected, no name accepted yet
    AWAITING_GAME = auto()  # logged in, no game requested
    WAITING = auto()        # colour assigned, waiting for an opponent
    IN_GAME = auto()
    GAME_OVER = auto()
    FAULTED = auto()
    CLOSED = auto()


TERMINAL_STATES = (SessionState.FAULTED, SessionState.CLOSED)

# States in which each server message may arrive; anything else is a protocol violation.
ALLOWED_STATES = {
    LoginAccepted: {SessionState.LOGGED_OUT},
    ColorAssigned: {SessionState.AWAITING_GAME, SessionState.GAME_OVER},
    GameStarted: {SessionState.WAITING},
    MoveResult: {SessionState.IN_GAME},
    OpponentMoved: {SessionState.IN_GAME},
    GameStatus: {SessionState.IN_GAME},
    OpponentDisconnected: {SessionState.IN_GAME},
    Reconnected: {SessionState.AWAITING_GAME, SessionState.WAITING},
    Ping: {
        SessionState.LOGGED_OUT,
        SessionState.AWAITING_GAME,
        SessionState.WAITING,
        SessionState.IN_GAME,
        SessionState.GAME_OVER,
    },
}


class ProtocolSession:
    """Client side of one server connection.

    Usage:
        session = ProtocolSession(listener, SessionConfig(host, port))
        session.start()
        session.login("alice")
        session.request_game()
        session.propose_move(0, 1)

    The receive thread is the only writer of the game state; other threads
    read it through :meth:`game_snapshot`. Any fatal condition ends in
    ``FAULTED`` with a single ``on_fatal_error`` callback.
    """

    def __init__(
        self,
        listener: Optional[SessionListener] = None,
        config: Optional[SessionConfig] = None,
        codec: Optional[ProtocolCodec] = None,
        game: Optional[GameSession] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.listener = listener or SessionListener()
        self.config = config or SessionConfig()
        self.codec = codec or ProtocolCodec(self.config.dialect)
        self.game = game or GameSession()
        self.monitor = ConnectionHealthMonitor(
            on_warning=self._on_health_warning,
            on_zombie=self._on_health_zombie,
            soft_timeout=self.config.soft_timeout,
            zombie_timeout=self.config.zombie_timeout,
            poll_interval=self.config.poll_interval,
            clock=clock,
        )

        self._transport = None
        self._state = SessionState.CONNECTING
        self._state_lock = threading.Lock()
        self._game_lock = threading.RLock()
        self._receiver: Optional[threading.Thread] = None
        self.fault_reason: Optional[str] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_terminal(self) -> bool:
        return self._state in TERMINAL_STATES

    def start(self, transport=None) -> bool:
        """Connect (unless a transport is given) and start both background loops.

        Returns False if the connection could not be made; the session is then
        faulted and the listener has been told.
        """
        if self._state is not SessionState.CONNECTING:
            raise GameStateError(f"Session cannot start from {self._state.name}")

        if transport is None:
            try:
                transport = SocketTransport.connect(
                    self.config.host,
                    self.config.port,
                    timeout=self.config.connect_timeout,
                )
            except TransportError as exc:
                self._fault(str(exc))
                return False

        self._transport = transport
        self._set_state(SessionState.LOGGED_OUT)
        self.monitor.start()
        self._receiver = threading.Thread(target=self._receive_loop, name="receive-loop", daemon=True)
        self._receiver.start()
        return True

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the receive loop to end; True if it has."""
        if self._receiver is None:
            return True
        self._receiver.join(timeout)
        return not self._receiver.is_alive()

    def close(self):
        with self._state_lock:
            if self._state in TERMINAL_STATES:
                return
            previous = self._state
            self._state = SessionState.CLOSED
        logger.info("Session %s -> CLOSED", previous.name)
        self._shutdown()

    def fail(self, reason: str):
        """Fault the session on behalf of the presentation shell."""
        self._fault(reason)

    def game_snapshot(self) -> GameSnapshot:
        with self._game_lock:
            return self.game.snapshot()

    # ------------------------------------------------------------------
    # Command API
    # ------------------------------------------------------------------
    def login(self, name: str) -> bool:
        return self._send(Login(validate_name(name)))

    def request_game(self) -> bool:
        return self._send(RequestGame())

    def propose_move(self, x: int, y: int) -> bool:
        return self._send(ProposeMove(x, y))

    def respond_to_opponent_disconnect(self, wait: bool) -> bool:
        return self._send(OpponentDisconnectReply(wait))

    def logout(self) -> bool:
        sent = self._send(Logout())
        self.close()
        return sent

    def _send(self, command: ClientCommand) -> bool:
        if self._state in TERMINAL_STATES or self._transport is None:
            logger.warning("Dropping %s, session is %s", type(command).__name__, self._state.name)
            return False

        line = self.codec.encode(command)
        try:
            self._transport.write(line)
        except TransportError as exc:
            self._fault(str(exc))
            return False
        logger.debug("SND: %s", line.rstrip("\n"))
        return True

    # ------------------------------------------------------------------
    # Receive loop
    # ------------------------------------------------------------------
    def _receive_loop(self):
        while True:
            try:
                line = self._transport.readline()
            except TransportError as exc:
                self._fault(str(exc))
                break

            if not line:
                self._fault("Connection closed by server")
                break
            if not line.strip("\r\n"):
                logger.debug("RCV: empty line skipped")
                continue
            if not self._handle_line(line):
                break
        logger.debug("Receive loop finished in state %s", self._state.name)

    def _handle_line(self, line: str) -> bool:
        logger.debug("RCV: %s", line.rstrip("\r\n"))
        try:
            message = self.codec.decode(line)
            with self._game_lock:
                self._dispatch(message)
        except ProtocolViolation as exc:
            self._fault(f"Invalid server message: {exc}")
        except (NetReversiError, ValueError) as exc:
            self._fault(str(exc))
        return not self.is_terminal

    def _dispatch(self, message: ServerMessage):
        allowed = ALLOWED_STATES.get(type(message))
        if allowed is not None and self._state not in allowed:
            raise ProtocolViolation(f"Unexpected {type(message).__name__} in state {self._state.name}")

        if isinstance(message, LoginAccepted):
            self.game.assign_local_name(message.name)
            self._set_state(SessionState.AWAITING_GAME)
            self._notify("on_login_accepted", message.name)

        elif isinstance(message, ColorAssigned):
            self.game.assign_local_color(message.color)
            self._set_state(SessionState.WAITING)
            self._notify("on_color_assigned", message.color)

        elif isinstance(message, GameStarted):
            self.game.assign_remote(message.opponent_name, message.opponent_color)
            self.game.start_new_game(message.local_first)
            self._set_state(SessionState.IN_GAME)
            self._notify("on_game_started", message.opponent_name, message.opponent_color, message.local_first)

        elif isinstance(message, MoveResult):
            rejection = message.rejection
            if rejection is not None:
                logger.warning("Move rejected: %s", rejection.name)
                self._notify("on_move_rejected", rejection)
                return
            self.game.apply_local_move(message.x, message.y)
            self._notify("on_local_move_applied", message.x, message.y)

        elif isinstance(message, OpponentMoved):
            self.game.apply_remote_move(message.x, message.y)
            self._notify("on_opponent_move_applied", message.x, message.y)

        elif isinstance(message, GameStatus):
            outcome = self._outcome(message.result)
            self.game.end_game()
            self._set_state(SessionState.GAME_OVER)
            self._notify("on_game_ended", outcome)

        elif isinstance(message, OpponentDisconnected):
            self.game.mark_opponent_gone()
            answer = self._notify("on_opponent_disconnected")
            if answer is not None:
                self.respond_to_opponent_disconnect(bool(answer))

        elif isinstance(message, Reconnected):
            local_turn = message.turn_player == self.game.local.name
            self.game.restore(message.board, local_turn, message.opponent_name, message.opponent_color)
            self._set_state(SessionState.IN_GAME)
            self._notify("on_reconnected")

        elif isinstance(message, Ping):
            self.monitor.heartbeat()
            self._send(Pong())

        else:
            raise ProtocolViolation(f"No handler for {message!r}")

    def _outcome(self, result: str) -> GameOutcome:
        if result == GameStatusValue.DRAW:
            return GameOutcome.DRAW
        if result == GameStatusValue.OPPONENT_LEFT:
            return GameOutcome.OPPONENT_LEFT
        if result == self.game.local.name:
            return GameOutcome.WIN
        return GameOutcome.LOSS

    # ------------------------------------------------------------------
    # Health monitor callbacks (monitor thread)
    # ------------------------------------------------------------------
    def _on_health_warning(self, elapsed: float):
        try:
            self._notify("on_connection_warning")
        except ListenerError as exc:
            self._fault(str(exc))

    def _on_health_zombie(self, elapsed: float):
        if self.config.close_on_zombie:
            self._fault(f"Connection inactive for {elapsed:.1f}s")
            return
        try:
            self._notify("on_zombie_timeout", elapsed)
        except ListenerError as exc:
            self._fault(str(exc))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _notify(self, callback: str, *args):
        try:
            return getattr(self.listener, callback)(*args)
        except Exception as exc:
            logger.exception("Listener %s failed", callback)
            raise ListenerError(f"{callback} failed: {exc}") from exc

    def _set_state(self, new_state: SessionState):
        with self._state_lock:
            if self._state in TERMINAL_STATES:
                return
            previous = self._state
            self._state = new_state
        if previous is not new_state:
            logger.info("Session %s -> %s", previous.name, new_state.name)

    def _fault(self, reason: str):
        with self._state_lock:
            if self._state in TERMINAL_STATES:
                return
            self._state = SessionState.FAULTED
            self.fault_reason = reason
        logger.error("Session faulted: %s", reason)
        self._shutdown()
        try:
            self.listener.on_fatal_error(reason)
        except Exception:
            logger.exception("Listener on_fatal_error failed")

    def _shutdown(self):
        self.monitor.stop()
        if self._transport is not None:
            self._transport.close()
