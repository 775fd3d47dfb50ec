from __future__ import annotations

from dataclasses import dataclass

from netreversi.protocol.constants import ProtocolDialect

DEFAULT_PORT = 10000


@dataclass(frozen=True)
class SessionConfig:
    host: str = "127.0.0.1"
    port: int = DEFAULT_PORT
    dialect: ProtocolDialect = ProtocolDialect.WANT_GAME
    soft_timeout: float = 6.5
    zombie_timeout: float = 20.0
    poll_interval: float = 0.1
    close_on_zombie: bool = False
    connect_timeout: float | None = 10.0

    def __post_init__(self):
        if not 0 < self.port < 65536:
            raise ValueError(f"Port out of range: {self.port}")
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        if not 0 < self.soft_timeout < self.zombie_timeout:
            raise ValueError("Timeouts must satisfy 0 < soft_timeout < zombie_timeout")
        if self.connect_timeout is not None and self.connect_timeout <= 0:
            raise ValueError("connect_timeout must be positive")
