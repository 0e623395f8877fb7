from __future__ import annotations

import dataclasses
import logging
import os
from typing import Mapping, Optional

from .protocol import NexStarConstants


class ConfigEnv:
    PORT = "NEXSTAR_PORT"
    BAUD = "NEXSTAR_BAUD"
    READ_TIMEOUT_S = "NEXSTAR_READ_TIMEOUT_S"
    WRITE_TIMEOUT_S = "NEXSTAR_WRITE_TIMEOUT_S"
    LOG_LEVEL = "NEXSTAR_LOG_LEVEL"


@dataclasses.dataclass(frozen=True)
class NexStarConfig:
    port: Optional[str] = None
    baud: int = NexStarConstants.BAUD
    read_timeout_s: float = NexStarConstants.READ_TIMEOUT_S
    write_timeout_s: float = NexStarConstants.WRITE_TIMEOUT_S
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.port is not None and not self.port:
            raise ValueError("Serial port must not be empty.")
        if self.baud <= 0:
            raise ValueError("Baud rate must be positive.")
        if self.read_timeout_s <= 0:
            raise ValueError("Read timeout must be positive.")
        if self.write_timeout_s <= 0:
            raise ValueError("Write timeout must be positive.")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level {self.log_level!r}.")

    @property
    def level(self) -> int:
        return logging.getLevelName(self.log_level.upper())

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "NexStarConfig":
        env = os.environ if environ is None else environ
        return cls(
            port=env.get(ConfigEnv.PORT) or None,
            baud=int(env.get(ConfigEnv.BAUD, str(NexStarConstants.BAUD))),
            read_timeout_s=float(env.get(ConfigEnv.READ_TIMEOUT_S, str(NexStarConstants.READ_TIMEOUT_S))),
            write_timeout_s=float(env.get(ConfigEnv.WRITE_TIMEOUT_S, str(NexStarConstants.WRITE_TIMEOUT_S))),
            log_level=env.get(ConfigEnv.LOG_LEVEL, "INFO"),
        )

    def replace(self, **changes: object) -> "NexStarConfig":
        """Copy with the non-None ``changes`` applied."""
        return dataclasses.replace(self, **{k: v for k, v in changes.items() if v is not None})
