from __future__ import annotations

import logging
from enum import IntEnum, StrEnum
from typing import Optional

LOGGER = logging.getLogger("nexstar.protocol")


class NexStarConstants:
    TERMINATOR = b"#"
    PAIR_SEP = b","
    PAIR_FIELDS = 2
    HEX_DIGITS = 8
    HEX_CHARS = b"0123456789ABCDEFabcdef"
    FULL_CIRCLE = 1 << 32
    WRITE_MASK = 0xFFFFFF00
    FIXED_POINT_BASE = 256
    FIXED_POINT_BYTES = 3
    RECORD_LEN = 8
    BYTE_RANGE = 256
    SIGNED_BYTE_LIMIT = 128
    SIGN_POSITIVE = 0
    SIGN_NEGATIVE = 1
    DST_OFF = 0
    DST_ON = 1
    YEAR_BASE = 2000
    NOT_ALIGNED = b"0"
    PING_CHAR = "U"
    P_FRAME_LEN = 8
    P_PAD = 0
    BAUD = 9600
    READ_TIMEOUT_S = 1.0
    WRITE_TIMEOUT_S = 1.0
    TEXT_ENCODING = "ascii"
    BYTE_ENCODING = "latin-1"


class NexStarError(Exception):
    pass


class NexStarTransportError(NexStarError):
    pass


class NexStarTimeoutError(NexStarTransportError, TimeoutError):
    pass


class NexStarConnectionError(NexStarError):
    pass


class NexStarValueError(NexStarError, ValueError):
    pass


class NexStarFormatError(NexStarError):
    """Reply did not have the shape the command expects."""

    def __init__(self, message: str, command: Optional[bytes] = None, reply: Optional[bytes] = None) -> None:
        super().__init__(message)
        self.command = command
        self.reply = reply


class NexStarCommand(StrEnum):
    GET_RA_DEC = "e"
    SET_RA_DEC = "s"
    SLEW_RA_DEC = "r"
    GET_AZ_ALT = "z"
    SLEW_AZ_ALT = "b"
    CANCEL_SLEW = "M"
    GET_TRACKING_MODE = "t"
    SET_TRACKING_MODE = "T"
    GET_LOCATION = "w"
    SET_LOCATION = "W"
    GET_TIME = "h"
    SET_TIME = "H"
    IS_ALIGNED = "J"
    ECHO = "K"
    PASS_THROUGH = "P"

    def to_bytes(self) -> bytes:
        return self.value.encode(NexStarConstants.TEXT_ENCODING)


class TrackingMode(IntEnum):
    UNKNOWN = -1
    OFF = 0
    ALT_AZ = 1
    EQUATORIAL = 2
    SIDEREAL_PEC = 3

    @classmethod
    def from_byte(cls, value: int) -> "TrackingMode":
        if value < cls.OFF or value not in cls._value2member_map_:
            LOGGER.warning("mount reported unknown tracking mode byte %r", value)
            return cls.UNKNOWN
        return cls(value)

    @classmethod
    def from_name(cls, name: str) -> "TrackingMode":
        key = name.strip().replace("-", "").replace("_", "").lower()
        for mode in cls:
            if mode is cls.UNKNOWN:
                continue
            if mode.name.replace("_", "").lower() == key:
                return mode
        raise NexStarValueError(f"unknown tracking mode {name!r}")

    def to_byte(self) -> bytes:
        if self is TrackingMode.UNKNOWN:
            raise NexStarValueError("UNKNOWN tracking mode can not be sent to the mount")
        return bytes([self.value])


class MountAxis(IntEnum):
    AZM_RA = 0x10
    ALT_DEC = 0x11


class AxisCommand:
    """Selector bytes of the pass-through ('P') commands."""

    LEN_THREE_BYTES = 0x04
    LEN_ONE_BYTE = 0x02
    SET_POSITION = 0x04
    GOTO_SLOW = 0x17
    MOVE_POSITIVE = 0x24
    MOVE_NEGATIVE = 0x25
