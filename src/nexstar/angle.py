from __future__ import annotations

import dataclasses
import math
import re
from typing import Optional, Tuple, Union

from .protocol import NexStarConstants, NexStarFormatError, NexStarValueError


class AngleConstants:
    DEGREES_PER_TURN = 360.0
    HOURS_PER_TURN = 24.0
    HALF_TURN_DEG = 180.0
    MINUTES_PER_UNIT = 60
    SECONDS_PER_UNIT = 3600
    DMS_BYTES = 3
    SECONDS_DECIMALS = 2
    DEGREE_SIGN = "°"
    SIGN_NEG = "-"
    SIGN_POS = "+"


_NUMBER = r"(\d+(?:\.\d*)?|\.\d+)"
_HMS_RE = re.compile(rf"^([+-]?){_NUMBER}h(?:{_NUMBER}m)?(?:{_NUMBER}s)?$", re.IGNORECASE)
_DMS_RE = re.compile(rf"^([+-]?){_NUMBER}[d°*](?:{_NUMBER}[m'])?(?:{_NUMBER}(?:s|\"|''))?$", re.IGNORECASE)
_COLON_RE = re.compile(rf"^([+-]?){_NUMBER}(?::{_NUMBER})?(?::{_NUMBER})?d?$", re.IGNORECASE)


def _split_sexagesimal(value: float) -> Tuple[int, int, float]:
    whole = int(value)
    remainder = (value - whole) * AngleConstants.MINUTES_PER_UNIT
    minutes = int(remainder)
    seconds = (remainder - minutes) * AngleConstants.MINUTES_PER_UNIT
    return whole, minutes, seconds


def _round_sexagesimal(value: float, decimals: Optional[int] = None) -> Tuple[int, int, float]:
    whole, minutes, seconds = _split_sexagesimal(value)
    seconds = int(round(seconds)) if decimals is None else round(seconds, decimals)
    if seconds >= AngleConstants.MINUTES_PER_UNIT:
        seconds -= AngleConstants.MINUTES_PER_UNIT
        minutes += 1
    if minutes == AngleConstants.MINUTES_PER_UNIT:
        minutes = 0
        whole += 1
    return whole, minutes, seconds


@dataclasses.dataclass(frozen=True)
class Angle:
    """A point on a circle, stored as a (signed) number of turns.

    ``value_mod`` reduces it to [0, 1). The wire encodings live here too:
    the 8-digit hex fraction used by the position commands, the 3-byte
    fixed point payload of the pass-through commands, and the packed
    degree/minute/second triplet of the location record.
    """

    turns: float

    @classmethod
    def from_fraction(cls, value: float) -> "Angle":
        return cls(float(value))

    @classmethod
    def from_degrees(cls, degrees: float) -> "Angle":
        return cls(degrees / AngleConstants.DEGREES_PER_TURN)

    @classmethod
    def from_hours(cls, hours: float) -> "Angle":
        return cls(hours / AngleConstants.HOURS_PER_TURN)

    @classmethod
    def from_dms(cls, negative: bool, degrees: int, minutes: int, seconds: float) -> "Angle":
        magnitude = (
            degrees
            + minutes / AngleConstants.MINUTES_PER_UNIT
            + seconds / AngleConstants.SECONDS_PER_UNIT
        )
        value = -magnitude if negative else magnitude
        return cls.from_degrees(value)

    @property
    def value_mod(self) -> float:
        value = self.turns % 1.0
        # tiny negative inputs round up to exactly 1.0
        if value >= 1.0:
            value = 0.0
        return value

    @property
    def degrees(self) -> float:
        return self.value_mod * AngleConstants.DEGREES_PER_TURN

    @property
    def hours(self) -> float:
        return self.value_mod * AngleConstants.HOURS_PER_TURN

    @property
    def signed_degrees(self) -> float:
        """Degrees in [-180, 180]; keeps the sign of negative zero."""
        degrees = self.turns * AngleConstants.DEGREES_PER_TURN
        if abs(degrees) > AngleConstants.HALF_TURN_DEG:
            degrees = (
                (degrees + AngleConstants.HALF_TURN_DEG) % AngleConstants.DEGREES_PER_TURN
            ) - AngleConstants.HALF_TURN_DEG
        return degrees

    def dms(self) -> Tuple[bool, int, int, int]:
        degrees = self.signed_degrees
        negative = math.copysign(1.0, degrees) < 0
        whole, minutes, seconds = _round_sexagesimal(abs(degrees))
        return negative, whole, minutes, seconds

    def hms(self) -> Tuple[int, int, float]:
        hours, minutes, seconds = _round_sexagesimal(self.hours, AngleConstants.SECONDS_DECIMALS)
        return hours % int(AngleConstants.HOURS_PER_TURN), minutes, seconds

    def to_dms_string(self) -> str:
        degrees = self.signed_degrees
        sign = AngleConstants.SIGN_NEG if math.copysign(1.0, degrees) < 0 else AngleConstants.SIGN_POS
        whole, minutes, seconds = _round_sexagesimal(abs(degrees), AngleConstants.SECONDS_DECIMALS)
        return f"{sign}{whole}{AngleConstants.DEGREE_SIGN}{minutes:02d}'{seconds:05.{AngleConstants.SECONDS_DECIMALS}f}\""

    def to_hms_string(self) -> str:
        hours, minutes, seconds = self.hms()
        return f"{hours}h{minutes:02d}m{seconds:05.{AngleConstants.SECONDS_DECIMALS}f}s"

    # 32-bit hex fraction

    def to_hex32(self, mask_low_byte: bool = True) -> bytes:
        value = int(self.value_mod * NexStarConstants.FULL_CIRCLE) % NexStarConstants.FULL_CIRCLE
        if mask_low_byte:
            value &= NexStarConstants.WRITE_MASK
        return f"{value:0{NexStarConstants.HEX_DIGITS}X}".encode(NexStarConstants.TEXT_ENCODING)

    @classmethod
    def from_hex32(cls, data: Union[bytes, str]) -> "Angle":
        if isinstance(data, str):
            data = data.encode(NexStarConstants.BYTE_ENCODING, errors="replace")
        if len(data) != NexStarConstants.HEX_DIGITS or any(b not in NexStarConstants.HEX_CHARS for b in data):
            raise NexStarFormatError(f"invalid hex angle: {data!r}", reply=data)
        return cls(int(data, 16) / NexStarConstants.FULL_CIRCLE)

    # 3-byte fixed point

    def to_fixed24(self) -> bytes:
        value = self.value_mod
        out = bytearray()
        for _ in range(NexStarConstants.FIXED_POINT_BYTES):
            value *= NexStarConstants.FIXED_POINT_BASE
            digit = int(value)
            out.append(digit)
            value -= digit
        return bytes(out)

    @classmethod
    def from_fixed24(cls, data: bytes) -> "Angle":
        if len(data) != NexStarConstants.FIXED_POINT_BYTES:
            raise NexStarFormatError(f"fixed point angle needs 3 bytes: {data!r}", reply=bytes(data))
        value = 0.0
        scale = 1.0
        for digit in data:
            scale /= NexStarConstants.FIXED_POINT_BASE
            value += digit * scale
        return cls(value)

    # packed degree/minute/second triplet

    def to_dms_bytes(self) -> Tuple[bool, bytes]:
        negative, degrees, minutes, seconds = self.dms()
        return negative, bytes([degrees, minutes, seconds])

    @classmethod
    def from_dms_bytes(cls, negative: bool, data: bytes) -> "Angle":
        if len(data) != AngleConstants.DMS_BYTES:
            raise NexStarFormatError(f"dms triplet needs 3 bytes: {data!r}", reply=bytes(data))
        degrees, minutes, seconds = data
        return cls.from_dms(negative, degrees, minutes, seconds)

    # text input

    @classmethod
    def parse(cls, text: str) -> "Angle":
        """Parse ``12h34m56s`` as hours, or ``12d34m56s``/``12:34:56``/``12.5`` as degrees."""
        value = text.strip().replace(" ", "")
        for pattern, from_unit in (
            (_HMS_RE, cls.from_hours),
            (_DMS_RE, cls.from_degrees),
            (_COLON_RE, cls.from_degrees),
        ):
            match = pattern.match(value)
            if match is None:
                continue
            sign, whole, minutes, seconds = match.groups()
            magnitude = (
                float(whole)
                + float(minutes or 0) / AngleConstants.MINUTES_PER_UNIT
                + float(seconds or 0) / AngleConstants.SECONDS_PER_UNIT
            )
            return from_unit(-magnitude if sign == AngleConstants.SIGN_NEG else magnitude)
        raise NexStarValueError(f"can not parse angle {text!r}")
