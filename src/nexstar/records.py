from __future__ import annotations

import dataclasses
import datetime as dt
import logging
from typing import Optional

from .angle import Angle
from .protocol import NexStarConstants, NexStarFormatError, NexStarValueError

LOGGER = logging.getLogger("nexstar.records")

SECONDS_PER_HOUR = 3600


def host_utc_offset_hours(when: Optional[dt.datetime] = None) -> int:
    """Whole-hour UTC offset of the host for ``when`` (default: now), daylight saving included.

    Naive datetimes are taken as host-local time. Fractional zones truncate
    toward zero, so -3:30 reports -3.
    """
    if when is None:
        when = dt.datetime.now()
    aware = when if when.tzinfo is not None else when.astimezone()
    offset = aware.utcoffset() or dt.timedelta(0)
    return int(offset.total_seconds() / SECONDS_PER_HOUR)


def _sign_byte(negative: bool) -> int:
    return NexStarConstants.SIGN_NEGATIVE if negative else NexStarConstants.SIGN_POSITIVE


def _check_record(data: bytes, kind: str) -> bytes:
    if len(data) != NexStarConstants.RECORD_LEN:
        raise NexStarFormatError(f"invalid {kind}: {bytes(data)!r}", reply=bytes(data))
    return bytes(data)


@dataclasses.dataclass(frozen=True)
class MountLocation:
    latitude: Angle
    longitude: Angle

    @classmethod
    def from_bytes(cls, data: bytes) -> "MountLocation":
        # [lat d, m, s, south, lon d, m, s, west]
        data = _check_record(data, "lat/lon")
        latitude = Angle.from_dms_bytes(data[3] == NexStarConstants.SIGN_NEGATIVE, data[0:3])
        longitude = Angle.from_dms_bytes(data[7] == NexStarConstants.SIGN_NEGATIVE, data[4:7])
        return cls(latitude=latitude, longitude=longitude)

    def to_bytes(self) -> bytes:
        lat_negative, lat = self.latitude.to_dms_bytes()
        lon_negative, lon = self.longitude.to_dms_bytes()
        return lat + bytes([_sign_byte(lat_negative)]) + lon + bytes([_sign_byte(lon_negative)])


@dataclasses.dataclass(frozen=True)
class MountTime:
    """The mount's 8-byte clock record.

    ``utc_offset`` is the signed zone byte as stored; ``dst`` is the
    daylight-saving flag. The offset the mount actually means is
    ``effective_offset``.
    """

    hour: int
    minute: int
    second: int
    month: int
    day: int
    year: int
    utc_offset: int
    dst: bool = False

    @property
    def effective_offset(self) -> int:
        return self.utc_offset - 1 if self.dst else self.utc_offset

    @classmethod
    def from_bytes(cls, data: bytes) -> "MountTime":
        # [hour, minute, second, month, day, year - 2000, zone, dst]
        data = _check_record(data, "time")
        offset = data[6]
        if offset >= NexStarConstants.SIGNED_BYTE_LIMIT:
            offset -= NexStarConstants.BYTE_RANGE
        return cls(
            hour=data[0],
            minute=data[1],
            second=data[2],
            month=data[3],
            day=data[4],
            year=data[5] + NexStarConstants.YEAR_BASE,
            utc_offset=offset,
            dst=data[7] == NexStarConstants.DST_ON,
        )

    @classmethod
    def from_datetime(cls, when: dt.datetime, utc_offset: Optional[int] = None) -> "MountTime":
        if utc_offset is None:
            utc_offset = host_utc_offset_hours(when)
        return cls(
            hour=when.hour,
            minute=when.minute,
            second=when.second,
            month=when.month,
            day=when.day,
            year=when.year,
            utc_offset=utc_offset,
        )

    @classmethod
    def now(cls, utc_offset: Optional[int] = None) -> "MountTime":
        return cls.from_datetime(dt.datetime.now(), utc_offset)

    def to_bytes(self) -> bytes:
        offset = self.utc_offset
        if offset < 0:
            offset += NexStarConstants.BYTE_RANGE
        fields = [
            self.hour,
            self.minute,
            self.second,
            self.month,
            self.day,
            self.year - NexStarConstants.YEAR_BASE,
            offset,
            # daylight saving is already folded into the offset
            NexStarConstants.DST_OFF,
        ]
        try:
            return bytes(fields)
        except ValueError as exc:
            raise NexStarValueError(f"time does not fit the mount record: {self!r}") from exc

    def to_datetime(self) -> dt.datetime:
        try:
            return dt.datetime(self.year, self.month, self.day, self.hour, self.minute, self.second)
        except ValueError as exc:
            raise NexStarFormatError(f"invalid time: {self!r}") from exc

    def to_host_datetime(self, host_offset: Optional[int] = None) -> dt.datetime:
        """Naive host-local datetime, corrected when the mount runs in another zone."""
        local = self.to_datetime()
        mount_offset = self.effective_offset
        if host_offset is None:
            host_offset = host_utc_offset_hours()
        if mount_offset != host_offset:
            delta = host_offset - mount_offset
            LOGGER.warning(
                "mount thinks it's in a different timezone: mount=%+d host=%+d, shifting reported time by %+d h",
                mount_offset,
                host_offset,
                delta,
            )
            local += dt.timedelta(hours=delta)
        return local
