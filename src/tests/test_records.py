from __future__ import annotations

import datetime as dt
import logging

import pytest

from nexstar.angle import Angle
from nexstar.protocol import NexStarFormatError, NexStarValueError
from nexstar.records import MountLocation, MountTime, host_utc_offset_hours

LOCATIONS = [
    bytes([33, 30, 15, 1, 151, 12, 45, 0]),
    bytes([51, 28, 38, 0, 0, 0, 5, 1]),
    bytes([0, 0, 0, 1, 0, 0, 0, 1]),
    bytes([89, 59, 59, 0, 180, 0, 0, 1]),
    bytes([45, 0, 0, 0, 122, 40, 30, 1]),
]


@pytest.mark.parametrize("raw", LOCATIONS)
def test_location_round_trip(raw: bytes) -> None:
    assert MountLocation.from_bytes(raw).to_bytes() == raw


def test_location_decode_values() -> None:
    location = MountLocation.from_bytes(LOCATIONS[0])
    assert location.latitude.signed_degrees == pytest.approx(-(33 + 30 / 60 + 15 / 3600))
    assert location.longitude.signed_degrees == pytest.approx(151 + 12 / 60 + 45 / 3600)


def test_location_encode() -> None:
    location = MountLocation(latitude=Angle.from_degrees(51.5), longitude=Angle.from_degrees(-0.125))
    assert location.to_bytes() == bytes([51, 30, 0, 0, 0, 7, 30, 1])


@pytest.mark.parametrize("raw", [b"", bytes(7), bytes(9)])
def test_location_rejects_wrong_length(raw: bytes) -> None:
    with pytest.raises(NexStarFormatError) as info:
        MountLocation.from_bytes(raw)
    assert info.value.reply == raw


def test_time_decode_negative_offset() -> None:
    record = MountTime.from_bytes(bytes([20, 15, 30, 6, 21, 24, 251, 0]))
    assert record == MountTime(hour=20, minute=15, second=30, month=6, day=21, year=2024, utc_offset=-5, dst=False)
    assert record.effective_offset == -5


def test_time_decode_dst_subtracts_an_hour() -> None:
    record = MountTime.from_bytes(bytes([1, 2, 3, 1, 15, 25, 3, 1]))
    assert record.utc_offset == 3
    assert record.dst
    assert record.effective_offset == 2


def test_time_encode_wraps_negative_offset() -> None:
    record = MountTime.from_datetime(dt.datetime(2024, 6, 21, 20, 15, 30), utc_offset=-5)
    assert record.to_bytes() == bytes([20, 15, 30, 6, 21, 24, 251, 0])


@pytest.mark.parametrize("offset", range(-12, 15))
@pytest.mark.parametrize("dst", [0, 1])
def test_time_round_trip_normalizes_dst(offset: int, dst: int) -> None:
    raw = bytes([23, 59, 58, 12, 31, 99, offset % 256, dst])
    assert MountTime.from_bytes(raw).to_bytes() == raw[:7] + b"\x00"


def test_time_round_trip_through_host_datetime() -> None:
    raw = bytes([8, 30, 0, 3, 10, 26, 254, 0])
    when = MountTime.from_bytes(raw).to_host_datetime(host_offset=-2)
    assert when == dt.datetime(2026, 3, 10, 8, 30, 0)
    assert MountTime.from_datetime(when, utc_offset=-2).to_bytes() == raw


def test_time_to_host_datetime_same_zone_is_untouched(caplog: pytest.LogCaptureFixture) -> None:
    record = MountTime.from_bytes(bytes([10, 0, 0, 5, 1, 24, 2, 0]))
    with caplog.at_level(logging.WARNING, logger="nexstar.records"):
        assert record.to_host_datetime(host_offset=2) == dt.datetime(2024, 5, 1, 10, 0, 0)
    assert not caplog.records


def test_time_to_host_datetime_shifts_other_zone(caplog: pytest.LogCaptureFixture) -> None:
    record = MountTime.from_bytes(bytes([10, 0, 0, 5, 1, 24, 2, 0]))
    with caplog.at_level(logging.WARNING, logger="nexstar.records"):
        assert record.to_host_datetime(host_offset=0) == dt.datetime(2024, 5, 1, 8, 0, 0)
    assert "different timezone" in caplog.text


def test_time_to_host_datetime_applies_dst_before_compare() -> None:
    record = MountTime.from_bytes(bytes([23, 30, 0, 12, 31, 24, 1, 1]))
    assert record.to_host_datetime(host_offset=0) == dt.datetime(2024, 12, 31, 23, 30, 0)
    assert record.to_host_datetime(host_offset=1) == dt.datetime(2025, 1, 1, 0, 30, 0)


@pytest.mark.parametrize("raw", [b"", bytes(7), bytes(9)])
def test_time_rejects_wrong_length(raw: bytes) -> None:
    with pytest.raises(NexStarFormatError):
        MountTime.from_bytes(raw)


def test_time_rejects_impossible_calendar() -> None:
    record = MountTime.from_bytes(bytes([10, 0, 0, 13, 1, 24, 0, 0]))
    with pytest.raises(NexStarFormatError):
        record.to_datetime()


def test_time_encode_rejects_year_outside_record() -> None:
    with pytest.raises(NexStarValueError):
        MountTime.from_datetime(dt.datetime(1999, 1, 1), utc_offset=0).to_bytes()


def test_host_offset_truncates_fractional_zones() -> None:
    minus_330 = dt.timezone(-dt.timedelta(hours=3, minutes=30))
    plus_545 = dt.timezone(dt.timedelta(hours=5, minutes=45))
    assert host_utc_offset_hours(dt.datetime(2024, 1, 1, tzinfo=minus_330)) == -3
    assert host_utc_offset_hours(dt.datetime(2024, 1, 1, tzinfo=plus_545)) == 5
    assert host_utc_offset_hours(dt.datetime(2024, 1, 1, tzinfo=dt.timezone.utc)) == 0
