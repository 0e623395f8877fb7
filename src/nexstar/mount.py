from __future__ import annotations

import dataclasses
import datetime as dt
import logging
import time
from typing import List, Optional, Tuple

from .angle import Angle
from .config import NexStarConfig
from .link import NexStarLink
from .protocol import (
    AxisCommand,
    MountAxis,
    NexStarCommand,
    NexStarConnectionError,
    NexStarConstants,
    NexStarFormatError,
    NexStarValueError,
    TrackingMode,
)
from .records import MountLocation, MountTime
from .serial_prims import SerialLineDevice, list_ports

LOGGER = logging.getLogger("nexstar")


@dataclasses.dataclass(frozen=True)
class PingResult:
    seconds: float
    ok: bool


class NexStarMount:
    """NexStar hand controller command set over a serialised link."""

    def __init__(self, link: NexStarLink, logger: Optional[logging.Logger] = None) -> None:
        self.link = link
        self.log = logger or logging.getLogger("nexstar.mount")

    @staticmethod
    def list_ports() -> List[str]:
        return list_ports()

    @classmethod
    def open(cls, port: Optional[str] = None, config: Optional[NexStarConfig] = None) -> "NexStarMount":
        """Open ``port``, or the only serial port on the host when none is given."""
        config = config or NexStarConfig()
        port = port or config.port
        if port is None:
            ports = list_ports()
            if len(ports) != 1:
                raise NexStarConnectionError(
                    f"expected exactly one serial port to auto-select, found {len(ports)}: {ports!r}"
                )
            port = ports[0]
            LOGGER.info("auto-selected serial port %s", port)
        dev = SerialLineDevice(
            port,
            baud=config.baud,
            read_timeout_s=config.read_timeout_s,
            write_timeout_s=config.write_timeout_s,
        )
        return cls(NexStarLink(dev))

    def close(self) -> None:
        self.link.close()

    def __enter__(self) -> "NexStarMount":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # position

    def get_ra_dec(self) -> Tuple[Angle, Angle]:
        self.log.info("get ra/dec")
        return self._query_pair(NexStarCommand.GET_RA_DEC)

    def overwrite_ra_dec(self, ra: Angle, dec: Angle) -> None:
        self.log.info("overwrite ra/dec ra=%s dec=%s", ra.to_hms_string(), dec.to_dms_string())
        self._send_pair(NexStarCommand.SET_RA_DEC, ra, dec)

    def slew_ra_dec(self, ra: Angle, dec: Angle) -> None:
        self.log.info("slew ra/dec ra=%s dec=%s", ra.to_hms_string(), dec.to_dms_string())
        self._send_pair(NexStarCommand.SLEW_RA_DEC, ra, dec)

    def get_az_alt(self) -> Tuple[Angle, Angle]:
        self.log.info("get az/alt")
        return self._query_pair(NexStarCommand.GET_AZ_ALT)

    def slew_az_alt(self, az: Angle, alt: Angle) -> None:
        self.log.info("slew az/alt az=%s alt=%s", az.to_dms_string(), alt.to_dms_string())
        self._send_pair(NexStarCommand.SLEW_AZ_ALT, az, alt)

    def cancel_slew(self) -> None:
        self.log.info("cancel slew")
        self._command(NexStarCommand.CANCEL_SLEW.to_bytes())

    # tracking

    def get_tracking_mode(self) -> TrackingMode:
        command = NexStarCommand.GET_TRACKING_MODE.to_bytes()
        reply = self.link.interact(command)
        if not reply:
            raise NexStarFormatError(f"empty reply to {command!r}", command=command, reply=reply)
        return TrackingMode.from_byte(reply[0])

    def set_tracking_mode(self, mode: TrackingMode) -> None:
        self.log.info("set tracking mode mode=%s", mode.name)
        self._command(NexStarCommand.SET_TRACKING_MODE.to_bytes() + mode.to_byte())

    # site and clock

    def get_location(self) -> Tuple[Angle, Angle]:
        reply = self.link.interact(NexStarCommand.GET_LOCATION.to_bytes())
        location = MountLocation.from_bytes(reply)
        return location.latitude, location.longitude

    def set_location(self, lat: Angle, lon: Angle) -> None:
        self.log.info("set location lat=%s lon=%s", lat.to_dms_string(), lon.to_dms_string())
        record = MountLocation(latitude=lat, longitude=lon).to_bytes()
        self._command(NexStarCommand.SET_LOCATION.to_bytes() + record)

    def get_time(self, host_offset: Optional[int] = None) -> dt.datetime:
        reply = self.link.interact(NexStarCommand.GET_TIME.to_bytes())
        return MountTime.from_bytes(reply).to_host_datetime(host_offset)

    def set_time(self, when: Optional[dt.datetime] = None, utc_offset: Optional[int] = None) -> None:
        record = MountTime.now(utc_offset) if when is None else MountTime.from_datetime(when, utc_offset)
        self.log.info("set time time=%s", record)
        self._command(NexStarCommand.SET_TIME.to_bytes() + record.to_bytes())

    # misc

    def is_aligned(self) -> bool:
        return self.link.interact(NexStarCommand.IS_ALIGNED.to_bytes()) != NexStarConstants.NOT_ALIGNED

    def echo(self, char: str) -> str:
        """Send one character and return the first character the mount sends back."""
        if len(char) != 1:
            raise NexStarValueError(f"echo takes exactly one character, got {char!r}")
        try:
            payload = char.encode(NexStarConstants.BYTE_ENCODING)
        except UnicodeEncodeError as exc:
            raise NexStarValueError(f"echo character does not fit a byte: {char!r}") from exc
        command = NexStarCommand.ECHO.to_bytes() + payload
        reply = self.link.interact(command)
        if not reply:
            raise NexStarFormatError(f"empty reply to {command!r}", command=command, reply=reply)
        return reply[:1].decode(NexStarConstants.BYTE_ENCODING)

    def ping(self) -> PingResult:
        start = time.monotonic()
        ok = self.echo(NexStarConstants.PING_CHAR) == NexStarConstants.PING_CHAR
        return PingResult(seconds=time.monotonic() - start, ok=ok)

    # pass-through motor commands

    def reset_axis_position(self, axis: MountAxis, position: Angle) -> None:
        self.log.info("reset axis position axis=%s position=%s", axis.name, position.to_dms_string())
        self._pass_through_three(axis, AxisCommand.SET_POSITION, position)

    def slow_goto(self, axis: MountAxis, position: Angle) -> None:
        self.log.info("slow goto axis=%s position=%s", axis.name, position.to_dms_string())
        self._pass_through_three(axis, AxisCommand.GOTO_SLOW, position)

    def fixed_rate_slew(self, axis: MountAxis, speed: int) -> None:
        rate = abs(speed)
        if rate >= NexStarConstants.BYTE_RANGE:
            raise NexStarValueError(f"slew rate does not fit a byte: {speed!r}")
        self.log.info("fixed rate slew axis=%s speed=%s", axis.name, speed)
        selector = AxisCommand.MOVE_POSITIVE if speed > 0 else AxisCommand.MOVE_NEGATIVE
        self._pass_through(AxisCommand.LEN_ONE_BYTE, axis, selector, bytes([rate]))

    def reset_ra(self, position: Angle) -> None:
        self.reset_axis_position(MountAxis.AZM_RA, position)

    def reset_dec(self, position: Angle) -> None:
        self.reset_axis_position(MountAxis.ALT_DEC, position)

    def slow_goto_ra(self, position: Angle) -> None:
        self.slow_goto(MountAxis.AZM_RA, position)

    def slow_goto_dec(self, position: Angle) -> None:
        self.slow_goto(MountAxis.ALT_DEC, position)

    def fixed_slew_ra(self, speed: int) -> None:
        self.fixed_rate_slew(MountAxis.AZM_RA, speed)

    def fixed_slew_dec(self, speed: int) -> None:
        self.fixed_rate_slew(MountAxis.ALT_DEC, speed)

    # helpers

    def _command(self, command: bytes) -> None:
        reply = self.link.interact(command)
        if reply:
            raise NexStarFormatError(
                f"unexpected reply to {command[:1]!r}: {reply!r}",
                command=command,
                reply=reply,
            )

    def _query_pair(self, cmd: NexStarCommand) -> Tuple[Angle, Angle]:
        command = cmd.to_bytes()
        reply = self.link.interact(command)
        fields = reply.split(NexStarConstants.PAIR_SEP)
        if len(fields) != NexStarConstants.PAIR_FIELDS:
            raise NexStarFormatError(f"invalid response to {cmd.value!r}: {reply!r}", command=command, reply=reply)
        try:
            first, second = (Angle.from_hex32(field) for field in fields)
        except NexStarFormatError as exc:
            raise NexStarFormatError(
                f"invalid response to {cmd.value!r}: {reply!r}", command=command, reply=reply
            ) from exc
        return first, second

    def _send_pair(self, cmd: NexStarCommand, first: Angle, second: Angle) -> None:
        payload = first.to_hex32() + NexStarConstants.PAIR_SEP + second.to_hex32()
        self._command(cmd.to_bytes() + payload)

    def _pass_through_three(self, axis: MountAxis, selector: int, position: Angle) -> None:
        self._pass_through(AxisCommand.LEN_THREE_BYTES, axis, selector, position.to_fixed24())

    def _pass_through(self, length: int, axis: MountAxis, selector: int, payload: bytes) -> None:
        frame = NexStarCommand.PASS_THROUGH.to_bytes() + bytes([length, axis, selector]) + payload
        frame = frame.ljust(NexStarConstants.P_FRAME_LEN, bytes([NexStarConstants.P_PAD]))
        self._command(frame)
