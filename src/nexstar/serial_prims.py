from __future__ import annotations

import logging
from typing import List, Protocol

import serial
import serial.tools.list_ports

from .protocol import (
    NexStarConnectionError,
    NexStarConstants,
    NexStarTimeoutError,
    NexStarTransportError,
)


class ByteTransport(Protocol):
    def write(self, data: bytes) -> None: ...

    def read(self, size: int = 1) -> bytes: ...

    def close(self) -> None: ...


def list_ports() -> List[str]:
    """Names of the serial devices present on this host."""
    return sorted(info.device for info in serial.tools.list_ports.comports())


class SerialLineDevice:
    """pyserial port fixed at 8N1 with separate read and write timeouts.

    A short read is reported as ``NexStarTimeoutError``: on a serial line
    an empty read only ever means the read timeout expired.
    """

    def __init__(
        self,
        port: str,
        baud: int = NexStarConstants.BAUD,
        read_timeout_s: float = NexStarConstants.READ_TIMEOUT_S,
        write_timeout_s: float = NexStarConstants.WRITE_TIMEOUT_S,
        name: str = "nexstar.serial",
    ):
        self.log = logging.getLogger(name)
        self.port = port
        try:
            self.log.info(
                "Opening serial port %s @ %d baud 8N1 (read_timeout=%.3fs write_timeout=%.3fs)",
                port,
                baud,
                read_timeout_s,
                write_timeout_s,
            )
            self.ser = serial.Serial(
                port=port,
                baudrate=baud,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=read_timeout_s,
                write_timeout=write_timeout_s,
            )
            self.log.info("Serial port %s opened", port)
        except (serial.SerialException, ValueError) as exc:
            self.log.exception("Failed to open serial port %s", port)
            raise NexStarConnectionError(f"can not open serial port {port!r}: {exc}") from exc

    def write(self, data: bytes) -> None:
        try:
            self.ser.write(data)
            self.ser.flush()
        except serial.SerialTimeoutException as exc:
            raise NexStarTimeoutError(f"serial write timeout on {self.port}") from exc
        except serial.SerialException as exc:
            raise NexStarTransportError(f"serial write failed on {self.port}: {exc}") from exc

    def read(self, size: int = 1) -> bytes:
        try:
            data = self.ser.read(size)
        except serial.SerialException as exc:
            raise NexStarTransportError(f"serial read failed on {self.port}: {exc}") from exc
        if len(data) < size:
            raise NexStarTimeoutError(
                f"serial read timeout after {self.ser.timeout or 0.0:.3f}s on {self.port}, got={data!r}"
            )
        return data

    def close(self) -> None:
        try:
            self.ser.close()
            self.log.info("Serial port %s closed", self.port)
        except serial.SerialException:
            self.log.warning("Error while closing serial port %s", self.port, exc_info=True)
