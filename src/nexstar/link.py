from __future__ import annotations

import logging
import threading
from typing import Optional

from .protocol import NexStarConstants, NexStarTransportError
from .serial_prims import ByteTransport


class NexStarLink:
    """Runs one command/reply exchange at a time over a byte transport.

    Replies carry no length and no correlation id, so the lock is held for
    the whole write plus the read up to the ``#`` terminator.
    """

    def __init__(self, transport: ByteTransport, logger: Optional[logging.Logger] = None) -> None:
        self.transport = transport
        self.lock = threading.Lock()
        self.log = logger or logging.getLogger("nexstar.link")
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def interact(self, command: bytes) -> bytes:
        with self.lock:
            if self._closed:
                raise NexStarTransportError(f"link is closed, can not send {command!r}")
            self.log.debug("TX raw=%r hex=%s", command, command.hex())
            self.transport.write(command)
            buf = bytearray()
            try:
                while True:
                    b = self.transport.read(1)
                    # end of stream also ends the reply
                    if not b or b == NexStarConstants.TERMINATOR:
                        break
                    buf += b
            except NexStarTransportError:
                self.log.debug("RX failed for %r, partial=%r", command, bytes(buf))
                raise
            self.log.debug("RX raw=%r hex=%s", bytes(buf), buf.hex())
            return bytes(buf)

    def close(self) -> None:
        with self.lock:
            if self._closed:
                return
            self._closed = True
            self.transport.close()

    def __enter__(self) -> "NexStarLink":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
