from __future__ import annotations

import collections
import threading
import time
from typing import Callable, Deque, List, Optional, Tuple

import pytest

from nexstar.link import NexStarLink
from nexstar.mount import NexStarMount
from nexstar.protocol import NexStarTransportError


class ScriptedTransport:
    """In-memory stand-in for the serial port.

    Every write releases the next queued reply (or the responder's answer)
    into the receive buffer; reads drain it byte by byte and return b"" once
    it is empty, like a stream at its end.
    """

    def __init__(
        self,
        responder: Optional[Callable[[bytes], bytes]] = None,
        read_delay_s: float = 0.0,
    ) -> None:
        self.written: List[bytes] = []
        self.events: List[Tuple[str, bytes]] = []
        self.closed = False
        self._responder = responder
        self._read_delay_s = read_delay_s
        self._replies: Deque[bytes] = collections.deque()
        self._rx = bytearray()
        self._guard = threading.Lock()

    def queue(self, *replies: bytes) -> None:
        self._replies.extend(replies)

    def feed(self, data: bytes) -> None:
        self._rx += data

    def write(self, data: bytes) -> None:
        if self.closed:
            raise NexStarTransportError("port closed")
        with self._guard:
            self.written.append(bytes(data))
            self.events.append(("tx", bytes(data)))
            if self._responder is not None:
                self._rx += self._responder(bytes(data))
            elif self._replies:
                self._rx += self._replies.popleft()

    def read(self, size: int = 1) -> bytes:
        if self._read_delay_s:
            time.sleep(self._read_delay_s)
        with self._guard:
            data = bytes(self._rx[:size])
            del self._rx[:size]
            self.events.append(("rx", data))
        return data

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def transport() -> ScriptedTransport:
    return ScriptedTransport()


@pytest.fixture
def link(transport: ScriptedTransport) -> NexStarLink:
    return NexStarLink(transport)


@pytest.fixture
def mount(link: NexStarLink) -> NexStarMount:
    return NexStarMount(link)
