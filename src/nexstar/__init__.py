from __future__ import annotations

from .angle import Angle
from .config import NexStarConfig
from .link import NexStarLink
from .mount import NexStarMount, PingResult
from .protocol import (
    MountAxis,
    NexStarCommand,
    NexStarConnectionError,
    NexStarError,
    NexStarFormatError,
    NexStarTimeoutError,
    NexStarTransportError,
    NexStarValueError,
    TrackingMode,
)
from .records import MountLocation, MountTime
from .serial_prims import SerialLineDevice, list_ports

__all__ = [
    "Angle",
    "MountAxis",
    "MountLocation",
    "MountTime",
    "NexStarCommand",
    "NexStarConfig",
    "NexStarConnectionError",
    "NexStarError",
    "NexStarFormatError",
    "NexStarLink",
    "NexStarMount",
    "NexStarTimeoutError",
    "NexStarTransportError",
    "NexStarValueError",
    "PingResult",
    "SerialLineDevice",
    "TrackingMode",
    "list_ports",
]
