from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .angle import Angle
from .config import NexStarConfig
from .logging_setup import setup_logging
from .mount import NexStarMount
from .protocol import NexStarError, TrackingMode
from .serial_prims import list_ports

LOGGER = logging.getLogger("nexstar.cli")

HELP = """\
pos -- print position
setpos {ra} {dec} -- overwrite position
slew {ra} {dec} -- slew to position
azalt -- print azimuth/altitude
slewazalt {az} {alt} -- slew to azimuth/altitude
cancel -- cancel slew
mode -- print tracking mode
mode {Off|AltAz|Equatorial|SiderealPec} -- set tracking mode
location -- print location
location {lat} {lon} -- set location
time -- print mount's time
time now -- set mount time to present
aligned -- print if mount is aligned
ping -- ping telescope
quit -- leave"""


class MountShell:
    """Line-oriented command interpreter over a ``NexStarMount``."""

    QUIT = ("quit", "exit")
    SCRIPT_COMMENT = "#"

    def __init__(self, mount: NexStarMount, out: Callable[[str], None] = print) -> None:
        self.mount = mount
        self.out = out
        self._commands: Dict[Tuple[str, int], Callable[..., None]] = {
            ("help", 0): self.cmd_help,
            ("pos", 0): self.cmd_pos,
            ("setpos", 2): self.cmd_setpos,
            ("slew", 2): self.cmd_slew,
            ("azalt", 0): self.cmd_azalt,
            ("slewazalt", 2): self.cmd_slewazalt,
            ("cancel", 0): self.cmd_cancel,
            ("mode", 0): self.cmd_mode,
            ("mode", 1): self.cmd_set_mode,
            ("location", 0): self.cmd_location,
            ("location", 2): self.cmd_set_location,
            ("time", 0): self.cmd_time,
            ("time", 1): self.cmd_set_time,
            ("aligned", 0): self.cmd_aligned,
            ("ping", 0): self.cmd_ping,
        }

    def run_line(self, line: str) -> bool:
        """Execute one line; returns False when the shell should stop."""
        words = line.split()
        if not words:
            return True
        if words[0] in self.QUIT:
            return False
        handler = self._commands.get((words[0], len(words) - 1))
        if handler is None:
            self.out(f"Unknown command: {line}")
            return True
        try:
            handler(*words[1:])
        except NexStarError as exc:
            LOGGER.debug("command %r failed", line, exc_info=True)
            self.out(f"Error: {exc}")
        return True

    def run_script(self, lines: Iterable[str]) -> bool:
        for raw in lines:
            line = raw.strip()
            if not line or line.startswith(self.SCRIPT_COMMENT):
                continue
            self.out(f"script> {line}")
            if not self.run_line(line):
                return False
        return True

    def cmd_help(self) -> None:
        self.out(HELP)

    def cmd_pos(self) -> None:
        ra, dec = self.mount.get_ra_dec()
        self.out(f"{ra.to_hms_string()} {dec.to_dms_string()}")

    def cmd_setpos(self, ra: str, dec: str) -> None:
        self.mount.overwrite_ra_dec(Angle.parse(ra), Angle.parse(dec))
        self.out("ok")

    def cmd_slew(self, ra: str, dec: str) -> None:
        self.mount.slew_ra_dec(Angle.parse(ra), Angle.parse(dec))
        self.out("ok")

    def cmd_azalt(self) -> None:
        az, alt = self.mount.get_az_alt()
        self.out(f"{az.to_dms_string()} {alt.to_dms_string()}")

    def cmd_slewazalt(self, az: str, alt: str) -> None:
        self.mount.slew_az_alt(Angle.parse(az), Angle.parse(alt))
        self.out("ok")

    def cmd_cancel(self) -> None:
        self.mount.cancel_slew()
        self.out("ok")

    def cmd_mode(self) -> None:
        self.out(self.mount.get_tracking_mode().name)

    def cmd_set_mode(self, name: str) -> None:
        self.mount.set_tracking_mode(TrackingMode.from_name(name))
        self.out("ok")

    def cmd_location(self) -> None:
        lat, lon = self.mount.get_location()
        self.out(f"{lat.to_dms_string()} {lon.to_dms_string()}")

    def cmd_set_location(self, lat: str, lon: str) -> None:
        self.mount.set_location(Angle.parse(lat), Angle.parse(lon))
        self.out("ok")

    def cmd_time(self) -> None:
        self.out(self.mount.get_time().isoformat(sep=" "))

    def cmd_set_time(self, when: str) -> None:
        if when != "now":
            self.out(f"Unknown command: time {when}")
            return
        self.mount.set_time()
        self.out("ok")

    def cmd_aligned(self) -> None:
        self.out(str(self.mount.is_aligned()).lower())

    def cmd_ping(self) -> None:
        result = self.mount.ping()
        self.out(f"{result.seconds:.4f} seconds (ok={str(result.ok).lower()})")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="nexstar", description="Interactive NexStar mount console")
    ap.add_argument("--port", help="serial device; auto-selected when exactly one exists")
    ap.add_argument("--baud", type=int, default=None)
    ap.add_argument("--timeout", type=float, default=None, help="read and write timeout in seconds")
    ap.add_argument("--log-level", default=None)
    ap.add_argument("--list", action="store_true", help="list serial ports and exit")
    ap.add_argument("--script", type=Path, default=None, help="commands to run before the prompt")
    return ap


def repl(shell: MountShell, stream: Iterable[str], interactive: bool) -> None:
    if interactive:
        print("> ", end="", flush=True)
    for line in stream:
        if not shell.run_line(line.strip()):
            return
        if interactive:
            print("> ", end="", flush=True)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = NexStarConfig.from_env().replace(
            port=args.port,
            baud=args.baud,
            read_timeout_s=args.timeout,
            write_timeout_s=args.timeout,
            log_level=args.log_level,
        )
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    setup_logging(config.level)

    if args.list:
        for port in list_ports():
            print(f"serial: {port}")
        return 0

    try:
        mount = NexStarMount.open(config=config)
    except NexStarError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print("Opened mount connection")
    with mount:
        shell = MountShell(mount)
        if args.script is not None:
            try:
                with args.script.open(encoding="utf-8") as fh:
                    script = fh.readlines()
            except OSError as exc:
                LOGGER.warning("can not read init script %s: %s", args.script, exc)
                print("Couldn't open init script, not running")
            else:
                if not shell.run_script(script):
                    return 0
        repl(shell, sys.stdin, sys.stdin.isatty())
    return 0
