"""Coloured, time-stamped terminal logging and hex dumps."""

from __future__ import annotations

import enum
import sys
import time
from typing import Callable, Optional, TextIO


class Color(str, enum.Enum):
    """ANSI escape sequences used for terminal output."""

    RED = "\033[31;1m"
    YELLOW = "\033[33;1m"
    BLUE = "\033[34;1m"
    GREEN = "\033[32;1m"
    CYAN = "\033[36;1m"
    DARK = "\033[1;38;5;238m"
    MAGENTA = "\033[1;35m"
    LIGHT = "\033[1;38;5;85m"
    DK_LIME = "\033[1;38;5;22m"
    DK_CYAN = "\033[1;38;5;23m"
    BLUECOLA = "\033[1;38;5;32m"
    CARIB = "\033[1;38;5;43m"
    ORANGE = "\033[1;38;5;208m"
    INDIAN = "\033[1;38;5;167m"
    HIGHLI = "\033[48;5;123m\033[1;38;5;232m"
    RESET = "\033[0m"

    def __str__(self) -> str:
        return self.value

    def __format__(self, spec: str) -> str:
        return format(self.value, spec)


def format_mac(mac: bytes) -> str:
    """Colon separated lower-case hex form of a 6 byte MAC address."""
    mac = bytes(mac)
    if len(mac) != 6:
        raise ValueError("MAC address must be 6 bytes")
    return ":".join(f"{byte:02x}" for byte in mac)


def _printable(byte: int) -> str:
    return chr(byte) if 0x20 <= byte < 0x7F else "."


def hexdump(data: bytes) -> list[str]:
    """Rows of 16 bytes: offset, hex values and printable characters."""
    data = bytes(data)
    rows = []
    for offset in range(0, len(data), 16):
        chunk = data[offset : offset + 16]
        hexpart = "".join(f"{byte:02x} " for byte in chunk).ljust(48)
        text = "".join(map(_printable, chunk)).ljust(16)
        rows.append(f"0x{offset:04x}: {hexpart}|{text}|")
    return rows


class Logger:
    """Writes lines stamped with the time elapsed since the logger started."""

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        clock: Callable[[], float] = time.monotonic,
        start: Optional[float] = None,
    ) -> None:
        self.stream = stream if stream is not None else sys.stdout
        self.clock = clock
        self.start = clock() if start is None else start

    def elapsed(self) -> float:
        """Seconds since the logger started."""
        return self.clock() - self.start

    def line(self, color: Color, marker: str, text: str) -> None:
        """Write one coloured, time-stamped line."""
        self.stream.write(f"{color}[{self.elapsed(): 15.6f}] {marker} {text}{Color.RESET}\n")
        self.stream.flush()

    def info(self, text: str) -> None:
        self.line(Color.DARK, "..", text)

    def packet(self, text: str) -> None:
        self.line(Color.BLUECOLA, "--", text)

    def recv(self, text: str) -> None:
        self.line(Color.MAGENTA, ">>", text)

    def send(self, text: str) -> None:
        self.line(Color.LIGHT, "<<", text)

    def metric(self, source: str, name: str, value: str) -> None:
        """Write a named value reported by a source."""
        self.line(Color.INDIAN, "//", f"{source:<15}: {name:<15}:{Color.ORANGE} {value}")

    def dump(self, data: bytes) -> None:
        """Write a hex dump of data, preceded by its size."""
        data = bytes(data)
        self.info(f"  dump: ({len(data)} bytes)")
        for row in hexdump(data):
            self.info(row)