"""Interface discovery, UDP listening and keep-alive broadcasting."""

from __future__ import annotations

import fcntl
import ipaddress
import selectors
import socket
import struct
import time
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from prolinkmon.protocol import craft_keepalive

_SIOCGIFHWADDR = 0x8927
_SIOCGIFADDR = 0x8915
_SIOCGIFBRDADDR = 0x8919

DEFAULT_PORTS = (50000, 50001, 50002, 50003, 50004)
KEEPALIVE_PORT = 50000
KEEPALIVE_INTERVAL = 1.4
RECEIVE_SIZE = 1024


@dataclass(frozen=True)
class InterfaceInfo:
    """Addresses of a local network interface."""

    name: str
    mac: bytes
    ip: ipaddress.IPv4Address
    broadcast: ipaddress.IPv4Address


def _ioctl(sock: socket.socket, request: int, name: str) -> Optional[bytes]:
    ifreq = struct.pack("256s", name.encode()[:15])
    try:
        return fcntl.ioctl(sock.fileno(), request, ifreq)
    except OSError:
        return None


def interface_info(name: str) -> InterfaceInfo:
    """Read the MAC, IPv4 and broadcast addresses of an interface.

    Raises OSError if no interface has that name; addresses the interface
    lacks read as zero.
    """
    socket.if_nametoindex(name)
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        hw = _ioctl(sock, _SIOCGIFHWADDR, name)
        addr = _ioctl(sock, _SIOCGIFADDR, name)
        brd = _ioctl(sock, _SIOCGIFBRDADDR, name)
    return InterfaceInfo(
        name=name,
        mac=bytes(hw[18:24]) if hw else bytes(6),
        ip=ipaddress.IPv4Address(addr[20:24] if addr else 0),
        broadcast=ipaddress.IPv4Address(brd[20:24] if brd else 0),
    )


def bind_udp(port: int) -> socket.socket:
    """A non-blocking, broadcast-capable UDP socket bound to every address."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.bind(("", port))
        sock.setblocking(False)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
    except OSError:
        sock.close()
        raise
    return sock


class ProlinkListener:
    """Listens on the Pro DJ Link ports and keeps a virtual player announced."""

    CHANNELS = ("ANNOUNCE", "BEATSYNC", "CDJSTATUS", "PORT50003", "PORT50004")

    def __init__(
        self,
        info: InterfaceInfo,
        ports: Sequence[int] = DEFAULT_PORTS,
        clock: Callable[[], float] = time.monotonic,
        interval: float = KEEPALIVE_INTERVAL,
        keepalive_port: int = KEEPALIVE_PORT,
    ) -> None:
        if len(ports) != len(self.CHANNELS):
            raise ValueError(f"expected {len(self.CHANNELS)} ports, got {len(ports)}")
        self.info = info
        self.ports = tuple(ports)
        self.clock = clock
        self.interval = interval
        self.keepalive_port = keepalive_port
        self.keepalive: Optional[bytes] = None
        self.last_keepalive: Optional[float] = None
        self.sockets: dict[str, socket.socket] = {}
        self._selector: Optional[selectors.BaseSelector] = None

    def open(self) -> "ProlinkListener":
        """Bind every channel's socket."""
        if self._selector is not None:
            return self
        selector = selectors.DefaultSelector()
        try:
            for channel, port in zip(self.CHANNELS, self.ports):
                sock = bind_udp(port)
                self.sockets[channel] = sock
                selector.register(sock, selectors.EVENT_READ, channel)
        except OSError:
            selector.close()
            self._close_sockets()
            raise
        self._selector = selector
        return self

    def _close_sockets(self) -> None:
        for sock in self.sockets.values():
            sock.close()
        self.sockets.clear()

    def close(self) -> None:
        """Close every socket."""
        if self._selector is not None:
            self._selector.close()
            self._selector = None
        self._close_sockets()

    def __enter__(self) -> "ProlinkListener":
        return self.open()

    def __exit__(self, *args) -> None:
        self.close()

    def receive(self, timeout: Optional[float]) -> list[tuple[str, str, bytes]]:
        """Wait up to timeout seconds; return (channel, source, data) datagrams."""
        if self._selector is None:
            raise RuntimeError("listener is not open")
        datagrams = []
        for key, _mask in self._selector.select(timeout):
            try:
                data, (host, _port) = key.fileobj.recvfrom(RECEIVE_SIZE)
            except BlockingIOError:
                continue
            datagrams.append((key.data, host, data))
        return datagrams

    def adopt_keepalive(self, packet: bytes) -> bool:
        """Build the virtual player's keep-alive from a peer's; True if new."""
        if self.keepalive is not None:
            return False
        self.keepalive = craft_keepalive(packet, self.info.mac, self.info.ip)
        return True

    def send_keepalive(self) -> str:
        """Broadcast the keep-alive frame; return the target address."""
        if self.keepalive is None:
            raise RuntimeError("no keep-alive frame adopted yet")
        if self._selector is None:
            raise RuntimeError("listener is not open")
        target = str(self.info.broadcast)
        self.sockets["ANNOUNCE"].sendto(self.keepalive, (target, self.keepalive_port))
        self.last_keepalive = self.clock()
        return target

    def keepalive_due(self, now: Optional[float] = None) -> bool:
        """Whether a keep-alive should be sent again."""
        if self.keepalive is None:
            return False
        if self.last_keepalive is None:
            return True
        if now is None:
            now = self.clock()
        return now - self.last_keepalive > self.interval