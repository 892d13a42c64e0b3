"""Live full-screen display of every player's status on the link."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Optional, Sequence, TextIO

from prolinkmon.console import Pane, clear_screen, cursor_move, cursor_visible, reset_default
from prolinkmon.debug import SEPARATOR, status_metrics
from prolinkmon.network import ProlinkListener, interface_info
from prolinkmon.output import Color, Logger
from prolinkmon.protocol import (
    STATUS_SIZE,
    AnnounceType,
    Computed,
    DeviceStatus,
    PacketError,
    compute_status,
    parse_device_status,
    play_mode_name,
)

POLL_TIMEOUT = 0.05
PANE_COUNT = 4
STATE_COUNT = 16
OFFLINE_BORDER = 239
ONLINE_BORDER = 37
EXIT_LINE = 42

_TEXT_METRICS = ("Device Name", "Firmware")
_DOWNBEATS = {1: "#...", 2: ".#..", 3: "..#.", 4: "...#"}


def _empty_status() -> DeviceStatus:
    return parse_device_status(bytes(STATUS_SIZE))


@dataclass
class PlayerState:
    """Latest and previous status of one player, with derived values."""

    source: str = ""
    refreshed: bool = False
    status: Optional[DeviceStatus] = None
    status_ref: Optional[DeviceStatus] = None
    computed: Computed = field(default_factory=lambda: Computed(0.0, 0.0, 0.0))
    computed_ref: Computed = field(default_factory=lambda: Computed(0.0, 0.0, 0.0))

    def update(self, status: DeviceStatus, source: str) -> "PlayerState":
        """Record a new status frame, keeping the previous one as reference."""
        self.status_ref = self.status if self.status is not None else _empty_status()
        self.status = status
        self.computed_ref = self.computed
        self.computed = compute_status(status)
        self.refreshed = True
        self.source = source
        return self


def usb_colors(pane: Pane, status: DeviceStatus) -> None:
    """Set the pane colours describing the USB slot."""
    if status.usb_local == 0x04:
        pane.text_color = 238
        pane.background = None
        return

    if status.usb_local == 0x00:
        if status.usb_activity == 0x06:
            pane.text_color = 255
        elif status.usb_activity == 0x04:
            pane.text_color = 245
        pane.background = 235

    if status.usb_local == 0x03:
        pane.text_color = 255
        pane.background = 146

    if status.usb_local == 0x02:
        pane.text_color = 255
        pane.background = 202

    if status.usb_unsafe == 0x01:
        pane.text_color = 255
        pane.background = 160


def sd_colors(pane: Pane, status: DeviceStatus) -> None:
    """Set the pane colours describing the SD slot."""
    pane.text_color = 238

    if status.sd_local == 0x04:
        pane.background = None
        return

    if status.sd_local == 0x00:
        if status.sd_activity == 0x06:
            pane.text_color = 255
        elif status.sd_activity == 0x04:
            pane.text_color = 245
        pane.background = 235

    if status.sd_local in (0x02, 0x03):
        pane.text_color = 255
        pane.background = None

    if status.sd_unsafe == 0x01:
        pane.text_color = 255
        pane.background = 160


def draw_mediainfo(pane: Pane, state: Optional[PlayerState]) -> str:
    """The media slot indicators at the right of a pane."""
    if state is None or state.status is None:
        return ""
    status = state.status
    column = pane.width - 4
    parts = []

    usb_colors(pane, status)
    parts.append(pane.content(1, column, " USB "))

    sd_colors(pane, status)
    parts.append(pane.content(2, column, " SD  "))

    pane.text_color = 235
    pane.background = None
    parts.append(pane.content(3, column, " CD  "))
    parts.append(pane.content(4, column, " ERR "))

    pane.text_color = 240 if state.refreshed else 245
    pane.background = 235
    parts.append(pane.content(5, column, " NET "))

    pane.text_color = 255
    pane.background = None
    return "".join(parts)


def draw_status(pane: Pane, state: PlayerState) -> str:
    """Everything shown in a player's pane; marks the state as drawn."""
    status = state.status
    if status is None:
        raise ValueError("player state holds no status")
    computed = state.computed
    parts = []

    if pane.border_color == OFFLINE_BORDER:
        pane.border_color = ONLINE_BORDER
        parts.append(pane.refresh())

    devname = f"{status.device_name} v{status.firmware}"
    parts.append(draw_mediainfo(pane, state))

    pane.text_color = 96
    parts.append(pane.footer(1, f"{state.source:<15}"))
    pane.text_color = 74
    parts.append(pane.footer(20, f"{devname:>{max(0, pane.width - 20)}}"))

    pane.text_color = 15
    parts.append(pane.content(1, 1, f"Load from: {status.loaded_from}"))

    track_line = (
        f"Track: {status.track_number: 05d} | "
        f"Play: {play_mode_name(status.play_mode):<15} | "
        f"Pitch {computed.pitch:5.3f} | "
        f"BPM {computed.bpm:5.3f} -> {computed.live_bpm:5.3f}"
    )
    parts.append(pane.content(2, 1, track_line))

    buffer_ok = "OK" if status.buffer_status else ""
    beat_line = (
        f"Beat : {status.beat_count: 5d} | "
        f"{_DOWNBEATS.get(status.downbeat, '....')}"
        f" > {status.next_cue: 5d} | "
        f"Buffer: {status.buffer_forward: 02d} {status.buffer_backward: 02d} {buffer_ok}"
    )
    parts.append(pane.content(3, 1, beat_line))

    state.refreshed = False
    return "".join(parts)


def dump_status(logger: Logger, state: PlayerState) -> None:
    """Log a player's status, highlighting values changed since the last frame."""
    if state.status is None:
        raise ValueError("player state holds no status")
    logger.dump(state.status.raw)
    previous = dict(status_metrics(state.status_ref)) if state.status_ref else {}

    for label, value in status_metrics(state.status):
        if label in _TEXT_METRICS:
            continue
        old = previous.get(label, value)
        if value != old:
            logger.line(
                Color.INDIAN,
                "//",
                f"{state.source:<15}: {label:<15}: {Color.HIGHLI}{value}{Color.RESET}",
            )
        else:
            logger.metric(state.source, label, value)

    logger.info(SEPARATOR)


def pane_for(panes: Sequence[Pane], state: PlayerState) -> Pane:
    """The pane showing the player a state belongs to."""
    if state.status is None:
        raise ValueError("player state holds no status")
    index = state.status.player_id - 1
    if not 0 <= index < len(panes):
        raise IndexError(f"no pane for player {state.status.player_id}")
    return panes[index]


def draw_refresh(states: Sequence[PlayerState], panes: Sequence[Pane]) -> str:
    """Redraw the panes of the first player states that hold a status."""
    parts = []
    for state in states[:PANE_COUNT]:
        if state.status is None:
            continue
        try:
            pane = pane_for(panes, state)
        except IndexError:
            continue
        parts.append(draw_status(pane, state))
    return "".join(parts)


def _initial_panes() -> list[Pane]:
    panes = []
    for number in range(1, PANE_COUNT + 1):
        pane = Pane((number - 1) * 10 + 1, 0, 6, 90)
        pane.rename(f"Deck {number}")
        pane.border_color = OFFLINE_BORDER
        panes.append(pane)
    return panes


def run(interface: str, out: TextIO) -> None:
    """Show every player's status on an interface until interrupted."""
    info = interface_info(interface)
    panes = _initial_panes()
    states = [PlayerState() for _ in range(STATE_COUNT)]

    out.write(clear_screen())
    for pane in panes:
        out.write(pane.refresh())
        out.write(pane.footer(1, "Player offline"))
    out.write(cursor_visible(False))
    out.flush()

    try:
        with ProlinkListener(info) as listener:
            while True:
                datagrams = listener.receive(POLL_TIMEOUT)
                if listener.keepalive_due():
                    listener.send_keepalive()

                if not datagrams:
                    out.write(draw_refresh(states, panes))
                    out.flush()
                    continue

                for channel, source, data in datagrams:
                    if channel == "ANNOUNCE":
                        if len(data) > 10 and data[10] == AnnounceType.KEEP_ALIVE:
                            try:
                                if listener.adopt_keepalive(data):
                                    listener.send_keepalive()
                            except PacketError:
                                pass
                    elif channel == "CDJSTATUS":
                        try:
                            status = parse_device_status(data)
                        except PacketError:
                            continue
                        if status.player_id >= len(states):
                            continue
                        state = states[status.player_id].update(status, source)
                        try:
                            pane = pane_for(panes, state)
                        except IndexError:
                            continue
                        out.write(draw_status(pane, state))
                        out.flush()
    finally:
        out.write(cursor_move(EXIT_LINE, 0) + cursor_visible(True) + reset_default())
        out.flush()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command entry point: display the interface named by the first argument."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        print("Missing interface name", file=sys.stderr)
        return 1
    try:
        run(args[0], sys.stdout)
    except KeyboardInterrupt:
        return 0
    except OSError as exc:
        print(f"[-] {args[0]}: {exc}", file=sys.stderr)
        return 1
    return 0