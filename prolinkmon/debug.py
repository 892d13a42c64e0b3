"""Packet tracer: logs every Pro DJ Link frame seen on an interface."""

from __future__ import annotations

import sys
from typing import Optional, Sequence

from prolinkmon.network import ProlinkListener, interface_info
from prolinkmon.output import Color, Logger, format_mac
from prolinkmon.protocol import (
    ANNOUNCE_MIN_LENGTH,
    BEATSYNC_MIN_LENGTH,
    AnnounceType,
    BeatsyncType,
    DeviceStatus,
    PacketError,
    compute_status,
    parse_announce,
    parse_beatsync,
    parse_device_status,
)

POLL_TIMEOUT = 0.2
SEPARATOR = "--------------------------"
SILENT_PLAYER = 0x02

_ANNOUNCE_LABELS = {
    AnnounceType.CHANNEL_CLAIM_INIT: "Channel Claim (Stage 1/3)",
    AnnounceType.CHANNEL_CLAIM_SYN: "Channel Claim (Stage 2/3)",
    AnnounceType.CHANNEL_CLAIM_ACK: "Channel Claim (Stage 3/3)",
    AnnounceType.KEEP_ALIVE: "Keep-Alive",
    AnnounceType.INITIALIZE: "Initial Announcement",
}

_BEATSYNC_LABELS = {
    BeatsyncType.FADER_START: "Fader Start",
    BeatsyncType.CHANNEL_ON_AIR: "Channels On Air",
    BeatsyncType.ABSOLUTE_POSITION: "Absolute Position",
    BeatsyncType.MASTER_HANDOFF_REQUEST: "Master Handoff Request",
    BeatsyncType.MASTER_HANDOFF_RESPONSE: "Master Handoff Response",
    BeatsyncType.BEAT: "Beat Information",
    BeatsyncType.SYNC_CONTROL: "Sync Control",
}

# (label, field, format); "s" fields are printed as text
_METRICS = (
    ("Device Name", "device_name", ".20s"),
    ("Packet Type", "packet_type", "02x"),
    ("Packet SubType", "packet_subtype", "02x"),
    ("Player ID", "player_id", "02x"),
    ("Packet Length", "packet_length", "02x"),
    ("Player ID 2", "player_id_b", "02x"),
    ("Activity", "activity", "02x"),
    ("Loaded From ID", "loaded_from", "02x"),
    ("Loaded Slot", "loaded_slot", "02x"),
    ("Track Type", "track_type", "02x"),
    ("Rekordbox ID", "rekordboxid", "02x"),
    ("Track Number", "track_number", "02x"),
    ("USB Activity", "usb_activity", "02x"),
    ("SD Activity", "sd_activity", "02x"),
    ("USB Local", "usb_local", "02x"),
    ("SD Local", "sd_local", "02x"),
    ("Link Available", "link_available", "02x"),
    ("Play Mode", "play_mode", "02x"),
    ("Firmware", "firmware", ".4s"),
    ("Sync Info", "sync", "08x"),
    ("Status Flags", "status_flags", "02x"),
    ("Jog", "play_jog", "02x"),
    ("Pitch", "pitch", "08x"),
    ("Track BPM", "bpm", "04x"),
    ("Play Mode Exte", "play_mode_xt", "02x"),
    ("Master Meaning", "master_mean", "02x"),
    ("Master Handoff", "master_handoff", "02x"),
    ("Current Beat", "beat_count", "08x"),
    ("Next Cue Beat", "next_cue", "04x"),
    ("Down Beat", "downbeat", "02x"),
    ("Media Presence", "media_presence", "02x"),
    ("USB Unsafe", "usb_unsafe", "02x"),
    ("SD Unsafe", "sd_unsafe", "02x"),
    ("Emergency Loop", "emergency", "02x"),
    ("Packet Counter", "packet_counter", "02x"),
    ("Player Type", "player_type", "02x"),
    ("Waveform Color", "waveform_color", "02x"),
    ("Waveform Locat", "waveform_position", "02x"),
    ("Buffer Forward", "buffer_forward", "02x"),
    ("Buffer Backwar", "buffer_backward", "02x"),
    ("Buffer Status", "buffer_status", "02x"),
)


def describe_announce(data: bytes) -> Optional[str]:
    """Describe an announcement frame; None for an unknown frame type."""
    frame = parse_announce(data)
    label = _ANNOUNCE_LABELS.get(frame.type)
    return None if label is None else f"[{frame.name:<20}] {label}"


def describe_beatsync(data: bytes) -> Optional[str]:
    """Describe a beat/sync frame; None for an unknown frame type."""
    frame = parse_beatsync(data)
    label = _BEATSYNC_LABELS.get(frame.type)
    return None if label is None else f"[{frame.name:<20}] {label}"


def status_metrics(status: DeviceStatus) -> list[tuple[str, str]]:
    """Label and formatted value of every reported status field."""
    metrics = []
    for label, field, spec in _METRICS:
        value = getattr(status, field)
        text = format(value, spec)
        if not spec.endswith("s"):
            text = "0x" + text
        metrics.append((label, text))
    return metrics


def _computed_metrics(status: DeviceStatus) -> list[tuple[str, str]]:
    computed = compute_status(status)
    return [
        ("Pitch Computed", f"{computed.pitch:3.3f} %"),
        ("Track BPM Comp", f"{computed.bpm:f}"),
        ("Current BPM Co", f"{computed.live_bpm:3.3f}"),
    ]


def report_status(logger: Logger, source: str, data: bytes) -> bool:
    """Log a status frame in full; False when the frame is not reported."""
    status = parse_device_status(data)
    if status.player_id == SILENT_PLAYER:
        return False
    logger.dump(data)
    for label, value in status_metrics(status):
        logger.metric(source, label, value)
    logger.info(SEPARATOR)
    for label, value in _computed_metrics(status):
        logger.metric(source, label, value)
    return True


def _rejection(data: bytes, minimum: int) -> str:
    if len(data) < minimum:
        return "Packet Length too short, ignoring"
    return "Packet identifier malformed, ignoring"


def _send_keepalive(listener: ProlinkListener, logger: Logger) -> None:
    target = str(listener.info.broadcast)
    logger.send(f"{target:<15}: ANNOUNCE: Keep-Alive")
    listener.send_keepalive()


def _handle_announce(
    listener: ProlinkListener, logger: Logger, source: str, data: bytes
) -> None:
    try:
        text = describe_announce(data)
    except PacketError:
        logger.info(f"{source:<15}: {_rejection(data, ANNOUNCE_MIN_LENGTH)}")
    else:
        if text is not None:
            logger.packet(f"{source:<15}: {text}")

    if len(data) > 10 and data[10] == AnnounceType.KEEP_ALIVE:
        try:
            adopted = listener.adopt_keepalive(data)
        except PacketError as exc:
            logger.info(f"{source:<15}: {exc}")
            return
        if adopted:
            _send_keepalive(listener, logger)


def run(interface: str, logger: Logger) -> None:
    """Trace traffic on an interface until interrupted."""
    info = interface_info(interface)
    logger.info(f"Interface name       : {Color.CYAN}{info.name}{Color.RESET}")
    logger.info(f"Interface MAC Address: {Color.CYAN}{format_mac(info.mac)}{Color.RESET}")
    logger.info(f"Interface IP Address : {Color.CYAN}{info.ip}{Color.RESET}")
    logger.info(f"Interface Broadcast  : {Color.CYAN}{info.broadcast}{Color.RESET}")

    with ProlinkListener(info) as listener:
        while True:
            datagrams = listener.receive(POLL_TIMEOUT)
            if listener.keepalive_due():
                _send_keepalive(listener, logger)
            for channel, source, data in datagrams:
                logger.recv(f"{source:<15}: {channel}")
                if channel == "ANNOUNCE":
                    _handle_announce(listener, logger, source, data)
                elif channel == "CDJSTATUS":
                    try:
                        report_status(logger, source, data)
                    except PacketError as exc:
                        logger.info(f"{source:<15}: {exc}, ignoring")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command entry point: trace the interface named by the first argument."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        print("Missing interface name", file=sys.stderr)
        return 1
    try:
        run(args[0], Logger())
    except KeyboardInterrupt:
        return 0
    except OSError as exc:
        print(f"[-] {args[0]}: {exc}", file=sys.stderr)
        return 1
    return 0