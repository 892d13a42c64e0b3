"""Pro DJ Link packet layouts, parsing and derived values."""

from __future__ import annotations

import enum
import ipaddress
import struct
from dataclasses import dataclass
from typing import Optional, Union

PROLINK_ID = b"Qspt1WmJOL"

ANNOUNCE_MIN_LENGTH = 32
BEATSYNC_MIN_LENGTH = 32
STATUS_MIN_LENGTH = 34
STATUS_SIZE = 288
KEEPALIVE_SIZE = 54

VIRTUAL_NAME = b"CDJ-VIRTUAL"


class PacketError(ValueError):
    """Raised when a packet is too short or not a Pro DJ Link frame."""


class AnnounceType(enum.IntEnum):
    CHANNEL_CLAIM_INIT = 0x00
    CHANNEL_CLAIM_SYN = 0x02
    CHANNEL_CLAIM_ACK = 0x04
    KEEP_ALIVE = 0x06
    INITIALIZE = 0x0A


class BeatsyncType(enum.IntEnum):
    FADER_START = 0x02
    CHANNEL_ON_AIR = 0x03
    ABSOLUTE_POSITION = 0x0B
    MASTER_HANDOFF_REQUEST = 0x26
    MASTER_HANDOFF_RESPONSE = 0x27
    BEAT = 0x28
    SYNC_CONTROL = 0x2A


class PlayMode(enum.IntEnum):
    UNLOADED = 0x00
    LOADING = 0x02
    PLAYING = 0x03
    LOOP = 0x04
    PAUSED = 0x05
    CUE_PAUSE = 0x06
    CUE_PLAY = 0x07
    CUE_SCRATCH = 0x08
    SEEKING = 0x09
    ENDED = 0x11


class SlotType(enum.IntEnum):
    NOT_LOADED = 0x00
    CD_DRIVE = 0x01
    SD_DRIVE = 0x02
    USB_DRIVE = 0x03
    REKORDBOX = 0x04


class TrackType(enum.IntEnum):
    NOT_LOADED = 0x00
    ANALYZED = 0x01
    UNANALYZED = 0x02
    CD = 0x05


class LocalState(enum.IntEnum):
    LOADED = 0x00
    EJECT_REQUEST = 0x02
    UNMOUNTING = 0x03
    UNLOADED = 0x04


_PLAY_MODE_NAMES = {
    PlayMode.UNLOADED: "Unloaded",
    PlayMode.LOADING: "Loading",
    PlayMode.PLAYING: "Playing",
    PlayMode.LOOP: "In Loop",
    PlayMode.PAUSED: "Paused",
    PlayMode.CUE_PAUSE: "Cue",
    PlayMode.CUE_PLAY: "Cueing",
    PlayMode.CUE_SCRATCH: "Cue Scratch",
    PlayMode.SEEKING: "Seeking",
    PlayMode.ENDED: "Ended",
}


def play_mode_name(mode: int) -> str:
    """Human readable name of a play mode byte."""
    return _PLAY_MODE_NAMES.get(mode, "Unknown")


def _cstring(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("ascii", "replace")


def _check_header(data: bytes, minimum: int) -> None:
    if len(data) < minimum:
        raise PacketError(f"packet length too short ({len(data)} bytes)")
    if data[: len(PROLINK_ID)] != PROLINK_ID:
        raise PacketError("packet identifier malformed")


@dataclass(frozen=True)
class Announce:
    """A frame received on the announcement channel."""

    type: int
    name: str

    @property
    def kind(self) -> Optional[AnnounceType]:
        try:
            return AnnounceType(self.type)
        except ValueError:
            return None


@dataclass(frozen=True)
class Beatsync:
    """A frame received on the beat and sync channel."""

    type: int
    name: str

    @property
    def kind(self) -> Optional[BeatsyncType]:
        try:
            return BeatsyncType(self.type)
        except ValueError:
            return None


def parse_announce(data: bytes) -> Announce:
    """Decode an announcement frame."""
    data = bytes(data)
    _check_header(data, ANNOUNCE_MIN_LENGTH)
    return Announce(type=data[10], name=_cstring(data[12:32]))


def parse_beatsync(data: bytes) -> Beatsync:
    """Decode a beat/sync frame."""
    data = bytes(data)
    _check_header(data, BEATSYNC_MIN_LENGTH)
    return Beatsync(type=data[10], name=_cstring(data[11:31]))


# name -> (offset, size, struct code); codes starting with "s" are text fields
_STATUS_LAYOUT = {
    "frame_type": (10, 1, "B"),
    "device_name": (11, 20, "s"),
    "packet_type": (31, 1, "B"),
    "packet_subtype": (32, 1, "B"),
    "player_id": (33, 1, "B"),
    "packet_length": (34, 2, "H"),
    "player_id_b": (36, 1, "B"),
    "activity": (39, 1, "B"),
    "loaded_from": (40, 1, "B"),
    "loaded_slot": (41, 1, "B"),
    "track_type": (42, 1, "B"),
    "rekordboxid": (44, 4, "I"),
    "track_number": (50, 2, "H"),
    "usb_activity": (106, 1, "B"),
    "sd_activity": (107, 1, "B"),
    "usb_local": (111, 1, "B"),
    "sd_local": (115, 1, "B"),
    "link_available": (117, 1, "B"),
    "play_mode": (123, 1, "B"),
    "firmware": (124, 4, "s"),
    "sync": (132, 4, "I"),
    "status_flags": (137, 1, "B"),
    "play_jog": (139, 1, "B"),
    "pitch": (140, 4, "I"),
    "master_bpm": (144, 2, "H"),
    "bpm": (146, 2, "H"),
    "pitch2": (152, 4, "I"),
    "play_mode_xt": (157, 1, "B"),
    "master_mean": (158, 1, "B"),
    "master_handoff": (159, 1, "B"),
    "beat_count": (160, 4, "I"),
    "next_cue": (164, 2, "H"),
    "downbeat": (166, 1, "B"),
    "media_presence": (183, 1, "B"),
    "usb_unsafe": (184, 1, "B"),
    "sd_unsafe": (185, 1, "B"),
    "emergency": (186, 1, "B"),
    "pitch3": (192, 4, "I"),
    "pitch4": (196, 4, "I"),
    "packet_counter": (200, 4, "I"),
    "player_type": (204, 1, "B"),
    "touch_audio": (205, 1, "B"),
    "waveform_color": (250, 1, "B"),
    "waveform_position": (253, 1, "B"),
    "buffer_forward": (285, 1, "B"),
    "buffer_backward": (286, 1, "B"),
    "buffer_status": (287, 1, "B"),
}


@dataclass(frozen=True)
class DeviceStatus:
    """A player status frame; ``raw`` always holds the full record."""

    raw: bytes
    frame_type: int
    device_name: str
    packet_type: int
    packet_subtype: int
    player_id: int
    packet_length: int
    player_id_b: int
    activity: int
    loaded_from: int
    loaded_slot: int
    track_type: int
    rekordboxid: int
    track_number: int
    usb_activity: int
    sd_activity: int
    usb_local: int
    sd_local: int
    link_available: int
    play_mode: int
    firmware: str
    sync: int
    status_flags: int
    play_jog: int
    pitch: int
    master_bpm: int
    bpm: int
    pitch2: int
    play_mode_xt: int
    master_mean: int
    master_handoff: int
    beat_count: int
    next_cue: int
    downbeat: int
    media_presence: int
    usb_unsafe: int
    sd_unsafe: int
    emergency: int
    pitch3: int
    pitch4: int
    packet_counter: int
    player_type: int
    touch_audio: int
    waveform_color: int
    waveform_position: int
    buffer_forward: int
    buffer_backward: int
    buffer_status: int

    def field_bytes(self, name: str) -> bytes:
        """Raw wire bytes of the named field."""
        try:
            offset, size, _ = _STATUS_LAYOUT[name]
        except KeyError:
            raise KeyError(f"unknown status field: {name}") from None
        return self.raw[offset : offset + size]


def parse_device_status(data: bytes) -> DeviceStatus:
    """Decode a player status frame; missing trailing bytes read as zero."""
    data = bytes(data)
    if len(data) < STATUS_MIN_LENGTH:
        raise PacketError(f"status packet too short ({len(data)} bytes)")
    raw = data[:STATUS_SIZE].ljust(STATUS_SIZE, b"\0")
    values = {}
    for name, (offset, size, code) in _STATUS_LAYOUT.items():
        if code == "s":
            values[name] = _cstring(raw[offset : offset + size])
        else:
            (values[name],) = struct.unpack_from(">" + code, raw, offset)
    return DeviceStatus(raw=raw, **values)


@dataclass(frozen=True)
class Computed:
    """Values derived from a status frame."""

    pitch: float
    bpm: float
    live_bpm: float


def compute_status(status: DeviceStatus) -> Computed:
    """Pitch percentage, track tempo and effective tempo of a status frame."""
    raw_pitch = status.pitch & 0xFFFFFF
    pitch = 100.0 * ((raw_pitch - 0x100000) / float(0x100000))
    raw_bpm = status.bpm
    return Computed(
        pitch=pitch,
        bpm=raw_bpm / 100.0,
        live_bpm=(float(raw_bpm * raw_pitch) / 0x100000) / 100,
    )


def craft_keepalive(
    packet: bytes,
    mac: bytes,
    ip: Union[str, bytes, ipaddress.IPv4Address],
) -> bytes:
    """Turn a peer's keep-alive frame into one announcing a virtual player."""
    if len(packet) < KEEPALIVE_SIZE:
        raise PacketError(f"keep-alive packet too short ({len(packet)} bytes)")
    mac = bytes(mac)
    if len(mac) != 6:
        raise ValueError("MAC address must be 6 bytes")
    address = ipaddress.IPv4Address(ip).packed

    frame = bytearray(packet)
    name = VIRTUAL_NAME + b"\0"
    frame[12 : 12 + len(name)] = name
    frame[36] = 0x01
    frame[48] = (frame[48] + 1) & 0xFF
    frame[38:44] = mac
    frame[44:48] = address
    return bytes(frame)