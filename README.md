# prolinkmon

prolinkmon listens to a Pro DJ Link network, which carries the UDP traffic that DJ players and mixers exchange. It decodes that traffic and reports what each player is doing.

prolinkmon takes the first keep-alive frame it sees as a template for its own keep-alive. From then on it broadcasts that frame as a virtual player named `CDJ-VIRTUAL` with player id 1. A new broadcast goes out once more than 1.4 seconds have passed since the last one. The real players therefore keep sending their status frames.

The package binds UDP ports 50000 to 50004 on all addresses. No other Pro DJ Link software can run on the same machine at the same time. Reading the interface's MAC, IPv4 and broadcast addresses needs Linux.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Commands

Both commands take the name of the network interface that the players are connected to. If the name is missing, the command prints `Missing interface name` and exits with status 1. If the interface does not exist or a port cannot be bound, the command also exits with status 1.

### prolink-debug

```
prolink-debug eth0
```

This command first prints the interface's name, MAC, IP and broadcast addresses. After that it prints a coloured log of the traffic, with each line stamped by the time since start:

- every datagram received, tagged by its port: `ANNOUNCE`, `BEATSYNC`, `CDJSTATUS`, `PORT50003` or `PORT50004`;
- decoded announcements: the three channel-claim stages, keep-alives and the initial announcement. Frames that are too short or badly formed are reported as ignored;
- each keep-alive that prolinkmon broadcasts;
- each player status frame, as a hex dump followed by every known field. The computed pitch, track BPM and current BPM come last. Status frames from player 2 are not printed.

Datagrams on the other ports are only tagged as received.

### prolink-show

```
prolink-show eth0
```

This command draws one pane for each of decks 1 to 4. Each pane shows:

- the slot the track was loaded from;
- the track number, the play mode, the pitch, and the track and live BPM;
- the beat counter, the position in the bar, the beats to the next cue, and the buffer state;
- the USB and SD indicators, coloured by media state, and CD, ERR and NET indicators;
- the sender's address, and the player's name and firmware.

A deck's border changes colour when its first status frame arrives. Status frames from players outside 1 to 4 are not shown. Press Ctrl-C to leave. The cursor and the terminal colours are restored on exit.

## Library use

`prolinkmon.protocol` decodes packets without touching the network:

```python
from prolinkmon.protocol import compute_status, parse_device_status, play_mode_name

status = parse_device_status(datagram)
computed = compute_status(status)
print(status.player_id, play_mode_name(status.play_mode), computed.bpm, computed.live_bpm)
```

The module also provides:

- `parse_announce` and `parse_beatsync`, which return `Announce` and `Beatsync` frames. The `kind` of a frame is an `AnnounceType` or `BeatsyncType` member, or `None` for an unknown type;
- `DeviceStatus.field_bytes`, which returns the raw bytes of a named status field;
- `craft_keepalive`, which builds a virtual player's keep-alive from a captured one, given a MAC and an IPv4 address;
- the enums `PlayMode`, `SlotType`, `TrackType` and `LocalState`.

`parse_announce` and `parse_beatsync` raise `PacketError` for a packet that is shorter than 32 bytes or does not begin with the Pro DJ Link header. `parse_device_status` raises `PacketError` for a packet shorter than 34 bytes. It does not check the header, and it reads missing trailing bytes as zero. `craft_keepalive` raises `PacketError` for a frame shorter than 54 bytes.

Other modules:

- `prolinkmon.network` provides `interface_info`, `bind_udp` and `ProlinkListener`, which binds the five ports and sends the keep-alive;
- `prolinkmon.output` provides `Logger`, `hexdump` and `format_mac`;
- `prolinkmon.console` provides `Pane` and the escape-sequence helpers. These return strings and do not write them.

## What it does not do

prolinkmon only listens to the UDP traffic and announces itself. It does not connect to the players' track database. As a result, it shows track numbers but no titles, artists or artwork. It does not decode beat or sync packets beyond `parse_beatsync`, and it does not send commands to the players.