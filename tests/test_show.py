import io

import pytest

from prolinkmon.console import Pane
from prolinkmon.output import Color, Logger
from prolinkmon.protocol import PROLINK_ID, compute_status, parse_device_status
from prolinkmon.show import (
    PlayerState,
    draw_mediainfo,
    draw_refresh,
    draw_status,
    dump_status,
    main,
    pane_for,
    sd_colors,
    usb_colors,
)

_OFFSETS = {
    "player_id": 33,
    "loaded_from": 40,
    "usb_activity": 106,
    "sd_activity": 107,
    "usb_local": 111,
    "sd_local": 115,
    "play_mode": 123,
    "downbeat": 166,
    "usb_unsafe": 184,
    "sd_unsafe": 185,
    "activity": 39,
}


def make_status(name=b"CDJ-2000", firmware=b"1.23", **fields):
    raw = bytearray(288)
    raw[0:10] = PROLINK_ID
    raw[11 : 11 + len(name)] = name
    raw[124 : 124 + len(firmware)] = firmware
    raw[146:148] = (12800).to_bytes(2, "big")
    raw[141:144] = (0x100000).to_bytes(3, "big")
    for key, value in fields.items():
        raw[_OFFSETS[key]] = value
    return parse_device_status(bytes(raw))


def make_pane():
    return Pane(1, 0, 6, 90)


def test_update_keeps_reference():
    state = PlayerState()
    first = make_status(player_id=1, play_mode=3)
    state.update(first, "10.0.0.5")
    assert state.status is first
    assert state.status_ref.player_id == 0
    assert state.refreshed is True
    assert state.source == "10.0.0.5"
    assert state.computed == compute_status(first)

    second = make_status(player_id=1, play_mode=5)
    state.update(second, "10.0.0.5")
    assert state.status_ref is first
    assert state.computed_ref == compute_status(first)


def test_usb_colors_not_present():
    pane = make_pane()
    usb_colors(pane, make_status(usb_local=0x04))
    assert (pane.text_color, pane.background) == (238, None)


def test_usb_colors_active():
    pane = make_pane()
    usb_colors(pane, make_status(usb_local=0x00, usb_activity=0x06))
    assert (pane.text_color, pane.background) == (255, 235)


def test_usb_colors_unmounting_and_unsafe():
    pane = make_pane()
    usb_colors(pane, make_status(usb_local=0x03))
    assert pane.background == 146
    usb_colors(pane, make_status(usb_local=0x02, usb_unsafe=0x01))
    assert pane.background == 160


def test_sd_colors():
    pane = make_pane()
    sd_colors(pane, make_status(sd_local=0x02))
    assert (pane.text_color, pane.background) == (255, None)
    sd_colors(pane, make_status(sd_local=0x00, sd_activity=0x04))
    assert (pane.text_color, pane.background) == (245, 235)
    sd_colors(pane, make_status(sd_local=0x04))
    assert (pane.text_color, pane.background) == (238, None)


def test_draw_mediainfo_without_state():
    assert draw_mediainfo(make_pane(), None) == ""


def test_draw_mediainfo_labels():
    pane = make_pane()
    state = PlayerState().update(make_status(player_id=1), "10.0.0.5")
    text = draw_mediainfo(pane, state)
    for label in (" USB ", " SD  ", " CD  ", " ERR ", " NET "):
        assert label in text
    assert (pane.text_color, pane.background) == (255, None)


def test_draw_status_first_draw():
    pane = make_pane()
    pane.border_color = 239
    state = PlayerState().update(
        make_status(player_id=1, play_mode=3, downbeat=2, loaded_from=3), "10.0.0.5"
    )
    text = draw_status(pane, state)
    assert pane.border_color == 37
    assert "┌──┤ " in text
    assert "CDJ-2000 v1.23" in text
    assert "Play: Playing" in text
    assert ".#.." in text
    assert "Load from: 3" in text
    assert "10.0.0.5" in text
    assert state.refreshed is False


def test_draw_status_redraw_skips_frame():
    pane = make_pane()
    pane.border_color = 37
    state = PlayerState().update(make_status(player_id=1), "10.0.0.5")
    text = draw_status(pane, state)
    assert "┌" not in text
    assert "...." in text


def test_pane_for():
    panes = [make_pane() for _ in range(4)]
    state = PlayerState().update(make_status(player_id=2), "10.0.0.5")
    assert pane_for(panes, state) is panes[1]
    zero = PlayerState().update(make_status(player_id=0), "10.0.0.5")
    with pytest.raises(IndexError):
        pane_for(panes, zero)


def test_draw_refresh():
    panes = [make_pane() for _ in range(4)]
    states = [PlayerState() for _ in range(16)]
    assert draw_refresh(states, panes) == ""
    states[1].update(make_status(player_id=1), "10.0.0.9")
    assert "10.0.0.9" in draw_refresh(states, panes)
    assert states[1].refreshed is False


def test_dump_status_highlights_changes():
    stream = io.StringIO()
    logger = Logger(stream=stream, clock=lambda: 0.0)
    state = PlayerState()
    state.update(make_status(player_id=1, play_mode=3, activity=1), "10.0.0.5")
    state.update(make_status(player_id=1, play_mode=5, activity=1), "10.0.0.5")
    dump_status(logger, state)
    lines = stream.getvalue().splitlines()
    play_mode = [line for line in lines if "Play Mode      " in line]
    activity = [line for line in lines if "Activity" in line and "USB" not in line and "SD" not in line]
    assert len(play_mode) == 1 and str(Color.HIGHLI) in play_mode[0]
    assert len(activity) == 1 and str(Color.HIGHLI) not in activity[0]
    assert not any("Device Name" in line for line in lines)
    assert any("--------------------------" in line for line in lines)


def test_main_without_interface():
    assert main([]) == 1