import io

import pytest

from prolinkmon.output import Color, Logger, format_mac, hexdump


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


def make_logger(start=10.0, now=10.0):
    clock = FakeClock(now)
    stream = io.StringIO()
    return Logger(stream=stream, clock=clock, start=start), stream, clock


def test_format_mac_joins_hex_bytes():
    assert format_mac(b"\x02\x00\x00\x00\x00\x01") == "02:00:00:00:00:01"


def test_format_mac_rejects_wrong_length():
    with pytest.raises(ValueError):
        format_mac(b"\x01\x02\x03")


def test_hexdump_full_row():
    rows = hexdump(b"ABCDEFGHIJKLMNOP")
    assert len(rows) == 1
    expected_hex = " ".join(f"{b:02x}" for b in b"ABCDEFGHIJKLMNOP")
    assert rows[0] == f"0x0000: {expected_hex} |ABCDEFGHIJKLMNOP|"


def test_hexdump_rows_have_equal_width():
    rows = hexdump(bytes(range(40)))
    assert len(rows) == 3
    assert len({len(row) for row in rows}) == 1
    assert rows[1].startswith("0x0010: ")
    assert rows[2].startswith("0x0020: ")


def test_hexdump_replaces_unprintable():
    rows = hexdump(b"\x00A\xff")
    assert rows[0].endswith("|.A." + " " * 13 + "|")


def test_hexdump_empty():
    assert hexdump(b"") == []


def test_color_formats_as_escape_in_output():
    logger, stream, _ = make_logger(start=10.0, now=10.0)
    logger.line(Color.RED, "!!", "failure")
    out = stream.getvalue()
    assert out.startswith("\033[31;1m[")
    assert "!! failure" in out
    assert out.endswith("\033[0m\n")


def test_elapsed_uses_clock():
    logger, _, clock = make_logger(start=10.0, now=12.5)
    assert logger.elapsed() == 2.5
    clock.now = 13.0
    assert logger.elapsed() == 3.0


def test_line_layout():
    logger, stream, _ = make_logger(start=10.0, now=12.5)
    logger.line(Color.GREEN, "**", "hello")
    out = stream.getvalue()
    assert out.startswith(str(Color.GREEN) + "[")
    assert "2.500000] ** hello" in out
    assert out.endswith(str(Color.RESET) + "\n")


@pytest.mark.parametrize(
    "method, color, marker",
    [
        ("info", Color.DARK, ".."),
        ("packet", Color.BLUECOLA, "--"),
        ("recv", Color.MAGENTA, ">>"),
        ("send", Color.LIGHT, "<<"),
    ],
)
def test_level_helpers(method, color, marker):
    logger, stream, _ = make_logger()
    getattr(logger, method)("text")
    out = stream.getvalue()
    assert out.startswith(str(color))
    assert f"] {marker} text" in out


def test_metric_contains_source_name_and_value():
    logger, stream, _ = make_logger()
    logger.metric("10.0.0.5", "Player ID", "0x03")
    out = stream.getvalue()
    assert out.startswith(str(Color.INDIAN))
    assert "// 10.0.0.5" in out
    assert "Player ID" in out
    assert f"{Color.ORANGE} 0x03" in out


def test_dump_writes_header_and_rows():
    logger, stream, _ = make_logger()
    data = bytes(range(20))
    logger.dump(data)
    lines = stream.getvalue().splitlines()
    assert len(lines) == 1 + len(hexdump(data))
    assert "(20 bytes)" in lines[0]
    for row, line in zip(hexdump(data), lines[1:]):
        assert row in line