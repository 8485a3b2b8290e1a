import logging
import subprocess

import pytest

from hidpi_fixer import xrandr
from hidpi_fixer.errors import EmptyResultError, ToolExecutionError
from hidpi_fixer.models import Resolution


LISTING = """\
Monitors: 2
 0: +*eDP-1 1920/344x1080/194+0+0  eDP-1
 1: +HDMI-1 1920/527x1080/296+1920+0  HDMI-1
"""

QUERY = """\
Screen 0: minimum 320 x 200, current 3840 x 1080, maximum 16384 x 16384
eDP-1 connected primary 1920x1080+0+0 (normal left inverted right x axis y axis) 344mm x 194mm
   1920x1080     60.02*+  59.93
   1680x1050     59.95
   1920x1080     48.00
   640x480       59.94
   320x240       60.05
HDMI-1 connected 1920x1080+1920+0 (normal left inverted right x axis y axis) 527mm x 296mm
   2560x1440     59.95 +
   1920x1080     60.00*   50.00
DP-1 disconnected (normal left inverted right x axis y axis)
   1024x768      60.00
"""


def _fake_run(outputs, calls=None):
    """Return a subprocess.run stand-in answering xrandr args from *outputs*."""
    def run(args, **kwargs):
        if calls is not None:
            calls.append(args)
        out = outputs[tuple(args[1:])]
        if isinstance(out, int):
            return subprocess.CompletedProcess(args, out, stdout="", stderr="Can't open display")
        return subprocess.CompletedProcess(args, 0, stdout=out, stderr="")
    return run


def test_parse_active_monitors_count_line():
    output = "2 monitors\n 0: +*eDP-1 1920/344x1080/194+0+0  eDP-1\n 1: +HDMI-1 1920/527x1080/296+1920+0  HDMI-1\n"
    assert xrandr.parse_active_monitors(output) == ["eDP-1", "HDMI-1"]


def test_parse_active_monitors_reads_only_count_lines():
    output = "Monitors: 1\n 0: +*eDP-1 1920/344x1080/194+0+0  eDP-1\n 1: +HDMI-1 x  HDMI-1\n"
    assert xrandr.parse_active_monitors(output) == ["eDP-1"]


def test_parse_active_monitors_short_listing(caplog):
    output = "Monitors: 3\n 0: +*eDP-1 1920/344x1080/194+0+0  eDP-1\n"
    with caplog.at_level(logging.WARNING, logger="hidpi_fixer.xrandr"):
        assert xrandr.parse_active_monitors(output) == ["eDP-1"]
    assert "announced 3 monitor(s) but listed 1" in caplog.text


def test_parse_active_monitors_keeps_names_as_listed():
    output = "Monitors: 2\n 0: +*eDP-1 1920/344x1080/194+0+0  eDP-1\n 1: +eDP-1 1920/344x1080/194+0+0  eDP-1\n"
    assert xrandr.parse_active_monitors(output) == ["eDP-1", "eDP-1"]


def test_parse_active_monitors_bad_count():
    with pytest.raises(ToolExecutionError):
        xrandr.parse_active_monitors("no monitors here\n")


def test_parse_verbose_groups_modes_by_display():
    displays = xrandr.parse_verbose_output(QUERY)
    assert [d.name for d in displays] == ["eDP-1", "HDMI-1"]
    assert displays[0].resolution_labels == ["1920x1080", "1680x1050", "640x480"]
    assert displays[1].resolutions == [Resolution(2560, 1440), Resolution(1920, 1080)]


def test_parse_verbose_ignores_header_geometry():
    displays = xrandr.parse_verbose_output("eDP-1 connected 3000x2000+0+0 (normal)\n   1920x1080  60.00*\n")
    assert displays[0].resolution_labels == ["1920x1080"]


def test_parse_verbose_skips_custom_and_interlaced_modes():
    output = (
        "eDP-1 connected 2560x1440+0+0 (normal)\n"
        "   2560x1440_60.00  59.96*\n"
        "   1920x1080     60.02 +\n"
        "   1920x1080i    60.00\n"
    )
    displays = xrandr.parse_verbose_output(output)
    assert displays[0].resolution_labels == ["1920x1080"]


def test_shape_detection():
    assert xrandr.is_verbose_output(QUERY)
    assert not xrandr.is_verbose_output(LISTING)


def test_list_displays_from_listing(monkeypatch):
    calls = []
    monkeypatch.setattr(subprocess, "run", _fake_run({
        ("--listactivemonitors",): LISTING,
        ("--query",): QUERY,
    }, calls))

    displays = xrandr.XrandrClient().list_displays()

    assert [d.name for d in displays] == ["eDP-1", "HDMI-1"]
    assert displays[1].resolution_labels == ["2560x1440", "1920x1080"]
    assert calls == [["xrandr", "--listactivemonitors"], ["xrandr", "--query"]]


def test_list_displays_from_verbose_listing(monkeypatch):
    monkeypatch.setattr(subprocess, "run", _fake_run({("--listactivemonitors",): QUERY}))
    displays = xrandr.XrandrClient().list_displays()
    assert [d.name for d in displays] == ["eDP-1", "HDMI-1"]


def test_list_displays_missing_modes_gives_empty_list(monkeypatch):
    listing = "Monitors: 1\n 0: +*VIRTUAL1 1920/0x1080/0+0+0  VIRTUAL1\n"
    monkeypatch.setattr(subprocess, "run", _fake_run({
        ("--listactivemonitors",): listing,
        ("--query",): QUERY,
    }))
    displays = xrandr.XrandrClient().list_displays()
    assert displays[0].name == "VIRTUAL1"
    assert displays[0].resolutions == []


def test_list_displays_nonzero_exit(monkeypatch):
    monkeypatch.setattr(subprocess, "run", _fake_run({("--listactivemonitors",): 1}))
    with pytest.raises(ToolExecutionError) as exc:
        xrandr.XrandrClient().list_displays()
    assert exc.value.tool == "xrandr"
    assert "Can't open display" in str(exc.value)


def test_list_displays_timeout(monkeypatch):
    def run(args, **kwargs):
        assert kwargs["timeout"] == 1.0
        raise subprocess.TimeoutExpired(args, kwargs["timeout"])
    monkeypatch.setattr(subprocess, "run", run)
    with pytest.raises(ToolExecutionError, match="timed out"):
        xrandr.XrandrClient().list_displays()


def test_list_displays_missing_tool(monkeypatch):
    def run(args, **kwargs):
        raise FileNotFoundError(args[0])
    monkeypatch.setattr(subprocess, "run", run)
    with pytest.raises(ToolExecutionError, match="not found"):
        xrandr.XrandrClient().list_displays()


def test_list_displays_empty_is_distinct(monkeypatch):
    monkeypatch.setattr(subprocess, "run", _fake_run({("--listactivemonitors",): "Monitors: 0\n"}))
    with pytest.raises(EmptyResultError):
        xrandr.XrandrClient().list_displays()
