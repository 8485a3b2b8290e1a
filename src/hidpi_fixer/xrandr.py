"""Display enumeration through the xrandr command line tool.

xrandr prints one of two shapes, depending on the arguments and the
version installed. ``xrandr --listactivemonitors`` gives a count line and one
line per active monitor::

    Monitors: 2
     0: +*eDP-1 1920/344x1080/194+0+0  eDP-1
     1: +HDMI-1 1920/527x1080/296+1920+0  HDMI-1

while ``xrandr --query`` gives one unindented header per output followed by
its indented mode lines::

    eDP-1 connected primary 1920x1080+0+0 (normal left inverted right) 344mm x 194mm
       1920x1080     60.02*+  59.93
       1680x1050     59.95

Each shape has its own parser; ``is_verbose_output`` picks between them.
"""

from __future__ import annotations

import logging
import re

from .errors import EmptyResultError, ToolExecutionError
from .models import Display, Resolution
from .utils import TOOL_TIMEOUT_S, run_tool

log = logging.getLogger(__name__)

_RESOLUTION_RE = re.compile(r"(\d+)x(\d+)\s")


def is_verbose_output(output: str) -> bool:
    """True if *output* uses the per-output header / indented mode line form."""
    for line in output.splitlines():
        if line.startswith("Screen ") or " connected" in line or " disconnected" in line:
            return True
    return False


def parse_active_monitors(output: str) -> list[str]:
    """Parse ``xrandr --listactivemonitors`` output into display names.

    The first line holds the monitor count; each of the following *count*
    lines ends with the display name. Names are returned as listed, in order.
    """
    lines = output.splitlines()
    if not lines:
        raise ToolExecutionError("xrandr", "empty monitor listing")

    digits = re.sub(r"[^0-9]", "", lines[0])
    try:
        count = int(digits)
    except ValueError:
        raise ToolExecutionError("xrandr", f"cannot get monitor count from {lines[0]!r}") from None

    names: list[str] = []
    for line in lines[1:count + 1]:
        tokens = line.split()
        if tokens:
            names.append(tokens[-1])
    if len(lines) - 1 < count:
        log.warning("xrandr announced %d monitor(s) but listed %d", count, len(lines) - 1)
    return names


def parse_verbose_output(output: str) -> list[Display]:
    """Parse ``xrandr --query`` output into connected displays with their modes.

    Indented lines are grouped under the nearest preceding unindented header;
    only headers containing `` connected`` start a display.
    """
    displays: list[Display] = []
    current: Display | None = None

    # keepends: a mode at the end of a line still has trailing whitespace
    for line in output.splitlines(keepends=True):
        if not line.strip():
            continue
        if not line[0].isspace():
            if " connected" in line:
                current = Display(name=line.split()[0])
                displays.append(current)
            else:
                current = None
            continue
        if current is None:
            continue
        for match in _RESOLUTION_RE.finditer(line):
            current.add_resolution(Resolution(int(match.group(1)), int(match.group(2))))

    return displays


class XrandrClient:
    """Query connected displays and their resolutions from xrandr."""

    def __init__(self, timeout: float = TOOL_TIMEOUT_S) -> None:
        self._timeout = timeout

    def _run(self, *args: str) -> str:
        return run_tool(["xrandr", *args], timeout=self._timeout)

    def list_displays(self) -> list[Display]:
        """Return connected displays in xrandr order.

        Raises ToolExecutionError if xrandr cannot be run and EmptyResultError
        if it ran but reported no displays.
        """
        output = self._run("--listactivemonitors")
        if is_verbose_output(output):
            displays = parse_verbose_output(output)
        else:
            displays = self._with_resolutions(parse_active_monitors(output))

        if not displays:
            raise EmptyResultError("xrandr reported no connected displays")

        log.info(
            "Detected %d display(s): %s",
            len(displays), ", ".join(d.name for d in displays),
        )
        return displays

    def _with_resolutions(self, names: list[str]) -> list[Display]:
        """Build Display records for *names* using the modes from ``xrandr --query``."""
        if not names:
            return []
        modes = {d.name: d.resolutions for d in parse_verbose_output(self._run("--query"))}
        displays = []
        for name in names:
            resolutions = list(modes.get(name, []))
            if not resolutions:
                log.debug("No modes reported for %s", name)
            displays.append(Display(name=name, resolutions=resolutions))
        return displays
