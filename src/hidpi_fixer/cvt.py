"""Custom video mode lines from the cvt tool."""

from __future__ import annotations

import logging

from .errors import EmptyResultError, ValidationError
from .utils import TOOL_TIMEOUT_S, run_tool

log = logging.getLogger(__name__)


def modeline_from_output(output: str) -> str:
    """Return the quoted-name modeline found at the end of cvt output.

    cvt prints comment lines first and the modeline last, e.g.::

        # 2560x1440 59.96 Hz (CVT 3.69M9) hsync: 89.52 kHz; pclk: 312.25 MHz
        Modeline "2560x1440_60.00"  312.25  2560 2752 3024 3488  1440 1443 1448 1493 -hsync +vsync

    Scanning backward until the second ``"`` yields everything from the
    opening quote of the mode name to the end, however many lines precede it.
    """
    quotes = 0
    start = None
    for i in range(len(output) - 1, -1, -1):
        if output[i] == '"':
            quotes += 1
            if quotes == 2:
                start = i
                break
    if start is None:
        raise EmptyResultError("cvt output contains no quoted mode name")
    return output[start:].replace("\r", "").replace("\n", "")


def extract_mode_name(modeline: str) -> str:
    """Return the leading ``"<name>"`` token of *modeline*, quotes included."""
    if not modeline:
        raise ValidationError("Empty modeline")
    first = modeline.find('"')
    second = modeline.find('"', first + 1) if first != -1 else -1
    if second == -1:
        raise ValidationError(f"Modeline has no quoted mode name: {modeline!r}")
    return modeline[:second + 1]


class CvtResolver:
    """Resolve width/height pairs to modelines by running cvt."""

    def __init__(self, timeout: float = TOOL_TIMEOUT_S) -> None:
        self._timeout = timeout

    def resolve(self, width: int, height: int) -> str:
        """Return the modeline cvt computes for *width* x *height*."""
        if width <= 0 or height <= 0:
            raise ValidationError(f"Invalid mode size {width}x{height}")
        output = run_tool(["cvt", str(width), str(height)], timeout=self._timeout)
        modeline = modeline_from_output(output)
        log.debug("cvt %dx%d -> %s", width, height, modeline)
        return modeline
