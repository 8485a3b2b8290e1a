"""Data models: Resolution, Display."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from .errors import ValidationError


# Modes below this floor are never offered for scaling
MIN_WIDTH = 640
MIN_HEIGHT = 480

_RESOLUTION_RE = re.compile(r"(\d+)x(\d+)", re.ASCII)


# ── Resolution ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Resolution:
    width: int
    height: int

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"

    @property
    def is_usable(self) -> bool:
        """True if the mode is at least MIN_WIDTH x MIN_HEIGHT."""
        return self.width >= MIN_WIDTH and self.height >= MIN_HEIGHT

    @classmethod
    def parse(cls, text: str) -> Resolution:
        """Parse a ``WxH`` string.

        Raises ValidationError unless *text* holds exactly two ``x``-separated
        integer fields and both are positive.
        """
        m = _RESOLUTION_RE.fullmatch(text.strip())
        if m is None:
            raise ValidationError(f"Invalid resolution {text!r}: expected WIDTHxHEIGHT")
        width, height = int(m.group(1)), int(m.group(2))
        if width <= 0 or height <= 0:
            raise ValidationError(f"Invalid resolution {text!r}: dimensions must be positive")
        return cls(width, height)


# ── Display ──────────────────────────────────────────────────────────────

@dataclass
class Display:
    name: str                   # e.g. "eDP-1", "HDMI-1"
    resolutions: list[Resolution] = field(default_factory=list)

    @property
    def resolution_labels(self) -> list[str]:
        """Resolutions rendered as ``WxH`` strings, in xrandr order."""
        return [str(r) for r in self.resolutions]

    def add_resolution(self, res: Resolution) -> bool:
        """Append *res* unless it is a duplicate or below the size floor.

        Returns True if the resolution was added.
        """
        if not res.is_usable or res in self.resolutions:
            return False
        self.resolutions.append(res)
        return True
