"""HiDPI Fixer: rescale X11 displays with generated xrandr scripts."""

__version__ = "1.1.0"
