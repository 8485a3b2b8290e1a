"""Generation of the xrandr/gsettings rescaling script."""

from __future__ import annotations

import math
from typing import Protocol

from .cvt import extract_mode_name
from .errors import ValidationError
from .models import Resolution


class ModelineResolver(Protocol):
    def resolve(self, width: int, height: int) -> str: ...


def _check_scale(scale_factor: float) -> None:
    if not math.isfinite(scale_factor) or scale_factor <= 0:
        raise ValidationError(f"Invalid scale factor {scale_factor!r}: must be a positive number")


def integer_factor(scale_factor: float) -> int:
    """Return the integer scale applied by the desktop, ``ceil(scale_factor)``."""
    _check_scale(scale_factor)
    return math.ceil(scale_factor)


def panning_multiplier(scale_factor: float) -> float:
    """Return ``integer_factor / scale_factor`` truncated to three decimals."""
    factor = integer_factor(scale_factor)
    return math.floor((factor / scale_factor) * 1000) / 1000


def target_resolution(resolution: Resolution, scale_factor: float) -> Resolution:
    """Return the enlarged framebuffer size that compensates a fractional scale."""
    mult = panning_multiplier(scale_factor)
    return Resolution(
        math.ceil(resolution.width * mult),
        math.ceil(resolution.height * mult),
    )


def generate_script(
    display_name: str,
    resolution: Resolution | str,
    scale_factor: float,
    cvt: ModelineResolver,
) -> str:
    """Build the shell script that rescales *display_name*.

    Returns an empty string when ``ceil(scale_factor)`` is 1, as no
    resampling is needed. Errors from *cvt* propagate unchanged so that no
    partial script is ever produced.
    """
    factor = integer_factor(scale_factor)
    if factor == 1:
        return ""

    if isinstance(resolution, str):
        resolution = Resolution.parse(resolution)
    elif resolution.width <= 0 or resolution.height <= 0:
        raise ValidationError(f"Invalid resolution {resolution}")

    target = target_resolution(resolution, scale_factor)
    modeline = cvt.resolve(target.width, target.height)
    mode_name = extract_mode_name(modeline)

    lines = [
        "#!/bin/bash",
        "",
        "# THIS SCRIPT COMES WITH NO WARRANTIES, USE IT AT YOUR",
        "# OWN RISK",
        "",
        "# Create new resolution",
        f"xrandr --newmode {modeline}",
        "",
        f"# Register resolution with {display_name}",
        f"xrandr --addmode {display_name} {mode_name}",
        "",
        f"# Change resolution for {display_name}",
        f"xrandr --output {display_name} --mode {mode_name}",
        "",
        "# Change scaling factor (GNOME)",
        f"gsettings set org.gnome.desktop.interface scaling-factor {factor}",
        "",
    ]
    return "\n".join(lines)
