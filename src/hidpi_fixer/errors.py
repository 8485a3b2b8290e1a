"""Error types raised by the display, modeline and script layers."""

from __future__ import annotations


class HiDPIFixerError(Exception):
    """Base class for all errors raised by hidpi_fixer."""


class ToolExecutionError(HiDPIFixerError):
    """An external tool failed to start, exited non-zero, or timed out."""

    def __init__(self, tool: str, reason: str, stderr: str = "") -> None:
        self.tool = tool
        self.reason = reason
        self.stderr = stderr.strip()
        msg = f"{tool}: {reason}"
        if self.stderr:
            msg += f" ({self.stderr})"
        super().__init__(msg)


class ValidationError(HiDPIFixerError):
    """Input rejected before any external tool is invoked."""


class EmptyResultError(HiDPIFixerError):
    """A tool ran successfully but produced no usable data."""
