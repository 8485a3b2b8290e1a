"""Utility helpers: XDG paths, file I/O, tool execution, app configuration."""

from __future__ import annotations

import json
import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path

from .errors import ToolExecutionError


APP_ID = "com.github.hidpi_fixer"
APP_NAME = "HiDPI Fixer"
ISSUES_URL = "https://github.com/alex-spataru/HiDPI-Fixer/issues"

TOOL_TIMEOUT_S = 1.0
AUTOSTART_PREFIX = "HiDPI-Fixer_"

DEFAULT_SETTINGS = {
    "scale_factor": 2.0,
    "fix_qt_dpi": True,
    "tool_timeout": TOOL_TIMEOUT_S,
}

log = logging.getLogger(__name__)


def setup_logging(debug: bool = False) -> None:
    """Configure the root logger for the CLI and the GUI."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s [hidpi-fixer] %(levelname)s %(message)s",
    )


def xdg_config_home() -> Path:
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def config_dir() -> Path:
    """Return ~/.config/hidpi-fixer, creating it if needed."""
    d = xdg_config_home() / "hidpi-fixer"
    d.mkdir(parents=True, exist_ok=True)
    return d


def is_x11_session() -> bool:
    """Return True if the current desktop session runs on an X server."""
    session = os.environ.get("XDG_SESSION_TYPE", "").lower()
    if session:
        return session == "x11"
    return bool(os.environ.get("DISPLAY")) and not os.environ.get("WAYLAND_DISPLAY")


@dataclass(frozen=True)
class InstallPaths:
    """Filesystem locations used when saving scripts and launchers."""

    scripts_home: Path
    autostart_dir: Path
    profile: Path

    @classmethod
    def default(cls) -> InstallPaths:
        home = Path.home()
        return cls(
            scripts_home=home / ".hidpi-fixer",
            autostart_dir=xdg_config_home() / "autostart",
            profile=home / ".profile",
        )

    @property
    def test_script(self) -> Path:
        return self.scripts_home / "test"

    def script_for(self, display_name: str) -> Path:
        """Return the saved script path for *display_name*."""
        return self.scripts_home / "scripts" / display_name

    def launcher_for(self, display_name: str) -> Path:
        """Return the autostart .desktop path for *display_name*."""
        return self.autostart_dir / f"{AUTOSTART_PREFIX}{display_name}.desktop"


def run_tool(args: list[str], timeout: float = TOOL_TIMEOUT_S) -> str:
    """Run an external tool and return its stdout.

    The child is killed if it does not finish within *timeout* seconds.
    Raises ToolExecutionError on a missing executable, timeout, or non-zero exit.
    """
    tool = os.path.basename(args[0])
    log.debug("Running %s", " ".join(args))
    try:
        proc = subprocess.run(args, capture_output=True, text=True, timeout=timeout)
    except FileNotFoundError:
        raise ToolExecutionError(tool, "command not found") from None
    except subprocess.TimeoutExpired:
        raise ToolExecutionError(tool, f"timed out after {timeout:g}s") from None
    except OSError as e:
        raise ToolExecutionError(tool, f"cannot execute: {e.strerror or e}") from None

    if proc.returncode != 0:
        raise ToolExecutionError(tool, f"exited with code {proc.returncode}", proc.stderr or "")
    return proc.stdout


def read_json(path: Path) -> dict | list | None:
    """Read and parse a JSON file, returning None on failure."""
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return None


def write_json(path: Path, data: dict | list) -> None:
    """Write data as formatted JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


def write_text(path: Path, text: str) -> None:
    """Write text to a file, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def backup_file(path: Path) -> Path | None:
    """Create a .bak copy of a file. Returns backup path or None."""
    if not path.exists():
        return None
    bak = path.with_suffix(path.suffix + ".bak")
    bak.write_bytes(path.read_bytes())
    return bak


def _settings_path() -> Path:
    """Return the path to the global app settings file."""
    return config_dir() / "settings.json"


def load_app_settings() -> dict:
    """Load global application settings, filling in defaults."""
    data = read_json(_settings_path())
    settings = dict(DEFAULT_SETTINGS)
    if isinstance(data, dict):
        settings.update(data)
    return settings


def save_app_settings(settings: dict) -> None:
    """Save global application settings."""
    write_json(_settings_path(), settings)
