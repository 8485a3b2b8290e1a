"""Saving, running and registering generated scripts."""

from __future__ import annotations

import logging
import math
import re
import shutil
from pathlib import Path

from .errors import ToolExecutionError, ValidationError
from .utils import (
    AUTOSTART_PREFIX,
    TOOL_TIMEOUT_S,
    InstallPaths,
    backup_file,
    run_tool,
    write_text,
)

log = logging.getLogger(__name__)

PROFILE_MARKER_START = "# [HiDPI-Fixer] Adapt Qt apps to HiDPI config"
PROFILE_MARKER_END = "# [HiDPI-Fixer] end"

_PROFILE_BLOCK_RE = re.compile(
    rf"\n?{re.escape(PROFILE_MARKER_START)}.*?{re.escape(PROFILE_MARKER_END)}\n?",
    re.DOTALL,
)


class ScriptInstaller:
    """Writes scripts, autostart launchers and the Qt profile block."""

    def __init__(self, paths: InstallPaths, timeout: float = TOOL_TIMEOUT_S) -> None:
        self.paths = paths
        self._timeout = timeout

    # ── Scripts ──────────────────────────────────────────────────────

    def save_and_execute(self, script: str, path: Path) -> Path:
        """Write *script* to *path*, make it executable and run it."""
        if not script:
            raise ValidationError("The script is empty")
        write_text(path, script)
        path.chmod(0o755)
        log.info("Wrote script: %s", path)
        run_tool([str(path)], timeout=self._timeout)
        return path

    def test(self, script: str) -> Path:
        """Run *script* from the scratch test location."""
        return self.save_and_execute(script, self.paths.test_script)

    def remove_test_script(self) -> bool:
        """Delete the scratch test script. Returns True if it existed."""
        path = self.paths.test_script
        if path.exists():
            path.unlink()
            return True
        return False

    def install(self, display_name: str, script: str, scale_factor: float, fix_qt: bool) -> Path:
        """Save and run the script for *display_name* and register it at login.

        Returns the path of the autostart launcher.
        """
        script_path = self.save_and_execute(script, self.paths.script_for(display_name))

        if fix_qt:
            self.update_profile(scale_factor)

        launcher = self.paths.launcher_for(display_name)
        write_text(launcher, self.render_launcher(display_name, script_path))
        log.info("Wrote autostart launcher: %s", launcher)
        return launcher

    # ── Autostart launcher ───────────────────────────────────────────

    @staticmethod
    def render_launcher(display_name: str, script_path: Path) -> str:
        lines = [
            "[Desktop Entry]",
            "Type=Application",
            f'Exec=bash "{script_path}"',
            "Hidden=false",
            "NoDisplay=false",
            "X-GNOME-Autostart-enabled=true",
            f"Name=Apply HiDPI Config for {display_name}",
            "Comment=Created by HiDPI-Fixer",
            "",
        ]
        return "\n".join(lines)

    # ── Shell profile ────────────────────────────────────────────────

    @staticmethod
    def render_profile_block(scale_factor: float) -> str:
        """Return the marker-delimited Qt environment block."""
        factor = math.ceil(scale_factor)
        return "\n".join([
            PROFILE_MARKER_START,
            "export QT_SCALE_FACTOR=1",
            "export QT_AUTO_SCREEN_SCALE_FACTOR=0",
            f"export QT_SCREEN_SCALE_FACTORS={factor}",
            PROFILE_MARKER_END,
        ])

    def update_profile(self, scale_factor: float) -> None:
        """Insert or replace the Qt block in the shell profile."""
        profile = self.paths.profile
        block = self.render_profile_block(scale_factor)
        content = profile.read_text(encoding="utf-8") if profile.exists() else ""

        if PROFILE_MARKER_START in content and PROFILE_MARKER_END in content:
            updated = _PROFILE_BLOCK_RE.sub(lambda _m: f"\n{block}\n", content, count=1)
            log.debug("Replaced Qt block in %s", profile)
        else:
            if content and not content.endswith("\n"):
                content += "\n"
            updated = f"{content}\n{block}\n"
            log.debug("Appended Qt block to %s", profile)

        backup_file(profile)
        write_text(profile, updated)
        log.info("Updated %s", profile)

    def strip_profile(self) -> bool:
        """Remove the Qt block from the shell profile. Returns True if found."""
        profile = self.paths.profile
        if not profile.exists():
            return False
        content = profile.read_text(encoding="utf-8")
        updated, n = _PROFILE_BLOCK_RE.subn("\n", content)
        if not n:
            return False
        backup_file(profile)
        write_text(profile, updated)
        return True

    # ── Uninstall ────────────────────────────────────────────────────

    def uninstall(self) -> list[Path]:
        """Remove everything created by install(). Returns removed paths."""
        removed: list[Path] = []

        home = self.paths.scripts_home
        if home.is_dir():
            shutil.rmtree(home)
            removed.append(home)

        if self.paths.autostart_dir.is_dir():
            for launcher in sorted(self.paths.autostart_dir.glob(f"{AUTOSTART_PREFIX}*.desktop")):
                launcher.unlink()
                removed.append(launcher)

        if self.strip_profile():
            removed.append(self.paths.profile)

        try:
            run_tool(
                ["gsettings", "reset", "org.gnome.desktop.interface", "scaling-factor"],
                timeout=self._timeout,
            )
        except ToolExecutionError as e:
            log.warning("Cannot reset GNOME scaling factor: %s", e)

        return removed
