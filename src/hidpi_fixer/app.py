"""GTK application: app-wide actions and the single main window."""

from __future__ import annotations

import logging
import sys

import gi
gi.require_version("Gtk", "4.0")
gi.require_version("Adw", "1")
from gi.repository import Gtk, Adw, Gio

from . import __version__
from .utils import APP_ID, APP_NAME, ISSUES_URL

log = logging.getLogger(__name__)

ACCELERATORS = {
    "app.quit": ["<Control>q"],
    "win.save": ["<Control>s"],
    "win.detect": ["<Control>r"],
}


class HiDPIFixerApp(Adw.Application):
    """Owns the about/bug-report/quit actions and the keyboard shortcuts."""

    def __init__(self) -> None:
        super().__init__(
            application_id=APP_ID,
            flags=Gio.ApplicationFlags.DEFAULT_FLAGS,
        )

    def do_startup(self) -> None:
        Adw.Application.do_startup(self)
        for name, handler in (
            ("about", self._on_about),
            ("report-bug", self._on_report_bug),
            ("quit", self._on_quit),
        ):
            action = Gio.SimpleAction(name=name)
            action.connect("activate", handler)
            self.add_action(action)
        for action_name, accels in ACCELERATORS.items():
            self.set_accels_for_action(action_name, accels)

    def do_activate(self) -> None:
        # A second launch raises the existing window
        win = self.get_active_window()
        if win is None:
            from .window import MainWindow
            win = MainWindow(self)
        win.present()

    def _on_about(self, action: Gio.SimpleAction, param) -> None:
        about = Adw.AboutDialog(
            application_name=APP_NAME,
            application_icon=APP_ID,
            version=__version__,
            developer_name="Alex Spataru",
            copyright="© 2018 Alex Spataru",
            comments="Generate xrandr scripts that rescale X11 displays for HiDPI use",
            issue_url=ISSUES_URL,
            license_type=Gtk.License.MIT_X11,
        )
        about.present(self.get_active_window())

    def _on_report_bug(self, action: Gio.SimpleAction, param) -> None:
        log.debug("Opening %s", ISSUES_URL)
        Gio.AppInfo.launch_default_for_uri(ISSUES_URL, None)

    def _on_quit(self, action: Gio.SimpleAction, param) -> None:
        # close() runs the window's close-request cleanup before exiting
        win = self.get_active_window()
        if win is not None:
            win.close()
        else:
            self.quit()


def main() -> int:
    app = HiDPIFixerApp()
    # Options are parsed by the CLI before GTK starts
    return app.run(sys.argv[:1])
