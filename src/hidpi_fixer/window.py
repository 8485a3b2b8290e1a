"""Main application window."""

from __future__ import annotations

import logging

import gi
gi.require_version("Gtk", "4.0")
gi.require_version("Adw", "1")
from gi.repository import Gtk, Adw, Gio

from .cvt import CvtResolver
from .errors import HiDPIFixerError
from .hotplug import DisplayWatcher
from .installer import ScriptInstaller
from .models import Display, Resolution
from .script import generate_script, integer_factor
from .xrandr import XrandrClient
from .utils import (
    APP_NAME,
    InstallPaths,
    is_x11_session,
    load_app_settings,
    save_app_settings,
)

log = logging.getLogger(__name__)

SCALE_MIN = 1.0
SCALE_MAX = 4.0
SCALE_STEP = 0.25


class MainWindow(Adw.ApplicationWindow):
    """Display/resolution/scale form with a live script preview."""

    __gtype_name__ = "HiDPIFixerWindow"

    def __init__(self, app: Adw.Application) -> None:
        super().__init__(application=app, title=APP_NAME, default_width=560, default_height=720)
        self._app_settings = load_app_settings()
        timeout = float(self._app_settings["tool_timeout"])
        self._xrandr = XrandrClient(timeout=timeout)
        self._cvt = CvtResolver(timeout=timeout)
        self._installer = ScriptInstaller(InstallPaths.default(), timeout=timeout)
        self._displays: list[Display] = []
        self._script: str = ""
        self._building: bool = False
        self._watcher = DisplayWatcher(self._on_hotplug)

        self._build_ui()
        self._setup_actions()
        self._load_displays()
        self._watcher.start()
        self.connect("close-request", self._on_close_request)

        if not is_x11_session():
            self._toast("You are not running this application on an X11 session")

    # ── UI Construction ──────────────────────────────────────────────

    def _build_ui(self) -> None:
        main_box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL)
        self.set_content(main_box)

        header = Adw.HeaderBar()
        header.set_title_widget(Adw.WindowTitle(title=APP_NAME, subtitle="HiDPI scaling for X11"))
        main_box.append(header)

        btn_detect = Gtk.Button(icon_name="view-refresh-symbolic", tooltip_text="Detect displays")
        btn_detect.connect("clicked", lambda _b: self._load_displays())
        header.pack_start(btn_detect)

        self._build_menu(header)

        self._toast_overlay = Adw.ToastOverlay()
        self._toast_overlay.set_vexpand(True)
        main_box.append(self._toast_overlay)

        page = Adw.PreferencesPage()
        self._toast_overlay.set_child(page)

        # ── Display ──────────────────────────────────────────────────
        grp_display = Adw.PreferencesGroup(title="Display")
        page.add(grp_display)

        self._combo_display = Adw.ComboRow(title="Display", icon_name="video-display-symbolic")
        self._combo_display.connect("notify::selected", self._on_display_changed)
        grp_display.add(self._combo_display)

        self._combo_resolution = Adw.ComboRow(
            title="Resolution", icon_name="preferences-desktop-display-symbolic",
        )
        self._combo_resolution.connect("notify::selected", self._recompute_script)
        grp_display.add(self._combo_resolution)

        self._spin_scale = Adw.SpinRow.new_with_range(SCALE_MIN, SCALE_MAX, SCALE_STEP)
        self._spin_scale.set_title("Scale Factor")
        self._spin_scale.set_digits(2)
        self._spin_scale.set_value(float(self._app_settings["scale_factor"]))
        self._spin_scale.connect("notify::value", self._recompute_script)
        grp_display.add(self._spin_scale)

        self._sw_fix_qt = Adw.SwitchRow(
            title="Fix Qt applications",
            subtitle="Export QT_SCREEN_SCALE_FACTORS in ~/.profile when saving",
        )
        self._sw_fix_qt.set_active(bool(self._app_settings["fix_qt_dpi"]))
        grp_display.add(self._sw_fix_qt)

        # ── Script preview ───────────────────────────────────────────
        grp_script = Adw.PreferencesGroup(
            title="Script",
            description="Runs at login to rescale the selected display",
        )
        page.add(grp_script)

        self._preview = Gtk.TextView()
        self._preview.set_monospace(True)
        self._preview.set_editable(False)
        self._preview.set_cursor_visible(False)
        self._preview.set_wrap_mode(Gtk.WrapMode.NONE)
        self._preview.set_left_margin(8)
        self._preview.set_top_margin(8)

        scroll = Gtk.ScrolledWindow()
        scroll.set_min_content_height(200)
        scroll.set_policy(Gtk.PolicyType.AUTOMATIC, Gtk.PolicyType.AUTOMATIC)
        scroll.set_child(self._preview)
        scroll.add_css_class("card")
        grp_script.add(scroll)

        # ── Buttons ──────────────────────────────────────────────────
        btn_box = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=8, halign=Gtk.Align.END)
        btn_box.set_margin_start(12)
        btn_box.set_margin_end(12)
        btn_box.set_margin_top(8)
        btn_box.set_margin_bottom(12)
        main_box.append(btn_box)

        self._btn_test = Gtk.Button(label="Test", tooltip_text="Run the script once")
        self._btn_test.connect("clicked", self._on_test_clicked)
        btn_box.append(self._btn_test)

        self._btn_save = Gtk.Button(label="Save", tooltip_text="Run the script and apply it at every login")
        self._btn_save.add_css_class("suggested-action")
        self._btn_save.connect("clicked", self._on_save_clicked)
        btn_box.append(self._btn_save)

        self._update_script_controls()

    def _setup_actions(self) -> None:
        """Window actions; the application binds Ctrl+S and Ctrl+R to them."""
        action_save = Gio.SimpleAction(name="save")
        action_save.connect("activate", lambda *_: self._on_save_clicked(None))
        self.add_action(action_save)

        action_detect = Gio.SimpleAction(name="detect")
        action_detect.connect("activate", lambda *_: self._load_displays())
        self.add_action(action_detect)

    def _build_menu(self, header: Adw.HeaderBar) -> None:
        menu = Gio.Menu()
        menu.append("Report a Bug", "app.report-bug")
        menu.append(f"About {APP_NAME}", "app.about")
        menu.append("Quit", "app.quit")

        menu_btn = Gtk.MenuButton(
            icon_name="open-menu-symbolic",
            menu_model=menu,
            tooltip_text="Menu",
        )
        header.pack_end(menu_btn)

    # ── Data Loading ─────────────────────────────────────────────────

    def _load_displays(self) -> None:
        """Re-enumerate displays and repopulate the form."""
        previous = self._selected_display()
        try:
            self._displays = self._xrandr.list_displays()
        except HiDPIFixerError as e:
            log.warning("Display enumeration failed: %s", e)
            self._displays = []
            self._toast(str(e))

        self._building = True
        self._combo_display.set_model(Gtk.StringList.new([d.name for d in self._displays]))
        selected = 0
        if previous is not None:
            for i, d in enumerate(self._displays):
                if d.name == previous.name:
                    selected = i
                    break
        if self._displays:
            self._combo_display.set_selected(selected)
        self._building = False
        self._populate_resolutions()

    def _populate_resolutions(self) -> None:
        display = self._selected_display()
        labels = display.resolution_labels if display else []
        self._building = True
        self._combo_resolution.set_model(Gtk.StringList.new(labels))
        if labels:
            self._combo_resolution.set_selected(0)
        self._building = False
        self._recompute_script()

    def _selected_display(self) -> Display | None:
        idx = self._combo_display.get_selected()
        if idx == Gtk.INVALID_LIST_POSITION or idx >= len(self._displays):
            return None
        return self._displays[idx]

    def _selected_resolution(self) -> Resolution | None:
        display = self._selected_display()
        if display is None:
            return None
        idx = self._combo_resolution.get_selected()
        if idx == Gtk.INVALID_LIST_POSITION or idx >= len(display.resolutions):
            return None
        return display.resolutions[idx]

    # ── Script ───────────────────────────────────────────────────────

    def _recompute_script(self, *_args) -> None:
        """Regenerate the preview from the current display, resolution and scale."""
        if self._building:
            return
        display = self._selected_display()
        resolution = self._selected_resolution()
        scale = self._spin_scale.get_value()

        script = ""
        if display is not None and resolution is not None:
            try:
                script = generate_script(display.name, resolution, scale, self._cvt)
            except HiDPIFixerError as e:
                log.warning("Script generation failed: %s", e)
                self._toast(f"Cannot generate script: {e}")

        self._script = script
        self._preview.get_buffer().set_text(script)
        self._update_script_controls()

    def _update_script_controls(self) -> None:
        has_script = bool(self._script)
        self._btn_test.set_sensitive(has_script)
        self._btn_save.set_sensitive(has_script)
        action = self.lookup_action("save")
        if action:
            action.set_enabled(has_script)

    def _on_display_changed(self, row: Adw.ComboRow, pspec) -> None:
        if self._building:
            return
        self._populate_resolutions()

    def _on_hotplug(self) -> None:
        log.info("Display topology changed, re-detecting")
        self._load_displays()

    # ── Actions ──────────────────────────────────────────────────────

    def _on_test_clicked(self, btn) -> None:
        try:
            self._installer.test(self._script)
        except (HiDPIFixerError, OSError) as e:
            log.warning("Test run failed: %s", e)
            self._toast(f"Cannot run script: {e}")
            return
        self._toast("Script executed")

    def _on_save_clicked(self, btn) -> None:
        display = self._selected_display()
        if display is None or not self._script:
            return
        scale = self._spin_scale.get_value()
        try:
            self._installer.install(display.name, self._script, scale, self._sw_fix_qt.get_active())
        except (HiDPIFixerError, OSError) as e:
            log.warning("Saving script for %s failed: %s", display.name, e)
            self._toast(f"Cannot save script: {e}")
            return
        self._toast(
            f"Changes applied at scale {integer_factor(scale)}. "
            "Log out and in again to check the script works as intended."
        )

    def _on_close_request(self, win) -> bool:
        self._watcher.stop()
        try:
            self._installer.remove_test_script()
        except OSError as e:
            log.warning("Cannot remove test script: %s", e)
        self._app_settings["scale_factor"] = self._spin_scale.get_value()
        self._app_settings["fix_qt_dpi"] = self._sw_fix_qt.get_active()
        save_app_settings(self._app_settings)
        return False

    # ── Helpers ──────────────────────────────────────────────────────

    def _toast(self, message: str) -> None:
        toast = Adw.Toast(title=message)
        # tool stderr may contain markup characters
        toast.set_use_markup(False)
        toast.set_timeout(4)
        self._toast_overlay.add_toast(toast)
