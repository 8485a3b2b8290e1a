"""DRM hotplug notifications delivered on the GLib main loop."""

from __future__ import annotations

import logging
from typing import Callable

import gi
gi.require_version("GLib", "2.0")
from gi.repository import GLib

try:
    import pyudev
    HAS_PYUDEV = True
except ImportError:
    HAS_PYUDEV = False

log = logging.getLogger(__name__)

DEBOUNCE_MS = 500


class DisplayWatcher:
    """Calls *callback* once a burst of DRM udev events has settled."""

    def __init__(self, callback: Callable[[], None]) -> None:
        self._callback = callback
        self._monitor = None
        self._watch_id: int = 0
        self._debounce_id: int = 0

    def start(self) -> bool:
        """Begin watching. Returns False if udev is unavailable."""
        if not HAS_PYUDEV:
            log.info("pyudev not available, hotplug detection disabled")
            return False
        try:
            context = pyudev.Context()
            monitor = pyudev.Monitor.from_netlink(context)
            monitor.filter_by(subsystem="drm")
            monitor.start()
        except (OSError, ImportError) as e:
            log.warning("Cannot open udev monitor: %s", e)
            return False

        self._monitor = monitor
        self._watch_id = GLib.io_add_watch(
            monitor.fileno(), GLib.PRIORITY_DEFAULT, GLib.IOCondition.IN, self._on_readable,
        )
        log.debug("Watching DRM hotplug events")
        return True

    def stop(self) -> None:
        if self._debounce_id:
            GLib.source_remove(self._debounce_id)
            self._debounce_id = 0
        if self._watch_id:
            GLib.source_remove(self._watch_id)
            self._watch_id = 0
        self._monitor = None

    def _on_readable(self, _fd, _condition) -> bool:
        device = self._monitor.poll(timeout=0) if self._monitor else None
        if device is not None and device.action in ("change", "add", "remove"):
            log.info("udev DRM event: %s %s", device.action, device.device_path)
            if self._debounce_id:
                GLib.source_remove(self._debounce_id)
            self._debounce_id = GLib.timeout_add(DEBOUNCE_MS, self._fire)
        return True

    def _fire(self) -> bool:
        self._debounce_id = 0
        self._callback()
        return False
