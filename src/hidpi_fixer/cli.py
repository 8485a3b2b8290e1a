"""Command line entry point: option handling before the GUI starts."""

from __future__ import annotations

import argparse
import logging
import sys

from . import __version__
from .installer import ScriptInstaller
from .utils import InstallPaths, is_x11_session, load_app_settings, setup_logging

log = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="hidpi-fixer",
        description="Generate and install xrandr scripts that rescale X11 displays for HiDPI use",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-u", "--uninstall", action="store_true",
        help="remove all scripts and startup launchers created by HiDPI Fixer",
    )
    parser.add_argument(
        "-v", "--version", action="version",
        version=(
            f"%(prog)s {__version__}\n"
            "Copyright (c) 2018 Alex Spataru. Released under the MIT License."
        ),
    )
    parser.add_argument("-d", "--debug", action="store_true", help="enable debug logging")
    return parser.parse_args(argv)


def uninstall(paths: InstallPaths) -> int:
    settings = load_app_settings()
    installer = ScriptInstaller(paths, timeout=float(settings["tool_timeout"]))
    try:
        removed = installer.uninstall()
    except OSError as e:
        log.error("Uninstall failed: %s", e)
        return 1
    for path in removed:
        log.info("Removed %s", path)
    if not removed:
        log.info("Nothing to remove")
    log.info("Uninstall finished, have a nice day!")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(args.debug)

    # Uninstall works on any display server
    if args.uninstall:
        return uninstall(InstallPaths.default())

    if not sys.platform.startswith("linux"):
        log.error("This application is intended for Linux distributions only")
        return 1
    if not is_x11_session():
        log.warning("Not running on an X11 session; xrandr changes may have no effect")

    from .app import main as run_app
    return run_app()


if __name__ == "__main__":
    raise SystemExit(main())
