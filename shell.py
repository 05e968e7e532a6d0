# shell.py — app launching helpers and display utilities
# This file is part of the EasyHTUI launcher.
# Copyright (c) 2025 the EasyHTUI authors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License
# as published by the Free Software Foundation, version 3.
#
# YOU MUST KEEP THIS HEADER AS IT IS
import os
import shlex
import subprocess

from log import debug_print

# Default to disable AT-SPI DBus chatter for performance/stability
os.environ.setdefault("NO_AT_BRIDGE", "1")

OPENER = "xdg-open"


class LaunchError(Exception):
    pass


def app_target(app: dict) -> str:
    return ((app.get("url") or app.get("path")) or "").strip()


def build_launch_command(app: dict) -> list[str]:
    """
    Command line for an app entry:
    - website: the URL through xdg-open
    - executable: the path, split like a shell would
    - steam: steam://rungameid/<id> (a bare app id is accepted)
    - epic: the com.epicgames.launcher:// URL through xdg-open
    """
    app_type = app.get("type")
    target = app_target(app)
    name = app.get("name", "?")
    if not target:
        raise LaunchError(f"No URL or path specified for {name}")
    if app_type == "website":
        return [OPENER, target]
    if app_type == "executable":
        try:
            argv = shlex.split(target)
        except ValueError as e:
            raise LaunchError(f"Cannot parse command for {name}: {e}") from e
        if not argv:
            raise LaunchError(f"No path specified for {name}")
        return argv
    if app_type == "steam":
        if target.isdigit():
            target = f"steam://rungameid/{target}"
        return [OPENER, target]
    if app_type == "epic":
        return [OPENER, target]
    raise LaunchError(f"Unknown app type: {app_type}")


def launch_app(app: dict) -> subprocess.Popen:
    """Start the app detached from the launcher (own session, no stdio)."""
    argv = build_launch_command(app)
    debug_print(f"Launching {app.get('name')}: {argv}")
    try:
        return subprocess.Popen(
            argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as e:
        raise LaunchError(f"Failed to launch {app.get('name')}: {e}") from e


def ensure_display() -> bool:
    return bool(os.environ.get("WAYLAND_DISPLAY") or os.environ.get("DISPLAY"))


def get_primary_geometry():
    """
    Returns (x, y, width, height) for the primary monitor.
    Falls back to monitor 0, and to 1280x720 if unavailable.
    """
    import gi
    gi.require_version('Gdk', '3.0')
    from gi.repository import Gdk

    display = Gdk.Display.get_default()
    mon = None
    try:
        mon = display.get_primary_monitor()
    except Exception:
        mon = None
    if mon is None:
        try:
            mon = display.get_monitor(0)
        except Exception:
            mon = None
    if mon and hasattr(mon, "get_geometry"):
        g = mon.get_geometry()
        return g.x, g.y, g.width, g.height
    return (0, 0, 1280, 720)
