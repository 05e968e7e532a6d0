#!/usr/bin/env python3
# easyhtui.py — EasyHTUI home theater launcher
# This file is part of the EasyHTUI launcher.
# Copyright (c) 2025 the EasyHTUI authors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License
# as published by the Free Software Foundation, version 3.
#
# YOU MUST KEEP THIS HEADER AS IT IS
#
import os
import sys
import signal

# Add script directory to path so imports work from anywhere
script_path = os.path.realpath(__file__)
script_dir = os.path.dirname(script_path)
if script_dir not in sys.path:
    sys.path.insert(0, script_dir)

from config_utils import load_config, validate_config, ConfigError
from log import install_crash_handler
from shell import ensure_display

USAGE = "usage: easyhtui.py [config.json] [style.css] [--windowed]"


def find_file(filename, default_path, env_var=None):
    """Find file in priority order:
    1. $env_var when set
    2. ~/.config/easyhtui/
    3. /usr/share/easyhtui/
    4. Same directory as easyhtui.py (default_path)
    """
    search_paths = []
    if env_var and os.environ.get(env_var):
        search_paths.append(os.environ[env_var])
    search_paths += [
        os.path.expanduser(f"~/.config/easyhtui/{filename}"),
        f"/usr/share/easyhtui/{filename}",
        default_path,
    ]
    for path in search_paths:
        if os.path.exists(path):
            return path
    # Return default path even if it doesn't exist (for error messages)
    return default_path


def parse_args(argv):
    config_path = None
    css_path = None
    fullscreen = True
    for arg in argv:
        if arg in ("-h", "--help"):
            print(USAGE)
            sys.exit(0)
        if arg == "--windowed":
            fullscreen = False
            continue
        if arg == "--fullscreen":
            fullscreen = True
            continue
        if arg.endswith(".css"):
            css_path = css_path or arg
        elif config_path is None:
            config_path = arg
    return config_path, css_path, fullscreen


def main():
    install_crash_handler()
    config_path, css_path, fullscreen = parse_args(sys.argv[1:])

    if config_path is None:
        config_path = find_file("config.json", os.path.join(script_dir, "config.json"), "EASYHTUI_CONFIG")
    if css_path is None:
        css_path = find_file("style.css", os.path.join(script_dir, "style.css"))

    if not os.path.exists(config_path):
        sys.stderr.write(f"ERROR: config file not found: {config_path}\n")
        sys.exit(1)
    if not os.path.exists(css_path):
        sys.stderr.write(f"WARNING: CSS file not found: {css_path} — running without custom styles.\n")

    try:
        config = load_config(config_path)
    except ConfigError as e:
        sys.stderr.write(f"ERROR: {e}\n")
        sys.exit(2)
    errs, warns = validate_config(config)
    if warns:
        sys.stderr.write("Config warnings:\n")
        for w in warns:
            sys.stderr.write(f" - {w}\n")
    if errs:
        sys.stderr.write("Config errors:\n")
        for e in errs:
            sys.stderr.write(f" - {e}\n")
        sys.exit(2)

    if not ensure_display():
        sys.stderr.write("ERROR: No GUI display detected. Set DISPLAY or WAYLAND_DISPLAY.\n")
        sys.exit(1)

    import gi
    gi.require_version('Gtk', '3.0')
    from gi.repository import Gtk
    try:
        ok, _ = Gtk.init_check(sys.argv)
    except Exception:
        ok = False
    if not ok:
        sys.stderr.write("ERROR: Gtk couldn't be initialized.\n")
        sys.exit(1)

    from ui_core import LauncherApp
    app = LauncherApp(config, config_path, css_path, fullscreen)

    def signal_handler(*_):
        app.core.quit()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    app.run()


if __name__ == "__main__":
    main()
