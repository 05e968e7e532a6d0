# config_utils.py — JSON config store, validator and editing helpers
# This file is part of the EasyHTUI launcher.
# Copyright (c) 2025 the EasyHTUI authors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License
# as published by the Free Software Foundation, version 3.
#
# YOU MUST KEEP THIS HEADER AS IT IS
import copy
import datetime
import json
import os
import secrets
import time
from dataclasses import dataclass, fields
from pathlib import Path

from log import debug_print

APP_TYPES = ("website", "executable", "steam", "epic")
CATEGORY_STYLES = ("", "compact", "portrait", "landscape", "list", "large", "minimal")
BACKUP_DIRNAME = "backups"

DEFAULT_CONFIG = {
    "title": "Home Theater",
    "categories": {},
    "categoryStyles": {},
}


class ConfigError(Exception):
    pass


@dataclass
class NavigationTuning:
    """Pixel thresholds and timings of the focus navigation, in px and ms."""
    vertical_exclusion_px: float = 10
    same_row_tolerance_px: float = 20
    top_row_tolerance_px: float = 30
    scroll_jitter_px: float = 20
    max_scroll_duration_ms: int = 1000
    header_margin_px: float = 20
    footer_margin_px: float = 20
    debounce_ms: int = 100
    axis_threshold: float = 0.5


def navigation_tuning(config: dict) -> NavigationTuning:
    overrides = config.get("navigation") or {}
    if not isinstance(overrides, dict):
        overrides = {}
    known = {f.name for f in fields(NavigationTuning)}
    return NavigationTuning(**{k: v for k, v in overrides.items() if k in known})


def generate_id() -> str:
    return format(int(time.time() * 1000), "x") + secrets.token_hex(4)


def load_config(path: str) -> dict:
    try:
        with open(path, "r", encoding="utf-8") as f:
            config = json.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path} (line {e.lineno}): {e.msg}") from e
    if not isinstance(config, dict):
        raise ConfigError(f"{path}: top level must be an object")
    for key, value in DEFAULT_CONFIG.items():
        config.setdefault(key, copy.deepcopy(value))
    return config


def validate_config(config: dict) -> tuple[list[str], list[str]]:
    errors: list[str] = []
    warnings: list[str] = []

    known_top = {"title", "categories", "categoryStyles", "navigation", "weather"}
    for k in config:
        if k not in known_top:
            warnings.append(f"Unknown top-level key '{k}'")

    categories = config.get("categories")
    if not isinstance(categories, dict):
        errors.append("'categories' must be an object of category name -> list of apps")
        return errors, warnings

    seen_ids = set()
    for cat, apps in categories.items():
        if not isinstance(apps, list):
            errors.append(f"Category '{cat}' must hold a list of apps")
            continue
        for pos, app in enumerate(apps):
            where = f"{cat}[{pos}]"
            if not isinstance(app, dict):
                errors.append(f"{where}: app must be an object")
                continue
            app_id = app.get("id")
            if not app_id:
                errors.append(f"{where}: missing 'id'")
            elif app_id in seen_ids:
                errors.append(f"{where}: duplicate id '{app_id}'")
            else:
                seen_ids.add(app_id)
            if not (app.get("name") or "").strip():
                errors.append(f"{where}: missing 'name'")
            app_type = app.get("type")
            if app_type not in APP_TYPES:
                errors.append(f"{where}: unknown type '{app_type}' (expected one of {', '.join(APP_TYPES)})")
            elif not (app.get("url") or app.get("path")):
                warnings.append(f"{where}: '{app.get('name')}' has no url/path and cannot be launched")

    styles = config.get("categoryStyles") or {}
    if not isinstance(styles, dict):
        errors.append("'categoryStyles' must be an object of category name -> style")
        styles = {}
    for cat, style in styles.items():
        if cat not in categories:
            warnings.append(f"Style set for unknown category '{cat}'")
        if style not in CATEGORY_STYLES:
            errors.append(f"Invalid style '{style}' for category '{cat}'")

    nav = config.get("navigation") or {}
    if not isinstance(nav, dict):
        errors.append("'navigation' must be an object of setting -> number")
        nav = {}
    known = {f.name for f in fields(NavigationTuning)}
    for k, v in nav.items():
        if k not in known:
            warnings.append(f"Unknown navigation setting '{k}'")
        elif isinstance(v, bool) or not isinstance(v, (int, float)) or v < 0:
            errors.append(f"navigation.{k} must be a number >= 0")

    return errors, warnings


# ---- Persistence ----
def backup_dir(path: str) -> Path:
    return Path(path).parent / BACKUP_DIRNAME


def save_config(config: dict, path: str) -> Path | None:
    """Write config, keeping a dated copy of the previous file. Returns the backup path."""
    target = Path(path)
    backup = None
    if target.exists():
        bdir = backup_dir(path)
        bdir.mkdir(parents=True, exist_ok=True)
        stamp = datetime.date.today().isoformat()
        backup = bdir / f"config-{stamp}.json"
        try:
            backup.write_text(target.read_text(encoding="utf-8"), encoding="utf-8")
            debug_print(f"Config backed up to {backup}")
        except OSError as e:
            print(f"Backup failed: {e}")
            backup = None
    tmp = target.with_suffix(target.suffix + ".tmp")
    try:
        tmp.write_text(json.dumps(config, indent=2, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp, target)
    except OSError as e:
        raise ConfigError(f"Failed to write configuration: {e}") from e
    return backup


def list_backups(path: str) -> list[str]:
    bdir = backup_dir(path)
    if not bdir.is_dir():
        return []
    names = [p.name for p in bdir.iterdir() if p.name.startswith("config-") and p.name.endswith(".json")]
    return sorted(names, reverse=True)


def restore_backup(path: str, filename: str) -> dict:
    if os.path.basename(filename) != filename:
        raise ConfigError(f"Invalid backup name '{filename}'")
    config = load_config(str(backup_dir(path) / filename))
    errors, _warnings = validate_config(config)
    if errors:
        raise ConfigError(f"Backup {filename} is not a valid configuration: {errors[0]}")
    save_config(config, path)
    return config


# ---- Editing ----
def find_app(config: dict, app_id: str) -> tuple[str, int] | None:
    for cat, apps in config["categories"].items():
        for i, app in enumerate(apps):
            if app.get("id") == app_id:
                return cat, i
    return None


def app_from_form(form: dict) -> dict:
    """
    App entry from the admin form fields (name, type, target, icon, color1, color2).
    The target is stored as 'url' for websites and as 'path' for everything else.
    """
    name = (form.get("name") or "").strip()
    if not name:
        raise ConfigError("Name is required")
    app_type = (form.get("type") or "").strip()
    if app_type not in APP_TYPES:
        raise ConfigError(f"Unknown app type '{app_type}'")
    target = (form.get("target") or "").strip()
    if not target:
        raise ConfigError("URL or path is required")
    app = {"name": name, "type": app_type, ("url" if app_type == "website" else "path"): target}
    for key in ("icon", "color1", "color2"):
        value = (form.get(key) or "").strip()
        if value:
            app[key] = value
    return app


def app_form_values(app: dict) -> dict:
    return {
        "name": app.get("name") or "",
        "type": app.get("type") or APP_TYPES[0],
        "target": app.get("url") or app.get("path") or "",
        "icon": app.get("icon") or "",
        "color1": app.get("color1") or "",
        "color2": app.get("color2") or "",
    }


def add_app(config: dict, category: str, app: dict) -> dict:
    if not category:
        raise ConfigError("Category is required")
    if app.get("type") not in APP_TYPES:
        raise ConfigError(f"Unknown app type '{app.get('type')}'")
    new_app = dict(app)
    new_app["id"] = generate_id()
    if category == "Games":
        new_app.pop("color1", None)
        new_app.pop("color2", None)
    config["categories"].setdefault(category, []).append(new_app)
    return new_app


def move_app(config: dict, app_id: str, category: str, direction: str) -> int:
    """Swap the app with its left/right neighbour; returns its new position."""
    if direction not in ("left", "right"):
        raise ConfigError("Direction must be 'left' or 'right'")
    apps = config["categories"].get(category)
    if apps is None:
        raise ConfigError(f"Category '{category}' not found")
    idx = next((i for i, a in enumerate(apps) if a.get("id") == app_id), -1)
    if idx < 0:
        raise ConfigError(f"App '{app_id}' not found in '{category}'")
    new_idx = idx - 1 if direction == "left" else idx + 1
    if not (0 <= new_idx < len(apps)):
        raise ConfigError(f"Cannot move app {direction} - already at boundary")
    apps[idx], apps[new_idx] = apps[new_idx], apps[idx]
    return new_idx


def update_app(config: dict, app_id: str, app: dict) -> dict:
    """Replace the app in place, keeping its id and position."""
    found = find_app(config, app_id)
    if found is None:
        raise ConfigError(f"App '{app_id}' not found")
    if app.get("type") not in APP_TYPES:
        raise ConfigError(f"Unknown app type '{app.get('type')}'")
    cat, idx = found
    new_app = dict(app)
    new_app["id"] = app_id
    if cat == "Games":
        new_app.pop("color1", None)
        new_app.pop("color2", None)
    config["categories"][cat][idx] = new_app
    return new_app


def delete_app(config: dict, app_id: str) -> dict:
    found = find_app(config, app_id)
    if found is None:
        raise ConfigError(f"App '{app_id}' not found")
    cat, idx = found
    return config["categories"][cat].pop(idx)


def add_category(config: dict, name: str):
    name = (name or "").strip()
    if not name:
        raise ConfigError("Category name is required")
    if name in config["categories"]:
        raise ConfigError(f"Category '{name}' already exists")
    config["categories"][name] = []


def delete_category(config: dict, name: str) -> int:
    if name not in config["categories"]:
        raise ConfigError(f"Category '{name}' not found")
    count = len(config["categories"].pop(name))
    config.get("categoryStyles", {}).pop(name, None)
    return count


def set_category_style(config: dict, name: str, style: str):
    if name not in config["categories"]:
        raise ConfigError(f"Category '{name}' not found")
    if style not in CATEGORY_STYLES:
        raise ConfigError(f"Invalid style. Must be one of: {', '.join(CATEGORY_STYLES)}")
    config.setdefault("categoryStyles", {})[name] = style


def filter_apps(config: dict, query: str) -> dict:
    """Categories -> apps matching query on name, type or category; empty query keeps everything."""
    q = (query or "").strip().lower()
    if not q:
        return dict(config["categories"])
    result = {}
    for cat, apps in config["categories"].items():
        hits = [a for a in apps
                if q in (a.get("name") or "").lower()
                or q in (a.get("type") or "").lower()
                or q in cat.lower()]
        if hits:
            result[cat] = hits
    return result
