import copy
import datetime
import json
import os

import pytest

from config_utils import (ConfigError, NavigationTuning, add_app, add_category, app_form_values,
                          app_from_form, delete_app, delete_category, filter_apps, find_app,
                          list_backups, load_config, move_app, navigation_tuning,
                          restore_backup, save_config, set_category_style, update_app,
                          validate_config)

SAMPLE = {
    "title": "Living room",
    "categories": {
        "Streaming": [
            {"id": "yt", "name": "YouTube", "type": "website", "url": "https://youtube.com/tv"},
            {"id": "nf", "name": "Netflix", "type": "website", "url": "https://netflix.com"},
            {"id": "tw", "name": "Twitch", "type": "website", "url": "https://twitch.tv"},
        ],
        "Games": [
            {"id": "bg3", "name": "Baldur's Gate 3", "type": "steam", "path": "1086940"},
        ],
    },
    "categoryStyles": {"Games": "portrait"},
}


@pytest.fixture
def config():
    return copy.deepcopy(SAMPLE)


@pytest.fixture
def config_file(tmp_path, config):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config), encoding="utf-8")
    return path


def test_bundled_config_is_valid():
    root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    errors, _ = validate_config(load_config(os.path.join(root, "config.json")))
    assert errors == []


def test_valid_config(config):
    assert validate_config(config) == ([], [])


def test_validation_errors(config):
    config["categories"]["Streaming"][1]["id"] = "yt"
    config["categories"]["Streaming"][2]["type"] = "flatpak"
    config["categories"]["Games"][0]["name"] = "  "
    config["categoryStyles"]["Streaming"] = "huge"
    config["navigation"] = {"debounce_ms": -5, "scroll_jitter_px": True}
    errors, _ = validate_config(config)
    assert len(errors) == 6
    assert any("duplicate id 'yt'" in e for e in errors)
    assert any("flatpak" in e for e in errors)
    assert any("missing 'name'" in e for e in errors)
    assert any("huge" in e for e in errors)


@pytest.mark.parametrize("section", ["categoryStyles", "navigation"])
def test_malformed_section_is_reported(config, section):
    config[section] = ["portrait", 1]
    errors, _ = validate_config(config)
    assert len(errors) == 1
    assert section in errors[0]


def test_validation_warnings(config):
    config["theme"] = "dark"
    config["categoryStyles"]["Music"] = "list"
    config["navigation"] = {"warp_speed": 9}
    del config["categories"]["Streaming"][0]["url"]
    errors, warnings = validate_config(config)
    assert errors == []
    assert len(warnings) == 4


def test_categories_must_be_an_object():
    errors, _ = validate_config({"categories": []})
    assert len(errors) == 1


def test_load_config_errors(tmp_path):
    with pytest.raises(ConfigError):
        load_config(str(tmp_path / "missing.json"))
    bad = tmp_path / "bad.json"
    bad.write_text("{ nope", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(str(bad))
    arr = tmp_path / "arr.json"
    arr.write_text("[]", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(str(arr))


def test_load_config_fills_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text('{"title": "x"}', encoding="utf-8")
    config = load_config(str(path))
    assert config["categories"] == {}
    assert config["categoryStyles"] == {}
    assert config["title"] == "x"
    bare = tmp_path / "bare.json"
    bare.write_text("{}", encoding="utf-8")
    other = load_config(str(bare))
    assert other["title"] == "Home Theater"
    other["categories"]["Music"] = []
    assert config["categories"] == {}


def test_save_keeps_dated_backup(config_file, config):
    config["title"] = "Den"
    backup = save_config(config, str(config_file))
    stamp = datetime.date.today().isoformat()
    assert backup.name == f"config-{stamp}.json"
    assert json.loads(backup.read_text(encoding="utf-8"))["title"] == "Living room"
    assert load_config(str(config_file))["title"] == "Den"
    assert list_backups(str(config_file)) == [backup.name]
    assert not (config_file.parent / "config.json.tmp").exists()


def test_save_new_file_has_no_backup(tmp_path, config):
    path = tmp_path / "fresh.json"
    assert save_config(config, str(path)) is None
    assert list_backups(str(path)) == []


def test_list_backups_newest_first(tmp_path):
    bdir = tmp_path / "backups"
    bdir.mkdir()
    for name in ("config-2024-01-02.json", "config-2025-06-01.json", "notes.txt"):
        (bdir / name).write_text("{}", encoding="utf-8")
    assert list_backups(str(tmp_path / "config.json")) == [
        "config-2025-06-01.json", "config-2024-01-02.json"]


def test_restore_backup(config_file, config):
    bdir = config_file.parent / "backups"
    bdir.mkdir()
    old = dict(config, title="Old")
    (bdir / "config-2024-01-02.json").write_text(json.dumps(old), encoding="utf-8")
    restored = restore_backup(str(config_file), "config-2024-01-02.json")
    assert restored["title"] == "Old"
    assert load_config(str(config_file))["title"] == "Old"
    with pytest.raises(ConfigError):
        restore_backup(str(config_file), "../config.json")


def test_restore_rejects_invalid_backup(config_file):
    bdir = config_file.parent / "backups"
    bdir.mkdir()
    (bdir / "config-2024-01-02.json").write_text('{"categories": []}', encoding="utf-8")
    with pytest.raises(ConfigError):
        restore_backup(str(config_file), "config-2024-01-02.json")
    assert load_config(str(config_file))["title"] == "Living room"


def test_add_app(config):
    app = add_app(config, "Tools", {"name": "Kodi", "type": "executable", "path": "kodi",
                                    "color1": "#000000"})
    assert app["id"]
    assert app["color1"] == "#000000"
    assert config["categories"]["Tools"] == [app]
    game = add_app(config, "Games", {"name": "Hades", "type": "steam", "path": "1145360",
                                     "color1": "#111111", "color2": "#222222"})
    assert "color1" not in game and "color2" not in game
    assert game["id"] != app["id"]
    with pytest.raises(ConfigError):
        add_app(config, "Tools", {"name": "X", "type": "flatpak"})
    with pytest.raises(ConfigError):
        add_app(config, "", {"name": "X", "type": "website"})


def test_app_from_form():
    app = app_from_form({"name": " Kodi ", "type": "executable", "target": "kodi --standalone",
                         "icon": "", "color1": "#17b2e7", "color2": " "})
    assert app == {"name": "Kodi", "type": "executable", "path": "kodi --standalone",
                   "color1": "#17b2e7"}
    site = app_from_form({"name": "Plex", "type": "website", "target": "https://app.plex.tv"})
    assert site["url"] == "https://app.plex.tv"
    assert "path" not in site
    for form in ({"type": "website", "target": "x"},
                 {"name": "X", "type": "flatpak", "target": "x"},
                 {"name": "X", "type": "steam", "target": "  "}):
        with pytest.raises(ConfigError):
            app_from_form(form)


def test_app_form_values_round_trip(config):
    app = config["categories"]["Streaming"][0]
    values = app_form_values(app)
    assert values["target"] == "https://youtube.com/tv"
    assert values["color1"] == ""
    rebuilt = app_from_form(values)
    assert rebuilt == {k: v for k, v in app.items() if k != "id"}


def test_update_app_keeps_id_and_position(config):
    app = update_app(config, "nf", app_from_form({"name": "Netflix 4K", "type": "website",
                                                  "target": "https://netflix.com/browse"}))
    assert app["id"] == "nf"
    assert config["categories"]["Streaming"][1] == app
    game = update_app(config, "bg3", {"name": "BG3", "type": "steam", "path": "1086940",
                                      "color1": "#000000", "color2": "#ffffff"})
    assert "color1" not in game
    assert find_app(config, "bg3") == ("Games", 0)
    with pytest.raises(ConfigError):
        update_app(config, "zz", {"name": "X", "type": "website", "url": "x"})
    with pytest.raises(ConfigError):
        update_app(config, "nf", {"name": "X", "type": "flatpak"})


def test_move_app(config):
    assert move_app(config, "nf", "Streaming", "left") == 0
    assert [a["id"] for a in config["categories"]["Streaming"]] == ["nf", "yt", "tw"]
    assert move_app(config, "yt", "Streaming", "right") == 2
    with pytest.raises(ConfigError):
        move_app(config, "nf", "Streaming", "left")
    with pytest.raises(ConfigError):
        move_app(config, "nf", "Streaming", "up")
    with pytest.raises(ConfigError):
        move_app(config, "nf", "Nope", "right")
    with pytest.raises(ConfigError):
        move_app(config, "zz", "Streaming", "right")


def test_delete_app(config):
    assert find_app(config, "tw") == ("Streaming", 2)
    assert delete_app(config, "tw")["name"] == "Twitch"
    assert find_app(config, "tw") is None
    with pytest.raises(ConfigError):
        delete_app(config, "tw")


def test_categories(config):
    add_category(config, "  Music ")
    assert config["categories"]["Music"] == []
    with pytest.raises(ConfigError):
        add_category(config, "Music")
    with pytest.raises(ConfigError):
        add_category(config, "   ")
    set_category_style(config, "Music", "list")
    assert config["categoryStyles"]["Music"] == "list"
    with pytest.raises(ConfigError):
        set_category_style(config, "Music", "huge")
    with pytest.raises(ConfigError):
        set_category_style(config, "Nope", "list")
    assert delete_category(config, "Games") == 1
    assert "Games" not in config["categories"]
    assert "Games" not in config["categoryStyles"]
    with pytest.raises(ConfigError):
        delete_category(config, "Games")


def test_filter_apps(config):
    assert filter_apps(config, "") == config["categories"]
    assert filter_apps(config, "  ") == config["categories"]
    assert filter_apps(config, "NET") == {"Streaming": [config["categories"]["Streaming"][1]]}
    assert list(filter_apps(config, "steam")) == ["Games"]
    assert filter_apps(config, "stream") == {"Streaming": config["categories"]["Streaming"]}
    assert filter_apps(config, "zzz") == {}


def test_navigation_tuning(config):
    assert navigation_tuning(config) == NavigationTuning()
    config["navigation"] = {"debounce_ms": 150, "warp_speed": 9}
    tuning = navigation_tuning(config)
    assert tuning.debounce_ms == 150
    assert tuning.same_row_tolerance_px == 20
