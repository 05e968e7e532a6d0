import subprocess

import pytest

import shell
from shell import LaunchError, build_launch_command, launch_app


def test_website():
    assert build_launch_command({"type": "website", "url": "https://netflix.com"}) == [
        "xdg-open", "https://netflix.com"]


def test_executable_is_split_like_a_shell():
    app = {"type": "executable", "path": "kodi --standalone '/media/my films'"}
    assert build_launch_command(app) == ["kodi", "--standalone", "/media/my films"]


def test_steam_bare_id():
    assert build_launch_command({"type": "steam", "path": "1086940"}) == [
        "xdg-open", "steam://rungameid/1086940"]
    assert build_launch_command({"type": "steam", "path": "steam://rungameid/1"}) == [
        "xdg-open", "steam://rungameid/1"]


def test_epic():
    url = "com.epicgames.launcher://apps/Fortnite?action=launch"
    assert build_launch_command({"type": "epic", "path": url}) == ["xdg-open", url]


@pytest.mark.parametrize("app", [
    {"type": "website", "name": "Empty"},
    {"type": "website", "url": "   "},
    {"type": "flatpak", "path": "org.kodi.Kodi"},
    {"type": "executable", "path": "kodi 'unterminated"},
])
def test_bad_entries(app):
    with pytest.raises(LaunchError):
        build_launch_command(app)


def test_launch_app_detaches(monkeypatch):
    seen = {}

    def fake_popen(argv, **kwargs):
        seen["argv"] = argv
        seen.update(kwargs)
        return "proc"

    monkeypatch.setattr(shell.subprocess, "Popen", fake_popen)
    assert launch_app({"name": "Kodi", "type": "executable", "path": "kodi"}) == "proc"
    assert seen["argv"] == ["kodi"]
    assert seen["start_new_session"] is True
    assert seen["stdout"] is subprocess.DEVNULL


def test_launch_app_wraps_os_errors(monkeypatch):
    def fail(argv, **kwargs):
        raise FileNotFoundError(argv[0])

    monkeypatch.setattr(shell.subprocess, "Popen", fail)
    with pytest.raises(LaunchError):
        launch_app({"name": "Ghost", "type": "executable", "path": "/no/such/bin"})


def test_ensure_display(monkeypatch):
    monkeypatch.delenv("DISPLAY", raising=False)
    monkeypatch.delenv("WAYLAND_DISPLAY", raising=False)
    assert not shell.ensure_display()
    monkeypatch.setenv("WAYLAND_DISPLAY", "wayland-0")
    assert shell.ensure_display()
