import pytest

from conftest import FakeGrid, make_grid
from focus import FocusNavigator
from gamepads import (BTN_A, BTN_B, BTN_DPAD_RIGHT, BTN_DPAD_DOWN, STANDARD_BUTTON_COUNT,
                      EvdevGamepadSource, GamepadPoller, GamepadSample, dispatch_to_navigator)


def pad(x=0.0, y=0.0, pressed=()):
    buttons = [False] * STANDARD_BUTTON_COUNT
    for b in pressed:
        buttons[b] = True
    return GamepadSample((x, y), tuple(buttons))


NEUTRAL = pad()


@pytest.fixture
def actions():
    return []


@pytest.fixture
def poller(actions):
    return GamepadPoller(actions.append)


def test_held_dpad_fires_once(poller, actions):
    for _ in range(30):
        poller.poll([pad(pressed=[BTN_DPAD_RIGHT])])
    assert actions == ["axis_right"]
    poller.poll([NEUTRAL])
    poller.poll([pad(pressed=[BTN_DPAD_RIGHT])])
    assert actions == ["axis_right", "axis_right"]


def test_stick_beyond_threshold(poller, actions):
    poller.poll([pad(x=0.4)])
    assert actions == []
    poller.poll([pad(x=0.8)])
    poller.poll([pad(x=0.9)])
    poller.poll([pad(y=-0.7)])
    assert actions == ["axis_right", "axis_up"]


def test_stick_and_dpad_share_a_latch(poller, actions):
    poller.poll([pad(y=0.9)])
    poller.poll([pad(y=0.9, pressed=[BTN_DPAD_DOWN])])
    poller.poll([pad(pressed=[BTN_DPAD_DOWN])])
    assert actions == ["axis_down"]


def test_face_buttons(poller, actions):
    poller.poll([pad(pressed=[BTN_A])])
    poller.poll([pad(pressed=[BTN_A])])
    poller.poll([pad(pressed=[BTN_B])])
    assert actions == ["activate", "back"]


def test_latches_first_connected_slot(poller, actions):
    poller.poll([None, pad(pressed=[BTN_A]), pad(pressed=[BTN_B])])
    assert poller.gamepad_index == 1
    assert actions == ["activate"]
    poller.poll([pad(pressed=[BTN_B]), NEUTRAL, pad(pressed=[BTN_B])])
    assert actions == ["activate"]


def test_no_controller(poller, actions):
    poller.poll([])
    poller.poll([None, None])
    assert poller.gamepad_index == -1
    assert actions == []


def test_short_sample_is_neutral(poller, actions):
    poller.poll([GamepadSample((), ())])
    assert actions == []


def test_held_direction_moves_focus_once(clock):
    grid = FakeGrid(make_grid([6]))
    nav = FocusNavigator(grid, grid, time_source=clock.now)
    poller = GamepadPoller(lambda action: dispatch_to_navigator(nav, action))
    for _ in range(60):
        poller.poll([pad(pressed=[BTN_DPAD_RIGHT])])
        clock.advance(0.016)
    assert nav.active
    assert nav.current_index == 1
    poller.poll([NEUTRAL])
    poller.poll([pad(pressed=[BTN_A])])
    assert grid.activated == ["G0-1"]
    poller.poll([pad(pressed=[BTN_B])])
    assert not nav.active


def test_dev2int():
    assert EvdevGamepadSource.dev2int("/dev/input/event12") == 12
    assert EvdevGamepadSource.dev2int("/dev/input/js0") is None


def test_closed_source_has_no_samples():
    source = EvdevGamepadSource()
    assert source.nb_devices() == 0
    assert source.samples() == []
    source.close_devices()
