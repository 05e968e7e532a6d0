# gamepads.py — per-frame gamepad polling with edge-triggered actions
# This file is part of the EasyHTUI launcher.
# Copyright (c) 2025 the EasyHTUI authors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License
# as published by the Free Software Foundation, version 3.
#
# YOU MUST KEEP THIS HEADER AS IT IS
import os
import re
from typing import NamedTuple, Sequence

# Optional evdev/pyudev for real devices
try:
    import pyudev
    from evdev import InputDevice, ecodes
    EVDEV_AVAILABLE = True
except Exception:
    EVDEV_AVAILABLE = False

from log import debug_print
from resolver import UP, DOWN, LEFT, RIGHT

AXIS_THRESHOLD = 0.5

# W3C "standard" gamepad layout
BTN_A = 0
BTN_B = 1
BTN_DPAD_UP = 12
BTN_DPAD_DOWN = 13
BTN_DPAD_LEFT = 14
BTN_DPAD_RIGHT = 15
STANDARD_BUTTON_COUNT = 17

ACTIONS = ("axis_up", "axis_down", "axis_left", "axis_right", "activate", "back")
AXIS_ACTIONS = {"axis_up": UP, "axis_down": DOWN, "axis_left": LEFT, "axis_right": RIGHT}


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() not in {"0", "false", "off", "no", ""}


GAMEPAD_ENABLED = _env_flag("EASYHTUI_GAMEPAD", True)


class GamepadSample(NamedTuple):
    axes: tuple
    buttons: tuple


def _button(sample: GamepadSample, idx: int) -> bool:
    return idx < len(sample.buttons) and bool(sample.buttons[idx])


def _axis(sample: GamepadSample, idx: int) -> float:
    return float(sample.axes[idx]) if idx < len(sample.axes) else 0.0


class GamepadPoller:
    """
    Turns one snapshot per frame into actions. Each action fires once per
    physical press: a latch is set when it fires and only cleared once the
    input is back to neutral.
    """

    def __init__(self, f_handle_gamepad_action, axis_threshold: float = AXIS_THRESHOLD):
        self.f_handle_gamepad_action = f_handle_gamepad_action
        self.axis_threshold = axis_threshold
        self.gamepad_index = -1
        self._latched = {action: False for action in ACTIONS}

    def poll(self, samples: Sequence[GamepadSample | None]):
        """samples is indexed like the connected controller slots; None for an empty slot."""
        for i, sample in enumerate(samples):
            if sample is None:
                continue
            if self.gamepad_index == -1:
                self.gamepad_index = i
                print(f"Gamepad connected at slot {i}")
            if i == self.gamepad_index:
                self._handle_sample(sample)

    def pressed_actions(self, sample: GamepadSample) -> dict:
        t = self.axis_threshold
        x, y = _axis(sample, 0), _axis(sample, 1)
        return {
            "axis_left": x < -t or _button(sample, BTN_DPAD_LEFT),
            "axis_right": x > t or _button(sample, BTN_DPAD_RIGHT),
            "axis_up": y < -t or _button(sample, BTN_DPAD_UP),
            "axis_down": y > t or _button(sample, BTN_DPAD_DOWN),
            "activate": _button(sample, BTN_A),
            "back": _button(sample, BTN_B),
        }

    def _handle_sample(self, sample: GamepadSample):
        for action, pressed in self.pressed_actions(sample).items():
            if not pressed:
                self._latched[action] = False
            elif not self._latched[action]:
                self._latched[action] = True
                self.f_handle_gamepad_action(action)


def dispatch_to_navigator(navigator, action: str):
    """Default mapping of gamepad actions onto the focus navigator."""
    if action in AXIS_ACTIONS:
        navigator.enter()
        navigator.navigate(AXIS_ACTIONS[action])
    elif action == "activate":
        navigator.activate_current()
    elif action == "back":
        navigator.exit()


class EvdevGamepadSource:
    """Reads the live state of joystick devices as standard-layout samples."""

    def __init__(self):
        self._gamepad_devices = []

    def nb_devices(self):
        return len(self._gamepad_devices)

    @staticmethod
    def dev2int(dev: str) -> int | None:
        matches = re.match(r"^/dev/input/event([0-9]*)$", dev) # limit events to the one of /dev/input/event* to avoid special things
        if matches is None:
            return None
        return int(matches.group(1))

    def open_devices(self):
        if not EVDEV_AVAILABLE:
            print("Evdev not available - gamepad support disabled")
            return
        context = pyudev.Context()
        for event in context.list_devices(subsystem='input'):
            try:
                eventId = EvdevGamepadSource.dev2int(str(event.device_node))
                if eventId is None:
                    continue
                isJoystick = event.properties.get("ID_INPUT_JOYSTICK") == "1"
                if isJoystick:
                    device = InputDevice(event.device_node)
                    print(f"Found gamepad: {device.name} at {event.device_node}")
                    self._gamepad_devices.append(device)
            except Exception as e:
                print(f"Error checking device {event}: {e}")

    def close_devices(self):
        devices_to_close = self._gamepad_devices[:]
        self._gamepad_devices = []
        for dev in devices_to_close:
            try:
                dev.close()
            except Exception:
                pass

    def samples(self) -> list[GamepadSample | None]:
        res = []
        for dev in self._gamepad_devices:
            try:
                res.append(self._sample(dev))
            except OSError as e:
                # unplugged
                debug_print(f"Gamepad {dev.path} gone: {e}")
                res.append(None)
        return res

    @staticmethod
    def _norm(dev, code) -> float:
        info = dev.absinfo(code)
        half = (info.max - info.min) / 2.0
        if half <= 0:
            return 0.0
        center = (info.max + info.min) / 2.0
        return max(-1.0, min(1.0, (info.value - center) / half))

    def _sample(self, dev) -> GamepadSample:
        caps = dev.capabilities().get(ecodes.EV_ABS, [])
        abs_codes = {c[0] if isinstance(c, tuple) else c for c in caps}
        axes = [self._norm(dev, code) if code in abs_codes else 0.0
                for code in (ecodes.ABS_X, ecodes.ABS_Y)]

        keys = set(dev.active_keys())
        buttons = [False] * STANDARD_BUTTON_COUNT
        buttons[BTN_A] = bool(keys & {ecodes.BTN_SOUTH, ecodes.BTN_A})
        buttons[BTN_B] = bool(keys & {ecodes.BTN_EAST, ecodes.BTN_B})
        buttons[BTN_DPAD_UP] = ecodes.BTN_DPAD_UP in keys
        buttons[BTN_DPAD_DOWN] = ecodes.BTN_DPAD_DOWN in keys
        buttons[BTN_DPAD_LEFT] = ecodes.BTN_DPAD_LEFT in keys
        buttons[BTN_DPAD_RIGHT] = ecodes.BTN_DPAD_RIGHT in keys
        # most pads report the d-pad as a hat
        if ecodes.ABS_HAT0X in abs_codes:
            hx = dev.absinfo(ecodes.ABS_HAT0X).value
            buttons[BTN_DPAD_LEFT] = buttons[BTN_DPAD_LEFT] or hx < 0
            buttons[BTN_DPAD_RIGHT] = buttons[BTN_DPAD_RIGHT] or hx > 0
        if ecodes.ABS_HAT0Y in abs_codes:
            hy = dev.absinfo(ecodes.ABS_HAT0Y).value
            buttons[BTN_DPAD_UP] = buttons[BTN_DPAD_UP] or hy < 0
            buttons[BTN_DPAD_DOWN] = buttons[BTN_DPAD_DOWN] or hy > 0
        return GamepadSample(tuple(axes), tuple(buttons))
