# keyboard.py — key events to navigation commands
# This file is part of the EasyHTUI launcher.
# Copyright (c) 2025 the EasyHTUI authors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License
# as published by the Free Software Foundation, version 3.
#
# YOU MUST KEEP THIS HEADER AS IT IS
from typing import Callable, Protocol

from focus import FocusNavigator
from resolver import UP, DOWN, LEFT, RIGHT

# Gdk key names
ARROW_KEYS = {
    "Up": UP, "KP_Up": UP,
    "Down": DOWN, "KP_Down": DOWN,
    "Left": LEFT, "KP_Left": LEFT,
    "Right": RIGHT, "KP_Right": RIGHT,
}
ENTER_KEYS = ("Return", "KP_Enter")
ACTIVATE_KEYS = ENTER_KEYS + ("space", "KP_Space")
SEARCH_KEYS = ("slash", "KP_Divide", "f")
ADMIN_CHORD_KEY = "a"


class SearchBox(Protocol):
    def focus(self) -> None:
        ...

    def blur(self) -> None:
        ...

    def get_text(self) -> str:
        ...

    def set_text(self, text: str) -> None:
        ...


class KeyboardAdapter:
    def __init__(self, navigator: FocusNavigator, search: SearchBox,
                 text_input_focused: Callable[[], bool],
                 on_search: Callable[[str], None],
                 toggle_admin: Callable[[], None],
                 close_modal: Callable[[], None]):
        self.navigator = navigator
        self.search = search
        self.text_input_focused = text_input_focused
        self.on_search = on_search
        self.toggle_admin = toggle_admin
        self.close_modal = close_modal

    def handle_key(self, key: str, char: str = "", ctrl=False, alt=False, meta=False) -> bool:
        """Returns True when the event was consumed."""
        if ctrl and key.lower() == ADMIN_CHORD_KEY:
            self.toggle_admin()
            return True

        if self.text_input_focused():
            return self._handle_in_text_input(key)

        nav = self.navigator
        if key in ARROW_KEYS:
            nav.enter()
            nav.navigate(ARROW_KEYS[key])
            return True
        if key in ACTIVATE_KEYS:
            if nav.active and nav.current_item() is not None:
                nav.activate_current()
                return True
            return False
        if key == "Escape":
            nav.exit()
            self.close_modal()
            return True
        if key in SEARCH_KEYS and not (ctrl or alt or meta):
            nav.exit()
            self.search.focus()
            if key != "f":
                self.search.set_text("")
            return True
        if not (ctrl or alt or meta) and len(char) == 1 and char.isprintable():
            # type-to-search
            nav.exit()
            self.search.focus()
            self.search.set_text(char)
            self.on_search(char)
            return True
        return False

    def _handle_in_text_input(self, key: str) -> bool:
        if key == "Escape":
            self.search.set_text("")
            self.on_search("")
            self.search.blur()
            self.navigator.enter()
            return True
        if key in ("Down", "KP_Down") or key in ENTER_KEYS:
            self.search.blur()
            self.navigator.enter()
            return True
        return False
