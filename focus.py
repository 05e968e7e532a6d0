# focus.py — navigation mode and logical focus over the card grid
# This file is part of the EasyHTUI launcher.
# Copyright (c) 2025 the EasyHTUI authors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License
# as published by the Free Software Foundation, version 3.
#
# YOU MUST KEEP THIS HEADER AS IT IS
import time
from dataclasses import dataclass

from config_utils import NavigationTuning
from geometry import GeometryProvider, FocusRenderer, NavigableItem, top_row_top
from log import debug_print
from refresh import Debouncer
from resolver import resolve
from scroller import ScrollController

CENTER = "center"
MINIMAL = "minimal"

NAV_DEBOUNCE_KEY = "navigate"


@dataclass
class FocusState:
    navigation_mode_active: bool = False
    current_index: int = -1
    last_move_timestamp: float = 0.0


class FocusNavigator:
    """
    Owns FocusState; every mutation goes through the methods below.
    Input adapters only call enter/exit/refresh_items/navigate/activate_current.
    """

    def __init__(self, provider: GeometryProvider, renderer: FocusRenderer,
                 scroller: ScrollController | None = None,
                 tuning: NavigationTuning | None = None,
                 time_source=time.monotonic):
        self.provider = provider
        self.renderer = renderer
        self.scroller = scroller
        self.tuning = tuning or NavigationTuning()
        self._time = time_source
        self.debouncer = Debouncer(self.tuning.debounce_ms, time_source=time_source)
        self.state = FocusState()
        self.items: list[NavigableItem] = []

    @property
    def active(self) -> bool:
        return self.state.navigation_mode_active

    @property
    def current_index(self) -> int:
        return self.state.current_index

    def current_item(self) -> NavigableItem | None:
        i = self.state.current_index
        if 0 <= i < len(self.items):
            return self.items[i]
        return None

    # ---- Transitions ----
    def enter(self):
        if self.state.navigation_mode_active:
            return
        self.state.navigation_mode_active = True
        self.renderer.set_navigation_mode(True)
        debug_print("navigation mode on")
        self.refresh_items()

    def exit(self):
        if not self.state.navigation_mode_active:
            return
        self.state.navigation_mode_active = False
        self._clear_marks(self.current_item())
        self.renderer.set_navigation_mode(False)
        debug_print("navigation mode off")

    def refresh_items(self):
        self._clear_marks(self.current_item())
        self.items = list(self.provider.list_navigable_items())
        self.state.current_index = 0 if self.items else -1
        if self.state.navigation_mode_active and self.items:
            self._apply_focus(0, CENTER)

    def detach_items(self):
        """Clear the marks and forget the items before their widgets go away; refresh_items follows."""
        self._clear_marks(self.current_item())
        self.items = []

    def move_to(self, index: int, policy: str = CENTER):
        if index == self.state.current_index:
            return
        if not (0 <= index < len(self.items)):
            return
        self._clear_marks(self.current_item())
        self._apply_focus(index, policy)

    # ---- Commands ----
    def navigate(self, direction: str):
        if not self.items or not self.state.navigation_mode_active:
            return
        if not self.debouncer.allow(NAV_DEBOUNCE_KEY):
            return
        self.state.last_move_timestamp = self._time()
        # rectangles are read fresh: layout may have changed since refresh_items
        fresh = list(self.provider.list_navigable_items())
        if len(fresh) != len(self.items):
            # re-rendered without a refresh_items call
            self.refresh_items()
            return
        self.items = fresh
        target = resolve(direction, self.state.current_index, self.items,
                         vertical_exclusion=self.tuning.vertical_exclusion_px,
                         same_row_tolerance=self.tuning.same_row_tolerance_px)
        if target is None:
            debug_print(f"navigate {direction}: no target from {self.state.current_index}")
            return
        self.move_to(target.index, MINIMAL if target.same_row else CENTER)

    def activate_current(self):
        if not self.state.navigation_mode_active:
            return
        item = self.current_item()
        if item is not None:
            self.renderer.activate_item(item)

    # ---- Internals ----
    def _clear_marks(self, item: NavigableItem | None):
        if item is None:
            return
        self.renderer.mark_item(item, False)
        self.renderer.mark_group(item.group_id, False)

    def _apply_focus(self, index: int, policy: str):
        self.state.current_index = index
        item = self.items[index]
        self.renderer.mark_item(item, True)
        self.renderer.mark_group(item.group_id, True)
        if self.scroller is None:
            return
        if policy == MINIMAL:
            self.scroller.ensure_visible(item.rect)
        else:
            self.scroller.center_in_view(item.rect, top_row_top(self.items))
