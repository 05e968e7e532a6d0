# scroller.py — eased, cancelable viewport scrolling
# This file is part of the EasyHTUI launcher.
# Copyright (c) 2025 the EasyHTUI authors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License
# as published by the Free Software Foundation, version 3.
#
# YOU MUST KEEP THIS HEADER AS IT IS
import time
from typing import Callable, Protocol

from geometry import Rect
from log import debug_print

FRAME_MS = 16
SCROLL_JITTER_PX = 20
TOP_ROW_TOLERANCE_PX = 30
MAX_SCROLL_DURATION_MS = 1000
HEADER_MARGIN_PX = 20
FOOTER_MARGIN_PX = 20

AfterFn = Callable[[int, Callable[[], None]], object]
AfterCancelFn = Callable[[object], None]


class Viewport(Protocol):
    def get_scroll(self) -> float:
        ...

    def set_scroll(self, value: float) -> None:
        ...

    def viewport_height(self) -> float:
        ...

    def max_scroll(self) -> float:
        ...


def ease_out_quad(t: float) -> float:
    return 1 - (1 - t) * (1 - t)


class ScrollController:
    """
    Scrolls a viewport so that a card becomes visible.
    Only one animation runs at a time: starting a new one tears down the
    frame callback of the previous one before anything else happens.
    """

    def __init__(self, viewport: Viewport, *, after: AfterFn, after_cancel: AfterCancelFn,
                 time_source: Callable[[], float] = time.monotonic,
                 jitter_px: float = SCROLL_JITTER_PX,
                 top_row_tolerance_px: float = TOP_ROW_TOLERANCE_PX,
                 max_duration_ms: int = MAX_SCROLL_DURATION_MS,
                 header_margin_px: float = HEADER_MARGIN_PX,
                 footer_margin_px: float = FOOTER_MARGIN_PX):
        self.viewport = viewport
        self._after = after
        self._after_cancel = after_cancel
        self._time = time_source
        self.jitter_px = jitter_px
        self.top_row_tolerance_px = top_row_tolerance_px
        self.max_duration_ms = max_duration_ms
        self.header_margin_px = header_margin_px
        self.footer_margin_px = footer_margin_px
        self._handle: object | None = None

    @property
    def is_animating(self) -> bool:
        return self._handle is not None

    def cancel(self):
        handle = self._handle
        self._handle = None
        if handle is not None:
            try:
                self._after_cancel(handle)
            except Exception:
                # source already fired or was removed
                pass

    def center_in_view(self, rect: Rect, top_row_top: float | None = None) -> bool:
        """Returns True when an animation was started."""
        self.cancel()
        start = self.viewport.get_scroll()
        if top_row_top is not None and rect.top - top_row_top <= self.top_row_tolerance_px:
            target = 0.0
        else:
            target = start + rect.center_y - self.viewport.viewport_height() / 2
        target = self._clamp(target)
        if abs(target - start) < self.jitter_px:
            return False
        return self._animate(start, target)

    def ensure_visible(self, rect: Rect) -> bool:
        """Scroll just enough to clear the margins; an animation in flight is kept when nothing is clipped."""
        height = self.viewport.viewport_height()
        start = self.viewport.get_scroll()
        if rect.top < self.header_margin_px:
            delta = rect.top - self.header_margin_px
        elif rect.bottom > height - self.footer_margin_px:
            delta = rect.bottom - (height - self.footer_margin_px)
        else:
            return False
        target = self._clamp(start + delta)
        if target == start:
            return False
        self.cancel()
        return self._animate(start, target)

    def _clamp(self, value: float) -> float:
        return max(0.0, min(float(value), float(self.viewport.max_scroll())))

    def _animate(self, start: float, target: float) -> bool:
        distance = target - start
        height = self.viewport.viewport_height() or 1
        duration = self.max_duration_ms / 1000.0 * min(1.0, abs(distance) / height)
        debug_print(f"scroll {start:.0f} -> {target:.0f} in {duration:.2f}s")
        if duration <= 0:
            self.viewport.set_scroll(target)
            return False
        started_at = self._time()

        def frame():
            self._handle = None
            progress = min((self._time() - started_at) / duration, 1.0)
            self.viewport.set_scroll(start + distance * ease_out_quad(progress))
            if progress < 1.0:
                self._handle = self._after(FRAME_MS, frame)

        self._handle = self._after(FRAME_MS, frame)
        return True
