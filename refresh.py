# refresh.py — periodic refresh and input debouncing utilities
# This file is part of the EasyHTUI launcher.
# Copyright (c) 2025 the EasyHTUI authors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License
# as published by the Free Software Foundation, version 3.
#
# YOU MUST KEEP THIS HEADER AS IT IS
import threading
import time

class RefreshTask:
    """
    Calls produce_fn every interval and hands the result to widget_update_fn.
    `timeout_add` has the GLib.timeout_add signature (ms, fn) and the
    callback returns False so every tick is scheduled one at a time.
    """
    def __init__(self, widget_update_fn, produce_fn, interval_sec: float, timeout_add):
        self.widget_update_fn = widget_update_fn
        self.produce_fn = produce_fn
        self.interval_ms = max(250, int(interval_sec * 1000))
        self._timeout_add = timeout_add
        self._timer_id = None
        self._active = False

    def start(self):
        if self._active:
            return
        self._active = True
        self._schedule_tick(immediate=True)

    def stop(self):
        self._active = False

    def _schedule_tick(self, immediate=False):
        delay = 1 if immediate else self.interval_ms
        self._timer_id = self._timeout_add(delay, self._tick)

    def _tick(self):
        if not self._active:
            return False
        self.widget_update_fn(self.produce_fn())
        self._schedule_tick(immediate=False)
        return False

class Debouncer:
    def __init__(self, min_interval_ms: int, time_source=time.monotonic):
        self.min_ms = max(1, int(min_interval_ms))
        self._time = time_source
        self._last = {}
        self._lock = threading.Lock()

    def allow(self, key: str) -> bool:
        now = self._time() * 1000.0
        with self._lock:
            last = self._last.get(key)
            if last is None or (now - last) >= self.min_ms:
                self._last[key] = now
                return True
            return False
