# ui_core.py - main UI components for the launcher
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
import datetime
import gi
gi.require_version('Gtk', '3.0'); gi.require_version('Gdk', '3.0')
from gi.repository import Gtk, Gdk, GLib, GdkPixbuf

from config_utils import (APP_TYPES, CATEGORY_STYLES, ConfigError, save_config, filter_apps,
                          move_app, delete_app, delete_category, navigation_tuning, add_app,
                          update_app, app_from_form, app_form_values, add_category,
                          set_category_style, list_backups, restore_backup)
from focus import FocusNavigator
from gamepads import (GamepadPoller, EvdevGamepadSource, dispatch_to_navigator,
                      GAMEPAD_ENABLED)
from geometry import NavigableItem, Rect
from keyboard import KeyboardAdapter
from log import debug_print
from refresh import RefreshTask
from scroller import ScrollController
from shell import launch_app, LaunchError, get_primary_geometry

GAMEPAD_POLL_MS = 16
TOAST_MS = 2000
ICON_SIZE = 96
NO_GRADIENT_CATEGORY = "Games"
ADMIN_GROUP = "__admin__"
ADD_APP_PREFIX = "__add_app__:"
MAX_BACKUP_CHOICES = 8


def _hex_to_rgb(color: str):
    m = re.match(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", (color or "").strip(), re.I)
    if m is None:
        return None
    return tuple(int(m.group(i), 16) for i in (1, 2, 3))


def contrasting_text_color(color1: str, color2: str) -> str:
    rgb1, rgb2 = _hex_to_rgb(color1), _hex_to_rgb(color2)
    if rgb1 is None or rgb2 is None:
        return "#ffffff"
    r, g, b = ((a + b) / 2 for a, b in zip(rgb1, rgb2))
    brightness = (r * 0.299 + g * 0.587 + b * 0.114) / 255
    return "#000000" if brightness > 0.5 else "#ffffff"


class _AdjustmentViewport:
    """Vertical adjustment of the scrolled card area, seen as a scroll viewport."""
    def __init__(self, scrolled: Gtk.ScrolledWindow):
        self.scrolled = scrolled

    def _adj(self):
        return self.scrolled.get_vadjustment()

    def get_scroll(self):
        return self._adj().get_value()

    def set_scroll(self, value):
        self._adj().set_value(value)

    def viewport_height(self):
        return self._adj().get_page_size()

    def max_scroll(self):
        adj = self._adj()
        return max(0.0, adj.get_upper() - adj.get_page_size())


class _SearchEntry:
    def __init__(self, core, entry: Gtk.Entry):
        self.core = core
        self.entry = entry

    def focus(self):
        self.entry.grab_focus()

    def blur(self):
        if self.core.window:
            self.core.window.set_focus(None)

    def get_text(self):
        return self.entry.get_text()

    def set_text(self, text: str):
        self.entry.set_text(text)
        self.entry.set_position(-1)


def _timeout_once(ms, fn):
    return GLib.timeout_add(ms, lambda: (fn(), False)[1])


class UICore:
    def __init__(self, config: dict, config_path: str, css_path: str, fullscreen: bool = True):
        self.config = config
        self.config_path = config_path
        self.css_path = css_path
        self.fullscreen = fullscreen
        self.window: Gtk.Window | None = None
        self.admin_mode = False
        self.query = ""
        self._apps_by_id: dict[str, tuple[str, dict]] = {}
        self._cards: dict[str, Gtk.EventBox] = {}
        self._category_frames: dict[str, Gtk.Frame] = {}
        self._dialog = None
        self._card_groups: dict[str, str] = {}
        self._card_actions: dict[str, object] = {}
        self._toast_timer_id = None
        self._gamepad_timer_id = None
        self.refreshers: list[RefreshTask] = []
        self.tuning = navigation_tuning(config)
        self.gamepad_source = EvdevGamepadSource()
        self.gamepad_poller = GamepadPoller(lambda a: self._handle_gamepad_action(a),
                                            axis_threshold=self.tuning.axis_threshold)

    # ---- Window / CSS ----
    def build_window(self):
        win = Gtk.Window(type=Gtk.WindowType.TOPLEVEL)
        win.set_title(self.config.get("title") or "Home Theater")
        win.get_style_context().add_class("launcher-root")
        win.set_name("launcher-root")

        x0, y0, sw, sh = get_primary_geometry()
        if self.fullscreen:
            win.set_decorated(False)
            win.set_default_size(sw, sh)
            win.fullscreen()
        else:
            win.set_default_size(int(sw * 0.8), int(sh * 0.8))
            win.set_position(Gtk.WindowPosition.CENTER)

        outer = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=8)
        outer.set_border_width(16)
        win.add(outer)

        # Header: title, search, status toast and clock
        header = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=16)
        header.get_style_context().add_class("header")
        title = Gtk.Label(label=self.config.get("title") or "Home Theater")
        title.get_style_context().add_class("title")
        header.pack_start(title, False, False, 0)

        self.search_entry = Gtk.Entry()
        self.search_entry.set_placeholder_text("Search apps...  ( / )")
        self.search_entry.get_style_context().add_class("search")
        self.search_entry.set_width_chars(30)
        self.search_entry.connect("changed", lambda e: self.handle_search(e.get_text()))
        header.pack_start(self.search_entry, False, False, 0)

        self.toast = Gtk.Label(label="")
        self.toast.get_style_context().add_class("toast")
        header.pack_start(self.toast, True, True, 0)

        clock = Gtk.Label(label="")
        clock.get_style_context().add_class("clock")
        header.pack_end(clock, False, False, 0)
        self.refreshers.append(RefreshTask(clock.set_markup, self._clock_markup, 1.0, GLib.timeout_add))
        outer.pack_start(header, False, False, 0)

        self.scrolled = Gtk.ScrolledWindow()
        self.scrolled.set_policy(Gtk.PolicyType.NEVER, Gtk.PolicyType.AUTOMATIC)
        outer.pack_start(self.scrolled, True, True, 0)

        self.content_box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=12)
        self.content_box.set_border_width(8)
        self.scrolled.add(self.content_box)

        win.connect("key-press-event", self._on_key_press)
        win.connect("button-press-event", self._on_background_click)
        win.connect("destroy", self.quit)
        self.window = win

        t = self.tuning
        self.scroller = ScrollController(
            _AdjustmentViewport(self.scrolled),
            after=_timeout_once, after_cancel=GLib.source_remove,
            jitter_px=t.scroll_jitter_px, top_row_tolerance_px=t.top_row_tolerance_px,
            max_duration_ms=t.max_scroll_duration_ms,
            header_margin_px=t.header_margin_px, footer_margin_px=t.footer_margin_px,
        )
        self.navigator = FocusNavigator(self, self, self.scroller, tuning=t)
        self.keyboard = KeyboardAdapter(
            self.navigator, _SearchEntry(self, self.search_entry),
            text_input_focused=self._text_input_focused,
            on_search=self.handle_search,
            toggle_admin=self.toggle_admin,
            close_modal=self.close_modal,
        )
        return win

    def apply_css(self):
        if not self.css_path:
            print("ERROR: No CSS path provided")
            return
        if not os.path.exists(self.css_path):
            print(f"ERROR: CSS file not found: {self.css_path}")
            return

        prov = Gtk.CssProvider()
        try:
            with open(self.css_path, "rb") as f:
                prov.load_from_data(f.read())
            Gtk.StyleContext.add_provider_for_screen(
                Gdk.Screen.get_default(),
                prov,
                Gtk.STYLE_PROVIDER_PRIORITY_APPLICATION
            )
            debug_print(f"CSS loaded from {self.css_path}")
        except Exception as e:
            print(f"CSS load failed: {e}")

    @staticmethod
    def _clock_markup():
        now = datetime.datetime.now()
        return (f"<span size='x-large'>{now.strftime('%H:%M')}</span>\n"
                f"{GLib.markup_escape_text(now.strftime('%A %d %B %Y'))}")

    # ---- Rendering ----
    def render_apps(self, categories: dict | None = None):
        """Rebuild every category frame, then re-derive the navigable items."""
        if categories is None:
            categories = filter_apps(self.config, self.query)
        # marks live on the cards about to be destroyed
        self.navigator.detach_items()
        for child in self.content_box.get_children():
            child.destroy()
        self._cards = {}
        self._card_groups = {}
        self._card_actions = {}
        self._category_frames = {}
        self._apps_by_id = {}
        styles = self.config.get("categoryStyles") or {}

        for name, apps in categories.items():
            if not apps and not self.admin_mode:
                continue
            _frame, grid = self._add_category_frame(name, name, styles.get(name) or "")
            for app in apps:
                self._add_card(grid, self._build_card(name, app))
            if self.admin_mode:
                self._add_card(grid, self._build_action_card(
                    name, f"{ADD_APP_PREFIX}{name}", "+ Add app",
                    lambda _cat=name: _open_app_form(self, _cat)))

        if self.admin_mode:
            _frame, grid = self._add_category_frame(ADMIN_GROUP, "Admin", "")
            self._add_card(grid, self._build_action_card(
                ADMIN_GROUP, "__add_category__", "+ Add category",
                lambda: _open_category_form(self)))
            self._add_card(grid, self._build_action_card(
                ADMIN_GROUP, "__restore__", "Restore backup",
                lambda: _open_restore_dialog(self)))

        self.content_box.show_all()
        self.navigator.refresh_items()

    def _add_category_frame(self, group_id: str, title: str, style: str):
        frame = Gtk.Frame()
        ctx = frame.get_style_context()
        ctx.add_class("category")
        if style:
            ctx.add_class(f"style-{style}")
        label = Gtk.Label(label=title)
        label.get_style_context().add_class("category-title")
        frame.set_label_widget(label)

        grid = Gtk.FlowBox()
        grid.set_selection_mode(Gtk.SelectionMode.NONE)
        grid.set_homogeneous(True)
        grid.set_max_children_per_line(8)
        grid.set_row_spacing(12)
        grid.set_column_spacing(12)
        grid.set_border_width(8)
        grid.set_can_focus(False)
        frame.add(grid)
        self.content_box.pack_start(frame, False, False, 0)
        self._category_frames[group_id] = frame
        return frame, grid

    @staticmethod
    def _add_card(grid: Gtk.FlowBox, card: Gtk.EventBox):
        grid.add(card)
        card.get_parent().set_can_focus(False)

    def _register_card(self, item_id: str, group_id: str, card: Gtk.EventBox):
        card.add_events(Gdk.EventMask.BUTTON_PRESS_MASK)
        card.connect("button-press-event", lambda *_a, _id=item_id: self._on_card_click(_id))
        self._cards[item_id] = card
        self._card_groups[item_id] = group_id

    def _build_action_card(self, group_id: str, item_id: str, text: str, action) -> Gtk.EventBox:
        card = Gtk.EventBox()
        card.set_can_focus(False)
        ctx = card.get_style_context()
        ctx.add_class("app-card")
        ctx.add_class("action-card")
        lbl = Gtk.Label(label=text)
        lbl.get_style_context().add_class("app-name")
        card.add(lbl)
        self._register_card(item_id, group_id, card)
        self._card_actions[item_id] = action
        return card

    def _build_card(self, category: str, app: dict) -> Gtk.EventBox:
        card = Gtk.EventBox()
        card.set_can_focus(False)
        ctx = card.get_style_context()
        ctx.add_class("app-card")
        box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=6)
        box.set_border_width(8)
        card.add(box)

        icon = self._build_icon(app)
        box.pack_start(icon, True, True, 0)
        name = Gtk.Label(label=app.get("name", ""))
        name.set_line_wrap(True)
        name.set_max_width_chars(16)
        name.get_style_context().add_class("app-name")
        box.pack_start(name, False, False, 0)

        if category != NO_GRADIENT_CATEGORY and app.get("color1") and app.get("color2"):
            fg = contrasting_text_color(app["color1"], app["color2"])
            prov = Gtk.CssProvider()
            css = (f".app-card {{ background-image: linear-gradient(135deg, {app['color1']}, {app['color2']}); "
                   f"color: {fg}; }}")
            try:
                prov.load_from_data(css.encode("utf-8"))
                for w in (card, name):
                    w.get_style_context().add_provider(prov, Gtk.STYLE_PROVIDER_PRIORITY_APPLICATION + 1)
            except Exception as e:
                debug_print(f"Card style for {app.get('name')} rejected: {e}")

        self._register_card(app.get("id"), category, card)
        self._apps_by_id[app.get("id")] = (category, app)
        return card

    def _build_icon(self, app: dict) -> Gtk.Widget:
        path = (app.get("icon") or "").strip()
        if path and os.path.exists(path):
            try:
                pixbuf = GdkPixbuf.Pixbuf.new_from_file_at_scale(path, ICON_SIZE, ICON_SIZE, True)
                return Gtk.Image.new_from_pixbuf(pixbuf)
            except Exception as e:
                debug_print(f"Icon {path} failed: {e}")
        # no (local) icon: big initials instead
        lbl = Gtk.Label(label=(app.get("name") or "?")[:2].upper())
        lbl.get_style_context().add_class("app-icon-text")
        return lbl

    # ---- Geometry provider / focus renderer ----
    def _rect_of(self, widget: Gtk.Widget) -> Rect:
        alloc = widget.get_allocation()
        res = widget.translate_coordinates(self.scrolled, 0, 0)
        if not res or alloc.width <= 1:
            # not laid out yet
            return Rect(0, 0, 0, 0)
        x, y = res[-2], res[-1]
        return Rect(x, y, alloc.width, alloc.height)

    def list_navigable_items(self) -> list[NavigableItem]:
        return [NavigableItem(item_id, self._card_groups[item_id], self._rect_of(card), card)
                for item_id, card in self._cards.items()]

    def set_navigation_mode(self, active: bool):
        if self.window is None:
            return
        ctx = self.window.get_style_context()
        if active:
            ctx.add_class("navigation-mode")
        else:
            ctx.remove_class("navigation-mode")

    def mark_item(self, item: NavigableItem, focused: bool):
        ctx = item.handle.get_style_context()
        if focused:
            ctx.add_class("focused")
        else:
            ctx.remove_class("focused")

    def mark_group(self, group_id: str, focused: bool):
        frame = self._category_frames.get(group_id)
        if frame is None:
            return
        ctx = frame.get_style_context()
        if focused:
            ctx.add_class("focused-category")
        else:
            ctx.remove_class("focused-category")

    def activate_item(self, item: NavigableItem):
        action = self._card_actions.get(item.id)
        if action is not None:
            action()
            return
        entry = self._apps_by_id.get(item.id)
        if entry is None:
            return
        category, app = entry
        if self.admin_mode:
            _open_admin_popup(self, category, app)
        else:
            self.launch(app)

    # ---- Actions ----
    def launch(self, app: dict):
        try:
            launch_app(app)
        except LaunchError as e:
            print(f"Launch failed: {e}")
            _show_message(self, str(e))
            return
        self.show_toast(f"Launching {app.get('name')}...")

    def handle_search(self, query: str):
        query = (query or "").strip()
        if query == self.query:
            return
        self.query = query
        self.render_apps()

    def toggle_admin(self):
        self.admin_mode = not self.admin_mode
        ctx = self.window.get_style_context()
        if self.admin_mode:
            ctx.add_class("admin-mode")
        else:
            ctx.remove_class("admin-mode")
        self.show_toast("Admin mode ON" if self.admin_mode else "Admin mode OFF")
        self.render_apps()

    def commit_config(self):
        try:
            save_config(self.config, self.config_path)
        except ConfigError as e:
            print(f"Saving config failed: {e}")
            _show_message(self, str(e))
        self.render_apps()

    def show_toast(self, text: str):
        self.toast.set_text(text)
        if self._toast_timer_id is not None:
            GLib.source_remove(self._toast_timer_id)

        def clear():
            self._toast_timer_id = None
            self.toast.set_text("")
            return False

        self._toast_timer_id = GLib.timeout_add(TOAST_MS, clear)

    def close_modal(self):
        if self._dialog is not None:
            self._dialog.response(Gtk.ResponseType.CANCEL)

    # ---- Keyboard / mouse ----
    def _text_input_focused(self) -> bool:
        focus = self.window.get_focus() if self.window else None
        return isinstance(focus, (Gtk.Entry, Gtk.ComboBox, Gtk.TextView))

    def _on_key_press(self, _w, ev: Gdk.EventKey):
        key = Gdk.keyval_name(ev.keyval) or ""
        cp = Gdk.keyval_to_unicode(ev.keyval)
        char = chr(cp) if cp else ""
        state = ev.state
        return self.keyboard.handle_key(
            key, char,
            ctrl=bool(state & Gdk.ModifierType.CONTROL_MASK),
            alt=bool(state & Gdk.ModifierType.MOD1_MASK),
            meta=bool(state & (Gdk.ModifierType.META_MASK | Gdk.ModifierType.SUPER_MASK)),
        )

    def _on_card_click(self, item_id: str):
        if item_id not in self._cards:
            return True
        for idx, item in enumerate(self.navigator.items):
            if item.id == item_id:
                if self.navigator.active:
                    self.navigator.move_to(idx)
                self.activate_item(item)
                break
        return True

    def _on_background_click(self, _w, _ev):
        self.navigator.exit()
        return False

    # ---- Gamepad ----
    def start_gamepad(self):
        if not GAMEPAD_ENABLED:
            print("Gamepad polling disabled by EASYHTUI_GAMEPAD")
            return
        self.gamepad_source.open_devices()
        if self.gamepad_source.nb_devices() == 0:
            print("No gamepad devices found")
            return

        def tick():
            self.gamepad_poller.poll(self.gamepad_source.samples())
            return True

        self._gamepad_timer_id = GLib.timeout_add(GAMEPAD_POLL_MS, tick)

    def _handle_gamepad_action(self, action: str):
        """Handle gamepad actions - dialogs replace this while they are open"""
        dispatch_to_navigator(self.navigator, action)
        return False

    def start_refresh(self):
        for r in self.refreshers:
            r.start()

    def quit(self, *_a):
        for r in self.refreshers:
            r.stop()
        self.scroller.cancel()
        if self._gamepad_timer_id is not None:
            GLib.source_remove(self._gamepad_timer_id)
            self._gamepad_timer_id = None
        self.gamepad_source.close_devices()
        try:
            Gtk.main_quit()
        except Exception:
            pass


# ---- Dialogs ----
def _new_dialog(core: UICore, width: int, height: int) -> tuple[Gtk.Dialog, Gtk.Box]:
    dialog = Gtk.Dialog(transient_for=core.window, modal=True)
    dialog.set_default_size(width, height)
    dialog.set_decorated(False)
    dialog.set_resizable(False)
    dialog.set_position(Gtk.WindowPosition.CENTER_ON_PARENT)
    dialog.get_style_context().add_class("popup-root")

    frame = Gtk.Frame()
    frame.set_shadow_type(Gtk.ShadowType.NONE)
    content = dialog.get_content_area()
    content.set_border_width(0)
    content.add(frame)

    inner = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=10)
    inner.set_border_width(20)
    frame.add(inner)
    return dialog, inner


def _run_modal(core: UICore, dialog: Gtk.Dialog, gamepad_handler):
    """Run dialog with core's gamepad handler temporarily replaced; returns the response."""
    original_handler = core._handle_gamepad_action
    core._handle_gamepad_action = gamepad_handler
    core._dialog = dialog
    dialog.show_all()
    try:
        return dialog.run()
    finally:
        dialog.destroy()
        core._handle_gamepad_action = original_handler
        core._dialog = None


def _run_choice_dialog(core: UICore, title: str, choices: list[tuple[str, object]]):
    """
    Vertical list of buttons driven by keyboard, mouse or gamepad.
    `choices` are (label, callback) pairs; a None callback just closes.
    """
    dialog, inner = _new_dialog(core, 420, min(640, 120 + 48 * len(choices)))
    label = Gtk.Label(label=title)
    label.set_line_wrap(True)
    label.get_style_context().add_class("dialog-title")
    inner.pack_start(label, False, False, 10)

    buttons = []
    current = [0]
    chosen = [None]

    def update_focus():
        for i, btn in enumerate(buttons):
            ctx = btn.get_style_context()
            if i == current[0]:
                ctx.add_class("focused")
                btn.grab_focus()
            else:
                ctx.remove_class("focused")
        return False

    def pick(cb):
        chosen[0] = cb
        dialog.response(Gtk.ResponseType.OK)

    for text, cb in choices:
        btn = Gtk.Button.new_with_label(text)
        btn.get_style_context().add_class("choice-option")
        btn.connect("clicked", lambda _w, _cb=cb: pick(_cb))
        inner.pack_start(btn, False, False, 0)
        buttons.append(btn)

    def step(delta):
        current[0] = max(0, min(len(buttons) - 1, current[0] + delta))
        update_focus()

    def dialog_gamepad_handler(action: str):
        if action == "activate":
            buttons[current[0]].emit("clicked")
        elif action == "back":
            dialog.response(Gtk.ResponseType.CANCEL)
        elif action in ("axis_up", "axis_left"):
            step(-1)
        elif action in ("axis_down", "axis_right"):
            step(+1)
        return False

    def on_key_press(_w, ev: Gdk.EventKey):
        key = Gdk.keyval_name(ev.keyval) or ""
        if key == "Escape":
            dialog.response(Gtk.ResponseType.CANCEL)
        elif key in ("Up", "KP_Up", "Left", "KP_Left"):
            step(-1)
        elif key in ("Down", "KP_Down", "Right", "KP_Right"):
            step(+1)
        elif key in ("Return", "KP_Enter", "space"):
            buttons[current[0]].emit("clicked")
        else:
            return False
        return True

    dialog.connect("key-press-event", on_key_press)
    GLib.idle_add(update_focus)
    _run_modal(core, dialog, dialog_gamepad_handler)

    if callable(chosen[0]):
        chosen[0]()


def _run_form_dialog(core: UICore, title: str, fields, values: dict) -> dict | None:
    """
    Labelled entries (or a combo when the field has choices), then Cancel / Save.
    `fields` are (key, label, choices) triples. Returns the entered values, or None.
    Keyboard works as usual in GTK; the gamepad moves between rows, left/right
    cycles a combo, A steps to the next row or presses a button.
    """
    dialog, inner = _new_dialog(core, 520, 140 + 48 * (len(fields) + 1))
    label = Gtk.Label(label=title)
    label.get_style_context().add_class("dialog-title")
    inner.pack_start(label, False, False, 10)

    grid = Gtk.Grid()
    grid.set_column_spacing(12)
    grid.set_row_spacing(8)
    inner.pack_start(grid, False, False, 0)

    widgets = {}
    for row, (key, text, choices) in enumerate(fields):
        lbl = Gtk.Label(label=text)
        lbl.set_xalign(0)
        grid.attach(lbl, 0, row, 1, 1)
        if choices:
            w = Gtk.ComboBoxText()
            for c in choices:
                w.append(c, c)
            w.set_active_id(values.get(key) or choices[0])
        else:
            w = Gtk.Entry()
            w.set_text(values.get(key) or "")
            w.set_hexpand(True)
            w.set_activates_default(True)
        grid.attach(w, 1, row, 1, 1)
        widgets[key] = w

    result = [None]

    def on_save(_w):
        result[0] = {k: (w.get_active_id() or "") if isinstance(w, Gtk.ComboBoxText) else w.get_text()
                     for k, w in widgets.items()}
        dialog.response(Gtk.ResponseType.OK)

    btn_box = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=10)
    cancel = Gtk.Button.new_with_label("Cancel")
    cancel.connect("clicked", lambda _w: dialog.response(Gtk.ResponseType.CANCEL))
    save = Gtk.Button.new_with_label("Save")
    save.set_can_default(True)
    save.connect("clicked", on_save)
    for btn in (cancel, save):
        btn.get_style_context().add_class("choice-option")
        btn_box.pack_start(btn, True, True, 0)
    inner.pack_end(btn_box, False, False, 0)
    dialog.set_default(save)

    focusables = list(widgets.values()) + [cancel, save]
    current = [0]

    def update_focus():
        focusables[current[0]].grab_focus()
        return False

    def step(delta):
        current[0] = max(0, min(len(focusables) - 1, current[0] + delta))
        update_focus()

    def dialog_gamepad_handler(action: str):
        w = focusables[current[0]]
        if action == "back":
            dialog.response(Gtk.ResponseType.CANCEL)
        elif action == "activate":
            if isinstance(w, Gtk.Button):
                w.emit("clicked")
            else:
                step(+1)
        elif action in ("axis_left", "axis_right") and isinstance(w, Gtk.ComboBoxText):
            n = len(w.get_model())
            w.set_active((w.get_active() + (1 if action == "axis_right" else -1)) % n)
        elif action in ("axis_up", "axis_left"):
            step(-1)
        elif action in ("axis_down", "axis_right"):
            step(+1)
        return False

    GLib.idle_add(update_focus)
    response = _run_modal(core, dialog, dialog_gamepad_handler)
    if response != Gtk.ResponseType.OK:
        return None
    return result[0]


def _show_message(core: UICore, message: str):
    _run_choice_dialog(core, message, [("OK", None)])


# ---- Admin ----
APP_FORM_FIELDS = (
    ("name", "Name", None),
    ("type", "Type", APP_TYPES),
    ("target", "URL / path", None),
    ("icon", "Icon file", None),
    ("color1", "Color 1", None),
    ("color2", "Color 2", None),
)


def _config_action(core: UICore, fn, *args):
    """Callback applying one config edit, then saving and re-rendering."""
    def run():
        try:
            fn(core.config, *args)
        except ConfigError as e:
            _show_message(core, str(e))
            return
        core.commit_config()
    return run


def _open_app_form(core: UICore, category: str, app: dict | None = None):
    if app is None:
        title, values = f"Add app to '{category}'", {}
    else:
        title, values = f"Edit {app.get('name', '')}", app_form_values(app)
    form = _run_form_dialog(core, title, APP_FORM_FIELDS, values)
    if form is None:
        return
    try:
        new_app = app_from_form(form)
    except ConfigError as e:
        _show_message(core, str(e))
        return
    if app is None:
        _config_action(core, add_app, category, new_app)()
    else:
        _config_action(core, update_app, app.get("id"), new_app)()


def _open_category_form(core: UICore):
    form = _run_form_dialog(core, "Add category", (("name", "Name", None),), {})
    if form is not None:
        _config_action(core, add_category, form["name"])()


def _open_style_choice(core: UICore, category: str):
    current = (core.config.get("categoryStyles") or {}).get(category, "")
    choices = []
    for style in CATEGORY_STYLES:
        text = style or "default"
        if style == current:
            text += "  (current)"
        choices.append((text, _config_action(core, set_category_style, category, style)))
    choices.append(("Cancel", None))
    _run_choice_dialog(core, f"Style of '{category}'", choices)


def _open_restore_dialog(core: UICore):
    names = list_backups(core.config_path)
    if not names:
        _show_message(core, "No backups yet")
        return

    def restore(name):
        def run():
            try:
                core.config = restore_backup(core.config_path, name)
            except ConfigError as e:
                _show_message(core, str(e))
                return
            core.show_toast(f"Restored {name}")
            core.render_apps()
        return run

    choices = [(name, restore(name)) for name in names[:MAX_BACKUP_CHOICES]]
    choices.append(("Cancel", None))
    _run_choice_dialog(core, "Restore configuration", choices)


def _open_admin_popup(core: UICore, category: str, app: dict):
    app_id = app.get("id")
    name = app.get("name", "")

    def confirm_delete_app():
        _run_choice_dialog(core, f"Delete '{name}'?",
                           [("Cancel", None), ("Delete", _config_action(core, delete_app, app_id))])

    def confirm_delete_category():
        count = len(core.config["categories"].get(category, []))
        _run_choice_dialog(core, f"Delete category '{category}' and its {count} app(s)?",
                           [("Cancel", None), ("Delete", _config_action(core, delete_category, category))])

    _run_choice_dialog(core, f"{name} ({category})", [
        ("Edit app", lambda: _open_app_form(core, category, app)),
        ("Move left", _config_action(core, move_app, app_id, category, "left")),
        ("Move right", _config_action(core, move_app, app_id, category, "right")),
        ("Delete app", confirm_delete_app),
        (f"Style of '{category}'", lambda: _open_style_choice(core, category)),
        (f"Delete category '{category}'", confirm_delete_category),
        ("Cancel", None),
    ])


# ---- Application wrapper ----
class LauncherApp:
    def __init__(self, config: dict, config_path: str, css_path: str, fullscreen: bool = True):
        self.core = UICore(config, config_path, css_path, fullscreen)
        self.window = self.core.build_window()
        self.core.apply_css()
        self.core.render_apps()

    def run(self):
        self.window.show_all()
        self.window.present()
        self.core.start_refresh()
        self.core.start_gamepad()
        Gtk.main()
