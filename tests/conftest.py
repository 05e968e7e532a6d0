import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from geometry import NavigableItem, Rect


class Clock:
    def __init__(self, value: float = 0.0) -> None:
        self.value = value

    def now(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


class FakeGrid:
    """Geometry provider and focus renderer over synthetic rectangles."""

    def __init__(self, items=None) -> None:
        self.items = list(items or [])
        self.focused: dict[str, bool] = {}
        self.group_focused: dict[str, bool] = {}
        self.navigation_mode = False
        self.activated: list[str] = []
        self.list_calls = 0

    def list_navigable_items(self):
        self.list_calls += 1
        return list(self.items)

    def set_navigation_mode(self, active: bool) -> None:
        self.navigation_mode = active

    def mark_item(self, item, focused: bool) -> None:
        self.focused[item.id] = focused

    def mark_group(self, group_id: str, focused: bool) -> None:
        self.group_focused[group_id] = focused

    def activate_item(self, item) -> None:
        self.activated.append(item.id)

    def focused_ids(self) -> list[str]:
        return [k for k, v in self.focused.items() if v]

    def focused_groups(self) -> list[str]:
        return [k for k, v in self.group_focused.items() if v]


class FakeScroller:
    def __init__(self) -> None:
        self.calls: list[tuple[str, Rect]] = []

    def center_in_view(self, rect, top_row_top=None):
        self.calls.append(("center", rect))
        return True

    def ensure_visible(self, rect):
        self.calls.append(("minimal", rect))
        return True

    def last_policy(self):
        return self.calls[-1][0] if self.calls else None


def make_grid(rows_per_group, cols=3, size=100, gap=10, group_gap=60):
    """
    Items laid out like the launcher: each group is a block of rows.
    rows_per_group is a list of per-group item counts.
    """
    items = []
    top = 0
    for g, count in enumerate(rows_per_group):
        group_id = f"G{g}"
        rows = max(1, (count + cols - 1) // cols)
        for n in range(count):
            r, c = divmod(n, cols)
            rect = Rect(c * (size + gap), top + r * (size + gap), size, size)
            items.append(NavigableItem(f"{group_id}-{n}", group_id, rect))
        top += rows * (size + gap) + group_gap
    return items


@pytest.fixture
def clock():
    return Clock(100.0)


@pytest.fixture
def fake_scroller():
    return FakeScroller()
