# geometry.py — navigable items, rectangles and group ordering
# This file is part of the EasyHTUI launcher.
# Copyright (c) 2025 the EasyHTUI authors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License
# as published by the Free Software Foundation, version 3.
#
# YOU MUST KEEP THIS HEADER AS IT IS
from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence


@dataclass(frozen=True)
class Rect:
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def center_x(self) -> float:
        return self.left + self.width / 2

    @property
    def center_y(self) -> float:
        return self.top + self.height / 2


@dataclass
class NavigableItem:
    """One focusable card. `rect` is in viewport space at listing time."""
    id: str
    group_id: str
    rect: Rect
    handle: Any = field(default=None, compare=False, repr=False)


class GeometryProvider(Protocol):
    def list_navigable_items(self) -> list[NavigableItem]:
        ...


class FocusRenderer(Protocol):
    def set_navigation_mode(self, active: bool) -> None:
        ...

    def mark_item(self, item: NavigableItem, focused: bool) -> None:
        ...

    def mark_group(self, group_id: str, focused: bool) -> None:
        ...

    def activate_item(self, item: NavigableItem) -> None:
        ...


def group_order(items: Sequence[NavigableItem]) -> list[str]:
    """Group ids in document order (first appearance in the item list)."""
    seen = []
    for it in items:
        if it.group_id not in seen:
            seen.append(it.group_id)
    return seen


def group_members(items: Sequence[NavigableItem], group_id: str) -> list[int]:
    return [i for i, it in enumerate(items) if it.group_id == group_id]


def top_row_top(items: Sequence[NavigableItem]) -> float | None:
    if not items:
        return None
    return min(it.rect.top for it in items)
