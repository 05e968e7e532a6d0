# resolver.py — directional target search over the card grid
# This file is part of the EasyHTUI launcher.
# Copyright (c) 2025 the EasyHTUI authors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License
# as published by the Free Software Foundation, version 3.
#
# YOU MUST KEEP THIS HEADER AS IT IS
from typing import NamedTuple, Sequence

from geometry import NavigableItem, group_order, group_members

UP, DOWN, LEFT, RIGHT = "up", "down", "left", "right"
DIRECTIONS = (UP, DOWN, LEFT, RIGHT)

VERTICAL_EXCLUSION_PX = 10
SAME_ROW_TOLERANCE_PX = 20


class Resolution(NamedTuple):
    index: int
    same_row: bool


def resolve(direction: str, current: int, items: Sequence[NavigableItem],
            vertical_exclusion: float = VERTICAL_EXCLUSION_PX,
            same_row_tolerance: float = SAME_ROW_TOLERANCE_PX) -> Resolution | None:
    """
    Pick the item to focus when moving `direction` from items[current].
    Returns None when nothing lies that way (edges never wrap around).
    """
    if direction not in DIRECTIONS or not items or not (0 <= current < len(items)):
        return None
    if direction in (UP, DOWN):
        return _resolve_vertical(direction, current, items, vertical_exclusion)
    return _resolve_horizontal(direction, current, items, same_row_tolerance)


def _adjacent_group(direction: str, group_id: str, items: Sequence[NavigableItem]) -> str | None:
    groups = group_order(items)
    gi = groups.index(group_id)
    step = -1 if direction in (UP, LEFT) else 1
    target = gi + step
    if 0 <= target < len(groups):
        return groups[target]
    return None


def _resolve_vertical(direction, current, items, vertical_exclusion):
    cur = items[current]
    cx, cy = cur.rect.center_x, cur.rect.center_y

    allowed = {cur.group_id}
    neighbour = _adjacent_group(direction, cur.group_id, items)
    if neighbour is not None:
        allowed.add(neighbour)

    best = None
    best_score = float("inf")
    for i, it in enumerate(items):
        if i == current or it.group_id not in allowed:
            continue
        x, y = it.rect.center_x, it.rect.center_y
        # items on (roughly) the same line are never vertical targets
        if direction == UP and y >= cy - vertical_exclusion:
            continue
        if direction == DOWN and y <= cy + vertical_exclusion:
            continue
        score = 2 * abs(x - cx) + abs(y - cy)
        if score < best_score:
            best_score = score
            best = i

    if best is None:
        return None
    return Resolution(best, False)


def _resolve_horizontal(direction, current, items, same_row_tolerance):
    cur = items[current]
    cx, cy = cur.rect.center_x, cur.rect.center_y
    members = group_members(items, cur.group_id)

    # 1. nearest card on the same visual row
    best = None
    best_dx = float("inf")
    for i in members:
        if i == current:
            continue
        it = items[i]
        if abs(it.rect.center_y - cy) > same_row_tolerance:
            continue
        dx = it.rect.center_x - cx
        if (direction == RIGHT and dx <= 0) or (direction == LEFT and dx >= 0):
            continue
        if abs(dx) < best_dx:
            best_dx = abs(dx)
            best = i
    if best is not None:
        return Resolution(best, True)

    # 2. previous/next card in category order, possibly on another row
    pos = members.index(current)
    step = -1 if direction == LEFT else 1
    if 0 <= pos + step < len(members):
        target = members[pos + step]
        same_row = abs(items[target].rect.center_y - cy) <= same_row_tolerance
        return Resolution(target, same_row)

    # 3. edge of the category: jump into the neighbouring one
    neighbour = _adjacent_group(direction, cur.group_id, items)
    if neighbour is None:
        return None
    others = group_members(items, neighbour)
    target = others[0] if direction == RIGHT else others[-1]
    return Resolution(target, False)
