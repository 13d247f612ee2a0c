# dungen/corridors.py
"""Corridor synthesis over the partition tree.

Every internal node joins one room from its first subtree to one room from
its second subtree. Nodes are handled deepest first, so sibling leaves are
linked before the larger areas above them.

Corridors are computed for a vertical split line (rooms side by side along
x). A horizontal split is handled by transposing the rooms, connecting, and
transposing the resulting rectangles back.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import structlog

from dungen.constants import Orientation
from dungen.dungeon_rng import DungeonRNG
from dungen.geometry import Point, Rect
from dungen.partition import PartitionTree
from dungen.rooms import Room

log = structlog.get_logger()


@dataclass(frozen=True)
class Corridor:
    node_index: int
    rect: Rect
    width: int
    room_ids: Tuple[int, int]
    # Second leg of a dog-leg corridor
    bend: Optional[Rect] = None

    @property
    def rects(self) -> Tuple[Rect, ...]:
        return (self.rect,) if self.bend is None else (self.rect, self.bend)

    @property
    def is_straight(self) -> bool:
        return self.bend is None

    def cells(self) -> Iterator[Point]:
        for rect in self.rects:
            yield from rect.cells()


def _transpose(rect: Rect) -> Rect:
    return Rect(rect.y1, rect.x1, rect.y2, rect.x2)


def _clamp_band(center: int, lo: int, hi: int, width: int) -> int:
    """Start of a ``width`` band near ``center``, kept inside ``[lo, hi)`` where possible."""
    return max(lo, min(center - width // 2, hi - width))


def _straight_link(
    first: Sequence[Rect], second: Sequence[Rect], width: int
) -> Optional[Tuple[int, int, int, int]]:
    """Pair with the shortest gap whose y overlap fits a band of ``width``.

    Returns ``(i, j, overlap_lo, overlap_hi)`` or None.
    """
    best = None
    best_gap = None
    for i, a in enumerate(first):
        for j, b in enumerate(second):
            lo = max(a.y1, b.y1)
            hi = min(a.y2, b.y2)
            if hi - lo < width:
                continue
            gap = b.x1 - a.x2
            if best_gap is None or gap < best_gap:
                best, best_gap = (i, j, lo, hi), gap
    return best


def _closest_pair(first: Sequence[Rect], second: Sequence[Rect]) -> Tuple[int, int]:
    best = (0, 0)
    best_dist = None
    for i, a in enumerate(first):
        ax, ay = a.center
        for j, b in enumerate(second):
            bx, by = b.center
            dist = abs(bx - ax) + abs(by - ay)
            if best_dist is None or dist < best_dist:
                best, best_dist = (i, j), dist
    return best


def _dog_leg(a: Rect, b: Rect, width: int) -> Tuple[Rect, Optional[Rect]]:
    """L-shaped link: out of ``a`` along x, then along y into ``b``."""
    _, ay = a.center
    bx, _ = b.center
    y0 = _clamp_band(ay, a.y1, a.y2, width)
    x0 = _clamp_band(bx, b.x1, b.x2, width)
    run = Rect(a.x2, y0, max(a.x2, x0 + width), y0 + width)
    if b.y1 >= y0 + width:
        bend = Rect(x0, y0 + width, x0 + width, b.y1)
    elif b.y2 <= y0:
        bend = Rect(x0, b.y2, x0 + width, y0)
    else:
        # The run already ends inside b's rows
        bend = None
    return run, bend


def _link_side_by_side(
    first: Sequence[Rect], second: Sequence[Rect], width: int, rng: DungeonRNG
) -> Tuple[int, int, Rect, Optional[Rect]]:
    straight = _straight_link(first, second, width)
    if straight is not None:
        i, j, lo, hi = straight
        y0 = rng.get_int(lo, hi - width)
        rect = Rect(first[i].x2, y0, second[j].x1, y0 + width)
        return i, j, rect, None
    i, j = _closest_pair(first, second)
    run, bend = _dog_leg(first[i], second[j], width)
    return i, j, run, bend


def connect_rooms(
    tree: PartitionTree,
    rooms: Sequence[Room],
    corridor_width: int,
    rng: DungeonRNG,
) -> List[Corridor]:
    """Creates one corridor per internal node of ``tree``, deepest nodes first."""
    width = max(1, corridor_width)
    if width != corridor_width:
        log.warning("Corridor width clamped", requested=corridor_width, used=width)

    by_id: Dict[int, Room] = {room.room_id: room for room in rooms}
    corridors: List[Corridor] = []
    pending = deque(sorted(tree.nodes, key=lambda n: -n.depth))

    while pending:
        node = pending.popleft()
        if len(node.children) != 2:
            continue
        sides = []
        for child in node.children:
            side = [
                by_id[leaf.room_id]
                for leaf in tree.subtree_leaves(child)
                if leaf.room_id is not None and leaf.room_id in by_id
            ]
            sides.append(side)
        first_rooms, second_rooms = sides
        if not first_rooms or not second_rooms:
            log.debug("Skipping connection: subtree has no room", node=node.index)
            continue

        transposed = node.split is Orientation.HORIZONTAL
        first = [_transpose(r.rect) if transposed else r.rect for r in first_rooms]
        second = [_transpose(r.rect) if transposed else r.rect for r in second_rooms]
        i, j, rect, bend = _link_side_by_side(first, second, width, rng)
        if transposed:
            rect = _transpose(rect)
            bend = _transpose(bend) if bend is not None else None

        corridor = Corridor(
            node_index=node.index,
            rect=rect,
            width=width,
            room_ids=(first_rooms[i].room_id, second_rooms[j].room_id),
            bend=bend,
        )
        corridors.append(corridor)
        log.debug(
            "Connected sibling subtrees",
            node=node.index,
            depth=node.depth,
            rooms=corridor.room_ids,
            rect=rect,
            bend=bend,
        )

    log.info(
        "Corridors created",
        count=len(corridors),
        dog_legs=sum(1 for c in corridors if not c.is_straight),
    )
    return corridors


__all__ = ["Corridor", "connect_rooms"]
