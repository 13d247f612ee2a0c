# dungen/rooms.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

import structlog

from dungen.config import DungeonConfig, RoomTypeData
from dungen.constants import RoomType
from dungen.dungeon_rng import DungeonRNG
from dungen.geometry import Point, Rect
from dungen.partition import PartitionTree

log = structlog.get_logger()


@dataclass
class Room:
    """A carved rectangular room inside one partition leaf."""

    room_id: int
    rect: Rect
    leaf_index: int
    room_type: RoomType = RoomType.NORMAL
    type_data: Optional[RoomTypeData] = None
    label: str = ""

    def __post_init__(self) -> None:
        if not self.label:
            self.label = f"{self.room_type.value}_{self.room_id}"

    @property
    def center(self) -> Point:
        return self.rect.center

    @property
    def width(self) -> int:
        return self.rect.width

    @property
    def length(self) -> int:
        return self.rect.length

    def contains(self, x: int, y: int) -> bool:
        return self.rect.contains(x, y)

    def set_room_type(
        self,
        room_type: RoomType,
        data: Optional[RoomTypeData] = None,
        rng: Optional[DungeonRNG] = None,
    ) -> None:
        self.room_type = room_type
        self.type_data = data
        # Suffix only disambiguates labels; collisions are harmless
        suffix = rng.get_int(1000, 9999) if rng is not None else 0
        self.label = f"{room_type.value}_{self.room_id}_{suffix:04d}"


def _corner_span(lo: int, hi: int, offset: int) -> Tuple[int, int]:
    """Usable interval of a leaf axis after applying the wall offset."""
    if hi - offset - (lo + offset) >= 1:
        return lo + offset, hi - offset
    return lo, hi


def _fit_span(lo: int, hi: int, box_lo: int, box_hi: int, minimum: int) -> Tuple[int, int]:
    """Grow ``[lo, hi)`` to ``minimum`` cells without leaving ``[box_lo, box_hi)``."""
    needed = min(minimum, box_hi - box_lo)
    if hi - lo >= needed:
        return lo, hi
    hi = min(box_hi, lo + needed)
    lo = max(box_lo, hi - needed)
    return lo, hi


def carve_room(
    leaf_rect: Rect,
    bottom_corner_modifier: float,
    top_corner_modifier: float,
    offset: int,
    rng: DungeonRNG,
    min_width: int = 1,
    min_length: int = 1,
    room_id: int = 0,
    leaf_index: int = 0,
) -> Room:
    """Carve one room inside ``leaf_rect``.

    The bottom-left corner lands in the first ``bottom_corner_modifier``
    fraction of each (offset) axis, the top-right corner in the part past
    ``top_corner_modifier``. Rooms that come out under the minimum size are
    grown back to it instead of failing.
    """
    min_x, max_x = _corner_span(leaf_rect.x1, leaf_rect.x2, offset)
    min_y, max_y = _corner_span(leaf_rect.y1, leaf_rect.y2, offset)
    span_x = max_x - min_x
    span_y = max_y - min_y

    x1 = rng.get_int(min_x, min_x + int(span_x * bottom_corner_modifier))
    y1 = rng.get_int(min_y, min_y + int(span_y * bottom_corner_modifier))
    x2 = rng.get_int(min(max_x, min_x + int(math.ceil(span_x * top_corner_modifier))), max_x)
    y2 = rng.get_int(min(max_y, min_y + int(math.ceil(span_y * top_corner_modifier))), max_y)

    fit_x = _fit_span(x1, x2, min_x, max_x, min_width)
    fit_y = _fit_span(y1, y2, min_y, max_y, min_length)
    if fit_x != (x1, x2) or fit_y != (y1, y2):
        log.debug(
            "Clamped room to minimum size",
            leaf_rect=leaf_rect,
            drawn=Rect(x1, y1, x2, y2),
            min_width=min_width,
            min_length=min_length,
        )
    room_rect = Rect(fit_x[0], fit_y[0], fit_x[1], fit_y[1])
    if room_rect.width < min_width or room_rect.length < min_length:
        log.warning(
            "Leaf too small for minimum room size",
            leaf_rect=leaf_rect,
            room_rect=room_rect,
            offset=offset,
        )
    return Room(room_id=room_id, rect=room_rect, leaf_index=leaf_index)


def carve_rooms(tree: PartitionTree, config: DungeonConfig, rng: DungeonRNG) -> List[Room]:
    """Creates one room per leaf of ``tree``, in leaf traversal order."""
    rooms: List[Room] = []
    for leaf in tree.leaves():
        room = carve_room(
            leaf.rect,
            config.room_bottom_corner_modifier,
            config.room_top_corner_modifier,
            config.room_offset,
            rng,
            min_width=config.room_width_min,
            min_length=config.room_length_min,
            room_id=len(rooms),
            leaf_index=leaf.index,
        )
        leaf.room_id = room.room_id
        rooms.append(room)
        log.debug("Defined room", room_id=room.room_id, room_rect=room.rect, leaf_rect=leaf.rect)
    log.info("Room definition finished", created=len(rooms))
    return rooms


__all__ = ["Room", "carve_room", "carve_rooms"]
