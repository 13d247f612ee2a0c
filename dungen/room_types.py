# dungen/room_types.py
"""Semantic room roles: Start, Boss and weighted random types."""

from __future__ import annotations

import math
from typing import List, Optional, Sequence, Set

import structlog

from dungen.config import RoomTypeConfig, RoomTypeData
from dungen.constants import RoomType
from dungen.dungeon_rng import DungeonRNG
from dungen.rooms import Room

log = structlog.get_logger()

# Placed by position, never by weight
FIXED_ROLES = frozenset({RoomType.START, RoomType.BOSS})


def _distance(a: Room, b: Room) -> float:
    ax, ay = a.center
    bx, by = b.center
    return math.hypot(bx - ax, by - ay)


def _furthest_from(origin: Room, rooms: Sequence[Room]) -> Optional[Room]:
    best = None
    best_dist = -1.0
    for room in rooms:
        if room is origin:
            continue
        dist = _distance(origin, room)
        if dist > best_dist:
            best, best_dist = room, dist
    return best


def _assign_fixed(
    room: Room,
    room_type: RoomType,
    config: Optional[RoomTypeConfig],
    used_unique: Set[RoomType],
    rng: DungeonRNG,
) -> None:
    data = config.get(room_type) if config is not None else None
    room.set_room_type(room_type, data, rng)
    if data is not None and data.is_unique:
        used_unique.add(room_type)


def _draw_type(
    config: RoomTypeConfig, used_unique: Set[RoomType], rng: DungeonRNG
) -> Optional[RoomTypeData]:
    candidates = [
        entry
        for entry in config
        if entry.room_type not in FIXED_ROLES
        and entry.room_type not in used_unique
        and entry.spawn_weight > 0
    ]
    if not candidates:
        return None
    return rng.weighted_choice(candidates, [entry.spawn_weight for entry in candidates])


def assign_room_types(
    rooms: Sequence[Room], config: Optional[RoomTypeConfig], rng: DungeonRNG
) -> None:
    """Give every room a role, in place.

    The first room is the Start room and the room whose center lies furthest
    from it is the Boss room. The rest are drawn by spawn weight from the
    remaining configured types; a type marked unique is dropped from the pool
    once used. Rooms left without a candidate stay NORMAL.
    """
    if not rooms:
        log.warning("No rooms to assign types to")
        return

    used_unique: Set[RoomType] = set()
    start = rooms[0]
    _assign_fixed(start, RoomType.START, config, used_unique, rng)

    boss = _furthest_from(start, rooms)
    if boss is not None:
        _assign_fixed(boss, RoomType.BOSS, config, used_unique, rng)
    else:
        log.info("Single room dungeon, no boss room assigned", room_id=start.room_id)

    for room in rooms:
        if room is start or room is boss:
            continue
        data = _draw_type(config, used_unique, rng) if config is not None else None
        if data is None:
            room.set_room_type(RoomType.NORMAL, config.get(RoomType.NORMAL) if config else None, rng)
            continue
        room.set_room_type(data.room_type, data, rng)
        if data.is_unique:
            used_unique.add(data.room_type)
            log.debug("Unique room type consumed", room_type=data.room_type.value, room_id=room.room_id)

    log.info(
        "Room types assigned",
        start=start.room_id,
        boss=boss.room_id if boss is not None else None,
        counts={t.value: n for t, n in _type_counts(rooms).items()},
    )


def _type_counts(rooms: Sequence[Room]):
    counts = {}
    for room in rooms:
        counts[room.room_type] = counts.get(room.room_type, 0) + 1
    return counts


def get_room_by_type(rooms: Sequence[Room], room_type: RoomType) -> Optional[Room]:
    for room in rooms:
        if room.room_type == room_type:
            return room
    return None


def get_rooms_by_type(rooms: Sequence[Room], room_type: RoomType) -> List[Room]:
    return [room for room in rooms if room.room_type == room_type]


__all__ = ["assign_room_types", "get_room_by_type", "get_rooms_by_type"]
