from dungen.config import DungeonConfig
from dungen.constants import RoomType
from dungen.dungeon_rng import DungeonRNG
from dungen.geometry import Rect
from dungen.partition import partition_space
from dungen.rooms import Room, carve_room, carve_rooms


def test_room_stays_inside_offset_box():
    leaf = Rect(0, 0, 20, 20)
    for seed in range(30):
        room = carve_room(leaf, 0.2, 0.8, 2, DungeonRNG(seed=seed), min_width=3, min_length=3)
        assert Rect(2, 2, 18, 18).contains_rect(room.rect)
        assert room.rect.width >= 3 and room.rect.length >= 3


def test_room_corners_follow_modifiers():
    leaf = Rect(10, 10, 30, 30)
    for seed in range(30):
        room = carve_room(leaf, 0.1, 0.9, 0, DungeonRNG(seed=seed))
        # Corners land in the first and last tenth of each axis
        assert 10 <= room.rect.x1 <= 12
        assert 28 <= room.rect.x2 <= 30
        assert 10 <= room.rect.y1 <= 12
        assert 28 <= room.rect.y2 <= 30


def test_room_grown_to_minimum():
    leaf = Rect(0, 0, 30, 12)
    for seed in range(30):
        room = carve_room(leaf, 0.3, 0.7, 1, DungeonRNG(seed=seed), min_width=20, min_length=9)
        assert room.rect.width >= 20
        assert room.rect.length >= 9
        assert Rect(1, 1, 29, 11).contains_rect(room.rect)


def test_box_smaller_than_minimum_is_filled():
    room = carve_room(Rect(0, 0, 5, 5), 0.1, 0.9, 1, DungeonRNG(seed=2), min_width=6, min_length=6)
    assert room.rect == Rect(1, 1, 4, 4)


def test_empty_offset_box_falls_back_to_leaf():
    room = carve_room(Rect(0, 0, 2, 2), 0.1, 0.9, 1, DungeonRNG(seed=2))
    assert room.rect == Rect(0, 0, 2, 2)


def test_carve_rooms_one_per_leaf():
    rng = DungeonRNG(seed=6)
    config = DungeonConfig(dungeon_width=48, dungeon_length=48)
    tree = partition_space(48, 48, 4, 6, 6, rng)
    rooms = carve_rooms(tree, config, rng)
    leaves = tree.leaves()
    assert len(rooms) == len(leaves)
    for expected_id, (room, leaf) in enumerate(zip(rooms, leaves)):
        assert room.room_id == expected_id
        assert leaf.room_id == room.room_id
        assert room.leaf_index == leaf.index
        assert leaf.rect.contains_rect(room.rect)
        assert room.room_type is RoomType.NORMAL


def test_set_room_type_relabels():
    room = Room(room_id=3, rect=Rect(0, 0, 4, 4), leaf_index=0)
    assert room.label == "normal_3"
    room.set_room_type(RoomType.BOSS, rng=DungeonRNG(seed=1))
    assert room.room_type is RoomType.BOSS
    assert room.label.startswith("boss_3_")
    suffix = int(room.label.rsplit("_", 1)[1])
    assert 1000 <= suffix <= 9999
