from enum import Enum, IntEnum


class CellType(IntEnum):
    """Classification of a single grid cell (stored as uint8 in the grid)."""

    EMPTY = 0
    FLOOR = 1
    WALL = 2
    CORRIDOR = 3
    DOOR = 4


class RoomType(Enum):
    """Semantic role assigned to a carved room."""

    START = "start"
    BOSS = "boss"
    NORMAL = "normal"
    SHOP = "shop"
    TRAP = "trap"
    PUZZLE = "puzzle"


class Orientation(Enum):
    """Direction a wall segment or split line runs along."""

    HORIZONTAL = "horizontal"  # runs along x, separates two rows
    VERTICAL = "vertical"  # runs along y, separates two columns


WALKABLE_CELLS = frozenset({CellType.FLOOR, CellType.CORRIDOR, CellType.DOOR})
# Cells that get wall geometry along their open edges
BOUNDED_CELLS = frozenset({CellType.FLOOR, CellType.CORRIDOR})
# Neighbours that close off an edge
BLOCKING_CELLS = frozenset({CellType.EMPTY, CellType.WALL})

__all__ = [
    "CellType",
    "RoomType",
    "Orientation",
    "WALKABLE_CELLS",
    "BOUNDED_CELLS",
    "BLOCKING_CELLS",
]
