# dungen/geometry.py
from typing import Iterator, NamedTuple, Tuple

Point = Tuple[int, int]


class Rect(NamedTuple):
    """An axis-aligned rectangle on the grid.

    ``(x1, y1)`` is the bottom-left corner and ``(x2, y2)`` the top-right
    corner. The upper bound is exclusive: a rect covers the cells
    ``x1 <= x < x2`` and ``y1 <= y < y2``.
    """

    x1: int
    y1: int
    x2: int
    y2: int

    @classmethod
    def from_size(cls, x: int, y: int, width: int, length: int) -> "Rect":
        return cls(x, y, x + width, y + length)

    @property
    def width(self) -> int:
        return self.x2 - self.x1

    @property
    def length(self) -> int:
        return self.y2 - self.y1

    @property
    def area(self) -> int:
        return max(0, self.width) * max(0, self.length)

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.length <= 0

    @property
    def center(self) -> Point:
        """Center coordinates of the rectangle (floor-divided)."""
        return (self.x1 + self.x2) // 2, (self.y1 + self.y2) // 2

    @property
    def bottom_left(self) -> Point:
        return self.x1, self.y1

    @property
    def top_right(self) -> Point:
        return self.x2, self.y2

    def contains(self, x: int, y: int) -> bool:
        return self.x1 <= x < self.x2 and self.y1 <= y < self.y2

    def contains_rect(self, other: "Rect") -> bool:
        return (
            self.x1 <= other.x1
            and other.x2 <= self.x2
            and self.y1 <= other.y1
            and other.y2 <= self.y2
        )

    def intersects(self, other: "Rect") -> bool:
        """Returns True if the two rectangles share at least one cell."""
        return (
            self.x1 < other.x2
            and other.x1 < self.x2
            and self.y1 < other.y2
            and other.y1 < self.y2
        )

    def cells(self) -> Iterator[Point]:
        for x in range(self.x1, self.x2):
            for y in range(self.y1, self.y2):
                yield x, y
