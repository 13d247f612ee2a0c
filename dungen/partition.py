# dungen/partition.py
"""Binary space partitioning of the dungeon bounds.

The tree is stored as an arena: nodes live in a list and refer to their
parent and children by index. Leaves are the areas rooms get carved into.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

import structlog

from dungen.constants import Orientation
from dungen.dungeon_rng import DungeonRNG
from dungen.geometry import Rect

log = structlog.get_logger()


@dataclass
class PartitionNode:
    """Represents a node in the BSP tree."""

    index: int
    rect: Rect
    depth: int
    parent: Optional[int] = None
    children: Tuple[int, ...] = ()
    # Orientation of the line this node was split along (None for leaves)
    split: Optional[Orientation] = None
    room_id: Optional[int] = None

    @property
    def is_leaf(self) -> bool:
        return not self.children


class PartitionTree:
    def __init__(self, root_rect: Rect):
        self.nodes: List[PartitionNode] = [PartitionNode(index=0, rect=root_rect, depth=0)]

    @property
    def root(self) -> PartitionNode:
        return self.nodes[0]

    def node(self, index: int) -> PartitionNode:
        return self.nodes[index]

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[PartitionNode]:
        return iter(self.nodes)

    def add_children(
        self, parent_index: int, first: Rect, second: Rect, split: Orientation
    ) -> Tuple[PartitionNode, PartitionNode]:
        parent = self.nodes[parent_index]
        if parent.children:
            raise ValueError(f"node {parent_index} is already split")
        created = []
        for rect in (first, second):
            node = PartitionNode(
                index=len(self.nodes),
                rect=rect,
                depth=parent.depth + 1,
                parent=parent_index,
            )
            self.nodes.append(node)
            created.append(node)
        parent.children = (created[0].index, created[1].index)
        parent.split = split
        return created[0], created[1]

    def subtree_leaves(self, index: int) -> Iterator[PartitionNode]:
        """Depth-first leaves below *index*, first child before second."""
        stack = [index]
        while stack:
            node = self.nodes[stack.pop()]
            if node.is_leaf:
                yield node
            else:
                # Reverse so the first child is visited first
                stack.extend(reversed(node.children))

    def leaves(self) -> List[PartitionNode]:
        return list(self.subtree_leaves(0))

    def internal_nodes(self) -> List[PartitionNode]:
        return [node for node in self.nodes if not node.is_leaf]

    @property
    def max_depth(self) -> int:
        return max(node.depth for node in self.nodes)


def _choose_split(
    rect: Rect, min_width: int, min_length: int, rng: DungeonRNG
) -> Optional[Orientation]:
    can_split_x = rect.width >= min_width * 2
    can_split_y = rect.length >= min_length * 2
    if can_split_x and can_split_y:
        if rect.width > rect.length:
            return Orientation.VERTICAL
        if rect.length > rect.width:
            return Orientation.HORIZONTAL
        return Orientation.VERTICAL if rng.coin_flip() == "heads" else Orientation.HORIZONTAL
    if can_split_x:
        return Orientation.VERTICAL
    if can_split_y:
        return Orientation.HORIZONTAL
    return None


def _split_node_recursive(
    tree: PartitionTree,
    index: int,
    max_iterations: int,
    min_width: int,
    min_length: int,
    rng: DungeonRNG,
) -> bool:
    """Recursively splits a BSP node. Returns True if split occurred."""
    node = tree.node(index)
    if node.depth >= max_iterations:
        log.debug("Split stopped: iteration budget used", depth=node.depth, rect=node.rect)
        return False

    split = _choose_split(node.rect, min_width, min_length, rng)
    if split is None:
        log.debug(
            "Split stopped: node too small",
            rect=node.rect,
            min_width=min_width,
            min_length=min_length,
        )
        return False

    r = node.rect
    if split is Orientation.VERTICAL:
        split_x = rng.get_int(r.x1 + min_width, r.x2 - min_width)
        first = Rect(r.x1, r.y1, split_x, r.y2)
        second = Rect(split_x, r.y1, r.x2, r.y2)
    else:
        split_y = rng.get_int(r.y1 + min_length, r.y2 - min_length)
        first = Rect(r.x1, r.y1, r.x2, split_y)
        second = Rect(r.x1, split_y, r.x2, r.y2)

    left, right = tree.add_children(index, first, second, split)
    log.debug(
        "Split node",
        depth=node.depth,
        orientation=split.value,
        first_rect=left.rect,
        second_rect=right.rect,
    )

    _split_node_recursive(tree, left.index, max_iterations, min_width, min_length, rng)
    _split_node_recursive(tree, right.index, max_iterations, min_width, min_length, rng)
    return True


def partition_space(
    width: int,
    length: int,
    max_iterations: int,
    min_room_width: int,
    min_room_length: int,
    rng: DungeonRNG,
) -> PartitionTree:
    """Split ``[0, width) x [0, length)`` into a BSP tree.

    Each branch is split at most ``max_iterations`` times, and only while a
    half keeps at least the minimum room dimensions along the split axis.
    A rectangle too small to split on either axis stays a single leaf.
    """
    tree = PartitionTree(Rect(0, 0, width, length))
    split = _split_node_recursive(
        tree, 0, max_iterations, min_room_width, min_room_length, rng
    )
    if not split:
        log.info("Partition root kept as a single leaf", width=width, length=length)
    log.info(
        "Partitioning finished",
        nodes=len(tree),
        leaves=len(tree.leaves()),
        depth=tree.max_depth,
    )
    return tree


__all__ = ["PartitionNode", "PartitionTree", "partition_space"]
