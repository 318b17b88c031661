"""
PlanCad Drafting - Spatial Indexing (Loose Quadtree)
Provides O(log n) spatial queries for hit-testing, snapping and culling.

Items that straddle a quadrant boundary stay at the coarser node: they are
never split and never duplicated, so every query reports each item once.
"""

from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from loguru import logger

from config.feature_flags import is_enabled
from config.tolerances import Tolerances
from .geometry import BoundingBox
from .vector import Vector2


def _bounds_of(item: Any) -> BoundingBox:
    return item.bounding_box()


class QuadTree:
    """
    Root wrapper for the Quadtree.
    Handles rebuilds, removal and the query interface.
    """

    def __init__(self, bounds: Optional[BoundingBox] = None, capacity: int = 10, max_depth: int = 8):
        if bounds is None:
            extent = Tolerances.QUADTREE_EMPTY_EXTENT
            bounds = BoundingBox(Vector2(-extent, -extent), Vector2(extent, extent))
        self.capacity = max(1, int(capacity))
        self.max_depth = max(0, int(max_depth))
        self.root = QuadTreeNode(bounds, self.capacity, self.max_depth, depth=0)
        self._count = 0

    @property
    def bounds(self) -> BoundingBox:
        return self.root.bounds

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[Any]:
        for item, _ in self.root.iter_entries():
            yield item

    def insert(self, item, bounds: Optional[BoundingBox] = None) -> None:
        """
        Insert an item into the tree.
        :param item: The entity (Line, Circle, ...)
        :param bounds: Its bounding box; defaults to item.bounding_box()
        """
        if bounds is None:
            bounds = _bounds_of(item)
        if not self.root.bounds.contains(bounds):
            # Outside the root: the root is the highest node that must hold it
            logger.debug(f"[QUADTREE] Item außerhalb der Wurzel-Bounds, bleibt an der Wurzel: {item!r}")
            self.root.items.append((item, bounds))
        else:
            self.root.insert(item, bounds)
        self._count += 1

    def insert_many(self, items: Iterable[Any]) -> None:
        for item in items:
            self.insert(item)

    def remove(self, item) -> bool:
        """Removes item (by identity). Returns False if it was not indexed."""
        removed = self.root.remove(item)
        if removed:
            self._count -= 1
        return removed

    def query(self, range_box: BoundingBox) -> List[Any]:
        """
        Returns the items whose bounds intersect range_box, each once.
        """
        results: List[Any] = []
        seen = set()
        self.root.query(range_box, results, seen, force=True)
        return results

    def query_point(self, point: Vector2, tolerance: float = Tolerances.PICK_POINT) -> List[Any]:
        return self.query(BoundingBox(point, point).expanded(tolerance))

    def query_circle(self, center: Vector2, radius: float) -> List[Any]:
        """Range query filtered to the true distance from center to each item's box."""
        candidates = self.query(BoundingBox(center, center).expanded(radius))
        return [
            item for item in candidates
            if _bounds_of(item).closest_point(center).distance_to(center) <= radius
        ]

    def clear(self, bounds: Optional[BoundingBox] = None) -> None:
        """Resets the tree, optionally with new bounds."""
        self.root = QuadTreeNode(bounds or self.root.bounds, self.capacity, self.max_depth, depth=0)
        self._count = 0

    def rebuild(self, items: Iterable[Any], bounds: Optional[BoundingBox] = None) -> None:
        """
        Discards the tree and bulk-inserts items.

        Without explicit bounds the union of all item boxes is used,
        padded by 10% of the larger side.
        """
        entries: List[Tuple[Any, BoundingBox]] = [(item, _bounds_of(item)) for item in items]
        if bounds is None:
            union = BoundingBox.union_all(box for _, box in entries)
            if union is None:
                extent = Tolerances.QUADTREE_EMPTY_EXTENT
                bounds = BoundingBox(Vector2(-extent, -extent), Vector2(extent, extent))
            else:
                padding = max(union.width, union.height) * Tolerances.QUADTREE_PADDING
                if padding <= 0.0:
                    padding = 1.0
                bounds = union.expanded(padding)

        self.clear(bounds)
        for item, box in entries:
            self.insert(item, box)
        logger.debug(f"[QUADTREE] Rebuild: {len(entries)} Items, Bounds {bounds.min!r}..{bounds.max!r}")

    def get_statistics(self) -> Dict[str, int]:
        stats = {"node_count": 0, "leaf_count": 0, "max_depth": 0, "item_count": 0, "internal_items": 0}
        self.root.collect_statistics(stats)
        return stats


class QuadTreeNode:
    def __init__(self, bounds: BoundingBox, capacity: int, max_depth: int, depth: int):
        self.bounds = bounds
        self.capacity = capacity
        self.max_depth = max_depth
        self.depth = depth
        # Stores tuples of (item, item_bounds)
        self.items: List[Tuple[Any, BoundingBox]] = []
        self.children: Optional[List['QuadTreeNode']] = None

    @property
    def is_leaf(self) -> bool:
        return self.children is None

    def insert(self, item, item_bounds: BoundingBox) -> None:
        if self.is_leaf:
            if len(self.items) < self.capacity or self.depth >= self.max_depth:
                self.items.append((item, item_bounds))
                return
            self._subdivide()

        child = self._child_containing(item_bounds)
        if child is None:
            # Straddles a quadrant boundary: keep it here
            self.items.append((item, item_bounds))
        else:
            child.insert(item, item_bounds)

    def _child_containing(self, item_bounds: BoundingBox) -> Optional['QuadTreeNode']:
        for child in self.children:
            if child.bounds.contains(item_bounds):
                return child
        return None

    def _subdivide(self):
        lo, hi = self.bounds.min, self.bounds.max
        mid = self.bounds.center
        depth = self.depth + 1

        self.children = [
            QuadTreeNode(BoundingBox(Vector2(lo.x, mid.y), Vector2(mid.x, hi.y)), self.capacity, self.max_depth, depth),  # NW
            QuadTreeNode(BoundingBox(mid, hi), self.capacity, self.max_depth, depth),                                      # NE
            QuadTreeNode(BoundingBox(lo, mid), self.capacity, self.max_depth, depth),                                      # SW
            QuadTreeNode(BoundingBox(Vector2(mid.x, lo.y), Vector2(hi.x, mid.y)), self.capacity, self.max_depth, depth),  # SE
        ]
        if is_enabled("kernel_debug_logging"):
            logger.debug(f"[QUADTREE] Split auf Tiefe {self.depth}, {len(self.items)} Items verteilen")

        # Migrate existing items down where a single child fully contains them
        old_items = self.items
        self.items = []
        for item, item_bounds in old_items:
            child = self._child_containing(item_bounds)
            if child is None:
                self.items.append((item, item_bounds))
            else:
                child.insert(item, item_bounds)

    def remove(self, item) -> bool:
        for index, (candidate, _) in enumerate(self.items):
            if candidate is item:
                del self.items[index]
                return True
        if self.children:
            return any(child.remove(item) for child in self.children)
        return False

    def query(self, range_box: BoundingBox, results: List[Any], seen: set, force: bool = False) -> None:
        # Fast rejection (the root always checks its own items, which may lie outside its bounds)
        if not force and not self.bounds.intersects(range_box):
            return

        for item, item_bounds in self.items:
            if range_box.intersects(item_bounds) and id(item) not in seen:
                seen.add(id(item))
                results.append(item)

        if self.children:
            for child in self.children:
                child.query(range_box, results, seen)

    def iter_entries(self) -> Iterator[Tuple[Any, BoundingBox]]:
        yield from self.items
        if self.children:
            for child in self.children:
                yield from child.iter_entries()

    def collect_statistics(self, stats: Dict[str, int]) -> None:
        stats["node_count"] += 1
        stats["item_count"] += len(self.items)
        stats["max_depth"] = max(stats["max_depth"], self.depth)
        if self.is_leaf:
            stats["leaf_count"] += 1
        else:
            stats["internal_items"] += len(self.items)
            for child in self.children:
                child.collect_statistics(stats)
