"""Uniform grid spatial hash for neighborhood queries."""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator

from ..models.entity import Bounds, Entity
from ..models.types import Point2D
from .tolerances import GRID_CELL_FACTOR, GRID_CELL_MIN, MIN_SEED_EXTENT, POSITION_RATIO

CellKey = tuple[int, int]


def dynamic_tolerance(seed_bounds: Bounds | None, position_fuzziness: float) -> float:
    """
    Positional tolerance scaled by the seed size.

    Args:
        seed_bounds: Tight bounds of the seed pattern
        position_fuzziness: User multiplier

    Returns:
        ``max(width, height, 1.0) * 0.02 * position_fuzziness``
    """
    extent = MIN_SEED_EXTENT
    if seed_bounds is not None:
        extent = max(seed_bounds.width, seed_bounds.height, MIN_SEED_EXTENT)
    return extent * POSITION_RATIO * position_fuzziness


def grid_cell_size(tolerance: float) -> float:
    """Cell size for a given positional tolerance, never below GRID_CELL_MIN."""
    return max(tolerance * GRID_CELL_FACTOR, GRID_CELL_MIN)


class SpatialGrid:
    """
    Buckets entities by the grid cell containing their center.

    Iteration order inside a cell is insertion order, and neighborhood
    queries walk cells with dx as the outer loop and dy as the inner loop,
    so every query is deterministic for a given corpus order.
    """

    def __init__(self, cell_size: float, entities: Iterable[Entity] = ()) -> None:
        """
        Initialize the grid.

        Args:
            cell_size: Edge length of one square cell (must be positive)
            entities: Entities to insert

        Raises:
            ValueError: If cell_size is not positive
        """
        if cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {cell_size}")
        self._cell_size = cell_size
        self._cells: dict[CellKey, list[Entity]] = {}
        self._count = 0
        for entity in entities:
            self.insert(entity)

    def __len__(self) -> int:
        return self._count

    def __repr__(self) -> str:
        return f"SpatialGrid(cell_size={self._cell_size}, cells={len(self._cells)}, entities={self._count})"

    @property
    def cell_size(self) -> float:
        return self._cell_size

    def cell_of(self, point: Point2D) -> CellKey:
        """Grid key of the cell containing a point."""
        return (
            math.floor(point[0] / self._cell_size),
            math.floor(point[1] / self._cell_size),
        )

    def insert(self, entity: Entity) -> None:
        """Add an entity to the cell containing its center."""
        key = self.cell_of(entity.center_point())
        self._cells.setdefault(key, []).append(entity)
        self._count += 1

    def cell(self, key: CellKey) -> list[Entity]:
        """Entities in one cell (empty list for unused cells)."""
        return self._cells.get(key, [])

    def cells_radius(self, distance: float) -> int:
        """Number of cells needed on each side to cover a distance."""
        return max(0, math.ceil(distance / self._cell_size))

    def neighborhood(self, point: Point2D, radius_cells: int = 1) -> Iterator[Entity]:
        """
        Yield entities in the square block of cells around a point.

        Args:
            point: Query point
            radius_cells: Cells on each side of the center cell
                (1 gives the 3x3 block)
        """
        gx, gy = self.cell_of(point)
        for dx in range(-radius_cells, radius_cells + 1):
            for dy in range(-radius_cells, radius_cells + 1):
                cell = self._cells.get((gx + dx, gy + dy))
                if cell:
                    yield from cell
