"""Uniform-grid spatial hash for fixed-radius neighbour queries."""

from __future__ import annotations

import itertools
import math
from functools import lru_cache
from typing import Generic, TypeVar

import numpy as np
from numpy.typing import ArrayLike, NDArray

T = TypeVar("T")


@lru_cache(maxsize=16)
def _neighbour_offsets(reach: int, dimension: int) -> tuple[tuple[int, ...], ...]:
    return tuple(itertools.product(range(-reach, reach + 1), repeat=dimension))


class GeomHash(Generic[T]):
    """Sparse uniform grid mapping points to payloads.

    Points are filed under the cell floor(coord / cell_size). A query visits
    every cell that can hold a point within the radius, so it returns a
    superset of the Euclidean ball and callers filter by distance.

    Args:
        cell_size: Side length of a grid cell (typically the match threshold)
        dimension: Number of coordinates per point
    """

    def __init__(self, cell_size: float, dimension: int = 3) -> None:
        if not cell_size > 0:
            raise ValueError(f"cell_size must be positive, got {cell_size}")
        if dimension < 1:
            raise ValueError(f"dimension must be >= 1, got {dimension}")
        self.cell_size = float(cell_size)
        self.dimension = dimension
        self._cells: dict[tuple[int, ...], list[T]] = {}
        self._count = 0
        # (cell, reach) -> payloads of the whole neighbourhood, cleared on insert
        self._neighbourhoods: dict[tuple[tuple[int, ...], int], list[T]] = {}

    def __len__(self) -> int:
        return self._count

    @property
    def n_cells(self) -> int:
        """Number of non-empty cells."""
        return len(self._cells)

    def cell_of(self, point: ArrayLike) -> tuple[int, ...]:
        """Return integer cell index of point."""
        coords = np.asarray(point, dtype=np.float64)
        if coords.shape != (self.dimension,):
            raise ValueError(f"Expected point of shape ({self.dimension},), got {coords.shape}")
        return tuple(int(value) for value in np.floor(coords / self.cell_size))

    def cells_of(self, points: ArrayLike) -> NDArray[np.int64]:
        """Return integer cell indices of an (N, dimension) array of points."""
        coords = np.asarray(points, dtype=np.float64)
        if coords.ndim != 2 or coords.shape[1] != self.dimension:
            raise ValueError(f"Expected points of shape (N, {self.dimension}), got {coords.shape}")
        return np.floor(coords / self.cell_size).astype(np.int64)

    def insert(self, point: ArrayLike, payload: T) -> None:
        """Store payload under the cell containing point."""
        self._cells.setdefault(self.cell_of(point), []).append(payload)
        self._count += 1
        self._neighbourhoods.clear()

    def query(self, center: ArrayLike, radius: float, out: list[T] | None = None) -> list[T]:
        """Collect payloads stored in the cube of half-side radius around center.

        Args:
            center: Query point
            radius: Search radius
            out: Optional list to extend in place

        Returns:
            The extended list (a new list if out is None)
        """
        return self.query_cell(self.cell_of(center), radius, out)

    def query_cell(self, cell: tuple[int, ...], radius: float, out: list[T] | None = None) -> list[T]:
        """Same as query for a point already reduced to its cell index (see cells_of).

        The payloads of a neighbourhood are collected once and reused by later
        queries falling in the same cell.
        """
        if out is None:
            out = []
        reach = max(1, math.ceil(radius / self.cell_size))
        key = (cell, reach)
        payloads = self._neighbourhoods.get(key)
        if payloads is None:
            payloads = []
            for offset in _neighbour_offsets(reach, self.dimension):
                stored = self._cells.get(tuple(c + d for c, d in zip(cell, offset, strict=True)))
                if stored:
                    payloads.extend(stored)
            self._neighbourhoods[key] = payloads
        out.extend(payloads)
        return out
