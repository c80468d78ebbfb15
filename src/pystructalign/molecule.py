"""Internal representation of a molecule's backbone for alignment.

This module provides a library-agnostic point set that can be built from
gemmi or Biopython atoms and is the only molecule type the search core sees.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import ArrayLike, NDArray


@dataclass
class Molecule:
    """Ordered set of atom positions.

    Attributes:
        coords: Atom coordinates (N, 3) array
        labels: One label per atom (e.g. "A:12:CA"), used for reporting only

    Notes:
        - Indices are stable for the lifetime of the object
        - An empty molecule is valid; it simply yields no candidate poses
    """

    coords: NDArray[np.floating]
    labels: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate Molecule data after initialization.

        Raises:
            ValueError: If validation fails
        """
        coords = np.array(self.coords, dtype=np.float64)
        if coords.size == 0:
            coords = coords.reshape(0, 3)
        self.coords = coords

        if self.coords.ndim != 2 or self.coords.shape[1] != 3:
            raise ValueError(f"coords must have shape (N, 3), got {self.coords.shape}")
        if not np.all(np.isfinite(self.coords)):
            raise ValueError("coords must be finite")

        if not self.labels:
            self.labels = [str(i) for i in range(len(self.coords))]
        else:
            self.labels = list(self.labels)
        if len(self.labels) != len(self.coords):
            raise ValueError(f"labels length {len(self.labels)} does not match number of atoms {len(self.coords)}")

    @classmethod
    def from_positions(cls, positions: Sequence[ArrayLike], labels: Sequence[str] | None = None) -> Molecule:
        """Create Molecule from a sequence of xyz positions."""
        coords = np.array([np.asarray(pos, dtype=np.float64) for pos in positions]).reshape(-1, 3)
        return cls(coords=coords, labels=list(labels) if labels is not None else [])

    def __len__(self) -> int:
        return int(self.coords.shape[0])

    def __getitem__(self, index: int) -> NDArray[np.floating]:
        return self.coords[index].copy()

    def translate(self, vector: ArrayLike) -> None:
        """Add vector to every position in place."""
        self.coords += np.asarray(vector, dtype=np.float64)

    def centroid(self) -> NDArray[np.floating]:
        """Return the unweighted center of mass.

        Raises:
            ValueError: If molecule has no atoms
        """
        if len(self) == 0:
            raise ValueError("Cannot compute centroid of an empty molecule")
        center: NDArray[np.floating] = np.mean(self.coords, axis=0)
        return center

    def centered(self) -> tuple[Molecule, NDArray[np.floating]]:
        """Return a copy moved to its own centroid, together with that centroid."""
        center = self.centroid()
        moved = Molecule(coords=self.coords.copy(), labels=self.labels)
        moved.translate(-center)
        return moved, center
