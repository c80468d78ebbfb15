"""One-to-one atom correspondences and their best-fit transformation."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from .kabsch import calculate_rmsd, superpose
from .molecule import Molecule
from .rigid import RigidTransform


@dataclass(frozen=True)
class MatchPair:
    """Single correspondence between a target atom and a model atom."""

    target_idx: int
    model_idx: int
    priority: float
    weight: float


class Match:
    """Injective partial mapping between target and model atom indices.

    Each target index and each model index occurs at most once. When a new
    pair collides with stored pairs it replaces them only if its priority is
    strictly higher than every one of them, so ties keep the earlier pair.
    After calculate_best_fit the match also holds the weighted least-squares
    transformation of the model onto the target and its RMSD.
    """

    def __init__(self) -> None:
        self._pairs: dict[int, MatchPair] = {}
        self._by_target: dict[int, int] = {}
        self._by_model: dict[int, int] = {}
        self._serial = 0
        self._rigid_trans = RigidTransform.identity()
        self._rmsd = 0.0

    def __len__(self) -> int:
        return len(self._pairs)

    def size(self) -> int:
        return len(self._pairs)

    def rigid_trans(self) -> RigidTransform:
        return self._rigid_trans

    def rmsd(self) -> float:
        return self._rmsd

    @property
    def pairs(self) -> list[MatchPair]:
        """Stored pairs in insertion order."""
        return list(self._pairs.values())

    def add(self, target_idx: int, model_idx: int, priority: float, weight: float) -> bool:
        """Propose a pair, keeping the mapping one-to-one.

        Args:
            target_idx: Index into the target molecule
            model_idx: Index into the model molecule
            priority: Score used to resolve collisions (higher wins)
            weight: Weight of the pair in the least-squares fit

        Returns:
            True if the pair was stored
        """
        conflicts = {
            slot
            for slot in (self._by_target.get(target_idx), self._by_model.get(model_idx))
            if slot is not None
        }
        if any(self._pairs[slot].priority >= priority for slot in conflicts):
            return False

        for slot in conflicts:
            old = self._pairs.pop(slot)
            del self._by_target[old.target_idx]
            del self._by_model[old.model_idx]

        slot = self._serial
        self._serial += 1
        self._pairs[slot] = MatchPair(target_idx, model_idx, float(priority), float(weight))
        self._by_target[target_idx] = slot
        self._by_model[model_idx] = slot
        return True

    def target_indices(self) -> NDArray[np.intp]:
        return np.array([pair.target_idx for pair in self._pairs.values()], dtype=np.intp)

    def model_indices(self) -> NDArray[np.intp]:
        return np.array([pair.model_idx for pair in self._pairs.values()], dtype=np.intp)

    def weights(self) -> NDArray[np.floating]:
        return np.array([pair.weight for pair in self._pairs.values()], dtype=np.float64)

    def calculate_best_fit(self, target: Molecule, model: Molecule) -> RigidTransform:
        """Fit the model atoms of the match onto their target partners.

        Stores the weighted Kabsch transformation and the weighted RMSD of the
        pairs under it. An empty match stores the identity and RMSD 0.

        Args:
            target: Target molecule the target indices refer to
            model: Model molecule the model indices refer to

        Returns:
            The stored transformation
        """
        fixed = target.coords[self.target_indices()].reshape(-1, 3)
        mobile = model.coords[self.model_indices()].reshape(-1, 3)
        weights = self.weights()

        self._rigid_trans = superpose(fixed, mobile, weights)
        self._rmsd = calculate_rmsd(fixed, self._rigid_trans.apply(mobile), weights)
        return self._rigid_trans
