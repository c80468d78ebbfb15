"""Superposition of two backbones in their original coordinate frames."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from .molecule import Molecule
from .rigid import RigidTransform
from .search import SearchResult, search_alignment

logger = logging.getLogger(__name__)


@dataclass
class StructureAlignment:
    """Result of aligning a model backbone onto a target backbone.

    Attributes:
        size: Number of matched atom pairs
        rmsd: Weighted RMSD of the matched pairs
        transform: Transformation of the model onto the target in the original frame
        core_transform: Same transformation between the centered molecules
        target_centroid: Centroid removed from the target backbone
        model_centroid: Centroid removed from the model backbone
        search: Raw search result (winning triangle indices)
    """

    size: int
    rmsd: float
    transform: RigidTransform
    core_transform: RigidTransform
    target_centroid: NDArray[np.floating]
    model_centroid: NDArray[np.floating]
    search: SearchResult


def compose_original_frame(
    core_transform: RigidTransform,
    target_centroid: NDArray[np.floating],
    model_centroid: NDArray[np.floating],
) -> RigidTransform:
    """Express a transformation between centered molecules in the original frames.

    Returns Translate(+target_centroid) * core_transform * Translate(-model_centroid).
    """
    return (
        RigidTransform.from_translation(target_centroid)
        * core_transform
        * RigidTransform.from_translation(-np.asarray(model_centroid, dtype=np.float64))
    )


def align_molecules(
    target: Molecule,
    model: Molecule,
    epsilon: float,
    workers: int = 1,
) -> StructureAlignment:
    """Center both molecules, search the best pose and map it back to the original frame.

    Args:
        target: Target backbone in its original coordinates
        model: Model backbone in its original coordinates
        epsilon: Distance threshold for a matched pair (Angstrom)
        workers: Number of search processes

    Returns:
        StructureAlignment whose transform maps original model coordinates onto the target

    Raises:
        ValueError: If either molecule is empty or epsilon is not positive
    """
    if len(target) == 0:
        raise ValueError("Target has no backbone atoms")
    if len(model) == 0:
        raise ValueError("Model has no backbone atoms")

    target_centered, target_centroid = target.centered()
    model_centered, model_centroid = model.centered()

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Target: %d backbone atoms, centroid %s", len(target), np.round(target_centroid, 3).tolist())
        logger.debug("Model:  %d backbone atoms, centroid %s", len(model), np.round(model_centroid, 3).tolist())

    result = search_alignment(target_centered, model_centered, epsilon, workers=workers)

    if result.target_start is not None:
        logger.debug(
            "Best pose from target triangle %d and model triangle %d",
            result.target_start,
            result.model_start,
        )

    return StructureAlignment(
        size=result.size,
        rmsd=result.rmsd,
        transform=compose_original_frame(result.transform, target_centroid, model_centroid),
        core_transform=result.transform,
        target_centroid=target_centroid,
        model_centroid=model_centroid,
        search=result,
    )
