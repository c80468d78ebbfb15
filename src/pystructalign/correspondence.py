"""Correspondence building between a posed model and the hashed target."""

from __future__ import annotations

import numpy as np

from .geom_hash import GeomHash
from .match import Match
from .molecule import Molecule
from .rigid import RigidTransform


def build_target_hash(target: Molecule, epsilon: float) -> GeomHash[int]:
    """Index target atoms by position, storing atom indices as payloads."""
    geom_hash: GeomHash[int] = GeomHash(epsilon, dimension=3)
    for idx, position in enumerate(target.coords):
        geom_hash.insert(position, idx)
    return geom_hash


def build_correspondence(
    match: Match,
    geom_hash: GeomHash[int],
    epsilon: float,
    model: Molecule,
    target: Molecule,
    transform: RigidTransform,
) -> Match:
    """Fill match with target/model pairs that lie within epsilon under transform.

    Every model atom is moved by transform and the hash is queried around it.
    Each hit within epsilon (Euclidean) is proposed with priority and weight
    1 / (1 + distance); the match keeps the mapping one-to-one.

    Args:
        match: Match to fill (modified in place)
        geom_hash: Hash over the target atoms with atom indices as payloads
        epsilon: Distance threshold
        model: Model molecule
        target: Target molecule the hash was built from
        transform: Candidate transformation of the model

    Returns:
        The same match
    """
    moved = transform.apply(model.coords)
    cells = geom_hash.cells_of(moved).tolist()
    candidates: list[int] = []
    for model_idx, (position, cell) in enumerate(zip(moved, cells, strict=True)):
        candidates.clear()
        geom_hash.query_cell(tuple(cell), epsilon, candidates)
        if not candidates:
            continue

        distances = np.linalg.norm(target.coords[candidates] - position, axis=1)
        for target_idx, dist in zip(candidates, distances, strict=True):
            if dist <= epsilon:
                score = 1.0 / (1.0 + float(dist))
                match.add(target_idx, model_idx, score, score)

    return match
