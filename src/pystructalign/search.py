"""Exhaustive triangle-pair search for the largest epsilon-alignment."""

from __future__ import annotations

import logging
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field

from .correspondence import build_correspondence, build_target_hash
from .geom_hash import GeomHash
from .match import Match
from .molecule import Molecule
from .rigid import RigidTransform
from .triangle import Triangle, triangle_transform

logger = logging.getLogger(__name__)


@dataclass
class SearchResult:
    """Best alignment found by the search.

    Attributes:
        size: Number of matched atom pairs
        transform: Transformation of the model onto the target
        rmsd: Weighted RMSD of the matched pairs under transform
        target_start: First index of the winning target triangle (None if no candidate won)
        model_start: First index of the winning model triangle (None if no candidate won)
    """

    size: int = 0
    transform: RigidTransform = field(default_factory=RigidTransform.identity)
    rmsd: float = 0.0
    target_start: int | None = None
    model_start: int | None = None

    def sort_key(self) -> tuple[int, int, int]:
        """Key under which the first best candidate in (i, j) order sorts lowest."""
        if self.target_start is None or self.model_start is None:
            return (-self.size, -1, -1)
        return (-self.size, self.target_start, self.model_start)


def _evaluate_candidate(
    target: Molecule,
    model: Molecule,
    geom_hash: GeomHash[int],
    epsilon: float,
    target_tri: Triangle,
    model_tri: Triangle,
) -> Match | None:
    transform = triangle_transform(target_tri, model_tri)
    if transform is None:
        return None

    match = Match()
    build_correspondence(match, geom_hash, epsilon, model, target, transform)
    match.calculate_best_fit(target, model)
    return match


def _search_rows(
    target: Molecule,
    model: Molecule,
    epsilon: float,
    rows: range,
    geom_hash: GeomHash[int] | None = None,
    report_progress: bool = True,
) -> SearchResult:
    """Scan target triangles starting at the given rows against all model triangles."""
    if geom_hash is None:
        geom_hash = build_target_hash(target, epsilon)

    best = SearchResult()
    n_model_triangles = len(model) - 2
    for i in rows:
        target_tri = Triangle.from_coords(target.coords, i)
        if report_progress:
            logger.info("%d / %d", i, len(target))
        for j in range(n_model_triangles):
            model_tri = Triangle.from_coords(model.coords, j)
            match = _evaluate_candidate(target, model, geom_hash, epsilon, target_tri, model_tri)
            if match is None:
                continue
            if match.size() > best.size:
                best = SearchResult(
                    size=match.size(),
                    transform=match.rigid_trans(),
                    rmsd=match.rmsd(),
                    target_start=i,
                    model_start=j,
                )
    return best


def _chunk_rows(n_rows: int, n_chunks: int) -> list[range]:
    n_chunks = max(1, min(n_chunks, n_rows))
    bounds = [round(k * n_rows / n_chunks) for k in range(n_chunks + 1)]
    return [range(start, stop) for start, stop in zip(bounds[:-1], bounds[1:], strict=True) if stop > start]


def search_alignment(
    target: Molecule,
    model: Molecule,
    epsilon: float,
    workers: int = 1,
) -> SearchResult:
    """Find the rigid pose of model that matches the most target atoms within epsilon.

    Every triangle of consecutive target atoms (i, i+1, i+2) is paired with
    every triangle of consecutive model atoms (j, j+1, j+2). Each pair gives a
    candidate pose, the pose gives a one-to-one correspondence and the
    correspondence is refined by a single weighted Kabsch fit. A candidate
    replaces the current best only when its size is strictly larger, so the
    first candidate in (i, j) order reaching the maximum wins.

    Args:
        target: Target molecule (usually centered on its centroid)
        model: Model molecule (usually centered on its centroid)
        epsilon: Distance threshold for a matched pair (Angstrom)
        workers: Number of processes; rows of target triangles are split
            into contiguous chunks and the results reduced deterministically

    Returns:
        Best result; size 0 with the identity transformation if no candidate matched

    Raises:
        ValueError: If epsilon or workers is not positive
    """
    if not epsilon > 0:
        raise ValueError(f"epsilon must be positive, got {epsilon}")
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")

    n_rows = len(target) - 2
    if n_rows <= 0 or len(model) < 3:
        logger.debug("Fewer than 3 atoms (target %d, model %d): no candidate poses", len(target), len(model))
        return SearchResult()

    if workers == 1:
        return _search_rows(target, model, epsilon, range(n_rows))

    chunks = _chunk_rows(n_rows, workers * 4)
    logger.debug("Searching %d target rows in %d chunks on %d workers", n_rows, len(chunks), workers)

    results: list[SearchResult] = []
    with ProcessPoolExecutor(max_workers=workers) as executor:
        futures = {
            executor.submit(_search_rows, target, model, epsilon, rows, None, False): rows for rows in chunks
        }
        for future in as_completed(futures):
            rows = futures[future]
            results.append(future.result())
            logger.info("%d / %d", rows.stop, len(target))

    best = min(results, key=SearchResult.sort_key)
    if best.size == 0:
        return SearchResult()
    return best
