"""Candidate poses from pairs of point triangles."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from .kabsch import superpose
from .rigid import RigidTransform

# Relative tolerance on sin(angle at a) below which a triangle counts as collinear
_COLLINEAR_TOL = 1e-8
# Absolute extent (Angstrom) below which all three points are considered coincident
_COINCIDENT_TOL = 1e-9


@dataclass(frozen=True, eq=False)
class Triangle:
    """Ordered triple of points (a, b, c)."""

    a: NDArray[np.floating]
    b: NDArray[np.floating]
    c: NDArray[np.floating]

    def __post_init__(self) -> None:
        for name in ("a", "b", "c"):
            point = np.asarray(getattr(self, name), dtype=np.float64)
            if point.shape != (3,):
                raise ValueError(f"Triangle vertex '{name}' must have shape (3,), got {point.shape}")
            object.__setattr__(self, name, point)

    @classmethod
    def from_coords(cls, coords: NDArray[np.floating], start: int) -> Triangle:
        """Build the triangle of consecutive points coords[start:start + 3]."""
        return cls(coords[start], coords[start + 1], coords[start + 2])

    def points(self) -> NDArray[np.floating]:
        """Return vertices as (3, 3) array, one vertex per row."""
        return np.vstack((self.a, self.b, self.c))

    def centroid(self) -> NDArray[np.floating]:
        return (self.a + self.b + self.c) / 3.0

    def is_coincident(self) -> bool:
        """True when all three vertices are the same point."""
        pts = self.points()
        return bool(np.max(np.linalg.norm(pts - pts[0], axis=1)) <= _COINCIDENT_TOL)

    def frame(self) -> NDArray[np.floating] | None:
        """Orthonormal frame of the triangle as columns (e1, e2, e3).

        e1 points from a to b, e3 is normal to the triangle plane and
        e2 = e3 x e1 completes a right-handed basis.

        Returns:
            Rotation matrix, shape (3, 3), or None if the vertices are collinear
        """
        ab = self.b - self.a
        ac = self.c - self.a
        len_ab = np.linalg.norm(ab)
        len_ac = np.linalg.norm(ac)
        if len_ab <= _COINCIDENT_TOL or len_ac <= _COINCIDENT_TOL:
            return None

        normal = np.cross(ab, ac)
        len_normal = np.linalg.norm(normal)
        if len_normal <= _COLLINEAR_TOL * len_ab * len_ac:
            return None

        e1 = ab / len_ab
        e3 = normal / len_normal
        e2 = np.cross(e3, e1)
        return np.column_stack((e1, e2, e3))


def triangle_transform(target: Triangle, model: Triangle) -> RigidTransform | None:
    """Compute the rigid transformation placing the model triangle onto the target triangle.

    For two proper triangles the result maps the model frame onto the target
    frame, anchored at the centroids; it is exact for congruent triangles.
    If either triangle is collinear the least-squares fit of the three vertex
    pairs is used instead.

    Args:
        target: Triangle in the target (fixed) molecule
        model: Triangle in the model (mobile) molecule

    Returns:
        Transformation T with T(model) ~ target, or None if either triangle
        collapses to a single point
    """
    if target.is_coincident() or model.is_coincident():
        return None

    target_frame = target.frame()
    model_frame = model.frame()
    if target_frame is None or model_frame is None:
        return superpose(target.points(), model.points())

    rotation = target_frame @ model_frame.T
    translation = target.centroid() - rotation @ model.centroid()
    return RigidTransform(rotation, translation)
