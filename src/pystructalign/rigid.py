"""Rigid-body transformations in three dimensions."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

# cos(ry) below this is treated as gimbal lock when extracting Euler angles
_GIMBAL_TOL = 1e-9


def _rotation_x(angle: float) -> NDArray[np.floating]:
    c, s = np.cos(angle), np.sin(angle)
    return np.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]])


def _rotation_y(angle: float) -> NDArray[np.floating]:
    c, s = np.cos(angle), np.sin(angle)
    return np.array([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]])


def _rotation_z(angle: float) -> NDArray[np.floating]:
    c, s = np.cos(angle), np.sin(angle)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])


@dataclass(frozen=True, eq=False)
class RigidTransform:
    """Proper rigid transformation acting as x -> rotation @ x + translation.

    Attributes:
        rotation: Rotation matrix, shape (3, 3)
        translation: Translation vector, shape (3,)

    Notes:
        Composition follows function composition: (a * b).apply(x) == a.apply(b.apply(x))
    """

    rotation: NDArray[np.floating]
    translation: NDArray[np.floating]

    def __post_init__(self) -> None:
        """Validate and normalize the stored arrays.

        Raises:
            ValueError: If rotation or translation have wrong shapes
        """
        rotation = np.array(self.rotation, dtype=np.float64)
        translation = np.array(self.translation, dtype=np.float64)

        if rotation.shape != (3, 3):
            raise ValueError(f"rotation must have shape (3, 3), got {rotation.shape}")
        if translation.shape != (3,):
            raise ValueError(f"translation must have shape (3,), got {translation.shape}")

        rotation.flags.writeable = False
        translation.flags.writeable = False
        object.__setattr__(self, "rotation", rotation)
        object.__setattr__(self, "translation", translation)

    @classmethod
    def identity(cls) -> RigidTransform:
        """Return the identity transformation."""
        return cls(np.eye(3), np.zeros(3))

    @classmethod
    def from_translation(cls, vector: ArrayLike) -> RigidTransform:
        """Return a pure translation by vector."""
        return cls(np.eye(3), np.asarray(vector, dtype=np.float64))

    @classmethod
    def from_euler(cls, rx: float, ry: float, rz: float, translation: ArrayLike | None = None) -> RigidTransform:
        """Build a transformation from Euler angles (radians) and a translation.

        The rotation is Rz(rz) @ Ry(ry) @ Rx(rx), i.e. rotate about X first.
        """
        rotation = _rotation_z(rz) @ _rotation_y(ry) @ _rotation_x(rx)
        if translation is None:
            translation = np.zeros(3)
        return cls(rotation, np.asarray(translation, dtype=np.float64))

    def apply(self, coords: ArrayLike) -> NDArray[np.floating]:
        """Transform a single point, shape (3,), or a set of points, shape (N, 3)."""
        points = np.asarray(coords, dtype=np.float64)
        return points @ self.rotation.T + self.translation

    def __mul__(self, other: RigidTransform) -> RigidTransform:
        if not isinstance(other, RigidTransform):
            return NotImplemented
        return RigidTransform(
            self.rotation @ other.rotation,
            self.rotation @ other.translation + self.translation,
        )

    def inverse(self) -> RigidTransform:
        """Return the inverse transformation."""
        rotation_t = self.rotation.T
        return RigidTransform(rotation_t, -(rotation_t @ self.translation))

    def is_close(self, other: RigidTransform, atol: float = 1e-6) -> bool:
        """Check whether two transformations agree element-wise within atol."""
        return bool(
            np.allclose(self.rotation, other.rotation, atol=atol)
            and np.allclose(self.translation, other.translation, atol=atol)
        )

    def euler_angles(self) -> tuple[float, float, float]:
        """Decompose the rotation into (rx, ry, rz) so that R = Rz @ Ry @ Rx."""
        r = self.rotation
        ry = float(np.arcsin(np.clip(-r[2, 0], -1.0, 1.0)))
        if abs(np.cos(ry)) > _GIMBAL_TOL:
            rx = float(np.arctan2(r[2, 1], r[2, 2]))
            rz = float(np.arctan2(r[1, 0], r[0, 0]))
        else:
            # Gimbal lock: only rx - rz (or rx + rz) is defined, put everything in rx
            rx = float(np.arctan2(-r[1, 2], r[1, 1]))
            rz = 0.0
        return rx, ry, rz

    def __str__(self) -> str:
        values = [*self.euler_angles(), *self.translation.tolist()]
        # adding 0.0 turns -0.0 into 0.0
        return " ".join(f"{value + 0.0:g}" for value in values)

    def __repr__(self) -> str:
        return f"RigidTransform(rotation={self.rotation.tolist()}, translation={self.translation.tolist()})"
