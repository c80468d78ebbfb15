"""Weighted Kabsch fit for optimal rigid superposition."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from .rigid import RigidTransform


def _validate_pairs(
    fixed: NDArray[np.floating],
    mobile: NDArray[np.floating],
    weights: NDArray[np.floating] | None,
) -> tuple[NDArray[np.floating], NDArray[np.floating], NDArray[np.floating]]:
    fixed = np.asarray(fixed, dtype=float)
    mobile = np.asarray(mobile, dtype=float)

    if fixed.shape != mobile.shape:
        raise ValueError(f"Shape mismatch: fixed {fixed.shape} vs mobile {mobile.shape}")
    if fixed.ndim != 2 or fixed.shape[1] != 3:
        raise ValueError(f"Expected (N, 3) arrays, got shape {fixed.shape}")

    n_points = fixed.shape[0]
    if weights is None:
        weights = np.ones(n_points, dtype=float)
    else:
        weights = np.asarray(weights, dtype=float)
        if weights.shape != (n_points,):
            raise ValueError(f"Weights shape {weights.shape} incompatible with coordinates ({n_points}, 3)")
        if np.any(weights < 0):
            raise ValueError("Weights must be non-negative")
        if n_points > 0 and np.sum(weights) <= 0:
            raise ValueError("Sum of weights must be positive")

    return fixed, mobile, weights


def superpose(
    fixed: NDArray[np.floating],
    mobile: NDArray[np.floating],
    weights: NDArray[np.floating] | None = None,
) -> RigidTransform:
    """Compute the rigid transformation that best superposes mobile onto fixed.

    Minimizes sum_k w_k * ||R @ mobile_k + t - fixed_k||^2 with a proper
    rotation (det(R) = +1), using weighted centroids and the SVD of the
    weighted covariance matrix.

    Args:
        fixed: Fixed coordinates, shape (N, 3)
        mobile: Mobile coordinates to transform, shape (N, 3)
        weights: Optional non-negative weights, shape (N,). If None, uniform weights used.

    Returns:
        Transformation to apply to mobile coordinates

    Raises:
        ValueError: If arrays have incompatible shapes or invalid weights

    Notes:
        Small inputs never fail: no pairs gives the identity and one or two
        pairs give the translation between the weighted centroids.
    """
    fixed, mobile, weights = _validate_pairs(fixed, mobile, weights)

    n_points = fixed.shape[0]
    if n_points == 0:
        return RigidTransform.identity()

    weights = weights / np.sum(weights)

    fixed_centroid = np.sum(fixed * weights[:, np.newaxis], axis=0)
    mobile_centroid = np.sum(mobile * weights[:, np.newaxis], axis=0)

    if n_points < 3:
        return RigidTransform.from_translation(fixed_centroid - mobile_centroid)

    fixed_centered = fixed - fixed_centroid
    mobile_centered = mobile - mobile_centroid

    covariance = (mobile_centered.T * weights) @ fixed_centered

    u, _, vh = np.linalg.svd(covariance)

    # Reflection is not a rigid motion: flip the least significant axis
    rotation = vh.T @ u.T
    if np.linalg.det(rotation) < 0:
        vh[-1, :] *= -1
        rotation = vh.T @ u.T

    translation = fixed_centroid - mobile_centroid @ rotation.T

    return RigidTransform(rotation, translation)


def weighted_sum_squares(
    fixed: NDArray[np.floating],
    mobile: NDArray[np.floating],
    weights: NDArray[np.floating] | None = None,
) -> float:
    """Return sum_k w_k * ||fixed_k - mobile_k||^2 (unnormalized)."""
    fixed, mobile, weights = _validate_pairs(fixed, mobile, weights)
    sq_diff = np.sum((fixed - mobile) ** 2, axis=1)
    return float(np.sum(weights * sq_diff))


def calculate_rmsd(
    fixed: NDArray[np.floating],
    mobile: NDArray[np.floating],
    weights: NDArray[np.floating] | None = None,
) -> float:
    """Calculate weighted RMSD between corresponding points.

    Args:
        fixed: Fixed coordinates, shape (N, 3)
        mobile: Mobile coordinates, shape (N, 3)
        weights: Optional weights for each point, shape (N,). If None, uniform weights used.

    Returns:
        sqrt(sum w d^2 / sum w), or 0.0 when there are no points

    Raises:
        ValueError: If arrays have incompatible shapes or invalid weights
    """
    fixed, mobile, weights = _validate_pairs(fixed, mobile, weights)
    if fixed.shape[0] == 0:
        return 0.0

    return float(np.sqrt(weighted_sum_squares(fixed, mobile, weights) / np.sum(weights)))
