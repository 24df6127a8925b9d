"""Attitude helpers: rotation matrices and quaternions.

Quaternions are exported in x, y, z, w order (scalar last) for the whole
document. Rotation matrices follow the frame convention used by
:mod:`trajectory_exporter.frames`: ``v_out = R @ v_in``.
"""

from __future__ import annotations

import math
from typing import Sequence, Tuple

import numpy as np

Quaternion = Tuple[float, float, float, float]

IDENTITY_QUATERNION: Quaternion = (0.0, 0.0, 0.0, 1.0)


def as_rotation_matrix(value: Sequence[Sequence[float]]) -> np.ndarray:
    mat = np.asarray(value, dtype=float)
    if mat.shape != (3, 3):
        raise ValueError(f"rotation matrix must be shape (3, 3), got {mat.shape}")
    if not np.all(np.isfinite(mat)):
        raise ValueError("rotation matrix contains non-finite values")
    return mat


def rotation_z(angle_rad: float) -> np.ndarray:
    """Frame rotation about +Z by ``angle_rad``."""
    c = math.cos(angle_rad)
    s = math.sin(angle_rad)
    return np.array(
        [
            [c, s, 0.0],
            [-s, c, 0.0],
            [0.0, 0.0, 1.0],
        ],
        dtype=float,
    )


def quaternion_from_matrix(value: Sequence[Sequence[float]]) -> Quaternion:
    """Convert a direction cosine matrix to a unit quaternion (x, y, z, w).

    Uses the largest-diagonal branch for numerical stability and returns
    the representative with a non-negative scalar part.
    """
    mat = as_rotation_matrix(value)
    trace = float(np.trace(mat))
    if trace > 0.0:
        s = math.sqrt(trace + 1.0) * 2.0
        w = 0.25 * s
        x = (mat[1, 2] - mat[2, 1]) / s
        y = (mat[2, 0] - mat[0, 2]) / s
        z = (mat[0, 1] - mat[1, 0]) / s
    else:
        idx = int(np.argmax(np.diag(mat)))
        if idx == 0:
            s = math.sqrt(1.0 + mat[0, 0] - mat[1, 1] - mat[2, 2]) * 2.0
            w = (mat[1, 2] - mat[2, 1]) / s
            x = 0.25 * s
            y = (mat[0, 1] + mat[1, 0]) / s
            z = (mat[0, 2] + mat[2, 0]) / s
        elif idx == 1:
            s = math.sqrt(1.0 + mat[1, 1] - mat[0, 0] - mat[2, 2]) * 2.0
            w = (mat[2, 0] - mat[0, 2]) / s
            x = (mat[0, 1] + mat[1, 0]) / s
            y = 0.25 * s
            z = (mat[1, 2] + mat[2, 1]) / s
        else:
            s = math.sqrt(1.0 + mat[2, 2] - mat[0, 0] - mat[1, 1]) * 2.0
            w = (mat[0, 1] - mat[1, 0]) / s
            x = (mat[0, 2] + mat[2, 0]) / s
            y = (mat[1, 2] + mat[2, 1]) / s
            z = 0.25 * s
    q = np.array([x, y, z, w], dtype=float)
    q /= np.linalg.norm(q)
    if q[3] < 0.0:
        q = -q
    return (float(q[0]), float(q[1]), float(q[2]), float(q[3]))


def matrix_from_quaternion(q: Sequence[float]) -> np.ndarray:
    """Inverse of :func:`quaternion_from_matrix`."""
    x, y, z, w = (float(v) for v in q)
    norm = math.sqrt(x * x + y * y + z * z + w * w)
    if norm < 1e-12:
        raise ValueError("quaternion norm is too small")
    x, y, z, w = x / norm, y / norm, z / norm, w / norm
    return np.array(
        [
            [1.0 - 2.0 * (y * y + z * z), 2.0 * (x * y + z * w), 2.0 * (x * z - y * w)],
            [2.0 * (x * y - z * w), 1.0 - 2.0 * (x * x + z * z), 2.0 * (y * z + x * w)],
            [2.0 * (x * z + y * w), 2.0 * (y * z - x * w), 1.0 - 2.0 * (x * x + y * y)],
        ],
        dtype=float,
    )
