"""Tests for attitude helpers."""

from __future__ import annotations

import math

import numpy as np

from trajectory_exporter.attitude import (
    IDENTITY_QUATERNION,
    matrix_from_quaternion,
    quaternion_from_matrix,
    rotation_z,
)


def test_identity_matrix_gives_identity_quaternion() -> None:
    """Checks the identity rotation maps to (0, 0, 0, 1)."""
    assert np.allclose(quaternion_from_matrix(np.eye(3)), IDENTITY_QUATERNION)


def test_z_rotation_quaternion() -> None:
    """Checks a frame rotation about Z uses the scalar-last layout."""
    angle = math.radians(60.0)
    q = quaternion_from_matrix(rotation_z(angle))
    assert np.allclose(q, (0.0, 0.0, math.sin(angle / 2.0), math.cos(angle / 2.0)))


def test_half_turn_uses_non_trace_branch() -> None:
    """Checks a 180 degree rotation (negative trace) converts cleanly."""
    q = quaternion_from_matrix(np.diag([1.0, -1.0, -1.0]))
    assert np.allclose(np.abs(q), (1.0, 0.0, 0.0, 0.0))


def test_matrix_roundtrip() -> None:
    """Checks matrix -> quaternion -> matrix reproduces the rotation."""
    tilt = np.array(
        [
            [1.0, 0.0, 0.0],
            [0.0, math.cos(0.4), math.sin(0.4)],
            [0.0, -math.sin(0.4), math.cos(0.4)],
        ]
    )
    mat = tilt @ rotation_z(1.1)
    q = quaternion_from_matrix(mat)
    assert np.isclose(np.linalg.norm(q), 1.0)
    assert q[3] >= 0.0
    assert np.allclose(matrix_from_quaternion(q), mat, atol=1e-12)
