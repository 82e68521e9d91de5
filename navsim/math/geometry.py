from __future__ import annotations

from typing import Optional, Union

import numpy as np

from navsim.types import Vector3, WorldPoint

PointLike = Union[WorldPoint, Vector3]


def as_array(p: PointLike) -> np.ndarray:
    if isinstance(p, WorldPoint):
        return np.array([p.x, p.y, p.z], dtype=float)
    return np.asarray(p, dtype=float)


def distance(a: PointLike, b: PointLike) -> float:
    """Euclidean distance ||b - a||."""
    return float(np.linalg.norm(as_array(b) - as_array(a)))


def normalize(v: PointLike, eps: float = 1e-12) -> Optional[Vector3]:
    """
    Unit vector along v, or None when v is (numerically) zero and the
    direction is undefined.
    """
    arr = as_array(v)
    n = float(np.linalg.norm(arr))
    if n <= eps:
        return None
    u = arr / n
    return (float(u[0]), float(u[1]), float(u[2]))


def step_toward(p: WorldPoint, target: WorldPoint, max_step: float) -> WorldPoint:
    """
    Move p toward target by at most max_step along the straight segment.
    The step is clamped to the remaining distance, so target is never passed.
    """
    if max_step < 0.0:
        raise ValueError(f"max_step must be >= 0, got {max_step}")

    OP = as_array(p)
    OT = as_array(target)
    PT = OT - OP
    dist = float(np.linalg.norm(PT))

    if dist <= max_step:
        return target

    OQ = OP + (max_step / dist) * PT
    return WorldPoint(float(OQ[0]), float(OQ[1]), float(OQ[2]))
