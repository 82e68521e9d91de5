from __future__ import annotations

import math
from typing import Iterable, List

from navsim.types import Cell, Vector3, WorldPoint


def cell_to_world(cell: Cell, *, x_offset: float, z_offset: float, elevation: float) -> WorldPoint:
    """
    Map grid cell (row, col) to a world point.

    Convention:
      - world x increases with col
      - world z increases with row
      - world y is the fixed elevation of the path
    """
    r, c = cell
    return WorldPoint(
        x=float(c) + float(x_offset),
        y=float(elevation),
        z=float(r) + float(z_offset),
    )


def project_path(
    cells: Iterable[Cell],
    x_offset: float = 0.0,
    z_offset: float = 0.0,
    elevation: float = 0.0,
) -> List[WorldPoint]:
    """Project a cell path into world space, one point per cell, same order."""
    return [
        cell_to_world(cell, x_offset=x_offset, z_offset=z_offset, elevation=elevation)
        for cell in cells
    ]


def facing_yaw(facing: Vector3) -> float:
    """
    Heading in the ground (x, z) plane, radians from +x toward +z.
    This is what a top-down view draws as the agent's orientation.
    """
    fx, _fy, fz = facing
    return float(math.atan2(fz, fx))
