# navsim/viz/draw.py
import matplotlib.pyplot as plt
import numpy as np
from typing import Sequence, Tuple
from matplotlib.colors import ListedColormap, BoundaryNorm
from matplotlib.lines import Line2D

from navsim.map_grid import Grid
from navsim.types import WorldPoint

# BLOCKED=0, PASSABLE=1, START=3, GOAL=4
_KIND_COLORS = ["black", "white", "tab:green", "tab:red"]
_KIND_BOUNDS = [-0.5, 0.5, 2.0, 3.5, 4.5]


def grid_extent(grid: Grid, x_offset: float, z_offset: float) -> Tuple[float, float, float, float]:
    """(xmin, xmax, zmin, zmax) of the grid in world units, cell centers on integers."""
    xmin = x_offset - 0.5
    xmax = x_offset + grid.cols - 0.5
    zmin = z_offset - 0.5
    zmax = z_offset + grid.rows - 0.5
    return (xmin, xmax, zmin, zmax)


def draw_grid(
    ax: plt.Axes,
    grid: Grid,
    *,
    x_offset: float = 0.0,
    z_offset: float = 0.0,
    show_gridlines: bool = True,
) -> None:
    """
    Draw the grid top-down: world x to the right, world z up the page.
    Row 0 sits at z_offset.
    """
    extent = grid_extent(grid, x_offset, z_offset)

    cmap = ListedColormap(_KIND_COLORS)
    norm = BoundaryNorm(_KIND_BOUNDS, cmap.N)

    ax.imshow(
        grid.kinds,
        origin="lower",
        extent=extent,
        cmap=cmap,
        norm=norm,
        interpolation="nearest",
    )

    ax.set_aspect("equal")
    ax.set_xlabel("x")
    ax.set_ylabel("z")

    if show_gridlines:
        xmin, xmax, zmin, zmax = extent
        for x in np.arange(xmin, xmax + 1e-9, 1.0):
            ax.axvline(x, linewidth=0.25, alpha=0.1)
        for z in np.arange(zmin, zmax + 1e-9, 1.0):
            ax.axhline(z, linewidth=0.25, alpha=0.1)


def draw_path(ax: plt.Axes, points: Sequence[WorldPoint], **kwargs) -> Line2D:
    style = {"color": "blue", "linewidth": 2.0}
    style.update(kwargs)
    (ln,) = ax.plot([p.x for p in points], [p.z for p in points], **style)
    return ln
