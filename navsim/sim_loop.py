from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from navsim.types import NavState, TickResult, WorldPoint
from navsim.map_grid import Grid, upscale
from navsim.planners.astar_planner import find_path
from navsim.math.transforms import project_path
from navsim.controllers.waypoint_follower import Navigator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScenePolicy:
    """
    How the raw grid is laid into the scene. Defaults center the demo
    board (18 x 12 cells after x2 upscaling) on the world origin, with the
    agent starting on the bottom-right cell of its start block.
    """
    upscale_factor: int = 2
    x_offset: float = -5.5
    z_offset: float = -8.5
    elevation: float = 0.5        # agent sphere radius, resting on the floor
    start_at: str = "last"


@dataclass(frozen=True)
class MotionPolicy:
    speed: float = 2.0                # world units / s
    arrival_threshold: float = 0.1    # a tenth of a cell
    dt: float = 1.0 / 60.0            # s, one rendered frame
    max_steps: int = 10_000


def build_grid(raw_grid: Sequence[Sequence[int]], upscale_factor: int = 1, start_at: str = "first") -> Grid:
    """Decode, validate and upscale a raw grid."""
    return upscale(Grid.from_codes(raw_grid), upscale_factor, start_at=start_at)


def plan_world_path(
    grid: Grid,
    x_offset: float = 0.0,
    z_offset: float = 0.0,
    elevation: float = 0.0,
) -> List[WorldPoint]:
    """A* on a validated grid, projected into world space. [] if unreachable."""
    cells = find_path(grid)
    if not cells:
        logger.info("goal %s unreachable from %s; agent will stay idle", grid.goal, grid.start)
        return []

    points = project_path(cells, x_offset=x_offset, z_offset=z_offset, elevation=elevation)
    logger.info("planned %d waypoints on %dx%d grid", len(points), grid.rows, grid.cols)
    return points


def compute_path(
    raw_grid: Sequence[Sequence[int]],
    upscale_factor: int = 1,
    x_offset: float = 0.0,
    z_offset: float = 0.0,
    elevation: float = 0.0,
    *,
    start_at: str = "first",
) -> List[WorldPoint]:
    """
    One-shot scene setup: validate, upscale, search, project.

    Raises InvalidGridError for malformed grids or bad start/goal markers.
    An unreachable goal is not an error and yields [].
    """
    grid = build_grid(raw_grid, upscale_factor, start_at)
    return plan_world_path(grid, x_offset=x_offset, z_offset=z_offset, elevation=elevation)


def plan_scene(
    raw_grid: Sequence[Sequence[int]],
    scene: ScenePolicy = ScenePolicy(),
) -> Tuple[Grid, List[WorldPoint]]:
    """Grid and world path for a scene, decoded once so renderers draw what was planned."""
    grid = build_grid(raw_grid, scene.upscale_factor, scene.start_at)
    path = plan_world_path(grid, x_offset=scene.x_offset, z_offset=scene.z_offset, elevation=scene.elevation)
    return grid, path


def compute_scene_path(raw_grid: Sequence[Sequence[int]], scene: ScenePolicy = ScenePolicy()) -> List[WorldPoint]:
    return plan_scene(raw_grid, scene)[1]


def make_navigator(path: Sequence[WorldPoint], motion: MotionPolicy = MotionPolicy()) -> Navigator:
    return Navigator(path, speed=motion.speed, arrival_threshold=motion.arrival_threshold)


def run_headless(
    navigator: Navigator,
    *,
    dt: float,
    max_steps: int,
    on_tick: Optional[Callable[[float, TickResult], None]] = None,
) -> List[TickResult]:
    """
    Drive navigator.tick(dt) without a renderer.

    Stops when the agent arrives, when it is idle (no path), or after
    max_steps ticks. on_tick(sim_t, result) is called after every tick.
    """
    if dt <= 0.0:
        raise ValueError(f"dt must be > 0, got {dt}")
    if max_steps < 0:
        raise ValueError(f"max_steps must be >= 0, got {max_steps}")

    results: List[TickResult] = []
    sim_t = 0.0
    for _k in range(max_steps):
        out = navigator.tick(dt)
        sim_t += dt
        results.append(out)
        if on_tick is not None:
            on_tick(sim_t, out)
        if out.state is not NavState.FOLLOWING:
            break

    if results and results[-1].arrived:
        logger.info("arrived after %d ticks (%.2f s)", len(results), sim_t)
    elif navigator.state is NavState.FOLLOWING:
        logger.warning("stopped after %d ticks without arriving", len(results))
    return results
