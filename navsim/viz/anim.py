from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import List, Optional

import matplotlib.pyplot as plt
from matplotlib.patches import Circle, FancyArrowPatch, Patch
from matplotlib.lines import Line2D

from navsim.types import NavState, TickResult, WorldPoint
from navsim.map_grid import Grid
from navsim.math.transforms import facing_yaw
from navsim.controllers.waypoint_follower import Navigator
from navsim.viz.draw import draw_grid, draw_path, grid_extent
from navsim.logging.csv_logger import TickCsvLogger

logger = logging.getLogger(__name__)


@dataclass
class VizConfig:
    agent_radius: float = 0.5
    heading_scale: float = 1.5
    heading_lw: float = 1.0
    trail_lw: float = 1.0
    trail_alpha: float = 0.6
    title: str = "navsim"
    show_legend: bool = True

    # follow camera: half-width of the view around the agent, None shows the whole board
    follow_radius: Optional[float] = 4.0

    # perf: only draw last N points of trail
    max_trail_points: int = 2000


def _follow_camera(ax: plt.Axes, p: WorldPoint, radius: float) -> None:
    ax.set_xlim(p.x - radius, p.x + radius)
    ax.set_ylim(p.z - radius, p.z + radius)


def run_loop(
    *,
    grid: Grid,
    navigator: Navigator,
    dt: float,
    x_offset: float = 0.0,
    z_offset: float = 0.0,
    max_steps: int = 10_000,
    viz: VizConfig = VizConfig(),
    log_csv: Optional[str] = None,
    log_flush_every: int = 200,
) -> List[TickResult]:
    """
    Render a navigator run top-down, one tick per frame.

    The renderer only consumes tick results: the remaining-path line, agent
    marker, facing arrow and follow camera are redrawn from each TickResult.

    Keys: space/p pause, n single step while paused, q/escape quit.
    """
    if dt <= 0.0:
        raise ValueError(f"dt must be > 0, got {dt}")

    tick_logger: Optional[TickCsvLogger] = None
    if log_csv is not None:
        tick_logger = TickCsvLogger(log_csv, dt=dt, flush_every=log_flush_every)

    fig, ax = plt.subplots()
    draw_grid(ax, grid, x_offset=x_offset, z_offset=z_offset)
    draw_path(ax, navigator.path, color="lightsteelblue", linewidth=1.0)
    remaining_ln = draw_path(ax, navigator.remaining_path)

    pos = navigator.agent.position
    agent_patch = Circle((pos.x, pos.z), radius=viz.agent_radius, color="tab:blue", alpha=0.9)
    ax.add_patch(agent_patch)

    heading_arrow = FancyArrowPatch(
        (pos.x, pos.z),
        (pos.x, pos.z),
        arrowstyle="-|>",
        mutation_scale=14,
        linewidth=viz.heading_lw,
        color="red",
    )
    ax.add_patch(heading_arrow)

    (trail_ln,) = ax.plot([], [], linewidth=viz.trail_lw, alpha=viz.trail_alpha, color="black")

    if viz.show_legend:
        handles = [
            Patch(facecolor="tab:blue", label="Agent"),
            Line2D([0], [0], marker=r"$\rightarrow$", linestyle="None", color="red", markersize=12, label="Facing"),
            Line2D([0], [0], color="blue", linewidth=2.0, label="Remaining path"),
            Line2D([0], [0], color="black", linewidth=viz.trail_lw, alpha=viz.trail_alpha, label="Trail"),
        ]
        ax.legend(handles=handles, loc="upper right", bbox_to_anchor=(1.45, 1))

    ax.set_title(viz.title)
    xmin, xmax, zmin, zmax = grid_extent(grid, x_offset, z_offset)

    plt.ion()
    plt.show()

    paused = {"v": False}
    step_once = {"v": False}

    def on_key(event):
        key = event.key
        if key in (" ", "p"):
            paused["v"] = not paused["v"]
        elif key in ("q", "escape"):
            plt.close(fig)
        elif key == "n" and paused["v"]:
            step_once["v"] = True

    fig.canvas.mpl_connect("key_press_event", on_key)

    trail_x: List[float] = [pos.x]
    trail_z: List[float] = [pos.z]

    def render(out: TickResult) -> None:
        p = out.position
        agent_patch.center = (p.x, p.z)

        yaw = facing_yaw(out.facing)
        Lh = viz.heading_scale * viz.agent_radius
        heading_arrow.set_positions((p.x, p.z), (p.x + Lh * math.cos(yaw), p.z + Lh * math.sin(yaw)))

        remaining_ln.set_data([q.x for q in out.remaining_path], [q.z for q in out.remaining_path])

        if viz.max_trail_points > 0 and len(trail_x) > viz.max_trail_points:
            trail_ln.set_data(trail_x[-viz.max_trail_points:], trail_z[-viz.max_trail_points:])
        else:
            trail_ln.set_data(trail_x, trail_z)

        if viz.follow_radius is not None:
            _follow_camera(ax, p, viz.follow_radius)
        else:
            ax.set_xlim(xmin, xmax)
            ax.set_ylim(zmin, zmax)

        fig.canvas.draw_idle()

    results: List[TickResult] = []
    sim_t = 0.0

    render(navigator.snapshot())
    plt.pause(0.001)

    try:
        for _k in range(max_steps):
            if not plt.fignum_exists(fig.number):
                break

            if paused["v"] and not step_once["v"]:
                plt.pause(0.05)
                continue
            step_once["v"] = False

            t0 = time.perf_counter()
            out = navigator.tick(dt)
            sim_t += dt
            results.append(out)

            trail_x.append(out.position.x)
            trail_z.append(out.position.z)
            if tick_logger is not None:
                tick_logger.log_tick(sim_t, out)

            render(out)

            # try to maintain real-time: sleep only what's left after drawing
            elapsed = time.perf_counter() - t0
            plt.pause(max(0.001, dt - elapsed))

            if out.state is NavState.ARRIVED:
                ax.set_title("Arrived, stopped.")
                fig.canvas.draw_idle()
                logger.info("arrived after %d ticks (%.2f s)", len(results), sim_t)
                break
            if out.state is NavState.IDLE:
                ax.set_title("No path, idle.")
                fig.canvas.draw_idle()
                break
    finally:
        if tick_logger is not None:
            tick_logger.close()

    plt.ioff()
    plt.show()
    return results
