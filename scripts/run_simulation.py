from __future__ import annotations
import argparse
import logging

from navsim.map_grid import make_demo_world
from navsim.sim_loop import ScenePolicy, MotionPolicy, plan_scene, make_navigator, run_headless
from navsim.logging.csv_logger import TickCsvLogger


def parse_args():
    p = argparse.ArgumentParser(
        description="Plan an A* path on the demo grid and follow it waypoint by waypoint",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    p.add_argument("--headless", action="store_true",
                   help="Run without the matplotlib window.")
    p.add_argument("--log_csv", type=str, default=None,
                   help="If set, write a per-tick CSV trace to this path (e.g., logs/nav_run.csv).")
    p.add_argument("--follow_radius", type=float, default=4.0,
                   help="Half-width of the follow camera view; 0 shows the whole board.")
    p.add_argument("--log_level", type=str, default="INFO",
                   help="Python logging level.")

    p.add_argument("--upscale", type=int, default=ScenePolicy.upscale_factor, help=argparse.SUPPRESS)
    p.add_argument("--speed", type=float, default=MotionPolicy.speed, help=argparse.SUPPRESS)
    p.add_argument("--dt", type=float, default=MotionPolicy.dt, help=argparse.SUPPRESS)
    p.add_argument("--max_steps", type=int, default=MotionPolicy.max_steps, help=argparse.SUPPRESS)

    return p.parse_args()


def main():
    args = parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    raw = make_demo_world()
    scene = ScenePolicy(upscale_factor=args.upscale)
    motion = MotionPolicy(speed=args.speed, dt=args.dt, max_steps=args.max_steps)

    # Plan once at startup (no replanning)
    grid, path = plan_scene(raw, scene)
    nav = make_navigator(path, motion)

    if args.headless:
        if args.log_csv is not None:
            with TickCsvLogger(args.log_csv, dt=motion.dt) as tick_logger:
                run_headless(nav, dt=motion.dt, max_steps=motion.max_steps, on_tick=tick_logger)
        else:
            run_headless(nav, dt=motion.dt, max_steps=motion.max_steps)
        return

    # matplotlib is only needed for the interactive view
    from navsim.viz.anim import run_loop, VizConfig

    run_loop(
        grid=grid,
        navigator=nav,
        dt=motion.dt,
        x_offset=scene.x_offset,
        z_offset=scene.z_offset,
        max_steps=motion.max_steps,
        viz=VizConfig(title="Waypoint following", follow_radius=args.follow_radius or None),
        log_csv=args.log_csv,
    )


if __name__ == "__main__":
    main()
