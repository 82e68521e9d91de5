import pytest

from navsim.types import Cell, NavState, WorldPoint
from navsim.map_grid import InvalidGridError, make_demo_world
from navsim.math.transforms import cell_to_world
from navsim.sim_loop import (
    MotionPolicy,
    ScenePolicy,
    compute_path,
    compute_scene_path,
    make_navigator,
    plan_scene,
    run_headless,
)


def test_compute_path_concrete_scenario():
    pts = compute_path([[3, 1], [0, 1], [1, 4]])
    assert pts == [
        WorldPoint(0.0, 0.0, 0.0),
        WorldPoint(1.0, 0.0, 0.0),
        WorldPoint(1.0, 0.0, 1.0),
        WorldPoint(1.0, 0.0, 2.0),
    ]


def test_compute_path_with_offsets_and_elevation():
    pts = compute_path([[3, 1], [0, 1], [1, 4]], x_offset=-0.5, z_offset=-1.0, elevation=0.5)
    assert pts[0] == WorldPoint(-0.5, 0.5, -1.0)
    assert pts[-1] == WorldPoint(0.5, 0.5, 1.0)


def test_compute_path_upscaled():
    pts = compute_path([[3, 1], [0, 1], [1, 4]], upscale_factor=2)
    # (0,0) -> (4,2) in the 6x4 grid: 6 steps
    assert len(pts) == 7
    assert pts[0] == WorldPoint(0.0, 0.0, 0.0)
    assert pts[-1] == WorldPoint(2.0, 0.0, 4.0)


def test_compute_path_invalid_grid_raises():
    with pytest.raises(InvalidGridError):
        compute_path([[3]])
    with pytest.raises(InvalidGridError):
        compute_path([[3, 3, 4]])


def test_unreachable_goal_leaves_navigator_idle():
    pts = compute_path([[3, 1, 0, 4]])
    assert pts == []

    nav = make_navigator(pts)
    results = run_headless(nav, dt=0.1, max_steps=50)
    assert len(results) == 1
    assert results[0].state is NavState.IDLE
    for _ in range(10):
        out = nav.tick(0.1)
        assert out.state is NavState.IDLE
        assert out.position == results[0].position


def test_demo_scene_path_endpoints():
    pts = compute_scene_path(make_demo_world(), ScenePolicy())
    # raw start (8, 5) -> upscaled (17, 11), last cell of its block; raw goal (0, 0) stays (0, 0)
    assert pts[0] == WorldPoint(5.5, 0.5, 8.5)
    assert pts[-1] == WorldPoint(-5.5, 0.5, -8.5)
    assert {p.y for p in pts} == {0.5}


def test_plan_scene_path_starts_on_returned_grid():
    scene = ScenePolicy()
    grid, pts = plan_scene(make_demo_world(), scene)
    assert grid.shape == (18, 12)
    assert grid.start == Cell(17, 11)
    assert grid.goal == Cell(0, 0)
    assert pts[0] == cell_to_world(grid.start, x_offset=scene.x_offset, z_offset=scene.z_offset, elevation=scene.elevation)
    assert pts == compute_scene_path(make_demo_world(), scene)


def test_compute_path_start_at_last():
    pts = compute_path([[3, 1], [0, 1], [1, 4]], upscale_factor=2, start_at="last")
    # (1,1) -> (4,2) in the 6x4 grid
    assert pts[0] == WorldPoint(1.0, 0.0, 1.0)
    assert pts[-1] == WorldPoint(2.0, 0.0, 4.0)
    assert len(pts) == 5


def test_run_headless_demo_arrives_at_goal():
    pts = compute_scene_path(make_demo_world())
    motion = MotionPolicy(speed=2.0, dt=0.1)
    nav = make_navigator(pts, motion)

    seen = []
    results = run_headless(nav, dt=motion.dt, max_steps=motion.max_steps, on_tick=lambda t, out: seen.append(t))

    assert results[-1].arrived
    assert results[-1].position == pts[-1]
    assert len(seen) == len(results)
    assert abs(seen[-1] - motion.dt * len(results)) < 1e-6
    assert sum(1 for r in results if r.arrived) == 1


def test_run_headless_stops_at_max_steps():
    pts = compute_scene_path(make_demo_world())
    nav = make_navigator(pts)
    results = run_headless(nav, dt=0.01, max_steps=5)
    assert len(results) == 5
    assert nav.state is NavState.FOLLOWING


@pytest.mark.parametrize("kwargs", [{"dt": 0.0, "max_steps": 1}, {"dt": 0.1, "max_steps": -1}])
def test_run_headless_rejects_bad_arguments(kwargs):
    nav = make_navigator([])
    with pytest.raises(ValueError):
        run_headless(nav, **kwargs)
