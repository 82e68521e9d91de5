import random
from collections import deque

import pytest

from navsim.types import Cell
from navsim.map_grid import Grid, is_passable, make_demo_world, upscale
from navsim.planners.astar_planner import find_path, manhattan, neighbors, reconstruct_path


def bfs_distance(grid: Grid):
    """Brute-force 4-connected step count from start to goal, None if unreachable."""
    dist = {grid.start: 0}
    q = deque([grid.start])
    while q:
        cur = q.popleft()
        if cur == grid.goal:
            return dist[cur]
        for n in neighbors(grid, cur):
            if n not in dist:
                dist[n] = dist[cur] + 1
                q.append(n)
    return None


def random_raw_grid(seed: int, rows: int = 7, cols: int = 8, p_free: float = 0.68):
    rng = random.Random(seed)
    raw = [[1 if rng.random() < p_free else rng.choice([0, 2]) for _ in range(cols)] for _ in range(rows)]
    sr, sc = rng.randrange(rows), rng.randrange(cols)
    gr, gc = rng.randrange(rows), rng.randrange(cols)
    while (gr, gc) == (sr, sc):
        gr, gc = rng.randrange(rows), rng.randrange(cols)
    raw[sr][sc] = 3
    raw[gr][gc] = 4
    return raw


def assert_valid_path(grid: Grid, path):
    assert path[0] == grid.start
    assert path[-1] == grid.goal
    assert len(set(path)) == len(path)  # simple, no backtracking
    for a, b in zip(path, path[1:]):
        assert manhattan(a, b) == 1
    for cell in path:
        assert is_passable(grid, cell)


def test_concrete_detour_scenario():
    grid = Grid.from_codes([[3, 1], [0, 1], [1, 4]])
    path = find_path(grid)
    assert path == [(0, 0), (0, 1), (1, 1), (2, 1)]
    assert all(isinstance(c, Cell) for c in path)


def test_adjacent_start_and_goal():
    grid = Grid.from_codes([[3, 4]])
    assert find_path(grid) == [(0, 0), (0, 1)]


def test_adjacent_vertical_start_and_goal():
    grid = Grid.from_codes([[4], [3]])
    assert find_path(grid) == [(1, 0), (0, 0)]


def test_enclosed_goal_is_unreachable():
    grid = Grid.from_codes([
        [3, 1, 1, 1],
        [1, 0, 0, 0],
        [1, 0, 4, 2],
        [1, 0, 2, 1],
    ])
    assert find_path(grid) == []


def test_no_diagonal_moves():
    # start and goal only touch diagonally
    grid = Grid.from_codes([[3, 0], [0, 4]])
    assert find_path(grid) == []


def test_straight_corridor_is_optimal():
    grid = Grid.from_codes([[3, 1, 1, 1, 1, 4]])
    path = find_path(grid)
    assert len(path) == 6
    assert_valid_path(grid, path)


@pytest.mark.parametrize("seed", range(40))
def test_path_length_matches_bfs(seed):
    grid = Grid.from_codes(random_raw_grid(seed))
    expected = bfs_distance(grid)
    path = find_path(grid)

    if expected is None:
        assert path == []
    else:
        assert len(path) - 1 == expected
        assert_valid_path(grid, path)


@pytest.mark.parametrize("seed", range(5))
def test_path_length_matches_bfs_after_upscale(seed):
    grid = upscale(Grid.from_codes(random_raw_grid(100 + seed, rows=5, cols=5)), 2)
    expected = bfs_distance(grid)
    path = find_path(grid)
    if expected is None:
        assert path == []
    else:
        assert len(path) - 1 == expected
        assert_valid_path(grid, path)


def test_demo_world_has_path():
    grid = upscale(Grid.from_codes(make_demo_world()), 2)
    path = find_path(grid)
    assert path
    assert len(path) - 1 == bfs_distance(grid)
    assert_valid_path(grid, path)


def test_expansion_cap_returns_empty():
    grid = Grid.from_codes([[3, 1, 1, 1, 1, 1, 4]])
    assert find_path(grid, max_expansions=2) == []


def test_expansion_cap_must_be_positive():
    grid = Grid.from_codes([[3, 4]])
    with pytest.raises(ValueError):
        find_path(grid, max_expansions=0)


def test_reconstruct_path_orders_start_first():
    came_from = {Cell(0, 1): Cell(0, 0), Cell(1, 1): Cell(0, 1)}
    assert reconstruct_path(came_from, Cell(1, 1)) == [(0, 0), (0, 1), (1, 1)]
    assert reconstruct_path({}, Cell(2, 2)) == [(2, 2)]


def test_neighbors_are_four_connected_and_passable():
    grid = Grid.from_codes([
        [1, 0, 1],
        [1, 3, 1],
        [4, 2, 1],
    ])
    assert sorted(neighbors(grid, Cell(1, 1))) == [(1, 0), (1, 2)]
    assert sorted(neighbors(grid, Cell(0, 0))) == [(1, 0)]
