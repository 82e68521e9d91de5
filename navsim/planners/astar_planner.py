from __future__ import annotations

import heapq
import logging
from typing import Dict, List, Optional, Tuple

from navsim.map_grid import Grid, is_passable
from navsim.types import Cell

logger = logging.getLogger(__name__)

# up, down, left, right
NEIGHBOR_STEPS: Tuple[Tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))

# heap entry: (f, tie counter, g, cell)
HeapEntry = Tuple[int, int, int, Cell]


def manhattan(a: Cell, b: Cell) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def neighbors(grid: Grid, cell: Cell) -> List[Cell]:
    """4-connected passable neighbours of `cell`."""
    r, c = cell
    out: List[Cell] = []
    for dr, dc in NEIGHBOR_STEPS:
        n = Cell(r + dr, c + dc)
        if is_passable(grid, n):
            out.append(n)
    return out


def reconstruct_path(came_from: Dict[Cell, Cell], goal: Cell) -> List[Cell]:
    """Walk the predecessor map back from goal; returns start-first order."""
    path: List[Cell] = [goal]
    current = goal
    while current in came_from:
        current = came_from[current]
        path.append(current)
    path.reverse()
    return path


def find_path(grid: Grid, *, max_expansions: Optional[int] = None) -> List[Cell]:
    """
    A* shortest path from grid.start to grid.goal.

    Unit step cost, 4-connected moves and a Manhattan heuristic, so the
    result has the minimum number of steps. Ties between equal-cost routes
    are broken by insertion order.

    Args:
      grid: validated Grid (start/goal already resolved).
      max_expansions: cap on expanded cells. Defaults to rows * cols, which a
                      closed-set search can never exceed.

    Returns:
      Cells from start to goal inclusive, or [] if the goal is unreachable.
    """
    start, goal = grid.start, grid.goal
    if max_expansions is None:
        max_expansions = grid.rows * grid.cols
    if max_expansions < 1:
        raise ValueError(f"max_expansions must be >= 1, got {max_expansions}")

    open_heap: List[HeapEntry] = [(manhattan(start, goal), 0, 0, start)]
    came_from: Dict[Cell, Cell] = {}
    g_score: Dict[Cell, int] = {start: 0}
    closed = set()
    counter = 1
    expansions = 0

    while open_heap:
        _f, _tie, g, current = heapq.heappop(open_heap)

        # stale entry: a cheaper route was recorded after this push
        if current in closed or g > g_score[current]:
            continue

        if current == goal:
            path = reconstruct_path(came_from, current)
            logger.debug("A* reached goal %s after %d expansions, %d cells", goal, expansions, len(path))
            return path

        closed.add(current)
        expansions += 1
        if expansions > max_expansions:
            logger.warning("A* gave up after %d expansions without reaching %s", max_expansions, goal)
            return []

        for n in neighbors(grid, current):
            if n in closed:
                continue
            tentative = g + 1
            if tentative < g_score.get(n, tentative + 1):
                came_from[n] = current
                g_score[n] = tentative
                heapq.heappush(open_heap, (tentative + manhattan(n, goal), counter, tentative, n))
                counter += 1

    logger.info("no path from %s to %s (%d cells expanded)", start, goal, expansions)
    return []
