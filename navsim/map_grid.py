# navsim/map_grid.py
from __future__ import annotations

import logging
import dataclasses
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from navsim.types import Cell, CellKind, PASSABLE_KINDS

logger = logging.getLogger(__name__)

# Raw map codes -> cell kind. 2 marks a placed obstacle; it blocks like 0.
CODE_TABLE = {
    0: CellKind.BLOCKED,
    1: CellKind.PASSABLE,
    2: CellKind.BLOCKED,
    3: CellKind.START,
    4: CellKind.GOAL,
}


class InvalidGridError(ValueError):
    """Raised when a raw grid is malformed or its start/goal markers are wrong."""


class NotFoundError(LookupError):
    """Raised by locate() when no cell of the requested kind exists."""


@dataclass(frozen=True, eq=False)
class Grid:
    kinds: np.ndarray         # (rows, cols) uint8 CellKind values, read-only
    start: Cell
    goal: Cell

    @property
    def shape(self) -> tuple:
        return self.kinds.shape

    @property
    def rows(self) -> int:
        return int(self.kinds.shape[0])

    @property
    def cols(self) -> int:
        return int(self.kinds.shape[1])

    def kind_at(self, cell: Cell) -> CellKind:
        return CellKind(int(self.kinds[cell[0], cell[1]]))

    @classmethod
    def from_codes(cls, raw: Sequence[Sequence[int]]) -> "Grid":
        """
        Build a validated grid from raw integer codes (see CODE_TABLE).

        Raises InvalidGridError for non-rectangular or empty input, unknown
        codes, or anything other than exactly one start and one goal cell.
        """
        codes = _as_code_array(raw)

        kinds = np.zeros(codes.shape, dtype=np.uint8)
        for code, kind in CODE_TABLE.items():
            kinds[codes == code] = int(kind)

        for kind in (CellKind.START, CellKind.GOAL):
            count = int(np.count_nonzero(kinds == int(kind)))
            if count != 1:
                raise InvalidGridError(
                    f"grid must contain exactly one {kind.name} cell, found {count}"
                )

        return _freeze(kinds)


def _as_code_array(raw) -> np.ndarray:
    try:
        codes = np.asarray(raw)
    except ValueError as exc:  # ragged rows
        raise InvalidGridError(f"grid rows must all have the same length: {exc}") from exc

    if codes.ndim != 2:
        raise InvalidGridError(f"grid must be 2D, got {codes.ndim} dimension(s)")
    if codes.size == 0:
        raise InvalidGridError(f"grid must have at least one cell, got shape {codes.shape}")
    if not np.issubdtype(codes.dtype, np.integer):
        raise InvalidGridError(f"grid codes must be integers, got dtype {codes.dtype}")

    unknown = sorted(set(np.unique(codes).tolist()) - set(CODE_TABLE))
    if unknown:
        raise InvalidGridError(f"unknown cell codes {unknown}; expected one of {sorted(CODE_TABLE)}")
    return codes


def _freeze(kinds: np.ndarray) -> Grid:
    kinds = np.array(kinds, dtype=np.uint8, copy=True)
    kinds.setflags(write=False)
    start = _first_cell(kinds, CellKind.START)
    goal = _first_cell(kinds, CellKind.GOAL)
    if start is None or goal is None:
        raise InvalidGridError("grid must contain a START and a GOAL cell")
    return Grid(kinds=kinds, start=start, goal=goal)


def _first_cell(kinds: np.ndarray, kind: CellKind) -> Optional[Cell]:
    hits = np.argwhere(kinds == int(kind))  # row-major order
    if len(hits) == 0:
        return None
    r, c = hits[0]
    return Cell(int(r), int(c))


def _last_cell(kinds: np.ndarray, kind: CellKind) -> Optional[Cell]:
    hits = np.argwhere(kinds == int(kind))
    if len(hits) == 0:
        return None
    r, c = hits[-1]
    return Cell(int(r), int(c))


def locate(grid: Grid, kind: CellKind) -> Cell:
    """First cell of `kind` in row-major order."""
    cell = _first_cell(grid.kinds, kind)
    if cell is None:
        raise NotFoundError(f"no {CellKind(kind).name} cell in {grid.rows}x{grid.cols} grid")
    return cell


# Which replicated cell becomes the marker after upscaling
MARKER_ANCHORS = ("first", "last")


def upscale(grid: Grid, factor: int, *, start_at: str = "first") -> Grid:
    """
    Replicate every cell into a factor x factor block of the same kind.

    Topology is unchanged; only resolution grows. The goal of the result is
    the top-left cell of its replicated block. The start is the top-left
    ("first") or bottom-right ("last") cell of its block.
    """
    if isinstance(factor, bool) or not isinstance(factor, (int, np.integer)) or factor < 1:
        raise ValueError(f"factor must be a positive integer, got {factor!r}")
    if start_at not in MARKER_ANCHORS:
        raise ValueError(f"start_at must be one of {MARKER_ANCHORS}, got {start_at!r}")

    k = int(factor)
    if k == 1:
        return grid

    kinds = np.repeat(np.repeat(grid.kinds, k, axis=0), k, axis=1)
    logger.debug("upscaled grid %dx%d -> %dx%d", grid.rows, grid.cols, *kinds.shape)
    big = _freeze(kinds)
    if start_at == "last":
        big = dataclasses.replace(big, start=_last_cell(big.kinds, CellKind.START))
    return big


def in_bounds(grid: Grid, cell: Cell) -> bool:
    r, c = cell
    return 0 <= r < grid.rows and 0 <= c < grid.cols


def is_passable(grid: Grid, cell: Cell) -> bool:
    return in_bounds(grid, cell) and int(grid.kinds[cell[0], cell[1]]) in PASSABLE_KINDS


def make_demo_world() -> List[List[int]]:
    """
    Demo board: 9 x 6 raw codes, upscaled x2 onto a 12 x 18 unit floor.

    Start is in the bottom-right corner, goal in the top-left.
    """
    raw = [
        [4, 1, 1, 0, 1, 1],
        [1, 2, 1, 0, 1, 1],
        [1, 2, 1, 1, 1, 2],
        [1, 1, 1, 2, 1, 1],
        [0, 0, 1, 2, 1, 1],
        [1, 1, 1, 2, 0, 1],
        [1, 2, 2, 2, 0, 1],
        [1, 1, 1, 1, 1, 1],
        [2, 2, 1, 1, 1, 3],
    ]
    return raw
