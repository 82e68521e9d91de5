# navsim/logging/csv_logger.py
from __future__ import annotations

import csv
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from navsim.types import TickResult
from navsim.math.transforms import facing_yaw

TICK_FIELDS: List[str] = [
    "sim_t",
    "dt",
    "x",
    "y",
    "z",
    "yaw",
    "target_index",
    "remaining",
    "state",
    "arrived",
]


def tick_row(sim_t: float, dt: float, out: TickResult) -> Dict[str, Any]:
    """Flat scalar row describing one navigator tick."""
    return {
        "sim_t": sim_t,
        "dt": dt,
        "x": out.position.x,
        "y": out.position.y,
        "z": out.position.z,
        "yaw": facing_yaw(out.facing),
        "target_index": out.target_index,
        "remaining": len(out.remaining_path),
        "state": out.state.value,
        "arrived": int(out.arrived),
    }


@dataclass
class TickCsvLogger:
    """
    Buffered CSV trace, one row per navigator tick.

    Columns are TICK_FIELDS. Rows are held in memory and written every
    `flush_every` ticks; the file is opened lazily on the first flush, so a
    run that never ticks leaves no file behind.
    """
    path: str
    dt: float
    flush_every: int = 200

    _rows: List[Dict[str, Any]] = field(default_factory=list, init=False)
    _file: Any = field(default=None, init=False)
    _writer: Optional[csv.DictWriter] = field(default=None, init=False)
    rows_written: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        if self.flush_every < 1:
            raise ValueError(f"flush_every must be >= 1, got {self.flush_every}")

    def __call__(self, sim_t: float, out: TickResult) -> None:
        # usable directly as run_headless(on_tick=...)
        self.log_tick(sim_t, out)

    def log_tick(self, sim_t: float, out: TickResult) -> None:
        self._rows.append(tick_row(sim_t, self.dt, out))
        if len(self._rows) >= self.flush_every:
            self.flush()

    def flush(self) -> None:
        if not self._rows:
            return

        if self._writer is None:
            parent = os.path.dirname(self.path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            self._file = open(self.path, "w", newline="")
            self._writer = csv.DictWriter(self._file, fieldnames=TICK_FIELDS)
            self._writer.writeheader()

        self._writer.writerows(self._rows)
        self.rows_written += len(self._rows)
        self._rows.clear()
        self._file.flush()

    def close(self) -> None:
        self.flush()
        if self._file is not None:
            self._file.close()
        self._file = None
        self._writer = None

    def __enter__(self) -> "TickCsvLogger":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
