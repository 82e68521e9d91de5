from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, NamedTuple, Tuple

Vector3 = Tuple[float, float, float]

# Facing before any path segment defines one: world -z
DEFAULT_FACING: Vector3 = (0.0, 0.0, -1.0)


class Cell(NamedTuple):
	row: int
	col: int

class CellKind(IntEnum):
	BLOCKED = 0
	PASSABLE = 1
	START = 3
	GOAL = 4

PASSABLE_KINDS = frozenset({CellKind.PASSABLE, CellKind.START, CellKind.GOAL})

@dataclass(frozen=True)
class WorldPoint:
	x: float # world units (one grid cell)
	y: float # elevation, constant along a path
	z: float

	def as_tuple(self) -> Vector3:
		return (self.x, self.y, self.z)

class NavState(Enum):
	IDLE = "idle"
	FOLLOWING = "following"
	ARRIVED = "arrived"

@dataclass
class AgentState:
	position: WorldPoint
	target_index: int = 0
	arrived: bool = False
	facing: Vector3 = DEFAULT_FACING # unit vector in world frame

@dataclass(frozen=True)
class TickResult:
	position: WorldPoint
	facing: Vector3
	remaining_path: List[WorldPoint] = field(default_factory=list)
	arrived: bool = False
	state: NavState = NavState.IDLE
	target_index: int = 0
