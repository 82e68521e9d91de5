from __future__ import annotations

import dataclasses
from typing import List, Sequence

from navsim.types import DEFAULT_FACING, AgentState, NavState, TickResult, Vector3, WorldPoint
from navsim.math.geometry import distance, normalize, step_toward


class Navigator:
    """
    Waypoint follower: drives an agent along a projected path at constant speed.

    Reach-then-switch policy:
      - Each tick the agent heads straight for path[target_index].
      - Once within arrival_threshold of it, the agent snaps onto that waypoint
        and target_index advances by one. That tick does not translate.
      - Segments between consecutive waypoints are therefore straight lines.

    States:
      IDLE       empty path; tick() is a no-op forever
      FOLLOWING  target_index < len(path)
      ARRIVED    target_index == len(path); position held at path[-1]
    """

    def __init__(
        self,
        path: Sequence[WorldPoint],
        *,
        speed: float,
        arrival_threshold: float = 0.1,
    ):
        """
        Args:
          path: World points, start first. May be empty (unreachable goal).
          speed: Constant linear speed in world units per second. Must be > 0.
          arrival_threshold: Distance below which a waypoint counts as reached.
                             Must be > 0. Default is a tenth of a grid cell.
        """
        if speed <= 0.0:
            raise ValueError(f"speed must be > 0, got {speed}")
        if arrival_threshold <= 0.0:
            raise ValueError(f"arrival_threshold must be > 0, got {arrival_threshold}")

        self.P: List[WorldPoint] = list(path)
        self.speed: float = float(speed)
        self.arrival_threshold: float = float(arrival_threshold)

        origin = self.P[0] if self.P else WorldPoint(0.0, 0.0, 0.0)
        self._agent = AgentState(position=origin, facing=initial_facing(self.P))

    # ----------------------------
    # Read-only views
    # ----------------------------

    @property
    def path(self) -> List[WorldPoint]:
        return list(self.P)

    @property
    def agent(self) -> AgentState:
        return dataclasses.replace(self._agent)

    @property
    def state(self) -> NavState:
        if not self.P:
            return NavState.IDLE
        if self._agent.arrived:
            return NavState.ARRIVED
        return NavState.FOLLOWING

    @property
    def remaining_path(self) -> List[WorldPoint]:
        """Path from one waypoint behind the target onward (includes the segment in progress)."""
        return self.P[max(0, self._agent.target_index - 1):]

    def snapshot(self) -> TickResult:
        """Current output without advancing time."""
        return self._result()

    # ----------------------------
    # Per-tick update
    # ----------------------------

    def tick(self, dt: float) -> TickResult:
        """
        Advance the agent by one simulation tick of dt seconds.

        Returns the pose, facing and remaining path for renderers.
        """
        if dt < 0.0:
            raise ValueError(f"dt must be >= 0, got {dt}")

        if self.state is not NavState.FOLLOWING:
            return self._result()

        a = self._agent
        target = self.P[a.target_index]

        # Waypoint reached (or coincident): snap and switch target, no travel
        if distance(a.position, target) < self.arrival_threshold:
            a.position = target
            a.target_index += 1
            if a.target_index >= len(self.P):
                a.target_index = len(self.P)
                a.position = self.P[-1]
                a.arrived = True
                return self._result()
            self._face(self.P[a.target_index])
            return self._result()

        self._face(target)
        a.position = step_toward(a.position, target, self.speed * dt)
        return self._result()

    def _face(self, target: WorldPoint) -> None:
        p = self._agent.position
        u = normalize((target.x - p.x, target.y - p.y, target.z - p.z))
        if u is not None:
            self._agent.facing = u

    def _result(self) -> TickResult:
        a = self._agent
        return TickResult(
            position=a.position,
            facing=a.facing,
            remaining_path=self.remaining_path,
            arrived=a.arrived,
            state=self.state,
            target_index=a.target_index,
        )


def initial_facing(path: Sequence[WorldPoint]) -> Vector3:
    """Direction of the first path segment, or DEFAULT_FACING."""
    for p in path[1:]:
        u = normalize((p.x - path[0].x, p.y - path[0].y, p.z - path[0].z))
        if u is not None:
            return u
    return DEFAULT_FACING
