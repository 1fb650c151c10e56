"""
Trajectory Tracker

Maps an insight-bearing entry id to its in-flight learner episode.
At most one active trajectory per entry id; opening a second one for
the same entry replaces the first without completing it.
"""

import time
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional


@dataclass
class Trajectory:
    """An open learner episode tied to one entry"""
    trajectory_id: str
    entry_id: str
    created_at: float = field(default_factory=time.time)


class TrajectoryTracker:
    """Active trajectory map, keyed by entry id"""

    def __init__(self):
        self._active: Dict[str, Trajectory] = {}

    def __len__(self) -> int:
        return len(self._active)

    def __contains__(self, entry_id: str) -> bool:
        return entry_id in self._active

    def __iter__(self) -> Iterator[Trajectory]:
        return iter(list(self._active.values()))

    def open(self, entry_id: str, trajectory_id: str) -> Trajectory:
        """Track a new trajectory for an entry (last write wins)"""
        trajectory = Trajectory(trajectory_id=trajectory_id, entry_id=entry_id)
        self._active[entry_id] = trajectory
        return trajectory

    def get(self, entry_id: str) -> Optional[Trajectory]:
        return self._active.get(entry_id)

    def discard(self, trajectories: List[Trajectory]) -> None:
        """Stop tracking the given trajectories, keeping any that replaced them"""
        for trajectory in trajectories:
            if self._active.get(trajectory.entry_id) is trajectory:
                del self._active[trajectory.entry_id]

    def clear(self) -> None:
        self._active.clear()
