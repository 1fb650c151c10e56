"""
Consolidation Scheduler

Batches completed episodes once enough trajectories have accumulated.
A batch runs sequentially and stops early once the learner is closed;
a failed completion is counted out and never retried.
"""

import time
import logging
from typing import List

from .learner import PatternLearnerAdapter
from .trajectory import Trajectory
from ..common.schemas import ConsolidateResult

logger = logging.getLogger("insight_bridge.bridge.consolidation")


class ConsolidationScheduler:
    """Threshold policy and batch runner for trajectory completion"""

    def __init__(self, threshold: int = 10):
        """
        Initialize scheduler.

        Args:
            threshold: Minimum active trajectories before a batch runs
        """
        self.threshold = threshold

    def ready(self, active_count: int) -> bool:
        """Check if enough trajectories have accumulated"""
        return active_count >= self.threshold

    async def run(
        self,
        learner: PatternLearnerAdapter,
        trajectories: List[Trajectory],
    ) -> ConsolidateResult:
        """
        Complete every trajectory in the batch.

        Args:
            learner: Loaded learner adapter
            trajectories: Snapshot of the active trajectories

        Returns:
            ConsolidateResult; patterns_learned mirrors the success count
        """
        start = time.perf_counter()
        completed = 0
        attempted = 0

        for trajectory in trajectories:
            if learner.is_closed:
                logger.debug("Learner closed, stopping consolidation batch")
                break
            attempted += 1
            if await learner.complete_task(trajectory.trajectory_id):
                completed += 1

        failed = attempted - completed
        if failed:
            logger.warning(
                "Consolidation completed %d/%d trajectories (%d failed)",
                completed, attempted, failed,
            )

        return ConsolidateResult(
            trajectories_completed=completed,
            patterns_learned=completed,
            duration_ms=(time.perf_counter() - start) * 1000.0,
        )
