"""
Insight Bridge - Confidence Bridge

Turns recorded insights into confidence-scored, long-lived knowledge.

Key Components:
- LearningBridge: Public operations (record, access, consolidate, decay, query)
- ConfidenceModel: Boost/decay policy with clamped bounds
- TrajectoryTracker: Entry id -> open learner episode
- ConsolidationScheduler: Threshold-triggered batch completion
- PatternLearnerAdapter: Lazy, memoized, fail-open learner handle
"""

from .confidence import ConfidenceModel
from .consolidation import ConsolidationScheduler
from .learner import LearnerState, NeuralLoader, PatternLearnerAdapter, import_learner
from .learning_bridge import LearningBridge
from .trajectory import Trajectory, TrajectoryTracker

__all__ = [
    "LearningBridge",
    "ConfidenceModel",
    "ConsolidationScheduler",
    "LearnerState",
    "NeuralLoader",
    "PatternLearnerAdapter",
    "import_learner",
    "Trajectory",
    "TrajectoryTracker",
]
