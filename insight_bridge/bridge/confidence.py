"""
Confidence Model

Pure numeric policy for entry confidence:
- Boost on access by a fixed amount
- Linear decay per hour since the last update
- Every result clamped to [min_confidence, max_confidence]
"""

from typing import Optional

from ..common.config import LearningConfig

DEFAULT_CONFIDENCE = 0.5
SECONDS_PER_HOUR = 3600.0


class ConfidenceModel:
    """Boost/decay policy parameterized by a LearningConfig"""

    def __init__(self, config: Optional[LearningConfig] = None):
        config = config or LearningConfig()
        self.boost_amount = config.access_boost_amount
        self.decay_rate = config.confidence_decay_rate
        self.min_confidence = config.min_confidence
        self.max_confidence = config.max_confidence

    def clamp(self, value: float) -> float:
        return max(self.min_confidence, min(self.max_confidence, value))

    def boost(self, current: Optional[float]) -> float:
        """
        Confidence after one access.

        Args:
            current: Current confidence, None when the entry has none

        Returns:
            Boosted confidence, never above max_confidence
        """
        if current is None:
            current = DEFAULT_CONFIDENCE
        return self.clamp(current + self.boost_amount)

    def decay(self, current: Optional[float], hours_elapsed: float) -> float:
        """Confidence after hours_elapsed without an update"""
        if current is None:
            current = DEFAULT_CONFIDENCE
        return self.clamp(current - self.decay_rate * max(0.0, hours_elapsed))

    @staticmethod
    def should_decay(hours_elapsed: float) -> bool:
        """Entries updated within the last hour are left untouched"""
        return hours_elapsed >= 1.0

    @staticmethod
    def hours_since(updated_at: float, now: float) -> float:
        return (now - updated_at) / SECONDS_PER_HOUR
