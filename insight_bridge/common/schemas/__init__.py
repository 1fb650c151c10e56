"""
Insight Bridge Schemas

Records exchanged between the bridge, its storage backend, and listeners.
"""

from .insight import (
    Insight,
    InsightCategory,
    MemoryEntry,
    MemoryEntryUpdate,
    ConsolidateResult,
    PatternMatch,
    LearningStats,
)

__all__ = [
    "Insight",
    "InsightCategory",
    "MemoryEntry",
    "MemoryEntryUpdate",
    "ConsolidateResult",
    "PatternMatch",
    "LearningStats",
]
