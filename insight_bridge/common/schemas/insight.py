"""
Insight and Memory Entry Schemas

Core principle: the bridge never owns entries. It reads them from the
storage backend, rewrites metadata.confidence, and writes every other
metadata key back unchanged.
"""

import time
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


# ============================================================================
# Enums
# ============================================================================

class InsightCategory(str, Enum):
    """Categories produced by the upstream insight extractor"""
    PROJECT_PATTERNS = "project-patterns"
    DEBUGGING = "debugging"
    ARCHITECTURE = "architecture"
    PERFORMANCE = "performance"
    SECURITY = "security"
    PREFERENCES = "preferences"
    SWARM_RESULTS = "swarm-results"


# ============================================================================
# Input
# ============================================================================

class Insight(BaseModel):
    """
    A short categorized observation with a confidence score.

    category is a free string; InsightCategory lists the known values.
    """
    category: str
    summary: str = Field(..., description="One-line statement of the insight")
    source: str = Field(default="", description="Producer, e.g. agent:tester")
    confidence: float = Field(ge=0.0, le=1.0, default=0.5)

    @property
    def content(self) -> str:
        """Text hashed into the learner's state embedding"""
        return f"{self.category}: {self.summary}"


# ============================================================================
# Storage records
# ============================================================================

class MemoryEntry(BaseModel):
    """A durable entry owned by the storage backend"""
    id: str
    key: str = ""
    content: str = ""
    type: str = "semantic"
    namespace: str = "default"
    tags: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: float = Field(default_factory=time.time)  # POSIX seconds
    updated_at: float = Field(default_factory=time.time)
    access_count: int = 0
    last_accessed_at: Optional[float] = None

    @property
    def confidence(self) -> Optional[float]:
        """metadata.confidence, or None when absent or not numeric"""
        value = self.metadata.get("confidence")
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return float(value)


class MemoryEntryUpdate(BaseModel):
    """
    Partial update for a memory entry.

    metadata is written as given: merging with the stored metadata is
    the caller's job.
    """
    metadata: Optional[Dict[str, Any]] = None
    content: Optional[str] = None
    tags: Optional[List[str]] = None


# ============================================================================
# Results
# ============================================================================

class ConsolidateResult(BaseModel):
    """Outcome of one consolidation pass"""
    trajectories_completed: int = 0
    patterns_learned: int = 0
    duration_ms: float = 0.0


class PatternMatch(BaseModel):
    """A learned pattern similar to a query"""
    content: str
    similarity: float = 0.0
    category: str = "unknown"
    confidence: float = 0.5


class LearningStats(BaseModel):
    """Snapshot of a bridge's counters"""
    total_trajectories: int = 0
    completed_trajectories: int = 0
    active_trajectories: int = 0
    total_consolidations: int = 0
    total_decays: int = 0
    avg_confidence_boost: float = 0.0
    neural_available: bool = False
