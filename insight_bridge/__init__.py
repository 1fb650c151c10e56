"""
Insight Bridge

Turns transient insights from an agent memory system into long-lived,
confidence-scored knowledge.

Philosophy:
- Confidence bookkeeping never blocks the surrounding memory pipeline
- The pattern learner is optional; everything degrades to backend-only
- Every bridge instance owns its own state, stats, and listeners

Usage:
    from insight_bridge.common import load_config, EventEmitter
    from insight_bridge.common.schemas import Insight, MemoryEntry
    from insight_bridge.storage import InMemoryBackend
    from insight_bridge.bridge import LearningBridge
"""

__version__ = "0.1.0"
