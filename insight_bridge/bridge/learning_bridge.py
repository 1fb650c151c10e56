"""
Learning Bridge

Connects insights recorded by the memory system to confidence-scored
entries and, when available, to the pattern learner.

Pipeline:
1. on_insight_recorded: open a learner trajectory, emit learning-started
2. on_insight_accessed: boost entry confidence, reinforce the trajectory
3. consolidate: complete accumulated trajectories in one batch
4. decay_confidences: lower confidence of stale entries in a namespace

Fail open: no public method raises. Learner and backend failures are
logged and the operation returns its zero/empty default.
"""

import time
import logging
from typing import Any, List, Mapping, Optional

from ..common.config import BridgeConfig, LearningConfig, load_config
from ..common.events import BridgeEvent, EventEmitter, Listener
from ..common.hash_embedding import hash_embedding
from ..common.schemas import (
    ConsolidateResult,
    Insight,
    LearningStats,
    MemoryEntry,
    MemoryEntryUpdate,
    PatternMatch,
)
from ..storage.backend import MemoryBackend
from .confidence import ConfidenceModel, DEFAULT_CONFIDENCE
from .consolidation import ConsolidationScheduler
from .learner import NeuralLoader, PatternLearnerAdapter, import_learner
from .trajectory import TrajectoryTracker

logger = logging.getLogger("insight_bridge.bridge.learning_bridge")

# Reward recorded against a trajectory each time its entry is accessed
ACCESS_REWARD = 0.03
EPISODE_MODE = "general"


def _field(record: Any, *names: str) -> Any:
    """First non-None field among names, from a mapping or an object"""
    for name in names:
        if isinstance(record, Mapping):
            value = record.get(name)
        else:
            value = getattr(record, name, None)
        if value is not None:
            return value
    return None


def _to_pattern_match(record: Any) -> Optional[PatternMatch]:
    """Normalize a learner result; accepts content/similarity or data/score/reward shapes"""
    if record is None:
        return None
    content = _field(record, "content", "data")
    if content is None:
        return None
    similarity = _field(record, "similarity", "score")
    confidence = _field(record, "confidence", "reward")
    category = _field(record, "category")
    try:
        return PatternMatch(
            content=str(content),
            similarity=0.0 if similarity is None else float(similarity),
            category="unknown" if category is None else str(category),
            confidence=DEFAULT_CONFIDENCE if confidence is None else float(confidence),
        )
    except (TypeError, ValueError) as e:
        logger.debug("Skipping malformed pattern result: %s", e)
        return None


class LearningBridge:
    """
    Insight confidence bridge.

    Each instance owns its trajectories, stats, and listeners; nothing is
    shared between instances. States: active -> destroyed (one-way).
    """

    def __init__(
        self,
        backend: MemoryBackend,
        config: Optional[LearningConfig] = None,
        neural_loader: Optional[NeuralLoader] = None,
        namespace: str = "learnings",
    ):
        """
        Initialize bridge.

        Args:
            backend: Storage backend holding the entries
            config: Confidence and learner policy (defaults if None)
            neural_loader: Loader for the pattern learner; defaults to
                importing config.learner_module
            namespace: Namespace swept by decay_confidences() by default

        Raises:
            ValueError: If the config is inconsistent
        """
        self.config = config or LearningConfig()
        self.config.validate()
        self.namespace = namespace

        self._backend = backend
        self._confidence = ConfidenceModel(self.config)
        self._learner = PatternLearnerAdapter(neural_loader or import_learner(self.config))
        self._trajectories = TrajectoryTracker()
        self._scheduler = ConsolidationScheduler(self.config.consolidation_threshold)
        self._events = EventEmitter()
        self._destroyed = False

        self._total_trajectories = 0
        self._completed_trajectories = 0
        self._total_consolidations = 0
        self._total_decays = 0
        self._boost_sum = 0.0
        self._boost_count = 0

    @classmethod
    def from_config(
        cls,
        backend: MemoryBackend,
        config: Optional[BridgeConfig] = None,
        neural_loader: Optional[NeuralLoader] = None,
    ) -> "LearningBridge":
        """Build a bridge from a BridgeConfig (loaded from file/env if None)"""
        config = config or load_config()
        return cls(
            backend,
            config=config.learning,
            neural_loader=neural_loader,
            namespace=config.namespace,
        )

    async def __aenter__(self) -> "LearningBridge":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.destroy()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_destroyed(self) -> bool:
        return self._destroyed

    @property
    def _inactive(self) -> bool:
        return self._destroyed or not self.config.enabled

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def on(self, event: BridgeEvent, listener: Listener) -> "LearningBridge":
        """Subscribe to a bridge event"""
        self._events.on(event, listener)
        return self

    def once(self, event: BridgeEvent, listener: Listener) -> "LearningBridge":
        self._events.once(event, listener)
        return self

    def off(self, event: BridgeEvent, listener: Listener) -> "LearningBridge":
        self._events.off(event, listener)
        return self

    def listener_count(self, event: BridgeEvent) -> int:
        return self._events.listener_count(event)

    # ------------------------------------------------------------------
    # Trajectory tracking
    # ------------------------------------------------------------------

    async def on_insight_recorded(self, insight: Insight, entry_id: str) -> None:
        """
        Start learning from a newly recorded insight.

        Opens a learner trajectory when the learner is available and
        always emits insight:learning-started.

        Args:
            insight: The recorded insight
            entry_id: Backend id of the entry holding the insight
        """
        if self._inactive:
            return

        learner = await self._learner.ensure_loaded()
        if self._destroyed:
            return
        if learner is not None:
            trajectory_id = await self._learner.begin_task(insight.summary, EPISODE_MODE)
            if self._destroyed:
                return
            if trajectory_id is not None:
                await self._learner.record_step(trajectory_id, {
                    "action": f"record:{insight.category}",
                    "reward": insight.confidence,
                    "state_embedding": hash_embedding(insight.content),
                })
                if self._destroyed:
                    return
                self._trajectories.open(entry_id, trajectory_id)
                self._total_trajectories += 1
                logger.debug("Opened trajectory %s for %s", trajectory_id, entry_id)

        self._events.emit(BridgeEvent.LEARNING_STARTED, {
            "entry_id": entry_id,
            "category": insight.category,
        })

    async def on_insight_accessed(self, entry_id: str) -> None:
        """
        Boost the confidence of an accessed entry.

        Missing entries are ignored. If the entry has an active
        trajectory, an access step is recorded against it.
        """
        if self._inactive:
            return

        try:
            entry: Optional[MemoryEntry] = await self._backend.get(entry_id)
        except Exception as e:
            logger.warning("Failed to fetch entry %s: %s", entry_id, e)
            return
        if entry is None or self._destroyed:
            return

        current = entry.confidence
        new_confidence = self._confidence.boost(current)
        metadata = {**entry.metadata, "confidence": new_confidence}

        try:
            await self._backend.update(entry_id, MemoryEntryUpdate(metadata=metadata))
        except Exception as e:
            logger.warning("Failed to update confidence for %s: %s", entry_id, e)
            return
        if self._destroyed:
            return

        base = DEFAULT_CONFIDENCE if current is None else current
        self._boost_sum += new_confidence - base
        self._boost_count += 1

        self._events.emit(BridgeEvent.ACCESSED, {
            "entry_id": entry_id,
            "new_confidence": new_confidence,
        })

        trajectory = self._trajectories.get(entry_id)
        if trajectory is not None:
            await self._learner.record_step(trajectory.trajectory_id, {
                "action": "access",
                "reward": ACCESS_REWARD,
            })

    # ------------------------------------------------------------------
    # Consolidation
    # ------------------------------------------------------------------

    async def consolidate(self) -> ConsolidateResult:
        """
        Complete all active trajectories once the threshold is reached.

        Returns:
            ConsolidateResult (all zeros when skipped)
        """
        if self._inactive:
            return ConsolidateResult()

        learner = await self._learner.ensure_loaded()
        if learner is None or self._destroyed:
            return ConsolidateResult()
        if not self._scheduler.ready(len(self._trajectories)):
            return ConsolidateResult()

        batch = list(self._trajectories)
        result = await self._scheduler.run(self._learner, batch)
        if self._destroyed:
            # Torn down mid-batch: stats and listeners are already final
            return result
        self._trajectories.discard(batch)

        self._completed_trajectories += result.trajectories_completed
        self._total_consolidations += 1
        logger.info(
            "Consolidated %d trajectories in %.1fms",
            result.trajectories_completed, result.duration_ms,
        )

        self._events.emit(BridgeEvent.CONSOLIDATED, result.model_dump())
        return result

    # ------------------------------------------------------------------
    # Decay
    # ------------------------------------------------------------------

    async def decay_confidences(self, namespace: Optional[str] = None) -> int:
        """
        Lower the confidence of entries not updated in the last hour.

        Args:
            namespace: Namespace to sweep (defaults to self.namespace)

        Returns:
            Number of entries written
        """
        if self._inactive:
            return 0

        if namespace is None:
            namespace = self.namespace
        try:
            entries: List[MemoryEntry] = await self._backend.query(namespace)
        except Exception as e:
            logger.warning("Decay sweep query failed for %s: %s", namespace, e)
            return 0

        now = time.time()
        decayed = 0
        for entry in entries:
            if self._destroyed:
                return decayed
            hours = ConfidenceModel.hours_since(entry.updated_at, now)
            if not self._confidence.should_decay(hours):
                continue

            new_confidence = self._confidence.decay(entry.confidence, hours)
            metadata = {**entry.metadata, "confidence": new_confidence}
            try:
                await self._backend.update(entry.id, MemoryEntryUpdate(metadata=metadata))
            except Exception as e:
                logger.warning("Failed to decay %s: %s", entry.id, e)
                continue
            decayed += 1

        if self._destroyed:
            return decayed
        self._total_decays += decayed
        if decayed:
            logger.debug("Decayed %d entries in %s", decayed, namespace)
        return decayed

    # ------------------------------------------------------------------
    # Pattern query
    # ------------------------------------------------------------------

    async def find_similar_patterns(self, query: str, k: Optional[int] = None) -> List[PatternMatch]:
        """
        Find learned patterns similar to a query.

        Args:
            query: Query text (hash-embedded like recorded insights)
            k: Number of patterns to request (default: config.pattern_top_k)

        Returns:
            List of PatternMatch, empty when the learner is unavailable
        """
        if self._inactive:
            return []

        learner = await self._learner.ensure_loaded()
        if learner is None or self._destroyed:
            return []

        if k is None:
            k = self.config.pattern_top_k
        results = await self._learner.find_patterns(hash_embedding(query), k)
        if self._destroyed:
            return []

        matches = []
        for record in results:
            match = _to_pattern_match(record)
            if match is not None:
                matches.append(match)
        return matches

    # ------------------------------------------------------------------
    # Stats & lifecycle
    # ------------------------------------------------------------------

    def get_stats(self) -> LearningStats:
        """Snapshot of this bridge's counters"""
        avg_boost = self._boost_sum / self._boost_count if self._boost_count else 0.0
        return LearningStats(
            total_trajectories=self._total_trajectories,
            completed_trajectories=self._completed_trajectories,
            active_trajectories=len(self._trajectories),
            total_consolidations=self._total_consolidations,
            total_decays=self._total_decays,
            avg_confidence_boost=avg_boost,
            neural_available=self._learner.is_available,
        )

    async def destroy(self) -> None:
        """
        Tear the bridge down.

        Clears trajectories, runs the learner cleanup hook if a learner was
        loaded, and removes every listener. Later calls are no-ops.

        Operations suspended mid-way stop at their next step: they make no
        further learner or backend calls and leave stats untouched. A
        learner whose load is still in flight is cleaned up when it arrives.
        """
        if self._destroyed:
            return
        self._destroyed = True

        self._trajectories.clear()
        await self._learner.cleanup()
        self._events.remove_all_listeners()
        logger.debug("Learning bridge destroyed")
