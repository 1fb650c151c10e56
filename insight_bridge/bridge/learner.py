"""
Pattern Learner Adapter

Wraps the optional trajectory-based pattern learner.

The learner is loaded lazily, at most once per adapter. A failed load is
cached as permanently unavailable and never retried. Every call into the
learner is guarded: failures are logged and turned into empty results,
so the bridge keeps working backend-only.

Learner contract (duck-typed, sync or async methods):
- begin_task(description, mode) -> trajectory_id
- record_step(trajectory_id, step)
- complete_task(trajectory_id)
- find_patterns(embedding, k) -> list
- cleanup()
- initialize()  (optional, called once after load)
"""

import asyncio
import inspect
import logging
import importlib
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..common.config import LearningConfig

logger = logging.getLogger("insight_bridge.bridge.learner")

NeuralLoader = Callable[[], Awaitable[Any]]


class LearnerState(str, Enum):
    """Outcome of the lazy load"""
    UNATTEMPTED = "unattempted"
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


async def maybe_await(value: Any) -> Any:
    """Await value if the learner returned an awaitable"""
    if inspect.isawaitable(value):
        return await value
    return value


def import_learner(config: LearningConfig) -> NeuralLoader:
    """
    Build the default loader.

    Imports config.learner_module and instantiates config.learner_class
    with the configured mode and EWC lambda. Any failure (module missing,
    class missing, constructor error) surfaces when the loader is awaited.
    """
    async def load() -> Any:
        module = importlib.import_module(config.learner_module)
        learner_cls = getattr(module, config.learner_class)
        return learner_cls(mode=config.sona_mode, ewc_lambda=config.ewc_lambda)

    return load


class PatternLearnerAdapter:
    """
    Lazy, memoized handle on the pattern learner.

    Concurrent first callers share one load task and one cached outcome.
    """

    def __init__(self, loader: NeuralLoader):
        """
        Initialize adapter.

        Args:
            loader: Zero-argument callable returning (an awaitable of) the learner
        """
        self._loader = loader
        self._learner: Optional[Any] = None
        self._load_task: Optional[asyncio.Future] = None
        self._closed = False
        self.state = LearnerState.UNATTEMPTED

    @property
    def is_available(self) -> bool:
        """True once a load attempt has succeeded"""
        return self.state == LearnerState.AVAILABLE

    @property
    def was_loaded(self) -> bool:
        """True if a learner instance exists (cleanup is owed)"""
        return self._learner is not None

    @property
    def is_closed(self) -> bool:
        """True once cleanup() has been called; every call is a no-op after"""
        return self._closed

    @property
    def _usable(self) -> bool:
        return self._learner is not None and not self._closed

    async def ensure_loaded(self) -> Optional[Any]:
        """
        Load the learner on first call; return the cached outcome after.

        Returns:
            The learner, or None if it is unavailable
        """
        if self._load_task is None:
            self._load_task = asyncio.ensure_future(self._load())
        return await asyncio.shield(self._load_task)

    async def _load(self) -> Optional[Any]:
        try:
            learner = await maybe_await(self._loader())
            if learner is None:
                raise RuntimeError("loader returned no learner")
            initialize = getattr(learner, "initialize", None)
            if callable(initialize):
                await maybe_await(initialize())
        except Exception as e:
            logger.info("Pattern learner unavailable, continuing backend-only: %s", e)
            self.state = LearnerState.UNAVAILABLE
            return None

        if self._closed:
            # cleanup() already ran while this load was in flight
            logger.debug("Pattern learner arrived after close, cleaning up")
            await self._cleanup_instance(learner)
            self.state = LearnerState.UNAVAILABLE
            return None

        self._learner = learner
        self.state = LearnerState.AVAILABLE
        logger.info("Pattern learner loaded (%s)", type(learner).__name__)
        return learner

    async def begin_task(self, description: str, mode: str) -> Optional[str]:
        """Open an episode, returning its trajectory id or None on failure"""
        if not self._usable:
            return None
        try:
            trajectory_id = await maybe_await(self._learner.begin_task(description, mode))
        except Exception as e:
            logger.warning("begin_task failed: %s", e)
            return None
        if trajectory_id is None:
            return None
        return str(trajectory_id)

    async def record_step(self, trajectory_id: str, step: Dict[str, Any]) -> bool:
        """Record a reinforcement step; failures are swallowed"""
        if not self._usable:
            return False
        try:
            await maybe_await(self._learner.record_step(trajectory_id, step))
        except Exception as e:
            logger.warning("record_step failed for %s: %s", trajectory_id, e)
            return False
        return True

    async def complete_task(self, trajectory_id: str) -> bool:
        """Close an episode, returning whether the learner accepted it"""
        if not self._usable:
            return False
        try:
            await maybe_await(self._learner.complete_task(trajectory_id))
        except Exception as e:
            logger.warning("complete_task failed for %s: %s", trajectory_id, e)
            return False
        return True

    async def find_patterns(self, embedding: Any, k: int) -> List[Any]:
        """Search learned patterns; non-list results and failures yield []"""
        if not self._usable:
            return []
        try:
            results = await maybe_await(self._learner.find_patterns(embedding, k))
        except Exception as e:
            logger.warning("find_patterns failed: %s", e)
            return []
        if not isinstance(results, (list, tuple)):
            return []
        return list(results)

    async def cleanup(self) -> None:
        """
        Close the adapter and run the learner's cleanup hook if it was loaded.

        A load still in flight is not awaited; the learner it produces is
        cleaned up as soon as it arrives.
        """
        if self._closed:
            return
        self._closed = True
        if self._learner is None:
            return
        await self._cleanup_instance(self._learner)

    async def _cleanup_instance(self, learner: Any) -> None:
        try:
            await maybe_await(learner.cleanup())
        except Exception as e:
            logger.warning("Pattern learner cleanup failed: %s", e)
