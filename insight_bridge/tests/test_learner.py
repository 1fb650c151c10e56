"""Tests for the lazy, fail-open pattern learner adapter."""

import sys
import types
import asyncio

import pytest
from unittest.mock import AsyncMock, Mock, patch

from insight_bridge.bridge.learner import (
    LearnerState,
    PatternLearnerAdapter,
    import_learner,
)
from insight_bridge.common.config import LearningConfig


class FakeLearner:
    """Learner with synchronous methods, like an in-process model"""

    def __init__(self, mode="balanced", ewc_lambda=2000.0):
        self.mode = mode
        self.ewc_lambda = ewc_lambda
        self.steps = []

    def begin_task(self, description, mode):
        return f"traj:{description}"

    def record_step(self, trajectory_id, step):
        self.steps.append((trajectory_id, step))

    def complete_task(self, trajectory_id):
        if trajectory_id == "traj:bad":
            raise RuntimeError("cannot complete")

    def find_patterns(self, embedding, k):
        return [{"content": "p"}] * k

    def cleanup(self):
        pass


class TestLazyLoad:
    @pytest.mark.asyncio
    async def test_state_transitions_on_success(self):
        adapter = PatternLearnerAdapter(AsyncMock(return_value=FakeLearner()))
        assert adapter.state == LearnerState.UNATTEMPTED

        learner = await adapter.ensure_loaded()

        assert isinstance(learner, FakeLearner)
        assert adapter.state == LearnerState.AVAILABLE
        assert adapter.is_available
        assert adapter.was_loaded

    @pytest.mark.asyncio
    async def test_state_transitions_on_failure(self):
        adapter = PatternLearnerAdapter(AsyncMock(side_effect=ImportError("missing")))

        learner = await adapter.ensure_loaded()

        assert learner is None
        assert adapter.state == LearnerState.UNAVAILABLE
        assert not adapter.was_loaded

    @pytest.mark.asyncio
    async def test_loader_returning_none_is_unavailable(self):
        adapter = PatternLearnerAdapter(AsyncMock(return_value=None))

        assert await adapter.ensure_loaded() is None
        assert adapter.state == LearnerState.UNAVAILABLE

    @pytest.mark.asyncio
    async def test_initialize_failure_is_unavailable(self):
        learner = Mock()
        learner.initialize = AsyncMock(side_effect=RuntimeError("no weights"))
        adapter = PatternLearnerAdapter(AsyncMock(return_value=learner))

        assert await adapter.ensure_loaded() is None
        assert not adapter.is_available

    @pytest.mark.asyncio
    async def test_sync_loader_is_accepted(self):
        adapter = PatternLearnerAdapter(lambda: FakeLearner())

        assert isinstance(await adapter.ensure_loaded(), FakeLearner)

    @pytest.mark.asyncio
    async def test_concurrent_first_calls_share_one_load(self):
        calls = {"count": 0}

        async def slow_loader():
            calls["count"] += 1
            await asyncio.sleep(0.01)
            return FakeLearner()

        adapter = PatternLearnerAdapter(slow_loader)

        results = await asyncio.gather(*(adapter.ensure_loaded() for _ in range(5)))

        assert calls["count"] == 1
        assert all(r is results[0] for r in results)

    @pytest.mark.asyncio
    async def test_concurrent_failures_share_one_attempt(self):
        calls = {"count": 0}

        async def slow_failing_loader():
            calls["count"] += 1
            await asyncio.sleep(0.01)
            raise ImportError("missing")

        adapter = PatternLearnerAdapter(slow_failing_loader)

        results = await asyncio.gather(*(adapter.ensure_loaded() for _ in range(5)))
        await adapter.ensure_loaded()

        assert calls["count"] == 1
        assert results == [None] * 5


class TestGuardedCalls:
    @pytest.fixture
    def adapter(self):
        return PatternLearnerAdapter(AsyncMock(return_value=FakeLearner()))

    @pytest.mark.asyncio
    async def test_calls_before_load_are_noops(self, adapter):
        assert await adapter.begin_task("x", "general") is None
        assert await adapter.record_step("t", {}) is False
        assert await adapter.complete_task("t") is False
        assert await adapter.find_patterns([0.0], 3) == []
        await adapter.cleanup()

    @pytest.mark.asyncio
    async def test_sync_learner_methods(self, adapter):
        learner = await adapter.ensure_loaded()

        trajectory_id = await adapter.begin_task("insight", "general")
        recorded = await adapter.record_step(trajectory_id, {"action": "access", "reward": 0.03})

        assert trajectory_id == "traj:insight"
        assert recorded is True
        assert learner.steps == [("traj:insight", {"action": "access", "reward": 0.03})]

    @pytest.mark.asyncio
    async def test_complete_task_reports_failure(self, adapter):
        await adapter.ensure_loaded()

        assert await adapter.complete_task("traj:ok") is True
        assert await adapter.complete_task("traj:bad") is False

    @pytest.mark.asyncio
    async def test_find_patterns_passes_k(self, adapter):
        await adapter.ensure_loaded()

        assert len(await adapter.find_patterns([0.0], 3)) == 3

    @pytest.mark.asyncio
    async def test_find_patterns_rejects_non_list(self):
        learner = Mock()
        learner.find_patterns = AsyncMock(return_value={"content": "not a list"})
        adapter = PatternLearnerAdapter(AsyncMock(return_value=learner))
        await adapter.ensure_loaded()

        assert await adapter.find_patterns([0.0], 3) == []

    @pytest.mark.asyncio
    async def test_begin_task_none_id(self):
        learner = Mock()
        learner.begin_task = Mock(return_value=None)
        adapter = PatternLearnerAdapter(AsyncMock(return_value=learner))
        await adapter.ensure_loaded()

        assert await adapter.begin_task("x", "general") is None


class TestImportLearner:
    @pytest.mark.asyncio
    async def test_imports_configured_module(self):
        module = types.ModuleType("fake_neural_module")
        module.NeuralLearningSystem = FakeLearner
        config = LearningConfig(
            sona_mode="research",
            ewc_lambda=5000,
            learner_module="fake_neural_module",
        )

        with patch.dict(sys.modules, {"fake_neural_module": module}):
            learner = await import_learner(config)()

        assert isinstance(learner, FakeLearner)
        assert learner.mode == "research"
        assert learner.ewc_lambda == 5000

    @pytest.mark.asyncio
    async def test_missing_module_marks_unavailable(self):
        config = LearningConfig(learner_module="insight_bridge_missing_learner_module")
        adapter = PatternLearnerAdapter(import_learner(config))

        assert await adapter.ensure_loaded() is None
        assert adapter.state == LearnerState.UNAVAILABLE

    @pytest.mark.asyncio
    async def test_missing_class_marks_unavailable(self):
        module = types.ModuleType("fake_empty_module")
        config = LearningConfig(learner_module="fake_empty_module")

        with patch.dict(sys.modules, {"fake_empty_module": module}):
            adapter = PatternLearnerAdapter(import_learner(config))
            assert await adapter.ensure_loaded() is None


class TestClose:
    @pytest.mark.asyncio
    async def test_cleanup_runs_hook_once(self):
        learner = FakeLearner()
        learner.cleanup = Mock()
        adapter = PatternLearnerAdapter(AsyncMock(return_value=learner))
        await adapter.ensure_loaded()

        await adapter.cleanup()
        await adapter.cleanup()

        learner.cleanup.assert_called_once()
        assert adapter.is_closed

    @pytest.mark.asyncio
    async def test_calls_after_cleanup_are_noops(self):
        learner = FakeLearner()
        adapter = PatternLearnerAdapter(AsyncMock(return_value=learner))
        await adapter.ensure_loaded()
        await adapter.cleanup()

        assert await adapter.begin_task("x", "general") is None
        assert await adapter.record_step("traj:x", {"action": "access"}) is False
        assert await adapter.complete_task("traj:x") is False
        assert await adapter.find_patterns([0.0], 3) == []
        assert learner.steps == []

    @pytest.mark.asyncio
    async def test_learner_arriving_after_cleanup_is_cleaned_up(self):
        release = asyncio.Event()
        learner = FakeLearner()
        learner.cleanup = Mock()

        async def slow_loader():
            await release.wait()
            return learner

        adapter = PatternLearnerAdapter(slow_loader)
        pending = asyncio.ensure_future(adapter.ensure_loaded())
        await asyncio.sleep(0)

        await adapter.cleanup()
        learner.cleanup.assert_not_called()
        release.set()

        assert await pending is None
        learner.cleanup.assert_called_once()
        assert not adapter.was_loaded
        assert adapter.state == LearnerState.UNAVAILABLE
        assert await adapter.begin_task("x", "general") is None

    @pytest.mark.asyncio
    async def test_late_cleanup_failure_is_swallowed(self):
        release = asyncio.Event()
        learner = FakeLearner()
        learner.cleanup = Mock(side_effect=RuntimeError("cleanup failed"))

        async def slow_loader():
            await release.wait()
            return learner

        adapter = PatternLearnerAdapter(slow_loader)
        pending = asyncio.ensure_future(adapter.ensure_loaded())
        await asyncio.sleep(0)
        await adapter.cleanup()
        release.set()

        assert await pending is None
        learner.cleanup.assert_called_once()
