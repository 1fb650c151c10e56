"""Tests for the confidence boost/decay policy."""

import pytest

from insight_bridge.bridge.confidence import ConfidenceModel
from insight_bridge.common.config import LearningConfig


LEVELS = [0.0, 0.1, 0.25, 0.5, 0.75, 0.9, 0.97, 0.99, 1.0]


class TestBoost:
    @pytest.fixture
    def model(self):
        return ConfidenceModel()

    def test_boost_adds_default_amount(self, model):
        assert model.boost(0.5) == pytest.approx(0.53)

    def test_boost_caps_at_max(self, model):
        assert model.boost(0.99) == pytest.approx(1.0)

    def test_missing_confidence_defaults_to_half(self, model):
        assert model.boost(None) == pytest.approx(0.53)

    @pytest.mark.parametrize("current", LEVELS)
    def test_boost_is_bounded_and_non_decreasing(self, model, current):
        boosted = model.boost(current)

        assert boosted <= model.max_confidence
        assert boosted >= min(current, model.max_confidence)

    def test_boost_raises_values_below_min(self, model):
        assert model.boost(0.0) == pytest.approx(0.1)

    def test_custom_amount_and_bounds(self):
        model = ConfidenceModel(LearningConfig(access_boost_amount=0.05, max_confidence=0.9))

        assert model.boost(0.5) == pytest.approx(0.55)
        assert model.boost(0.88) == pytest.approx(0.9)


class TestDecay:
    @pytest.fixture
    def model(self):
        return ConfidenceModel()

    def test_decay_two_hours(self, model):
        assert model.decay(0.9, 2) == pytest.approx(0.89)

    def test_decay_floors_at_min(self, model):
        assert model.decay(0.5, 200) == pytest.approx(0.1)

    @pytest.mark.parametrize("current", LEVELS)
    @pytest.mark.parametrize("hours", [0, 0.5, 1, 24, 10_000])
    def test_decay_never_below_min(self, model, current, hours):
        assert model.decay(current, hours) >= model.min_confidence

    def test_negative_elapsed_does_not_boost(self, model):
        assert model.decay(0.6, -5) == pytest.approx(0.6)

    @pytest.mark.parametrize("hours, expected", [(0.0, False), (0.5, False), (0.999, False), (1.0, True), (48, True)])
    def test_should_decay_after_one_hour(self, hours, expected):
        assert ConfidenceModel.should_decay(hours) is expected

    def test_hours_since(self):
        assert ConfidenceModel.hours_since(1000.0, 1000.0 + 7200) == pytest.approx(2.0)
