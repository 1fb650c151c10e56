"""
Configuration Management for Insight Bridge

Loads configuration from ~/.insight-bridge/config.json and environment variables.
"""

import os
import json
import logging
from pathlib import Path
from dataclasses import dataclass, field

logger = logging.getLogger("insight_bridge.common.config")

# Default config paths
CONFIG_DIR = Path.home() / ".insight-bridge"
CONFIG_PATH = CONFIG_DIR / "config.json"
LOGS_DIR = CONFIG_DIR / "logs"


@dataclass
class LearningConfig:
    """Confidence policy and pattern learner configuration"""
    enabled: bool = True
    sona_mode: str = "balanced"
    confidence_decay_rate: float = 0.005  # per hour
    access_boost_amount: float = 0.03
    max_confidence: float = 1.0
    min_confidence: float = 0.1
    ewc_lambda: float = 2000.0
    consolidation_threshold: int = 10
    pattern_top_k: int = 5
    learner_module: str = "neural_learning"
    learner_class: str = "NeuralLearningSystem"

    def validate(self) -> None:
        """Raise ValueError if the numeric policy is inconsistent"""
        for name in ("min_confidence", "max_confidence"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value}")
        if self.min_confidence > self.max_confidence:
            raise ValueError(
                f"min_confidence ({self.min_confidence}) exceeds "
                f"max_confidence ({self.max_confidence})"
            )
        if self.confidence_decay_rate < 0:
            raise ValueError("confidence_decay_rate must be non-negative")
        if self.access_boost_amount < 0:
            raise ValueError("access_boost_amount must be non-negative")
        if self.consolidation_threshold < 1:
            raise ValueError("consolidation_threshold must be at least 1")
        if self.pattern_top_k < 1:
            raise ValueError("pattern_top_k must be at least 1")


@dataclass
class BridgeConfig:
    """Main Insight Bridge configuration"""
    learning: LearningConfig = field(default_factory=LearningConfig)
    namespace: str = "learnings"  # namespace swept by decay


def _parse_learning_config(data: dict) -> LearningConfig:
    """Parse learning section from config dict"""
    learning_data = data.get("learning", {})
    defaults = LearningConfig()
    return LearningConfig(
        enabled=learning_data.get("enabled", defaults.enabled),
        sona_mode=learning_data.get("sona_mode", defaults.sona_mode),
        confidence_decay_rate=learning_data.get("confidence_decay_rate", defaults.confidence_decay_rate),
        access_boost_amount=learning_data.get("access_boost_amount", defaults.access_boost_amount),
        max_confidence=learning_data.get("max_confidence", defaults.max_confidence),
        min_confidence=learning_data.get("min_confidence", defaults.min_confidence),
        ewc_lambda=learning_data.get("ewc_lambda", defaults.ewc_lambda),
        consolidation_threshold=learning_data.get("consolidation_threshold", defaults.consolidation_threshold),
        pattern_top_k=learning_data.get("pattern_top_k", defaults.pattern_top_k),
        learner_module=learning_data.get("learner_module", defaults.learner_module),
        learner_class=learning_data.get("learner_class", defaults.learner_class),
    )


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_config() -> BridgeConfig:
    """
    Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables
    2. Config file (~/.insight-bridge/config.json)
    3. Default values
    """
    config = BridgeConfig()

    # Load from config file if exists
    if CONFIG_PATH.exists():
        try:
            with open(CONFIG_PATH) as f:
                data = json.load(f)

            config.learning = _parse_learning_config(data)
            config.namespace = data.get("namespace", "learnings")
        except (json.JSONDecodeError, IOError) as e:
            logger.warning("Failed to load config file: %s", e)

    # Environment variable overrides
    if os.getenv("INSIGHT_BRIDGE_ENABLED"):
        config.learning.enabled = _parse_bool(os.getenv("INSIGHT_BRIDGE_ENABLED"))
    if os.getenv("INSIGHT_BRIDGE_SONA_MODE"):
        config.learning.sona_mode = os.getenv("INSIGHT_BRIDGE_SONA_MODE")
    if os.getenv("INSIGHT_BRIDGE_DECAY_RATE"):
        config.learning.confidence_decay_rate = float(os.getenv("INSIGHT_BRIDGE_DECAY_RATE"))
    if os.getenv("INSIGHT_BRIDGE_BOOST"):
        config.learning.access_boost_amount = float(os.getenv("INSIGHT_BRIDGE_BOOST"))
    if os.getenv("INSIGHT_BRIDGE_CONSOLIDATION_THRESHOLD"):
        config.learning.consolidation_threshold = int(os.getenv("INSIGHT_BRIDGE_CONSOLIDATION_THRESHOLD"))
    if os.getenv("INSIGHT_BRIDGE_LEARNER_MODULE"):
        config.learning.learner_module = os.getenv("INSIGHT_BRIDGE_LEARNER_MODULE")

    if os.getenv("INSIGHT_BRIDGE_NAMESPACE"):
        config.namespace = os.getenv("INSIGHT_BRIDGE_NAMESPACE")

    return config


def save_config(config: BridgeConfig) -> None:
    """Save configuration to file."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)

    learning = config.learning
    data = {
        "learning": {
            "enabled": learning.enabled,
            "sona_mode": learning.sona_mode,
            "confidence_decay_rate": learning.confidence_decay_rate,
            "access_boost_amount": learning.access_boost_amount,
            "max_confidence": learning.max_confidence,
            "min_confidence": learning.min_confidence,
            "ewc_lambda": learning.ewc_lambda,
            "consolidation_threshold": learning.consolidation_threshold,
            "pattern_top_k": learning.pattern_top_k,
            "learner_module": learning.learner_module,
            "learner_class": learning.learner_class,
        },
        "namespace": config.namespace,
    }

    with open(CONFIG_PATH, "w") as f:
        json.dump(data, f, indent=2)

    # Set secure permissions
    CONFIG_PATH.chmod(0o600)


def ensure_directories() -> None:
    """Ensure required directories exist"""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    LOGS_DIR.mkdir(parents=True, exist_ok=True)
